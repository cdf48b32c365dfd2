"""
Version helpers for tzkit.

A static ``__version__`` (PEP 440) plus the user agent string the RPC client
sends with every request.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"

USER_AGENT = f"tzkit-python/{__version__}"

__all__ = ["__version__", "USER_AGENT"]
