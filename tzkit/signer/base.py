"""
Signer protocol and the result shape every signer returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

__all__ = ["Signer", "SignResult"]


@dataclass(frozen=True, slots=True)
class SignResult:
    """
    bytes      : the hex bytes that were signed (without watermark)
    sig        : generic ``sig...`` encoding of the signature
    prefix_sig : curve-specific encoding (``edsig...``), attached to the group
    sbytes     : ``bytes`` followed by the raw signature hex, ready to inject
    """

    bytes: str
    sig: str
    prefix_sig: str
    sbytes: str


@runtime_checkable
class Signer(Protocol):
    async def public_key_hash(self) -> str: ...

    async def public_key(self) -> str: ...

    async def secret_key(self) -> Optional[str]: ...

    async def sign(self, op_bytes: str, watermark: Optional[bytes] = None) -> SignResult: ...
