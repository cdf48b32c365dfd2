from __future__ import annotations

from typing import Optional

from .base import SignResult

__all__ = ["NoopSigner"]


class NoopSigner:
    """
    Placeholder signer installed until the caller configures a real one.

    It holds no key: every accessor returns an empty string and ``sign``
    passes the bytes through unsigned.
    """

    async def public_key_hash(self) -> str:
        return ""

    async def public_key(self) -> str:
        return ""

    async def secret_key(self) -> Optional[str]:
        return ""

    async def sign(self, op_bytes: str, watermark: Optional[bytes] = None) -> SignResult:
        return SignResult(bytes=op_bytes, sig="", prefix_sig="", sbytes=op_bytes)
