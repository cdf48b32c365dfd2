"""
In-memory Ed25519 signer.

Keys are accepted in their base58check forms:

- ``edsk`` + 54 chars : 32-byte seed
- ``edsk`` + 94 chars : 64-byte secret key (seed followed by public key)

Encrypted keys (``edesk``) are rejected with :class:`SignerError`.

Signing follows the node's convention: the signed message is the BLAKE2b-256
digest of ``watermark || bytes``.
"""

from __future__ import annotations

import hashlib
import logging
import unicodedata
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ..errors import Base58Error, SignerError
from ..utils.b58 import Prefix, b58cdecode, b58cencode
from .base import SignResult

log = logging.getLogger(__name__)

__all__ = ["InMemorySigner", "fundraiser_seed"]


def _normalize(s: str) -> str:
    return unicodedata.normalize("NFKD", s.strip())


def fundraiser_seed(email: str, password: str, mnemonic: str) -> bytes:
    """
    32-byte Ed25519 seed of a fundraiser account: the first half of the
    BIP-39 seed of ``mnemonic`` with passphrase ``email + password``.
    """
    salt = ("mnemonic" + _normalize(email + password)).encode("utf-8")
    seed = hashlib.pbkdf2_hmac("sha512", _normalize(mnemonic).encode("utf-8"), salt, 2048, dklen=64)
    return seed[:32]


class InMemorySigner:
    def __init__(self, seed: bytes) -> None:
        if len(seed) != 32:
            raise SignerError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
        self._seed = bytes(seed)
        self._sk = Ed25519PrivateKey.from_private_bytes(self._seed)
        self._pk = self._sk.public_key().public_bytes(
            encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw
        )

    # --- constructors ----------------------------------------------------

    @classmethod
    def from_secret_key(cls, key: str) -> "InMemorySigner":
        key = key.strip()
        if key.startswith("edesk"):
            raise SignerError("encrypted secret keys (edesk) are not supported")
        if not key.startswith("edsk"):
            raise SignerError(f"unsupported key type {key[:4]!r}; only Ed25519 (edsk) keys are supported")
        try:
            if len(key) == 54:
                seed = b58cdecode(key, Prefix.EDSK_SEED)
            else:
                seed = b58cdecode(key, Prefix.EDSK)[:32]
        except Base58Error as exc:
            raise SignerError(f"invalid secret key: {exc}") from exc
        return cls(seed)

    @classmethod
    def from_fundraiser(cls, email: str, password: str, mnemonic: str) -> "InMemorySigner":
        return cls(fundraiser_seed(email, password, mnemonic))

    # --- Signer ----------------------------------------------------------

    async def public_key_hash(self) -> str:
        return b58cencode(hashlib.blake2b(self._pk, digest_size=20).digest(), Prefix.TZ1)

    async def public_key(self) -> str:
        return b58cencode(self._pk, Prefix.EDPK)

    async def secret_key(self) -> Optional[str]:
        return b58cencode(self._seed + self._pk, Prefix.EDSK)

    async def sign(self, op_bytes: str, watermark: Optional[bytes] = None) -> SignResult:
        message = (watermark or b"") + bytes.fromhex(op_bytes)
        digest = hashlib.blake2b(message, digest_size=32).digest()
        signature = self._sk.sign(digest)
        log.debug("signed %d bytes", len(message))
        return SignResult(
            bytes=op_bytes,
            sig=b58cencode(signature, Prefix.SIG),
            prefix_sig=b58cencode(signature, Prefix.EDSIG),
            sbytes=op_bytes + signature.hex(),
        )
