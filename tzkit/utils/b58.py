"""
Base58Check codec with the Tezos prefix table.

A tiny self-contained implementation so signers and hash helpers do not need
an external base58 package.

Typical usage
-------------
>>> raw = bytes(20)
>>> addr = b58cencode(raw, Prefix.TZ1)
>>> addr.startswith("tz1")
True
>>> b58cdecode(addr, Prefix.TZ1) == raw
True

Helpers
-------
- b58encode(data) / b58decode(text): plain base58 (bitcoin alphabet)
- b58cencode(payload, prefix): prefix + payload + 4-byte double-sha256 checksum
- b58cdecode(text, prefix): inverse, validates checksum and prefix
- encode_operation_hash(signed_bytes_hex): ``o...`` hash of a signed operation
"""

from __future__ import annotations

import hashlib
from enum import Enum

from ..errors import Base58Error

__all__ = [
    "ALPHABET",
    "Prefix",
    "b58encode",
    "b58decode",
    "b58cencode",
    "b58cdecode",
    "encode_operation_hash",
]

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_REV = {c: i for i, c in enumerate(ALPHABET)}


class Prefix(bytes, Enum):
    TZ1 = bytes([6, 161, 159])
    KT1 = bytes([2, 90, 121])
    EDPK = bytes([13, 15, 37, 217])
    EDSK = bytes([43, 246, 78, 7])  # 64-byte secret key (seed + public key)
    EDSK_SEED = bytes([13, 15, 58, 7])  # 32-byte seed
    EDESK = bytes([7, 90, 60, 179, 41])
    EDSIG = bytes([9, 245, 205, 134, 18])
    SIG = bytes([4, 130, 43])
    BLOCK = bytes([1, 52])
    OPERATION = bytes([5, 116])
    CHAIN_ID = bytes([87, 82, 0])


def _checksum(payload: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:4]


def b58encode(data: bytes) -> str:
    n = int.from_bytes(data, "big")
    out = []
    while n > 0:
        n, rem = divmod(n, 58)
        out.append(ALPHABET[rem])
    # Leading zero bytes map to leading '1's.
    pad = len(data) - len(data.lstrip(b"\x00"))
    return "1" * pad + "".join(reversed(out))


def b58decode(text: str) -> bytes:
    n = 0
    for ch in text:
        try:
            n = n * 58 + _ALPHABET_REV[ch]
        except KeyError:
            raise Base58Error(f"invalid base58 character {ch!r}") from None
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    pad = len(text) - len(text.lstrip("1"))
    return b"\x00" * pad + body


def b58cencode(payload: bytes, prefix: bytes = b"") -> str:
    data = bytes(prefix) + bytes(payload)
    return b58encode(data + _checksum(data))


def b58cdecode(text: str, prefix: bytes = b"") -> bytes:
    raw = b58decode(text)
    if len(raw) < 4:
        raise Base58Error("base58check string too short")
    data, check = raw[:-4], raw[-4:]
    if _checksum(data) != check:
        raise Base58Error("base58check checksum mismatch")
    prefix = bytes(prefix)
    if not data.startswith(prefix):
        raise Base58Error(f"unexpected prefix for {text[:5]}...")
    return data[len(prefix):]


def encode_operation_hash(signed_bytes_hex: str) -> str:
    digest = hashlib.blake2b(bytes.fromhex(signed_bytes_hex), digest_size=32).digest()
    return b58cencode(digest, Prefix.OPERATION)
