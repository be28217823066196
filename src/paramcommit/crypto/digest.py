"""Digest commitment primitive.

A commitment is the BLAKE2b-256 digest of a parameter's serialized bytes.
An instantiated artifact's identity is the BLAKE2b-224 digest of its
version tag followed by its serialized bytes.

Both functions are pure: no state, no caching, no side effects.
"""

from __future__ import annotations

import hashlib
import hmac

DIGEST_SIZE = 32
IDENTITY_SIZE = 28
DEFAULT_VERSION_TAG = 0x03

DIGEST_PREFIX = "blake2b:"


def commit(data: bytes) -> bytes:
    """Return the commitment digest of *data*."""
    return hashlib.blake2b(_as_bytes(data), digest_size=DIGEST_SIZE).digest()


def verify(data: bytes, commitment: bytes) -> bool:
    """True iff ``commit(data) == commitment``.

    A mismatch is an ordinary False, never an exception.
    """
    return hmac.compare_digest(commit(data), _as_bytes(commitment))


def identity_hash(composed: bytes, version_tag: int = DEFAULT_VERSION_TAG) -> bytes:
    """Return the identity hash of an instantiated artifact's bytes.

    The identity covers the version tag byte followed by the composed
    artifact bytes, matching how the host derives an artifact's identity.
    """
    if not 0 <= version_tag <= 0xFF:
        raise ValueError(f"version_tag must fit in one byte, got {version_tag}")
    payload = bytes([version_tag]) + _as_bytes(composed)
    return hashlib.blake2b(payload, digest_size=IDENTITY_SIZE).digest()


def digest_hex(digest: bytes) -> str:
    """Render a digest as lowercase hex."""
    return _as_bytes(digest).hex()


def parse_digest(text: str, size: int = DIGEST_SIZE) -> bytes:
    """Parse a hex digest, optionally carrying the ``blake2b:`` prefix.

    Raises ValueError on non-string or non-hex input or a wrong width.
    """
    if not isinstance(text, str):
        raise ValueError(f"digest must be a hex string, got {type(text).__name__}")
    clean = text.strip().removeprefix(DIGEST_PREFIX)
    try:
        raw = bytes.fromhex(clean)
    except ValueError as exc:
        raise ValueError(f"digest is not valid hex: {text[:40]!r}") from exc
    if len(raw) != size:
        raise ValueError(f"digest must be {size} bytes, got {len(raw)}")
    return raw


def _as_bytes(data: bytes) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected bytes, got {type(data).__name__}")
