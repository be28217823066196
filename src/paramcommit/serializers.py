"""Reference parameter serializers.

The engine never chooses an encoding: a commitment is only reproducible
with the exact serializer used when it was created. These helpers cover
common parameter types for callers that have no encoding of their own.
"""

from __future__ import annotations

import json
from typing import Any


def int_to_bytes(value: int) -> bytes:
    """Minimal-length big-endian two's complement. Zero encodes as one byte."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    length = max(1, (value + (value < 0)).bit_length() // 8 + 1)
    return value.to_bytes(length, "big", signed=True)


def utf8(value: str) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return value.encode("utf-8")


def raw_bytes(value: bytes) -> bytes:
    """Identity serializer for parameters that already are bytes."""
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"expected bytes, got {type(value).__name__}")
    return bytes(value)


def canonical_json(value: Any) -> bytes:
    """Canonical JSON: sorted keys, compact separators, UTF-8."""
    text = json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return text.encode("utf-8")


def hex_text(value: str) -> bytes:
    """Serialized bytes carried as a hex string, as in JSON inputs."""
    if not isinstance(value, str):
        raise TypeError(f"expected hex str, got {type(value).__name__}")
    return bytes.fromhex(value)
