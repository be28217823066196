"""Template composer: reconstructs an instantiated artifact's bytes.

An artifact instantiated with parameters differs from its unparameterized
form only where each parameter's digest is spliced in. Given the constant
bytes around those splice points (the skeleton) and the serialized
parameters, the composer reproduces the instantiated bytes exactly, so a
different component can predict the artifact's identity without ever
seeing its logic.

The composer never serializes. Callers pass the same serialized bytes
that were used when the artifact was built.
"""

from __future__ import annotations

from typing import Sequence

from paramcommit.crypto.digest import DEFAULT_VERSION_TAG, DIGEST_SIZE, commit
from paramcommit.models.skeleton import TemplateSkeleton


def compose1(prefix: bytes, param_bytes: bytes, postfix: bytes) -> bytes:
    """Return ``prefix ‖ commit(param_bytes) ‖ postfix``."""
    return bytes(prefix) + commit(param_bytes) + bytes(postfix)


def compose_n(
    prefix: bytes,
    params: Sequence[bytes],
    postfix: bytes,
    *,
    field_header: bytes,
    field_terminator: bytes,
) -> bytes:
    """Return ``prefix ‖ Σ(field_header ‖ commit(pᵢ) ‖ field_terminator) ‖ postfix``.

    Fields are spliced strictly in the order given; the order must match
    the declaration order the instantiation process used.
    """
    if len(params) < 2:
        raise ValueError(
            f"compose_n needs at least 2 parameters, got {len(params)}; use compose1"
        )
    out = bytearray(prefix)
    for param in params:
        out += field_header
        out += commit(param)
        out += field_terminator
    out += postfix
    return bytes(out)


def extract_skeleton(
    instantiated: bytes,
    placeholders: Sequence[bytes],
    *,
    header_length: int = 0,
    version_tag: int = DEFAULT_VERSION_TAG,
) -> TemplateSkeleton:
    """Recover a skeleton from one genuine instantiation.

    *instantiated* must be the artifact bytes produced by instantiating with
    *placeholders* (serialized parameter bytes, in declaration order).
    For several parameters, the bytes between consecutive digests are
    ``field_terminator ‖ field_header``; *header_length* says how many of
    the bytes just before the first digest belong to the header.

    Raises ValueError when a digest cannot be found or the layout is not
    consistent with the repeated field structure.
    """
    if not placeholders:
        raise ValueError("at least one placeholder is required")
    if header_length < 0:
        raise ValueError(f"header_length must be non-negative, got {header_length}")

    data = bytes(instantiated)
    offsets: list[int] = []
    search_from = 0
    for idx, placeholder in enumerate(placeholders):
        digest = commit(placeholder)
        pos = data.find(digest, search_from)
        if pos < 0:
            raise ValueError(f"digest of placeholder[{idx}] not found in instance")
        if data.count(digest) != 1:
            raise ValueError(f"digest of placeholder[{idx}] occurs more than once")
        offsets.append(pos)
        search_from = pos + DIGEST_SIZE

    if len(placeholders) == 1:
        if header_length:
            raise ValueError("single-parameter skeletons take no header")
        pos = offsets[0]
        return TemplateSkeleton(
            prefix=data[:pos],
            postfix=data[pos + DIGEST_SIZE:],
            version_tag=version_tag,
        )

    lead = data[:offsets[0]]
    if header_length > len(lead):
        raise ValueError("header_length exceeds the bytes before the first digest")
    split = len(lead) - header_length
    prefix, header = lead[:split], lead[split:]

    gaps = [
        data[offsets[i] + DIGEST_SIZE:offsets[i + 1]]
        for i in range(len(offsets) - 1)
    ]
    gap = gaps[0]
    if any(g != gap for g in gaps):
        raise ValueError("field separators differ between parameters")
    if not gap.endswith(header):
        raise ValueError("field separator does not end with the field header")
    terminator = gap[:len(gap) - len(header)]

    tail = data[offsets[-1] + DIGEST_SIZE:]
    if not tail.startswith(terminator):
        raise ValueError("last field is not followed by the field terminator")

    return TemplateSkeleton(
        prefix=prefix,
        postfix=tail[len(terminator):],
        field_header=header,
        field_terminator=terminator,
        arity=len(placeholders),
        version_tag=version_tag,
    )
