"""Parameter commitment model.

A commitment binds an endpoint to exactly one parameter value without
revealing it: it is the digest of the parameter's serialized bytes, fixed
when the endpoint is built. At call time the revealed value is
re-serialized with the same serializer and re-hashed.

A commitment is valid for a parameter iff
``commit(serializer(parameter)) == commitment``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from paramcommit.crypto.digest import DIGEST_SIZE, commit, digest_hex, verify


@runtime_checkable
class ParameterSerializer(Protocol):
    """Canonical encoding of a parameter type.

    Must be deterministic and identical to the encoding used when the
    commitment was created. A serializer that drifts makes every
    verification fail, indistinguishably from a forged parameter.
    """

    def __call__(self, parameter: Any) -> bytes:
        ...


@dataclass(frozen=True)
class ParameterCommitment:
    """A stored commitment together with the serializer for its parameter.

    Immutable for the lifetime of the deployed endpoint.
    """
    commitment: bytes
    serializer: ParameterSerializer = field(compare=False)
    label: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.commitment, bytes):
            raise TypeError(
                f"commitment must be bytes, got {type(self.commitment).__name__}"
            )
        if len(self.commitment) != DIGEST_SIZE:
            raise ValueError(
                f"commitment must be {DIGEST_SIZE} bytes, got {len(self.commitment)}"
            )
        if not callable(self.serializer):
            raise TypeError("serializer must be callable")

    @classmethod
    def of(
        cls,
        parameter: Any,
        serializer: ParameterSerializer,
        label: str = "",
    ) -> ParameterCommitment:
        """Build the commitment for a known parameter value (build time)."""
        return cls(commitment=commit(_serialize(serializer, parameter)),
                   serializer=serializer, label=label)

    def matches(self, parameter: Any) -> bool:
        """True iff *parameter* is the value this commitment was made for."""
        return verify(_serialize(self.serializer, parameter), self.commitment)

    @property
    def hex(self) -> str:
        return digest_hex(self.commitment)


def _serialize(serializer: ParameterSerializer, parameter: Any) -> bytes:
    data = serializer(parameter)
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(
            f"serializer returned {type(data).__name__}, expected bytes"
        )
    return bytes(data)
