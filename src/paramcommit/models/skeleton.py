"""Template skeleton model.

A skeleton is the constant byte scaffolding around the parameter digest(s)
inside an instantiated artifact. It is recorded once, out of band, by
instantiating the artifact with placeholder parameters, and is never
mutated afterwards.

Layout:
    arity 1:  prefix ‖ digest ‖ postfix
    arity k:  prefix ‖ (field_header ‖ digestᵢ ‖ field_terminator) * k ‖ postfix
"""

from __future__ import annotations

from dataclasses import dataclass

from paramcommit.crypto.digest import DEFAULT_VERSION_TAG, identity_hash


@dataclass(frozen=True)
class TemplateSkeleton:
    """Constant bytes surrounding parameter digests in an artifact."""
    prefix: bytes
    postfix: bytes
    field_header: bytes = b""
    field_terminator: bytes = b""
    arity: int = 1
    version_tag: int = DEFAULT_VERSION_TAG

    def __post_init__(self) -> None:
        if self.arity < 1:
            raise ValueError(f"arity must be at least 1, got {self.arity}")
        if self.arity == 1 and (self.field_header or self.field_terminator):
            raise ValueError("single-parameter skeletons carry no field header/terminator")

    def compose(self, *param_bytes: bytes) -> bytes:
        """Reconstruct the instantiated artifact bytes for these parameters."""
        from paramcommit.crypto.template_composer import compose1, compose_n

        if len(param_bytes) != self.arity:
            raise ValueError(
                f"skeleton expects {self.arity} parameter(s), got {len(param_bytes)}"
            )
        if self.arity == 1:
            return compose1(self.prefix, param_bytes[0], self.postfix)
        return compose_n(
            self.prefix,
            list(param_bytes),
            self.postfix,
            field_header=self.field_header,
            field_terminator=self.field_terminator,
        )

    def identity(self, *param_bytes: bytes) -> bytes:
        """Identity hash of the artifact instantiated with these parameters."""
        return identity_hash(self.compose(*param_bytes), self.version_tag)

    def to_hex_fields(self) -> dict[str, object]:
        """Hex rendering used by configuration files and the CLI."""
        return {
            "prefix": self.prefix.hex(),
            "postfix": self.postfix.hex(),
            "field_header": self.field_header.hex(),
            "field_terminator": self.field_terminator.hex(),
            "arity": self.arity,
            "version_tag": self.version_tag,
        }
