"""Core data models for paramcommit."""

from paramcommit.models.commitment import ParameterCommitment, ParameterSerializer
from paramcommit.models.skeleton import TemplateSkeleton
from paramcommit.models.structured_input import (
    StructuredInput,
    WithResult,
    WithoutResult,
    decode_structured_input,
)

__all__ = [
    "ParameterCommitment",
    "ParameterSerializer",
    "TemplateSkeleton",
    "StructuredInput",
    "WithResult",
    "WithoutResult",
    "decode_structured_input",
]
