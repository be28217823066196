"""Verification engine: commitment-verifying wrappers."""

from paramcommit.engine.wrapper import (
    ABSENT,
    CommitmentWrapper,
    PreHashedWrapper,
    authenticate,
    wrap_pre_hashed,
    wrap_with_result,
    wrap_without_result,
)

__all__ = [
    "ABSENT",
    "CommitmentWrapper",
    "PreHashedWrapper",
    "authenticate",
    "wrap_with_result",
    "wrap_without_result",
    "wrap_pre_hashed",
]
