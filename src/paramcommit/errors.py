"""Verification failures raised by the commitment-verifying wrappers.

Both failures are terminal for the call that raised them. Business logic
is never reached once either has been raised.
"""

from __future__ import annotations


class ParameterVerificationError(Exception):
    """Base class for parameter verification failures."""


class CommitmentMismatch(ParameterVerificationError):
    """One or more revealed parameters do not hash to their commitment."""

    def __init__(self, mismatched: tuple[int, ...]) -> None:
        self.mismatched = mismatched
        super().__init__(
            f"Parameter commitment mismatch at position(s) {list(mismatched)}"
        )


class MalformedStructuredInput(ParameterVerificationError):
    """The structured input does not have the expected shape."""
