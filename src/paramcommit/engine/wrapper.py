"""Commitment-verifying wrappers.

An endpoint is built with one commitment per parameter. At call time it
receives the revealed parameter values in a structured input. The wrapper
re-hashes every revealed value with its serializer, requires all of them to
match their commitments, and only then calls the endpoint's business logic
with the authenticated values.

Guarantees:
- Business logic is never invoked with an unauthenticated parameter.
- For several parameters, every comparison is evaluated and the verdict is
  their conjunction; which position failed does not change the outcome.
- The business logic's return value is passed back untouched.
- No state survives a call.

Call shapes (k = number of parameters):
    with_result:     logic(p1..pk, [datum], result, *context)
    without_result:  logic(p1..pk, [datum], variable_arg, *context)
    pre-hashed:      logic(d1..dk, [datum], [result], *context)
"""

from __future__ import annotations

import hmac
from typing import Any, Protocol, Sequence

from paramcommit.errors import CommitmentMismatch, MalformedStructuredInput
from paramcommit.models.commitment import ParameterCommitment
from paramcommit.models.structured_input import WithResult, WithoutResult


class _Absent:
    """Marker for an omitted datum."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class BusinessLogic(Protocol):
    """Endpoint logic invoked only after successful authentication."""

    def __call__(self, *args: Any) -> Any:
        ...


# ---------------------------------------------------------------------------
# Verification core
# ---------------------------------------------------------------------------

def mismatched_positions(
    commitments: Sequence[ParameterCommitment],
    parameters: Sequence[Any],
) -> tuple[int, ...]:
    """Positions whose parameter does not match its commitment.

    Every position is evaluated. A parameter its serializer rejects is
    malformed input, not a mismatch.
    """
    if len(commitments) != len(parameters):
        raise MalformedStructuredInput(
            f"expected {len(commitments)} parameter(s), got {len(parameters)}"
        )
    verdicts = []
    for idx, (c, p) in enumerate(zip(commitments, parameters)):
        try:
            verdicts.append(c.matches(p))
        except (TypeError, ValueError) as exc:
            raise MalformedStructuredInput(
                f"parameter[{idx}] cannot be serialized: {exc}"
            ) from exc
    return tuple(i for i, ok in enumerate(verdicts) if not ok)


def authenticate(
    commitments: Sequence[ParameterCommitment],
    parameters: Sequence[Any],
) -> bool:
    """True iff every parameter matches its commitment."""
    return not mismatched_positions(commitments, parameters)


def require_authentic(
    commitments: Sequence[ParameterCommitment],
    parameters: Sequence[Any],
) -> None:
    """Raise CommitmentMismatch unless every parameter matches."""
    failed = mismatched_positions(commitments, parameters)
    if failed:
        raise CommitmentMismatch(failed)


def _thread(
    authenticated: Sequence[Any],
    datum: Any,
    payload: Any,
    context: tuple[Any, ...],
) -> tuple[Any, ...]:
    args = list(authenticated)
    if datum is not ABSENT:
        args.append(datum)
    if payload is not ABSENT:
        args.append(payload)
    args.extend(context)
    return tuple(args)


# ---------------------------------------------------------------------------
# Wrappers
# ---------------------------------------------------------------------------

class CommitmentWrapper:
    """Authenticates revealed parameters before running business logic.

    Usage:
        wrapper = CommitmentWrapper(
            [ParameterCommitment(stored_digest, int_to_bytes)],
            logic=lambda threshold, redeemer, ctx: redeemer >= threshold,
        )
        wrapper.with_result(WithResult((42,), result=50), ctx)
    """

    def __init__(
        self,
        commitments: Sequence[ParameterCommitment],
        logic: BusinessLogic,
    ) -> None:
        if not commitments:
            raise ValueError("at least one commitment is required")
        for idx, c in enumerate(commitments):
            if not isinstance(c, ParameterCommitment):
                raise TypeError(
                    f"commitments[{idx}] must be a ParameterCommitment, "
                    f"got {type(c).__name__}"
                )
        if not callable(logic):
            raise TypeError("logic must be callable")
        self._commitments = tuple(commitments)
        self._logic = logic

    @property
    def arity(self) -> int:
        return len(self._commitments)

    @property
    def commitments(self) -> tuple[ParameterCommitment, ...]:
        return self._commitments

    def with_result(
        self,
        structured_input: WithResult,
        *context: Any,
        datum: Any = ABSENT,
    ) -> Any:
        """Authenticate, then return ``logic(params, [datum], result, *context)``.

        Raises:
            MalformedStructuredInput: not a WithResult of this arity.
            CommitmentMismatch: any parameter fails its commitment.
        """
        self._check_shape(structured_input, WithResult)
        require_authentic(self._commitments, structured_input.parameters)
        return self._logic(
            *_thread(structured_input.parameters, datum, structured_input.result, context)
        )

    def without_result(
        self,
        structured_input: WithoutResult,
        variable_arg: Any,
        *context: Any,
        datum: Any = ABSENT,
    ) -> Any:
        """Authenticate, then return ``logic(params, [datum], variable_arg, *context)``.

        Raises:
            MalformedStructuredInput: not a WithoutResult of this arity.
            CommitmentMismatch: any parameter fails its commitment.
        """
        self._check_shape(structured_input, WithoutResult)
        require_authentic(self._commitments, structured_input.parameters)
        return self._logic(
            *_thread(structured_input.parameters, datum, variable_arg, context)
        )

    def verdict_with_result(
        self,
        structured_input: WithResult,
        *context: Any,
        datum: Any = ABSENT,
    ) -> bool:
        """Boolean form of ``with_result``: a mismatch yields False."""
        try:
            return bool(self.with_result(structured_input, *context, datum=datum))
        except CommitmentMismatch:
            return False

    def verdict_without_result(
        self,
        structured_input: WithoutResult,
        variable_arg: Any,
        *context: Any,
        datum: Any = ABSENT,
    ) -> bool:
        """Boolean form of ``without_result``: a mismatch yields False."""
        try:
            return bool(
                self.without_result(structured_input, variable_arg, *context, datum=datum)
            )
        except CommitmentMismatch:
            return False

    def _check_shape(self, structured_input: Any, shape: type) -> None:
        if not isinstance(structured_input, shape):
            raise MalformedStructuredInput(
                f"expected {shape.__name__}, got {type(structured_input).__name__}"
            )
        if structured_input.arity != self.arity:
            raise MalformedStructuredInput(
                f"expected {self.arity} parameter(s), got {structured_input.arity}"
            )


class PreHashedWrapper:
    """Wrapper for parameters already revealed in digest form.

    The supplied digests are compared directly with the commitments, with
    no re-hashing, and are handed to the business logic as the parameters.
    Each position carries its own commitment, so positions may hold
    digests of different kinds and widths.
    """

    def __init__(self, commitments: Sequence[bytes], logic: BusinessLogic) -> None:
        if not commitments:
            raise ValueError("at least one commitment is required")
        for idx, c in enumerate(commitments):
            if not isinstance(c, bytes) or not c:
                raise TypeError(f"commitments[{idx}] must be non-empty bytes")
        if not callable(logic):
            raise TypeError("logic must be callable")
        self._commitments = tuple(commitments)
        self._logic = logic

    @property
    def arity(self) -> int:
        return len(self._commitments)

    def call(
        self,
        structured_input: WithResult | WithoutResult,
        *context: Any,
        datum: Any = ABSENT,
    ) -> Any:
        """Compare digests, then return ``logic(digests, [datum], [result], *context)``."""
        if not isinstance(structured_input, (WithResult, WithoutResult)):
            raise MalformedStructuredInput(
                f"expected a structured input, got {type(structured_input).__name__}"
            )
        digests = structured_input.parameters
        if len(digests) != self.arity:
            raise MalformedStructuredInput(
                f"expected {self.arity} digest(s), got {len(digests)}"
            )
        for idx, d in enumerate(digests):
            if not isinstance(d, (bytes, bytearray)):
                raise MalformedStructuredInput(
                    f"digest[{idx}] must be bytes, got {type(d).__name__}"
                )

        verdicts = [
            hmac.compare_digest(bytes(d), c) for d, c in zip(digests, self._commitments)
        ]
        failed = tuple(i for i, ok in enumerate(verdicts) if not ok)
        if failed:
            raise CommitmentMismatch(failed)

        payload = structured_input.result if isinstance(structured_input, WithResult) else ABSENT
        return self._logic(*_thread(digests, datum, payload, context))

    def verdict(
        self,
        structured_input: WithResult | WithoutResult,
        *context: Any,
        datum: Any = ABSENT,
    ) -> bool:
        try:
            return bool(self.call(structured_input, *context, datum=datum))
        except CommitmentMismatch:
            return False


# ---------------------------------------------------------------------------
# One-shot entry points
# ---------------------------------------------------------------------------

def wrap_with_result(
    commitments: Sequence[ParameterCommitment],
    logic: BusinessLogic,
    structured_input: WithResult,
    *context: Any,
    datum: Any = ABSENT,
) -> Any:
    return CommitmentWrapper(commitments, logic).with_result(
        structured_input, *context, datum=datum
    )


def wrap_without_result(
    commitments: Sequence[ParameterCommitment],
    logic: BusinessLogic,
    structured_input: WithoutResult,
    variable_arg: Any,
    *context: Any,
    datum: Any = ABSENT,
) -> Any:
    return CommitmentWrapper(commitments, logic).without_result(
        structured_input, variable_arg, *context, datum=datum
    )


def wrap_pre_hashed(
    commitments: Sequence[bytes],
    logic: BusinessLogic,
    structured_input: WithResult | WithoutResult,
    *context: Any,
    datum: Any = ABSENT,
) -> Any:
    return PreHashedWrapper(commitments, logic).call(
        structured_input, *context, datum=datum
    )
