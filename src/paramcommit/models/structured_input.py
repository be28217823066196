"""Structured inputs consumed by the commitment-verifying wrappers.

A structured input is the per-call aggregate of revealed parameter values
plus an optional payload. Two shapes exist:

- WithResult: parameters followed by a result/redeemer payload that is
  passed through to the business logic.
- WithoutResult: parameters only. The business logic instead receives a
  variable argument supplied outside the input.

Endpoints decode untrusted wire data into plain Python values first;
``decode_structured_input`` then checks the shape and builds the typed
input, failing closed on anything unexpected.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from paramcommit.errors import MalformedStructuredInput


@dataclass(frozen=True)
class WithResult:
    """Revealed parameters plus a result payload."""
    parameters: tuple[Any, ...]
    result: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _as_parameters(self.parameters))

    @property
    def arity(self) -> int:
        return len(self.parameters)


@dataclass(frozen=True)
class WithoutResult:
    """Revealed parameters with no payload."""
    parameters: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", _as_parameters(self.parameters))

    @property
    def arity(self) -> int:
        return len(self.parameters)


StructuredInput = Union[WithResult, WithoutResult]


def decode_structured_input(
    raw: Any,
    *,
    arity: int,
    with_result: bool,
) -> StructuredInput:
    """Build a typed structured input from an already-decoded value.

    Accepted forms:
        {"parameters": [p1, ..., pk], "result": r}   (result iff with_result)
        [p1, ..., pk]  or  [p1, ..., pk, r]

    Raises:
        MalformedStructuredInput: wrong container, field count or payload
            variant. Nothing is partially decoded.
    """
    if arity < 1:
        raise ValueError(f"arity must be at least 1, got {arity}")

    if isinstance(raw, Mapping):
        expected = {"parameters", "result"} if with_result else {"parameters"}
        keys = set(raw.keys())
        if keys != expected:
            raise MalformedStructuredInput(
                f"expected keys {sorted(expected)}, got {sorted(map(str, keys))}"
            )
        params = raw["parameters"]
        if not _is_field_list(params):
            raise MalformedStructuredInput("'parameters' must be a list")
        if len(params) != arity:
            raise MalformedStructuredInput(
                f"expected {arity} parameter(s), got {len(params)}"
            )
        if with_result:
            return WithResult(parameters=tuple(params), result=raw["result"])
        return WithoutResult(parameters=tuple(params))

    if _is_field_list(raw):
        fields = list(raw)
        expected_len = arity + (1 if with_result else 0)
        if len(fields) != expected_len:
            raise MalformedStructuredInput(
                f"expected {expected_len} field(s), got {len(fields)}"
            )
        if with_result:
            return WithResult(parameters=tuple(fields[:arity]), result=fields[arity])
        return WithoutResult(parameters=tuple(fields))

    raise MalformedStructuredInput(
        f"structured input must be a mapping or list, got {type(raw).__name__}"
    )


def _is_field_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _as_parameters(parameters: Any) -> tuple[Any, ...]:
    if not _is_field_list(parameters):
        raise MalformedStructuredInput(
            f"parameters must be a sequence, got {type(parameters).__name__}"
        )
    if not parameters:
        raise MalformedStructuredInput("at least one parameter is required")
    return tuple(parameters)
