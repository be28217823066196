"""paramcommit service: facade over the commitment engine.

This is the primary interface for programmatic and CLI access. It
combines:
- Deployment configuration (stored commitments, template skeletons)
- Commitment and verification of serialized parameters
- Authentication of structured inputs through the commitment wrappers
- Instance identity prediction from template skeletons
- Skeleton extraction from a placeholder instantiation
- The verification event log

All operations return a ServiceResult. The facade is the only layer that
records events; the engine it calls is side-effect free. If an event
cannot be recorded the operation fails rather than completing without
an audit record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from paramcommit.crypto.digest import commit, digest_hex, identity_hash, verify
from paramcommit.crypto.template_composer import extract_skeleton
from paramcommit.engine.wrapper import ABSENT, CommitmentWrapper
from paramcommit.errors import CommitmentMismatch, MalformedStructuredInput
from paramcommit.models.commitment import ParameterCommitment
from paramcommit.models.structured_input import decode_structured_input
from paramcommit.serializers import hex_text
from paramcommit.config.resolver import DeploymentResolver
from paramcommit.persistence.event_log import EventKind, EventLog, EventRecord


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class ParameterService:
    """Unified facade for commitment, verification and composition.

    Usage:
        resolver = DeploymentResolver.from_config_dir(config_dir)
        service = ParameterService(resolver, event_log=EventLog(path))
        service.verify_parameter("oracle_key", key_bytes)
        service.verify_input(["threshold", "oracle_key"], {"parameters": ["2a", key_hex]})
        service.compose_instance("ordered_pair", [seller_bytes, buyer_bytes])
    """

    def __init__(
        self,
        resolver: DeploymentResolver,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._resolver = resolver
        self._event_log = event_log
        self._event_counter = event_log.count if event_log is not None else 0

    def commit_parameter(self, data: bytes, label: str = "") -> ServiceResult:
        """Compute the commitment for already-serialized parameter bytes."""
        digest = digest_hex(commit(data))
        err = self._record(EventKind.PARAMETER_COMMITTED, label, {"digest": digest})
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(success=True, data={"digest": digest})

    def verify_parameter(self, name: str, data: bytes) -> ServiceResult:
        """Check serialized parameter bytes against a configured commitment."""
        try:
            stored = self._resolver.commitment(name)
        except (KeyError, ValueError) as e:
            return ServiceResult(success=False, errors=[_message(e)])

        computed = digest_hex(commit(data))
        if not verify(data, stored):
            self._record(
                EventKind.COMMITMENT_MISMATCH,
                name,
                {"computed": computed, "stored": digest_hex(stored)},
            )
            return ServiceResult(
                success=False,
                errors=[f"Parameter does not match commitment '{name}'"],
                data={"computed": computed, "stored": digest_hex(stored)},
            )

        err = self._record(EventKind.PARAMETER_VERIFIED, name, {"digest": computed})
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(success=True, data={"name": name, "digest": computed})

    def verify_input(self, names: Sequence[str], raw: Any) -> ServiceResult:
        """Authenticate a decoded structured input against configured commitments.

        *raw* carries one hex-encoded serialized parameter per name, either
        as a list or under a ``"parameters"`` key. Every position is checked
        before the verdict is formed.
        """
        if not names:
            return ServiceResult(success=False, errors=["At least one commitment name is required"])
        try:
            commitments = [
                ParameterCommitment(self._resolver.commitment(n), hex_text, label=n)
                for n in names
            ]
        except (KeyError, ValueError) as e:
            return ServiceResult(success=False, errors=[_message(e)])

        subject = ",".join(names)
        wrapper = CommitmentWrapper(commitments, logic=_accept)
        try:
            structured = decode_structured_input(raw, arity=wrapper.arity, with_result=False)
            wrapper.without_result(structured, ABSENT)
        except MalformedStructuredInput as e:
            err = self.record_malformed_input(subject, str(e))
            errors = [f"Malformed input: {e}"]
            if err:
                errors.append(err)
            return ServiceResult(success=False, errors=errors)
        except CommitmentMismatch as e:
            mismatched = [
                {"position": i, "name": commitments[i].label, "stored": commitments[i].hex}
                for i in e.mismatched
            ]
            self._record(
                EventKind.COMMITMENT_MISMATCH,
                subject,
                {"positions": list(e.mismatched)},
            )
            return ServiceResult(
                success=False, errors=[str(e)], data={"mismatched": mismatched}
            )

        err = self._record(EventKind.PARAMETER_VERIFIED, subject, {"arity": wrapper.arity})
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(success=True, data={"names": list(names)})

    def compose_instance(self, template: str, params: Sequence[bytes]) -> ServiceResult:
        """Predict an instantiated artifact's bytes and identity."""
        try:
            skeleton = self._resolver.skeleton(template)
            composed = skeleton.compose(*params)
        except (KeyError, TypeError, ValueError) as e:
            return ServiceResult(success=False, errors=[_message(e)])

        identity = identity_hash(composed, skeleton.version_tag).hex()
        err = self._record(
            EventKind.INSTANCE_COMPOSED,
            template,
            {"identity": identity, "parameter_count": len(params)},
        )
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(
            success=True,
            data={"template": template, "composed": composed.hex(), "identity": identity},
        )

    def extract_skeleton(
        self,
        instantiated: bytes,
        placeholders: Sequence[bytes],
        header_length: int = 0,
    ) -> ServiceResult:
        """Recover skeleton bytes from a placeholder instantiation."""
        try:
            skeleton = extract_skeleton(
                instantiated,
                placeholders,
                header_length=header_length,
                version_tag=self._resolver.version_tag,
            )
        except ValueError as e:
            return ServiceResult(success=False, errors=[str(e)])

        fields = skeleton.to_hex_fields()
        err = self._record(EventKind.SKELETON_EXTRACTED, "", {"arity": skeleton.arity})
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(success=True, data=fields)

    def record_malformed_input(self, subject: str, reason: str) -> Optional[str]:
        """Log a structured input that an endpoint could not decode."""
        return self._record(EventKind.MALFORMED_INPUT, subject, {"reason": reason})

    def status(self) -> dict[str, Any]:
        """Return a summary of the deployment and the event log."""
        return {
            "version_tag": self._resolver.version_tag,
            "commitments": self._resolver.commitment_names(),
            "templates": self._resolver.template_names(),
            "config_errors": self._resolver.validate(),
            "events": self._event_log.count if self._event_log is not None else 0,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _next_event_id(self) -> str:
        """Generate a monotonically increasing unique event ID."""
        self._event_counter += 1
        return f"EVT-{self._event_counter:08d}"

    def _record(
        self,
        kind: EventKind,
        subject: str,
        payload: dict[str, Any],
    ) -> Optional[str]:
        """Append an event. Returns an error string or None."""
        if self._event_log is None:
            return None
        try:
            self._event_log.append(EventRecord.create(
                event_id=self._next_event_id(),
                event_kind=kind,
                subject=subject,
                payload=payload,
            ))
        except (ValueError, OSError) as e:
            return f"Event log failure: {e}"
        return None


def _message(exc: Exception) -> str:
    # KeyError wraps its message in quotes
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


def _accept(*_args: Any) -> bool:
    return True
