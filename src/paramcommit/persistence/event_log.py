"""Append-only verification event log.

Every commitment, verification attempt and template composition performed
through the service facade is recorded as an immutable event. The core
engine never writes here; it stays side-effect free and the facade decides
what to record.

The log can be persisted to a JSONL file (one JSON object per line) and
reloaded. Each record carries a digest of its canonical JSON, re-checked
on load so a tampered file is rejected rather than silently trusted.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from paramcommit.crypto.digest import DIGEST_PREFIX, commit


class EventKind(str, enum.Enum):
    """Classification of verification events."""
    PARAMETER_COMMITTED = "parameter_committed"
    PARAMETER_VERIFIED = "parameter_verified"
    COMMITMENT_MISMATCH = "commitment_mismatch"
    MALFORMED_INPUT = "malformed_input"
    INSTANCE_COMPOSED = "instance_composed"
    SKELETON_EXTRACTED = "skeleton_extracted"


def _record_hash(
    event_id: str,
    event_kind: str,
    timestamp_utc: str,
    subject: str,
    payload: dict[str, Any],
) -> str:
    canonical = json.dumps(
        {
            "event_id": event_id,
            "event_kind": event_kind,
            "timestamp_utc": timestamp_utc,
            "subject": subject,
            "payload": payload,
        },
        sort_keys=True,
        ensure_ascii=False,
    ).encode("utf-8")
    return DIGEST_PREFIX + commit(canonical).hex()


@dataclass(frozen=True)
class EventRecord:
    """A single immutable event. ``event_hash`` is fixed at creation."""
    event_id: str
    event_kind: EventKind
    timestamp_utc: str
    subject: str  # commitment or template name, or "" for ad-hoc operations
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        subject: str,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        return EventRecord(
            event_id=event_id,
            event_kind=event_kind,
            timestamp_utc=ts_str,
            subject=subject,
            payload=payload,
            event_hash=_record_hash(event_id, event_kind.value, ts_str, subject, payload),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_kind": self.event_kind.value,
            "timestamp_utc": self.timestamp_utc,
            "subject": self.subject,
            "payload": self.payload,
            "event_hash": self.event_hash,
        }


class EventLog:
    """Append-only event log with optional JSONL persistence.

    Events can only be appended, never modified or deleted.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._events: list[EventRecord] = []
        self._storage_path = storage_path
        self._event_ids: set[str] = set()

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    def append(self, event: EventRecord) -> None:
        """Append an event. Raises ValueError on a duplicate event_id."""
        if event.event_id in self._event_ids:
            raise ValueError(f"Duplicate event ID: {event.event_id}")

        self._events.append(event)
        self._event_ids.add(event.event_id)

        if self._storage_path:
            with self._storage_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(event.to_json(), sort_keys=True, ensure_ascii=False) + "\n")

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.event_kind == kind]

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._events[-1] if self._events else None

    def _load_from_file(self, path: Path) -> None:
        """Load events, rejecting tampered records and duplicate IDs."""
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)
                event_id = data["event_id"]

                if event_id in self._event_ids:
                    raise ValueError(
                        f"Duplicate event ID on recovery (line {line_num}): {event_id}"
                    )

                expected_hash = _record_hash(
                    event_id,
                    data["event_kind"],
                    data["timestamp_utc"],
                    data["subject"],
                    data["payload"],
                )
                if data["event_hash"] != expected_hash:
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): event {event_id} "
                        f"stored hash {data['event_hash']} != computed {expected_hash}"
                    )

                self._events.append(EventRecord(
                    event_id=event_id,
                    event_kind=EventKind(data["event_kind"]),
                    timestamp_utc=data["timestamp_utc"],
                    subject=data["subject"],
                    payload=data["payload"],
                    event_hash=data["event_hash"],
                ))
                self._event_ids.add(event_id)
