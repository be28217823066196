"""Tests for the service facade: proves results and audit events."""

from pathlib import Path

import pytest

from paramcommit.config.resolver import DeploymentResolver
from paramcommit.crypto.digest import commit
from paramcommit.crypto.template_composer import compose_n
from paramcommit.persistence.event_log import EventKind, EventLog
from paramcommit.service import ParameterService


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

PAIR_IDENTITY = "a793254fab2749fdbdb88c0eef9b7241721410257dd328572eff5982"


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def service(event_log: EventLog) -> ParameterService:
    resolver = DeploymentResolver.from_config_dir(CONFIG_DIR)
    return ParameterService(resolver, event_log=event_log)


class TestCommitAndVerify:
    def test_commit(self, service: ParameterService, event_log: EventLog) -> None:
        result = service.commit_parameter(b"x", label="demo")
        assert result.success
        assert result.data["digest"] == commit(b"x").hex()
        assert event_log.last_event is not None
        assert event_log.last_event.event_kind == EventKind.PARAMETER_COMMITTED

    def test_verify_match(self, service: ParameterService, event_log: EventLog) -> None:
        result = service.verify_parameter("threshold", b"\x2a")
        assert result.success
        assert event_log.events(EventKind.PARAMETER_VERIFIED)

    def test_verify_mismatch(self, service: ParameterService, event_log: EventLog) -> None:
        result = service.verify_parameter("threshold", b"\x2b")
        assert not result.success
        assert "does not match" in result.errors[0]
        assert result.data["stored"] == commit(b"\x2a").hex()
        assert event_log.events(EventKind.COMMITMENT_MISMATCH)

    def test_verify_unknown_name(self, service: ParameterService) -> None:
        result = service.verify_parameter("missing", b"")
        assert not result.success
        assert result.errors == ["Unknown commitment: missing"]


class TestVerifyInput:
    def test_all_positions_match(self, service: ParameterService, event_log: EventLog) -> None:
        result = service.verify_input(
            ["threshold", "oracle_key"], {"parameters": ["2a", b"oracle-v1".hex()]}
        )
        assert result.success
        assert result.data["names"] == ["threshold", "oracle_key"]
        assert event_log.last_event is not None
        assert event_log.last_event.event_kind == EventKind.PARAMETER_VERIFIED

    def test_list_form(self, service: ParameterService) -> None:
        assert service.verify_input(["threshold"], ["2a"]).success

    def test_one_position_wrong(self, service: ParameterService, event_log: EventLog) -> None:
        result = service.verify_input(
            ["threshold", "oracle_key"], ["2b", b"oracle-v1".hex()]
        )
        assert not result.success
        assert result.data["mismatched"] == [
            {"position": 0, "name": "threshold", "stored": commit(b"\x2a").hex()}
        ]
        assert event_log.events(EventKind.COMMITMENT_MISMATCH)

    @pytest.mark.parametrize("raw", [
        {"parameters": ["zz"]},
        {"parameters": [42]},
        {"parameters": ["2a", "2a"]},
        {"params": ["2a"]},
        "2a",
    ])
    def test_malformed_input_logged(
        self, service: ParameterService, event_log: EventLog, raw: object,
    ) -> None:
        result = service.verify_input(["threshold"], raw)
        assert not result.success
        assert result.errors[0].startswith("Malformed input:")
        assert len(event_log.events(EventKind.MALFORMED_INPUT)) == 1
        assert not event_log.events(EventKind.PARAMETER_VERIFIED)

    def test_unknown_name(self, service: ParameterService, event_log: EventLog) -> None:
        result = service.verify_input(["missing"], ["2a"])
        assert result.errors == ["Unknown commitment: missing"]
        assert event_log.count == 0

    def test_no_names(self, service: ParameterService) -> None:
        assert not service.verify_input([], []).success


class TestBadConfigValues:
    def test_non_string_commitment(self) -> None:
        service = ParameterService(DeploymentResolver({"commitments": {"bad": 5}}))
        result = service.verify_parameter("bad", b"")
        assert not result.success
        assert "hex string" in result.errors[0]
        assert not service.verify_input(["bad"], ["00"]).success

    def test_non_string_template_field(self) -> None:
        resolver = DeploymentResolver({"templates": {"bad": {"prefix": 7, "postfix": ""}}})
        result = ParameterService(resolver).compose_instance("bad", [b"x"])
        assert not result.success


class TestCompose:
    def test_compose_pair(self, service: ParameterService) -> None:
        result = service.compose_instance("ordered_pair", [b"x", b"y"])
        assert result.success
        expected = compose_n(
            b"A", [b"x", b"y"], b"Z", field_header=b"H", field_terminator=b"T",
        )
        assert result.data["composed"] == expected.hex()
        assert result.data["identity"] == PAIR_IDENTITY

    def test_compose_wrong_count(self, service: ParameterService) -> None:
        result = service.compose_instance("ordered_pair", [b"x"])
        assert not result.success
        assert "expects 2" in result.errors[0]

    def test_compose_unknown_template(self, service: ParameterService) -> None:
        result = service.compose_instance("missing", [b"x"])
        assert not result.success


class TestExtract:
    def test_extract(self, service: ParameterService, event_log: EventLog) -> None:
        instance = compose_n(
            b"AB", [b"p", b"q"], b"YZ", field_header=b"H", field_terminator=b"T",
        )
        result = service.extract_skeleton(instance, [b"p", b"q"], header_length=1)
        assert result.success
        assert result.data["prefix"] == b"AB".hex()
        assert result.data["field_header"] == b"H".hex()
        assert result.data["field_terminator"] == b"T".hex()
        assert result.data["postfix"] == b"YZ".hex()
        assert event_log.events(EventKind.SKELETON_EXTRACTED)

    def test_extract_failure(self, service: ParameterService) -> None:
        result = service.extract_skeleton(b"nothing here", [b"p"])
        assert not result.success


class TestStatus:
    def test_status(self, service: ParameterService) -> None:
        service.record_malformed_input("threshold", "wrong field count")
        status = service.status()
        assert status["commitments"] == ["oracle_key", "threshold"]
        assert status["config_errors"] == []
        assert status["events"] == 1

    def test_without_event_log(self) -> None:
        resolver = DeploymentResolver.from_config_dir(CONFIG_DIR)
        service = ParameterService(resolver)
        assert service.commit_parameter(b"x").success
        assert service.status()["events"] == 0

    def test_event_ids_continue_after_reload(self, tmp_path: Path) -> None:
        resolver = DeploymentResolver.from_config_dir(CONFIG_DIR)
        path = tmp_path / "events.jsonl"
        ParameterService(resolver, EventLog(storage_path=path)).commit_parameter(b"a")
        second = ParameterService(resolver, EventLog(storage_path=path))
        assert second.commit_parameter(b"b").success
