"""paramcommit CLI: command-line interface for the commitment engine.

Usage:
    python -m paramcommit.cli status
    python -m paramcommit.cli commit --text "oracle-v1"
    python -m paramcommit.cli verify --name oracle_key --hex 2a
    python -m paramcommit.cli verify-input --name threshold --input '["2a"]'
    python -m paramcommit.cli compose --template ordered_pair --param-hex 01 --param-hex 02
    python -m paramcommit.cli extract-skeleton --instance-hex ... --placeholder-hex 00
    python -m paramcommit.cli check-config
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from paramcommit.config.resolver import DeploymentResolver, resolve_config_dir
from paramcommit.persistence.event_log import EventLog
from paramcommit.service import ParameterService, ServiceResult


def _make_service(args: argparse.Namespace) -> ParameterService:
    """Create a ParameterService from the selected config directory."""
    resolver = DeploymentResolver.from_config_dir(resolve_config_dir(args.config))
    event_log = EventLog(storage_path=args.log) if args.log else None
    return ParameterService(resolver, event_log=event_log)


def _payload(args: argparse.Namespace) -> bytes:
    if args.hex is not None:
        return bytes.fromhex(args.hex)
    return args.text.encode("utf-8")


def _report(result: ServiceResult) -> int:
    if result.success:
        print(json.dumps(result.data, indent=2))
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_status(args: argparse.Namespace) -> int:
    service = _make_service(args)
    print(json.dumps(service.status(), indent=2))
    return 0


def cmd_commit(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _report(service.commit_parameter(_payload(args), label=args.label or ""))


def cmd_verify(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _report(service.verify_parameter(args.name, _payload(args)))


def cmd_verify_input(args: argparse.Namespace) -> int:
    try:
        raw = json.loads(args.input)
    except json.JSONDecodeError as e:
        print(f"Failed: input is not valid JSON: {e}", file=sys.stderr)
        return 1
    service = _make_service(args)
    return _report(service.verify_input(args.name, raw))


def cmd_compose(args: argparse.Namespace) -> int:
    service = _make_service(args)
    params = [bytes.fromhex(h) for h in args.param_hex]
    return _report(service.compose_instance(args.template, params))


def cmd_extract_skeleton(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.extract_skeleton(
        bytes.fromhex(args.instance_hex),
        [bytes.fromhex(h) for h in args.placeholder_hex],
        header_length=args.header_length,
    )
    return _report(result)


def cmd_check_config(args: argparse.Namespace) -> int:
    """Validate the deployment configuration."""
    config_dir = resolve_config_dir(args.config)
    resolver = DeploymentResolver.from_config_dir(config_dir)
    errors = resolver.validate()
    if errors:
        for err in errors:
            print(f"  ✗ {err}", file=sys.stderr)
        return 1
    print(
        f"Config OK: {len(resolver.commitment_names())} commitment(s), "
        f"{len(resolver.template_names())} template(s) in {config_dir}"
    )
    return 0


def _hex_arg(value: str) -> str:
    try:
        bytes.fromhex(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not valid hex: {value!r}") from exc
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paramcommit",
        description="paramcommit: parameter commitment and verification CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config directory (default: $PARAMCOMMIT_CONFIG_DIR or config/)",
    )
    parser.add_argument(
        "--log",
        type=Path,
        default=None,
        help="Append verification events to this JSONL file",
    )
    sub = parser.add_subparsers(dest="command")

    # status
    sub.add_parser("status", help="Show deployment status")

    # commit
    p_commit = sub.add_parser("commit", help="Compute a parameter commitment")
    src = p_commit.add_mutually_exclusive_group(required=True)
    src.add_argument("--hex", type=_hex_arg, help="Serialized parameter as hex")
    src.add_argument("--text", help="Serialized parameter as UTF-8 text")
    p_commit.add_argument("--label", help="Label recorded with the event")

    # verify
    p_verify = sub.add_parser("verify", help="Verify a parameter against a stored commitment")
    p_verify.add_argument("--name", required=True, help="Commitment name in deployment.json")
    src = p_verify.add_mutually_exclusive_group(required=True)
    src.add_argument("--hex", type=_hex_arg, help="Serialized parameter as hex")
    src.add_argument("--text", help="Serialized parameter as UTF-8 text")

    # verify-input
    p_input = sub.add_parser(
        "verify-input", help="Authenticate a JSON structured input against stored commitments",
    )
    p_input.add_argument(
        "--name", action="append", required=True,
        help="Commitment name in deployment.json (repeat in declaration order)",
    )
    p_input.add_argument(
        "--input", required=True,
        help='JSON list or {"parameters": [...]} of hex-encoded serialized parameters',
    )

    # compose
    p_compose = sub.add_parser("compose", help="Predict an instantiated artifact's identity")
    p_compose.add_argument("--template", required=True, help="Template name in deployment.json")
    p_compose.add_argument(
        "--param-hex", dest="param_hex", action="append", required=True, type=_hex_arg,
        help="Serialized parameter as hex (repeat in declaration order)",
    )

    # extract-skeleton
    p_extract = sub.add_parser("extract-skeleton", help="Recover skeleton bytes from an instance")
    p_extract.add_argument("--instance-hex", dest="instance_hex", required=True, type=_hex_arg)
    p_extract.add_argument(
        "--placeholder-hex", dest="placeholder_hex", action="append", required=True,
        type=_hex_arg, help="Placeholder parameter bytes as hex (repeat in order)",
    )
    p_extract.add_argument("--header-length", dest="header_length", type=int, default=0)

    # check-config
    sub.add_parser("check-config", help="Validate the deployment configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "status": cmd_status,
        "commit": cmd_commit,
        "verify": cmd_verify,
        "verify-input": cmd_verify_input,
        "compose": cmd_compose,
        "extract-skeleton": cmd_extract_skeleton,
        "check-config": cmd_check_config,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except FileNotFoundError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
