"""Deployment configuration resolver.

Commitments and template skeletons are fixed when an artifact is deployed.
They live in ``deployment.json`` inside a config directory:

    {
      "version_tag": 3,
      "commitments": {"<name>": "<hex digest>"},
      "templates": {
        "<name>": {
          "prefix": "<hex>", "postfix": "<hex>",
          "field_header": "<hex>", "field_terminator": "<hex>",
          "arity": 2
        }
      }
    }

The config directory is chosen explicitly, or through the
PARAMCOMMIT_CONFIG_DIR environment variable (a ``.env`` file is honoured),
or defaults to the repository's ``config/`` directory.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv

from paramcommit.crypto.digest import DEFAULT_VERSION_TAG, parse_digest
from paramcommit.models.skeleton import TemplateSkeleton

CONFIG_FILENAME = "deployment.json"
CONFIG_ENV_VAR = "PARAMCOMMIT_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"


def resolve_config_dir(explicit: Optional[Path] = None) -> Path:
    """Pick the config directory: explicit, then environment, then default."""
    if explicit is not None:
        return Path(explicit)
    load_dotenv(find_dotenv(usecwd=True))
    from_env = os.getenv(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_DIR


class DeploymentResolver:
    """Read-only view over a deployment's commitments and skeletons.

    Usage:
        resolver = DeploymentResolver.from_config_dir(config_dir)
        stored = resolver.commitment("oracle_key")
        skeleton = resolver.skeleton("ordered_pair")
    """

    def __init__(self, config: dict[str, Any]) -> None:
        self._version_tag = int(config.get("version_tag", DEFAULT_VERSION_TAG))
        self._commitments: dict[str, str] = dict(config.get("commitments", {}))
        self._templates: dict[str, dict[str, Any]] = dict(config.get("templates", {}))

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> DeploymentResolver:
        path = Path(config_dir) / CONFIG_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Deployment config not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            return cls(json.load(handle))

    @property
    def version_tag(self) -> int:
        return self._version_tag

    def commitment_names(self) -> list[str]:
        return sorted(self._commitments)

    def template_names(self) -> list[str]:
        return sorted(self._templates)

    def commitment(self, name: str) -> bytes:
        """Stored commitment digest for *name*. Raises KeyError if unknown."""
        if name not in self._commitments:
            raise KeyError(f"Unknown commitment: {name}")
        return parse_digest(self._commitments[name])

    def skeleton(self, name: str) -> TemplateSkeleton:
        """Template skeleton for *name*. Raises KeyError if unknown."""
        if name not in self._templates:
            raise KeyError(f"Unknown template: {name}")
        spec = self._templates[name]
        return TemplateSkeleton(
            prefix=bytes.fromhex(spec.get("prefix", "")),
            postfix=bytes.fromhex(spec.get("postfix", "")),
            field_header=bytes.fromhex(spec.get("field_header", "")),
            field_terminator=bytes.fromhex(spec.get("field_terminator", "")),
            arity=int(spec.get("arity", 1)),
            version_tag=int(spec.get("version_tag", self._version_tag)),
        )

    def validate(self) -> list[str]:
        """Check the configuration. Returns list of errors; empty = valid."""
        errors: list[str] = []

        if not 0 <= self._version_tag <= 0xFF:
            errors.append(f"version_tag {self._version_tag} does not fit in one byte")

        for name, value in sorted(self._commitments.items()):
            try:
                parse_digest(value)
            except ValueError as exc:
                errors.append(f"commitment '{name}': {exc}")

        for name, spec in sorted(self._templates.items()):
            arity = spec.get("arity", 1)
            if not isinstance(arity, int) or arity < 1:
                errors.append(f"template '{name}': arity must be a positive integer")
                continue
            for key in ("prefix", "postfix", "field_header", "field_terminator"):
                try:
                    bytes.fromhex(spec.get(key, ""))
                except (ValueError, TypeError):
                    errors.append(f"template '{name}': {key} is not valid hex")
            has_fields = bool(spec.get("field_header") or spec.get("field_terminator"))
            if arity == 1 and has_fields:
                errors.append(
                    f"template '{name}': single-parameter template has field header/terminator"
                )
            if arity > 1 and not has_fields:
                errors.append(
                    f"template '{name}': multi-parameter template needs field header/terminator"
                )

        return errors
