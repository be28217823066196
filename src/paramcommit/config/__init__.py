"""Deployment configuration."""

from paramcommit.config.resolver import DeploymentResolver, resolve_config_dir

__all__ = ["DeploymentResolver", "resolve_config_dir"]
