"""Cryptographic primitives: commitment digests and template composition."""

from paramcommit.crypto.digest import commit, identity_hash, verify
from paramcommit.crypto.template_composer import compose1, compose_n, extract_skeleton

__all__ = ["commit", "verify", "identity_hash", "compose1", "compose_n", "extract_skeleton"]
