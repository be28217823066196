#!/usr/bin/env python3
"""Check template composition against recorded conformance vectors.

Each vector fixes a skeleton, serialized parameters, and the composed
bytes and identity hash a genuine instantiation produced. Any drift in
the composer's byte layout or hash choice shows up here.
"""

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from paramcommit.models.skeleton import TemplateSkeleton

VECTORS_PATH = ROOT / "config" / "vectors.json"


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check_vector(vector: dict) -> list[str]:
    errors: list[str] = []
    name = vector.get("name", "<unnamed>")
    params = [bytes.fromhex(p) for p in vector["params_hex"]]

    try:
        skeleton = TemplateSkeleton(
            prefix=bytes.fromhex(vector["prefix"]),
            postfix=bytes.fromhex(vector["postfix"]),
            field_header=bytes.fromhex(vector.get("field_header", "")),
            field_terminator=bytes.fromhex(vector.get("field_terminator", "")),
            arity=len(params),
        )
        composed = skeleton.compose(*params)
    except ValueError as e:
        return [f"{name}: {e}"]

    if composed.hex() != vector["expected_composed"]:
        errors.append(
            f"{name}: composed bytes differ\n"
            f"    expected {vector['expected_composed']}\n"
            f"    got      {composed.hex()}"
        )

    expected_identity = vector.get("expected_identity")
    if expected_identity is not None:
        identity = skeleton.identity(*params).hex()
        if identity != expected_identity:
            errors.append(
                f"{name}: identity {identity} != expected {expected_identity}"
            )

    return errors


def main() -> int:
    vectors = load_json(VECTORS_PATH)["vectors"]
    all_errors: list[str] = []
    for vector in vectors:
        all_errors.extend(check_vector(vector))

    if all_errors:
        print("Vector verification failed:")
        for err in all_errors:
            print(f"- {err}")
        return 1

    print(f"Vector verification passed ({len(vectors)} vectors).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
