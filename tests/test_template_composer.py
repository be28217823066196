"""Tests for the template composer: proves byte layout and field ordering."""

import pytest

from paramcommit.crypto.digest import commit, identity_hash
from paramcommit.crypto.template_composer import compose1, compose_n, extract_skeleton
from paramcommit.models.skeleton import TemplateSkeleton
from paramcommit.serializers import canonical_json


# Reference bytes produced independently of this package
PAIR_COMPOSED = bytes.fromhex(
    "4148d161d71145abeec5ef15abcf0459cec60a27321e2f0ac0ef7ace5254f5944476"
    "5448affab3912ecb865f83fd76b3a4bf2a9fc5692d635a54444f45435cbf4ac9b84b545a"
)
PAIR_IDENTITY = "a793254fab2749fdbdb88c0eef9b7241721410257dd328572eff5982"


class TestCompose1:
    def test_layout(self) -> None:
        out = compose1(b"PRE", b"param", b"POST")
        assert out == b"PRE" + commit(b"param") + b"POST"

    def test_empty_prefix_and_postfix(self) -> None:
        assert compose1(b"", b"p", b"") == commit(b"p")

    def test_composer_does_not_serialize(self) -> None:
        """The digest covers exactly the bytes passed in."""
        assert compose1(b"", b"\x2a", b"") != compose1(b"", b"42", b"")


class TestComposeN:
    def test_two_fields_reference_bytes(self) -> None:
        out = compose_n(
            b"A", [b"x", b"y"], b"Z",
            field_header=b"H", field_terminator=b"T",
        )
        assert out == (
            b"A" + b"H" + commit(b"x") + b"T" + b"H" + commit(b"y") + b"T" + b"Z"
        )
        assert out == PAIR_COMPOSED

    def test_three_fields(self) -> None:
        out = compose_n(
            b"<", [b"a", b"b", b"c"], b">",
            field_header=b"\x58\x20", field_terminator=b"\x00",
        )
        expected = b"<"
        for p in (b"a", b"b", b"c"):
            expected += b"\x58\x20" + commit(p) + b"\x00"
        expected += b">"
        assert out == expected

    def test_order_is_significant(self) -> None:
        kwargs = dict(field_header=b"H", field_terminator=b"T")
        forward = compose_n(b"A", [b"x", b"y"], b"Z", **kwargs)
        swapped = compose_n(b"A", [b"y", b"x"], b"Z", **kwargs)
        assert forward != swapped

    def test_swap_of_identically_serialized_params_is_noop(self) -> None:
        kwargs = dict(field_header=b"H", field_terminator=b"T")
        left = canonical_json({"a": 1, "b": 2})
        right = canonical_json({"b": 2, "a": 1})
        forward = compose_n(b"A", [left, right], b"Z", **kwargs)
        swapped = compose_n(b"A", [right, left], b"Z", **kwargs)
        assert forward == swapped

    def test_swap_of_distinct_objects_with_same_bytes(self) -> None:
        kwargs = dict(field_header=b"H", field_terminator=b"T")
        forward = compose_n(b"A", [b"x", bytearray(b"x")], b"Z", **kwargs)
        swapped = compose_n(b"A", [bytearray(b"x"), b"x"], b"Z", **kwargs)
        assert forward == swapped
        assert forward != compose_n(b"A", [b"x", b"y"], b"Z", **kwargs)

    def test_single_param_rejected(self) -> None:
        with pytest.raises(ValueError, match="compose1"):
            compose_n(b"A", [b"x"], b"Z", field_header=b"H", field_terminator=b"T")


class TestTemplateSkeleton:
    def test_single_dispatch(self) -> None:
        skeleton = TemplateSkeleton(prefix=b"P", postfix=b"Q")
        assert skeleton.compose(b"v") == compose1(b"P", b"v", b"Q")

    def test_multi_dispatch(self) -> None:
        skeleton = TemplateSkeleton(
            prefix=b"A", postfix=b"Z", field_header=b"H", field_terminator=b"T", arity=2,
        )
        assert skeleton.compose(b"x", b"y") == PAIR_COMPOSED

    def test_identity(self) -> None:
        skeleton = TemplateSkeleton(
            prefix=b"A", postfix=b"Z", field_header=b"H", field_terminator=b"T", arity=2,
        )
        assert skeleton.identity(b"x", b"y").hex() == PAIR_IDENTITY
        assert skeleton.identity(b"x", b"y") == identity_hash(PAIR_COMPOSED, 3)

    def test_wrong_param_count(self) -> None:
        skeleton = TemplateSkeleton(prefix=b"P", postfix=b"Q")
        with pytest.raises(ValueError, match="expects 1"):
            skeleton.compose(b"a", b"b")

    def test_single_with_field_bytes_rejected(self) -> None:
        with pytest.raises(ValueError):
            TemplateSkeleton(prefix=b"P", postfix=b"Q", field_header=b"H")

    def test_zero_arity_rejected(self) -> None:
        with pytest.raises(ValueError):
            TemplateSkeleton(prefix=b"P", postfix=b"Q", arity=0)


class TestExtractSkeleton:
    def test_single_round_trip(self) -> None:
        instance = compose1(b"\x59\x01", b"placeholder", b"\x00\x01")
        skeleton = extract_skeleton(instance, [b"placeholder"])
        assert skeleton.prefix == b"\x59\x01"
        assert skeleton.postfix == b"\x00\x01"
        assert skeleton.compose(b"real") == compose1(b"\x59\x01", b"real", b"\x00\x01")

    def test_multi_round_trip(self) -> None:
        instance = compose_n(
            b"AA", [b"p1", b"p2", b"p3"], b"ZZ",
            field_header=b"\x58\x20", field_terminator=b"\xff",
        )
        skeleton = extract_skeleton(instance, [b"p1", b"p2", b"p3"], header_length=2)
        assert skeleton.prefix == b"AA"
        assert skeleton.field_header == b"\x58\x20"
        assert skeleton.field_terminator == b"\xff"
        assert skeleton.postfix == b"ZZ"
        assert skeleton.arity == 3

    def test_missing_digest(self) -> None:
        instance = compose1(b"A", b"one", b"Z")
        with pytest.raises(ValueError, match="not found"):
            extract_skeleton(instance, [b"two"])

    def test_inconsistent_separators(self) -> None:
        instance = b"A" + commit(b"x") + b"TH" + commit(b"y") + b"QH" + commit(b"z") + b"T"
        with pytest.raises(ValueError, match="differ"):
            extract_skeleton(instance, [b"x", b"y", b"z"], header_length=0)

    def test_header_on_single_rejected(self) -> None:
        instance = compose1(b"AB", b"x", b"Z")
        with pytest.raises(ValueError, match="no header"):
            extract_skeleton(instance, [b"x"], header_length=1)

    def test_no_placeholders(self) -> None:
        with pytest.raises(ValueError):
            extract_skeleton(b"", [])

    def test_repeated_digest_rejected(self) -> None:
        instance = compose1(b"A", b"x", b"Z") + commit(b"x")
        with pytest.raises(ValueError, match="more than once"):
            extract_skeleton(instance, [b"x"])

    def test_later_digest_repeated_before_earlier_one(self) -> None:
        instance = (
            b"A" + commit(b"p2") + b"H" + commit(b"p1") + b"TH" + commit(b"p2") + b"TZ"
        )
        with pytest.raises(ValueError, match=r"placeholder\[1\] occurs more than once"):
            extract_skeleton(instance, [b"p1", b"p2"], header_length=1)
