"""Tests for boolean, literal, enum, special and date schemas."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from enum import Enum

import pytest

from schemata import (
    UNDEFINED,
    IssueKind,
    SchemaDefinitionError,
    SchemaKind,
    any_,
    boolean,
    bytes_,
    date_,
    enum_,
    false_,
    falsy,
    instance_of,
    literal,
    nan,
    native_enum,
    never,
    null,
    primitive,
    property_key,
    true_,
    undefined,
    unknown,
    void,
)


class Color(Enum):
    RED = "red"
    GREEN = "green"


# ---------------------------------------------------------------------------
# Boolean
# ---------------------------------------------------------------------------


class TestBoolean:
    def test_tag(self) -> None:
        assert boolean().parse(False) is False
        assert boolean().safe_parse(0).error.issues[0].payload == {"expected": "boolean", "received": "number"}

    @pytest.mark.parametrize(("raw", "parsed"), [("yes", True), (" ON ", True), ("0", False), ("n", False), (1, True), (0, False)])
    def test_coerce(self, raw: object, parsed: bool) -> None:
        assert boolean().coerce().parse(raw) is parsed

    def test_coerce_keeps_unrecognized_input(self) -> None:
        assert boolean().coerce().safe_parse("maybe").error.issues[0].kind is IssueKind.INVALID_TYPE

    def test_custom_spellings(self) -> None:
        schema = boolean().coerce(true_values={"si"}, false_values={"nein"})
        assert schema.parse("SI") is True and schema.parse("nein") is False
        assert not schema.guard("yes")
        assert not schema.coerce(False).guard("si")

    def test_true_and_false(self) -> None:
        assert true_().parse(True) is True
        issue = true_().safe_parse(False).error.issues[0]
        assert issue.kind is IssueKind.INVALID_LITERAL
        assert issue.message == "Expected True, got False"
        assert false_().guard(False) and not false_().guard(1)


# ---------------------------------------------------------------------------
# Literal and enums
# ---------------------------------------------------------------------------


class TestLiteral:
    def test_type_identity(self) -> None:
        assert literal(1).guard(1)
        assert not literal(1).guard(True)
        assert not literal(1).guard(1.0)
        assert literal(math.nan).guard(math.nan)

    def test_issue(self) -> None:
        issue = literal("a").safe_parse("b").error.issues[0]
        assert issue.payload == {"expected": "a", "received": "b"}
        assert issue.message == "Expected 'a', got 'b'"
        assert literal("a").safe_parse().error.issues[0].kind is IssueKind.REQUIRED


class TestEnum:
    def test_membership(self) -> None:
        schema = enum_("a", "b")
        assert schema.parse("a") == "a"
        assert schema.safe_parse("c").error.messages == ["Expected 'a' | 'b', got 'c'"]
        assert enum_(["x", "y"]).values == ("x", "y")

    def test_empty_enum_is_a_definition_error(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            enum_()

    def test_extract_and_exclude(self) -> None:
        schema = enum_("a", "b", "c")
        assert schema.extract("a", "c").values == ("a", "c")
        assert schema.exclude("b").values == ("a", "c")
        assert schema.enum == {"a": "a", "b": "b", "c": "c"}
        with pytest.raises(SchemaDefinitionError):
            schema.extract("z")

    def test_native_enum_outputs_members(self) -> None:
        schema = native_enum(Color)
        assert schema.parse("red") is Color.RED
        assert schema.parse(Color.GREEN) is Color.GREEN
        assert schema.safe_parse("blue").error.issues[0].payload["expected"] == ["red", "green"]


# ---------------------------------------------------------------------------
# Special types
# ---------------------------------------------------------------------------


class TestSpecial:
    def test_any_and_unknown_accept_everything(self) -> None:
        for schema in (any_(), unknown()):
            assert schema.parse(None) is None
            assert schema.safe_parse().value is UNDEFINED
            assert schema.is_optional and schema.is_nullable

    def test_never(self) -> None:
        result = never().safe_parse(1)
        assert result.error.issues[0].kind is IssueKind.FORBIDDEN
        assert result.error.messages == ["Forbidden"]

    def test_undefined_null_nan(self) -> None:
        assert undefined().guard(UNDEFINED) and not undefined().guard(None)
        assert null().guard(None) and not null().guard(UNDEFINED)
        assert nan().guard(math.nan) and not nan().guard(1.0)
        assert nan().safe_parse(1.0).error.issues[0].payload == {"expected": "nan", "received": "number"}

    def test_instance_of(self) -> None:
        schema = instance_of(date)
        assert schema.guard(datetime.now())
        issue = schema.safe_parse("2024-01-01").error.issues[0]
        assert issue.kind is IssueKind.INVALID_INSTANCE
        assert issue.payload == {"expected": "date", "received": "str"}
        assert issue.message == "Expected an instance of date"

    def test_bytes(self) -> None:
        assert bytes_().parse(b"ab") == b"ab"
        assert bytes_().guard(bytearray(b"x")) and bytes_().guard(memoryview(b"x"))
        assert bytes_().kind is SchemaKind.BYTES
        assert bytes_().safe_parse("ab").error.issues[0].payload == {"expected": "bytes", "received": "string"}

    def test_void(self) -> None:
        assert void().parse(None) is None
        assert void().safe_parse().value is UNDEFINED
        assert void().is_optional and void().is_nullable
        assert void().safe_parse(0).error.issues[0].payload == {"expected": "void", "received": "number"}

    @pytest.mark.parametrize("value", [False, 0, 0.0, "", b"", None, UNDEFINED])
    def test_falsy_accepts(self, value: object) -> None:
        assert falsy().safe_parse(value).ok

    @pytest.mark.parametrize("value", [True, 1, "a", [], {}, math.nan])
    def test_falsy_rejects(self, value: object) -> None:
        issue = falsy().safe_parse(value).error.issues[0]
        assert issue.kind is IssueKind.INVALID_TYPE
        assert issue.payload["expected"] == "falsy"

    def test_primitive(self) -> None:
        for value in ("s", 1, 1.5, True, b"x", None):
            assert primitive().parse(value) == value
        assert primitive().is_optional
        assert not primitive().guard([1]) and not primitive().guard({"a": 1})
        assert primitive().safe_parse(date(2024, 1, 1)).error.issues[0].payload["expected"] == "primitive"

    def test_property_key(self) -> None:
        assert property_key().parse("k") == "k" and property_key().parse(3) == 3
        assert not property_key().guard(True) and not property_key().guard(1.5)
        issue = property_key().safe_parse(None).error.issues[0]
        assert issue.payload == {"expected": "property_key", "received": "null"}


# ---------------------------------------------------------------------------
# Date
# ---------------------------------------------------------------------------


class TestDate:
    def test_tag(self) -> None:
        assert date_().parse(date(2024, 1, 1)) == date(2024, 1, 1)
        assert date_().safe_parse("2024-01-01").error.issues[0].payload == {"expected": "date", "received": "string"}

    def test_bounds(self) -> None:
        schema = date_().min(date(2024, 1, 1)).before(date(2025, 1, 1))
        assert schema.guard(date(2024, 1, 1))
        assert not schema.guard(date(2025, 1, 1))
        assert schema.safe_parse(date(2023, 6, 1)).error.issues[0].kind is IssueKind.INVALID_DATE
        assert (schema.min_date, schema.max_date) == (date(2024, 1, 1), date(2025, 1, 1))

    def test_bounds_compare_across_date_flavours(self) -> None:
        schema = date_().after(date(2024, 1, 1))
        assert schema.guard(datetime(2024, 1, 1, 12, tzinfo=timezone.utc))
        assert not schema.guard(datetime(2023, 12, 31, 23))
        assert date_().max(datetime(2024, 1, 1, 12)).guard(date(2024, 1, 1))

    def test_range(self) -> None:
        schema = date_().between(date(2024, 1, 1), date(2024, 12, 31))
        assert schema.guard(date(2024, 6, 1)) and not schema.guard(date(2025, 1, 1))

    def test_coerce(self) -> None:
        schema = date_().coerce()
        assert schema.parse("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert schema.parse(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert not schema.guard("not a date")
        assert not date_().guard(0)
