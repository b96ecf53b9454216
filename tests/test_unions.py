"""Tests for union, discriminated union and intersection."""

from __future__ import annotations

from datetime import date
from enum import Enum

import pytest

from schemata import (
    ErrorCode,
    IssueKind,
    SchemaDefinitionError,
    array,
    date_,
    discriminated_union,
    enum_,
    false_,
    intersection,
    literal,
    native_enum,
    null,
    number,
    object_,
    string,
    true_,
    tuple_,
    union,
)


class Shape(Enum):
    CIRCLE = "circle"
    SQUARE = "square"


# ---------------------------------------------------------------------------
# Union
# ---------------------------------------------------------------------------


class TestUnion:
    def test_first_success_wins(self) -> None:
        schema = union(string().transform(lambda s: "first"), string().transform(lambda s: "second"))
        assert schema.parse("x") == "first"

    def test_failure_collects_every_alternative(self) -> None:
        result = union(string(), number()).safe_parse(True)
        assert len(result.error.issues) == 1
        issue = result.error.issues[0]
        assert issue.kind is IssueKind.INVALID_UNION
        assert issue.message == "Invalid union"
        assert [[i.payload["expected"] for i in attempt] for attempt in issue.payload["issues"]] == [["string"], ["number"]]

    def test_failed_attempts_do_not_leak(self) -> None:
        schema = object_({"v": union(string().min(3), number())})
        assert schema.parse({"v": 1}) == {"v": 1}
        assert [i.path for i in schema.safe_parse({"v": "a"}).error.issues] == [("v",)]

    def test_nested_unions_are_flattened(self) -> None:
        schema = union(union(string(), number()), null())
        assert len(schema.members) == 3
        assert len(union([string(), number()]).members) == 2
        assert len((string() | number() | null()).flatten().members) == 3

    def test_construction_errors(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            union()
        with pytest.raises(SchemaDefinitionError):
            union(string(), "not a schema")

    def test_union_is_optional_when_a_member_is(self) -> None:
        assert union(string(), number().optional()).is_optional
        assert not union(string(), number()).is_optional


# ---------------------------------------------------------------------------
# Discriminated union
# ---------------------------------------------------------------------------


def _events():
    return discriminated_union("type", [
        object_({"type": literal("click"), "x": number(), "y": number()}),
        object_({"type": enum_("key_down", "key_up"), "key": string()}),
    ])


class TestDiscriminatedUnion:
    def test_selects_member_by_tag(self) -> None:
        schema = _events()
        assert schema.parse({"type": "click", "x": 1, "y": 2}) == {"type": "click", "x": 1, "y": 2}
        assert schema.parse({"type": "key_up", "key": "a"}) == {"type": "key_up", "key": "a"}
        assert schema.tags == ["click", "key_down", "key_up"]

    def test_member_issues_are_reported_directly(self) -> None:
        issue = _events().safe_parse({"type": "click", "x": 1}).error.issues[0]
        assert issue.kind is IssueKind.REQUIRED
        assert issue.path == ("y",)

    def test_unknown_tag(self) -> None:
        issue = _events().safe_parse({"type": "scroll"}).error.issues[0]
        assert issue.kind is IssueKind.INVALID_DISCRIMINATOR
        assert issue.path == ("type",)
        assert issue.payload == {"expected": ["click", "key_down", "key_up"], "received": "scroll"}
        assert issue.message == "Invalid discriminator value. Expected 'click' | 'key_down' | 'key_up'"

    def test_missing_tag_and_non_mapping(self) -> None:
        assert _events().safe_parse({}).error.issues[0].kind is IssueKind.INVALID_DISCRIMINATOR
        assert _events().safe_parse("click").error.issues[0].payload == {"expected": "object", "received": "string"}

    def test_tag_type_identity(self) -> None:
        schema = discriminated_union("ok", [object_({"ok": true_()}), object_({"ok": literal(1), "n": number()})])
        assert schema.parse({"ok": True}) == {"ok": True}
        assert not schema.guard({"ok": 1})

    def test_native_enum_and_null_tags(self) -> None:
        schema = discriminated_union("kind", [
            object_({"kind": native_enum(Shape), "size": number()}),
            object_({"kind": null()}),
        ])
        assert schema.parse({"kind": "circle", "size": 1}) == {"kind": Shape.CIRCLE, "size": 1}
        assert schema.parse({"kind": None}) == {"kind": None}

    def test_duplicate_tags(self) -> None:
        with pytest.raises(SchemaDefinitionError) as excinfo:
            discriminated_union("t", [object_({"t": literal("a")}), object_({"t": enum_("a", "b")})])
        assert excinfo.value.code is ErrorCode.E9103_DUPLICATE_DISCRIMINATOR

    def test_members_must_declare_a_literal_tag(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            discriminated_union("t", [object_({"t": string()})])
        with pytest.raises(SchemaDefinitionError):
            discriminated_union("t", [string()])

    def test_wrapped_members(self) -> None:
        schema = discriminated_union("t", [object_({"t": false_()}).strict(), object_({"t": true_().optional()})])
        assert schema.guard({"t": True})
        assert not schema.guard({"t": False, "extra": 1})


# ---------------------------------------------------------------------------
# Intersection
# ---------------------------------------------------------------------------


class TestIntersection:
    def test_merges_object_outputs(self) -> None:
        schema = intersection(object_({"a": string()}), object_({"b": number()}))
        assert schema.parse({"a": "x", "b": 1, "c": True}) == {"a": "x", "b": 1}

    def test_every_member_reports(self) -> None:
        result = (object_({"a": string()}) & object_({"b": number()})).safe_parse({})
        assert [i.path for i in result.error.issues] == [("a",), ("b",)]

    def test_conflicting_outputs(self) -> None:
        schema = intersection(string().transform(lambda s: s.upper()), string())
        issue = schema.safe_parse("a").error.issues[0]
        assert issue.kind is IssueKind.INVALID_INTERSECTION
        assert issue.message == "Invalid intersection"

    def test_shared_keys_merge_recursively(self) -> None:
        schema = intersection(object_({"p": object_({"x": number()})}), object_({"p": object_({"y": number()})}))
        assert schema.parse({"p": {"x": 1, "y": 2}}) == {"p": {"x": 1, "y": 2}}

    def test_sequences_and_dates(self) -> None:
        assert intersection(array(number()), array(number().min(0))).parse([1, 2]) == [1, 2]
        assert intersection(tuple_([number()]), tuple_([number()])).parse([1]) == (1,)
        day = date(2024, 1, 1)
        assert intersection(date_(), date_().min(day)).parse(day) == day

    def test_scalars_must_be_identical(self) -> None:
        assert intersection(number(), number().int_()).parse(3) == 3
        assert not intersection(number(), number().transform(float)).guard(3)

    def test_flatten(self) -> None:
        schema = intersection(intersection(string(), string().min(1)), string().max(3))
        assert len(schema.members) == 3
