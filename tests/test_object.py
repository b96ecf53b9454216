"""Tests for the object schema.

Tests cover:
- Unknown key policies (strip, passthrough, strict, catchall precedence)
- Output presence rules for optional, defaulted and deleted keys
- Shape helpers (pick, omit, extend, merge, partial, required, deep_partial, keyof)
- Conditional shape rewriting with when()
- Shape references with ref()
"""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from schemata import (
    UNDEFINED,
    ErrorCode,
    IssueKind,
    SchemaDefinitionError,
    SchemaKind,
    array,
    literal,
    number,
    object_,
    ref,
    string,
    tuple_,
    union,
    when,
)


def _user():
    return object_({"name": string(), "age": number().optional()})


# ---------------------------------------------------------------------------
# Type and unknown keys
# ---------------------------------------------------------------------------


class TestUnknownKeys:
    def test_requires_mapping(self) -> None:
        issue = _user().safe_parse(["name"]).error.issues[0]
        assert issue.payload == {"expected": "object", "received": "array"}

    def test_strip_is_default(self) -> None:
        assert _user().parse({"name": "a", "extra": 1}) == {"name": "a"}

    def test_passthrough(self) -> None:
        assert _user().passthrough().parse({"name": "a", "extra": 1}) == {"name": "a", "extra": 1}

    def test_strict_reports_one_sorted_issue(self) -> None:
        result = _user().strict().safe_parse({"name": "a", "zeta": 1, "alpha": 2})
        assert len(result.error.issues) == 1
        issue = result.error.issues[0]
        assert issue.kind is IssueKind.UNRECOGNIZED_KEYS
        assert issue.payload == {"keys": ["alpha", "zeta"]}
        assert issue.message == "Unrecognized key(s) in object: 'alpha', 'zeta'"
        assert issue.path == ()

    def test_strict_custom_message(self) -> None:
        assert _user().strict("No extras").safe_parse({"name": "a", "x": 1}).error.messages == ["No extras"]

    def test_catchall_wins_over_policy(self) -> None:
        schema = _user().strict().catchall(number())
        assert schema.parse({"name": "a", "x": 1}) == {"name": "a", "x": 1}
        assert schema.safe_parse({"name": "a", "x": "1"}).error.issues[0].path == ("x",)
        assert schema.remove_catchall().safe_parse({"name": "a", "x": 1}).error.issues[0].kind is IssueKind.UNRECOGNIZED_KEYS

    def test_strip_after_strict(self) -> None:
        assert _user().strict().strip().parse({"name": "a", "x": 1}) == {"name": "a"}


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class TestOutput:
    def test_absent_optional_key_is_left_out(self) -> None:
        assert _user().parse({"name": "a"}) == {"name": "a"}
        assert "age" not in _user().parse({"name": "a"})

    def test_default_is_added(self) -> None:
        schema = object_({"role": string().default("user")})
        assert schema.parse({}) == {"role": "user"}

    def test_absent_key_takes_catch_and_transform_output(self) -> None:
        assert object_({"a": number().catch(5)}).parse({}) == {"a": 5}
        assert object_({"a": number().optional().transform(lambda v: v or 0)}).parse({}) == {"a": 0}

    def test_missing_required_key(self) -> None:
        issue = _user().safe_parse({}).error.issues[0]
        assert issue.kind is IssueKind.REQUIRED
        assert issue.path == ("name",)

    def test_deleted_key_is_validated_then_dropped(self) -> None:
        schema = object_({"name": string(), "confirm": string().delete()}).strict()
        assert schema.parse({"name": "a", "confirm": "b"}) == {"name": "a"}
        assert schema.safe_parse({"name": "a", "confirm": 1}).error.issues[0].path == ("confirm",)

    def test_collects_issues_in_declaration_order(self) -> None:
        schema = object_({"a": string(), "b": number(), "c": object_({"d": string()})})
        result = schema.safe_parse({"a": 1, "b": "x", "c": {"d": 2}})
        assert [i.field_path for i in result.error.issues] == ["a", "b", "c.d"]

    def test_accepts_any_mapping_and_returns_dict(self) -> None:
        from types import MappingProxyType
        assert _user().parse(MappingProxyType({"name": "a"})) == {"name": "a"}

    def test_shape_entries_must_be_schemas(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            object_({"a": str})


# ---------------------------------------------------------------------------
# Shape helpers
# ---------------------------------------------------------------------------


class TestShapeHelpers:
    def test_keys_values_entries_keyof(self) -> None:
        schema = _user()
        assert schema.keys() == ["name", "age"]
        assert [s.kind for s in schema.values()] == [SchemaKind.STRING, SchemaKind.OPTIONAL]
        assert [k for k, _ in schema.entries()] == ["name", "age"]
        assert schema.keyof().parse("age") == "age"
        assert not schema.keyof().guard("email")

    def test_pick_and_omit(self) -> None:
        assert _user().pick("name").keys() == ["name"]
        assert _user().omit("name").keys() == ["age"]
        with pytest.raises(SchemaDefinitionError):
            _user().pick("email")

    def test_extend_and_set_key(self) -> None:
        schema = _user().extend({"email": string().email()}).set_key("name", number())
        assert schema.keys() == ["name", "age", "email"]
        assert schema.shape["name"].kind is SchemaKind.NUMBER
        assert _user().augment({"x": string()}).keys() == ["name", "age", "x"]

    def test_merge_takes_policy_from_other(self) -> None:
        merged = _user().merge(object_({"name": number(), "id": string()}).strict())
        assert merged.keys() == ["name", "age", "id"]
        assert merged.unknown_keys == "strict"
        assert merged.shape["name"].kind is SchemaKind.NUMBER

    def test_partial_and_required(self) -> None:
        assert _user().partial().parse({}) == {}
        assert _user().partial("age").safe_parse({}).error.issues[0].path == ("name",)
        assert _user().required().safe_parse({"name": "a"}).error.issues[0].path == ("age",)
        assert _user().required("name").parse({"name": "a"}) == {"name": "a"}

    def test_deep_partial(self) -> None:
        schema = object_({"user": object_({"name": string()}), "tags": array(object_({"t": string()}))}).deep_partial()
        assert schema.parse({}) == {}
        assert schema.parse({"user": {}, "tags": [{}]}) == {"user": {}, "tags": [{}]}

    def test_pick_optional_and_required(self) -> None:
        schema = object_({"a": string(), "b": string().optional(), "c": string().default("x")})
        assert schema.pick_optional().keys() == ["b", "c"]
        assert schema.pick_required().keys() == ["a"]

    def test_helpers_do_not_touch_the_receiver(self) -> None:
        base = _user()
        base.extend({"x": string()}).strict()
        assert base.keys() == ["name", "age"] and base.unknown_keys == "strip"


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


class TestConditions:
    def _account(self):
        return object_({"kind": string(), "company": string().optional()}).when(
            "kind", is_="business", then=lambda s: s.required("company"), otherwise=lambda s: s.omit("company"))

    def test_then_branch(self) -> None:
        schema = self._account()
        assert schema.parse({"kind": "business", "company": "ACME"}) == {"kind": "business", "company": "ACME"}
        assert schema.safe_parse({"kind": "business"}).error.issues[0].path == ("company",)

    def test_otherwise_branch(self) -> None:
        assert self._account().parse({"kind": "personal", "company": "ACME"}) == {"kind": "personal"}

    def test_original_schema_is_untouched(self) -> None:
        schema = self._account()
        schema.parse({"kind": "business", "company": "x"})
        assert schema.shape["company"].is_optional

    def test_schema_predicate_and_nested_path(self) -> None:
        schema = object_({"meta": object_({"v": number()}), "extra": string().optional()}).when(
            "meta.v", is_=number().gt(1), then=lambda s: s.required("extra"))
        assert schema.guard({"meta": {"v": 1}})
        assert not schema.guard({"meta": {"v": 2}})

    def test_exists_and_not(self) -> None:
        base = object_({"a": string().optional(), "b": string().optional()})
        needs_b = base.when(when("a", exists=True, then=lambda s: s.required("b")))
        assert needs_b.guard({}) and not needs_b.guard({"a": "x"})

        not_admin = base.when("a", not_=lambda v: v == "admin", then=lambda s: s.strict())
        assert not not_admin.guard({"a": "user", "z": 1})
        assert not_admin.guard({"a": "admin", "z": 1})

    def test_plain_value_matches_with_type_identity(self) -> None:
        schema = object_({"flag": number().or_(literal(True))}).when("flag", is_=1, then=lambda s: s.strict())
        assert not schema.guard({"flag": 1, "extra": 0})
        assert schema.guard({"flag": True, "extra": 0})

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"then": lambda s: s},
            {"is_": 1, "exists": True, "then": lambda s: s},
            {"is_": 1},
        ],
    )
    def test_invalid_condition(self, kwargs: dict) -> None:
        with pytest.raises(SchemaDefinitionError) as excinfo:
            when("a", **kwargs)
        assert excinfo.value.code is ErrorCode.E9104_INVALID_CONDITION


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestRefs:
    def test_ref_clones_sibling_schema(self) -> None:
        schema = object_({"password": string().min(8), "confirm": ref("password")})
        assert schema.shape["confirm"].kind is SchemaKind.STRING
        assert schema.shape["confirm"] is not schema.shape["password"]
        assert schema.safe_parse({"password": "longenough", "confirm": "short"}).error.issues[0].path == ("confirm",)

    def test_nested_paths(self) -> None:
        schema = object_({
            "address": object_({"zip": string().length(5)}).optional(),
            "coords": tuple_([number(), number().int_()]),
            "billing_zip": ref("address.zip"),
            "y": ref("coords[1]"),
        })
        assert schema.shape["billing_zip"].min_length == 5
        assert schema.shape["y"].is_integer

    def test_union_member_lookup(self) -> None:
        schema = object_({
            "shape": union(object_({"kind": literal("circle"), "r": number().positive()}), object_({"kind": literal("sq")})),
            "radius": ref("shape.r"),
        })
        assert not schema.shape["radius"].guard(-1)

    def test_ref_to_ref(self) -> None:
        schema = object_({"a": string().max(2), "b": ref("a"), "c": ref("b")})
        assert schema.shape["c"].max_length == 2

    def test_tuple_items(self) -> None:
        schema = tuple_([string().uppercase(), ref("0")])
        assert schema.parse(["a", "b"]) == ("A", "B")

    def test_unresolved_ref(self) -> None:
        with capture_logs() as logs:
            with pytest.raises(SchemaDefinitionError, match="Unable to resolve path for ref: missing.key") as excinfo:
                object_({"a": string(), "b": ref("missing.key")})
        assert excinfo.value.code is ErrorCode.E9101_UNRESOLVED_REF
        assert logs[0]["event"] == "ref.unresolved"

    def test_traversal_through_non_object(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            object_({"a": string(), "b": ref("a.length")})

    def test_self_reference_and_cycles(self) -> None:
        with pytest.raises(SchemaDefinitionError) as excinfo:
            object_({"a": ref("a")})
        assert excinfo.value.code is ErrorCode.E9102_SELF_REFERENCE
        with pytest.raises(SchemaDefinitionError):
            object_({"a": ref("b"), "b": ref("a")})

    def test_ref_outside_a_shape_fails_at_parse(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            ref("a").parse("x")

    def test_wrapped_ref(self) -> None:
        schema = object_({"a": number(), "b": ref("a").optional(), "c": ref("a").nullable().default(1)})
        assert schema.shape["b"].kind is SchemaKind.OPTIONAL
        assert schema.shape["b"].unwrap().kind is SchemaKind.NUMBER
        assert schema.parse({"a": 1}) == {"a": 1, "c": 1}
        assert schema.parse({"a": 1, "b": 2, "c": None}) == {"a": 1, "b": 2, "c": None}
        assert schema.safe_parse({"a": 1, "b": "x"}).error.issues[0].path == ("b",)

    def test_wrapped_unresolved_ref_fails_at_construction(self) -> None:
        with pytest.raises(SchemaDefinitionError) as excinfo:
            object_({"a": number(), "b": ref("missing").optional()})
        assert excinfo.value.code is ErrorCode.E9101_UNRESOLVED_REF
        with pytest.raises(SchemaDefinitionError):
            tuple_([number(), ref("5").nullable()])

    def test_ref_to_wrapped_ref(self) -> None:
        schema = object_({"a": string().max(2), "b": ref("a").optional(), "c": ref("b")})
        assert schema.shape["c"].kind is SchemaKind.OPTIONAL
        assert schema.shape["c"].unwrap().max_length == 2

    def test_partial_keeps_resolved_refs(self) -> None:
        schema = object_({"a": string(), "b": ref("a")}).partial()
        assert schema.parse({}) == {}
        assert schema.parse({"b": "x"}) == {"b": "x"}


def test_missing_input_is_required() -> None:
    assert _user().safe_parse(UNDEFINED).error.issues[0].kind is IssueKind.REQUIRED
