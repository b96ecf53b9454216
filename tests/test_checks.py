"""Tests for the checks subsystem.

Tests cover:
- Bound admission (inclusive and exclusive)
- add_check replacement and family supersession
- Check payload shapes
- has_check / get_checks on schemas
- Ordered evaluation with collect-all and abort-early
"""

from __future__ import annotations

from schemata import IssueKind, array, number, set_, string
from schemata.checks import (
    LENGTH_FAMILY,
    RANGE_FAMILY,
    SIZE_FAMILY,
    Bound,
    Check,
    add_check,
    find_check,
    get_checks,
    has_check,
    remove_check,
)


# ---------------------------------------------------------------------------
# Check list operations
# ---------------------------------------------------------------------------


class TestBound:
    def test_inclusive(self) -> None:
        bound = Bound(3)
        assert bound.admits_min(3) and bound.admits_max(3)
        assert not bound.admits_min(2)

    def test_exclusive(self) -> None:
        bound = Bound(3, inclusive=False)
        assert not bound.admits_min(3) and not bound.admits_max(3)
        assert bound.admits_min(4) and bound.admits_max(2)


class TestAddCheck:
    def test_same_name_replaced_and_appended(self) -> None:
        checks = add_check((Check("min", Bound(1)), Check("email")), Check("min", Bound(5)))

        assert [c.name for c in checks] == ["email", "min"]
        assert checks[-1].expected.value == 5

    def test_non_unique_checks_accumulate(self) -> None:
        checks = add_check((Check("pattern", "a"),), Check("pattern", "b"), unique=False)
        assert [c.expected for c in checks] == ["a", "b"]

    def test_length_supersedes_min_and_max(self) -> None:
        checks = (Check("min", Bound(1)), Check("max", Bound(9)))
        assert [c.name for c in add_check(checks, Check("length", 4), family=LENGTH_FAMILY)] == ["length"]
        assert [c.name for c in add_check((Check("length", 4),), Check("min", Bound(1)), family=LENGTH_FAMILY)] == ["min"]

    def test_size_and_range_families(self) -> None:
        assert [c.name for c in add_check((Check("min", Bound(1)),), Check("size", 2), family=SIZE_FAMILY)] == ["size"]
        bounds = {"min": Bound(0), "max": Bound(1)}
        assert [c.name for c in add_check((Check("max", Bound(1)),), Check("range", bounds), family=RANGE_FAMILY)] == ["range"]

    def test_remove_and_lookup(self) -> None:
        checks = (Check("min", Bound(1)), Check("pattern", "a"), Check("pattern", "b"))

        assert has_check(checks, "pattern") and not has_check(checks, "max")
        assert [c.expected for c in get_checks(checks, "pattern")] == ["a", "b"]
        assert len(get_checks(checks)) == 3
        assert find_check(checks, "pattern").expected == "b"
        assert [c.name for c in remove_check(checks, "pattern")] == ["min"]


def test_payload_serializes_bounds() -> None:
    check = Check("min", Bound(3, inclusive=False))
    assert check.payload(1) == {"check": "min", "expected": {"value": 3, "inclusive": False}, "received": 1}

    ranged = Check("range", {"min": Bound(1), "max": Bound(2, inclusive=False)})
    assert ranged.payload(5)["expected"] == {"min": {"value": 1, "inclusive": True}, "max": {"value": 2, "inclusive": False}}


# ---------------------------------------------------------------------------
# Schema level behaviour
# ---------------------------------------------------------------------------


class TestSchemaChecks:
    def test_modifiers_do_not_touch_the_receiver(self) -> None:
        base = string()
        bounded = base.min(2)

        assert not base.has_check("min")
        assert bounded.has_check("min")
        assert base.guard("a") and not bounded.guard("a")

    def test_string_length_replaces_bounds(self) -> None:
        schema = string().min(1).max(10).length(3)

        assert [c.name for c in schema.get_checks()] == ["length"]
        assert schema.min_length == 3 and schema.max_length == 3

    def test_number_range_replaces_bounds(self) -> None:
        schema = number().min(1).max(5).range(2, 4)
        assert [c.name for c in schema.get_checks()] == ["range"]
        assert (schema.min_value, schema.max_value) == (2, 4)

    def test_set_size_family(self) -> None:
        schema = set_(number()).min(1).size(2)
        assert schema.min_items == 2 and schema.max_items == 2

    def test_collect_all_reports_every_failing_check(self) -> None:
        result = string().min(5).email().starts_with("x").safe_parse("abc")

        assert [i.payload["check"] for i in result.error.issues] == ["min", "email", "starts_with"]
        assert all(i.kind is IssueKind.INVALID_STRING for i in result.error.issues)

    def test_abort_early_stops_at_first_failing_check(self) -> None:
        result = string().min(5).email().safe_parse("abc", abort_early=True)

        assert len(result.error.issues) == 1
        assert result.error.issues[0].payload["check"] == "min"

    def test_explicit_check_message_wins(self) -> None:
        result = array(number()).min(2, message="Need two").safe_parse([1])
        assert result.error.messages == ["Need two"]

    def test_check_payload_reaches_issue(self) -> None:
        issue = number().gt(3).safe_parse(3).error.issues[0]
        assert issue.payload == {"check": "min", "expected": {"value": 3, "inclusive": False}, "received": 3}
        assert issue.message == "Number must be greater than 3"
