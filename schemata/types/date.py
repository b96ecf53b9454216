"""Date schema: ``datetime`` and ``date`` values with ordered bounds."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, ClassVar

from ..checks import RANGE_FAMILY, Bound, Check, add_check, check_size, find_check, get_checks, has_check, remove_check
from ..coercion import DEFAULT_COERCER
from ..errors import IssueKind
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED
from .base import ParseReturn, Schema, SchemaKind


def _align(value: date, bound: date) -> date:
    """Bring ``bound`` to the same flavour as ``value`` so the two compare."""
    if isinstance(value, datetime):
        if not isinstance(bound, datetime): bound = datetime(bound.year, bound.month, bound.day, tzinfo=value.tzinfo)
        if (value.tzinfo is None) != (bound.tzinfo is None):
            bound = bound.replace(tzinfo=None) if value.tzinfo is None else bound.replace(tzinfo=timezone.utc)
        return bound
    return bound.date() if isinstance(bound, datetime) else bound


def _aligned(check: Check, value: date) -> Check:
    expected = check.expected
    if isinstance(expected, Bound): return Check(check.name, Bound(_align(value, expected.value), expected.inclusive), check.message)
    return Check(check.name, {k: Bound(_align(value, b.value), b.inclusive) for k, b in expected.items()}, check.message)


@dataclass(frozen=True, eq=False)
class DateSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.DATE
    checks: tuple[Check, ...] = ()
    coerce_input: bool = False

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if self.coerce_input and ctx.data is not UNDEFINED and not isinstance(ctx.data, date):
            ctx.set_data(DEFAULT_COERCER.coerce_or_keep(ctx.data, datetime))
        if not isinstance(data := ctx.data, date): return ctx.invalid_type(ParsedType.DATE).abort()

        for check in self.checks:
            if not check_size(ctx, IssueKind.INVALID_DATE, _aligned(check, data), data) and ctx.common.abort_early: return ctx.abort()

        return ctx.success(data) if ctx.is_valid() else ctx.abort()

    def add_check(self, check: Check, *, unique: bool = True) -> DateSchema:
        return self._construct(checks=add_check(self.checks, check, unique=unique, family=RANGE_FAMILY))

    def remove_check(self, name: str) -> DateSchema: return self._construct(checks=remove_check(self.checks, name))

    def has_check(self, name: str) -> bool: return has_check(self.checks, name)

    def get_checks(self, *names: str) -> list[Check]: return get_checks(self.checks, *names)

    def min(self, value: date, *, inclusive: bool = True, message: str | None = None) -> DateSchema:
        return self.add_check(Check("min", Bound(value, inclusive), message))

    def max(self, value: date, *, inclusive: bool = True, message: str | None = None) -> DateSchema:
        return self.add_check(Check("max", Bound(value, inclusive), message))

    def after(self, value: date, *, message: str | None = None) -> DateSchema: return self.min(value, inclusive=False, message=message)

    def before(self, value: date, *, message: str | None = None) -> DateSchema: return self.max(value, inclusive=False, message=message)

    def range(self, low: date, high: date, *, inclusive: str = "[]", message: str | None = None) -> DateSchema:
        bounds = {"min": Bound(low, inclusive[0] == "["), "max": Bound(high, inclusive[1] == "]")}
        return self.add_check(Check("range", bounds, message))

    between = range

    def coerce(self, enabled: bool = True) -> DateSchema:
        """Accept ISO 8601 strings and POSIX timestamps."""
        return self._construct(coerce_input=enabled)

    @property
    def min_date(self) -> date | None:
        if check := find_check(self.checks, "range"): return check.expected["min"].value
        return check.expected.value if (check := find_check(self.checks, "min")) else None

    @property
    def max_date(self) -> date | None:
        if check := find_check(self.checks, "range"): return check.expected["max"].value
        return check.expected.value if (check := find_check(self.checks, "max")) else None


def date_(**options: Any) -> DateSchema:
    return DateSchema(options=make_options(**options))
