"""Number and bigint schemas.

``number()`` accepts ``int`` and ``float`` (never ``bool``, never NaN);
``bigint()`` accepts arbitrary precision ``int`` only. Both share the ordered
checks (min, max, range, multiple) and their aliases.
"""
from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Self

from ..checks import RANGE_FAMILY, Bound, Check, add_check, check_size, find_check, get_checks, has_check, remove_check, report
from ..coercion import DEFAULT_COERCER
from ..errors import IssueKind, SchemaDefinitionError
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED
from .base import ParseReturn, Schema, SchemaKind

MAX_SAFE_INTEGER = 2**53 - 1


def _decimals(value: int | float) -> int:
    exponent = Decimal(repr(value)).as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def _is_multiple(value: int | float, step: int | float) -> bool:
    """Float-safe remainder test (``0.3`` is a multiple of ``0.1``). Infinities are never multiples."""
    if isinstance(value, float) and not math.isfinite(value): return False
    if isinstance(value, int) and isinstance(step, int): return value % step == 0
    return Decimal(repr(value)) % Decimal(repr(step)) == 0


@dataclass(frozen=True, eq=False)
class OrderedSchema(Schema):
    """Shared behaviour of numeric schemas: coercion, type tag, ordered checks."""
    issue_kind: ClassVar[IssueKind]
    parsed_type: ClassVar[ParsedType]
    coerce_target: ClassVar[type]
    checks: tuple[Check, ...] = ()
    coerce_input: bool = False

    @staticmethod
    @abstractmethod
    def _admits(data: Any) -> bool: ...

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if self.coerce_input and ctx.data is not UNDEFINED: ctx.set_data(DEFAULT_COERCER.coerce_or_keep(ctx.data, self.coerce_target))
        if not self._admits(data := ctx.data): return ctx.invalid_type(self.parsed_type).abort()

        for check in self.checks:
            if check.name == "precision" and check.params.get("convert"):
                data = round(data, check.expected)
                continue
            if not self._run(ctx, check, data) and ctx.common.abort_early: return ctx.abort()

        return ctx.success(data) if ctx.is_valid() else ctx.abort()

    def _run(self, ctx: ParseContext, check: Check, data: Any) -> bool:
        if check.name == "multiple": return _is_multiple(data, check.expected) or report(ctx, self.issue_kind, check, data)
        return check_size(ctx, self.issue_kind, check, data)

    # =========================================================================
    # Checks
    # =========================================================================

    def add_check(self, check: Check, *, unique: bool = True) -> Self:
        return self._construct(checks=add_check(self.checks, check, unique=unique, family=RANGE_FAMILY))

    def remove_check(self, name: str) -> Self: return self._construct(checks=remove_check(self.checks, name))

    def has_check(self, name: str) -> bool: return has_check(self.checks, name)

    def get_checks(self, *names: str) -> list[Check]: return get_checks(self.checks, *names)

    def min(self, value: Any, *, inclusive: bool = True, message: str | None = None) -> Self:
        return self.add_check(Check("min", Bound(value, inclusive), message))

    def max(self, value: Any, *, inclusive: bool = True, message: str | None = None) -> Self:
        return self.add_check(Check("max", Bound(value, inclusive), message))

    def range(self, low: Any, high: Any, *, inclusive: str = "[]", message: str | None = None) -> Self:
        """Both bounds at once. ``inclusive`` is one of ``[]``, ``[)``, ``(]``, ``()``."""
        bounds = {"min": Bound(low, inclusive[0] == "["), "max": Bound(high, inclusive[1] == "]")}
        return self.add_check(Check("range", bounds, message))

    between = range

    def gt(self, value: Any, *, message: str | None = None) -> Self: return self.min(value, inclusive=False, message=message)

    def gte(self, value: Any, *, message: str | None = None) -> Self: return self.min(value, message=message)

    def lt(self, value: Any, *, message: str | None = None) -> Self: return self.max(value, inclusive=False, message=message)

    def lte(self, value: Any, *, message: str | None = None) -> Self: return self.max(value, message=message)

    def positive(self, *, message: str | None = None) -> Self: return self.gt(0, message=message)

    def nonnegative(self, *, message: str | None = None) -> Self: return self.gte(0, message=message)

    def negative(self, *, message: str | None = None) -> Self: return self.lt(0, message=message)

    def nonpositive(self, *, message: str | None = None) -> Self: return self.lte(0, message=message)

    def multiple(self, step: Any, *, message: str | None = None) -> Self:
        if step == 0 or (isinstance(step, float) and not math.isfinite(step)):
            raise SchemaDefinitionError(f"multiple() step must be a non-zero finite number, got {step!r}", step=repr(step))
        return self.add_check(Check("multiple", step, message))

    step = multiple

    def coerce(self, enabled: bool = True) -> Self: return self._construct(coerce_input=enabled)

    @property
    def min_value(self) -> Any:
        if check := find_check(self.checks, "range"): return check.expected["min"].value
        return check.expected.value if (check := find_check(self.checks, "min")) else None

    @property
    def max_value(self) -> Any:
        if check := find_check(self.checks, "range"): return check.expected["max"].value
        return check.expected.value if (check := find_check(self.checks, "max")) else None

    @property
    def multiple_of(self) -> Any:
        return check.expected if (check := find_check(self.checks, "multiple")) else None


@dataclass(frozen=True, eq=False)
class NumberSchema(OrderedSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.NUMBER
    issue_kind: ClassVar[IssueKind] = IssueKind.INVALID_NUMBER
    parsed_type: ClassVar[ParsedType] = ParsedType.NUMBER
    coerce_target: ClassVar[type] = float

    @staticmethod
    def _admits(data: Any) -> bool:
        return isinstance(data, (int, float)) and not isinstance(data, bool) and not (isinstance(data, float) and math.isnan(data))

    def _run(self, ctx: ParseContext, check: Check, data: Any) -> bool:
        kind = self.issue_kind
        match check.name:
            case "integer":
                return isinstance(data, int) or (isinstance(data, float) and data.is_integer()) or report(ctx, kind, check, data)
            case "finite":
                return not isinstance(data, float) or math.isfinite(data) or report(ctx, kind, check, data)
            case "safe":
                return -MAX_SAFE_INTEGER <= data <= MAX_SAFE_INTEGER or report(ctx, kind, check, data)
            case "port":
                return ((isinstance(data, int) or data.is_integer()) and 0 <= data <= 65535) or report(ctx, kind, check, data)
            case "precision":
                return _decimals(data) <= check.expected or report(ctx, kind, check, data)
        return super()._run(ctx, check, data)

    def integer(self, *, message: str | None = None) -> NumberSchema: return self.add_check(Check("integer", None, message))

    int_ = integer

    def finite(self, *, message: str | None = None) -> NumberSchema: return self.add_check(Check("finite", None, message))

    def safe(self, *, message: str | None = None) -> NumberSchema: return self.add_check(Check("safe", None, message))

    def port(self, *, message: str | None = None) -> NumberSchema: return self.add_check(Check("port", None, message))

    def precision(self, digits: int, *, convert: bool = False, message: str | None = None) -> NumberSchema:
        """At most ``digits`` decimal places; with ``convert`` the value is rounded instead of rejected."""
        return self.add_check(Check("precision", digits, message, {"convert": convert}))

    @property
    def is_integer(self) -> bool: return self.has_check("integer")

    @property
    def is_finite(self) -> bool: return self.has_check("finite")


@dataclass(frozen=True, eq=False)
class BigIntSchema(OrderedSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.BIGINT
    issue_kind: ClassVar[IssueKind] = IssueKind.INVALID_BIGINT
    parsed_type: ClassVar[ParsedType] = ParsedType.BIGINT
    coerce_target: ClassVar[type] = int

    @staticmethod
    def _admits(data: Any) -> bool:
        return isinstance(data, int) and not isinstance(data, bool)


def number(**options: Any) -> NumberSchema:
    return NumberSchema(options=make_options(**options))


def bigint(**options: Any) -> BigIntSchema:
    return BigIntSchema(options=make_options(**options))
