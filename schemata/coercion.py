"""Explicit Opt-in Coercion System

Coercion is never implicit: a primitive only converts its input after
``.coerce()`` has been called on it. Conversion runs before the type tag check,
so a failed conversion simply leaves the input untouched and the type check
reports it.

Features:
- Type-safe coercion with Result types
- Extensible rule registry
- No silent data loss: lossy conversions (``"1.5"`` to int) are refused
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Generic, TypeVar

from .errors import Err, ErrorCode, Ok, Result, SchemataError

T = TypeVar("T")
S = TypeVar("S")


def _failure(message: str, code: ErrorCode = ErrorCode.E2002_INVALID_FORMAT, **metadata: Any) -> Err[SchemataError]:
    return Err(SchemataError(message, code=code, **metadata))


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[S, T]):
    """Base class for coercion rules.

    Each rule defines:
    - Source type(s) it can coerce from
    - Target type it coerces to
    - Validation of coercion feasibility
    - The actual coercion logic
    """

    @property
    @abstractmethod
    def source_types(self) -> tuple[type, ...]:
        """Types this rule can coerce from."""

    @property
    @abstractmethod
    def target_type(self) -> type[T]:
        """Type this rule coerces to."""

    def can_coerce(self, value: Any) -> bool:
        """Check if value can be coerced to target type."""
        return isinstance(value, self.source_types) and not isinstance(value, bool) and self.coerce(value).is_ok()

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, SchemataError]:
        """Coerce value to target type. Returns Result."""

    def __call__(self, value: Any) -> Result[T, SchemataError]:
        return self.coerce(value)


@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[str, int]):
    """Coerce string (or integral float) to integer."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, float, Decimal)

    @property
    def target_type(self) -> type[int]:
        return int

    def coerce(self, value: Any) -> Result[int, SchemataError]:
        if isinstance(value, (float, Decimal)):
            if (isinstance(value, float) and not math.isfinite(value)) or value != int(value):
                return _failure(f"Cannot coerce {value!r} to int without losing precision", value=value)
            return Ok(int(value))
        if not isinstance(value, str):
            return _failure(f"Cannot coerce {type(value).__name__} to int", ErrorCode.E2004_INVALID_TYPE)
        try:
            return Ok(int(value.strip()))
        except ValueError as e:
            return _failure(f"Cannot coerce '{value}' to int: {e}", value=value, target="int")


@dataclass(frozen=True, slots=True)
class StringToFloat(CoercionRule[str, float]):
    """Coerce string or Decimal to float."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, Decimal)

    @property
    def target_type(self) -> type[float]:
        return float

    def coerce(self, value: Any) -> Result[float, SchemataError]:
        if isinstance(value, Decimal):
            return Ok(float(value))
        if not isinstance(value, str):
            return _failure(f"Cannot coerce {type(value).__name__} to float", ErrorCode.E2004_INVALID_TYPE)
        try:
            return Ok(float(value.strip()))
        except ValueError as e:
            return _failure(f"Cannot coerce '{value}' to float: {e}")


@dataclass(frozen=True, slots=True)
class StringToNumber(CoercionRule[str, float]):
    """Coerce to the narrowest number: integral strings become int, others float."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, Decimal, bool)

    @property
    def target_type(self) -> type[float]:
        return float

    def coerce(self, value: Any) -> Result[int | float, SchemataError]:
        if isinstance(value, bool):
            return Ok(int(value))
        as_int = StringToInt().coerce(value)
        return as_int if as_int.is_ok() else StringToFloat().coerce(value)


@dataclass(frozen=True, slots=True)
class StringToBool(CoercionRule[str, bool]):
    """Coerce string to boolean.

    Truthy: "true", "1", "yes", "on", "y"
    Falsy: "false", "0", "no", "off", "n"
    """
    true_values: frozenset[str] = frozenset({"true", "1", "yes", "on", "y"})
    false_values: frozenset[str] = frozenset({"false", "0", "no", "off", "n"})

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str, int)

    @property
    def target_type(self) -> type[bool]:
        return bool

    def coerce(self, value: Any) -> Result[bool, SchemataError]:
        if isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
            return Ok(bool(value))
        if not isinstance(value, str):
            return _failure(f"Cannot coerce {type(value).__name__} to bool", ErrorCode.E2004_INVALID_TYPE)

        lower = value.strip().lower()
        if lower in self.true_values:
            return Ok(True)
        if lower in self.false_values:
            return Ok(False)

        return _failure(f"Cannot coerce '{value}' to bool. Valid values: {sorted(self.true_values | self.false_values)}")


@dataclass(frozen=True, slots=True)
class ISO8601ToDateTime(CoercionRule[str, datetime]):
    """Coerce ISO8601 string to datetime."""
    default_timezone: timezone | None = None

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[datetime]:
        return datetime

    def coerce(self, value: Any) -> Result[datetime, SchemataError]:
        if not isinstance(value, str):
            return _failure(f"Cannot coerce {type(value).__name__} to datetime", ErrorCode.E2004_INVALID_TYPE)
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            return _failure(f"Invalid ISO8601 datetime '{value}': {e}")
        if dt.tzinfo is None and self.default_timezone:
            dt = dt.replace(tzinfo=self.default_timezone)
        return Ok(dt)


@dataclass(frozen=True, slots=True)
class TimestampToDateTime(CoercionRule[float, datetime]):
    """Coerce POSIX timestamp (seconds) to an aware UTC datetime."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (int, float)

    @property
    def target_type(self) -> type[datetime]:
        return datetime

    def coerce(self, value: Any) -> Result[datetime, SchemataError]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _failure(f"Cannot coerce {type(value).__name__} to datetime", ErrorCode.E2004_INVALID_TYPE)
        try:
            return Ok(datetime.fromtimestamp(value, tz=timezone.utc))
        except (OverflowError, OSError, ValueError) as e:
            return _failure(f"Timestamp {value} out of range: {e}", ErrorCode.E2003_OUT_OF_RANGE)


@dataclass(frozen=True, slots=True)
class DateToDateTime(CoercionRule[date, datetime]):
    """Widen a calendar date to midnight of that day."""

    @property
    def source_types(self) -> tuple[type, ...]:
        return (date,)

    @property
    def target_type(self) -> type[datetime]:
        return datetime

    def coerce(self, value: Any) -> Result[datetime, SchemataError]:
        if not isinstance(value, date):
            return _failure(f"Cannot coerce {type(value).__name__} to datetime", ErrorCode.E2004_INVALID_TYPE)
        return Ok(datetime(value.year, value.month, value.day))


@dataclass(frozen=True, slots=True)
class ExplicitCoercion:
    """Coercion system with explicit opt-in rules.

    Usage:
        coercer = ExplicitCoercion()
        result = coercer.coerce("123", int)  # Ok(123)
        result = coercer.coerce("invalid", int)  # Err(SchemataError)
    """
    rules: tuple[CoercionRule, ...] = field(default_factory=lambda: (
        StringToInt(),
        StringToNumber(),
        StringToBool(),
        ISO8601ToDateTime(),
        DateToDateTime(),
        TimestampToDateTime(),
    ))

    def add_rule(self, rule: CoercionRule) -> ExplicitCoercion:
        """Add a coercion rule, returning new instance."""
        return ExplicitCoercion(rules=(*self.rules, rule))

    def coerce(self, value: Any, target_type: type[T]) -> Result[T, SchemataError]:
        """Attempt to coerce value to target type."""
        if isinstance(value, target_type):
            return Ok(value)

        for rule in self.rules:
            if rule.target_type is target_type and isinstance(value, rule.source_types):
                if (result := rule.coerce(value)).is_ok():
                    return result

        return _failure(f"Cannot coerce {type(value).__name__} to {target_type.__name__}", ErrorCode.E2004_INVALID_TYPE,
            source_type=type(value).__name__, target_type=target_type.__name__)

    def coerce_or_keep(self, value: Any, target_type: type[T]) -> Any:
        """Coerced value, or the original when no rule applies."""
        return self.coerce(value, target_type).unwrap_or(value)


# Default coercion instance
DEFAULT_COERCER = ExplicitCoercion()


def coerce(value: Any, target_type: type[T]) -> Result[T, SchemataError]:
    """Convenience function using default coercer."""
    return DEFAULT_COERCER.coerce(value, target_type)
