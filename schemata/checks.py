"""Checks Subsystem

Named validation rules attached to primitive and collection schemas. A schema
holds its checks as an ordered tuple; adding a check returns a new tuple with
same-name and superseded checks removed and the new check appended.

Checks run after the type tag has been validated, in list order. Each failing
check records one issue; the caller decides whether to stop (abort-early) or
continue.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .errors import IssueKind
    from .parse import ParseContext


@dataclass(frozen=True, slots=True)
class Bound:
    """A lower or upper bound, inclusive or exclusive."""
    value: Any
    inclusive: bool = True

    def admits_min(self, received: Any) -> bool: return received >= self.value if self.inclusive else received > self.value

    def admits_max(self, received: Any) -> bool: return received <= self.value if self.inclusive else received < self.value

    def to_dict(self) -> dict[str, Any]: return {"value": self.value, "inclusive": self.inclusive}


@dataclass(frozen=True, slots=True)
class Check:
    """A named rule with its expected parameters and an optional explicit message."""
    name: str
    expected: Any = None
    message: str | None = None
    params: Mapping[str, Any] = field(default_factory=dict)
    validator: Any = field(default=None, compare=False)

    def payload(self, received: Any = None, **extra: Any) -> dict[str, Any]:
        """Issue payload for a failure of this check."""
        return {"check": self.name, "expected": _expected(self.expected), "received": received, **self.params, **extra}


def _expected(value: Any) -> Any:
    if isinstance(value, Bound): return value.to_dict()
    if isinstance(value, Mapping): return {k: _expected(v) for k, v in value.items()}
    return value


# Mutually exclusive families: adding the key removes the listed names.
LENGTH_FAMILY: dict[str, tuple[str, ...]] = {"length": ("min", "max"), "min": ("length",), "max": ("length",)}
SIZE_FAMILY: dict[str, tuple[str, ...]] = {"size": ("min", "max"), "min": ("size",), "max": ("size",)}
RANGE_FAMILY: dict[str, tuple[str, ...]] = {"range": ("min", "max"), "min": ("range",), "max": ("range",)}


# =============================================================================
# Check list operations
# =============================================================================

def add_check(checks: tuple[Check, ...], check: Check, *, unique: bool = True,
              family: Mapping[str, tuple[str, ...]] | None = None) -> tuple[Check, ...]:
    """Append ``check``, dropping same-name checks (when ``unique``) and superseded family members."""
    removed = set((family or {}).get(check.name, ()))
    if unique: removed.add(check.name)
    return (*(c for c in checks if c.name not in removed), check)


def remove_check(checks: tuple[Check, ...], name: str) -> tuple[Check, ...]:
    return tuple(c for c in checks if c.name != name)


def has_check(checks: Iterable[Check], name: str) -> bool: return any(c.name == name for c in checks)


def get_checks(checks: Iterable[Check], *names: str) -> list[Check]:
    """Checks with the given names, or all checks when no names are given."""
    return [c for c in checks if not names or c.name in names]


def find_check(checks: Iterable[Check], name: str) -> Check | None:
    """Last check with ``name``. Later checks win when duplicates are allowed."""
    found = None
    for c in checks:
        if c.name == name: found = c
    return found


# =============================================================================
# Evaluators
# =============================================================================

def report(ctx: ParseContext, kind: IssueKind, check: Check, received: Any = None, **extra: Any) -> bool:
    """Record a failed check. Always returns False so callers can ``return report(...)``."""
    ctx.add_issue(kind, check.payload(received, **extra), check.message)
    return False


def check_min(ctx: ParseContext, kind: IssueKind, check: Check, received: Any) -> bool:
    return check.expected.admits_min(received) or report(ctx, kind, check, received)


def check_max(ctx: ParseContext, kind: IssueKind, check: Check, received: Any) -> bool:
    return check.expected.admits_max(received) or report(ctx, kind, check, received)


def check_range(ctx: ParseContext, kind: IssueKind, check: Check, received: Any) -> bool:
    low, high = check.expected["min"], check.expected["max"]
    return (low.admits_min(received) and high.admits_max(received)) or report(ctx, kind, check, received)


def check_exact(ctx: ParseContext, kind: IssueKind, check: Check, received: Any) -> bool:
    return received == check.expected or report(ctx, kind, check, received)


def check_size(ctx: ParseContext, kind: IssueKind, check: Check, received: Any) -> bool:
    """Dispatch the shared size checks (min, max, range, length, size). Other names pass."""
    match check.name:
        case "min":
            return check_min(ctx, kind, check, received)
        case "max":
            return check_max(ctx, kind, check, received)
        case "range":
            return check_range(ctx, kind, check, received)
        case "length" | "size":
            return check_exact(ctx, kind, check, received)
    return True
