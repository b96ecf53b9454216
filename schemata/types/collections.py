"""Container schemas: array, set, tuple, record and map.

All of them validate the container tag first, then their size checks, then
every element as a child context (index path segments for arrays, sets and
tuples; ``[key, "key"]`` / ``[key, "value"]`` for records and maps).
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from ..checks import LENGTH_FAMILY, SIZE_FAMILY, Bound, Check, add_check, check_size, find_check, get_checks, has_check, remove_check, report
from ..errors import IssueKind
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED
from .base import ParseResult, ParseReturn, Schema, SchemaKind, parse_children


def _size_checks(ctx: ParseContext, kind: IssueKind, checks: tuple[Check, ...], size: int) -> bool:
    """Run min/max/length/size checks. False means abort-early stopped the parse."""
    for check in checks:
        if check.name in ("min", "max", "length", "size") and not check_size(ctx, kind, check, size) and ctx.common.abort_early:
            return False
    return True


def _values(results: list[ParseResult]) -> list[Any]:
    return [r.value for r in results if r.ok]


def _as_set(ctx: ParseContext, kind: IssueKind, values: list[Any]) -> ParseResult:
    """Build the ``set`` output; an unhashable item is an issue rather than a crash."""
    try:
        return ctx.success(set(values))
    except TypeError:
        unhashable = next(v for v in values if not _hashable(v))
        return report(ctx, kind, Check("hashable"), type(unhashable).__name__) or ctx.abort()


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


# =============================================================================
# Array
# =============================================================================

@dataclass(frozen=True, eq=False)
class ArraySchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.ARRAY
    element: Schema
    checks: tuple[Check, ...] = ()
    coerce_input: bool = False
    cast_output: bool = False

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if self.coerce_input and isinstance(ctx.data, (set, frozenset)): ctx.set_data(list(ctx.data))
        if not isinstance(ctx.data, (list, tuple)): return ctx.invalid_type(ParsedType.ARRAY).abort()

        data = [v for v in ctx.data if v] if self.has_check("compact") else list(ctx.data)
        if not _size_checks(ctx, IssueKind.INVALID_ARRAY, self.checks, len(data)): return ctx.abort()

        return parse_children(ctx, [(self.element, v, (i,)) for i, v in enumerate(data)],
            lambda results: self._finalize(ctx, _values(results)))

    def _finalize(self, ctx: ParseContext, values: list[Any]) -> ParseResult:
        for check in self.checks:
            if check.name == "sorted":
                try:
                    ordered = sorted(values, key=check.params["key"], reverse=check.params["reverse"])
                except TypeError as exc:
                    if not report(ctx, IssueKind.INVALID_ARRAY, check, None, reason=str(exc)) and ctx.common.abort_early: return ctx.abort()
                    continue
                if not check.params["enforce"]: values = ordered
                elif ordered != values and not report(ctx, IssueKind.INVALID_ARRAY, check, None) and ctx.common.abort_early:
                    return ctx.abort()
            elif check.name == "unique":
                kept, duplicates = _dedupe(values, check.params["key"])
                if not check.params["enforce"]: values = kept
                elif duplicates and not report(ctx, IssueKind.INVALID_ARRAY, check, {"duplicates": duplicates}) and ctx.common.abort_early:
                    return ctx.abort()

        if not ctx.is_valid(): return ctx.abort()
        return _as_set(ctx, IssueKind.INVALID_ARRAY, values) if self.cast_output else ctx.success(values)

    # =========================================================================
    # Checks
    # =========================================================================

    def add_check(self, check: Check, *, unique: bool = True) -> ArraySchema:
        return self._construct(checks=add_check(self.checks, check, unique=unique, family=LENGTH_FAMILY))

    def remove_check(self, name: str) -> ArraySchema: return self._construct(checks=remove_check(self.checks, name))

    def has_check(self, name: str) -> bool: return has_check(self.checks, name)

    def get_checks(self, *names: str) -> list[Check]: return get_checks(self.checks, *names)

    def min(self, value: int, *, inclusive: bool = True, message: str | None = None) -> ArraySchema:
        return self.add_check(Check("min", Bound(value, inclusive), message))

    def max(self, value: int, *, inclusive: bool = True, message: str | None = None) -> ArraySchema:
        return self.add_check(Check("max", Bound(value, inclusive), message))

    def length(self, value: int, *, message: str | None = None) -> ArraySchema:
        return self.add_check(Check("length", value, message))

    def nonempty(self, *, message: str | None = None) -> ArraySchema: return self.min(1, message=message)

    def unique(self, key: Callable[[Any], Any] | None = None, *, enforce: bool = False, message: str | None = None) -> ArraySchema:
        """Drop duplicate items from the output, or with ``enforce`` report them as one issue."""
        return self.add_check(Check("unique", None, message, {"key": key, "enforce": enforce}))

    def sorted(self, key: Callable[[Any], Any] | None = None, *, reverse: bool = False, enforce: bool = False,
               message: str | None = None) -> ArraySchema:
        """Sort the output, or with ``enforce`` require the input to be sorted already."""
        return self.add_check(Check("sorted", None, message, {"key": key, "reverse": reverse, "enforce": enforce}))

    def compact(self) -> ArraySchema:
        """Drop falsy items before validation."""
        return self.add_check(Check("compact"))

    @property
    def min_items(self) -> int | None:
        if check := find_check(self.checks, "length"): return check.expected
        return check.expected.value if (check := find_check(self.checks, "min")) else None

    @property
    def max_items(self) -> int | None:
        if check := find_check(self.checks, "length"): return check.expected
        return check.expected.value if (check := find_check(self.checks, "max")) else None

    @property
    def is_unique(self) -> bool: return self.has_check("unique")

    @property
    def is_sorted(self) -> bool: return self.has_check("sorted")

    # =========================================================================
    # Derivation
    # =========================================================================

    def unwrap(self) -> Schema: return self.element

    def sparse(self, enabled: bool = True) -> ArraySchema:
        """Tolerate ``None`` items (or, with ``enabled=False``, forbid them explicitly)."""
        return self._construct(element=self.element.nullable() if enabled else self.element.nonnullable())

    def partial(self) -> ArraySchema: return self.sparse(True)

    def required(self) -> ArraySchema: return self.sparse(False)

    def flatten(self, *, deep: bool = False) -> ArraySchema:
        """Replace a nested array element by its own element (recursively with ``deep``)."""
        element = self.element
        while isinstance(element, ArraySchema):
            element = element.element
            if not deep: break
        return self._construct(element=element) if isinstance(self.element, ArraySchema) else self

    def ensure(self) -> Schema:
        """Treat a missing or ``None`` input as an empty container."""
        return self.super_default(list)

    def coerce(self, enabled: bool = True) -> ArraySchema:
        """Accept sets as input."""
        return self._construct(coerce_input=enabled)

    def cast(self, enabled: bool = True) -> ArraySchema:
        """Output a ``set`` instead of a list."""
        return self._construct(cast_output=enabled)

    def to_set(self) -> SetSchema:
        checks = tuple(Check("size", c.expected, c.message) if c.name == "length" else c
            for c in self.checks if c.name in ("min", "max", "length"))
        return SetSchema(self.element, checks, self.coerce_input, self.cast_output, options=self.options)


def _dedupe(values: list[Any], key: Callable[[Any], Any] | None) -> tuple[list[Any], list[Any]]:
    """Split ``values`` into first occurrences and the repeated items. Works for unhashable items."""
    seen: list[Any] = []
    kept: list[Any] = []
    duplicates: list[Any] = []
    for value in values:
        marker = key(value) if key else value
        if marker in seen:
            if value not in duplicates: duplicates.append(value)
            continue
        seen.append(marker)
        kept.append(value)
    return kept, duplicates


# =============================================================================
# Set
# =============================================================================

@dataclass(frozen=True, eq=False)
class SetSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.SET
    element: Schema
    checks: tuple[Check, ...] = ()
    coerce_input: bool = False
    cast_output: bool = False

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if self.coerce_input and isinstance(ctx.data, (list, tuple)) and all(_hashable(v) for v in ctx.data): ctx.set_data(set(ctx.data))
        if not isinstance(data := ctx.data, (set, frozenset)): return ctx.invalid_type(ParsedType.SET).abort()
        if not _size_checks(ctx, IssueKind.INVALID_SET, self.checks, len(data)): return ctx.abort()

        def finish(results: list[ParseResult]) -> ParseResult:
            if not ctx.is_valid(): return ctx.abort()
            values = _values(results)
            return ctx.success(values) if self.cast_output else _as_set(ctx, IssueKind.INVALID_SET, values)
        return parse_children(ctx, [(self.element, v, (i,)) for i, v in enumerate(data)], finish)

    def add_check(self, check: Check, *, unique: bool = True) -> SetSchema:
        return self._construct(checks=add_check(self.checks, check, unique=unique, family=SIZE_FAMILY))

    def has_check(self, name: str) -> bool: return has_check(self.checks, name)

    def min(self, value: int, *, inclusive: bool = True, message: str | None = None) -> SetSchema:
        return self.add_check(Check("min", Bound(value, inclusive), message))

    def max(self, value: int, *, inclusive: bool = True, message: str | None = None) -> SetSchema:
        return self.add_check(Check("max", Bound(value, inclusive), message))

    def size(self, value: int, *, message: str | None = None) -> SetSchema:
        return self.add_check(Check("size", value, message))

    def nonempty(self, *, message: str | None = None) -> SetSchema: return self.min(1, message=message)

    def unwrap(self) -> Schema: return self.element

    def sparse(self, enabled: bool = True) -> SetSchema:
        return self._construct(element=self.element.nullable() if enabled else self.element.nonnullable())

    def coerce(self, enabled: bool = True) -> SetSchema:
        """Accept lists and tuples as input."""
        return self._construct(coerce_input=enabled)

    def cast(self, enabled: bool = True) -> SetSchema:
        """Output a list instead of a ``set``."""
        return self._construct(cast_output=enabled)

    @property
    def min_items(self) -> int | None:
        if check := find_check(self.checks, "size"): return check.expected
        return check.expected.value if (check := find_check(self.checks, "min")) else None

    @property
    def max_items(self) -> int | None:
        if check := find_check(self.checks, "size"): return check.expected
        return check.expected.value if (check := find_check(self.checks, "max")) else None


# =============================================================================
# Tuple
# =============================================================================

@dataclass(frozen=True, eq=False)
class TupleSchema(Schema):
    """Fixed positional items plus an optional ``rest`` schema for trailing positions."""
    kind: ClassVar[SchemaKind] = SchemaKind.TUPLE
    items: tuple[Schema, ...] = ()
    rest_schema: Schema | None = None

    def __post_init__(self) -> None:
        from .refs import resolve_refs
        items = tuple(i for i in self.items if not i.is_kind(SchemaKind.DELETE))
        object.__setattr__(self, "items", tuple(resolve_refs(dict(enumerate(items))).values()))

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if not isinstance(data := ctx.data, (list, tuple)): return ctx.invalid_type(ParsedType.TUPLE).abort()

        items, rest = self.items, self.rest_schema
        if len(data) < len(items) or (rest is None and len(data) > len(items)):
            ctx.add_issue(IssueKind.INVALID_TUPLE, {"check": "length", "expected": len(items), "received": len(data),
                "rest": rest is not None}, self.options.messages.invalid_tuple)
            if ctx.common.abort_early: return ctx.abort()

        jobs = [(items[i] if i < len(items) else rest, v, (i,)) for i, v in enumerate(data) if i < len(items) or rest is not None]
        return parse_children(ctx, jobs, lambda results: ctx.success(tuple(_values(results))) if ctx.is_valid() else ctx.abort())

    def rest(self, schema: Schema) -> TupleSchema: return self._construct(rest_schema=schema)

    def remove_rest(self) -> TupleSchema: return self._construct(rest_schema=None)

    def values(self) -> Schema:
        """Union of every item (and the rest) schema."""
        from .primitives import NeverSchema
        from .unions import union
        members = (*self.items, *((self.rest_schema,) if self.rest_schema else ()))
        return union(*members, options=self.options) if members else NeverSchema(options=self.options)

    def head(self) -> Schema:
        from .primitives import NeverSchema
        return self.items[0] if self.items else NeverSchema(options=self.options)

    def last(self) -> Schema:
        from .primitives import NeverSchema
        return self.items[-1] if self.items else NeverSchema(options=self.options)

    def pop(self) -> TupleSchema: return self._construct(items=self.items[:-1])

    def tail(self) -> TupleSchema: return self._construct(items=self.items[1:])

    def push(self, *items: Schema) -> TupleSchema: return self._construct(items=(*self.items, *items))

    def unshift(self, *items: Schema) -> TupleSchema: return self._construct(items=(*items, *self.items))

    def concat(self, other: TupleSchema) -> TupleSchema:
        """Items of both tuples; the rest schemas are unioned when both have one."""
        rest = self.rest_schema
        if other.rest_schema is not None: rest = other.rest_schema if rest is None else rest | other.rest_schema
        return self._construct(items=(*self.items, *other.items), rest_schema=rest)

    merge = concat

    def reverse(self) -> TupleSchema: return self._construct(items=self.items[::-1])

    def map(self, fn: Callable[[Schema, int], Schema]) -> TupleSchema:
        return self._construct(items=tuple(fn(item, i) for i, item in enumerate(self.items)))


# =============================================================================
# Record
# =============================================================================

@dataclass(frozen=True, eq=False)
class RecordSchema(Schema):
    """Mapping whose keys and values are validated by ``keys`` and ``values``."""
    kind: ClassVar[SchemaKind] = SchemaKind.RECORD
    issue_kind: ClassVar[IssueKind] = IssueKind.INVALID_RECORD
    parsed_type: ClassVar[ParsedType] = ParsedType.OBJECT
    keys: Schema
    values: Schema
    checks: tuple[Check, ...] = ()

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if not isinstance(data := ctx.data, Mapping): return ctx.invalid_type(self.parsed_type).abort()
        if not _size_checks(ctx, self.issue_kind, self.checks, len(data)): return ctx.abort()

        jobs = []
        for key, value in data.items():
            jobs.append((self.keys, key, (key, "key")))
            jobs.append((self.values, value, (key, "value")))

        def finish(results: list[ParseResult]) -> ParseResult:
            if not ctx.is_valid(): return ctx.abort()
            pairs = [(k.value, v.value) for k, v in zip(results[::2], results[1::2]) if v.value is not UNDEFINED]
            if not all(_hashable(k) for k, _ in pairs):
                return report(ctx, self.issue_kind, Check("hashable"), "key") or ctx.abort()
            return ctx.success(dict(pairs))
        return parse_children(ctx, jobs, finish)

    def add_check(self, check: Check, *, unique: bool = True) -> RecordSchema:
        return self._construct(checks=add_check(self.checks, check, unique=unique, family=SIZE_FAMILY))

    def min(self, value: int, *, inclusive: bool = True, message: str | None = None) -> RecordSchema:
        return self.add_check(Check("min", Bound(value, inclusive), message))

    def max(self, value: int, *, inclusive: bool = True, message: str | None = None) -> RecordSchema:
        return self.add_check(Check("max", Bound(value, inclusive), message))

    def size(self, value: int, *, message: str | None = None) -> RecordSchema:
        return self.add_check(Check("size", value, message))

    def partial(self) -> RecordSchema: return self._construct(values=self.values.optional())


@dataclass(frozen=True, eq=False)
class MapSchema(RecordSchema):
    """Mapping with keys of any hashable type; both ``keys`` and ``values`` are required."""
    kind: ClassVar[SchemaKind] = SchemaKind.MAP
    issue_kind: ClassVar[IssueKind] = IssueKind.INVALID_MAP
    parsed_type: ClassVar[ParsedType] = ParsedType.MAP


# =============================================================================
# Factories
# =============================================================================

def array(element: Schema, **options: Any) -> ArraySchema:
    return ArraySchema(element, options=make_options(**options))


def set_(element: Schema, **options: Any) -> SetSchema:
    return SetSchema(element, options=make_options(**options))


def tuple_(items: list[Schema] | tuple[Schema, ...], rest: Schema | None = None, **options: Any) -> TupleSchema:
    return TupleSchema(tuple(items), rest, options=make_options(**options))


def record(keys: Schema, values: Schema | None = None, **options: Any) -> RecordSchema:
    """``record(values)`` keys by strings; ``record(keys, values)`` validates both."""
    if values is None:
        from .string import StringSchema
        keys, values = StringSchema(), keys
    return RecordSchema(keys, values, options=make_options(**options))


def map_(keys: Schema, values: Schema, **options: Any) -> MapSchema:
    return MapSchema(keys, values, options=make_options(**options))
