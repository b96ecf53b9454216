"""Schema Node Contract

Every schema is an immutable frozen dataclass. Modifiers (``.optional()``,
``.min(3)``, ...) return new nodes and never touch the receiver, so subtrees
can be shared between parents and between concurrent parses.

Each node implements ``_parse(ctx)``, which returns either a result or, in
asynchronous mode, an awaitable resolving to one. The public entry points wrap
it:

    parse / safe_parse              synchronous, AsyncParseError on awaitables
    parse_async / safe_parse_async  asynchronous
    guard                           safe_parse(...).ok
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Self, Union

from ..config import get_settings
from ..errors import AsyncParseError, Err, Ok, PathSegment, SchemaValidationError
from ..logging import parse_logger
from ..options import DEFAULT_OPTIONS, ParseOptions, SchemaOptions
from ..parse import ParseCommon, ParseContext
from ..utils import UNDEFINED, close_awaitable, is_awaitable

if TYPE_CHECKING:
    from .collections import ArraySchema, RecordSchema, SetSchema
    from .effects import RefinementSchema, SuperRefinementSchema, TransformSchema
    from .unions import IntersectionSchema, UnionSchema
    from .wrappers import (
        BrandSchema, CatchSchema, DefaultSchema, DefinedSchema, DeleteSchema, NonNullableSchema, NotSchema,
        NullableSchema, OptionalSchema, PipelineSchema, PromiseSchema, ReadonlySchema,
    )

ParseResult = Union[Ok[Any], Err[SchemaValidationError]]
ParseReturn = Union[ParseResult, Awaitable[ParseResult]]


class SchemaKind(str, Enum):
    """Closed set of schema kinds."""
    # Primitives
    ANY = "any"
    UNKNOWN = "unknown"
    NEVER = "never"
    UNDEFINED = "undefined"
    NULL = "null"
    NAN = "nan"
    STRING = "string"
    NUMBER = "number"
    BIGINT = "bigint"
    BOOLEAN = "boolean"
    TRUE = "true"
    FALSE = "false"
    DATE = "date"
    LITERAL = "literal"
    ENUM = "enum"
    NATIVE_ENUM = "native_enum"
    INSTANCE_OF = "instance_of"
    BYTES = "bytes"
    VOID = "void"
    FALSY = "falsy"
    PRIMITIVE = "primitive"
    PROPERTY_KEY = "property_key"
    # Wrappers
    OPTIONAL = "optional"
    NULLABLE = "nullable"
    DEFINED = "defined"
    NONNULLABLE = "nonnullable"
    DEFAULT = "default"
    CATCH = "catch"
    BRAND = "brand"
    LAZY = "lazy"
    PIPELINE = "pipeline"
    PROMISE = "promise"
    READONLY = "readonly"
    NOT = "not"
    EFFECTS = "effects"
    DELETE = "delete"
    REF = "ref"
    # Composites
    OBJECT = "object"
    ARRAY = "array"
    SET = "set"
    TUPLE = "tuple"
    RECORD = "record"
    UNION = "union"
    DISCRIMINATED_UNION = "discriminated_union"
    INTERSECTION = "intersection"
    MAP = "map"
    FUNCTION = "function"


# =============================================================================
# Sync / async plumbing
# =============================================================================

def then(result: ParseReturn, fn: Callable[[ParseResult], ParseReturn]) -> ParseReturn:
    """Apply ``fn`` to a result now, or after it resolves when it is awaitable."""
    if not is_awaitable(result): return fn(result)

    async def chained() -> ParseResult:
        out = fn(await result)
        return await out if is_awaitable(out) else out
    return chained()


def ensure_sync(ctx: ParseContext, value: Any, what: str) -> Any:
    """Reject an awaitable produced by a user callback during a synchronous parse."""
    if is_awaitable(value) and not ctx.is_async:
        close_awaitable(value)
        raise AsyncParseError(f"Synchronous parse encountered an awaitable returned by {what}. Use parse_async() instead.",
            path=list(ctx.path))
    return value


def resolve_value(value: Any) -> Any:
    """Call zero-argument producers (default and catch values); return plain values unchanged."""
    return value() if callable(value) else value


Job = tuple["Schema", Any, tuple[PathSegment, ...]]


def parse_children(ctx: ParseContext, jobs: Sequence[Job], finish: Callable[[list[ParseResult]], ParseReturn]) -> ParseReturn:
    """Validate ``(schema, data, path segments)`` jobs as children of ``ctx`` and hand the results to ``finish``.

    Synchronous mode runs the jobs in order and stops at the first failure under
    abort-early. Asynchronous mode dispatches every job concurrently and awaits
    them jointly; results keep job order either way.
    """
    if ctx.is_async:
        async def gathered() -> ParseResult:
            results = await asyncio.gather(*(schema._parse_async(ctx.child(schema, data, *segments)) for schema, data, segments in jobs))
            if ctx.common.abort_early and not all(r.ok for r in results): return ctx.abort()
            out = finish(list(results))
            return await out if is_awaitable(out) else out
        return gathered()

    results: list[ParseResult] = []
    for schema, data, segments in jobs:
        results.append(result := schema._parse_sync(ctx.child(schema, data, *segments)))
        if not result.ok and ctx.common.abort_early: return ctx.abort()
    return finish(results)


# =============================================================================
# Base schema
# =============================================================================

@dataclass(frozen=True, eq=False)
class Schema(ABC):
    """Abstract base every schema kind implements."""
    kind: ClassVar[SchemaKind]
    options: SchemaOptions = field(default=DEFAULT_OPTIONS, kw_only=True, repr=False)

    @abstractmethod
    def _parse(self, ctx: ParseContext) -> ParseReturn:
        """Validate ``ctx.data``. May return an awaitable only when ``ctx.is_async``."""

    def _parse_sync(self, ctx: ParseContext) -> ParseResult:
        result = self._parse(ctx)
        if is_awaitable(result):
            close_awaitable(result)
            raise AsyncParseError(kind=self.kind.value, path=list(ctx.path))
        return result

    async def _parse_async(self, ctx: ParseContext) -> ParseResult:
        result = self._parse(ctx)
        return await result if is_awaitable(result) else result

    def _construct(self, **changes: Any) -> Self:
        return replace(self, **changes)

    # =========================================================================
    # Entry points
    # =========================================================================

    def _root_context(self, data: Any, options: dict[str, Any], *, is_async: bool) -> ParseContext:
        call, settings = ParseOptions.model_validate(options), get_settings()

        def pick(name: str, fallback: Any) -> Any:
            for source in (call, self.options):
                if (value := getattr(source, name)) is not None: return value
            return fallback

        common = ParseCommon(abort_early=pick("abort_early", settings.ABORT_EARLY), debug=pick("debug", settings.DEBUG),
            is_async=is_async, contextual_error_map=pick("contextual_error_map", None))
        if common.debug: parse_logger().debug("parse.start", kind=self.kind.value, mode="async" if is_async else "sync",
            abort_early=common.abort_early)
        return ParseContext(self, data, common)

    def _finish(self, ctx: ParseContext, result: ParseResult) -> ParseResult:
        if result.ok and ctx.is_invalid(): result = ctx.abort()
        if ctx.common.debug:
            parse_logger().debug("parse.complete", kind=self.kind.value, mode="async" if ctx.is_async else "sync",
                ok=result.ok, issue_count=0 if result.ok else len(result.error.issues))
        return result

    def safe_parse(self, data: Any = UNDEFINED, **options: Any) -> ParseResult:
        """Validate synchronously. Returns ``Ok(value)`` or ``Err(SchemaValidationError)``."""
        ctx = self._root_context(data, options, is_async=False)
        return self._finish(ctx, self._parse_sync(ctx))

    def parse(self, data: Any = UNDEFINED, **options: Any) -> Any:
        """Validate synchronously, raising ``SchemaValidationError`` on failure."""
        return self.safe_parse(data, **options).unwrap()

    async def safe_parse_async(self, data: Any = UNDEFINED, **options: Any) -> ParseResult:
        ctx = self._root_context(data, options, is_async=True)
        return self._finish(ctx, await self._parse_async(ctx))

    async def parse_async(self, data: Any = UNDEFINED, **options: Any) -> Any:
        return (await self.safe_parse_async(data, **options)).unwrap()

    def guard(self, data: Any, **options: Any) -> bool:
        return self.safe_parse(data, **options).ok

    def assert_(self, data: Any, **options: Any) -> None:
        """Raise ``SchemaValidationError`` unless ``data`` is valid."""
        self.parse(data, **options)

    # =========================================================================
    # Introspection
    # =========================================================================

    def is_kind(self, *kinds: SchemaKind) -> bool: return self.kind in kinds

    def _accepts(self, value: Any) -> bool:
        try:
            return self.safe_parse(value).ok
        except AsyncParseError:
            return False

    @property
    def is_optional(self) -> bool:
        """Whether a missing value is accepted. Derived from behaviour, never declared."""
        return self._accepts(UNDEFINED)

    @property
    def is_nullable(self) -> bool:
        return self._accepts(None)

    def with_options(self, **options: Any) -> Self:
        """Same schema with options merged over the current ones."""
        return self._construct(options=self.options.merge(**options))

    def clone(self) -> Self:
        return self._construct()

    # =========================================================================
    # Composition
    # =========================================================================

    def optional(self) -> OptionalSchema:
        from .wrappers import OptionalSchema
        return OptionalSchema(self, options=self.options)

    def nullable(self) -> NullableSchema:
        from .wrappers import NullableSchema
        return NullableSchema(self, options=self.options)

    def nullish(self) -> OptionalSchema:
        return self.nullable().optional()

    def defined(self) -> DefinedSchema:
        from .wrappers import DefinedSchema
        return DefinedSchema(self, options=self.options)

    def nonnullable(self) -> NonNullableSchema:
        from .wrappers import NonNullableSchema
        return NonNullableSchema(self, options=self.options)

    def default(self, value: Any) -> DefaultSchema:
        """Substitute ``value`` (or the result of calling it) for a missing input."""
        from .wrappers import DefaultSchema
        return DefaultSchema(self, value, options=self.options)

    def super_default(self, value: Any) -> DefaultSchema:
        """Like ``default`` but also replaces ``None``."""
        from .wrappers import DefaultSchema
        return DefaultSchema(self, value, replace_null=True, options=self.options)

    def catch(self, value: Any) -> CatchSchema:
        """Substitute ``value`` (or the result of calling it) whenever parsing fails."""
        from .wrappers import CatchSchema
        return CatchSchema(self, value, options=self.options)

    def brand(self, tag: str) -> BrandSchema:
        from .wrappers import BrandSchema
        return BrandSchema(self, tag, options=self.options)

    def readonly(self) -> ReadonlySchema:
        from .wrappers import ReadonlySchema
        return ReadonlySchema(self, options=self.options)

    def delete(self) -> DeleteSchema:
        """Mark as a shape slot that is dropped from object output and tuple items."""
        from .wrappers import DeleteSchema
        return DeleteSchema(self, options=self.options)

    def promise(self) -> PromiseSchema:
        from .wrappers import PromiseSchema
        return PromiseSchema(self, options=self.options)

    def array(self) -> ArraySchema:
        from .collections import ArraySchema
        return ArraySchema(self, options=self.options)

    def set_(self) -> SetSchema:
        from .collections import SetSchema
        return SetSchema(self, options=self.options)

    def record(self) -> RecordSchema:
        """Mapping of string keys to values of this schema."""
        from .collections import RecordSchema
        from .string import StringSchema
        return RecordSchema(StringSchema(), self, options=self.options)

    def or_(self, *alternatives: Schema) -> UnionSchema:
        from .unions import union
        return union(self, *alternatives, options=self.options)

    def and_(self, *members: Schema) -> IntersectionSchema:
        from .unions import intersection
        return intersection(self, *members, options=self.options)

    def not_(self, *forbidden: Schema) -> NotSchema:
        from .wrappers import NotSchema
        return NotSchema(self, tuple(forbidden), options=self.options)

    def pipe(self, target: Schema) -> PipelineSchema:
        from .wrappers import PipelineSchema
        return PipelineSchema(self, target, options=self.options)

    def refine(self, check: Callable[[Any], Any], message: str | Callable[[Any], str] | None = None, *,
               path: tuple[str | int, ...] = (), params: dict[str, Any] | None = None) -> RefinementSchema:
        """Add a custom predicate. A falsy return records one ``custom`` issue."""
        from .effects import RefinementSchema
        return RefinementSchema(self, check, message, tuple(path), dict(params or {}), options=self.options)

    def super_refine(self, refinement: Callable[[Any, ParseContext], Any]) -> SuperRefinementSchema:
        """Add a refinement that reports its own issues through the parse context."""
        from .effects import SuperRefinementSchema
        return SuperRefinementSchema(self, refinement, options=self.options)

    def transform(self, fn: Callable[[Any], Any]) -> TransformSchema:
        from .effects import TransformSchema
        return TransformSchema(self, fn, options=self.options)

    def __or__(self, other: Schema) -> UnionSchema: return self.or_(other)

    def __and__(self, other: Schema) -> IntersectionSchema: return self.and_(other)


@dataclass(frozen=True, eq=False)
class WrapperSchema(Schema):
    """A schema with exactly one child."""
    underlying: Schema

    def unwrap(self) -> Schema: return self.underlying

    def unwrap_deep(self) -> Schema:
        """Innermost non-wrapper schema."""
        inner = self.underlying
        while isinstance(inner, WrapperSchema): inner = inner.underlying
        return inner

    def _delegate(self, ctx: ParseContext, data: Any = UNDEFINED) -> ParseReturn:
        child = self.underlying
        return child._parse(ctx.child(child, ctx.data if data is UNDEFINED else data))
