"""Single-child wrappers: optional, nullable, defined, nonnullable, default,
catch, brand, lazy, pipeline, promise, readonly, not and the delete marker."""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar

from ..errors import AsyncParseError, IssueKind
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED, is_awaitable
from .base import ParseResult, ParseReturn, Schema, SchemaKind, WrapperSchema, resolve_value, then


@dataclass(frozen=True, eq=False)
class OptionalSchema(WrapperSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.OPTIONAL

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.success(UNDEFINED) if ctx.data is UNDEFINED else self._delegate(ctx)


@dataclass(frozen=True, eq=False)
class NullableSchema(WrapperSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.NULLABLE

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.success(None) if ctx.data is None else self._delegate(ctx)


@dataclass(frozen=True, eq=False)
class DefinedSchema(WrapperSchema):
    """Rejects a missing value even when the child would accept it."""
    kind: ClassVar[SchemaKind] = SchemaKind.DEFINED

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.data is UNDEFINED: return ctx.add_issue(IssueKind.REQUIRED, None, self.options.messages.required).abort()
        return self._delegate(ctx)


@dataclass(frozen=True, eq=False)
class NonNullableSchema(WrapperSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.NONNULLABLE

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.data is None: return ctx.invalid_type("non-null").abort()
        return self._delegate(ctx)


@dataclass(frozen=True, eq=False)
class DefaultSchema(WrapperSchema):
    """Substitutes a value for missing input (and for ``None`` when ``replace_null``) before delegating."""
    kind: ClassVar[SchemaKind] = SchemaKind.DEFAULT
    default_value: Any = None
    replace_null: bool = False

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.data is UNDEFINED or (self.replace_null and ctx.data is None): ctx.set_data(resolve_value(self.default_value))
        return self._delegate(ctx)

    def remove_default(self) -> Schema: return self.underlying


@dataclass(frozen=True, eq=False)
class CatchSchema(WrapperSchema):
    """Parses the child in isolation and substitutes ``catch_value`` on any failure."""
    kind: ClassVar[SchemaKind] = SchemaKind.CATCH
    catch_value: Any = None

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        inner = ctx.detached(self.underlying, ctx.data)
        return then(self.underlying._parse(inner),
            lambda result: result if result.ok else ctx.success(resolve_value(self.catch_value)))

    def remove_catch(self) -> Schema: return self.underlying


@dataclass(frozen=True, eq=False)
class BrandSchema(WrapperSchema):
    """Nominal tag with no runtime effect."""
    kind: ClassVar[SchemaKind] = SchemaKind.BRAND
    tag: str = ""

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return self._delegate(ctx)

    def unbrand(self) -> Schema: return self.underlying


@dataclass(frozen=True, eq=False)
class DeleteSchema(WrapperSchema):
    """Shape slot marker: objects drop the key from output, tuples drop the item."""
    kind: ClassVar[SchemaKind] = SchemaKind.DELETE

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return self._delegate(ctx)


@dataclass(frozen=True, eq=False)
class ReadonlySchema(WrapperSchema):
    """Freezes container output: mappings become read-only proxies, lists tuples, sets frozensets."""
    kind: ClassVar[SchemaKind] = SchemaKind.READONLY

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return then(self._delegate(ctx), lambda result: ctx.success(_freeze(result.value)) if result.ok else result)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping): return MappingProxyType(dict(value))
    if isinstance(value, list): return tuple(value)
    if isinstance(value, set): return frozenset(value)
    return value


@dataclass(frozen=True, eq=False)
class LazySchema(Schema):
    """Recursive schemas: ``getter`` is called at validation time, never at construction."""
    kind: ClassVar[SchemaKind] = SchemaKind.LAZY
    getter: Callable[[], Schema]

    @property
    def underlying(self) -> Schema: return self.getter()

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        schema = self.getter()
        return schema._parse(ctx.child(schema, ctx.data))


@dataclass(frozen=True, eq=False)
class PipelineSchema(Schema):
    """Parses with ``source``, then feeds the output to ``target``. A source failure short-circuits."""
    kind: ClassVar[SchemaKind] = SchemaKind.PIPELINE
    source: Schema
    target: Schema

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        def next_stage(result: ParseResult) -> ParseReturn:
            if not result.ok: return result
            return self.target._parse(ctx.child(self.target, result.value))
        return then(self.source._parse(ctx.child(self.source, ctx.data)), next_stage)


@dataclass(frozen=True, eq=False)
class PromiseSchema(WrapperSchema):
    """Awaits the input and validates the resolved value. Only usable with ``parse_async``."""
    kind: ClassVar[SchemaKind] = SchemaKind.PROMISE

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if not ctx.is_async: raise AsyncParseError("Promise schemas require parse_async()", path=list(ctx.path))
        if not is_awaitable(ctx.data): return ctx.invalid_type(ParsedType.AWAITABLE).abort()

        async def resolve() -> ParseResult:
            return await self.underlying._parse_async(ctx.child(self.underlying, await ctx.data))
        return resolve()


@dataclass(frozen=True, eq=False)
class NotSchema(WrapperSchema):
    """Rejects input matching any ``forbidden`` schema with one ``forbidden`` issue, else delegates."""
    kind: ClassVar[SchemaKind] = SchemaKind.NOT
    forbidden: tuple[Schema, ...] = ()

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.is_async: return self._parse_concurrently(ctx)
        if any(s._parse_sync(ctx.detached(s, ctx.data)).ok for s in self.forbidden): return self._reject(ctx)
        return self._delegate(ctx)

    async def _parse_concurrently(self, ctx: ParseContext) -> ParseResult:
        results = await asyncio.gather(*(s._parse_async(ctx.detached(s, ctx.data)) for s in self.forbidden))
        if any(r.ok for r in results): return self._reject(ctx)
        return await self.underlying._parse_async(ctx.child(self.underlying, ctx.data))

    def _reject(self, ctx: ParseContext) -> ParseResult:
        return ctx.add_issue(IssueKind.FORBIDDEN, None, self.options.messages.forbidden).abort()


def lazy(getter: Callable[[], Schema], **options: Any) -> LazySchema:
    return LazySchema(getter, options=make_options(**options))


def pipeline(source: Schema, target: Schema) -> PipelineSchema:
    return source.pipe(target)


def not_(schema: Schema, *forbidden: Schema) -> NotSchema:
    return schema.not_(*forbidden)


def promise(schema: Schema) -> PromiseSchema:
    return schema.promise()
