"""Union, discriminated union and intersection."""
from __future__ import annotations

import asyncio
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, ClassVar

from ..errors import ErrorCode, IssueKind, SchemaDefinitionError
from ..options import SchemaOptions, make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED
from .base import ParseResult, ParseReturn, Schema, SchemaKind, WrapperSchema, parse_children


def _flatten(members: Sequence[Any], cls: type) -> tuple[Schema, ...]:
    if len(members) == 1 and isinstance(members[0], (list, tuple)): members = members[0]
    flat: list[Schema] = []
    for member in members:
        if type(member) is cls: flat.extend(member.members)
        elif isinstance(member, Schema): flat.append(member)
        else: raise SchemaDefinitionError(f"{cls.__name__} member is not a schema: {type(member).__name__}")
    if not flat: raise SchemaDefinitionError(f"{cls.__name__} requires at least one member")
    return tuple(flat)


# =============================================================================
# Union
# =============================================================================

@dataclass(frozen=True, eq=False)
class UnionSchema(Schema):
    """First member (in declaration order) that accepts the input wins."""
    kind: ClassVar[SchemaKind] = SchemaKind.UNION
    members: tuple[Schema, ...] = ()

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.is_async: return self._parse_concurrently(ctx)
        attempts = []
        for member in self.members:
            if (result := member._parse_sync(ctx.detached(member, ctx.data))).ok: return ctx.success(result.value)
            attempts.append(result)
        return self._reject(ctx, attempts)

    async def _parse_concurrently(self, ctx: ParseContext) -> ParseResult:
        results = await asyncio.gather(*(m._parse_async(ctx.detached(m, ctx.data)) for m in self.members))
        for result in results:
            if result.ok: return ctx.success(result.value)
        return self._reject(ctx, results)

    def _reject(self, ctx: ParseContext, attempts: Sequence[ParseResult]) -> ParseResult:
        issues = [list(result.error.issues) for result in attempts]
        return ctx.add_issue(IssueKind.INVALID_UNION, {"issues": issues}, self.options.messages.invalid_union).abort()

    def flatten(self) -> UnionSchema: return self._construct(members=_flatten(self.members, UnionSchema))


# =============================================================================
# Discriminated union
# =============================================================================

def _tag(value: Any) -> tuple[type, Any] | None:
    """Lookup key keeping type identity, so ``True`` and ``1`` select different members."""
    return (type(value), value) if isinstance(value, Hashable) else None


def _discriminator_values(schema: Schema | None) -> tuple[Any, ...] | None:
    from .primitives import EnumSchema, FalseSchema, LiteralSchema, NativeEnumSchema, NullSchema, TrueSchema, UndefinedSchema
    while isinstance(schema, WrapperSchema): schema = schema.underlying
    match schema:
        case LiteralSchema(): return (schema.value,)
        case EnumSchema(): return schema.values
        case NativeEnumSchema(): return (*schema.enum_cls, *(m.value for m in schema.enum_cls))
        case TrueSchema(): return (True,)
        case FalseSchema(): return (False,)
        case NullSchema(): return (None,)
        case UndefinedSchema(): return (UNDEFINED,)
    return None


@dataclass(frozen=True, eq=False)
class DiscriminatedUnionSchema(Schema):
    """Selects the one object member whose literal ``discriminator`` field matches the input's."""
    kind: ClassVar[SchemaKind] = SchemaKind.DISCRIMINATED_UNION
    discriminator: str
    members: tuple[Schema, ...] = ()
    lookup: dict[tuple[type, Any], Schema] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        from .object import ObjectSchema
        lookup: dict[tuple[type, Any], Schema] = {}
        for member in self.members:
            inner = member
            while isinstance(inner, WrapperSchema): inner = inner.underlying
            if not isinstance(inner, ObjectSchema):
                raise SchemaDefinitionError(f"Discriminated union members must be objects, got {member.kind.value}")
            if (values := _discriminator_values(inner.shape.get(self.discriminator))) is None:
                raise SchemaDefinitionError(f"Member has no literal '{self.discriminator}' field", discriminator=self.discriminator)
            for value in values:
                if (key := _tag(value)) in lookup:
                    raise SchemaDefinitionError(f"Duplicate discriminator value {value!r} for '{self.discriminator}'",
                        code=ErrorCode.E9103_DUPLICATE_DISCRIMINATOR, value=repr(value))
                lookup[key] = member
        object.__setattr__(self, "lookup", lookup)

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if not isinstance(data := ctx.data, Mapping): return ctx.invalid_type(ParsedType.OBJECT).abort()
        tag = data.get(self.discriminator, UNDEFINED)
        if (member := self.lookup.get(_tag(tag))) is None:
            return ctx.add_issue(IssueKind.INVALID_DISCRIMINATOR, {"expected": self.tags, "received": tag},
                self.options.messages.invalid_discriminator, path=(self.discriminator,)).abort()
        return member._parse(ctx.child(member, data))

    @property
    def tags(self) -> list[Any]:
        return [value for _, value in self.lookup]


# =============================================================================
# Intersection
# =============================================================================

def _merge(a: Any, b: Any) -> tuple[bool, Any]:
    """Combine two member outputs. Mappings merge key-wise, equal-length sequences element-wise."""
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        merged = dict(a)
        for key, value in b.items():
            if key not in merged:
                merged[key] = value
                continue
            ok, merged[key] = _merge(merged[key], value)
            if not ok: return False, UNDEFINED
        return True, merged
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b): return False, UNDEFINED
        items = []
        for x, y in zip(a, b):
            ok, item = _merge(x, y)
            if not ok: return False, UNDEFINED
            items.append(item)
        return True, type(a)(items)
    if isinstance(a, date) and isinstance(b, date): return a == b, a
    return (a is b or (type(a) is type(b) and a == b)), a


@dataclass(frozen=True, eq=False)
class IntersectionSchema(Schema):
    """Every member must accept the input; the outputs are merged."""
    kind: ClassVar[SchemaKind] = SchemaKind.INTERSECTION
    members: tuple[Schema, ...] = ()

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        def finish(results: list[ParseResult]) -> ParseResult:
            if not ctx.is_valid() or not all(r.ok for r in results): return ctx.abort()
            merged = results[0].value
            for result in results[1:]:
                ok, merged = _merge(merged, result.value)
                if not ok: return ctx.add_issue(IssueKind.INVALID_INTERSECTION, None, self.options.messages.invalid_intersection).abort()
            return ctx.success(merged)
        return parse_children(ctx, [(m, ctx.data, ()) for m in self.members], finish)

    def flatten(self) -> IntersectionSchema: return self._construct(members=_flatten(self.members, IntersectionSchema))


# =============================================================================
# Factories
# =============================================================================

def union(*members: Schema, options: SchemaOptions | None = None, **kwargs: Any) -> UnionSchema:
    """``union(a, b)`` or ``union([a, b])``. Nested unions are flattened."""
    return UnionSchema(_flatten(members, UnionSchema), options=make_options(options, **kwargs))


def discriminated_union(discriminator: str, members: Sequence[Schema], **options: Any) -> DiscriminatedUnionSchema:
    return DiscriminatedUnionSchema(discriminator, tuple(members), options=make_options(**options))


def intersection(*members: Schema, options: SchemaOptions | None = None, **kwargs: Any) -> IntersectionSchema:
    return IntersectionSchema(_flatten(members, IntersectionSchema), options=make_options(options, **kwargs))
