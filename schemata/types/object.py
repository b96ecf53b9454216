"""Object Schema

Validates a mapping against a declared shape.

Parse order:
1. Type check (any ``Mapping``).
2. Conditions (``when``) rewrite a copy of the schema from the raw input.
3. Shape entries, then extra keys according to the policy:
   - catchall: every extra key validated against the catchall schema
   - ``strip`` (default): dropped
   - ``passthrough``: copied unvalidated
   - ``strict``: one ``unrecognized_keys`` issue naming all of them, sorted

A catchall always wins over the policy. An absent key still runs its child, so
the output holds whatever that child produces: ``default``, ``catch`` and
transforms can fill in a value for a key the input never had. Keys whose child
yields ``UNDEFINED`` (absent optional keys) are left out of the output; keys
whose child is marked ``delete`` are validated and then dropped.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

from ..errors import ErrorCode, IssueKind, SchemaDefinitionError
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED, get_path
from .base import ParseResult, ParseReturn, Schema, SchemaKind, parse_children
from .primitives import same_value
from .refs import resolve_refs

UnknownKeys = Literal["strip", "passthrough", "strict"]
Shape = dict[str, Schema]


@dataclass(frozen=True, slots=True)
class Condition:
    """Rewrites an object schema when the input value at ``key`` (a dot/bracket path) matches.

    Exactly one predicate of ``is_``, ``not_`` and ``exists``; at least one of
    ``then`` and ``otherwise``. ``is_`` and ``not_`` accept a schema (matched
    with ``guard``), a predicate function or a plain value (compared with
    ``same_value``, so ``1`` never matches ``True``).
    """
    key: str
    is_: Any = UNDEFINED
    not_: Any = UNDEFINED
    exists: bool | None = None
    then: Callable[[ObjectSchema], ObjectSchema] | None = None
    otherwise: Callable[[ObjectSchema], ObjectSchema] | None = None

    def __post_init__(self) -> None:
        predicates = sum(p is not UNDEFINED for p in (self.is_, self.not_)) + (self.exists is not None)
        if predicates != 1:
            raise SchemaDefinitionError(f"Condition on '{self.key}' needs exactly one of is_, not_ or exists",
                code=ErrorCode.E9104_INVALID_CONDITION, key=self.key)
        if self.then is None and self.otherwise is None:
            raise SchemaDefinitionError(f"Condition on '{self.key}' needs then or otherwise",
                code=ErrorCode.E9104_INVALID_CONDITION, key=self.key)

    def matches(self, data: Any) -> bool:
        value = get_path(data, self.key)
        if self.exists is not None: return (value is not UNDEFINED) == self.exists
        if self.is_ is not UNDEFINED: return _test(self.is_, value)
        return not _test(self.not_, value)

    def apply(self, schema: ObjectSchema, data: Any) -> ObjectSchema:
        rewrite = self.then if self.matches(data) else self.otherwise
        return rewrite(schema) if rewrite is not None else schema


def _test(predicate: Any, value: Any) -> bool:
    if isinstance(predicate, Schema): return predicate.guard(value)
    if callable(predicate): return bool(predicate(value))
    return same_value(predicate, value)


def when(key: str, *, is_: Any = UNDEFINED, not_: Any = UNDEFINED, exists: bool | None = None,
         then: Callable[[ObjectSchema], ObjectSchema] | None = None,
         otherwise: Callable[[ObjectSchema], ObjectSchema] | None = None) -> Condition:
    return Condition(key, is_, not_, exists, then, otherwise)


@dataclass(frozen=True, eq=False)
class ObjectSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.OBJECT
    shape: Shape = field(default_factory=dict)
    unknown_keys: UnknownKeys = "strip"
    catchall_schema: Schema | None = None
    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        for key, value in self.shape.items():
            if not isinstance(value, Schema):
                raise SchemaDefinitionError(f"Shape entry '{key}' is not a schema: {type(value).__name__}", key=key)
        object.__setattr__(self, "shape", resolve_refs(dict(self.shape)))

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if not isinstance(data := ctx.data, Mapping): return ctx.invalid_type(ParsedType.OBJECT).abort()

        parser = self
        for condition in self.conditions: parser = condition.apply(parser, data)
        shape, catchall = parser.shape, parser.catchall_schema

        extra = [k for k in data if k not in shape]
        jobs = [(schema, data.get(key, UNDEFINED), (key,)) for key, schema in shape.items()]
        if catchall is not None: jobs += [(catchall, data[key], (key,)) for key in extra]
        keys = [*shape, *(extra if catchall is not None else ())]

        def finish(results: list[ParseResult]) -> ParseResult:
            if catchall is None and extra and parser.unknown_keys == "strict":
                ctx.add_issue(IssueKind.UNRECOGNIZED_KEYS, {"keys": sorted(extra, key=str)}, parser.options.messages.unrecognized_keys)
            if not ctx.is_valid(): return ctx.abort()

            output = {key: result.value for key, result in zip(keys, results)
                if result.value is not UNDEFINED and not (key in shape and shape[key].is_kind(SchemaKind.DELETE))}
            if catchall is None and parser.unknown_keys == "passthrough": output.update((key, data[key]) for key in extra)
            return ctx.success(output)
        return parse_children(ctx, jobs, finish)

    # =========================================================================
    # Unknown keys
    # =========================================================================

    def passthrough(self) -> ObjectSchema: return self._construct(unknown_keys="passthrough")

    def strict(self, message: str | None = None) -> ObjectSchema:
        options = self.options.merge(messages={"unrecognized_keys": message}) if message else self.options
        return self._construct(unknown_keys="strict", options=options)

    def strip(self) -> ObjectSchema: return self._construct(unknown_keys="strip")

    def catchall(self, schema: Schema) -> ObjectSchema: return self._construct(catchall_schema=schema)

    def remove_catchall(self) -> ObjectSchema: return self._construct(catchall_schema=None)

    # =========================================================================
    # Shape
    # =========================================================================

    def keyof(self) -> Schema:
        """Enum of the declared keys."""
        from .primitives import EnumSchema
        return EnumSchema(tuple(self.shape), options=self.options)

    def keys(self) -> list[str]: return list(self.shape)

    def values(self) -> list[Schema]: return list(self.shape.values())

    def entries(self) -> list[tuple[str, Schema]]: return list(self.shape.items())

    def _check_keys(self, keys: tuple[str, ...]) -> None:
        if unknown := [k for k in keys if k not in self.shape]:
            raise SchemaDefinitionError(f"Keys not in shape: {unknown}", keys=unknown)

    def pick(self, *keys: str) -> ObjectSchema:
        self._check_keys(keys)
        return self._construct(shape={k: v for k, v in self.shape.items() if k in keys})

    def omit(self, *keys: str) -> ObjectSchema:
        self._check_keys(keys)
        return self._construct(shape={k: v for k, v in self.shape.items() if k not in keys})

    def extend(self, shape: Mapping[str, Schema]) -> ObjectSchema:
        """Add or replace shape entries."""
        return self._construct(shape={**self.shape, **shape})

    augment = extend

    def set_key(self, key: str, schema: Schema) -> ObjectSchema: return self.extend({key: schema})

    def merge(self, other: ObjectSchema) -> ObjectSchema:
        """Shape of both objects; ``other`` wins on shared keys and supplies the key policy and catchall."""
        return self._construct(shape={**self.shape, **other.shape}, unknown_keys=other.unknown_keys,
            catchall_schema=other.catchall_schema)

    def partial(self, *keys: str) -> ObjectSchema:
        """Make the given keys (or all keys) optional."""
        self._check_keys(keys)
        return self._construct(shape={k: v.optional() if not keys or k in keys else v for k, v in self.shape.items()})

    def required(self, *keys: str) -> ObjectSchema:
        """Make the given keys (or all keys) reject a missing value."""
        self._check_keys(keys)
        return self._construct(shape={k: v.defined() if not keys or k in keys else v for k, v in self.shape.items()})

    def deep_partial(self) -> ObjectSchema:
        return self._construct(shape={k: _deep_partial(v).optional() for k, v in self.shape.items()})

    def pick_optional(self) -> ObjectSchema:
        return self._construct(shape={k: v for k, v in self.shape.items() if v.is_optional})

    def pick_required(self) -> ObjectSchema:
        return self._construct(shape={k: v for k, v in self.shape.items() if not v.is_optional})

    # =========================================================================
    # Conditions
    # =========================================================================

    def when(self, key: str | Condition, *more: Condition, **condition: Any) -> ObjectSchema:
        """Append conditions: ``when("kind", is_="a", then=...)`` or ``when(cond_a, cond_b)``."""
        conditions = (key, *more) if isinstance(key, Condition) else (Condition(key, **condition), *more)
        return self._construct(conditions=(*self.conditions, *conditions))


def _deep_partial(schema: Schema) -> Schema:
    from .collections import ArraySchema, TupleSchema
    if isinstance(schema, ObjectSchema): return schema.deep_partial()
    if isinstance(schema, ArraySchema): return schema._construct(element=_deep_partial(schema.element))
    if isinstance(schema, TupleSchema): return schema._construct(items=tuple(_deep_partial(i) for i in schema.items))
    return schema


def object_(shape: Mapping[str, Schema] | None = None, **options: Any) -> ObjectSchema:
    return ObjectSchema(dict(shape or {}), options=make_options(**options))
