"""Effects: preprocess, refine, super_refine and transform.

User callbacks may be coroutine functions. Under ``parse_async`` their results
are awaited; under ``parse`` an awaitable result is an ``AsyncParseError``.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..errors import IssueKind
from ..parse import ParseContext
from ..utils import is_awaitable
from .base import ParseResult, ParseReturn, Schema, SchemaKind, WrapperSchema, ensure_sync, then


def _with_value(ctx: ParseContext, value: Any, what: str, fn: Callable[[Any], ParseReturn]) -> ParseReturn:
    """Continue with a callback's return value, awaiting it first in async mode."""
    value = ensure_sync(ctx, value, what)
    if not is_awaitable(value): return fn(value)

    async def resolved() -> ParseResult:
        out = fn(await value)
        return await out if is_awaitable(out) else out
    return resolved()


@dataclass(frozen=True, eq=False)
class EffectsSchema(WrapperSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.EFFECTS
    effect: ClassVar[str]


@dataclass(frozen=True, eq=False)
class PreprocessSchema(EffectsSchema):
    """Runs ``fn`` on the raw input before the child sees it."""
    effect: ClassVar[str] = "preprocess"
    fn: Callable[[Any], Any] = field(default=lambda data: data)

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return _with_value(ctx, self.fn(ctx.data), "preprocess", lambda data: self._delegate(ctx.set_data(data)))


@dataclass(frozen=True, eq=False)
class RefinementSchema(EffectsSchema):
    """Validates the child's output with a predicate; a falsy result adds one ``custom`` issue."""
    effect: ClassVar[str] = "refinement"
    check: Callable[[Any], Any] = field(default=lambda value: True)
    message: str | Callable[[Any], str] | None = None
    path: tuple[str | int, ...] = ()
    params: dict[str, Any] = field(default_factory=dict)

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        def verdict(value: Any, passed: Any) -> ParseResult:
            if passed: return ctx.success(value)
            message = self.message(value) if callable(self.message) else self.message
            return ctx.add_issue(IssueKind.CUSTOM, {"message": message, **self.params}, message, path=self.path).abort()

        def refine(result: ParseResult) -> ParseReturn:
            if not result.ok: return result
            return _with_value(ctx, self.check(result.value), "refine", lambda passed: verdict(result.value, passed))
        return then(self._delegate(ctx), refine)


@dataclass(frozen=True, eq=False)
class SuperRefinementSchema(EffectsSchema):
    """Hands the child's output and the parse context to ``refinement``, which adds its own issues."""
    effect: ClassVar[str] = "super_refinement"
    refinement: Callable[[Any, ParseContext], Any] = field(default=lambda value, ctx: None)

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        def refine(result: ParseResult) -> ParseReturn:
            if not result.ok: return result
            return _with_value(ctx, self.refinement(result.value, ctx), "super_refine",
                lambda _: ctx.success(result.value) if ctx.is_valid() else ctx.abort())
        return then(self._delegate(ctx), refine)


@dataclass(frozen=True, eq=False)
class TransformSchema(EffectsSchema):
    """Maps the child's output through ``fn``."""
    effect: ClassVar[str] = "transform"
    fn: Callable[[Any], Any] = field(default=lambda value: value)

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        def transform(result: ParseResult) -> ParseReturn:
            if not result.ok: return result
            return _with_value(ctx, self.fn(result.value), "transform", ctx.success)
        return then(self._delegate(ctx), transform)


def preprocess(fn: Callable[[Any], Any], schema: Schema) -> PreprocessSchema:
    return PreprocessSchema(schema, fn, options=schema.options)
