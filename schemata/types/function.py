"""Function Schema

``function(args, returns)`` accepts any callable and outputs a wrapper that
validates every call: the positional arguments against a tuple schema, then
the return value against ``returns``. A failed call raises
``SchemaValidationError`` with one ``invalid_arguments`` or
``invalid_return_type`` issue whose ``issues`` payload holds the nested ones.

When ``returns`` is a promise schema the wrapper is a coroutine function: the
arguments and the awaited return value are validated asynchronously.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from functools import wraps
from typing import Any, ClassVar

from ..errors import IssueKind, SchemaValidationError
from ..options import make_options
from ..parse import ParseCommon, ParseContext, ParsedType
from ..utils import is_awaitable
from .base import ParseReturn, Schema, SchemaKind
from .collections import TupleSchema
from .primitives import UnknownSchema


def _parameters(items: Sequence[Schema] | TupleSchema) -> TupleSchema:
    if isinstance(items, TupleSchema): return items
    return TupleSchema(tuple(items), UnknownSchema())


@dataclass(frozen=True, eq=False)
class FunctionSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.FUNCTION
    parameters: TupleSchema = field(default_factory=lambda: _parameters(()))
    return_type: Schema = field(default_factory=UnknownSchema)
    keywords_schema: Schema | None = None

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if not callable(fn := ctx.data): return ctx.invalid_type(ParsedType.FUNCTION).abort()
        if self.return_type.is_kind(SchemaKind.PROMISE): return ctx.success(self._wrap_async(fn, ctx))
        return ctx.success(self._wrap(fn, ctx))

    # =========================================================================
    # Call validation
    # =========================================================================

    def _failure(self, common: ParseCommon, path: tuple, kind: IssueKind, data: Any,
                 error: SchemaValidationError) -> SchemaValidationError:
        ctx = ParseContext(self, data, common, path=path)
        return ctx.add_issue(kind, {"issues": list(error.issues)}, getattr(self.options.messages, kind.value)).abort().error

    def _check(self, common: ParseCommon, path: tuple, schema: Schema, data: Any, kind: IssueKind) -> Any:
        result = schema._parse_sync(ParseContext(schema, data, common, path=path))
        if not result.ok: raise self._failure(common, path, kind, data, result.error)
        return result.value

    async def _check_async(self, common: ParseCommon, path: tuple, schema: Schema, data: Any, kind: IssueKind) -> Any:
        result = await schema._parse_async(ParseContext(schema, data, common, path=path))
        if not result.ok: raise self._failure(common, path, kind, data, result.error)
        return result.value

    def _wrap(self, fn: Callable[..., Any], ctx: ParseContext) -> Callable[..., Any]:
        common, path = replace(ctx.common, is_async=False), ctx.path

        @wraps(fn)
        def validated(*args: Any, **kwargs: Any) -> Any:
            args = self._check(common, path, self.parameters, args, IssueKind.INVALID_ARGUMENTS)
            if self.keywords_schema is not None:
                kwargs = self._check(common, path, self.keywords_schema, kwargs, IssueKind.INVALID_ARGUMENTS)
            return self._check(common, path, self.return_type, fn(*args, **kwargs), IssueKind.INVALID_RETURN_TYPE)
        return validated

    def _wrap_async(self, fn: Callable[..., Any], ctx: ParseContext) -> Callable[..., Any]:
        common, path, returns = replace(ctx.common, is_async=True), ctx.path, self.return_type.unwrap()

        @wraps(fn)
        async def validated(*args: Any, **kwargs: Any) -> Any:
            args = await self._check_async(common, path, self.parameters, args, IssueKind.INVALID_ARGUMENTS)
            if self.keywords_schema is not None:
                kwargs = await self._check_async(common, path, self.keywords_schema, kwargs, IssueKind.INVALID_ARGUMENTS)
            result = fn(*args, **kwargs)
            if is_awaitable(result): result = await result
            return await self._check_async(common, path, returns, result, IssueKind.INVALID_RETURN_TYPE)
        return validated

    # =========================================================================
    # Derivation
    # =========================================================================

    def args(self, *items: Schema) -> FunctionSchema:
        """Replace the positional parameters, keeping the rest schema."""
        return self._construct(parameters=TupleSchema(items, self.parameters.rest_schema, options=self.parameters.options))

    def rest(self, schema: Schema) -> FunctionSchema: return self._construct(parameters=self.parameters.rest(schema))

    def remove_rest(self) -> FunctionSchema: return self._construct(parameters=self.parameters.remove_rest())

    def returns(self, schema: Schema) -> FunctionSchema: return self._construct(return_type=schema)

    def keywords(self, schema: Schema | None) -> FunctionSchema:
        """Validate keyword arguments as one mapping; ``None`` forwards them unchecked."""
        return self._construct(keywords_schema=schema)

    def promisify(self) -> FunctionSchema:
        if self.return_type.is_kind(SchemaKind.PROMISE): return self
        return self.returns(self.return_type.promise())

    def implement(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        return self.parse(fn)

    validate = implement


def function(args: Sequence[Schema] | TupleSchema = (), returns: Schema | None = None, **options: Any) -> FunctionSchema:
    """Callable schema. Extra positional arguments are accepted unless ``remove_rest()`` is called."""
    return FunctionSchema(_parameters(args), returns if returns is not None else UnknownSchema(), options=make_options(**options))
