"""Tests for the function schema.

Tests cover:
- Callable tag check
- Argument, keyword and return value validation on every call
- Nested issues carried by invalid_arguments / invalid_return_type
- Coroutine wrappers when the return schema is a promise
"""

from __future__ import annotations

import pytest

from schemata import (
    ErrorCode,
    IssueKind,
    SchemaKind,
    SchemaValidationError,
    function,
    number,
    object_,
    string,
)


def _add(a, b):
    return a + b


# ---------------------------------------------------------------------------
# Tag
# ---------------------------------------------------------------------------


class TestTag:
    def test_accepts_callables(self) -> None:
        assert function().guard(len)
        assert function().guard(lambda: None)
        assert function().kind is SchemaKind.FUNCTION

    def test_rejects_non_callables(self) -> None:
        issue = function().safe_parse(1).error.issues[0]
        assert issue.kind is IssueKind.INVALID_TYPE
        assert issue.payload == {"expected": "function", "received": "number"}

    def test_wrapper_keeps_metadata(self) -> None:
        wrapped = function([number(), number()], number()).implement(_add)
        assert wrapped.__name__ == "_add"
        assert wrapped.__wrapped__ is _add


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


class TestCalls:
    def test_valid_call(self) -> None:
        add = function([number(), number()], number()).implement(_add)
        assert add(1, 2) == 3

    def test_arguments_are_parsed_before_the_call(self) -> None:
        shout = function([string().trim().uppercase()], string()).implement(lambda s: s + "!")
        assert shout("  hi ") == "HI!"

    def test_invalid_arguments(self) -> None:
        add = function([number(), number()], number()).implement(_add)
        with pytest.raises(SchemaValidationError) as excinfo:
            add(1, "2")

        issue = excinfo.value.issues[0]
        assert issue.kind is IssueKind.INVALID_ARGUMENTS
        assert issue.code is ErrorCode.E2014_INVALID_ARGUMENTS
        assert issue.message == "Invalid function arguments"
        nested = issue.payload["issues"][0]
        assert nested.path == (1,)
        assert nested.kind is IssueKind.INVALID_TYPE

    def test_invalid_return_type(self) -> None:
        to_text = function([number()], string()).implement(lambda n: n * 2)
        with pytest.raises(SchemaValidationError) as excinfo:
            to_text(2)

        issue = excinfo.value.issues[0]
        assert issue.kind is IssueKind.INVALID_RETURN_TYPE
        assert issue.payload["issues"][0].payload == {"expected": "string", "received": "number"}

    def test_extra_arguments_follow_rest(self) -> None:
        schema = function([number()], number())
        assert schema.implement(lambda *xs: len(xs))(1, "x", None) == 3
        with pytest.raises(SchemaValidationError):
            schema.remove_rest().implement(lambda *xs: len(xs))(1, 2)
        assert schema.remove_rest().rest(number()).implement(lambda *xs: sum(xs))(1, 2, 3) == 6

    def test_missing_argument(self) -> None:
        with pytest.raises(SchemaValidationError) as excinfo:
            function([number(), number()]).implement(_add)(1)
        assert excinfo.value.issues[0].payload["issues"][0].kind is IssueKind.INVALID_TUPLE

    def test_keywords(self) -> None:
        greet = function([string()], string()).keywords(object_({"punct": string().default("!")}))
        hello = greet.implement(lambda name, punct: f"hi {name}{punct}")
        assert hello("bo") == "hi bo!"
        assert hello("bo", punct="?") == "hi bo?"
        with pytest.raises(SchemaValidationError):
            hello("bo", punct=1)

    def test_keywords_pass_through_by_default(self) -> None:
        assert function([number()]).implement(lambda a, b=0: a + b)(1, b=2) == 3

    def test_custom_message(self) -> None:
        schema = function([number()], messages={"invalid_arguments": "Bad call"})
        with pytest.raises(SchemaValidationError) as excinfo:
            schema.implement(lambda n: n)("x")
        assert excinfo.value.issues[0].message == "Bad call"

    def test_derivation(self) -> None:
        base = function()
        schema = base.args(string()).returns(number())
        assert [s.kind for s in schema.parameters.items] == [SchemaKind.STRING]
        assert schema.return_type.kind is SchemaKind.NUMBER
        assert base.parameters.items == ()
        assert schema.validate(len)("abc") == 3


# ---------------------------------------------------------------------------
# Async
# ---------------------------------------------------------------------------


class TestAsync:
    @pytest.mark.asyncio
    async def test_promise_return_type(self) -> None:
        async def double(n):
            return n * 2

        wrapped = function([number()], number()).promisify().implement(double)
        assert wrapped.__name__ == "double"
        assert await wrapped(2) == 4

    @pytest.mark.asyncio
    async def test_async_invalid_return(self) -> None:
        async def broken(n):
            return str(n)

        wrapped = function([number()], number().promise()).implement(broken)
        with pytest.raises(SchemaValidationError) as excinfo:
            await wrapped(2)
        assert excinfo.value.issues[0].kind is IssueKind.INVALID_RETURN_TYPE

    @pytest.mark.asyncio
    async def test_sync_implementation_of_async_signature(self) -> None:
        wrapped = function([number()], number().promise()).implement(lambda n: n + 1)
        assert await wrapped(1) == 2

    def test_promisify_is_idempotent(self) -> None:
        schema = function().promisify()
        assert schema.promisify() is schema
        assert schema.return_type.kind is SchemaKind.PROMISE
