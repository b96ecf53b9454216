"""Tests for synchronous / asynchronous duality and abort-early semantics.

Tests cover:
- parse_async agrees with parse for synchronous schemas
- Coroutine callbacks in refine / transform / preprocess / super_refine
- AsyncParseError when a synchronous parse meets an awaitable
- promise() schemas
- Concurrent fan-out keeps structural order
- Abort-early yields exactly one issue in both modes
"""

from __future__ import annotations

import asyncio

import pytest

from schemata import (
    AsyncParseError,
    ErrorCode,
    IssueKind,
    SchemaValidationError,
    array,
    not_,
    number,
    object_,
    preprocess,
    promise,
    string,
    union,
)


async def _is_even(n: int) -> bool:
    await asyncio.sleep(0)
    return n % 2 == 0


async def _double(n: int) -> int:
    await asyncio.sleep(0)
    return n * 2


def _form():
    return object_({"name": string().min(2), "age": number().int_(), "tags": array(string())})


BAD_FORM = {"name": "a", "age": 1.5, "tags": ["x", 1]}


# ---------------------------------------------------------------------------
# Duality
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_async_matches_sync_for_valid_input() -> None:
    data = {"name": "ab", "age": 3, "tags": ["x"]}
    assert await _form().parse_async(data) == _form().parse(data)


@pytest.mark.asyncio
async def test_async_matches_sync_issue_order() -> None:
    sync_paths = [i.path for i in _form().safe_parse(BAD_FORM).error.issues]
    async_result = await _form().safe_parse_async(BAD_FORM)
    assert [i.path for i in async_result.error.issues] == sync_paths == [("name",), ("age",), ("tags", 1)]


@pytest.mark.asyncio
async def test_parse_async_raises_validation_error() -> None:
    with pytest.raises(SchemaValidationError):
        await string().parse_async(1)


# ---------------------------------------------------------------------------
# Coroutine callbacks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_async_refine_and_transform() -> None:
    schema = number().refine(_is_even, "Must be even").transform(_double)
    assert await schema.parse_async(4) == 8
    result = await schema.safe_parse_async(3)
    assert result.error.messages == ["Must be even"]


@pytest.mark.asyncio
async def test_async_preprocess_and_super_refine() -> None:
    async def split(value: str) -> list[str]:
        return value.split(",")

    async def no_blanks(value: list[str], ctx) -> None:
        if "" in value: ctx.add_issue(IssueKind.CUSTOM, {"message": "blank"})

    schema = preprocess(split, array(string())).super_refine(no_blanks)
    assert await schema.parse_async("a,b") == ["a", "b"]
    assert (await schema.safe_parse_async("a,,b")).error.messages == ["blank"]


def test_sync_parse_rejects_async_callbacks() -> None:
    schema = object_({"n": number().refine(_is_even)})
    with pytest.raises(AsyncParseError) as excinfo:
        schema.safe_parse({"n": 2})
    assert excinfo.value.code is ErrorCode.E9200_ASYNC_IN_SYNC_PARSE
    assert excinfo.value.metadata["path"] == ["n"]


def test_guard_propagates_async_errors() -> None:
    schema = number().transform(_double)
    with pytest.raises(AsyncParseError):
        schema.guard(1)
    assert schema.is_optional is False


# ---------------------------------------------------------------------------
# Promise
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_promise_validates_resolved_value() -> None:
    async def produce(value):
        return value

    assert await promise(number()).parse_async(produce(3)) == 3
    result = await number().promise().safe_parse_async(produce("x"))
    assert result.error.issues[0].kind is IssueKind.INVALID_TYPE
    assert (await promise(number()).safe_parse_async(3)).error.issues[0].payload["expected"] == "awaitable"


def test_promise_requires_async_parse() -> None:
    with pytest.raises(AsyncParseError):
        promise(number()).parse(1)


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fan_out_runs_concurrently_and_keeps_order() -> None:
    started: list[int] = []
    release = asyncio.Event()

    async def gate(n: int) -> int:
        started.append(n)
        if len(started) == 3: release.set()
        await release.wait()
        return n

    # Sequential dispatch would deadlock on the first element.
    result = await asyncio.wait_for(array(number().transform(gate)).parse_async([3, 1, 2]), timeout=1)
    assert result == [3, 1, 2]
    assert sorted(started) == [1, 2, 3]


@pytest.mark.asyncio
async def test_async_union_and_not() -> None:
    schema = union(number().refine(_is_even, "odd"), string())
    assert await schema.parse_async(2) == 2
    assert (await schema.safe_parse_async(3)).error.issues[0].kind is IssueKind.INVALID_UNION
    forbidden = not_(number(), number().refine(_is_even))
    assert await forbidden.parse_async(3) == 3
    assert (await forbidden.safe_parse_async(4)).error.messages == ["Forbidden"]


# ---------------------------------------------------------------------------
# Abort-early
# ---------------------------------------------------------------------------


def test_abort_early_sync_single_issue() -> None:
    result = _form().safe_parse(BAD_FORM, abort_early=True)
    assert [i.path for i in result.error.issues] == [("name",)]


@pytest.mark.asyncio
async def test_abort_early_async_single_issue() -> None:
    result = await _form().safe_parse_async(BAD_FORM, abort_early=True)
    assert len(result.error.issues) == 1


def test_abort_early_from_schema_options_and_call_override() -> None:
    schema = object_({"a": string(), "b": string()}, abort_early=True)
    assert len(schema.safe_parse({}).error.issues) == 1
    assert len(schema.safe_parse({}, abort_early=False).error.issues) == 2


def test_abort_early_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    from schemata import get_settings

    monkeypatch.setenv("SCHEMATA_ABORT_EARLY", "true")
    get_settings.cache_clear()
    assert len(object_({"a": string(), "b": string()}).safe_parse({}).error.issues) == 1
