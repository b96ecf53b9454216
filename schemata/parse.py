"""Parse Context

A ``ParseContext`` threads the current data, its path and the shared issue
sink through the recursive descent of one top-level parse.

- Child contexts share the root's issue list; issues are never scoped locally.
- ``path`` is fixed at creation; ``data`` may be replaced (coercion, transforms).
- Marking a context invalid marks every ancestor invalid.
- Detached contexts get a fresh sink. Union alternatives, ``catch`` and ``not_``
  use them to try a value without reporting the attempt's issues.

Abort-early: once the root sink holds an issue, further issues are dropped, so
the top-level result carries exactly one issue even under async fan-out.
"""
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

from .config import get_defaults
from .errors import Err, Issue, IssueKind, Ok, PathSegment, SchemaValidationError, apply_error_map, default_issue_message
from .options import ErrorMapOption
from .utils import UNDEFINED, is_awaitable

if TYPE_CHECKING:
    from .types.base import Schema


class ParsedType(str, Enum):
    """Runtime type tags used in ``invalid_type`` payloads."""
    UNDEFINED = "undefined"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    NAN = "nan"
    BIGINT = "bigint"
    STRING = "string"
    BYTES = "bytes"
    ARRAY = "array"
    TUPLE = "tuple"
    SET = "set"
    OBJECT = "object"
    DATE = "date"
    AWAITABLE = "awaitable"
    FUNCTION = "function"
    CLASS = "class"
    INSTANCE = "instance"
    # Expected-only tags, never returned by get_parsed_type
    MAP = "map"
    VOID = "void"
    FALSY = "falsy"
    PRIMITIVE = "primitive"
    PROPERTY_KEY = "property_key"


def get_parsed_type(value: Any) -> ParsedType:
    """Classify a runtime value. ``bool`` is never a number; ``NaN`` is its own tag."""
    if value is UNDEFINED: return ParsedType.UNDEFINED
    if value is None: return ParsedType.NULL
    if isinstance(value, bool): return ParsedType.BOOLEAN
    if isinstance(value, int): return ParsedType.NUMBER
    if isinstance(value, float): return ParsedType.NAN if math.isnan(value) else ParsedType.NUMBER
    if isinstance(value, str): return ParsedType.STRING
    if isinstance(value, (bytes, bytearray, memoryview)): return ParsedType.BYTES
    if isinstance(value, list): return ParsedType.ARRAY
    if isinstance(value, tuple): return ParsedType.TUPLE
    if isinstance(value, (set, frozenset)): return ParsedType.SET
    if isinstance(value, Mapping): return ParsedType.OBJECT
    if isinstance(value, date): return ParsedType.DATE
    if is_awaitable(value): return ParsedType.AWAITABLE
    if isinstance(value, type): return ParsedType.CLASS
    if callable(value): return ParsedType.FUNCTION
    return ParsedType.INSTANCE


@dataclass(frozen=True, slots=True)
class ParseCommon:
    """Per-call settings shared by every context of one parse."""
    abort_early: bool = False
    debug: bool = False
    is_async: bool = False
    contextual_error_map: ErrorMapOption | None = None


class ParseContext:
    """Mutable carrier for one node's slice of a parse call."""
    __slots__ = ("_schema", "_data", "_path", "_parent", "_root", "_common", "_issues", "_valid")

    def __init__(self, schema: Schema, data: Any, common: ParseCommon, *, path: tuple[PathSegment, ...] = (),
                 parent: ParseContext | None = None, issues: list[Issue] | None = None):
        self._schema, self._data, self._path, self._common = schema, data, path, common
        self._parent, self._root = parent, parent._root if parent is not None else self
        self._issues: list[Issue] = issues if issues is not None else []
        self._valid = True

    def __repr__(self) -> str:
        return f"ParseContext(kind={self._schema.kind.value}, path={list(self._path)}, valid={self._valid})"

    # =========================================================================
    # State
    # =========================================================================

    @property
    def schema(self) -> Schema: return self._schema

    @property
    def data(self) -> Any: return self._data

    @property
    def parsed_type(self) -> ParsedType: return get_parsed_type(self._data)

    @property
    def path(self) -> tuple[PathSegment, ...]: return self._path

    @property
    def parent(self) -> ParseContext | None: return self._parent

    @property
    def root(self) -> ParseContext: return self._root

    @property
    def common(self) -> ParseCommon: return self._common

    @property
    def is_async(self) -> bool: return self._common.is_async

    @property
    def issues(self) -> list[Issue]: return list(self._issues)

    def set_data(self, data: Any) -> ParseContext:
        self._data = data
        return self

    def is_valid(self) -> bool: return self._valid

    def is_invalid(self) -> bool: return not self._valid

    def set_invalid(self) -> ParseContext:
        ctx: ParseContext | None = self
        while ctx is not None and ctx._valid:
            ctx._valid = False
            ctx = ctx._parent
        return self

    @property
    def halted(self) -> bool:
        """True when abort-early mode has already recorded its one issue."""
        return self._common.abort_early and bool(self._issues)

    # =========================================================================
    # Descent
    # =========================================================================

    def child(self, schema: Schema, data: Any, *segments: PathSegment) -> ParseContext:
        """Context for a nested value, sharing this context's issue sink."""
        return ParseContext(schema, data, self._common, path=(*self._path, *segments), parent=self, issues=self._issues)

    def detached(self, schema: Schema, data: Any) -> ParseContext:
        """Context at the same path with a private issue sink and no parent."""
        return ParseContext(schema, data, self._common, path=self._path)

    # =========================================================================
    # Issues and results
    # =========================================================================

    def add_issue(self, kind: IssueKind, payload: Mapping[str, Any] | None = None, message: str | None = None, *,
                  path: Sequence[PathSegment] = ()) -> ParseContext:
        """Record an issue at this context's path (plus ``path``) and mark the branch invalid."""
        if self.halted: return self.set_invalid()
        self.set_invalid()
        issue = Issue(kind=kind, payload=dict(payload or {}), path=(*self._path, *path), data=self._data)
        self._issues.append(issue.with_message(message or self._resolve_message(issue)))
        return self

    def _resolve_message(self, issue: Issue) -> str:
        for error_map in (self._common.contextual_error_map, self._schema.options.schema_error_map, get_defaults().error_map):
            if message := apply_error_map(error_map, issue): return message
        return default_issue_message(issue)

    def invalid_type(self, expected: ParsedType | str) -> ParseContext:
        """Type mismatch; a missing value is reported as ``required`` instead."""
        messages = self._schema.options.messages
        if self._data is UNDEFINED: return self.add_issue(IssueKind.REQUIRED, None, messages.required)
        expected = expected.value if isinstance(expected, ParsedType) else expected
        return self.add_issue(IssueKind.INVALID_TYPE, {"expected": expected, "received": self.parsed_type.value}, messages.invalid_type)

    def success(self, value: Any) -> Ok:
        return Ok(value)

    def abort(self) -> Err:
        """Terminal failure carrying every issue of this context tree so far."""
        self.set_invalid()
        return Err(SchemaValidationError(self._issues, schema=self._root._schema))
