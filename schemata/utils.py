"""Shared helpers: the missing-value sentinel, path parsing and literal formatting."""
from __future__ import annotations

import inspect
import re
from collections.abc import Mapping, Sequence
from typing import Any, Final


class _Undefined:
    """Marker for an absent value (a missing key or an omitted argument).

    Distinct from ``None``, which is a present null value.
    """
    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None: cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str: return "UNDEFINED"

    def __bool__(self) -> bool: return False

    def __copy__(self) -> _Undefined: return self

    def __deepcopy__(self, memo: dict) -> _Undefined: return self

    def __reduce__(self) -> str: return "UNDEFINED"


UNDEFINED: Final = _Undefined()

_PATH_SPLIT = re.compile(r"[.\[\]]")


def split_path(path: str) -> list[str | int]:
    """Split ``a.b[0].c`` into ``["a", "b", 0, "c"]``."""
    return [int(p) if p.isdigit() else p for p in _PATH_SPLIT.split(path) if p]


def get_path(data: Any, path: str | Sequence[str | int], default: Any = UNDEFINED) -> Any:
    """Read a nested value from mappings and sequences, returning ``default`` when unreachable."""
    current = data
    for segment in split_path(path) if isinstance(path, str) else path:
        if isinstance(current, Mapping):
            if segment in current: current = current[segment]
            elif (key := str(segment)) in current: current = current[key]
            else: return default
        elif isinstance(current, Sequence) and not isinstance(current, str) and isinstance(segment, int):
            if not -len(current) <= segment < len(current): return default
            current = current[segment]
        else:
            return default
    return current


def literalize(value: Any) -> str:
    """Format a value the way it would be written as a literal."""
    if value is UNDEFINED: return "undefined"
    if isinstance(value, str): return repr(value)
    if isinstance(value, bool) or value is None: return repr(value)
    if isinstance(value, (int, float)): return str(value)
    return repr(value)


def is_awaitable(value: Any) -> bool: return inspect.isawaitable(value)


def close_awaitable(value: Any) -> None:
    """Close a never-awaited coroutine so it does not warn on collection."""
    if inspect.iscoroutine(value): value.close()
