"""Issue Model

One ``Issue`` is recorded per validation failure discovered during a parse.
Issues carry a kind, a kind-specific payload, the path to the offending value
and a resolved human-readable message.

Issue Format:
{
    "path": ["user", "addresses", 0, "street"],
    "kind": "invalid_string",
    "payload": {"check": "min", "expected": {"value": 3, "inclusive": true}, "received": 1},
    "message": "String must contain at least 3 character(s)"
}
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from ..utils import UNDEFINED, literalize
from .types import ErrorCode

PathSegment = str | int
ErrorMapFn = Callable[["Issue"], "str | None"]
ErrorMap = ErrorMapFn | Mapping[str, "str | ErrorMapFn"]


class IssueKind(str, Enum):
    """Failure categories reported during a parse."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_LITERAL = "invalid_literal"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    INVALID_INSTANCE = "invalid_instance"
    UNRECOGNIZED_KEYS = "unrecognized_keys"
    INVALID_UNION = "invalid_union"
    INVALID_DISCRIMINATOR = "invalid_discriminator"
    INVALID_INTERSECTION = "invalid_intersection"
    INVALID_STRING = "invalid_string"
    INVALID_NUMBER = "invalid_number"
    INVALID_BIGINT = "invalid_bigint"
    INVALID_DATE = "invalid_date"
    INVALID_ARRAY = "invalid_array"
    INVALID_SET = "invalid_set"
    INVALID_TUPLE = "invalid_tuple"
    INVALID_RECORD = "invalid_record"
    INVALID_MAP = "invalid_map"
    INVALID_ARGUMENTS = "invalid_arguments"
    INVALID_RETURN_TYPE = "invalid_return_type"
    FORBIDDEN = "forbidden"
    CUSTOM = "custom"

    @property
    def code(self) -> ErrorCode: return _KIND_CODES.get(self, ErrorCode.E2000_VALIDATION_GENERIC)


_KIND_CODES: dict[IssueKind, ErrorCode] = {
    IssueKind.REQUIRED: ErrorCode.E2001_REQUIRED,
    IssueKind.INVALID_TYPE: ErrorCode.E2004_INVALID_TYPE,
    IssueKind.INVALID_LITERAL: ErrorCode.E2006_INVALID_LITERAL,
    IssueKind.INVALID_ENUM_VALUE: ErrorCode.E2007_INVALID_ENUM_VALUE,
    IssueKind.INVALID_INSTANCE: ErrorCode.E2008_INVALID_INSTANCE,
    IssueKind.UNRECOGNIZED_KEYS: ErrorCode.E2009_UNRECOGNIZED_KEYS,
    IssueKind.INVALID_UNION: ErrorCode.E2010_INVALID_UNION,
    IssueKind.INVALID_DISCRIMINATOR: ErrorCode.E2011_INVALID_DISCRIMINATOR,
    IssueKind.INVALID_INTERSECTION: ErrorCode.E2012_INVALID_INTERSECTION,
    IssueKind.INVALID_STRING: ErrorCode.E2002_INVALID_FORMAT,
    IssueKind.INVALID_NUMBER: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_BIGINT: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_DATE: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_ARRAY: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_SET: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_TUPLE: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_RECORD: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_MAP: ErrorCode.E2003_OUT_OF_RANGE,
    IssueKind.INVALID_ARGUMENTS: ErrorCode.E2014_INVALID_ARGUMENTS,
    IssueKind.INVALID_RETURN_TYPE: ErrorCode.E2015_INVALID_RETURN_TYPE,
    IssueKind.FORBIDDEN: ErrorCode.E2013_FORBIDDEN,
    IssueKind.CUSTOM: ErrorCode.E2005_CONSTRAINT_VIOLATION,
}


def format_path(path: Sequence[PathSegment]) -> str:
    """Format a path tuple as a JSON path (``user.addresses[0].street``)."""
    if not path: return "$"
    parts = []
    for segment in path:
        if isinstance(segment, int): parts.append(f"[{segment}]")
        elif parts: parts.append(f".{segment}")
        else: parts.append(str(segment))
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class Issue:
    """A single validation failure.

    - kind: failure category
    - payload: kind-specific details (expected/received values, check name)
    - path: location of the offending value within the original input
    - message: resolved human-readable message
    - data: the offending value itself
    """
    kind: IssueKind
    payload: Mapping[str, Any] = field(default_factory=dict)
    path: tuple[PathSegment, ...] = ()
    message: str = ""
    data: Any = UNDEFINED

    @property
    def field_path(self) -> str: return format_path(self.path)

    @property
    def code(self) -> ErrorCode: return self.kind.code

    def with_message(self, message: str) -> Issue: return replace(self, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        return {"path": list(self.path), "kind": self.kind.value, "payload": _serialize(self.payload), "message": self.message}


def _serialize(value: Any) -> Any:
    if isinstance(value, Issue): return value.to_dict()
    if isinstance(value, Mapping): return {str(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)): return [_serialize(v) for v in value]
    if value is UNDEFINED: return None
    return value


# =============================================================================
# Default messages
# =============================================================================

_SUBJECTS: dict[IssueKind, tuple[str, str]] = {
    IssueKind.INVALID_STRING: ("String", "character(s)"),
    IssueKind.INVALID_ARRAY: ("Array", "item(s)"),
    IssueKind.INVALID_SET: ("Set", "item(s)"),
    IssueKind.INVALID_TUPLE: ("Tuple", "item(s)"),
    IssueKind.INVALID_RECORD: ("Record", "entry(ies)"),
    IssueKind.INVALID_MAP: ("Map", "entry(ies)"),
}
_ORDERED_SUBJECTS: dict[IssueKind, str] = {
    IssueKind.INVALID_NUMBER: "Number", IssueKind.INVALID_BIGINT: "BigInt", IssueKind.INVALID_DATE: "Date",
}


def _bound_message(subject: str, unit: str | None, check: str, bound: Mapping[str, Any]) -> str:
    value, inclusive = bound.get("value"), bound.get("inclusive", True)
    if unit is None:
        if check == "min": op = "greater than or equal to" if inclusive else "greater than"
        else: op = "less than or equal to" if inclusive else "less than"
        return f"{subject} must be {op} {value}"
    if check == "min": return f"{subject} must contain {'at least' if inclusive else 'over'} {value} {unit}"
    return f"{subject} must contain {'at most' if inclusive else 'under'} {value} {unit}"


def _check_message(kind: IssueKind, payload: Mapping[str, Any]) -> str:
    subject, unit = _SUBJECTS.get(kind) or (_ORDERED_SUBJECTS.get(kind, "Value"), None)
    check, expected = payload.get("check"), payload.get("expected")
    match check:
        case "min" | "max":
            return _bound_message(subject, unit, check, expected)
        case "range":
            return f"{_bound_message(subject, unit, 'min', expected['min'])} and {_bound_message(subject, unit, 'max', expected['max']).split(' must be ', 1)[-1]}"
        case "length" | "size":
            if kind is IssueKind.INVALID_TUPLE and payload.get("rest"): return f"{subject} must contain at least {expected} {unit}"
            return f"{subject} must contain exactly {expected} {unit or 'item(s)'}"
        case "unique":
            return f"{subject} must contain unique items"
        case "sorted":
            return f"{subject} must be sorted"
        case "hashable":
            return f"{subject} items must be hashable"
        case "integer":
            return "Expected integer, got float"
        case "finite":
            return "Number must be finite"
        case "safe":
            return "Number must be a safe integer"
        case "port":
            return "Number must be a valid port (0-65535)"
        case "multiple":
            return f"{subject} must be a multiple of {expected}"
        case "precision":
            return f"Number must have at most {expected} decimal place(s)"
        case "starts_with":
            return f"String must start with {literalize(expected)}"
        case "ends_with":
            return f"String must end with {literalize(expected)}"
        case "contains":
            return f"String must contain {literalize(expected)}"
        case "pattern":
            return f"String must match pattern {payload.get('name') or expected}"
        case str() if kind is IssueKind.INVALID_STRING:
            return f"Invalid {check.replace('_', ' ')}"
    return f"Invalid {subject.lower()}"


def default_issue_message(issue: Issue) -> str:
    """Built-in message for an issue. Last link of the message resolution chain."""
    payload = issue.payload
    match issue.kind:
        case IssueKind.REQUIRED:
            return "Required"
        case IssueKind.INVALID_TYPE:
            return f"Expected {payload.get('expected')}, got {payload.get('received')}"
        case IssueKind.INVALID_LITERAL:
            return f"Expected {literalize(payload.get('expected'))}, got {literalize(payload.get('received'))}"
        case IssueKind.INVALID_ENUM_VALUE:
            return f"Expected {' | '.join(literalize(v) for v in payload.get('expected', ()))}, got {literalize(payload.get('received'))}"
        case IssueKind.INVALID_INSTANCE:
            return f"Expected an instance of {payload.get('expected')}"
        case IssueKind.UNRECOGNIZED_KEYS:
            return f"Unrecognized key(s) in object: {', '.join(repr(k) for k in payload.get('keys', ()))}"
        case IssueKind.INVALID_UNION:
            return "Invalid union"
        case IssueKind.INVALID_DISCRIMINATOR:
            return f"Invalid discriminator value. Expected {' | '.join(literalize(v) for v in payload.get('expected', ()))}"
        case IssueKind.INVALID_INTERSECTION:
            return "Invalid intersection"
        case IssueKind.FORBIDDEN:
            return "Forbidden"
        case IssueKind.INVALID_ARGUMENTS:
            return "Invalid function arguments"
        case IssueKind.INVALID_RETURN_TYPE:
            return "Invalid function return type"
        case IssueKind.CUSTOM:
            return payload.get("message") or "Invalid input"
    return _check_message(issue.kind, payload)


def apply_error_map(error_map: ErrorMap | None, issue: Issue) -> str | None:
    """Resolve a message through one error map. Returns None when the map declines."""
    if error_map is None: return None
    if isinstance(error_map, Mapping):
        entry = error_map.get(issue.kind.value)
        if entry is None: return None
        return entry if isinstance(entry, str) else entry(issue)
    return error_map(issue)
