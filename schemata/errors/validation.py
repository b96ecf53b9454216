"""Aggregated Validation Error

``SchemaValidationError`` collects every issue discovered during one top-level
parse, in discovery order. It is what ``parse`` raises and what ``safe_parse``
wraps in ``Err``.

Error Format:
{
    "error": {
        "type": "validation_error",
        "code": "E2000_VALIDATION_GENERIC",
        "error_count": 2,
        "errors": [
            {"path": ["email"], "kind": "invalid_string", "payload": {...}, "message": "Invalid email"},
            {"path": ["age"], "kind": "invalid_type", "payload": {...}, "message": "Expected number, got string"}
        ]
    }
}
"""
from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from ..config import get_defaults
from .issues import Issue, format_path
from .types import ErrorCode, SchemataError


def default_formatter(issues: Sequence[Issue]) -> str:
    """Render issues as an indented JSON document."""
    return json.dumps([i.to_dict() for i in issues], indent=2, default=repr)


class SchemaValidationError(SchemataError):
    """Validation failed for one or more values.

    Carries sufficient context for callers to remediate programmatically:
    every issue has its path, kind, payload and message.
    """
    code = ErrorCode.E2000_VALIDATION_GENERIC

    def __init__(self, issues: Sequence[Issue], schema: Any = None):
        self.issues: tuple[Issue, ...] = tuple(issues)
        self.schema = schema
        super().__init__(f"Validation failed: {len(self.issues)} issue(s)", error_count=len(self.issues))

    def __str__(self) -> str: return self.format()

    def __repr__(self) -> str: return f"SchemaValidationError({len(self.issues)} issue(s))"

    def format(self) -> str:
        """Render through the process formatter, falling back to JSON."""
        return (get_defaults().formatter or default_formatter)(list(self.issues))

    @property
    def field_errors(self) -> dict[str, list[Issue]]:
        """Group issues by formatted field path."""
        result: dict[str, list[Issue]] = {}
        for issue in self.issues: result.setdefault(issue.field_path, []).append(issue)
        return result

    @property
    def first_error(self) -> Issue | None: return self.issues[0] if self.issues else None

    @property
    def messages(self) -> list[str]: return [i.message for i in self.issues]

    def get_errors_for_field(self, field_path: str | Sequence[str | int]) -> list[Issue]:
        path = field_path if isinstance(field_path, str) else format_path(field_path)
        return [i for i in self.issues if i.field_path == path]

    def flatten(self) -> dict[str, Any]:
        """Split into root-level messages and messages keyed by first path segment."""
        form_errors: list[str] = []
        field_errors: dict[str | int, list[str]] = {}
        for issue in self.issues:
            if issue.path: field_errors.setdefault(issue.path[0], []).append(issue.message)
            else: form_errors.append(issue.message)
        return {"form_errors": form_errors, "field_errors": field_errors}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for API responses."""
        return {"error": {"type": "validation_error", "code": self.code.name, "error_count": len(self.issues),
            "errors": [i.to_dict() for i in self.issues]}}
