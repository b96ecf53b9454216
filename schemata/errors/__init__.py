"""Error Handling

Monadic Result types for parse outcomes, the issue model recorded during a
parse, and the exception hierarchy.

Usage:
    from schemata.errors import Ok, Err, IssueKind, SchemaValidationError

    result = schema.safe_parse(data)
    match result:
        case Ok(value):
            return value
        case Err(error):
            for issue in error.issues:
                log.warning("invalid", path=issue.field_path, kind=issue.kind.value)
"""
from .issues import (
    ErrorMap,
    ErrorMapFn,
    Issue,
    IssueKind,
    PathSegment,
    apply_error_map,
    default_issue_message,
    format_path,
)
from .types import (
    AsyncParseError,
    Err,
    ErrorCode,
    Ok,
    Result,
    SchemaDefinitionError,
    SchemataError,
)
from .validation import SchemaValidationError, default_formatter

__all__ = [
    # Result
    "Ok",
    "Err",
    "Result",
    # Taxonomy
    "ErrorCode",
    "IssueKind",
    # Issues
    "Issue",
    "PathSegment",
    "ErrorMap",
    "ErrorMapFn",
    "apply_error_map",
    "default_issue_message",
    "format_path",
    # Exceptions
    "SchemataError",
    "SchemaDefinitionError",
    "AsyncParseError",
    "SchemaValidationError",
    "default_formatter",
]
