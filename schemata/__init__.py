"""Composable Schema Validation

Schemas are immutable trees of nodes. Input is parsed, not merely checked:
the result is either the validated (and possibly transformed) value or a
structured collection of issues with paths into the input.

Key Features:
- Primitives with ordered checks (string formats, numeric ranges, dates)
- Wrappers: optional, nullable, default, catch, brand, pipeline, lazy
- Objects with unknown-key policies, conditional rewriting and shape refs
- Arrays, sets, tuples, records, unions and intersections
- Abort-early or collect-all, synchronous or asynchronous
- Explicit opt-in coercion

Usage:
    from schemata import object_, string, number, ref

    User = object_({
        "email": string().email(),
        "age": number().integer().nonnegative().optional(),
        "password": string().min(8),
        "confirm": ref("password"),
    }).strict()

    result = User.safe_parse(payload)
    if not result.ok:
        return error_response(result.error.flatten())
    user = result.value
"""

from .config import Defaults, Settings, get_defaults, get_settings, reset_defaults, set_defaults
from .errors import (
    AsyncParseError,
    Err,
    ErrorCode,
    Issue,
    IssueKind,
    Ok,
    Result,
    SchemaDefinitionError,
    SchemataError,
    SchemaValidationError,
)
from .logging import configure_logging, get_logger
from .options import Messages, ParseOptions, SchemaOptions
from .parse import ParseContext, ParsedType
from .utils import UNDEFINED
from .types import (
    Condition,
    Schema,
    SchemaKind,
    any_,
    array,
    bigint,
    boolean,
    bytes_,
    date_,
    discriminated_union,
    enum_,
    false_,
    falsy,
    function,
    instance_of,
    intersection,
    lazy,
    literal,
    map_,
    nan,
    native_enum,
    never,
    not_,
    null,
    number,
    object_,
    pipeline,
    preprocess,
    primitive,
    promise,
    property_key,
    record,
    ref,
    set_,
    string,
    true_,
    tuple_,
    undefined,
    union,
    unknown,
    void,
    when,
)

__version__ = "0.1.0"

__all__ = [
    # Sentinel
    "UNDEFINED",
    # Schemas
    "Schema",
    "SchemaKind",
    "Condition",
    "ParseContext",
    "ParsedType",
    # Primitives
    "string",
    "number",
    "bigint",
    "boolean",
    "true_",
    "false_",
    "date_",
    "literal",
    "enum_",
    "native_enum",
    "any_",
    "unknown",
    "never",
    "undefined",
    "null",
    "nan",
    "instance_of",
    "bytes_",
    "void",
    "falsy",
    "primitive",
    "property_key",
    # Composites
    "object_",
    "array",
    "set_",
    "tuple_",
    "record",
    "map_",
    "function",
    "union",
    "discriminated_union",
    "intersection",
    # Wrappers and effects
    "lazy",
    "pipeline",
    "preprocess",
    "promise",
    "not_",
    "ref",
    "when",
    # Options
    "Messages",
    "ParseOptions",
    "SchemaOptions",
    # Errors
    "Ok",
    "Err",
    "Result",
    "ErrorCode",
    "Issue",
    "IssueKind",
    "SchemataError",
    "SchemaDefinitionError",
    "SchemaValidationError",
    "AsyncParseError",
    # Configuration and logging
    "Settings",
    "Defaults",
    "get_settings",
    "get_defaults",
    "set_defaults",
    "reset_defaults",
    "configure_logging",
    "get_logger",
]
