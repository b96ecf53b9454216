"""Monadic Error Handling Types

Result/Either types for composable success and failure propagation, plus the
error code taxonomy and exception hierarchy shared by the whole engine.

Parse-time failures never raise from ``safe_parse``: they travel inside ``Err``.
Exceptions are reserved for the two kinds of programmer error (a malformed
schema definition, or a synchronous parse of an asynchronous schema) and for
``parse`` which raises the aggregated validation error.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterator, NoReturn, TypeVar, Union, final

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E2xxx: Parse-time validation issues
    E9xxx: Schema definition and usage errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED = 2001
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2004_INVALID_TYPE = 2004
    E2005_CONSTRAINT_VIOLATION = 2005
    E2006_INVALID_LITERAL = 2006
    E2007_INVALID_ENUM_VALUE = 2007
    E2008_INVALID_INSTANCE = 2008
    E2009_UNRECOGNIZED_KEYS = 2009
    E2010_INVALID_UNION = 2010
    E2011_INVALID_DISCRIMINATOR = 2011
    E2012_INVALID_INTERSECTION = 2012
    E2013_FORBIDDEN = 2013
    E2014_INVALID_ARGUMENTS = 2014
    E2015_INVALID_RETURN_TYPE = 2015

    # Definition / usage (E9xxx)
    E9000_INTERNAL_GENERIC = 9000
    E9100_SCHEMA_DEFINITION = 9100
    E9101_UNRESOLVED_REF = 9101
    E9102_SELF_REFERENCE = 9102
    E9103_DUPLICATE_DISCRIMINATOR = 9103
    E9104_INVALID_CONDITION = 9104
    E9200_ASYNC_IN_SYNC_PARSE = 9200

    @property
    def category(self) -> str:
        """Human-readable error category."""
        code = self.value
        if 2000 <= code < 3000:
            return "validation"
        if 9100 <= code < 9200:
            return "definition"
        if 9200 <= code < 9300:
            return "usage"
        return "internal"


# =============================================================================
# Exceptions
# =============================================================================

class SchemataError(Exception):
    """Base for every error raised by the engine. Carries a typed error code."""
    code: ErrorCode = ErrorCode.E9000_INTERNAL_GENERIC

    def __init__(self, message: str, *, code: ErrorCode | None = None, **metadata: Any):
        super().__init__(message)
        self.message, self.metadata = message, metadata
        if code is not None: self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logs and API responses."""
        return {"error": {"code": self.code.name, "code_num": self.code.value, "category": self.code.category,
            "message": self.message, "metadata": self.metadata}}


class SchemaDefinitionError(SchemataError):
    """Raised while building a schema whose definition can never parse anything."""
    code = ErrorCode.E9100_SCHEMA_DEFINITION


class AsyncParseError(SchemataError):
    """Raised when a synchronous parse reaches a node that only resolves asynchronously."""
    code = ErrorCode.E9200_ASYNC_IN_SYNC_PARSE

    def __init__(self, message: str = "Synchronous parse encountered an awaitable. Use parse_async() instead.", **metadata: Any):
        super().__init__(message, **metadata)


# =============================================================================
# Result
# =============================================================================

@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result monad.

    Wraps a successful value. Immutable and hashable when T is hashable.
    """
    value: T

    @property
    def ok(self) -> bool: return True

    @property
    def error(self) -> None: return None

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Extract the value. Safe because Ok always contains a value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, f: Callable[[Any], T]) -> T:
        return self.value

    def expect(self, msg: str) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, Any]:
        """Transform the success value."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[Any], F]) -> Result[T, F]:
        """No-op for Ok variant."""
        return self  # type: ignore

    def flat_map(self, f: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        """Chain operations that may fail."""
        return f(self.value)

    def and_then(self, f: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        """Alias for flat_map."""
        return f(self.value)

    def or_else(self, f: Callable[[Any], Result[T, F]]) -> Result[T, F]:
        """No-op for Ok variant."""
        return self  # type: ignore

    def match(self, ok: Callable[[T], U], err: Callable[[Any], U]) -> U:
        """Pattern match on Result. Forces exhaustive handling."""
        return ok(self.value)

    async def map_async(self, f: Callable[[T], Awaitable[U]]) -> Result[U, Any]:
        """Async variant of map."""
        return Ok(await f(self.value))

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result monad.

    For parse results the error is always a ``SchemaValidationError``.
    """
    error: E

    @property
    def ok(self) -> bool: return False

    @property
    def value(self) -> None: return None

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raises the wrapped error when it is an exception, ValueError otherwise."""
        if isinstance(self.error, BaseException): raise self.error
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        return f(self.error)

    def unwrap_err(self) -> E:
        """Extract the error."""
        return self.error

    def expect(self, msg: str) -> NoReturn:
        raise ValueError(f"{msg}: {self.error}")

    def map(self, f: Callable[[Any], U]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def map_err(self, f: Callable[[E], F]) -> Result[Any, F]:
        """Transform the error."""
        return Err(f(self.error))

    def flat_map(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def and_then(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Try to recover from error."""
        return f(self.error)

    def match(self, ok: Callable[[Any], U], err: Callable[[E], U]) -> U:
        """Pattern match on Result. Forces exhaustive handling."""
        return err(self.error)

    async def map_async(self, f: Callable[[Any], Awaitable[U]]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def __iter__(self) -> Iterator:
        return iter([])


# Type alias for Result monad
Result = Union[Ok[T], Err[E]]
