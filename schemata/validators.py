"""Format Validators

Atomic, immutable predicates behind the string format checks (``email``,
``uuid``, ``url``, ...). They combine via AND/OR/NOT operators and can be
attached to any string schema with ``string().satisfies(validator)``.

Features:
- Frozen dataclass validators
- Compiled regex reuse
- Rich validation metadata for issue payloads
- Short-circuit evaluation for AND / OR combinators
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Sequence
from urllib.parse import urlparse
from uuid import UUID as StdUUID

from .errors import ErrorCode


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of a validation check with rich context."""
    is_valid: bool
    error_message: str | None = None
    error_code: ErrorCode | None = None
    constraint: str | None = None
    expected: Any = None
    actual: Any = None

    @classmethod
    def valid(cls) -> ValidationResult: return cls(is_valid=True)

    @classmethod
    def invalid(cls, message: str, code: ErrorCode = ErrorCode.E2002_INVALID_FORMAT, *,
                constraint: str | None = None, expected: Any = None, actual: Any = None) -> ValidationResult:
        return cls(is_valid=False, error_message=message, error_code=code, constraint=constraint, expected=expected, actual=actual)


class AtomicValidator(ABC):
    """Base class for atomic validators.

    Validators are immutable and composable via operators:
    - & (AND): both must pass
    - | (OR): at least one must pass
    - ~ (NOT): negates the validator
    """

    @abstractmethod
    def validate(self, value: Any) -> ValidationResult:
        """Validate a value. Returns ValidationResult."""

    @property
    @abstractmethod
    def constraint_name(self) -> str:
        """Constraint name used as the check name in issue payloads."""

    def __call__(self, value: Any) -> bool: return self.validate(value).is_valid

    def __and__(self, other: AtomicValidator) -> And: return And(self, other)

    def __or__(self, other: AtomicValidator) -> Or: return Or(self, other)

    def __invert__(self) -> Not: return Not(self)


def _not_a_string(value: Any) -> ValidationResult:
    return ValidationResult.invalid(f"Expected string, got {type(value).__name__}", ErrorCode.E2004_INVALID_TYPE, constraint="string")


# ============================================================================
# Pattern Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class RegexPattern(AtomicValidator):
    """Validate string against a regex pattern (searched, not fully matched, unless anchored)."""
    pattern: str | re.Pattern
    description: str | None = None
    _compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_compiled", self.pattern if isinstance(self.pattern, re.Pattern) else re.compile(self.pattern))

    @property
    def constraint_name(self) -> str:
        return self.description or f"pattern[{self._compiled.pattern}]"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        if not self._compiled.search(value):
            return ValidationResult.invalid(f"Value does not match pattern: {self.description or self._compiled.pattern}",
                constraint=self.constraint_name, expected=self._compiled.pattern, actual=value[:50] + ("..." if len(value) > 50 else ""))
        return ValidationResult.valid()


ALPHANUMERIC = RegexPattern(r"^[a-zA-Z0-9]+$", "alphanumeric")
NUMERIC = RegexPattern(r"^[+-]?\d+(\.\d+)?$", "numeric")
CUID = RegexPattern(re.compile(r"^c[^\s-]{8,}$", re.IGNORECASE), "cuid")
ISO_DURATION = RegexPattern(r"^P(?!$)(\d+Y)?(\d+M)?(\d+W)?(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+S)?)?$", "iso_duration")

_BASE64 = {
    (True, True): re.compile(r"^(?:[\w-]{2}[\w-]{2})*(?:[\w-]{2}==|[\w-]{3}=)?$"),
    (True, False): re.compile(r"^(?:[A-Za-z0-9+/]{2}[A-Za-z0-9+/]{2})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$"),
    (False, True): re.compile(r"^(?:[\w-]{2}[\w-]{2})*(?:[\w-]{2}(==)?|[\w-]{3}=?)?$"),
    (False, False): re.compile(r"^(?:[A-Za-z0-9+/]{2}[A-Za-z0-9+/]{2})*(?:[A-Za-z0-9+/]{2}(==)?|[A-Za-z0-9+/]{3}=?)?$"),
}


def base64_validator(*, padding_required: bool = True, url_safe: bool = True) -> RegexPattern:
    return RegexPattern(_BASE64[(padding_required, url_safe)], "base64")


# ============================================================================
# Format Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class EmailValidator(AtomicValidator):
    """Validate email address format."""

    @property
    def constraint_name(self) -> str:
        return "email"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        # RFC 5322 simplified pattern
        if not re.match(r"^(?!\.)(?!.*\.\.)[a-zA-Z0-9._%+-]+(?<!\.)@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$", value):
            return ValidationResult.invalid(f"Invalid email format: {value}", ErrorCode.E2002_INVALID_FORMAT,
                constraint=self.constraint_name, expected="valid email address", actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class UUIDValidator(AtomicValidator):
    """Validate canonical (hyphenated) UUID format."""
    version: int | None = None

    @property
    def constraint_name(self) -> str:
        return "uuid"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        try:
            parsed = StdUUID(value)
        except ValueError:
            return ValidationResult.invalid(f"Invalid UUID format: {value}", constraint=self.constraint_name,
                expected="valid UUID", actual=value[:50])
        if len(value) != 36 or value.count("-") != 4:
            return ValidationResult.invalid("UUID must be in canonical 8-4-4-4-12 form", constraint=self.constraint_name, actual=value)
        if self.version and parsed.version != self.version:
            return ValidationResult.invalid(f"Expected UUID version {self.version}, got version {parsed.version}",
                constraint=self.constraint_name, expected=f"UUID v{self.version}", actual=f"UUID v{parsed.version}")
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class DateTimeValidator(AtomicValidator):
    """Validate ISO8601 datetime format."""
    require_timezone: bool = False

    @property
    def constraint_name(self) -> str:
        return "iso_datetime"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return ValidationResult.invalid(f"Invalid ISO8601 datetime: {value}", constraint=self.constraint_name,
                expected="ISO8601 datetime", actual=value)
        if self.require_timezone and dt.tzinfo is None:
            return ValidationResult.invalid("Datetime must include timezone", constraint=self.constraint_name,
                expected="datetime with timezone", actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class DateValidator(AtomicValidator):
    """Validate ISO8601 calendar date (``YYYY-MM-DD``)."""

    @property
    def constraint_name(self) -> str:
        return "iso_date"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        try:
            date.fromisoformat(value)
        except ValueError:
            return ValidationResult.invalid(f"Invalid ISO8601 date: {value}", constraint=self.constraint_name,
                expected="YYYY-MM-DD", actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class URLValidator(AtomicValidator):
    """Validate URL format."""
    allowed_schemes: frozenset[str] = frozenset({"http", "https"})
    require_tld: bool = True

    def __init__(self, allowed_schemes: Sequence[str] = ("http", "https"), require_tld: bool = True):
        object.__setattr__(self, "allowed_schemes", frozenset(allowed_schemes)); object.__setattr__(self, "require_tld", require_tld)

    @property
    def constraint_name(self) -> str:
        return "url"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        try:
            parsed = urlparse(value)
        except ValueError:
            return ValidationResult.invalid(f"Invalid URL: {value}", constraint=self.constraint_name, expected="valid URL", actual=value[:50])
        if not parsed.scheme:
            return ValidationResult.invalid("URL must include scheme (e.g., https://)", constraint=self.constraint_name,
                expected="URL with scheme", actual=value)
        if self.allowed_schemes and parsed.scheme not in self.allowed_schemes:
            return ValidationResult.invalid(f"URL scheme '{parsed.scheme}' not allowed", constraint=self.constraint_name,
                expected=f"scheme in {sorted(self.allowed_schemes)}", actual=parsed.scheme)
        if not parsed.netloc:
            return ValidationResult.invalid("URL must include host", constraint=self.constraint_name, expected="URL with host", actual=value)
        if self.require_tld and "." not in (parsed.hostname or ""):
            return ValidationResult.invalid("URL host must include TLD", constraint=self.constraint_name,
                expected="URL with TLD (e.g., .com)", actual=parsed.netloc)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class IPAddressValidator(AtomicValidator):
    """Validate IP address format."""
    version: int | None = None  # 4 or 6, None for both

    @property
    def constraint_name(self) -> str:
        return "ip"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _not_a_string(value)
        try:
            if self.version == 4:
                IPv4Address(value)
            elif self.version == 6:
                IPv6Address(value)
            else:
                try:
                    IPv4Address(value)
                except ValueError:
                    IPv6Address(value)
            return ValidationResult.valid()
        except ValueError:
            expected = f"IPv{self.version}" if self.version else "IP address"
            return ValidationResult.invalid(f"Invalid {expected}: {value}", constraint=self.constraint_name, expected=expected, actual=value)


# ============================================================================
# Combinators
# ============================================================================

@dataclass(frozen=True, slots=True)
class And(AtomicValidator):
    left: AtomicValidator
    right: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"{self.left.constraint_name}&{self.right.constraint_name}"

    def validate(self, value: Any) -> ValidationResult:
        return result if not (result := self.left.validate(value)).is_valid else self.right.validate(value)


@dataclass(frozen=True, slots=True)
class Or(AtomicValidator):
    left: AtomicValidator
    right: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"{self.left.constraint_name}|{self.right.constraint_name}"

    def validate(self, value: Any) -> ValidationResult:
        if (first := self.left.validate(value)).is_valid: return first
        if (second := self.right.validate(value)).is_valid: return second
        return ValidationResult.invalid(f"{first.error_message}; {second.error_message}", constraint=self.constraint_name, actual=value)


@dataclass(frozen=True, slots=True)
class Not(AtomicValidator):
    inner: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"not_{self.inner.constraint_name}"

    def validate(self, value: Any) -> ValidationResult:
        if self.inner.validate(value).is_valid:
            return ValidationResult.invalid(f"Value must not satisfy {self.inner.constraint_name}", ErrorCode.E2005_CONSTRAINT_VIOLATION,
                constraint=self.constraint_name, actual=value)
        return ValidationResult.valid()
