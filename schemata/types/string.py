"""String schema: coercion, transforms, then checks in declaration order."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..checks import LENGTH_FAMILY, Bound, Check, add_check, check_size, find_check, get_checks, has_check, remove_check, report
from ..errors import IssueKind
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED
from ..validators import (
    ALPHANUMERIC, CUID, ISO_DURATION, NUMERIC, AtomicValidator, DateTimeValidator, DateValidator, EmailValidator,
    IPAddressValidator, RegexPattern, URLValidator, UUIDValidator, base64_validator,
)
from .base import ParseReturn, Schema, SchemaKind

_TRANSFORMS = {
    "trim": str.strip,
    "lowercase": str.lower,
    "uppercase": str.upper,
    "capitalize": lambda s: s[:1].upper() + s[1:],
    "uncapitalize": lambda s: s[:1].lower() + s[1:],
}


@dataclass(frozen=True, eq=False)
class StringSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.STRING
    checks: tuple[Check, ...] = ()
    transforms: tuple[str, ...] = ()
    coerce_input: bool = False

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if self.coerce_input and ctx.data is not UNDEFINED and not isinstance(ctx.data, str): ctx.set_data(str(ctx.data))
        if not isinstance(data := ctx.data, str): return ctx.invalid_type(ParsedType.STRING).abort()

        for name in self.transforms: data = _TRANSFORMS[name](data)

        for check in self.checks:
            if check.name == "replace":
                data = check.expected.sub(check.params["replacement"], data)
                continue
            if not self._run(ctx, check, data) and ctx.common.abort_early: return ctx.abort()

        return ctx.success(data) if ctx.is_valid() else ctx.abort()

    @staticmethod
    def _run(ctx: ParseContext, check: Check, data: str) -> bool:
        kind = IssueKind.INVALID_STRING
        match check.name:
            case "min" | "max" | "length":
                return check_size(ctx, kind, check, len(data))
            case "starts_with":
                return data.startswith(check.expected) or report(ctx, kind, check, data)
            case "ends_with":
                return data.endswith(check.expected) or report(ctx, kind, check, data)
            case "contains":
                return check.expected in data or report(ctx, kind, check, data)
        return check.validator.validate(data).is_valid or report(ctx, kind, check, data)

    # =========================================================================
    # Checks
    # =========================================================================

    def add_check(self, check: Check, *, unique: bool = True) -> StringSchema:
        return self._construct(checks=add_check(self.checks, check, unique=unique, family=LENGTH_FAMILY))

    def remove_check(self, name: str) -> StringSchema: return self._construct(checks=remove_check(self.checks, name))

    def has_check(self, name: str) -> bool: return has_check(self.checks, name)

    def get_checks(self, *names: str) -> list[Check]: return get_checks(self.checks, *names)

    def min(self, value: int, *, inclusive: bool = True, message: str | None = None) -> StringSchema:
        return self.add_check(Check("min", Bound(value, inclusive), message))

    def max(self, value: int, *, inclusive: bool = True, message: str | None = None) -> StringSchema:
        return self.add_check(Check("max", Bound(value, inclusive), message))

    def length(self, value: int, *, message: str | None = None) -> StringSchema:
        return self.add_check(Check("length", value, message))

    def nonempty(self, *, message: str | None = None) -> StringSchema: return self.min(1, message=message)

    def pattern(self, pattern: str | re.Pattern, *, name: str | None = None, message: str | None = None) -> StringSchema:
        """Require a regex match. Several patterns may coexist."""
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.add_check(Check("pattern", compiled.pattern, message, {"name": name}, RegexPattern(compiled, name)), unique=False)

    regex = pattern

    def replace(self, pattern: str | re.Pattern, replacement: str, *, name: str | None = None) -> StringSchema:
        """Substitute matches of ``pattern`` in the output. Runs in check order."""
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.add_check(Check("replace", compiled, None, {"replacement": replacement, "name": name or compiled.pattern}),
            unique=False)

    def satisfies(self, validator: AtomicValidator, *, message: str | None = None) -> StringSchema:
        """Attach any format validator, including combinations built with ``&``, ``|`` and ``~``."""
        return self.add_check(Check(validator.constraint_name, None, message, validator=validator))

    def _format(self, name: str, validator: AtomicValidator, message: str | None, expected: Any = None) -> StringSchema:
        return self.add_check(Check(name, expected, message, validator=validator))

    def email(self, *, message: str | None = None) -> StringSchema: return self._format("email", EmailValidator(), message)

    def url(self, *, schemes: tuple[str, ...] = ("http", "https"), message: str | None = None) -> StringSchema:
        return self._format("url", URLValidator(schemes), message)

    def uuid(self, *, version: int | None = None, message: str | None = None) -> StringSchema:
        return self._format("uuid", UUIDValidator(version), message)

    def cuid(self, *, message: str | None = None) -> StringSchema: return self._format("cuid", CUID, message)

    def ip(self, *, version: int | None = None, message: str | None = None) -> StringSchema:
        return self._format("ip", IPAddressValidator(version), message, version)

    def iso_date(self, *, message: str | None = None) -> StringSchema: return self._format("iso_date", DateValidator(), message)

    def iso_datetime(self, *, require_timezone: bool = False, message: str | None = None) -> StringSchema:
        return self._format("iso_datetime", DateTimeValidator(require_timezone), message)

    def iso_duration(self, *, message: str | None = None) -> StringSchema: return self._format("iso_duration", ISO_DURATION, message)

    def base64(self, *, padding_required: bool = True, url_safe: bool = True, message: str | None = None) -> StringSchema:
        return self._format("base64", base64_validator(padding_required=padding_required, url_safe=url_safe), message,
            {"padding_required": padding_required, "url_safe": url_safe})

    def alphanumeric(self, *, message: str | None = None) -> StringSchema: return self._format("alphanumeric", ALPHANUMERIC, message)

    def numeric(self, *, message: str | None = None) -> StringSchema: return self._format("numeric", NUMERIC, message)

    def starts_with(self, prefix: str, *, message: str | None = None) -> StringSchema:
        return self.add_check(Check("starts_with", prefix, message))

    def ends_with(self, suffix: str, *, message: str | None = None) -> StringSchema:
        return self.add_check(Check("ends_with", suffix, message))

    def contains(self, substring: str, *, message: str | None = None) -> StringSchema:
        return self.add_check(Check("contains", substring, message))

    @property
    def min_length(self) -> int | None:
        if check := find_check(self.checks, "length"): return check.expected
        return check.expected.value if (check := find_check(self.checks, "min")) else None

    @property
    def max_length(self) -> int | None:
        if check := find_check(self.checks, "length"): return check.expected
        return check.expected.value if (check := find_check(self.checks, "max")) else None

    # =========================================================================
    # Transforms and coercion
    # =========================================================================

    def _transform(self, name: str) -> StringSchema:
        return self._construct(transforms=self.transforms if name in self.transforms else (*self.transforms, name))

    def trim(self) -> StringSchema: return self._transform("trim")

    def lowercase(self) -> StringSchema: return self._transform("lowercase")

    def uppercase(self) -> StringSchema: return self._transform("uppercase")

    def capitalize(self) -> StringSchema: return self._transform("capitalize")

    def uncapitalize(self) -> StringSchema: return self._transform("uncapitalize")

    def coerce(self, enabled: bool = True) -> StringSchema: return self._construct(coerce_input=enabled)


def string(**options: Any) -> StringSchema:
    return StringSchema(options=make_options(**options))
