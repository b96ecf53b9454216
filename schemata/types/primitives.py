"""Leaf schemas without checks: boolean, literal, enums and the special types."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from ..coercion import StringToBool
from ..errors import IssueKind, SchemaDefinitionError
from ..options import make_options
from ..parse import ParseContext, ParsedType
from ..utils import UNDEFINED
from .base import ParseReturn, Schema, SchemaKind


def same_value(a: Any, b: Any) -> bool:
    """Equality with type identity: ``True`` is not ``1`` and ``1.0`` is not ``1``. NaN equals NaN."""
    if type(a) is not type(b): return False
    if isinstance(a, float) and math.isnan(a): return math.isnan(b)
    return a == b


# =============================================================================
# Boolean
# =============================================================================

@dataclass(frozen=True, eq=False)
class BooleanSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.BOOLEAN
    expected: ClassVar[bool | None] = None
    coercion: StringToBool | None = None

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if self.coercion is not None and ctx.data is not UNDEFINED: ctx.set_data(self.coercion.coerce(ctx.data).unwrap_or(ctx.data))
        if not isinstance(data := ctx.data, bool): return ctx.invalid_type(ParsedType.BOOLEAN).abort()
        if self.expected is not None and data is not self.expected:
            return ctx.add_issue(IssueKind.INVALID_LITERAL, {"expected": self.expected, "received": data},
                self.options.messages.invalid_literal).abort()
        return ctx.success(data)

    def coerce(self, enabled: bool = True, *, true_values: set[str] | None = None,
               false_values: set[str] | None = None) -> BooleanSchema:
        """Accept boolean-like strings and ``0``/``1``. The accepted spellings are configurable."""
        if not enabled: return self._construct(coercion=None)
        rule = StringToBool()
        if true_values is not None: rule = StringToBool(frozenset(v.lower() for v in true_values), rule.false_values)
        if false_values is not None: rule = StringToBool(rule.true_values, frozenset(v.lower() for v in false_values))
        return self._construct(coercion=rule)


@dataclass(frozen=True, eq=False)
class TrueSchema(BooleanSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.TRUE
    expected: ClassVar[bool | None] = True


@dataclass(frozen=True, eq=False)
class FalseSchema(BooleanSchema):
    kind: ClassVar[SchemaKind] = SchemaKind.FALSE
    expected: ClassVar[bool | None] = False


# =============================================================================
# Literal and enums
# =============================================================================

@dataclass(frozen=True, eq=False)
class LiteralSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.LITERAL
    value: Any

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if same_value(data := ctx.data, self.value): return ctx.success(data)
        if data is UNDEFINED: return ctx.invalid_type(ParsedType.UNDEFINED).abort()
        return ctx.add_issue(IssueKind.INVALID_LITERAL, {"expected": self.value, "received": data},
            self.options.messages.invalid_literal).abort()


@dataclass(frozen=True, eq=False)
class EnumSchema(Schema):
    """Membership in a fixed tuple of literal values."""
    kind: ClassVar[SchemaKind] = SchemaKind.ENUM
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.values: raise SchemaDefinitionError("enum_() requires at least one value")

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if any(same_value(data := ctx.data, v) for v in self.values): return ctx.success(data)
        if data is UNDEFINED: return ctx.invalid_type(ParsedType.UNDEFINED).abort()
        return ctx.add_issue(IssueKind.INVALID_ENUM_VALUE, {"expected": list(self.values), "received": data},
            self.options.messages.invalid_enum_value).abort()

    @property
    def enum(self) -> dict[Any, Any]:
        return {v: v for v in self.values}

    def _unknown(self, values: tuple[Any, ...]) -> list[Any]:
        return [v for v in values if not any(same_value(v, known) for known in self.values)]

    def extract(self, *values: Any) -> EnumSchema:
        """Sub-enum holding only ``values``."""
        if unknown := self._unknown(values): raise SchemaDefinitionError(f"Values not in enum: {unknown}", values=unknown)
        return self._construct(values=tuple(values))

    def exclude(self, *values: Any) -> EnumSchema:
        """Sub-enum without ``values``."""
        if unknown := self._unknown(values): raise SchemaDefinitionError(f"Values not in enum: {unknown}", values=unknown)
        return self._construct(values=tuple(v for v in self.values if not any(same_value(v, x) for x in values)))


@dataclass(frozen=True, eq=False)
class NativeEnumSchema(Schema):
    """Accepts members of an ``Enum`` class, or their values; the output is always the member."""
    kind: ClassVar[SchemaKind] = SchemaKind.NATIVE_ENUM
    enum_cls: type[Enum]

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if isinstance(data := ctx.data, self.enum_cls): return ctx.success(data)
        for member in self.enum_cls:
            if same_value(data, member.value): return ctx.success(member)
        if data is UNDEFINED: return ctx.invalid_type(ParsedType.UNDEFINED).abort()
        return ctx.add_issue(IssueKind.INVALID_ENUM_VALUE, {"expected": [m.value for m in self.enum_cls], "received": data},
            self.options.messages.invalid_enum_value).abort()

    @property
    def enum(self) -> type[Enum]: return self.enum_cls


# =============================================================================
# Special types
# =============================================================================

@dataclass(frozen=True, eq=False)
class AnySchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.ANY

    def _parse(self, ctx: ParseContext) -> ParseReturn: return ctx.success(ctx.data)


@dataclass(frozen=True, eq=False)
class UnknownSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.UNKNOWN

    def _parse(self, ctx: ParseContext) -> ParseReturn: return ctx.success(ctx.data)


@dataclass(frozen=True, eq=False)
class NeverSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.NEVER

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.add_issue(IssueKind.FORBIDDEN, None, self.options.messages.forbidden).abort()


@dataclass(frozen=True, eq=False)
class UndefinedSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.UNDEFINED

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.success(UNDEFINED) if ctx.data is UNDEFINED else ctx.invalid_type(ParsedType.UNDEFINED).abort()


@dataclass(frozen=True, eq=False)
class NullSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.NULL

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.success(None) if ctx.data is None else ctx.invalid_type(ParsedType.NULL).abort()


@dataclass(frozen=True, eq=False)
class NaNSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.NAN

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.parsed_type is ParsedType.NAN: return ctx.success(ctx.data)
        return ctx.invalid_type(ParsedType.NAN).abort()


@dataclass(frozen=True, eq=False)
class InstanceOfSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.INSTANCE_OF
    cls: type

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if isinstance(data := ctx.data, self.cls): return ctx.success(data)
        if data is UNDEFINED: return ctx.invalid_type(ParsedType.INSTANCE).abort()
        return ctx.add_issue(IssueKind.INVALID_INSTANCE, {"expected": self.cls.__name__, "received": type(data).__name__},
            self.options.messages.invalid_instance).abort()


@dataclass(frozen=True, eq=False)
class BytesSchema(Schema):
    """``bytes``, ``bytearray`` or ``memoryview``, returned as given."""
    kind: ClassVar[SchemaKind] = SchemaKind.BYTES

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.parsed_type is ParsedType.BYTES: return ctx.success(ctx.data)
        return ctx.invalid_type(ParsedType.BYTES).abort()


@dataclass(frozen=True, eq=False)
class VoidSchema(Schema):
    """No value: a missing value or ``None``, returned as given."""
    kind: ClassVar[SchemaKind] = SchemaKind.VOID

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if ctx.data is UNDEFINED or ctx.data is None: return ctx.success(ctx.data)
        return ctx.invalid_type(ParsedType.VOID).abort()


def is_falsy(value: Any) -> bool:
    """``False``, ``None``, a missing value, or a zero or empty scalar (``0``, ``0.0``, ``""``, ``b""``)."""
    if value is UNDEFINED or value is None or value is False: return True
    return isinstance(value, (int, float, str, bytes)) and not isinstance(value, bool) and not value


def is_primitive(value: Any) -> bool:
    return value is UNDEFINED or value is None or isinstance(value, (str, int, float, bytes))


@dataclass(frozen=True, eq=False)
class FalsySchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.FALSY

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.success(ctx.data) if is_falsy(ctx.data) else ctx.invalid_type(ParsedType.FALSY).abort()


@dataclass(frozen=True, eq=False)
class PrimitiveSchema(Schema):
    """Any immutable scalar: ``str``, ``int``, ``float``, ``bool``, ``bytes``, ``None`` or a missing value."""
    kind: ClassVar[SchemaKind] = SchemaKind.PRIMITIVE

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        return ctx.success(ctx.data) if is_primitive(ctx.data) else ctx.invalid_type(ParsedType.PRIMITIVE).abort()


@dataclass(frozen=True, eq=False)
class PropertyKeySchema(Schema):
    """A ``str`` or ``int`` key (never ``bool``)."""
    kind: ClassVar[SchemaKind] = SchemaKind.PROPERTY_KEY

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        if isinstance(data := ctx.data, (str, int)) and not isinstance(data, bool): return ctx.success(data)
        return ctx.invalid_type(ParsedType.PROPERTY_KEY).abort()


# =============================================================================
# Factories
# =============================================================================

def boolean(**options: Any) -> BooleanSchema: return BooleanSchema(options=make_options(**options))


def true_(**options: Any) -> TrueSchema: return TrueSchema(options=make_options(**options))


def false_(**options: Any) -> FalseSchema: return FalseSchema(options=make_options(**options))


def literal(value: Any, **options: Any) -> LiteralSchema: return LiteralSchema(value, options=make_options(**options))


def enum_(*values: Any, **options: Any) -> EnumSchema:
    """``enum_("a", "b")`` or ``enum_(["a", "b"])``."""
    if len(values) == 1 and isinstance(values[0], (list, tuple, set, frozenset)): values = tuple(values[0])
    return EnumSchema(tuple(values), options=make_options(**options))


def native_enum(enum_cls: type[Enum], **options: Any) -> NativeEnumSchema:
    return NativeEnumSchema(enum_cls, options=make_options(**options))


def any_(**options: Any) -> AnySchema: return AnySchema(options=make_options(**options))


def unknown(**options: Any) -> UnknownSchema: return UnknownSchema(options=make_options(**options))


def never(**options: Any) -> NeverSchema: return NeverSchema(options=make_options(**options))


def undefined(**options: Any) -> UndefinedSchema: return UndefinedSchema(options=make_options(**options))


def null(**options: Any) -> NullSchema: return NullSchema(options=make_options(**options))


def nan(**options: Any) -> NaNSchema: return NaNSchema(options=make_options(**options))


def instance_of(cls: type, **options: Any) -> InstanceOfSchema: return InstanceOfSchema(cls, options=make_options(**options))


def bytes_(**options: Any) -> BytesSchema: return BytesSchema(options=make_options(**options))


def void(**options: Any) -> VoidSchema: return VoidSchema(options=make_options(**options))


def falsy(**options: Any) -> FalsySchema: return FalsySchema(options=make_options(**options))


def primitive(**options: Any) -> PrimitiveSchema: return PrimitiveSchema(options=make_options(**options))


def property_key(**options: Any) -> PropertyKeySchema: return PropertyKeySchema(options=make_options(**options))
