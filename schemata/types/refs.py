"""Shape References

``ref("a.b[0]")`` inside an object shape (or tuple items) stands for a clone of
the schema found at that path within the same shape. References are replaced
when the object or tuple is constructed; a schema tree never carries an
unresolved reference into a parse.

Resolution walks object shapes (by key), tuple items (by index) and union
members (the first object member declaring the key), looking through
single-child wrappers on the way. A reference may itself sit under wrappers
(``ref("a").optional()``); the wrappers are rebuilt around the resolved clone.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from ..errors import ErrorCode, SchemaDefinitionError
from ..logging import schema_logger
from ..parse import ParseContext
from ..utils import split_path
from .base import ParseReturn, Schema, SchemaKind, WrapperSchema


@dataclass(frozen=True, eq=False)
class RefSchema(Schema):
    kind: ClassVar[SchemaKind] = SchemaKind.REF
    target: str

    def _parse(self, ctx: ParseContext) -> ParseReturn:
        raise _unresolved(self.target, reason="ref used outside an object shape or tuple")


def ref(target: str) -> RefSchema:
    return RefSchema(target)


def _unresolved(target: str, *, code: ErrorCode = ErrorCode.E9101_UNRESOLVED_REF, **metadata: Any) -> SchemaDefinitionError:
    schema_logger().warning("ref.unresolved", ref=target, code=code.name, **metadata)
    return SchemaDefinitionError(f"Unable to resolve path for ref: {target}", code=code, ref=target, **metadata)


def _lookup(slots: Mapping[Any, Schema], segment: str | int) -> Schema | None:
    if segment in slots: return slots[segment]
    if isinstance(segment, int) and str(segment) in slots: return slots[str(segment)]
    if isinstance(segment, str) and segment.isdigit() and int(segment) in slots: return slots[int(segment)]
    return None


def _step(current: Schema, segment: str | int) -> Schema | None:
    from .collections import TupleSchema
    from .object import ObjectSchema
    from .unions import UnionSchema

    while isinstance(current, WrapperSchema): current = current.underlying
    if isinstance(segment, int):
        return current.items[segment] if isinstance(current, TupleSchema) and -len(current.items) <= segment < len(current.items) else None
    if isinstance(current, ObjectSchema): return current.shape.get(segment)
    if isinstance(current, UnionSchema):
        for member in current.members:
            while isinstance(member, WrapperSchema): member = member.underlying
            if isinstance(member, ObjectSchema) and segment in member.shape: return member.shape[segment]
    return None


def _resolve(slots: Mapping[Any, Schema], key: Any, target: str, visiting: tuple[Any, ...]) -> Schema:
    path = split_path(target)
    if not path: raise _unresolved(target)
    if str(path[0]) == str(key): raise _unresolved(target, code=ErrorCode.E9102_SELF_REFERENCE, key=key)

    current = _lookup(slots, path[0])
    if current is not None and _inner_ref(current) is not None:
        if path[0] in visiting: raise _unresolved(target, code=ErrorCode.E9102_SELF_REFERENCE, cycle=[*visiting, path[0]])
        current = _resolve_slot(slots, path[0], current, (*visiting, path[0]))

    for segment in path[1:]:
        if current is None: break
        current = _step(current, segment)
    if current is None or _inner_ref(current) is not None: raise _unresolved(target)
    return current.clone()


def _inner_ref(schema: Schema) -> RefSchema | None:
    while isinstance(schema, WrapperSchema): schema = schema.underlying
    return schema if isinstance(schema, RefSchema) else None


def _rebuild(schema: Schema, resolved: Schema) -> Schema:
    if isinstance(schema, RefSchema): return resolved
    return schema._construct(underlying=_rebuild(schema.underlying, resolved))


def _resolve_slot(slots: Mapping[Any, Schema], key: Any, schema: Schema, visiting: tuple[Any, ...]) -> Schema:
    ref = _inner_ref(schema)
    return schema if ref is None else _rebuild(schema, _resolve(slots, key, ref.target, visiting))


def resolve_refs(slots: dict[Any, Schema]) -> dict[Any, Schema]:
    """Copy of ``slots`` with every (possibly wrapped) ``RefSchema`` replaced by a clone of its target."""
    if not any(_inner_ref(v) is not None for v in slots.values()): return slots
    return {k: _resolve_slot(slots, k, v, (k,)) for k, v in slots.items()}
