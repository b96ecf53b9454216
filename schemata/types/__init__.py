# Schema kinds and factories
from .base import ParseResult, ParseReturn, Schema, SchemaKind, WrapperSchema
from .string import StringSchema, string
from .number import BigIntSchema, NumberSchema, OrderedSchema, bigint, number
from .date import DateSchema, date_
from .primitives import (
    AnySchema,
    BooleanSchema,
    BytesSchema,
    EnumSchema,
    FalseSchema,
    FalsySchema,
    InstanceOfSchema,
    LiteralSchema,
    NaNSchema,
    NativeEnumSchema,
    NeverSchema,
    NullSchema,
    PrimitiveSchema,
    PropertyKeySchema,
    TrueSchema,
    UndefinedSchema,
    UnknownSchema,
    VoidSchema,
    any_,
    boolean,
    bytes_,
    enum_,
    false_,
    falsy,
    instance_of,
    literal,
    nan,
    native_enum,
    never,
    null,
    primitive,
    property_key,
    true_,
    undefined,
    unknown,
    void,
)
from .wrappers import (
    BrandSchema,
    CatchSchema,
    DefaultSchema,
    DefinedSchema,
    DeleteSchema,
    LazySchema,
    NonNullableSchema,
    NotSchema,
    NullableSchema,
    OptionalSchema,
    PipelineSchema,
    PromiseSchema,
    ReadonlySchema,
    lazy,
    not_,
    pipeline,
    promise,
)
from .effects import EffectsSchema, PreprocessSchema, RefinementSchema, SuperRefinementSchema, TransformSchema, preprocess
from .collections import ArraySchema, MapSchema, RecordSchema, SetSchema, TupleSchema, array, map_, record, set_, tuple_
from .function import FunctionSchema, function
from .refs import RefSchema, ref
from .object import Condition, ObjectSchema, object_, when
from .unions import DiscriminatedUnionSchema, IntersectionSchema, UnionSchema, discriminated_union, intersection, union
