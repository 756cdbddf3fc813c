"""
erlidl Intermediate Representation (IR) types.

The IR is the immutable program tree handed to the Erlang backend:
types, constant values, services and programs. All types are
re-exported from this package.
"""

from .program import (
    ConstSpec,
    FunctionSpec,
    ProgramSpec,
    ServiceSpec,
)
from .types import (
    AggregateType,
    AliasType,
    BaseKind,
    BaseType,
    EnumType,
    EnumValue,
    FieldSpec,
    ListType,
    MapType,
    ProgramRef,
    Requiredness,
    ResolvedType,
    SetType,
    StructType,
    TypeSpec,
    VoidType,
    base,
)
from .values import (
    BoolValue,
    ConstValue,
    DoubleValue,
    IntValue,
    ListValue,
    MapValue,
    StringValue,
    StructValue,
)

__all__ = [
    # Types
    "AggregateType",
    "AliasType",
    "BaseKind",
    "BaseType",
    "EnumType",
    "EnumValue",
    "FieldSpec",
    "ListType",
    "MapType",
    "ProgramRef",
    "Requiredness",
    "ResolvedType",
    "SetType",
    "StructType",
    "TypeSpec",
    "VoidType",
    "base",
    # Constant values
    "BoolValue",
    "ConstValue",
    "DoubleValue",
    "IntValue",
    "ListValue",
    "MapValue",
    "StringValue",
    "StructValue",
    # Programs
    "ConstSpec",
    "FunctionSpec",
    "ProgramSpec",
    "ServiceSpec",
]
