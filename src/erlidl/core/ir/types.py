"""
Type definitions for erlidl IR.

This module contains the closed set of IDL type kinds: base types, void,
enums, structs (and exceptions), the three containers and aliases.
Every type carries a ``kind`` discriminator so whole programs can be
validated from JSON documents.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from .values import ConstValue


class BaseKind(StrEnum):
    """The seven IDL base types."""

    BOOL = "bool"
    BYTE = "byte"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    DOUBLE = "double"
    STRING = "string"


class Requiredness(StrEnum):
    """Per-field presence contract."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    DEFAULT = "default"


class ProgramRef(BaseModel):
    """
    Identity of the program that owns a named type or service.

    Attributes:
        name: Program name (the IDL file's base name)
        namespace: Erlang namespace declared by the program, may be empty
    """

    name: str
    namespace: str = ""

    model_config = ConfigDict(frozen=True)


class BaseType(BaseModel):
    """A base type such as ``i32`` or ``string``."""

    kind: Literal["base"] = "base"
    base: BaseKind

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return self.base.value


class VoidType(BaseModel):
    """The return type of functions that return nothing."""

    kind: Literal["void"] = "void"

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return "void"


class EnumValue(BaseModel):
    """A single named value within an enum."""

    name: str
    value: int

    model_config = ConfigDict(frozen=True)


class EnumType(BaseModel):
    """
    An enum definition.

    Attributes:
        name: Enum identifier
        program: Owning program
        values: Declared values in declaration order, unique by integer
    """

    kind: Literal["enum"] = "enum"
    name: str
    program: ProgramRef
    values: list[EnumValue] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_unique_values(self) -> EnumType:
        """Ensure no two enum values share an integer."""
        seen: dict[int, str] = {}
        for value in self.values:
            if value.value in seen:
                raise ValueError(
                    f"Enum '{self.name}' values '{seen[value.value]}' and "
                    f"'{value.name}' share the integer {value.value}"
                )
            seen[value.value] = value.name
        return self

    def value_for(self, number: int) -> EnumValue | None:
        """Get the declared value with the given integer."""
        for value in self.values:
            if value.value == number:
                return value
        return None

    def value_named(self, name: str) -> EnumValue | None:
        """Get the declared value with the given name."""
        for value in self.values:
            if value.name == name:
                return value
        return None


class FieldSpec(BaseModel):
    """
    A single struct, exception or argument-list field.

    Attributes:
        id: Positive field id, unique within its struct
        name: Field identifier
        requiredness: Presence contract
        type: Declared type (may be an alias)
        default: Explicit default value, if declared
    """

    id: PositiveInt
    name: str
    requiredness: Requiredness = Requiredness.DEFAULT
    type: TypeSpec
    default: ConstValue | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_required(self) -> bool:
        """Check if field is required."""
        return self.requiredness == Requiredness.REQUIRED


class StructType(BaseModel):
    """
    A struct or exception definition.

    Function argument lists and throws clauses are modelled as structs too.
    """

    kind: Literal["struct"] = "struct"
    name: str
    program: ProgramRef
    is_exception: bool = False
    fields: list[FieldSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_unique_fields(self) -> StructType:
        """Ensure field ids and field names are unique within the struct."""
        ids: set[int] = set()
        names: set[str] = set()
        for field in self.fields:
            if field.id in ids:
                raise ValueError(f"Struct '{self.name}' has duplicate field id {field.id}")
            if field.name in names:
                raise ValueError(f"Struct '{self.name}' has duplicate field name '{field.name}'")
            ids.add(field.id)
            names.add(field.name)
        return self

    def field_named(self, name: str) -> FieldSpec | None:
        """Get a field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None


class ListType(BaseModel):
    """``list<elem>``."""

    kind: Literal["list"] = "list"
    elem: TypeSpec

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return f"list<{self.elem.name}>"


class SetType(BaseModel):
    """``set<elem>``."""

    kind: Literal["set"] = "set"
    elem: TypeSpec

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return f"set<{self.elem.name}>"


class MapType(BaseModel):
    """``map<key, val>``."""

    kind: Literal["map"] = "map"
    key: TypeSpec
    val: TypeSpec

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return f"map<{self.key.name},{self.val.name}>"


class AliasType(BaseModel):
    """A typedef: a transparent name for another type."""

    kind: Literal["alias"] = "alias"
    name: str
    target: TypeSpec

    model_config = ConfigDict(frozen=True)


TypeSpec = Annotated[
    BaseType | VoidType | EnumType | StructType | ListType | SetType | MapType | AliasType,
    Field(discriminator="kind"),
]

# What resolve() returns: any type except an alias
ResolvedType = BaseType | VoidType | EnumType | StructType | ListType | SetType | MapType

# Types that aggregate other values and get an empty default when required
AggregateType = StructType | ListType | SetType | MapType


FieldSpec.model_rebuild()
StructType.model_rebuild()
ListType.model_rebuild()
SetType.model_rebuild()
MapType.model_rebuild()
AliasType.model_rebuild()


def base(kind: BaseKind | str) -> BaseType:
    """Shorthand for building a base type."""
    return BaseType(base=BaseKind(kind))
