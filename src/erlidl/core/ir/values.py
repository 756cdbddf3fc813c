"""
Constant value trees for erlidl IR.

A constant value carries no type of its own: it is always rendered
against the declared type that accompanies it (a constant's type, or a
field's type for field defaults).
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class IntValue(BaseModel):
    """An integer literal (also used for bools and enum values)."""

    kind: Literal["int"] = "int"
    value: int

    model_config = ConfigDict(frozen=True)


class DoubleValue(BaseModel):
    """A floating point literal."""

    kind: Literal["double"] = "double"
    value: float

    model_config = ConfigDict(frozen=True)


class BoolValue(BaseModel):
    """A boolean literal."""

    kind: Literal["bool"] = "bool"
    value: bool

    model_config = ConfigDict(frozen=True)


class StringValue(BaseModel):
    """A string literal."""

    kind: Literal["string"] = "string"
    value: str

    model_config = ConfigDict(frozen=True)


class ListValue(BaseModel):
    """An ordered sequence of values; rendered as a list or a set."""

    kind: Literal["list"] = "list"
    items: list[ConstValue] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class MapValue(BaseModel):
    """
    Ordered key/value pairs.

    Pairs are kept in the order given; keys are not deduplicated here.
    """

    kind: Literal["map"] = "map"
    pairs: list[tuple[ConstValue, ConstValue]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class StructValue(BaseModel):
    """Field assignments for a struct-shaped constant, in the order given."""

    kind: Literal["struct"] = "struct"
    assignments: dict[str, ConstValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


ConstValue = Annotated[
    IntValue | DoubleValue | BoolValue | StringValue | ListValue | MapValue | StructValue,
    Field(discriminator="kind"),
]


ListValue.model_rebuild()
MapValue.model_rebuild()
StructValue.model_rebuild()
