"""
Reflection descriptor terms.

A descriptor is the structural term a generic, schema-driven Erlang
codec reads to encode and decode a type. Descriptors are built as plain
frozen values and rendered to Erlang term text separately.

Term shapes::

    bool | byte | i16 | i32 | i64 | double | string
    {enum, {Module, Name}}
    {struct, {Module, Name}}
    {struct, [{Id, Type}, ...]}
    {struct, [{Id, Req, Type, Name, Default}, ...]}
    {list, Type} | {set, Type} | {map, KeyType, ValType}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, assert_never

from .naming import quote_atom


class BaseTag(StrEnum):
    """Atomic descriptors of the base types."""

    BOOL = "bool"
    BYTE = "byte"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    DOUBLE = "double"
    STRING = "string"


class Sentinel(StrEnum):
    """Distinguished atoms returned instead of a descriptor."""

    ONEWAY_VOID = "oneway_void"
    NO_FUNCTION = "no_function"


@dataclass(frozen=True)
class TypeRef:
    """Reference to an enum or struct descriptor in a types module."""

    kind: Literal["enum", "struct"]
    module: str
    name: str


@dataclass(frozen=True)
class FieldInfo:
    id: int
    type: Descriptor


@dataclass(frozen=True)
class FieldInfoExt:
    """Field descriptor carrying requiredness, name and default."""

    id: int
    requiredness: str
    type: Descriptor
    name: str
    default: str


@dataclass(frozen=True)
class StructInfo:
    """Inline struct descriptor: one field descriptor per field, in order."""

    fields: tuple[FieldInfo, ...] | tuple[FieldInfoExt, ...] = ()


@dataclass(frozen=True)
class ListInfo:
    elem: Descriptor


@dataclass(frozen=True)
class SetInfo:
    elem: Descriptor


@dataclass(frozen=True)
class MapInfo:
    key: Descriptor
    val: Descriptor


Descriptor = BaseTag | TypeRef | StructInfo | ListInfo | SetInfo | MapInfo

EMPTY_STRUCT = StructInfo()


def render_term(term: Descriptor | Sentinel, level: int = 0, indent: int = 2) -> str:
    """
    Render a descriptor as Erlang term text.

    Inline struct descriptors span several lines: one field per line at
    ``level + 1``, the closing bracket at ``level``. The first line is
    never indented; the caller positions it.

    Args:
        term: Descriptor or sentinel
        level: Indentation level of the line the term starts on
        indent: Spaces per level
    """
    if isinstance(term, Sentinel | BaseTag):
        return term.value
    if isinstance(term, TypeRef):
        return f"{{{term.kind}, {{{quote_atom(term.module)}, {quote_atom(term.name)}}}}}"
    if isinstance(term, StructInfo):
        if not term.fields:
            return "{struct, []}"
        pad = " " * (indent * (level + 1))
        lines = [f"{pad}{_render_field(field, level + 1, indent)}" for field in term.fields]
        return "{struct, [\n" + ",\n".join(lines) + "\n" + " " * (indent * level) + "]}"
    if isinstance(term, ListInfo):
        return f"{{list, {render_term(term.elem, level, indent)}}}"
    if isinstance(term, SetInfo):
        return f"{{set, {render_term(term.elem, level, indent)}}}"
    if isinstance(term, MapInfo):
        key = render_term(term.key, level, indent)
        val = render_term(term.val, level, indent)
        return f"{{map, {key}, {val}}}"
    assert_never(term)


def _render_field(field: FieldInfo | FieldInfoExt, level: int, indent: int) -> str:
    type_term = render_term(field.type, level, indent)
    if isinstance(field, FieldInfoExt):
        return (
            f"{{{field.id}, {field.requiredness}, {type_term}, "
            f"{quote_atom(field.name)}, {field.default}}}"
        )
    return f"{{{field.id}, {type_term}}}"
