"""
Reflection descriptor building.

``describe`` turns a type into its descriptor term. Structs are either
referenced by ``{Module, Name}`` or expanded into their field list;
expansion is one level deep, so field types are always references and
self-referential struct graphs stay finite.
"""

from __future__ import annotations

from typing import assert_never

from ..core import ir
from ..core.errors import UnsupportedTypeError
from ..core.resolver import resolve
from .defaults import render_default
from .naming import DEFAULT_NAMES, ErlangNames
from .terms import (
    BaseTag,
    Descriptor,
    FieldInfo,
    FieldInfoExt,
    ListInfo,
    MapInfo,
    SetInfo,
    StructInfo,
    TypeRef,
)

REQUIREDNESS_ATOMS: dict[ir.Requiredness, str] = {
    ir.Requiredness.REQUIRED: "required",
    ir.Requiredness.OPTIONAL: "optional",
    ir.Requiredness.DEFAULT: "undefined",
}


def describe(
    type_: ir.TypeSpec,
    expand: bool = False,
    extended: bool = False,
    names: ErlangNames = DEFAULT_NAMES,
) -> Descriptor:
    """
    Build the descriptor of a type.

    Args:
        type_: Type to describe (aliases are resolved)
        expand: Inline a struct's field list instead of referencing it
        extended: With ``expand``, include requiredness, name and default
            in each field descriptor
        names: Erlang naming rules

    Raises:
        UnsupportedTypeError: If ``type_`` is void
    """
    resolved = resolve(type_)

    if isinstance(resolved, ir.BaseType):
        return BaseTag(resolved.base.value)
    if isinstance(resolved, ir.EnumType):
        return TypeRef("enum", names.owner_module(resolved), names.type_name(resolved))
    if isinstance(resolved, ir.StructType):
        if not expand:
            return TypeRef("struct", names.owner_module(resolved), names.type_name(resolved))
        return describe_struct(resolved, extended, names)
    if isinstance(resolved, ir.ListType):
        return ListInfo(describe(resolved.elem, names=names))
    if isinstance(resolved, ir.SetType):
        return SetInfo(describe(resolved.elem, names=names))
    if isinstance(resolved, ir.MapType):
        return MapInfo(describe(resolved.key, names=names), describe(resolved.val, names=names))
    if isinstance(resolved, ir.VoidType):
        raise UnsupportedTypeError("void has no descriptor")
    assert_never(resolved)


def describe_struct(
    struct: ir.StructType, extended: bool = False, names: ErlangNames = DEFAULT_NAMES
) -> StructInfo:
    """Expanded descriptor of a struct, fields in declaration order."""
    if not extended:
        return StructInfo(
            tuple(FieldInfo(field.id, _describe_field(struct, field, names)) for field in struct.fields)
        )
    return StructInfo(
        tuple(
            FieldInfoExt(
                id=field.id,
                requiredness=REQUIREDNESS_ATOMS[field.requiredness],
                type=_describe_field(struct, field, names),
                name=names.field_name(field),
                default=render_default(field, names),
            )
            for field in struct.fields
        )
    )


def _describe_field(struct: ir.StructType, field: ir.FieldSpec, names: ErlangNames) -> Descriptor:
    try:
        return describe(field.type, names=names)
    except UnsupportedTypeError as e:
        raise UnsupportedTypeError(
            f"Field '{field.name}' of '{struct.name}': {e.message}"
        ) from e
