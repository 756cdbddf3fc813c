"""
Erlang type specifications.

Two kinds: the ``::`` annotation of each record field, derived from the
field's resolved type, and the fixed ``-type`` declarations describing
descriptor terms, shared by types and service modules.
"""

from __future__ import annotations

from typing import assert_never

from ..core import ir
from ..core.errors import UnsupportedTypeError
from ..core.resolver import resolve
from .artifact import Artifact
from .naming import DEFAULT_NAMES, ErlangNames

_BASE_TYPESPECS: dict[ir.BaseKind, str] = {
    ir.BaseKind.STRING: "binary()",
    ir.BaseKind.BOOL: "boolean()",
    ir.BaseKind.BYTE: "integer()",
    ir.BaseKind.I16: "integer()",
    ir.BaseKind.I32: "integer()",
    ir.BaseKind.I64: "integer()",
    ir.BaseKind.DOUBLE: "float()",
}


def render_typespec(type_: ir.TypeSpec, names: ErlangNames = DEFAULT_NAMES) -> str:
    """Erlang typespec of values of ``type_``."""
    resolved = resolve(type_)
    if isinstance(resolved, ir.BaseType):
        return _BASE_TYPESPECS[resolved.base]
    if isinstance(resolved, ir.EnumType):
        return "atom()"
    if isinstance(resolved, ir.StructType):
        return f"{names.type_name(resolved)}()"
    if isinstance(resolved, ir.MapType):
        return f"#{{{render_typespec(resolved.key, names)} => {render_typespec(resolved.val, names)}}}"
    if isinstance(resolved, ir.SetType):
        return f"ordsets:ordset({render_typespec(resolved.elem, names)})"
    if isinstance(resolved, ir.ListType):
        return f"list({render_typespec(resolved.elem, names)})"
    if isinstance(resolved, ir.VoidType):
        raise UnsupportedTypeError("void has no typespec")
    assert_never(resolved)


def emit_descriptor_typespecs(out: Artifact, with_extended: bool) -> None:
    """Declare the types of descriptor terms."""
    out.line("-type type_ref() :: {module(), atom()}.")
    out.line("-type field_num() :: pos_integer().")
    if with_extended:
        out.line("-type field_name() :: atom().")
        out.line("-type field_req() :: required | optional | undefined.")

    out.line("-type field_type() ::")
    with out.indented():
        out.line("bool | byte | i16 | i32 | i64 | string | double |")
        out.line("{enum, type_ref()} |")
        out.line("{struct, type_ref()} |")
        out.line("{list, field_type()} |")
        out.line("{set, field_type()} |")
        out.line("{map, field_type(), field_type()}.")
    out.line()

    out.line("-type struct_field_info() :: {field_num(), field_type()}.")
    if with_extended:
        out.line(
            "-type struct_field_info_ext() :: "
            "{field_num(), field_req(), field_type(), field_name(), any()}."
        )
    out.line()
