"""
Field default derivation.

A field's record default is its explicit default when it has one. A
required aggregate field without one gets an empty aggregate so a fresh
record is always encodable; every other field starts out ``undefined``.
"""

from __future__ import annotations

from ..core import ir
from ..core.resolver import resolve
from .constants import render_const
from .naming import DEFAULT_NAMES, ErlangNames

ABSENT = "undefined"


def has_default(field: ir.FieldSpec) -> bool:
    """Whether a field's record declaration carries a default."""
    if field.default is not None:
        return True
    return field.is_required and isinstance(resolve(field.type), ir.AggregateType)


def render_default(field: ir.FieldSpec, names: ErlangNames = DEFAULT_NAMES) -> str:
    """
    Render a field's materialized default.

    Returns:
        Erlang literal, or ``ABSENT`` when the field has no default
    """
    if field.default is not None:
        return render_const(field.type, field.default, names)
    if not has_default(field):
        return ABSENT
    return _empty_aggregate(resolve(field.type), names)


def _empty_aggregate(type_: ir.ResolvedType, names: ErlangNames) -> str:
    if isinstance(type_, ir.StructType):
        return f"#{names.type_name(type_)}{{}}"
    if isinstance(type_, ir.MapType):
        return "#{}"
    if isinstance(type_, ir.SetType):
        return "ordsets:new()"
    if isinstance(type_, ir.ListType):
        return "[]"
    return ABSENT
