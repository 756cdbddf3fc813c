"""
Constant value rendering.

Turns a constant value tree into an Erlang literal, checking it against
its declared type as it goes. Values carry no type of their own, so the
declared type drives every step of the recursion.
"""

from __future__ import annotations

import math
from typing import assert_never

from ..core import ir
from ..core.errors import (
    UnknownEnumValueError,
    UnknownFieldError,
    UnrenderableConstantError,
)
from ..core.resolver import resolve
from .naming import DEFAULT_NAMES, ErlangNames

_INTEGER_RANGES: dict[ir.BaseKind, tuple[int, int]] = {
    ir.BaseKind.BYTE: (-(2**7), 2**7 - 1),
    ir.BaseKind.I16: (-(2**15), 2**15 - 1),
    ir.BaseKind.I32: (-(2**31), 2**31 - 1),
    ir.BaseKind.I64: (-(2**63), 2**63 - 1),
}

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def render_const(
    type_: ir.TypeSpec, value: ir.ConstValue, names: ErlangNames = DEFAULT_NAMES
) -> str:
    """
    Render a constant value as an Erlang literal of the given type.

    Args:
        type_: Declared type (aliases are resolved)
        value: Constant value
        names: Erlang naming rules

    Returns:
        Erlang literal text

    Raises:
        UnknownEnumValueError: Enum constant matching no declared value
        UnknownFieldError: Struct constant assigning an undeclared field
        UnrenderableConstantError: Value shape does not fit the type
    """
    resolved = resolve(type_)

    if isinstance(resolved, ir.BaseType):
        return _render_base(resolved, value)

    if isinstance(resolved, ir.EnumType):
        if not isinstance(value, ir.IntValue):
            raise _mismatch(resolved, value)
        enum_value = resolved.value_for(value.value)
        if enum_value is None:
            raise UnknownEnumValueError(
                f"Enum '{resolved.name}' has no value {value.value}"
            )
        return names.enum_atom(enum_value)

    if isinstance(resolved, ir.StructType):
        if not isinstance(value, ir.StructValue):
            raise _mismatch(resolved, value)
        assignments = []
        for field_name, field_value in value.assignments.items():
            field = resolved.field_named(field_name)
            if field is None:
                raise UnknownFieldError(f"Struct '{resolved.name}' has no field '{field_name}'")
            literal = render_const(field.type, field_value, names)
            assignments.append(f"{names.field_name(field)} = {literal}")
        return f"#{names.type_name(resolved)}{{{', '.join(assignments)}}}"

    if isinstance(resolved, ir.MapType):
        if not isinstance(value, ir.MapValue):
            raise _mismatch(resolved, value)
        pairs = [
            f"{render_const(resolved.key, k, names)} => {render_const(resolved.val, v, names)}"
            for k, v in value.pairs
        ]
        return f"#{{{', '.join(pairs)}}}"

    if isinstance(resolved, ir.SetType):
        if not isinstance(value, ir.ListValue):
            raise _mismatch(resolved, value)
        items = [render_const(resolved.elem, item, names) for item in value.items]
        return f"ordsets:from_list([{', '.join(items)}])"

    if isinstance(resolved, ir.ListType):
        if not isinstance(value, ir.ListValue):
            raise _mismatch(resolved, value)
        items = [render_const(resolved.elem, item, names) for item in value.items]
        return f"[{', '.join(items)}]"

    if isinstance(resolved, ir.VoidType):
        raise UnrenderableConstantError("Cannot render a constant of type void")

    assert_never(resolved)


def _render_base(type_: ir.BaseType, value: ir.ConstValue) -> str:
    kind = type_.base

    if kind == ir.BaseKind.STRING:
        if isinstance(value, ir.StringValue):
            return escape_string(value.value)
    elif kind == ir.BaseKind.BOOL:
        if isinstance(value, ir.BoolValue):
            return "true" if value.value else "false"
        if isinstance(value, ir.IntValue):
            return "true" if value.value > 0 else "false"
    elif kind == ir.BaseKind.DOUBLE:
        if isinstance(value, ir.IntValue | ir.DoubleValue):
            return format_float(value.value)
    elif isinstance(value, ir.IntValue):
        low, high = _INTEGER_RANGES[kind]
        if not low <= value.value <= high:
            raise UnrenderableConstantError(f"{value.value} is out of range for {kind.value}")
        return str(value.value)

    raise _mismatch(type_, value)


def escape_string(text: str) -> str:
    """
    Render a double-quoted Erlang string literal.

    Control characters without a short escape become ``\\x{HH}``.
    """
    return '"' + "".join(_escape_char(ch) for ch in text) + '"'


def _escape_char(ch: str) -> str:
    if ch in _STRING_ESCAPES:
        return _STRING_ESCAPES[ch]
    if ord(ch) < 0x20 or ord(ch) == 0x7F:
        return f"\\x{{{ord(ch):02X}}}"
    return ch


def format_float(number: int | float) -> str:
    """
    Render a number as an Erlang float literal.

    Erlang floats need a digit on both sides of the point, including
    before an exponent: ``1.0``, ``2.5e-8``, ``1.0e+20``.
    """
    number = float(number)
    if not math.isfinite(number):
        raise UnrenderableConstantError(f"Erlang has no literal for {number}")
    text = repr(number)
    mantissa, sep, exponent = text.partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return mantissa + sep + exponent


def _mismatch(type_: ir.ResolvedType, value: ir.ConstValue) -> UnrenderableConstantError:
    type_name = getattr(type_, "name", type_.kind)
    return UnrenderableConstantError(f"Cannot render a {value.kind} value as {type_name}")
