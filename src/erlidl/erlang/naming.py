"""
Erlang naming rules: module names, record names and atoms.
"""

from __future__ import annotations

from ..core import ir

_NAMESPACE_SEPARATORS = str.maketrans({".": "_", "-": "_", "/": "_", "\\": "_"})


def uncapitalize(name: str) -> str:
    """Lowercase the first character."""
    return name[:1].lower() + name[1:]


def capitalize(name: str) -> str:
    """Uppercase the first character."""
    return name[:1].upper() + name[1:]


def quote_atom(name: str) -> str:
    """Render a quoted Erlang atom."""
    escaped = name.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class ErlangNames:
    """
    Computes the Erlang names of generated modules and records.

    Args:
        default_namespace: Namespace for programs that declare none
    """

    def __init__(self, default_namespace: str | None = None):
        self.default_namespace = default_namespace or ""

    def namespace_prefix(self, program: ir.ProgramRef) -> str:
        """
        Module name prefix for a program: its namespace with path
        separators replaced, plus a trailing underscore; empty if none.
        """
        namespace = program.namespace or self.default_namespace
        namespace = namespace.translate(_NAMESPACE_SEPARATORS)
        return f"{namespace}_" if namespace else ""

    def program_name(self, program: ir.ProgramRef) -> str:
        return uncapitalize(program.name)

    def types_module(self, program: ir.ProgramRef) -> str:
        """Name of the module holding a program's type descriptors."""
        return f"{self.namespace_prefix(program)}{self.program_name(program)}_types"

    def constants_header(self, program: ir.ProgramRef) -> str:
        return f"{self.namespace_prefix(program)}{self.program_name(program)}_constants"

    def owner_module(self, type_: ir.EnumType | ir.StructType) -> str:
        """Types module of the program that declares ``type_``."""
        return self.types_module(type_.program)

    def service_module(self, service: ir.ServiceSpec) -> str:
        return f"{self.namespace_prefix(service.program)}{uncapitalize(service.name)}_service"

    def type_name(self, type_: ir.EnumType | ir.StructType) -> str:
        """Local (record / descriptor key) name of a named type."""
        return uncapitalize(type_.name)

    def field_name(self, field: ir.FieldSpec) -> str:
        return uncapitalize(field.name)

    def enum_atom(self, value: ir.EnumValue) -> str:
        """The quoted atom an enum value renders as."""
        return quote_atom(value.name.lower())

    def enum_macro(self, program: ir.ProgramRef, enum: ir.EnumType, value: ir.EnumValue) -> str:
        return f"{self.program_name(program)}_{enum.name}_{capitalize(value.name)}"

    def const_macro(self, program: ir.ProgramRef, name: str) -> str:
        return f"{self.program_name(program)}_{name}"


DEFAULT_NAMES = ErlangNames()
