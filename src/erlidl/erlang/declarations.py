"""
Declaration emission for a program's types and constants.

Each method writes one entity into the buffers it is handed:

- enums: ``-define`` per value into the header, an ``enum_info/1`` clause
- structs and exceptions: ``-record`` and ``-type`` into the header, a
  ``struct_info/1`` and a ``struct_info_ext/1`` clause
- constants: a ``-define`` into the constants header
- typedefs: nothing, aliases only exist at compile time
"""

from __future__ import annotations

import logging

from ..core import ir
from ..core.errors import DuplicateEnumConstantError, DuplicateNameError
from .artifact import Artifact
from .constants import render_const
from .defaults import has_default, render_default
from .describe import describe_struct
from .naming import DEFAULT_NAMES, ErlangNames, quote_atom
from .terms import StructInfo, render_term
from .typespecs import render_typespec

logger = logging.getLogger(__name__)


class DeclarationEmitter:
    """
    Emit the declarations of one program.

    Args:
        program: Program being generated; owns the emitted macro names
        names: Erlang naming rules
    """

    def __init__(self, program: ir.ProgramRef, names: ErlangNames = DEFAULT_NAMES):
        self.program = program
        self.names = names

    def emit_typedef(self, alias: ir.AliasType) -> None:
        logger.debug("Skipping typedef %s", alias.name)

    def emit_enum(
        self, enum: ir.EnumType, header: Artifact, enum_info: Artifact
    ) -> tuple[tuple[str, int], ...]:
        """
        Emit an enum's value macros and its ``enum_info`` clause.

        Returns:
            The ``(atom, value)`` pairs of the ``enum_info`` clause

        Raises:
            DuplicateEnumConstantError: If two values share an Erlang name
        """
        logger.debug("Emitting enum %s", enum.name)
        seen: dict[str, str] = {}
        for value in enum.values:
            atom = self.names.enum_atom(value)
            if atom in seen:
                raise DuplicateEnumConstantError(
                    f"Enum '{enum.name}' values '{seen[atom]}' and '{value.name}' "
                    f"both render as {atom}"
                )
            seen[atom] = value.name

        for value in enum.values:
            macro = self.names.enum_macro(self.program, enum, value)
            header.line(f"-define({macro}, {value.value}).")
        header.line()

        enum_info.line(f"enum_info({self._atom(enum)}) ->")
        with enum_info.indented():
            if not enum.values:
                enum_info.line("{enum, []};")
            else:
                enum_info.line("{enum, [")
                with enum_info.indented():
                    for i, value in enumerate(enum.values):
                        sep = "," if i < len(enum.values) - 1 else ""
                        enum_info.line(f"{{{self.names.enum_atom(value)}, {value.value}}}{sep}")
                enum_info.line("]};")
        enum_info.line()
        return tuple((value.name.lower(), value.value) for value in enum.values)

    def emit_struct(
        self,
        struct: ir.StructType,
        header: Artifact,
        struct_info: Artifact,
        struct_info_ext: Artifact,
    ) -> tuple[StructInfo, StructInfo]:
        """
        Emit a struct's (or exception's) record and both descriptor clauses.

        Returns:
            The plain and the extended descriptor
        """
        logger.debug("Emitting %s %s", "exception" if struct.is_exception else "struct", struct.name)
        self.emit_record(struct, header)
        return (
            self.emit_struct_info(struct, struct_info, extended=False),
            self.emit_struct_info(struct, struct_info_ext, extended=True),
        )

    def emit_record(self, struct: ir.StructType, header: Artifact) -> None:
        """
        Emit a struct's ``-record`` and ``-type`` declarations.

        Raises:
            DuplicateNameError: If two fields share an Erlang field name
        """
        name = self.names.type_name(struct)
        seen: dict[str, str] = {}
        for field in struct.fields:
            field_name = self.names.field_name(field)
            if field_name in seen:
                raise DuplicateNameError(
                    f"Fields '{seen[field_name]}' and '{field.name}' of '{struct.name}' "
                    f"both render as {field_name}"
                )
            seen[field_name] = field.name

        header.line(f"%% struct {name}")
        header.line()

        if not struct.fields:
            header.line(f"-record({name}, {{}}).")
        else:
            header.line(f"-record({name}, {{")
            with header.indented():
                for i, field in enumerate(struct.fields):
                    sep = "," if i < len(struct.fields) - 1 else ""
                    header.line(self.render_record_field(field) + sep)
            header.line("}).")
        header.line()
        header.line(f"-type {name}() :: #{name}{{}}.")
        header.line()

    def render_record_field(self, field: ir.FieldSpec) -> str:
        """``name [= default] :: typespec()``"""
        text = self.names.field_name(field)
        if has_default(field):
            text += f" = {render_default(field, self.names)}"
        return f"{text} :: {render_typespec(field.type, self.names)}"

    def emit_struct_info(self, struct: ir.StructType, out: Artifact, extended: bool) -> StructInfo:
        function = "struct_info_ext" if extended else "struct_info"
        descriptor = describe_struct(struct, extended, self.names)
        out.line(f"{function}({self._atom(struct)}) ->")
        with out.indented():
            out.block(render_term(descriptor, out.level, out.indent_width) + ";")
        out.line()
        return descriptor

    def emit_const(self, const: ir.ConstSpec, out: Artifact) -> str:
        logger.debug("Emitting constant %s", const.name)
        literal = render_const(const.type, const.value, self.names)
        out.line(f"-define({self.names.const_macro(self.program, const.name)}, {literal}).")
        out.line()
        return literal

    def _atom(self, type_: ir.EnumType | ir.StructType) -> str:
        return quote_atom(self.names.type_name(type_))
