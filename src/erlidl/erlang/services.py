"""
Service descriptors.

Every service function has three descriptors, keyed by function name and
info kind: its parameter struct, its reply type and its exception
struct. A lookup for a function the service does not declare is
delegated up the ``extends`` chain; at the root it yields
``no_function``.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from ..core import ir
from ..core.errors import GenerationError, LinkError
from .artifact import Artifact
from .describe import describe, describe_struct
from .naming import DEFAULT_NAMES, ErlangNames, capitalize, quote_atom
from .terms import EMPTY_STRUCT, Descriptor, Sentinel, render_term
from .typespecs import emit_descriptor_typespecs

logger = logging.getLogger(__name__)


class InfoKind(StrEnum):
    """The descriptor kinds kept per function."""

    PARAMS = "params_type"
    REPLY = "reply_type"
    EXCEPTIONS = "exceptions"

    @classmethod
    def parse(cls, kind: InfoKind | str) -> InfoKind:
        """
        Accept a kind by its atom (``params_type``) or short name (``params``).

        Raises:
            GenerationError: If ``kind`` names no info kind
        """
        for member in cls:
            if kind == member.value or kind == member.name.lower():
                return member
        raise GenerationError(
            f"Unknown function info kind '{kind}'; expected one of "
            + ", ".join(member.value for member in cls)
        )


def function_descriptors(
    function: ir.FunctionSpec, names: ErlangNames = DEFAULT_NAMES
) -> dict[InfoKind, Descriptor | Sentinel]:
    """Build the params, reply and exceptions descriptors of a function."""
    if not function.returns_void:
        reply: Descriptor | Sentinel = describe(function.returns, names=names)
    elif function.oneway:
        reply = Sentinel.ONEWAY_VOID
    else:
        reply = EMPTY_STRUCT
    return {
        InfoKind.PARAMS: describe_struct(function.args, names=names),
        InfoKind.REPLY: reply,
        InfoKind.EXCEPTIONS: describe_struct(function.exceptions, names=names),
    }


class ServiceDescriptorTable:
    """
    Descriptor table of one service, chained to its parent's table.

    Attributes:
        service: The service
        entries: Descriptors of the functions the service itself declares
        parent: Table of the extended service, if any
    """

    def __init__(
        self,
        service: ir.ServiceSpec,
        entries: dict[tuple[str, InfoKind], Descriptor | Sentinel],
        parent: ServiceDescriptorTable | None = None,
    ):
        self.service = service
        self.entries = entries
        self.parent = parent

    @classmethod
    def build(
        cls, service: ir.ServiceSpec, names: ErlangNames = DEFAULT_NAMES
    ) -> ServiceDescriptorTable:
        """
        Build the table of a service and of every service it extends.

        Raises:
            LinkError: If the inheritance chain revisits a service
        """
        chain: list[ir.ServiceSpec] = []
        visited: set[int] = set()
        current: ir.ServiceSpec | None = service
        while current is not None:
            if id(current) in visited:
                cycle = " -> ".join(s.name for s in [*chain, current])
                raise LinkError(f"Service inheritance cycle: {cycle}")
            visited.add(id(current))
            chain.append(current)
            current = current.extends

        # chain[0] is the service itself; ancestors are built root first
        parent: ServiceDescriptorTable | None = None
        for ancestor in reversed(chain[1:]):
            parent = cls(ancestor, _entries(ancestor, names), parent)
        return cls(service, _entries(service, names), parent)

    def lookup(self, function: str, kind: InfoKind | str) -> Descriptor | Sentinel:
        """
        Find a function's descriptor here or up the inheritance chain.

        Returns:
            The descriptor, or ``Sentinel.NO_FUNCTION`` if no service on the
            chain declares ``function``
        """
        key = (function, InfoKind.parse(kind))
        visited: set[int] = set()
        table: ServiceDescriptorTable | None = self
        while table is not None:
            if id(table) in visited:
                raise LinkError(f"Service inheritance cycle at '{table.service.name}'")
            visited.add(id(table))
            if key in table.entries:
                return table.entries[key]
            table = table.parent
        return Sentinel.NO_FUNCTION


def _entries(
    service: ir.ServiceSpec, names: ErlangNames
) -> dict[tuple[str, InfoKind], Descriptor | Sentinel]:
    entries: dict[tuple[str, InfoKind], Descriptor | Sentinel] = {}
    for function in service.functions:
        for kind, descriptor in function_descriptors(function, names).items():
            entries[(function.name, kind)] = descriptor
    return entries


def function_signature(function: ir.FunctionSpec) -> str:
    """``name(This, Arg1, ...)``, as shown in the interface comments."""
    args = "".join(f", {capitalize(field.name)}" for field in function.args.fields)
    return f"{function.name}(This{args})"


class ServiceEmitter:
    """
    Emit a service's ``_service.erl`` module and ``_service.hrl`` header.

    Args:
        program: Program that declares the service
        names: Erlang naming rules
    """

    def __init__(self, program: ir.ProgramRef, names: ErlangNames = DEFAULT_NAMES):
        self.program = program
        self.names = names

    def emit_header(self, service: ir.ServiceSpec, out: Artifact) -> None:
        module = self.names.service_module(service)
        out.line(f"-ifndef(_{module}_included).")
        out.line(f"-define(_{module}_included, 42).")
        out.line()
        out.line(f'-include("{self.names.types_module(self.program)}.hrl").')
        if service.extends is not None:
            parent = self.names.service_module(service.extends)
            out.line(f'-include("{parent}.hrl"). % inherit')
        out.line()
        out.line("-endif.")

    def emit_module(
        self, service: ir.ServiceSpec, out: Artifact, banner: str
    ) -> ServiceDescriptorTable:
        """
        Write the service module.

        Descriptors come from a ``ServiceDescriptorTable``; only the
        service's own functions get clauses, everything else falls through
        to the parent module or to ``no_function``.
        """
        logger.debug("Emitting service %s", service.name)
        table = ServiceDescriptorTable.build(service, self.names)
        module = self.names.service_module(service)

        out.block(banner)
        out.line()
        out.line(f"-module({module}).")
        out.line("-behaviour(thrift_service).")
        out.line()
        out.line(f'-include("{module}.hrl").')
        out.line()
        out.line("-export([function_info/2]).")
        out.line()

        emit_descriptor_typespecs(out, with_extended=False)
        out.line("-type function_info() :: params_type | reply_type | exceptions.")
        out.line()
        out.line(
            "-spec function_info(atom(), function_info()) ->"
            " field_type() | {struct, [struct_field_info()]} | oneway_void | no_function."
        )
        out.line()

        out.line("%%% interface")
        for function in service.functions:
            out.line(f"% {function_signature(function)}")
            for kind in InfoKind:
                descriptor = table.lookup(function.name, kind)
                out.line(f"function_info({quote_atom(function.name)}, {kind.value}) ->")
                with out.indented():
                    out.block(render_term(descriptor, out.level, out.indent_width) + ";")
                out.line()

        if service.extends is not None:
            parent = self.names.service_module(service.extends)
            out.line("function_info(Function, InfoType) ->")
            with out.indented():
                out.line(f"{parent}:function_info(Function, InfoType).")
        else:
            out.line(f"function_info(_Func, _Info) -> {Sentinel.NO_FUNCTION.value}.")
        out.line()
        return table
