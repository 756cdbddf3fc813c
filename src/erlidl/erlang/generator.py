"""
Erlang generator driver.

Generates every artifact of one program:

- ``<ns><program>_types.hrl``: enum macros and records
- ``<ns><program>_types.erl``: ``enum_info/1``, ``struct_info/1`` and
  ``struct_info_ext/1``
- ``<ns><program>_constants.hrl``: constant macros
- ``<ns><service>_service.hrl`` / ``.erl`` per service: ``function_info/2``

Entities are emitted in declaration order. Each artifact is an explicit
buffer owned by one ``generate`` call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from .._version import get_version
from ..core import ir
from ..core.errors import DuplicateNameError, ErlIdlError, ErrorContext
from ..core.manifest import GeneratorConfig
from .artifact import Artifact
from .declarations import DeclarationEmitter
from .naming import ErlangNames
from .services import ServiceDescriptorTable, ServiceEmitter
from .terms import StructInfo
from .typespecs import emit_descriptor_typespecs

logger = logging.getLogger(__name__)


@dataclass
class GeneratorResult:
    """
    Result from a generator run.

    Attributes:
        artifacts: Generated file contents keyed by file name, in emission order
        enum_info: Enum descriptors keyed by lowercased enum name
        struct_info: Struct descriptors keyed by lowercased struct name
        struct_info_ext: Extended struct descriptors, same keys
        constants: Rendered constant literals keyed by constant name
        services: Service descriptor tables keyed by service name
        files_created: Paths written by ``write``
    """

    artifacts: dict[str, str] = field(default_factory=dict)
    enum_info: dict[str, tuple[tuple[str, int], ...]] = field(default_factory=dict)
    struct_info: dict[str, StructInfo] = field(default_factory=dict)
    struct_info_ext: dict[str, StructInfo] = field(default_factory=dict)
    constants: dict[str, str] = field(default_factory=dict)
    services: dict[str, ServiceDescriptorTable] = field(default_factory=dict)
    files_created: list[Path] = field(default_factory=list)

    def add_artifact(self, artifact: Artifact) -> None:
        self.artifacts[artifact.filename] = artifact.getvalue()

    def write(self, output_dir: Path) -> list[Path]:
        """Write every artifact into ``output_dir``, creating it if needed."""
        output_dir.mkdir(parents=True, exist_ok=True)
        for filename, content in self.artifacts.items():
            path = output_dir / filename
            path.write_text(content)
            self.files_created.append(path)
            logger.info("Wrote %s", path)
        return self.files_created


def _claim(taken: dict, key: str, what: str) -> None:
    if key in taken:
        raise DuplicateNameError(f"Erlang {what} name {key!r} is already taken")


def autogen_banner() -> str:
    return "\n".join(
        [
            "%%",
            f"%% Autogenerated by erlidl ({get_version()})",
            "%%",
            "%% DO NOT EDIT UNLESS YOU ARE SURE THAT YOU KNOW WHAT YOU ARE DOING",
            "%%",
        ]
    )


class ErlangGenerator:
    """
    Generate the Erlang artifacts of a program.

    Example:
        generator = ErlangGenerator(GeneratorConfig())
        result = generator.generate(program)
        result.write(Path("gen-erl"))
    """

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()
        self.names = ErlangNames(self.config.namespace)

    def generate(self, program: ir.ProgramSpec) -> GeneratorResult:
        """
        Generate all artifacts of a program.

        Raises:
            ErlIdlError: On the first entity that cannot be rendered; the
                error names the entity
        """
        ref = program.ref
        types_name = self.names.types_module(ref)
        constants_name = self.names.constants_header(ref)
        emitter = DeclarationEmitter(ref, self.names)

        types_hrl = self._artifact(f"{types_name}.hrl")
        types_erl = self._artifact(f"{types_name}.erl")
        constants_hrl = self._artifact(f"{constants_name}.hrl")
        enum_info = self._artifact("enum_info")
        struct_info = self._artifact("struct_info")
        struct_info_ext = self._artifact("struct_info_ext")

        types_hrl.line(f"-ifndef(_{types_name}_included).")
        types_hrl.line(f"-define(_{types_name}_included, 42).")
        types_hrl.line()
        for include in program.includes:
            types_hrl.line(f'-include("{self.names.types_module(include.ref)}.hrl").')
        if program.includes:
            types_hrl.line()

        result = GeneratorResult()

        for alias in program.typedefs:
            with self._entity("typedef", alias.name, ref):
                emitter.emit_typedef(alias)
        for enum in program.enums:
            with self._entity("enum", enum.name, ref):
                key = self.names.type_name(enum)
                _claim(result.enum_info, key, "enum")
                result.enum_info[key] = emitter.emit_enum(enum, types_hrl, enum_info)
        for struct in program.structs:
            with self._entity("exception" if struct.is_exception else "struct", struct.name, ref):
                key = self.names.type_name(struct)
                _claim(result.struct_info, key, "record")
                result.struct_info[key], result.struct_info_ext[key] = emitter.emit_struct(
                    struct, types_hrl, struct_info, struct_info_ext
                )
        types_hrl.line("-endif.")

        constants_hrl.block(autogen_banner())
        constants_hrl.line()
        constants_hrl.line(f'-include("{types_name}.hrl").')
        constants_hrl.line()
        for const in program.consts:
            with self._entity("const", const.name, ref):
                _claim(result.constants, const.name, "constant")
                result.constants[const.name] = emitter.emit_const(const, constants_hrl)

        self._emit_types_module(types_erl, types_name, enum_info, struct_info, struct_info_ext)

        result.add_artifact(types_hrl)
        result.add_artifact(types_erl)
        result.add_artifact(constants_hrl)

        service_emitter = ServiceEmitter(ref, self.names)
        for service in program.services:
            module = self.names.service_module(service)
            service_hrl = self._artifact(f"{module}.hrl")
            service_erl = self._artifact(f"{module}.erl")
            with self._entity("service", service.name, ref):
                _claim(result.artifacts, service_erl.filename, "service module")
                service_emitter.emit_header(service, service_hrl)
                result.services[service.name] = service_emitter.emit_module(
                    service, service_erl, autogen_banner()
                )
            result.add_artifact(service_hrl)
            result.add_artifact(service_erl)

        logger.info("Generated %d artifacts for program %s", len(result.artifacts), program.name)
        return result

    def _artifact(self, filename: str) -> Artifact:
        return Artifact(filename, self.config.indent)

    @contextmanager
    def _entity(self, kind: str, name: str, program: ir.ProgramRef) -> Iterator[None]:
        """Name the entity in any error raised while emitting it."""
        try:
            yield
        except ErlIdlError as e:
            raise e.attach_context(ErrorContext(kind=kind, name=name, program=program.name))

    def _emit_types_module(
        self,
        out: Artifact,
        module: str,
        enum_info: Artifact,
        struct_info: Artifact,
        struct_info_ext: Artifact,
    ) -> None:
        out.block(autogen_banner())
        out.line()
        out.line(f"-module({module}).")
        out.line()
        out.line(f'-include("{module}.hrl").')
        out.line()

        emit_descriptor_typespecs(out, with_extended=True)
        out.line("-type enum_value_info() :: {atom(), integer()}.")
        out.line()
        out.line("-export([enum_info/1, struct_info/1, struct_info_ext/1]).")
        out.line()

        out.line("-spec enum_info(atom()) -> {enum, [enum_value_info()]} | undefined.")
        out.line()
        out.extend(enum_info)
        out.line("enum_info('i am a dummy enum') -> undefined.")
        out.line()

        out.line("-spec struct_info(atom()) -> {struct, [struct_field_info()]} | undefined.")
        out.line()
        out.extend(struct_info)
        out.line("struct_info('i am a dummy struct') -> undefined.")
        out.line()

        out.line("-spec struct_info_ext(atom()) -> {struct, [struct_field_info_ext()]} | undefined.")
        out.line()
        out.extend(struct_info_ext)
        out.line("struct_info_ext('i am a dummy struct') -> undefined.")
