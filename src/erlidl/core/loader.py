"""
Program document loading.

Reads a JSON program document, validates its shape and links the names
it uses into an immutable ``ir.ProgramSpec``. This stands in for an IDL
parser: the document already holds the parsed declarations, only names
and constant values still need resolving.

Document shape::

    {
      "name": "tutorial",
      "namespace": "",
      "includes": ["shared.json"],
      "typedefs": [{"name": "MyInteger", "type": "i32"}],
      "enums": [{"name": "Operation", "values": [{"name": "ADD", "value": 1}]}],
      "structs": [{"name": "Work", "fields": [
          {"id": 1, "name": "num1", "type": "i32", "default": 0}]}],
      "exceptions": [{"name": "InvalidOperation", "fields": [...]}],
      "consts": [{"name": "INT32CONSTANT", "type": "i32", "value": 9853}],
      "services": [{"name": "Calculator", "extends": "shared.SharedService",
                    "functions": [{"name": "add", "returns": "i32",
                                   "args": [...], "throws": [...]}]}]
    }

Type expressions are strings: base type names, ``list<T>``, ``set<T>``,
``map<K,V>``, local type names and ``include.Name`` for types owned by an
included program. Names may be used before they are declared; recursive
type references are rejected.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from . import ir
from .errors import LinkError, LoadError, make_link_error
from .resolver import resolve

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\s*(?:([A-Za-z_][A-Za-z0-9_.]*)|(<|>|,))")


# =============================================================================
# Document shape
# =============================================================================


class FieldDoc(BaseModel):
    """A field as written in a document."""

    id: int
    name: str
    type: str
    requiredness: ir.Requiredness = ir.Requiredness.DEFAULT
    default: Any = None

    model_config = ConfigDict(extra="forbid")


class EnumValueDoc(BaseModel):
    """An enum value; unnumbered values continue from the previous one."""

    name: str
    value: int | None = None

    model_config = ConfigDict(extra="forbid")


class EnumDoc(BaseModel):
    name: str
    values: list[EnumValueDoc] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class StructDoc(BaseModel):
    name: str
    fields: list[FieldDoc] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class TypedefDoc(BaseModel):
    name: str
    type: str

    model_config = ConfigDict(extra="forbid")


class ConstDoc(BaseModel):
    name: str
    type: str
    value: Any

    model_config = ConfigDict(extra="forbid")


class FunctionDoc(BaseModel):
    name: str
    returns: str = "void"
    args: list[FieldDoc] = Field(default_factory=list)
    throws: list[FieldDoc] = Field(default_factory=list)
    oneway: bool = False

    model_config = ConfigDict(extra="forbid")


class ServiceDoc(BaseModel):
    name: str
    extends: str | None = None
    functions: list[FunctionDoc] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class ProgramDoc(BaseModel):
    """A whole program document."""

    name: str | None = None
    namespace: str = ""
    includes: list[str] = Field(default_factory=list)
    typedefs: list[TypedefDoc] = Field(default_factory=list)
    enums: list[EnumDoc] = Field(default_factory=list)
    structs: list[StructDoc] = Field(default_factory=list)
    exceptions: list[StructDoc] = Field(default_factory=list)
    consts: list[ConstDoc] = Field(default_factory=list)
    services: list[ServiceDoc] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Loading
# =============================================================================


def load_program(path: Path) -> ir.ProgramSpec:
    """
    Load and link a program document and everything it includes.

    Args:
        path: JSON program document

    Returns:
        Linked program

    Raises:
        LoadError: If a document cannot be read or has the wrong shape
        LinkError: If a name or constant value cannot be resolved
    """
    return _load(Path(path).resolve(), stack=[], cache={})


def parse_program(data: dict[str, Any], name: str = "program") -> ir.ProgramSpec:
    """
    Link an in-memory program document that has no includes.

    Args:
        data: Decoded JSON document
        name: Program name used when the document does not declare one

    Returns:
        Linked program
    """
    doc = _validate(data, source=name)
    if doc.includes:
        raise LoadError(f"Program '{name}': includes need a document path, use load_program()")
    return ProgramLinker(doc, name=doc.name or name, includes={}).link()


def _load(path: Path, stack: list[Path], cache: dict[Path, ir.ProgramSpec]) -> ir.ProgramSpec:
    if path in cache:
        return cache[path]
    if path in stack:
        cycle = " -> ".join(p.name for p in [*stack, path])
        raise LinkError(f"Include cycle: {cycle}")

    try:
        data = json.loads(path.read_text())
    except FileNotFoundError as e:
        raise LoadError(f"Program document not found: {path}") from e
    except OSError as e:
        raise LoadError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON in {path}: {e}") from e

    doc = _validate(data, source=str(path))
    stack.append(path)
    includes: dict[str, ir.ProgramSpec] = {}
    for include in doc.includes:
        included = _load((path.parent / include).resolve(), stack, cache)
        includes[included.name] = included
    stack.pop()

    program = ProgramLinker(doc, name=doc.name or path.stem, includes=includes, file=path).link()
    cache[path] = program
    logger.info("Loaded program %s from %s", program.name, path)
    return program


def _validate(data: Any, source: str) -> ProgramDoc:
    try:
        return ProgramDoc.model_validate(data)
    except PydanticValidationError as e:
        raise LoadError(f"Invalid program document {source}:\n{e}") from e


# =============================================================================
# Linking
# =============================================================================


class ProgramLinker:
    """
    Resolve the names in one program document into IR.

    Named types are built on first use and memoized, so declaration order
    inside the document does not matter.
    """

    def __init__(
        self,
        doc: ProgramDoc,
        name: str,
        includes: dict[str, ir.ProgramSpec],
        file: Path | None = None,
    ):
        self.doc = doc
        self.name = name
        self.includes = includes
        self.file = file
        self.ref = ir.ProgramRef(name=name, namespace=doc.namespace)

        self._typedef_docs = {t.name: t for t in doc.typedefs}
        self._enum_docs = {e.name: e for e in doc.enums}
        self._struct_docs: dict[str, tuple[StructDoc, bool]] = {}
        for struct in doc.structs:
            self._struct_docs[struct.name] = (struct, False)
        for struct in doc.exceptions:
            self._struct_docs[struct.name] = (struct, True)
        self._service_docs = {s.name: s for s in doc.services}

        self._types: dict[str, ir.TypeSpec] = {}
        self._services: dict[str, ir.ServiceSpec] = {}
        self._building: list[str] = []

    def link(self) -> ir.ProgramSpec:
        """Build the program."""
        self._check_duplicates()
        try:
            return ir.ProgramSpec(
                name=self.name,
                namespace=self.doc.namespace,
                includes=list(self.includes.values()),
                typedefs=[self._named_type(t.name) for t in self.doc.typedefs],
                enums=[self._named_type(e.name) for e in self.doc.enums],
                structs=[self._named_type(s.name) for s in [*self.doc.structs, *self.doc.exceptions]],
                consts=[self._build_const(c) for c in self.doc.consts],
                services=[self._service(s.name) for s in self.doc.services],
            )
        except PydanticValidationError as e:
            raise LinkError(f"Program '{self.name}' is invalid:\n{e}") from e

    def _error(self, message: str, kind: str | None = None, name: str | None = None) -> LinkError:
        return make_link_error(message, kind=kind, name=name, program=self.name, file=self.file)

    def _check_duplicates(self) -> None:
        seen: set[str] = set()
        names = [
            *self._typedef_docs,
            *(e.name for e in self.doc.enums),
            *(s.name for s in self.doc.structs),
            *(s.name for s in self.doc.exceptions),
        ]
        for name in names:
            if name in seen:
                raise self._error(f"Type '{name}' is declared more than once")
            seen.add(name)
        if len(self._service_docs) != len(self.doc.services):
            raise self._error("Service names must be unique")
        consts: set[str] = set()
        for const in self.doc.consts:
            if const.name in consts:
                raise self._error(
                    f"Constant '{const.name}' is declared more than once",
                    kind="const",
                    name=const.name,
                )
            consts.add(const.name)

    # --- types ---------------------------------------------------------------

    def parse_type(self, expr: str, allow_void: bool = False) -> ir.TypeSpec:
        """
        Parse a type expression.

        Args:
            expr: Expression such as ``map<string,list<Work>>``
            allow_void: Accept ``void`` (function return types only)
        """
        tokens = self._tokenize(expr)
        type_, pos = self._parse_type_tokens(tokens, 0, expr)
        if pos != len(tokens):
            raise self._error(f"Unexpected '{tokens[pos]}' in type '{expr}'")
        if isinstance(type_, ir.VoidType) and not allow_void:
            raise self._error(f"'void' is only valid as a function return type: '{expr}'")
        return type_

    def _tokenize(self, expr: str) -> list[str]:
        tokens: list[str] = []
        pos = 0
        text = expr.rstrip()
        while pos < len(text):
            match = _TOKEN_RE.match(text, pos)
            if not match:
                raise self._error(f"Cannot parse type '{expr}'")
            tokens.append(match.group(1) or match.group(2))
            pos = match.end()
        if not tokens:
            raise self._error("Empty type expression")
        return tokens

    def _parse_type_tokens(self, tokens: list[str], pos: int, expr: str) -> tuple[ir.TypeSpec, int]:
        def expect(token: str, at: int) -> int:
            if at >= len(tokens) or tokens[at] != token:
                raise self._error(f"Expected '{token}' in type '{expr}'")
            return at + 1

        if pos >= len(tokens):
            raise self._error(f"Unexpected end of type '{expr}'")
        head = tokens[pos]
        pos += 1

        if head in ("list", "set"):
            pos = expect("<", pos)
            elem, pos = self._parse_type_tokens(tokens, pos, expr)
            pos = expect(">", pos)
            self._reject_void(elem, expr)
            if head == "list":
                return ir.ListType(elem=elem), pos
            return ir.SetType(elem=elem), pos
        if head == "map":
            pos = expect("<", pos)
            key, pos = self._parse_type_tokens(tokens, pos, expr)
            pos = expect(",", pos)
            val, pos = self._parse_type_tokens(tokens, pos, expr)
            pos = expect(">", pos)
            self._reject_void(key, expr)
            self._reject_void(val, expr)
            return ir.MapType(key=key, val=val), pos
        if head == "void":
            return ir.VoidType(), pos
        if head in ir.BaseKind.__members__.values():
            return ir.base(head), pos
        if head in ("<", ">", ","):
            raise self._error(f"Unexpected '{head}' in type '{expr}'")
        return self._lookup_type(head), pos

    def _reject_void(self, type_: ir.TypeSpec, expr: str) -> None:
        if isinstance(type_, ir.VoidType):
            raise self._error(f"'void' cannot be a container element: '{expr}'")

    def _lookup_type(self, name: str) -> ir.TypeSpec:
        if "." in name:
            include_name, _, local = name.partition(".")
            program = self.includes.get(include_name)
            if program is None:
                raise self._error(f"Unknown include '{include_name}' in type '{name}'")
            found = _find_named_type(program, local)
            if found is None:
                raise self._error(f"Program '{include_name}' has no type '{local}'")
            return found
        return self._named_type(name)

    def _named_type(self, name: str) -> Any:
        if name in self._types:
            return self._types[name]
        if name in self._building:
            chain = " -> ".join([*self._building, name])
            raise self._error(f"Recursive type reference: {chain}", kind="type", name=name)

        self._building.append(name)
        try:
            if name in self._typedef_docs:
                doc = self._typedef_docs[name]
                built: ir.TypeSpec = ir.AliasType(name=name, target=self.parse_type(doc.type))
            elif name in self._enum_docs:
                built = self._build_enum(self._enum_docs[name])
            elif name in self._struct_docs:
                struct_doc, is_exception = self._struct_docs[name]
                built = self._build_struct(struct_doc.name, struct_doc.fields, is_exception)
            else:
                raise self._error(f"Unknown type '{name}'")
        finally:
            self._building.pop()

        self._types[name] = built
        return built

    def _build_enum(self, doc: EnumDoc) -> ir.EnumType:
        values: list[ir.EnumValue] = []
        next_value = 0
        for value in doc.values:
            number = next_value if value.value is None else value.value
            values.append(ir.EnumValue(name=value.name, value=number))
            next_value = number + 1
        try:
            return ir.EnumType(name=doc.name, program=self.ref, values=values)
        except PydanticValidationError as e:
            raise self._error(str(e), kind="enum", name=doc.name) from e

    def _build_struct(self, name: str, fields: list[FieldDoc], is_exception: bool) -> ir.StructType:
        kind = "exception" if is_exception else "struct"
        built: list[ir.FieldSpec] = []
        seen: set[str] = set()
        for field in fields:
            if field.name in seen:
                raise self._error(
                    f"Field '{field.name}' is declared more than once", kind=kind, name=name
                )
            seen.add(field.name)
            type_ = self.parse_type(field.type)
            default = None
            if field.default is not None:
                default = self.convert_value(type_, field.default, where=f"{name}.{field.name}")
            try:
                built.append(
                    ir.FieldSpec(
                        id=field.id,
                        name=field.name,
                        requiredness=field.requiredness,
                        type=type_,
                        default=default,
                    )
                )
            except PydanticValidationError as e:
                raise self._error(str(e), kind=kind, name=name) from e
        try:
            return ir.StructType(name=name, program=self.ref, is_exception=is_exception, fields=built)
        except PydanticValidationError as e:
            raise self._error(str(e), kind=kind, name=name) from e

    # --- constant values -----------------------------------------------------

    def convert_value(self, type_: ir.TypeSpec, raw: Any, where: str) -> ir.ConstValue:
        """
        Convert a JSON value into a constant value of the given type.

        Args:
            type_: Declared type of the value
            raw: Decoded JSON value
            where: Name used in error messages
        """
        resolved = resolve(type_)

        if isinstance(resolved, ir.BaseType):
            return self._convert_base(resolved, raw, where)
        if isinstance(resolved, ir.EnumType):
            if isinstance(raw, str):
                local = raw.rpartition(".")[2]
                value = resolved.value_named(local)
                if value is None:
                    raise self._error(f"{where}: enum '{resolved.name}' has no value '{raw}'")
                return ir.IntValue(value=value.value)
            if isinstance(raw, int) and not isinstance(raw, bool):
                return ir.IntValue(value=raw)
        elif isinstance(resolved, ir.StructType):
            if isinstance(raw, dict):
                assignments: dict[str, ir.ConstValue] = {}
                for key, item in raw.items():
                    field = resolved.field_named(key)
                    if field is None:
                        raise self._error(f"{where}: '{resolved.name}' has no field '{key}'")
                    assignments[key] = self.convert_value(field.type, item, f"{where}.{key}")
                return ir.StructValue(assignments=assignments)
        elif isinstance(resolved, ir.MapType):
            if isinstance(raw, dict):
                return ir.MapValue(
                    pairs=[
                        (
                            self._convert_key(resolved.key, key, where),
                            self.convert_value(resolved.val, item, f"{where}[{key}]"),
                        )
                        for key, item in raw.items()
                    ]
                )
            if isinstance(raw, list) and all(isinstance(p, list) and len(p) == 2 for p in raw):
                return ir.MapValue(
                    pairs=[
                        (
                            self.convert_value(resolved.key, key, where),
                            self.convert_value(resolved.val, item, where),
                        )
                        for key, item in raw
                    ]
                )
        elif isinstance(resolved, ir.ListType | ir.SetType):
            if isinstance(raw, list):
                return ir.ListValue(
                    items=[
                        self.convert_value(resolved.elem, item, f"{where}[{i}]")
                        for i, item in enumerate(raw)
                    ]
                )

        raise self._error(f"{where}: {json.dumps(raw)} is not a valid {resolved_name(resolved)}")

    def _convert_base(self, type_: ir.BaseType, raw: Any, where: str) -> ir.ConstValue:
        kind = type_.base
        if kind == ir.BaseKind.STRING and isinstance(raw, str):
            return ir.StringValue(value=raw)
        if kind == ir.BaseKind.BOOL:
            if isinstance(raw, bool):
                return ir.BoolValue(value=raw)
            if isinstance(raw, int):
                return ir.IntValue(value=raw)
        if isinstance(raw, bool):
            raise self._error(f"{where}: {json.dumps(raw)} is not a valid {kind.value}")
        if kind == ir.BaseKind.DOUBLE:
            if isinstance(raw, int):
                return ir.IntValue(value=raw)
            if isinstance(raw, float):
                return ir.DoubleValue(value=raw)
        if kind in (ir.BaseKind.BYTE, ir.BaseKind.I16, ir.BaseKind.I32, ir.BaseKind.I64):
            if isinstance(raw, int):
                return ir.IntValue(value=raw)
        raise self._error(f"{where}: {json.dumps(raw)} is not a valid {kind.value}")

    def _convert_key(self, key_type: ir.TypeSpec, key: str, where: str) -> ir.ConstValue:
        """Convert a JSON object key, which is always a string."""
        resolved = resolve(key_type)
        if isinstance(resolved, ir.BaseType) and resolved.base != ir.BaseKind.STRING:
            try:
                raw: Any = json.loads(key)
            except json.JSONDecodeError as e:
                raise self._error(f"{where}: key '{key}' is not a valid {resolved.base.value}") from e
            return self.convert_value(key_type, raw, where)
        return self.convert_value(key_type, key, where)

    def _build_const(self, doc: ConstDoc) -> ir.ConstSpec:
        type_ = self.parse_type(doc.type)
        return ir.ConstSpec(
            name=doc.name,
            type=type_,
            value=self.convert_value(type_, doc.value, where=doc.name),
        )

    # --- services ------------------------------------------------------------

    def _service(self, name: str) -> ir.ServiceSpec:
        if name in self._services:
            return self._services[name]
        if name in self._building:
            chain = " -> ".join([*self._building, name])
            raise self._error(f"Service inheritance cycle: {chain}", kind="service", name=name)

        doc = self._service_docs[name]
        functions: set[str] = set()
        for function in doc.functions:
            if function.name in functions:
                raise self._error(
                    f"Function '{function.name}' is declared more than once",
                    kind="service",
                    name=name,
                )
            functions.add(function.name)

        self._building.append(name)
        try:
            parent = self._lookup_service(doc.extends, doc.name) if doc.extends else None
        finally:
            self._building.pop()

        service = ir.ServiceSpec(
            name=doc.name,
            program=self.ref,
            functions=[self._build_function(doc.name, f) for f in doc.functions],
            extends=parent,
        )
        self._services[name] = service
        return service

    def _lookup_service(self, name: str, child: str) -> ir.ServiceSpec:
        if "." in name:
            include_name, _, local = name.partition(".")
            program = self.includes.get(include_name)
            if program is None:
                raise self._error(f"Unknown include '{include_name}'", kind="service", name=child)
            found = program.get_service(local)
            if found is None:
                raise self._error(
                    f"Program '{include_name}' has no service '{local}'", kind="service", name=child
                )
            return found
        if name not in self._service_docs:
            raise self._error(f"Unknown parent service '{name}'", kind="service", name=child)
        return self._service(name)

    def _build_function(self, service: str, doc: FunctionDoc) -> ir.FunctionSpec:
        returns = self.parse_type(doc.returns, allow_void=True)
        if doc.oneway and not isinstance(returns, ir.VoidType):
            raise self._error(
                f"Oneway function '{doc.name}' must return void", kind="service", name=service
            )
        exceptions = self._build_struct(f"{doc.name}_exceptions", doc.throws, False)
        for field in exceptions.fields:
            thrown = resolve(field.type)
            if not (isinstance(thrown, ir.StructType) and thrown.is_exception):
                raise self._error(
                    f"Function '{doc.name}' throws '{field.name}', which is not an exception",
                    kind="service",
                    name=service,
                )
        return ir.FunctionSpec(
            name=doc.name,
            args=self._build_struct(f"{doc.name}_args", doc.args, False),
            returns=returns,
            exceptions=exceptions,
            oneway=doc.oneway,
        )


def _find_named_type(program: ir.ProgramSpec, name: str) -> ir.TypeSpec | None:
    for typedef in program.typedefs:
        if typedef.name == name:
            return typedef
    return program.get_enum(name) or program.get_struct(name)


def resolved_name(type_: ir.TypeSpec) -> str:
    """Human-readable name of a type, for messages."""
    return getattr(type_, "name", type_.kind)
