"""
Program-level IR types for erlidl.

A program is one compilation unit: the declarations of a single IDL
document plus the programs it includes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .types import AliasType, EnumType, ProgramRef, StructType, TypeSpec, VoidType
from .values import ConstValue


class ConstSpec(BaseModel):
    """A named constant of a declared type."""

    name: str
    type: TypeSpec
    value: ConstValue

    model_config = ConfigDict(frozen=True)


class FunctionSpec(BaseModel):
    """
    A service function.

    Attributes:
        name: Function identifier
        args: Argument list, as a struct
        returns: Return type, ``VoidType`` for none
        exceptions: Declared exceptions, as a struct of exception fields
        oneway: Caller does not wait for a reply
    """

    name: str
    args: StructType
    returns: TypeSpec = Field(default_factory=VoidType)
    exceptions: StructType
    oneway: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def returns_void(self) -> bool:
        return isinstance(self.returns, VoidType)


class ServiceSpec(BaseModel):
    """
    A service: an ordered set of functions, optionally extending a parent.

    Inheritance is single: ``extends`` names at most one parent service,
    possibly owned by an included program.
    """

    name: str
    program: ProgramRef
    functions: list[FunctionSpec] = Field(default_factory=list)
    extends: ServiceSpec | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_unique_functions(self) -> ServiceSpec:
        """Ensure function names are unique within the service."""
        seen: set[str] = set()
        for function in self.functions:
            if function.name in seen:
                raise ValueError(
                    f"Service '{self.name}' declares function '{function.name}' more than once"
                )
            seen.add(function.name)
        return self

    def function_named(self, name: str) -> FunctionSpec | None:
        """Get a function declared directly on this service."""
        for function in self.functions:
            if function.name == name:
                return function
        return None


class ProgramSpec(BaseModel):
    """
    A complete compilation unit.

    Attributes:
        name: Program name
        namespace: Erlang namespace (module name prefix), may be empty
        includes: Programs whose types this program references
        typedefs: Aliases, in declaration order
        enums: Enums, in declaration order
        structs: Structs and exceptions, in declaration order
        consts: Constants, in declaration order
        services: Services, in declaration order
    """

    name: str
    namespace: str = ""
    includes: list[ProgramSpec] = Field(default_factory=list)
    typedefs: list[AliasType] = Field(default_factory=list)
    enums: list[EnumType] = Field(default_factory=list)
    structs: list[StructType] = Field(default_factory=list)
    consts: list[ConstSpec] = Field(default_factory=list)
    services: list[ServiceSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def ref(self) -> ProgramRef:
        """The identity carried by types owned by this program."""
        return ProgramRef(name=self.name, namespace=self.namespace)

    def get_struct(self, name: str) -> StructType | None:
        """Get a struct or exception by name."""
        for struct in self.structs:
            if struct.name == name:
                return struct
        return None

    def get_enum(self, name: str) -> EnumType | None:
        """Get an enum by name."""
        for enum in self.enums:
            if enum.name == name:
                return enum
        return None

    def get_service(self, name: str) -> ServiceSpec | None:
        """Get a service by name."""
        for service in self.services:
            if service.name == name:
                return service
        return None


ServiceSpec.model_rebuild()
ProgramSpec.model_rebuild()
