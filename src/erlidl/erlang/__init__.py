"""
Erlang backend.

Renders a linked program into Erlang headers and modules: records, enum
macros, constant macros and the reflection descriptors a schema-driven
Erlang codec reads.
"""

from .constants import render_const
from .defaults import ABSENT, has_default, render_default
from .describe import describe, describe_struct
from .generator import ErlangGenerator, GeneratorResult
from .naming import ErlangNames
from .services import InfoKind, ServiceDescriptorTable
from .terms import (
    BaseTag,
    Descriptor,
    FieldInfo,
    FieldInfoExt,
    ListInfo,
    MapInfo,
    Sentinel,
    SetInfo,
    StructInfo,
    TypeRef,
    render_term,
)

__all__ = [
    "ABSENT",
    "BaseTag",
    "Descriptor",
    "ErlangGenerator",
    "ErlangNames",
    "FieldInfo",
    "FieldInfoExt",
    "GeneratorResult",
    "InfoKind",
    "ListInfo",
    "MapInfo",
    "Sentinel",
    "ServiceDescriptorTable",
    "SetInfo",
    "StructInfo",
    "TypeRef",
    "describe",
    "describe_struct",
    "has_default",
    "render_const",
    "render_default",
    "render_term",
]
