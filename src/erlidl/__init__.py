"""
erlidl - Erlang code generation for IDL programs.

Takes a linked IDL program (structs, exceptions, enums, typedefs,
constants and services) and emits Erlang records, macros and the
reflection descriptors used by schema-driven Erlang codecs.
"""

from ._version import get_version

__version__ = get_version()

__all__ = ["__version__"]
