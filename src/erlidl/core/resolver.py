"""
Alias resolution.

Every backend component resolves a type before dispatching on its kind.
"""

from __future__ import annotations

from . import ir
from .errors import CyclicAliasError


def resolve(type_: ir.TypeSpec) -> ir.ResolvedType:
    """
    Follow alias links to the concrete type.

    Args:
        type_: Any type

    Returns:
        The first non-alias type on the chain, or ``type_`` itself

    Raises:
        CyclicAliasError: If the chain revisits an alias
    """
    seen: list[str] = []
    visited: set[int] = set()
    while isinstance(type_, ir.AliasType):
        if id(type_) in visited:
            chain = " -> ".join([*seen, type_.name])
            raise CyclicAliasError(f"Alias chain is cyclic: {chain}")
        visited.add(id(type_))
        seen.append(type_.name)
        type_ = type_.target
    return type_
