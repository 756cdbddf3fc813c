"""
Error types for erlidl document loading, linking and code generation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ErlIdlError(Exception):
    """Base exception for all erlidl errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message

    def attach_context(self, context: "ErrorContext") -> "ErlIdlError":
        """
        Attach context to an error raised without one.

        The innermost context wins: an error that already names its entity
        keeps it.
        """
        if self.context is None:
            self.context = context
            self.args = (self._format_message(),)
        return self


class LoadError(ErlIdlError):
    """
    Raised when a program document cannot be read.

    Examples:
    - Missing or unreadable file
    - Malformed JSON
    - Document does not match the expected shape
    """

    pass


class LinkError(ErlIdlError):
    """
    Raised when names in a program document cannot be resolved.

    Examples:
    - Unknown type or include name
    - Include cycles
    - Service extending an unknown or cyclic parent
    - Constant value that does not fit its declared type
    """

    pass


class GenerationError(ErlIdlError):
    """
    Raised when the Erlang backend cannot render an entity.

    Every generation error is fatal to the run.
    """

    pass


class UnsupportedTypeError(GenerationError):
    """Void in a value position, or a type kind the backend cannot render."""

    pass


class UnknownEnumValueError(GenerationError):
    """An enum constant whose integer matches no declared enum value."""

    pass


class UnknownFieldError(GenerationError):
    """A struct constant assigning a field the struct does not declare."""

    pass


class UnrenderableConstantError(GenerationError):
    """A constant value whose shape has no rendering for its declared type."""

    pass


class CyclicAliasError(GenerationError):
    """An alias chain that leads back to itself."""

    pass


class DuplicateEnumConstantError(GenerationError):
    """Two enum values that normalize to the same Erlang name."""

    pass


class DuplicateNameError(GenerationError):
    """
    Two declarations that render to the same Erlang name.

    Examples:
    - Types ``Foo`` and ``foo`` (both record ``foo``)
    - Fields ``Id`` and ``id`` of one struct
    - Two constants with one name (a redefined macro)
    """

    pass


@dataclass
class ErrorContext:
    """
    Names the entity being processed when an error occurred.

    Attributes:
        kind: Entity kind (struct, enum, const, service, ...)
        name: Entity name
        program: Owning program name
        file: Optional source document
    """

    kind: str
    name: str
    program: str | None = None
    file: Path | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "tutorial.json: struct 'Work' in program tutorial"
        """
        location = f"{self.kind} '{self.name}'"
        if self.program:
            location += f" in program {self.program}"
        if self.file:
            location = f"{self.file}: {location}"
        return location


def make_link_error(
    message: str,
    kind: str | None = None,
    name: str | None = None,
    program: str | None = None,
    file: Path | None = None,
) -> LinkError:
    """
    Helper to create a LinkError with optional context.

    Args:
        message: Error description
        kind: Optional entity kind
        name: Optional entity name
        program: Optional program name
        file: Optional source document

    Returns:
        LinkError with context if an entity is named
    """
    if kind and name:
        return LinkError(message, ErrorContext(kind=kind, name=name, program=program, file=file))
    return LinkError(message)
