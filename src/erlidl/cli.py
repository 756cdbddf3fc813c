"""
erlidl command line interface.

Commands:
- generate: Write the Erlang artifacts of a program document
- describe: Print the descriptor of one type
"""

from __future__ import annotations

import logging
import platform
import sys
from pathlib import Path

import typer

from erlidl._version import get_version
from erlidl.core.errors import ErlIdlError
from erlidl.core.loader import load_program
from erlidl.core.manifest import GeneratorConfig, load_config

app = typer.Typer(
    help="""erlidl – Erlang code generation for IDL programs

Reads a JSON program document and writes Erlang records, macros and
reflection descriptors.
""",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"erlidl version {get_version()}")
        typer.echo(f"  Python: {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """erlidl CLI main callback for global options."""
    pass


def _setup_logging(config: GeneratorConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


def _load_config(config_path: Path | None) -> GeneratorConfig:
    try:
        return load_config(config_path)
    except ErlIdlError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("generate")
def generate_command(
    document: Path = typer.Argument(..., help="Program document (JSON)"),
    output_dir: Path | None = typer.Option(None, "--out", "-o", help="Output directory"),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Config file (default: ./erlidl.toml)"
    ),
    namespace: str | None = typer.Option(
        None, "--namespace", "-n", help="Erlang namespace for programs that declare none"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every emitted entity"),
) -> None:
    """
    Generate Erlang headers and modules for a program document.
    """
    from erlidl.erlang import ErlangGenerator

    config = _load_config(config_path)
    if output_dir is not None:
        config.out_dir = output_dir
    if namespace is not None:
        config.namespace = namespace
    _setup_logging(config, verbose)

    try:
        program = load_program(document)
        result = ErlangGenerator(config).generate(program)
        written = result.write(config.out_dir)
    except ErlIdlError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    except OSError as e:
        typer.echo(f"Error writing output: {e}", err=True)
        raise typer.Exit(code=1) from e

    for path in written:
        typer.echo(f"Generated: {path}")


@app.command("describe")
def describe_command(
    document: Path = typer.Argument(..., help="Program document (JSON)"),
    type_name: str = typer.Argument(..., help="Struct, exception, enum or typedef name"),
    extended: bool = typer.Option(
        False, "--extended", "-e", help="Include requiredness, names and defaults"
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """
    Print the descriptor of a type.

    Structs are expanded into their field list, as in struct_info/1.
    """
    from erlidl.core import ir
    from erlidl.core.resolver import resolve
    from erlidl.erlang import ErlangNames, describe, render_term

    config = _load_config(config_path)
    _setup_logging(config, verbose=False)
    names = ErlangNames(config.namespace)

    try:
        program = load_program(document)
        found: ir.TypeSpec | None = program.get_struct(type_name) or program.get_enum(type_name)
        if found is None:
            found = next((t for t in program.typedefs if t.name == type_name), None)
        if found is None:
            typer.echo(f"Error: program '{program.name}' has no type '{type_name}'", err=True)
            raise typer.Exit(code=1)
        expand = isinstance(resolve(found), ir.StructType)
        descriptor = describe(found, expand=expand, extended=extended, names=names)
    except ErlIdlError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(render_term(descriptor, indent=config.indent))


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
