#!/usr/bin/env python3
"""
framework_migrator.cli.cli

Typer-based CLI for migrating Next.js projects to React with react-router.

The core library only needs the parser grammars and pydantic; the CLI is an
optional extra.

Examples
--------
Install core + CLI:

    uv pip install -e ".[cli]"

Convert a project:

    migrate-framework convert ./next-app ./react-app
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from pathlib import Path

import typer

from framework_migrator.errors import MigrationError

app = typer.Typer(
    name="migrate-framework",
    help="Migrate Next.js source modules to React with react-router.",
    no_args_is_help=True,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
PROFILE_HELP = "Explicit migration profile name."
PROFILE_MODULE_HELP = "Profile module import path or file path (repeatable)."
PRESERVE_TYPES_HELP = "Keep TypeScript annotations (use --strip-types to emit JavaScript)."


def _print_migration_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly migration error.

    Parameters
    ----------
    exc : Exception
        Exception raised by a command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read {path}: {exc}") from exc


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help=f"Logging level ({', '.join(LOG_LEVELS)}).",
    ),
) -> None:
    """Initialize shared CLI state and logging."""
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(f"Unknown log level '{log_level}'.", param_hint="--log-level")
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    source_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        help="Root of the project to migrate.",
    ),
    output_dir: Path | None = typer.Argument(None, help="Where to write converted files."),
    source_framework: str = typer.Option("nextjs", "--from", help="Source framework."),
    target_framework: str = typer.Option("react", "--to", help="Target framework."),
    profile: str | None = typer.Option(None, "--profile", help=PROFILE_HELP),
    profile_module: list[str] | None = typer.Option(
        None, "--profile-module", help=PROFILE_MODULE_HELP
    ),
    routing: bool = typer.Option(True, "--routing/--no-routing", help="Convert routing APIs."),
    data_fetching: bool = typer.Option(
        True, "--data-fetching/--no-data-fetching", help="Convert data-fetching exports."
    ),
    components: bool = typer.Option(
        True, "--components/--no-components", help="Convert framework components."
    ),
    dependencies: bool = typer.Option(
        True, "--dependencies/--no-dependencies", help="Update package.json."
    ),
    preserve_types: bool = typer.Option(
        True, "--preserve-types/--strip-types", help=PRESERVE_TYPES_HELP
    ),
    preserve_comments: bool = typer.Option(
        True, "--preserve-comments/--strip-comments", help="Keep comments in modified modules."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the batch result as JSON."),
) -> None:
    """Convert every file of a project directory."""
    debug: bool = bool(ctx.obj.get("debug", False))
    try:
        from framework_migrator.api import convert_directory

        result = convert_directory(
            source_dir=source_dir,
            output_dir=output_dir,
            source_framework=source_framework,
            target_framework=target_framework,
            preserve_comments=preserve_comments,
            convert_routing=routing,
            convert_data_fetching=data_fetching,
            convert_components=components,
            update_dependencies=dependencies,
            preserve_type_annotations=preserve_types,
            profile_name=profile,
            profile_modules=profile_module or (),
        )
    except MigrationError as exc:
        raise typer.Exit(code=_print_migration_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_migration_error(exc, debug))

    if as_json:
        typer.echo(json.dumps(result.to_dict(include_content=False), indent=2))
        return
    for line in result.details:
        typer.echo(line)
    for error in result.errors:
        typer.echo(f"[{error.severity}] {error.code} {error.file}: {error.message}", err=True)
    typer.echo(
        f"✓ {result.modified_count}/{result.total_files} file(s) modified "
        f"({result.transformation_rate:.0%})"
    )
    if output_dir is not None:
        typer.echo(f"✓ Written to: {output_dir}")


@app.command("transform")
def transform_cmd(
    ctx: typer.Context,
    source_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Module to rewrite.",
    ),
    output_path: Path | None = typer.Option(
        None, "--output", "-o", help="Write code here instead of stdout."
    ),
    source_framework: str = typer.Option("nextjs", "--from", help="Source framework."),
    target_framework: str = typer.Option("react", "--to", help="Target framework."),
    preserve_types: bool = typer.Option(
        True, "--preserve-types/--strip-types", help=PRESERVE_TYPES_HELP
    ),
    preserve_comments: bool = typer.Option(
        True, "--preserve-comments/--strip-comments", help="Keep comments in modified modules."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print code, changes and warnings as JSON."),
) -> None:
    """Rewrite a single module as a generic module."""
    debug: bool = bool(ctx.obj.get("debug", False))
    source_text = _read_source(source_path)
    try:
        from framework_migrator.api import transform_source

        result = transform_source(
            source_text,
            source_path.name,
            source_framework=source_framework,
            target_framework=target_framework,
            preserve_comments=preserve_comments,
            preserve_type_annotations=preserve_types,
        )
    except MigrationError as exc:
        raise typer.Exit(code=_print_migration_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_migration_error(exc, debug))

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.code, encoding="utf-8")
        typer.echo(f"✓ Saved: {output_path}")
    else:
        typer.echo(result.code, nl=False)
    for change in result.changes:
        typer.echo(f"change: {change}", err=True)
    for warning in result.warnings:
        typer.echo(f"warning: {warning}", err=True)


@app.command("analyze")
def analyze_cmd(
    ctx: typer.Context,
    source_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Module to inspect.",
    ),
) -> None:
    """Print the fact sheet of a module as JSON."""
    debug: bool = bool(ctx.obj.get("debug", False))
    source_text = _read_source(source_path)
    try:
        from framework_migrator.api import analyze_source

        facts = analyze_source(source_text, source_path.name)
    except MigrationError as exc:
        raise typer.Exit(code=_print_migration_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_migration_error(exc, debug))
    typer.echo(json.dumps(facts.to_dict(), indent=2))


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed toolchain versions and registered profiles."""
    import importlib.metadata as metadata

    modules = [
        "tree-sitter",
        "tree-sitter-javascript",
        "tree-sitter-typescript",
        "pydantic",
        "typer",
        "fastapi",
        "uvicorn",
    ]

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in modules:
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    try:
        from framework_migrator.profiles.registry import create_default_registry

        registry = create_default_registry()
        typer.echo(f"profiles: {', '.join(registry.names())}")
    except MigrationError as exc:
        typer.echo(f"profiles: <unavailable> ({exc})")


if __name__ == "__main__":
    app()
