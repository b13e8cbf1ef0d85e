"""
Command line interface.

    miraveja-digen generate declarations.json --output generated/
    miraveja-digen check declarations.json

Both commands print diagnostics and exit with status 1 when an error
diagnostic was produced, or 2 when the declaration file itself is invalid.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import typer
from pydantic import ValidationError

from miraveja_digen.application import DIGenerator
from miraveja_digen.domain import DeclarationError, DeclarationSet, GenerationResult, GeneratorSettings
from miraveja_digen.infrastructure.logging import configure_logging
from miraveja_digen.infrastructure.sinks import FileSystemSourceSink, InMemorySourceSink

EXIT_ERRORS = 1
EXIT_INVALID_INPUT = 2

app = typer.Typer(
    name="miraveja-digen",
    help="Static dependency-injection code generator.",
    add_completion=False,
)

logger = structlog.get_logger(__name__)


def _settings(assembly: Optional[str], verbose: bool, json_logs: bool) -> GeneratorSettings:
    overrides: Dict[str, Any] = {}
    if assembly:
        overrides["assembly_name"] = assembly
    if verbose:
        overrides["log_level"] = "DEBUG"
    if json_logs:
        overrides["json_logs"] = True
    settings = GeneratorSettings(**overrides)
    configure_logging(settings)
    return settings


def _load(path: Path) -> DeclarationSet:
    try:
        return DeclarationSet.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        typer.echo(f"Error: cannot read {path}: {e}", err=True)
    except (ValidationError, DeclarationError) as e:
        typer.echo(f"Error: invalid declaration set {path}: {e}", err=True)
    raise typer.Exit(EXIT_INVALID_INPUT)


def _report(result: GenerationResult) -> None:
    for diagnostic in result.diagnostics:
        typer.echo(str(diagnostic))
    typer.echo(f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)")
    if result.has_errors:
        raise typer.Exit(EXIT_ERRORS)


def _run(generator: DIGenerator, declarations: DeclarationSet, sink: Any) -> GenerationResult:
    try:
        return generator.run(declarations, sink)
    except DeclarationError as e:
        logger.error("generation_aborted", reason=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_INVALID_INPUT) from e


@app.command()
def generate(
    declarations: Path = typer.Argument(..., help="JSON file holding the declaration set."),
    output: Path = typer.Option(Path("generated"), "--output", "-o", help="Directory receiving generated units."),
    assembly: Optional[str] = typer.Option(None, "--assembly", "-a", help="Namespace of the registration unit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at debug level."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Render logs as JSON."),
) -> None:
    """Generate initializers, interfaces and the registration table."""
    generator = DIGenerator(_settings(assembly, verbose, json_logs))
    sink = FileSystemSourceSink(output)
    result = _run(generator, _load(declarations), sink)
    for path in sink.written:
        typer.echo(f"wrote {path}")
    _report(result)


@app.command()
def check(
    declarations: Path = typer.Argument(..., help="JSON file holding the declaration set."),
    assembly: Optional[str] = typer.Option(None, "--assembly", "-a", help="Namespace of the registration unit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at debug level."),
) -> None:
    """Validate the declaration set without writing any file."""
    generator = DIGenerator(_settings(assembly, verbose, False))
    result = _run(generator, _load(declarations), InMemorySourceSink())
    _report(result)


def main() -> None:
    app()
