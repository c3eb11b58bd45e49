"""envshell command line.

Commands:
- `run [--command CMD] DECLARATION`: activate the environment.
- `print-env [--json] DECLARATION`: resolve and assemble without spawning.
- `doctor ...`: configuration diagnostics.

Exit codes: 0 success, 2 malformed/duplicate declaration, 3 resolution or
spawn failure, otherwise the session's own exit status.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path

import structlog
import typer
from rich.console import Console

from adapters.activator import activate
from adapters.json_exporter import environment_to_json, export_environment_json
from adapters.resolvers import open_resolver
from cli.doctor import app as doctor_app
from cli.ui_components import build_error_panel, build_search_path_table, build_variables_table
from core.config import AppSettings
from core.declaration import load_declaration
from core.domain.models import ActivationEnvironment, EnvironmentDeclaration
from core.errors import EnvShellError
from core.logging_setup import setup_logging
from core.services.resolution import build_environment

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Resolve a declared set of tools and variables into a shell session.",
)
app.add_typer(doctor_app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

log = structlog.get_logger(__name__)


@dataclass
class CliState:
    settings: AppSettings
    catalog_path: Path | None = None
    catalog_url: str | None = None


@app.callback()
def main(
    ctx: typer.Context,
    catalog: Path | None = typer.Option(
        None,
        "--catalog",
        help="Local JSON package catalog (overrides ENVSHELL_CATALOG_PATH).",
    ),
    catalog_url: str | None = typer.Option(
        None,
        "--catalog-url",
        help="HTTP package catalog base URL (overrides ENVSHELL_CATALOG_URL).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    settings = AppSettings()
    setup_logging(
        json_output=settings.log_json,
        log_level="DEBUG" if verbose else settings.log_level,
    )
    ctx.obj = CliState(settings=settings, catalog_path=catalog, catalog_url=catalog_url)


def _fail(error: EnvShellError) -> typer.Exit:
    log.debug("command_failed", code=error.code, exit_code=error.exit_code)
    _err_console.print(build_error_panel(error))
    return typer.Exit(code=error.exit_code)


def _prepare(state: CliState, declaration_path: Path) -> tuple[EnvironmentDeclaration, ActivationEnvironment]:
    """Parse, resolve and assemble. Raises `EnvShellError` on any failure."""

    declaration = load_declaration(declaration_path)

    async def _build() -> ActivationEnvironment:
        async with open_resolver(
            state.settings,
            catalog_path=state.catalog_path,
            catalog_url=state.catalog_url,
        ) as resolver:
            return await build_environment(
                declaration,
                resolver,
                dict(os.environ),
                max_concurrency=state.settings.max_concurrency,
            )

    return declaration, asyncio.run(_build())


@app.command()
def run(
    ctx: typer.Context,
    declaration: Path = typer.Argument(..., help="Path to the JSON environment declaration."),
    command: str | None = typer.Option(
        None,
        "--command",
        "-c",
        help="Run this command non-interactively instead of starting a shell.",
    ),
) -> None:
    """Activate the declared environment."""

    state: CliState = ctx.obj
    try:
        _, environment = _prepare(state, declaration)
        status = activate(environment, command, shell=state.settings.shell)
    except EnvShellError as exc:
        raise _fail(exc) from None

    raise typer.Exit(code=status)


@app.command(name="print-env")
def print_env(
    ctx: typer.Context,
    declaration: Path = typer.Argument(..., help="Path to the JSON environment declaration."),
    as_json: bool = typer.Option(False, "--json", help="Print the full environment as JSON."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the JSON export to a file."),
) -> None:
    """Resolve and assemble the environment without starting a session."""

    state: CliState = ctx.obj
    try:
        parsed, environment = _prepare(state, declaration)
    except EnvShellError as exc:
        raise _fail(exc) from None

    if output is not None:
        path = export_environment_json(environment=environment, output_path=output)
        _err_console.print(f"[green]Environment written to:[/green] {path}")
        return

    if as_json:
        typer.echo(environment_to_json(environment), nl=False)
        return

    _console.print(build_search_path_table(environment, len(parsed.tools)))
    _console.print(build_variables_table(environment, parsed.variables))


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
