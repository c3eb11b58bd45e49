"""Doctor command for configuration diagnostics."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.catalog import load_catalog
from adapters.http_client import build_async_client
from adapters.resolvers import describe_catalog
from cli.ui_components import print_banner
from core.config import AppSettings, write_user_env_vars
from core.errors import CatalogUnavailable

app = typer.Typer(no_args_is_help=True, help="Configuration diagnostics and catalog setup.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return response.status_code < 500, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


def _check_file(path: Path) -> tuple[bool, str]:
    try:
        catalog = load_catalog(path)
    except CatalogUnavailable as exc:
        return False, str(exc)
    names = {entry.name for entry in catalog.packages}
    return True, f"{len(catalog.packages)} entries, {len(names)} packages"


def _check_shell(settings: AppSettings) -> tuple[bool, str]:
    shell = settings.shell or os.environ.get("SHELL") or "/bin/sh"
    found = shutil.which(shell)
    if found:
        return True, found
    return False, f"'{shell}' not found"


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    state = ctx.obj
    settings = state.settings if state is not None else AppSettings()
    catalog_path = state.catalog_path if state is not None else None
    catalog_url = state.catalog_url if state is not None else None

    print_banner(_console)

    table = Table(title="envshell doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    healthy = True
    selected = describe_catalog(settings, catalog_path=catalog_path, catalog_url=catalog_url)
    if selected is None:
        healthy = False
        table.add_row("Catalog", "MISSING", "Set ENVSHELL_CATALOG_PATH / ENVSHELL_CATALOG_URL or run setup-catalog")
    else:
        kind, location = selected
        table.add_row("Catalog", "OK", f"{kind}: {location}")
        if kind == "url":
            ok, detail = asyncio.run(_check_http(location, settings))
        else:
            ok, detail = _check_file(Path(location))
        healthy = healthy and ok
        table.add_row("Catalog readable", "OK" if ok else "FAIL", detail)

    ok_shell, detail_shell = _check_shell(settings)
    healthy = healthy and ok_shell
    table.add_row("Shell", "OK" if ok_shell else "FAIL", detail_shell)

    table.add_row("Store dir", "OK", str(settings.store_dir))
    table.add_row("Max concurrency", "OK", str(settings.max_concurrency))

    _console.print(table)

    if not healthy:
        raise typer.Exit(code=1)


@app.command(name="setup-catalog")
def setup_catalog() -> None:
    """Interactive catalog setup (stored in the user config .env)."""

    kind = typer.prompt("Catalog kind (file/url)", default="file", show_default=True).strip().lower()

    if kind == "file":
        raw = typer.prompt("Catalog file path").strip()
        path = Path(raw).expanduser().resolve()
        if not path.is_file():
            raise typer.BadParameter(f"{path} is not a file")
        values: dict[str, str | None] = {
            "ENVSHELL_CATALOG_PATH": str(path),
            "ENVSHELL_CATALOG_URL": None,
        }
    elif kind == "url":
        url = typer.prompt("Catalog base URL").strip()
        if not url.startswith(("http://", "https://")):
            raise typer.BadParameter("catalog URL must start with http:// or https://")
        values = {"ENVSHELL_CATALOG_URL": url}
    else:
        raise typer.BadParameter("kind must be 'file' or 'url'")

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved catalog config to:[/green] {env_path}")
