"""CLI UI components (Rich).

Keeps command logic apart from presentation so tables and panels can be
reused across commands.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import SEARCH_PATH_VARIABLE, ActivationEnvironment
from core.errors import EnvShellError


def print_banner(console: Console) -> None:
    title = Text("envshell", style="bold cyan")
    subtitle = Text("Declarative development shells", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_search_path_table(environment: ActivationEnvironment, tool_count: int) -> Table:
    """Search-path entries in precedence order; tool entries come first."""

    table = Table(title="Search path")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Entry", style="white")
    table.add_column("Origin", style="cyan", no_wrap=True)
    for index, entry in enumerate(environment.search_path):
        origin = "tool" if index < tool_count else "environment"
        table.add_row(str(index + 1), entry, origin)
    return table


def build_variables_table(environment: ActivationEnvironment, declared: Iterable[str]) -> Table:
    """Declared variables (and `PATH`) as they reach the session."""

    table = Table(title="Declared variables")
    table.add_column("Variable", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    names = list(declared)
    if SEARCH_PATH_VARIABLE not in names:
        names.append(SEARCH_PATH_VARIABLE)
    for name in names:
        value = environment.variables.get(name)
        if value is not None:
            table.add_row(name, value)
    return table


def build_error_panel(error: EnvShellError) -> Panel:
    body = Text(str(error))
    body.append(f"\n\ncode: {error.code}  exit: {error.exit_code}", style="dim")
    return Panel(body, title=Text("envshell error", style="bold red"), border_style="red")
