"""Environment assembler.

Builds the `ActivationEnvironment` from a declaration, its resolved tools and
an explicit snapshot of the inherited environment. It is a pure function: the
same inputs always give the same mapping, and nothing here reads `os.environ`
or mutates its arguments.

Composition rules:
- `PATH` is the tools' `bin` directories in declaration order, then any
  entries of a declared `PATH`, then the inherited entries.
- Declared variables override inherited ones.
- `PATH` is written last, so a declaration never replaces the composed search
  path; a declared `PATH` is merged into it.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import structlog

from core import expressions
from core.domain.models import (
    SEARCH_PATH_VARIABLE,
    ActivationEnvironment,
    EnvironmentDeclaration,
    ResolvedTool,
)
from core.errors import UnresolvedReference

log = structlog.get_logger(__name__)

PATH_SEPARATOR = ":"


def _split_path(value: str | None) -> list[str]:
    if not value:
        return []
    return [entry for entry in value.split(PATH_SEPARATOR) if entry]


def _match_tools(
    declaration: EnvironmentDeclaration,
    resolved: Sequence[ResolvedTool],
) -> list[ResolvedTool]:
    by_name = {tool.name: tool for tool in resolved}
    ordered: list[ResolvedTool] = []
    for reference in declaration.tools:
        tool = by_name.get(reference.name)
        if tool is None:
            raise UnresolvedReference(reference.name)
        ordered.append(tool)
    return ordered


def compose_search_path(
    tools: Sequence[ResolvedTool],
    declared: str | None,
    inherited: str | None,
) -> tuple[str, ...]:
    """Tool bin dirs, then declared entries, then inherited entries."""

    return (
        *(tool.bin_dir for tool in tools),
        *_split_path(declared),
        *_split_path(inherited),
    )


def assemble(
    declaration: EnvironmentDeclaration,
    resolved: Sequence[ResolvedTool],
    inherited: Mapping[str, str] | None = None,
    *,
    support: Sequence[ResolvedTool] = (),
) -> ActivationEnvironment:
    """Combine a declaration and its resolved tools into one environment.

    `support` holds packages referenced only from variable expressions; they
    are visible to `pkg()` but stay off the search path.
    """

    inherited = dict(inherited or {})
    tools = _match_tools(declaration, resolved)

    packages = {tool.name: tool.path for tool in support}
    packages.update({tool.name: tool.path for tool in tools})
    for ref in declaration.package_refs:
        if ref not in packages:
            raise UnresolvedReference(ref)

    rendered = {
        name: expressions.render(value, packages, field=f"variables.{name}")
        for name, value in declaration.variables.items()
    }

    declared_path = rendered.pop(SEARCH_PATH_VARIABLE, None)
    if declared_path is not None:
        log.warning("search_path_merged", declared=declared_path)

    search_path = compose_search_path(
        tools,
        declared_path,
        inherited.get(SEARCH_PATH_VARIABLE),
    )

    variables = dict(inherited)
    variables.pop(SEARCH_PATH_VARIABLE, None)
    variables.update(rendered)
    variables[SEARCH_PATH_VARIABLE] = PATH_SEPARATOR.join(search_path)

    log.debug(
        "environment_assembled",
        tools=[tool.name for tool in tools],
        search_path_entries=len(search_path),
        variables=len(variables),
    )
    return ActivationEnvironment(
        variables=variables,
        search_path=search_path,
        shell_hook=declaration.shell_hook,
    )
