"""Resolution and assembly orchestration.

Takes a parsed declaration through the resolver and the assembler. Lookups
are independent, so they run concurrently (bounded by a semaphore), but
results are put back in declaration order before composition: concurrency
never changes the observable search-path order.

The first resolution failure cancels the outstanding lookups and propagates.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Mapping, Sequence

import structlog

from core.assembler import assemble
from core.domain.models import (
    ActivationEnvironment,
    EnvironmentDeclaration,
    ResolvedTool,
    ToolReference,
)
from core.errors import ResolutionError
from core.interfaces.resolver import PackageResolver

log = structlog.get_logger(__name__)


@dataclass
class ResolutionResult:
    """Resolved tools in declaration order plus expression-only packages."""

    tools: list[ResolvedTool] = field(default_factory=list)
    support: list[ResolvedTool] = field(default_factory=list)


async def _resolve_in_order(
    references: Sequence[ToolReference],
    resolver: PackageResolver,
    max_concurrency: int,
) -> list[ResolvedTool]:
    sem = asyncio.Semaphore(max(1, max_concurrency))

    async def resolve_one(reference: ToolReference) -> ResolvedTool:
        async with sem:
            try:
                tool = await resolver.resolve(reference)
            except ResolutionError as exc:
                log.info("resolution_failed", tool=str(reference), code=exc.code)
                raise
        log.debug("tool_resolved", tool=str(reference), version=tool.version, path=tool.path)
        return tool

    tasks = [asyncio.ensure_future(resolve_one(reference)) for reference in references]
    if not tasks:
        return []

    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in tasks:
            if task.done() and not task.cancelled() and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    return [task.result() for task in tasks]


async def resolve_all(
    declaration: EnvironmentDeclaration,
    resolver: PackageResolver,
    *,
    max_concurrency: int = 8,
) -> ResolutionResult:
    """Resolve every declared tool and every `pkg()` support package."""

    support_refs = [ToolReference(name=name) for name in declaration.support_packages]
    resolved = await _resolve_in_order(
        [*declaration.tools, *support_refs],
        resolver,
        max_concurrency,
    )
    count = len(declaration.tools)
    return ResolutionResult(tools=resolved[:count], support=resolved[count:])


async def build_environment(
    declaration: EnvironmentDeclaration,
    resolver: PackageResolver,
    inherited: Mapping[str, str] | None = None,
    *,
    max_concurrency: int = 8,
) -> ActivationEnvironment:
    """Resolve and assemble; nothing is spawned here."""

    result = await resolve_all(declaration, resolver, max_concurrency=max_concurrency)
    return assemble(declaration, result.tools, inherited, support=result.support)
