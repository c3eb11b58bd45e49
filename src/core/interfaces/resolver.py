"""Package resolver contract.

A resolver maps a `ToolReference` to a concrete installation. It is the only
component that performs I/O (local catalog file, HTTP catalog), which is why
it lives behind a Protocol: the core never depends on a concrete catalog and
tests can plug in a static one.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ResolvedTool, ToolReference


@runtime_checkable
class PackageResolver(Protocol):
    """Minimal contract for a package source.

    Rules:
    - `resolve` is async because lookups typically do I/O.
    - Raises `UnknownTool` when no package has the name and
      `VersionUnavailable` when no version satisfies the constraint.
    - When several versions satisfy the constraint, the highest wins.
    """

    async def resolve(self, reference: ToolReference) -> ResolvedTool:
        """Resolve `reference` to an installed package."""

        ...
