"""Static (local file) catalog resolver.

Also holds the entry-selection rule shared with the HTTP resolver: filter by
name, keep versions that satisfy the constraint, take the highest.
"""

from __future__ import annotations

import hashlib
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from adapters.catalog.loader import load_catalog
from adapters.catalog.models import CatalogEntry, CatalogFile
from core.domain.models import ResolvedTool, ToolReference
from core.domain.versions import pick_highest, version_key
from core.errors import CatalogUnavailable, UnknownTool, VersionUnavailable

DEFAULT_STORE_DIR = "/envshell/store"


def content_addressed_path(store_dir: str, name: str, version: str) -> str:
    """`<store_dir>/<digest>-<name>-<version>` with a stable digest."""

    digest = hashlib.sha256(f"{name}-{version}".encode("utf-8")).hexdigest()[:32]
    return str(PurePosixPath(store_dir) / f"{digest}-{name}-{version}")


def select_entry(
    reference: ToolReference,
    entries: Iterable[CatalogEntry],
    store_dir: str = DEFAULT_STORE_DIR,
) -> ResolvedTool:
    matching = [entry for entry in entries if entry.name == reference.name]
    if not matching:
        raise UnknownTool(reference.name)

    version = pick_highest([entry.version for entry in matching], reference.constraint)
    if version is None:
        available = sorted({entry.version for entry in matching}, key=version_key)
        raise VersionUnavailable(reference.name, reference.constraint or "", available)

    entry = next(entry for entry in matching if entry.version == version)
    path = entry.path or content_addressed_path(store_dir, entry.name, version)
    return ResolvedTool(reference=reference, version=version, path=path)


class StaticCatalogResolver:
    """Resolves against an in-memory catalog loaded once."""

    def __init__(self, entries: Iterable[CatalogEntry], *, store_dir: str | None = None) -> None:
        self._store_dir = store_dir or DEFAULT_STORE_DIR
        self._by_name: dict[str, list[CatalogEntry]] = {}
        for entry in entries:
            self._by_name.setdefault(entry.name, []).append(entry)

    @classmethod
    def from_catalog(cls, catalog: CatalogFile, *, store_dir: str | None = None) -> "StaticCatalogResolver":
        return cls(catalog.packages, store_dir=catalog.store_dir or store_dir)

    @classmethod
    def from_file(cls, path: Path, *, store_dir: str | None = None) -> "StaticCatalogResolver":
        return cls.from_catalog(load_catalog(path), store_dir=store_dir)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, store_dir: str | None = None) -> "StaticCatalogResolver":
        try:
            catalog = CatalogFile.model_validate(data)
        except ValidationError as exc:
            raise CatalogUnavailable(f"invalid catalog: {exc}") from exc
        return cls.from_catalog(catalog, store_dir=store_dir)

    @property
    def package_names(self) -> list[str]:
        return sorted(self._by_name)

    async def resolve(self, reference: ToolReference) -> ResolvedTool:
        return select_entry(reference, self._by_name.get(reference.name, ()), self._store_dir)
