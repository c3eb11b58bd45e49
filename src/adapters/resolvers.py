"""Resolver selection.

Order:
1) an HTTP catalog URL (flag, then `ENVSHELL_CATALOG_URL`)
2) a catalog file (flag, then `ENVSHELL_CATALOG_PATH`)
3) the first default catalog file found (see `core.resources_loader`)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from adapters.catalog import StaticCatalogResolver
from adapters.remote_catalog import HttpCatalogResolver
from core.config import AppSettings
from core.errors import CatalogUnavailable
from core.interfaces.resolver import PackageResolver
from core.resources_loader import catalog_candidates, get_default_catalog_path


def describe_catalog(
    settings: AppSettings,
    *,
    catalog_path: Path | None = None,
    catalog_url: str | None = None,
) -> tuple[str, str] | None:
    """Return `("url" | "file", location)` for the catalog that would be used."""

    url = catalog_url or settings.catalog_url
    if url:
        return "url", url
    path = catalog_path or settings.catalog_path or get_default_catalog_path()
    if path:
        return "file", str(path)
    return None


@asynccontextmanager
async def open_resolver(
    settings: AppSettings,
    *,
    catalog_path: Path | None = None,
    catalog_url: str | None = None,
) -> AsyncIterator[PackageResolver]:
    selected = describe_catalog(settings, catalog_path=catalog_path, catalog_url=catalog_url)
    if selected is None:
        searched = ", ".join(str(p) for p in catalog_candidates())
        raise CatalogUnavailable(
            f"no package catalog configured (set ENVSHELL_CATALOG_PATH or ENVSHELL_CATALOG_URL; searched {searched})"
        )

    kind, location = selected
    if kind == "url":
        async with HttpCatalogResolver(location, settings) as resolver:
            yield resolver
    else:
        yield StaticCatalogResolver.from_file(Path(location), store_dir=str(settings.store_dir))
