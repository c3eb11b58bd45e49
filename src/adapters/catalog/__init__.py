"""Local package catalog: models, loading and the static resolver."""

from adapters.catalog.loader import load_catalog
from adapters.catalog.models import CatalogEntry, CatalogFile, PackageListResponse
from adapters.catalog.resolver import (
    StaticCatalogResolver,
    content_addressed_path,
    select_entry,
)

__all__ = [
    "CatalogEntry",
    "CatalogFile",
    "PackageListResponse",
    "StaticCatalogResolver",
    "content_addressed_path",
    "load_catalog",
    "select_entry",
]
