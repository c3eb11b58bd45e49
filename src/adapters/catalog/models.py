"""Package catalog models.

A catalog is a JSON document listing installable packages:

    {
      "store_dir": "/envshell/store",
      "packages": [
        {"name": "rustc", "version": "1.75.0", "path": "/envshell/store/abc-rustc-1.75.0"},
        {"name": "cargo", "version": "1.75.0"}
      ]
    }

Entries without `path` get a content-addressed path under `store_dir`. The
HTTP catalog answers `/packages/<name>` with the same `packages` shape.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, Field, field_validator


class CatalogEntry(BaseModel):
    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    path: str | None = None

    @field_validator("path")
    @classmethod
    def _validate_path(cls, v: str | None) -> str | None:
        if v is not None and not PurePosixPath(v).is_absolute():
            raise ValueError(f"catalog path must be absolute (got '{v}')")
        return v


class CatalogFile(BaseModel):
    store_dir: str | None = None
    packages: list[CatalogEntry] = Field(default_factory=list)


class PackageListResponse(BaseModel):
    packages: list[CatalogEntry] = Field(default_factory=list)
