"""Catalog file loading."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from adapters.catalog.models import CatalogFile
from core.errors import CatalogUnavailable


def load_catalog(path: Path) -> CatalogFile:
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CatalogUnavailable(f"cannot read catalog {path}: {exc}") from exc
    try:
        return CatalogFile.model_validate(data)
    except ValidationError as exc:
        raise CatalogUnavailable(f"invalid catalog {path}: {exc.error_count()} error(s)\n{exc}") from exc
