"""Default catalog discovery.

Lives in `core/` because it decides *which* catalog file is used when none
was configured, without coupling that rule to the CLI or to the adapters.
"""

from __future__ import annotations

from pathlib import Path

from core.config import get_user_config_dir

DEFAULT_CATALOG_FILENAME = "catalog.json"


def catalog_candidates(filename: str = DEFAULT_CATALOG_FILENAME) -> list[Path]:
    """Locations searched for a catalog, in order.

    1) ./<filename> (cwd)
    2) ./.envshell/<filename>
    3) <user config dir>/<filename>
    """

    cwd = Path.cwd()
    return [
        cwd / filename,
        cwd / ".envshell" / filename,
        get_user_config_dir() / filename,
    ]


def get_default_catalog_path(filename: str = DEFAULT_CATALOG_FILENAME) -> Path | None:
    for candidate in catalog_candidates(filename):
        if candidate.exists() and candidate.is_file():
            return candidate
    return None
