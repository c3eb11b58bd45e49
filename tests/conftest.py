"""Shared pytest fixtures for envshell tests."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest
import structlog

from adapters.catalog import StaticCatalogResolver


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests configure structlog against CliRunner streams; undo that."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real user config and ENVSHELL_* variables out of the tests."""

    for key in list(os.environ):
        if key.startswith("ENVSHELL_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)


@pytest.fixture
def catalog_data() -> dict[str, Any]:
    return {
        "store_dir": "/store",
        "packages": [
            {"name": "rustc", "version": "1.74.1", "path": "/store/aaa-rustc-1.74.1"},
            {"name": "rustc", "version": "1.75.0", "path": "/store/bbb-rustc-1.75.0"},
            {"name": "cargo", "version": "1.75.0", "path": "/store/ccc-cargo-1.75.0"},
            {"name": "rustfmt", "version": "1.7.0", "path": "/store/ddd-rustfmt-1.7.0"},
            {"name": "rust-src", "version": "1.75.0", "path": "/store/eee-rust-src-1.75.0"},
            {"name": "a", "version": "1.0", "path": "/p/a"},
            {"name": "b", "version": "1.0", "path": "/p/b"},
        ],
    }


@pytest.fixture
def resolver(catalog_data: dict[str, Any]) -> StaticCatalogResolver:
    return StaticCatalogResolver.from_mapping(catalog_data)


@pytest.fixture
def write_json(tmp_path: Path):
    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
