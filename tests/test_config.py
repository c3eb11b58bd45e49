"""Tests for AppSettings, the user .env writer and catalog discovery."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from adapters.resolvers import describe_catalog
from core.config import AppSettings, get_user_config_dir, write_user_env_vars
from core.resources_loader import get_default_catalog_path


class TestAppSettings:
    def test_defaults(self) -> None:
        s = AppSettings()
        assert s.catalog_path is None
        assert s.catalog_url is None
        assert s.max_concurrency == 8
        assert s.log_level == "WARNING"

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVSHELL_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("ENVSHELL_LOG_LEVEL", "debug")
        s = AppSettings()
        assert s.max_concurrency == 2
        assert s.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError, match="ENVSHELL_LOG_LEVEL must be one of"):
            AppSettings(log_level="chatty")

    def test_zero_concurrency_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppSettings(max_concurrency=0)

    def test_reads_project_env_file(self) -> None:
        Path(".env").write_text("ENVSHELL_CATALOG_URL=https://catalog.test\n", encoding="utf-8")
        assert AppSettings().catalog_url == "https://catalog.test"


class TestWriteUserEnvVars:
    def test_writes_sorted_and_updates(self) -> None:
        path = write_user_env_vars({"B": "2", "A": "1"})
        write_user_env_vars({"A": "3"})
        assert path.read_text(encoding="utf-8").splitlines() == [
            "# envshell user config (.env)",
            "A=3",
            "B=2",
        ]

    def test_none_removes_key(self) -> None:
        path = write_user_env_vars({"A": "1", "B": "2"})
        write_user_env_vars({"A": None})
        assert "A=" not in path.read_text(encoding="utf-8")

    def test_user_file_feeds_settings(self) -> None:
        write_user_env_vars({"ENVSHELL_MAX_CONCURRENCY": "4"})
        assert AppSettings().max_concurrency == 4


class TestCatalogDiscovery:
    def test_none_found(self) -> None:
        assert get_default_catalog_path() is None
        assert describe_catalog(AppSettings()) is None

    def test_cwd_catalog(self) -> None:
        Path("catalog.json").write_text('{"packages": []}', encoding="utf-8")
        found = get_default_catalog_path()
        assert found is not None and found.name == "catalog.json"

    def test_user_config_catalog(self) -> None:
        target = get_user_config_dir() / "catalog.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text('{"packages": []}', encoding="utf-8")
        assert get_default_catalog_path() == target

    def test_url_takes_precedence(self, tmp_path: Path) -> None:
        settings = AppSettings(catalog_path=tmp_path / "c.json", catalog_url="https://x.test")
        assert describe_catalog(settings) == ("url", "https://x.test")

    def test_flag_overrides_settings(self, tmp_path: Path) -> None:
        settings = AppSettings(catalog_path=tmp_path / "c.json")
        assert describe_catalog(settings, catalog_path=tmp_path / "d.json") == ("file", str(tmp_path / "d.json"))
