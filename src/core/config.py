"""Core configuration.

Centralizes environment variables (pydantic-settings) so the CLI and the
adapters read configuration the same way. Values come, in order, from the
process environment, a `.env` in the working directory and the user-level
`.env` written by `envshell doctor setup-catalog`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "envshell"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "envshell"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "envshell"
    return Path.home() / ".config" / "envshell"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write or update variables in the user-level `.env`.

    `None` values remove the key.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    for key, value in values.items():
        if value is None:
            existing.pop(key, None)
        else:
            existing[key] = value

    lines = ["# envshell user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application settings, prefixed `ENVSHELL_`."""

    model_config = SettingsConfigDict(
        env_prefix="ENVSHELL_",
        extra="ignore",
        case_sensitive=False,
        env_file_encoding="utf-8",
    )

    def __init__(self, **values) -> None:
        # Project first, then the user-level file (resolved per instance).
        values.setdefault("_env_file", (".env", str(get_user_env_file())))
        super().__init__(**values)

    catalog_path: Path | None = Field(
        default=None,
        description="Local JSON package catalog.",
    )
    catalog_url: str | None = Field(
        default=None,
        description="Base URL of an HTTP package catalog (takes precedence over catalog_path).",
    )
    store_dir: Path = Field(
        default=Path("/envshell/store"),
        description="Store root used to derive content-addressed paths for catalog entries without one.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per catalog request (seconds).",
    )
    user_agent: str = Field(
        default="envshell/0.1",
        min_length=1,
        description="User-Agent for catalog requests.",
    )
    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Maximum concurrent package lookups.",
    )

    shell: str | None = Field(
        default=None,
        description="Shell used for sessions (defaults to the environment's SHELL, then /bin/sh).",
    )

    log_level: str = Field(
        default="WARNING",
        description="Minimum log level (DEBUG, INFO, WARNING, ERROR).",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON instead of console output.",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"ENVSHELL_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)} (got '{v}')")
        return level
