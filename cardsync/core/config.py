"""
Application configuration models and helpers.

Every setting can come from the environment (optionally seeded from a
``.env`` file) and be overridden by an explicit value from the command line.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cardsync.core.errors import ConfigError

DEFAULT_LARK_BASE_URL = "https://open.larksuite.com/open-apis"


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export "):].strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


class LarkSettings(BaseSettings):
    """Credentials and target table for the Lark Open API."""

    model_config = SettingsConfigDict(env_prefix="LARK_")

    app_id: str = Field(..., min_length=1)
    app_secret: str = Field(..., min_length=1)
    base_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the Base (table group) receiving the cards.",
    )
    table_id: str = Field(..., min_length=1)
    base_url: str = Field(DEFAULT_LARK_BASE_URL, min_length=1)
    timeout_seconds: float = Field(30.0, gt=0)


class ScanSnapSettings(BaseSettings):
    """Location of the ScanSnap Home export."""

    model_config = SettingsConfigDict(env_prefix="SCANSNAP_")

    csv_path: str = Field(..., min_length=1)
    image_dir: str = Field(
        ...,
        min_length=1,
        description="Directory that image paths in the CSV are relative to.",
    )
    csv_encoding: str = Field("cp932", min_length=1)


class SyncSettings(BaseSettings):
    """Root settings object for a sync run."""

    model_config = SettingsConfigDict(env_prefix="CARDSYNC_")

    log_level: str = Field("INFO")
    lark: LarkSettings
    scansnap: ScanSnapSettings


# (settings section, field) -> (human label, CLI flag, environment variable)
_REQUIRED_HINTS: Dict[tuple[str, str], tuple[str, str, str]] = {
    ("scansnap", "csv_path"): ("CSV path", "--csv", "SCANSNAP_CSV_PATH"),
    ("scansnap", "image_dir"): ("Image directory", "--images", "SCANSNAP_IMAGE_DIR"),
    ("lark", "app_id"): ("Lark App ID", "--app-id", "LARK_APP_ID"),
    ("lark", "app_secret"): ("Lark App Secret", "--app-secret", "LARK_APP_SECRET"),
    ("lark", "base_id"): ("Lark Base ID", "--base-id", "LARK_BASE_ID"),
    ("lark", "table_id"): ("Lark Table ID", "--table-id", "LARK_TABLE_ID"),
}


def _describe_errors(section: str, exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else ""
        hint = _REQUIRED_HINTS.get((section, field))
        if hint is not None:
            label, flag, env_var = hint
            messages.append(f"{label} is required ({flag} or {env_var})")
        else:
            messages.append(f"{section}.{field}: {error['msg']}")
    return messages


def _drop_unset(values: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {key: value for key, value in (values or {}).items() if value is not None}


def load_settings(
    *,
    lark: Optional[Dict[str, Any]] = None,
    scansnap: Optional[Dict[str, Any]] = None,
    log_level: Optional[str] = None,
) -> SyncSettings:
    """
    Build settings from the environment, letting explicit values win.

    ``None`` overrides are ignored so unset CLI options fall back to the
    environment. Raises ``ConfigError`` listing every missing value.
    """
    problems: list[str] = []
    sections: Dict[str, BaseSettings] = {}

    for section, model, overrides in (
        ("scansnap", ScanSnapSettings, scansnap),
        ("lark", LarkSettings, lark),
    ):
        try:
            sections[section] = model(**_drop_unset(overrides))
        except ValidationError as exc:
            problems.extend(_describe_errors(section, exc))

    if problems:
        raise ConfigError("; ".join(problems))

    root_overrides = _drop_unset({"log_level": log_level})
    return SyncSettings(
        lark=sections["lark"], scansnap=sections["scansnap"], **root_overrides
    )


__all__ = [
    "DEFAULT_LARK_BASE_URL",
    "LarkSettings",
    "ScanSnapSettings",
    "SyncSettings",
    "load_settings",
]
