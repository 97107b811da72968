"""Pytest configuration shared across the suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

import _bootstrap  # noqa: F401

from cardsync.core.config import LarkSettings, ScanSnapSettings, SyncSettings


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write CSV text the way ScanSnap Home does (cp932) and return its path."""

    def _write(content: str, *, name: str = "cards.csv", encoding: str = "cp932") -> Path:
        path = tmp_path / name
        path.write_bytes(content.encode(encoding))
        return path

    return _write


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., SyncSettings]:
    def _make(csv_path: Path, image_dir: Path | None = None) -> SyncSettings:
        return SyncSettings(
            lark=LarkSettings(
                app_id="app_id",
                app_secret="app_secret",
                base_id="base_id",
                table_id="table_id",
            ),
            scansnap=ScanSnapSettings(
                csv_path=str(csv_path),
                image_dir=str(image_dir or tmp_path),
            ),
        )

    return _make
