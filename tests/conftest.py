# tests/conftest.py

"""Shared pytest fixtures for all price_watch tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path) -> Generator[None, None, None]:
    """Point every on-disk location at a per-test temp directory."""
    with patch.multiple(
        Settings,
        DATA_DIR=tmp_path / "data",
        STORE_PATH=tmp_path / "data" / "price_watch.db",
        EXPORTS_DIR=tmp_path / "exports",
        LOGS_DIR=tmp_path / "logs",
    ):
        yield
