# tests/conftest.py

"""Shared pytest fixtures for all pricecompare tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Point logs and the default catalogue database at a temp dir."""
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(
        Settings, "CATALOG_DB_PATH", tmp_path / "catalog.db",
    )
    yield
    root_logger = logging.getLogger("pricecompare")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
