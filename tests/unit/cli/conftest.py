"""Fixtures for CLI tests."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer CATALOGDB_* settings out of CLI runs."""
    for var in ("CATALOGDB_BASE_DIR", "CATALOGDB_LOOKUP_DIR", "CATALOGDB_CODEC"):
        monkeypatch.delenv(var, raising=False)
