"""Pytest configuration for import paths and database isolation.

The workspace packages live under ``packages/`` and ``libs/db/src`` and are
put on ``sys.path`` here so tests run from a plain checkout.

``db.client`` keeps one shared engine per process and refuses to switch URLs,
so every test gets its own SQLite file and the engine is disposed around it.
Settings-related environment variables are cleared so a developer's ``.env``
or shell cannot leak into assertions.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

from db.client import dispose_engine  # noqa: E402

_SETTINGS_ENV = (
    "DATABASE_URL",
    "SPEND_INSIGHTS_DATABASE_URL",
    "SPEND_INSIGHTS_INVALID_DATES",
    "SPEND_INSIGHTS_LOG_LEVEL",
    "SPEND_INSIGHTS_TOP_MERCHANTS",
)


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    # Keep the CLI's load_dotenv() from finding a stray .env in the checkout.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(
        "SPEND_INSIGHTS_DATABASE_URL", f"sqlite+pysqlite:///{os.fspath(tmp_path / 'spend.db')}"
    )
    dispose_engine()
    yield
    dispose_engine()


@pytest.fixture
def database_url() -> str:
    return os.environ["SPEND_INSIGHTS_DATABASE_URL"]
