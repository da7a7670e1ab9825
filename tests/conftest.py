# ruff: noqa: E402, I001
"""Pytest configuration for test isolation.

Makes the workspace packages importable without an install (``packages/`` for
``finance_tracker`` and ``libs/db/src`` for ``db``) and keeps every test off
any developer database: ``DATABASE_URL`` is cleared by an autouse fixture, and
the ``db_url`` fixture bootstraps a fresh file-backed SQLite database under the
test's own ``tmp_path``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

from db.client import dispose_engine, session_scope
from finance_tracker import logging_setup
from finance_tracker.models import UserSettings
from finance_tracker.persistence import SqlAlchemyStore

from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_database(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Never touch a real database; drop the shared engine after each test."""

    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("FINANCE_TRACKER_USER_ID", raising=False)
    monkeypatch.delenv(logging_setup.LEVEL_ENV_VAR, raising=False)
    yield
    dispose_engine()
    # CLI runs point the handler at a captured stream that is closed afterwards.
    pkg = logging.getLogger(logging_setup.ROOT_LOGGER)
    for h in list(pkg.handlers):
        pkg.removeHandler(h)
    pkg.propagate = True
    pkg.setLevel(logging.NOTSET)
    logging_setup._handler = None


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "finance.sqlite3")


@pytest.fixture
def store(db_url: str) -> Iterator[SqlAlchemyStore]:
    """A store over one session that commits when the test body finishes."""

    with session_scope(database_url=db_url) as session:
        yield SqlAlchemyStore(session)


@pytest.fixture
def user(store: SqlAlchemyStore) -> UserSettings:
    return store.create_user("alice")
