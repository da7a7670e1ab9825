"""Alembic migrations stay in sync with the ORM models."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from db import metadata

_ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "libs" / "db" / "alembic"


def _config() -> Config:
    # No ini file: env.py skips logging setup and reads DATABASE_URL.
    cfg = Config()
    cfg.set_main_option("script_location", str(_ALEMBIC_DIR))
    return cfg


def test_upgrade_head_matches_orm_and_downgrades(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.sqlite3'}"
    monkeypatch.setenv("DATABASE_URL", url)

    command.upgrade(_config(), "head")

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        for table in metadata.sorted_tables:
            got = {c["name"] for c in insp.get_columns(table.name)}
            assert got == {c.name for c in table.columns}, table.name
        uniques = insp.get_unique_constraints("ft_budgets")
        assert any(set(u["column_names"]) == {"user_id", "month_year"} for u in uniques)
        assert "ix_ft_tx_user_date" in {i["name"] for i in insp.get_indexes("ft_transactions")}
    finally:
        engine.dispose()

    command.downgrade(_config(), "base")

    engine = create_engine(url)
    try:
        assert not {"ft_users", "ft_transactions", "ft_budgets"} & set(
            inspect(engine).get_table_names()
        )
    finally:
        engine.dispose()
