"""Tests for the Alembic migration pipeline."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from backend.db import Base

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def alembic_cfg(tmp_path, test_settings, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrations.db'}"
    monkeypatch.setattr(test_settings, "database_url", url)
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "backend" / "alembic"))
    cfg.attributes["url"] = url
    return cfg


def test_upgrade_creates_every_table(alembic_cfg) -> None:
    command.upgrade(alembic_cfg, "head")

    engine = create_engine(alembic_cfg.attributes["url"])
    tables = set(inspect(engine).get_table_names())
    engine.dispose()

    assert set(Base.metadata.tables) <= tables


def test_upgraded_columns_match_models(alembic_cfg) -> None:
    command.upgrade(alembic_cfg, "head")

    engine = create_engine(alembic_cfg.attributes["url"])
    inspector = inspect(engine)
    for name, table in Base.metadata.tables.items():
        migrated = {col["name"] for col in inspector.get_columns(name)}
        assert migrated == set(table.columns.keys()), name
    engine.dispose()


def test_downgrade_drops_everything(alembic_cfg) -> None:
    command.upgrade(alembic_cfg, "head")
    command.downgrade(alembic_cfg, "base")

    engine = create_engine(alembic_cfg.attributes["url"])
    tables = set(inspect(engine).get_table_names())
    engine.dispose()

    assert tables <= {"alembic_version"}
