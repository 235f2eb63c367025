# app/db/migrate.py
from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from app.core.config import database_url

log = logging.getLogger("app.db")

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url())
    # keep the app's logging config; alembic.ini would replace it
    cfg.attributes["configure_logger"] = False
    return cfg


def run_migrations(revision: str = "head") -> None:
    """Apply versioned migrations once at startup (RUN_MIGRATIONS=1)."""
    log.info("applying migrations up to %s", revision)
    command.upgrade(alembic_config(), revision)
