# src/kvasari_stage/scripts/migrate.py
"""Upgrade the configured database to the latest schema revision."""
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from kvasari_stage.core.settings import settings


def run_upgrade_head() -> None:
    cfg = Config()
    # Migrations live at the project root, next to src/
    script_location = os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
    cfg.set_main_option("script_location", os.path.abspath(script_location))
    cfg.set_main_option("sqlalchemy.url", settings.effective_database_url)
    command.upgrade(cfg, "head")


if __name__ == "__main__":
    run_upgrade_head()
