"""
Database setup commands.

These commands wrap scripts/setup_database.py; connection URLs come from
the environment (DATABASE_URL_ADMIN).

Usage:
    uv run db-init          # First-time setup
    uv run db-reset-data    # Truncate tables
    uv run db-reset-schema  # Drop and recreate tables
    uv run db-verify        # Verify setup
"""

from __future__ import annotations

import sys
from pathlib import Path

from cli._runner import run

_SETUP_DB_SCRIPT = Path(__file__).parent.parent / "scripts" / "setup_database.py"


def _setup_db(*args: str) -> int:
    return run([sys.executable, str(_SETUP_DB_SCRIPT), *args])


def db_init() -> None:
    """First-time database setup."""
    sys.exit(_setup_db("--yes", "init"))


def db_reset_data() -> None:
    """Reset database (data mode - truncate tables)."""
    sys.exit(_setup_db("--yes", "reset", "--mode", "data"))


def db_reset_schema() -> None:
    """Reset database (schema mode - drop and recreate tables)."""
    sys.exit(_setup_db("--yes", "reset", "--mode", "schema"))


def db_verify() -> None:
    """Verify database setup."""
    sys.exit(_setup_db("verify"))
