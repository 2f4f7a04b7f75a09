#!/usr/bin/env python3
"""
Card Anti-Fraud Database Setup Script

Supports:
- init: First-time schema creation
- reset: Drop and recreate tables (--mode=data|schema)
- verify: Check DB connectivity and schema

Usage:
    uv run db-init
    uv run db-reset --mode schema
    uv run db-verify

Environment Variables:
- DATABASE_URL_ADMIN: Admin connection with schema creation permissions (primary)
- DATABASE_URL: Fallback
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import psycopg
from psycopg.rows import dict_row

SCHEMA = "antifraud"
SCHEMA_FILE = "antifraud_schema.sql"

# Ordered for TRUNCATE/DROP
TABLES = ["transactions", "card_limits", "stolen_cards", "suspicious_ips"]


@dataclass
class SetupResult:
    """Result of a setup step."""

    success: bool
    message: str
    details: str | None = None


class ResetMode(Enum):
    """Database reset modes."""

    SCHEMA = "schema"
    DATA = "data"


def split_sql_statements(sql_content: str) -> list[str]:
    """Split SQL content on statement-ending semicolons, dropping comment lines."""
    statements = []
    current: list[str] = []

    for line in sql_content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        current.append(line)
        if stripped.endswith(";"):
            statements.append("\n".join(current))
            current = []

    if current:
        statements.append("\n".join(current))

    return statements


class DatabaseSetup:
    """Handles database setup for the Card Anti-Fraud service."""

    def __init__(self, admin_url: str):
        self.admin_url = admin_url
        self.repo_root = Path(__file__).parent.parent

    def _load_sql_file(self, filename: str) -> str:
        """Load SQL file from db directory."""
        sql_path = self.repo_root / "db" / filename
        if not sql_path.exists():
            raise FileNotFoundError(f"SQL file not found: {sql_path}")
        return sql_path.read_text(encoding="utf-8")

    def _execute_sql(
        self, conn: psycopg.Connection, sql_content: str, description: str
    ) -> SetupResult:
        """Execute SQL content with error handling."""
        try:
            statements = split_sql_statements(sql_content)
            for stmt in statements:
                conn.execute(stmt)
            conn.commit()
            return SetupResult(
                success=True,
                message=description,
                details=f"Executed {len(statements)} statements",
            )
        except psycopg.Error as e:
            conn.rollback()
            return SetupResult(
                success=False,
                message=description,
                details=f"{type(e).__name__}: {e}",
            )

    def init(self) -> int:
        """Initialize database schema."""
        print("Initializing database schema...")

        schema_sql = self._load_sql_file(SCHEMA_FILE)

        try:
            with psycopg.connect(self.admin_url, autocommit=False) as conn:
                print("  Applying schema...")
                result = self._execute_sql(conn, schema_sql, "Schema creation failed")
                if not result.success:
                    print(f"ERROR: {result.details}")
                    return 1
                print(f"  Schema applied: {result.details}")

        except psycopg.Error as e:
            print(f"ERROR: Database connection failed: {e}")
            return 1

        print("Database initialization complete.")
        return 0

    def reset(self, mode: ResetMode, force: bool = False) -> int:
        """Reset database tables (schema or data mode)."""
        print(f"Resetting database tables ({mode.value})...")

        if not force:
            response = input("This will destroy all anti-fraud data. Continue? [y/N]: ")
            if response.lower() != "y":
                print("Aborted.")
                return 1

        try:
            with psycopg.connect(self.admin_url, autocommit=False) as conn:
                if mode == ResetMode.SCHEMA:
                    print("  Dropping tables...")
                    for table in TABLES:
                        conn.execute(f"DROP TABLE IF EXISTS {SCHEMA}.{table} CASCADE")
                    conn.commit()
                    print("  Tables dropped.")

                    print("  Applying schema...")
                    schema_sql = self._load_sql_file(SCHEMA_FILE)
                    result = self._execute_sql(conn, schema_sql, "Schema recreation failed")
                    if not result.success:
                        print(f"ERROR: {result.details}")
                        return 1
                    print(f"  Schema applied: {result.details}")
                else:
                    print("  Truncating tables...")
                    for table in TABLES:
                        conn.execute(f"TRUNCATE TABLE {SCHEMA}.{table} RESTART IDENTITY CASCADE")
                    conn.commit()
                    print("  Tables truncated.")

        except psycopg.Error as e:
            print(f"ERROR: Database reset failed: {e}")
            return 1

        print("Database reset complete.")
        return 0

    def verify(self) -> int:
        """Verify database setup."""
        print("Verifying database setup...")

        errors: list[str] = []

        try:
            with psycopg.connect(self.admin_url, autocommit=True, row_factory=dict_row) as conn:
                print("  [OK] Database connection")
                rows = conn.execute(
                    """
                    SELECT table_name FROM information_schema.tables
                    WHERE table_schema = %s
                    ORDER BY table_name
                    """,
                    (SCHEMA,),
                ).fetchall()
                tables = [row["table_name"] for row in rows]
                missing = [t for t in TABLES if t not in tables]
                if missing:
                    errors.append(f"Missing tables: {missing}")
                else:
                    print(f"  [OK] Tables exist: {', '.join(TABLES)}")

                rows = conn.execute(
                    "SELECT indexname FROM pg_indexes WHERE schemaname = %s",
                    (SCHEMA,),
                ).fetchall()
                indexes = [row["indexname"] for row in rows]
                if "idx_transactions_number_date" not in indexes:
                    errors.append("Missing index: idx_transactions_number_date")
                else:
                    print(f"  [OK] Indexes: {len(indexes)}")
        except psycopg.Error as e:
            errors.append(f"Schema check failed: {e}")

        if errors:
            print("\nVerification FAILED:")
            for err in errors:
                print(f"  - {err}")
            return 1

        print("\nVerification PASSED.")
        return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Card Anti-Fraud - Database Setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--admin-url",
        help="Admin database URL (overrides env var)",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip confirmation prompts",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="First-time setup")

    reset_parser = subparsers.add_parser("reset", help="Reset database")
    reset_parser.add_argument(
        "--mode",
        choices=["schema", "data"],
        default="schema",
        help="Reset mode: schema (drop/recreate) or data (truncate only)",
    )
    reset_parser.add_argument("--force", action="store_true", help="Bypass safety checks")

    subparsers.add_parser("verify", help="Verify database setup")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    admin_url = args.admin_url or os.getenv("DATABASE_URL_ADMIN") or os.getenv("DATABASE_URL")

    if not admin_url:
        print("ERROR: DATABASE_URL_ADMIN is required")
        print("Set it as environment variable or via --admin-url")
        return 2

    setup = DatabaseSetup(admin_url=admin_url)

    if args.command == "init":
        return setup.init()
    elif args.command == "reset":
        return setup.reset(mode=ResetMode(args.mode), force=args.force or args.yes)
    elif args.command == "verify":
        return setup.verify()

    return 0


if __name__ == "__main__":
    sys.exit(main())
