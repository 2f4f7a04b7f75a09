"""Stolen-card and suspicious-IP registry repository.

Tables: antifraud.stolen_cards, antifraud.suspicious_ips
"""

import logging
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class RegistryKind(str, Enum):
    """A blocklist and the table backing it."""

    STOLEN_CARD = "stolen_card"
    SUSPICIOUS_IP = "suspicious_ip"

    @property
    def table(self) -> str:
        return {
            RegistryKind.STOLEN_CARD: "antifraud.stolen_cards",
            RegistryKind.SUSPICIOUS_IP: "antifraud.suspicious_ips",
        }[self]

    @property
    def column(self) -> str:
        return {
            RegistryKind.STOLEN_CARD: "number",
            RegistryKind.SUSPICIOUS_IP: "ip",
        }[self]


class RegistryRepository:
    """Repository for one registry table."""

    def __init__(self, session: AsyncSession, kind: RegistryKind):
        self.session = session
        self.kind = kind

    async def exists(self, value: str) -> bool:
        result = await self.session.execute(
            text(f"SELECT 1 FROM {self.kind.table} WHERE {self.kind.column} = :value"),
            {"value": value},
        )
        return result.fetchone() is not None

    async def add(self, value: str) -> dict[str, Any] | None:
        """Add an entry. Returns None if the value is already registered."""
        result = await self.session.execute(
            text(f"""
                INSERT INTO {self.kind.table} ({self.kind.column})
                VALUES (:value)
                ON CONFLICT ({self.kind.column}) DO NOTHING
                RETURNING id, {self.kind.column}
            """),
            {"value": value},
        )
        row = result.fetchone()
        if row is None:
            return None
        logger.info("Registry entry added", extra={"registry": self.kind.value, "id": row[0]})
        return self._row_to_dict(row)

    async def list_all(self) -> list[dict[str, Any]]:
        result = await self.session.execute(
            text(f"SELECT id, {self.kind.column} FROM {self.kind.table} ORDER BY id")
        )
        return [self._row_to_dict(row) for row in result.fetchall()]

    async def delete(self, value: str) -> bool:
        """Delete an entry. Returns False if the value was not registered."""
        result = await self.session.execute(
            text(f"DELETE FROM {self.kind.table} WHERE {self.kind.column} = :value"),
            {"value": value},
        )
        return result.rowcount > 0

    def _row_to_dict(self, row) -> dict[str, Any]:
        return {"id": row[0], self.kind.column: row[1]}
