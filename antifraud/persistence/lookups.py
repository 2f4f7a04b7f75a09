"""SQL-backed registry and history lookups consumed by the risk engine.

The engine runs lookups concurrently and an ``AsyncSession`` cannot be
shared between concurrent operations, so every lookup opens its own
short-lived read-only session.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from antifraud.core.database import lookup_session
from antifraud.domain.models.transaction import Transaction
from antifraud.persistence.registry_repository import RegistryKind, RegistryRepository
from antifraud.persistence.transaction_repository import TransactionRepository


def transaction_from_row(row: dict[str, Any]) -> Transaction:
    """Build a domain transaction from a repository row."""
    return Transaction(
        transaction_id=row["id"],
        amount=row["amount"],
        ip=row["ip"],
        number=row["number"],
        region=row["region"],
        date=row["date"],
        result=row["result"],
        info=row["info"],
        feedback=row["feedback"] or None,
    )


class SqlLookups:
    """Registry and history lookups over the antifraud schema."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def lookup_stolen_card(self, number: str) -> bool:
        async with lookup_session(self.session_factory) as session:
            return await RegistryRepository(session, RegistryKind.STOLEN_CARD).exists(number)

    async def lookup_suspicious_ip(self, ip: str) -> bool:
        async with lookup_session(self.session_factory) as session:
            return await RegistryRepository(session, RegistryKind.SUSPICIOUS_IP).exists(ip)

    async def fetch_card_history(
        self, number: str, since: datetime, before: datetime
    ) -> Sequence[Transaction]:
        async with lookup_session(self.session_factory) as session:
            rows = await TransactionRepository(session).list_window(number, since, before)
        return [transaction_from_row(row) for row in rows]
