"""Card limits repository.

Table: antifraud.card_limits
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from antifraud.domain.models.transaction import CardLimits

logger = logging.getLogger(__name__)


class CardLimitsRepository:
    """Repository for antifraud.card_limits data access.

    A card gets its row lazily, on first evaluation, with the configured
    default bounds.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, number: str, for_update: bool = False) -> CardLimits | None:
        """Get a card's limits, optionally locking the row."""
        lock_clause = "FOR UPDATE" if for_update else ""
        result = await self.session.execute(
            text(f"""
                SELECT number, allow_bound, manual_bound
                FROM antifraud.card_limits
                WHERE number = :number
                {lock_clause}
            """),
            {"number": number},
        )
        row = result.fetchone()
        if row is None:
            return None
        return CardLimits(**self._row_to_dict(row))

    async def get_or_create(self, number: str, allow_bound: int, manual_bound: int) -> CardLimits:
        """Get a card's limits, inserting the defaults if the card is new."""
        result = await self.session.execute(
            text("""
                INSERT INTO antifraud.card_limits (number, allow_bound, manual_bound)
                VALUES (:number, :allow_bound, :manual_bound)
                ON CONFLICT (number) DO NOTHING
                RETURNING number, allow_bound, manual_bound
            """),
            {"number": number, "allow_bound": allow_bound, "manual_bound": manual_bound},
        )
        row = result.fetchone()
        if row is not None:
            logger.debug("Default card limits created", extra={"allow_bound": allow_bound})
            return CardLimits(**self._row_to_dict(row))

        existing = await self.get(number)
        if existing is None:
            raise RuntimeError("Card limits row vanished after insert conflict")
        return existing

    async def update(self, limits: CardLimits) -> CardLimits:
        """Store new bounds for a card."""
        await self.session.execute(
            text("""
                UPDATE antifraud.card_limits
                SET allow_bound = :allow_bound,
                    manual_bound = :manual_bound
                WHERE number = :number
            """),
            {
                "number": limits.number,
                "allow_bound": limits.allow_bound,
                "manual_bound": limits.manual_bound,
            },
        )
        return limits

    def _row_to_dict(self, row) -> dict[str, Any]:
        """Convert a database row to a dictionary."""
        return {
            "number": row[0],
            "allow_bound": row[1],
            "manual_bound": row[2],
        }
