"""Transaction repository using SQLAlchemy 2.0 async.

Table: antifraud.transactions
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_COLUMNS = "id, amount, ip, number, region, date, result, info, feedback"


class TransactionRepository:
    """Repository for antifraud.transactions data access."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        amount: int,
        ip: str,
        number: str,
        region: str,
        date: datetime,
        result: str,
        info: str,
    ) -> dict[str, Any]:
        """Insert an evaluated transaction and return the stored row."""
        created = await self.session.execute(
            text(f"""
                INSERT INTO antifraud.transactions (
                    amount, ip, number, region, date, result, info, feedback
                ) VALUES (
                    :amount, :ip, :number, :region, :date, :result, :info, NULL
                )
                RETURNING {_COLUMNS}
            """),
            {
                "amount": amount,
                "ip": ip,
                "number": number,
                "region": region,
                "date": date,
                "result": result,
                "info": info,
            },
        )
        row = created.fetchone()
        logger.debug("Transaction stored", extra={"transaction_id": row[0], "result": result})
        return self._row_to_dict(row)

    async def get_by_id(
        self, transaction_id: int, for_update: bool = False
    ) -> dict[str, Any] | None:
        """Get a transaction by ID, optionally locking its row."""
        lock_clause = "FOR UPDATE" if for_update else ""
        result = await self.session.execute(
            text(f"""
                SELECT {_COLUMNS}
                FROM antifraud.transactions
                WHERE id = :transaction_id
                {lock_clause}
            """),
            {"transaction_id": transaction_id},
        )
        row = result.fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    async def list_all(self) -> list[dict[str, Any]]:
        """List every transaction ordered by ID."""
        result = await self.session.execute(
            text(f"""
                SELECT {_COLUMNS}
                FROM antifraud.transactions
                ORDER BY id
            """)
        )
        return [self._row_to_dict(row) for row in result.fetchall()]

    async def list_by_number(self, number: str) -> list[dict[str, Any]]:
        """List a card's transactions ordered by ID."""
        result = await self.session.execute(
            text(f"""
                SELECT {_COLUMNS}
                FROM antifraud.transactions
                WHERE number = :number
                ORDER BY id
            """),
            {"number": number},
        )
        return [self._row_to_dict(row) for row in result.fetchall()]

    async def list_window(
        self, number: str, since: datetime, before: datetime
    ) -> list[dict[str, Any]]:
        """List a card's transactions dated within ``[since, before]``."""
        result = await self.session.execute(
            text(f"""
                SELECT {_COLUMNS}
                FROM antifraud.transactions
                WHERE number = :number
                  AND date >= :since
                  AND date <= :before
                ORDER BY date, id
            """),
            {"number": number, "since": since, "before": before},
        )
        return [self._row_to_dict(row) for row in result.fetchall()]

    async def set_feedback(self, transaction_id: int, feedback: str) -> bool:
        """Record feedback once. Returns False if feedback was already set."""
        result = await self.session.execute(
            text("""
                UPDATE antifraud.transactions
                SET feedback = :feedback
                WHERE id = :transaction_id
                  AND feedback IS NULL
            """),
            {"transaction_id": transaction_id, "feedback": feedback},
        )
        return result.rowcount > 0

    def _row_to_dict(self, row) -> dict[str, Any]:
        """Convert a database row to a dictionary."""
        return {
            "id": row[0],
            "amount": row[1],
            "ip": row[2],
            "number": row[3],
            "region": row[4],
            "date": row[5],
            "result": row[6],
            "info": row[7],
            "feedback": row[8],
        }
