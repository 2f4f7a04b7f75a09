"""Transaction evaluation and history service."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from antifraud.core.errors import NotFoundError, ValidationError
from antifraud.core.security.card_numbers import is_valid_card_number, mask_card_number
from antifraud.engine.classifier import format_reasons
from antifraud.engine.engine import RiskEngine
from antifraud.persistence.card_limits_repository import CardLimitsRepository
from antifraud.persistence.lookups import transaction_from_row
from antifraud.persistence.transaction_repository import TransactionRepository
from antifraud.schemas.transaction import TransactionView

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for evaluating transactions and reading their history."""

    def __init__(self, session: AsyncSession, engine: RiskEngine):
        self.session = session
        self.engine = engine
        self.repository = TransactionRepository(session)
        self.limits_repository = CardLimitsRepository(session)

    async def evaluate(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Evaluate a submitted transaction and record it with its verdict.

        Nothing is stored when validation or a lookup fails.
        """
        transaction, classification = await self.engine.evaluate(raw, self.limits_repository)
        info = format_reasons(classification)

        stored = await self.repository.create(
            amount=transaction.amount,
            ip=transaction.ip,
            number=transaction.number,
            region=transaction.region,
            date=transaction.date,
            result=classification.verdict.value,
            info=info,
        )

        logger.info(
            "Transaction evaluated",
            extra={
                "transaction_id": stored["id"],
                "card": mask_card_number(transaction.number),
                "result": classification.verdict.value,
            },
        )
        return {
            "transaction_id": stored["id"],
            "result": classification.verdict.value,
            "info": info,
        }

    async def list_history(self) -> list[TransactionView]:
        """All transactions ordered by ID."""
        rows = await self.repository.list_all()
        return [TransactionView.from_transaction(transaction_from_row(row)) for row in rows]

    async def list_card_history(self, number: str) -> list[TransactionView]:
        """A card's transactions ordered by ID."""
        if not is_valid_card_number(number):
            raise ValidationError(
                "Card number must be 16 digits with a valid checksum",
                details={"field": "number"},
            )

        rows = await self.repository.list_by_number(number)
        if not rows:
            raise NotFoundError(
                "No transactions found for card",
                details={"number": mask_card_number(number)},
            )
        return [TransactionView.from_transaction(transaction_from_row(row)) for row in rows]
