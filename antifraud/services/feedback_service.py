"""Reviewer feedback service.

Feedback is accepted once per transaction and moves the card's limits.
The read-modify-write of a card's limits is serialized per card: by an
in-process lock and by a row lock on the card's limits.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from antifraud.core.errors import ConflictError, NotFoundError
from antifraud.core.security.card_numbers import mask_card_number
from antifraud.engine.engine import RiskEngine
from antifraud.engine.feedback import parse_feedback
from antifraud.engine.limits import CardLockRegistry, card_locks
from antifraud.persistence.card_limits_repository import CardLimitsRepository
from antifraud.persistence.lookups import transaction_from_row
from antifraud.persistence.transaction_repository import TransactionRepository
from antifraud.schemas.transaction import TransactionView

logger = logging.getLogger(__name__)


class FeedbackService:
    """Service for reviewer corrections of recorded verdicts."""

    def __init__(
        self,
        session: AsyncSession,
        engine: RiskEngine,
        locks: CardLockRegistry | None = None,
    ):
        self.session = session
        self.engine = engine
        self.locks = locks if locks is not None else card_locks
        self.repository = TransactionRepository(session)
        self.limits_repository = CardLimitsRepository(session)

    async def correct(self, transaction_id: int, feedback: Any) -> TransactionView:
        """Record a reviewer's confirmed outcome and adjust the card's limits.

        Raises:
            ValidationError: If feedback is not a verdict.
            NotFoundError: If the transaction does not exist.
            ConflictError: If feedback was already given or matches the verdict.
        """
        confirmed = parse_feedback(feedback)

        row = await self.repository.get_by_id(transaction_id)
        if row is None:
            raise NotFoundError(
                "Transaction not found",
                details={"transaction_id": transaction_id},
            )

        number = row["number"]
        async with self.locks.hold(number):
            row = await self.repository.get_by_id(transaction_id, for_update=True)
            transaction = transaction_from_row(row)

            risk = self.engine.config
            await self.limits_repository.get_or_create(
                number, risk.default_allow_bound, risk.default_manual_bound
            )
            limits = await self.limits_repository.get(number, for_update=True)

            updated = self.engine.adjust(transaction, confirmed, limits)

            if not await self.repository.set_feedback(transaction_id, confirmed.value):
                raise ConflictError(
                    "Feedback already recorded for transaction",
                    details={"transaction_id": transaction_id},
                )
            await self.limits_repository.update(updated)

        logger.info(
            "Feedback recorded",
            extra={
                "transaction_id": transaction_id,
                "card": mask_card_number(number),
                "result": transaction.result.value if transaction.result else None,
                "feedback": confirmed.value,
            },
        )
        return TransactionView.from_transaction(
            transaction.model_copy(update={"feedback": confirmed})
        )
