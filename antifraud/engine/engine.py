"""Transaction risk-evaluation engine.

Validation runs first. Registry checks and history correlation then run
concurrently, after which the card's limits are read and the classifier
produces the verdict.
A failed lookup cancels the others and fails the evaluation closed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Mapping
from datetime import timedelta
from typing import Any, TypeVar

from antifraud.core.config import RiskEngineConfig
from antifraud.core.errors import AntifraudError, CollaboratorUnavailableError
from antifraud.core.logging import LoggerMixin
from antifraud.core.security.card_numbers import mask_card_number
from antifraud.domain.models.transaction import CardLimits, Classification, Transaction, Verdict
from antifraud.engine.classifier import classify, format_reasons
from antifraud.engine.collaborators import HistoryLookup, LimitStore, RegistryLookup
from antifraud.engine.correlation import HistoryCorrelator
from antifraud.engine.feedback import apply_feedback
from antifraud.engine.registry import RegistryChecker
from antifraud.engine.validator import validate_transaction

T = TypeVar("T")


class RiskEngine(LoggerMixin):
    """Evaluates transactions and adjusts card limits from feedback."""

    def __init__(
        self,
        registry: RegistryLookup,
        history: HistoryLookup,
        config: RiskEngineConfig | None = None,
    ):
        self.config = config or RiskEngineConfig()
        self.registry_checker = RegistryChecker(registry)
        self.correlator = HistoryCorrelator(
            history,
            window=timedelta(seconds=self.config.correlation_window_seconds),
            manual_threshold=self.config.correlation_manual_threshold,
            prohibit_threshold=self.config.correlation_prohibit_threshold,
        )

    def validate(self, raw: Mapping[str, Any]) -> Transaction:
        return validate_transaction(raw, self.config.regions)

    async def evaluate(
        self, raw: Mapping[str, Any], limit_store: LimitStore
    ) -> tuple[Transaction, Classification]:
        """Validate and classify a submitted transaction.

        Raises:
            ValidationError: If a raw field is malformed.
            CollaboratorUnavailableError: If a registry, history or limits lookup fails.
        """
        transaction = self.validate(raw)

        try:
            async with asyncio.TaskGroup() as group:
                registry_task = group.create_task(
                    self._guarded("registry", self.registry_checker.check(transaction))
                )
                history_task = group.create_task(
                    self._guarded("history", self.correlator.correlate(transaction))
                )
        except ExceptionGroup as failures:
            raise failures.exceptions[0]

        # Runs on the caller's session, so only after the lookups have settled
        limits = await self._guarded(
            "limits",
            limit_store.get_or_create(
                transaction.number,
                self.config.default_allow_bound,
                self.config.default_manual_bound,
            ),
        )

        classification = classify(
            transaction, registry_task.result(), history_task.result(), limits
        )

        self.logger.info(
            "transaction_evaluated",
            card=mask_card_number(transaction.number),
            amount=transaction.amount,
            region=transaction.region,
            verdict=classification.verdict.value,
            reasons=format_reasons(classification),
            allow_bound=limits.allow_bound,
            manual_bound=limits.manual_bound,
        )
        return transaction, classification

    def adjust(
        self, transaction: Transaction, confirmed: Verdict, limits: CardLimits
    ) -> CardLimits:
        """Apply a reviewer's confirmed outcome to the card's limits."""
        updated = apply_feedback(transaction, confirmed, limits, self.config.feedback_divisor)

        self.logger.info(
            "card_limits_adjusted",
            card=mask_card_number(transaction.number),
            transaction_id=transaction.transaction_id,
            result=transaction.result.value if transaction.result else None,
            feedback=confirmed.value,
            allow_bound=updated.allow_bound,
            manual_bound=updated.manual_bound,
            previous_allow_bound=limits.allow_bound,
            previous_manual_bound=limits.manual_bound,
        )
        return updated

    async def _guarded(self, collaborator: str, lookup: Awaitable[T]) -> T:
        try:
            return await lookup
        except AntifraudError:
            raise
        except Exception as exc:
            self.logger.error("lookup_failed", collaborator=collaborator, error=str(exc))
            raise CollaboratorUnavailableError(
                f"{collaborator.capitalize()} lookup failed",
                details={"collaborator": collaborator},
            ) from exc
