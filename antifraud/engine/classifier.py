"""Risk classification of a validated transaction."""

from __future__ import annotations

from collections.abc import Iterable

from antifraud.domain.models.transaction import (
    CardLimits,
    Classification,
    Reason,
    ReasonCode,
    Transaction,
    Verdict,
)

AMOUNT_WITHIN_LIMIT = Reason.of(ReasonCode.AMOUNT_WITHIN_LIMIT, Verdict.ALLOWED)
ALLOW_BOUND_EXCEEDED = Reason.of(ReasonCode.ALLOW_BOUND_EXCEEDED, Verdict.MANUAL_PROCESSING)
MANUAL_BOUND_EXCEEDED = Reason.of(ReasonCode.MANUAL_BOUND_EXCEEDED, Verdict.PROHIBITED)

REASON_SEPARATOR = ", "


def amount_reason(amount: int, limits: CardLimits) -> Reason:
    """Compare the amount with the card's bounds."""
    if amount <= limits.allow_bound:
        return AMOUNT_WITHIN_LIMIT
    if amount <= limits.manual_bound:
        return ALLOW_BOUND_EXCEEDED
    return MANUAL_BOUND_EXCEEDED


def classify(
    transaction: Transaction,
    registry_reasons: Iterable[Reason],
    correlation_reasons: Iterable[Reason],
    limits: CardLimits,
) -> Classification:
    """Combine amount, registry and correlation signals into a verdict.

    The verdict is the most severe of all contributions. Only reasons at
    that severity are kept; an ALLOWED verdict always carries the single
    amount-within-limit reason.
    """
    reasons = {amount_reason(transaction.amount, limits)}
    reasons.update(registry_reasons)
    reasons.update(correlation_reasons)

    verdict = max(reason.severity for reason in reasons)

    if verdict == Verdict.ALLOWED:
        return Classification(verdict=verdict, reasons=frozenset({AMOUNT_WITHIN_LIMIT}))

    return Classification(
        verdict=verdict,
        reasons=frozenset(reason for reason in reasons if reason.severity == verdict),
    )


def format_reasons(classification: Classification) -> str:
    """Sorted, de-duplicated, comma-joined reason codes for presentation."""
    return REASON_SEPARATOR.join(classification.codes)
