"""Feedback-driven adaptation of per-card thresholds.

A reviewer's confirmed outcome moves the card's bounds a tenth of the way
toward the transaction amount. Which bounds move depends on the pairing
of the recorded verdict and the confirmed outcome:

    recorded            confirmed           moves
    MANUAL_PROCESSING   ALLOWED             allow (up)
    PROHIBITED          ALLOWED             allow, manual (up)
    ALLOWED             MANUAL_PROCESSING   allow (down)
    PROHIBITED          MANUAL_PROCESSING   manual (down)
    ALLOWED             PROHIBITED          allow, manual (down)
    MANUAL_PROCESSING   PROHIBITED          manual (down)
"""

from __future__ import annotations

from typing import Any

from antifraud.core.errors import ConflictError, ValidationError
from antifraud.domain.models.transaction import CardLimits, Transaction, Verdict

A = Verdict.ALLOWED
M = Verdict.MANUAL_PROCESSING
P = Verdict.PROHIBITED

# (recorded, confirmed) -> (allow bound moves, manual bound moves)
ADJUSTMENTS: dict[tuple[Verdict, Verdict], tuple[bool, bool]] = {
    (M, A): (True, False),
    (P, A): (True, True),
    (A, M): (True, False),
    (P, M): (False, True),
    (A, P): (True, True),
    (M, P): (False, True),
}


def parse_feedback(value: Any) -> Verdict:
    """Parse a reviewer's feedback into a verdict."""
    if isinstance(value, Verdict):
        return value
    try:
        return Verdict(value)
    except ValueError:
        raise ValidationError(
            "Feedback must be one of ALLOWED, MANUAL_PROCESSING, PROHIBITED",
            details={"field": "feedback"},
        ) from None


def truncated_div(dividend: int, divisor: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(dividend) // divisor
    return quotient if dividend >= 0 else -quotient


def nudge(bound: int, amount: int, divisor: int) -> int:
    """Move ``bound`` toward ``amount`` by a truncated 1/divisor of the gap.

    ``bound += (amount - bound) / d`` and ``bound -= (bound - amount) / d``
    coincide under truncation toward zero.
    """
    return bound + truncated_div(amount - bound, divisor)


def clamp(allow_bound: int, manual_bound: int, manual_only: bool) -> tuple[int, int]:
    """Restore ``0 <= allow < manual`` by moving the bound that crossed."""
    allow_bound = max(allow_bound, 0)
    if allow_bound < manual_bound:
        return allow_bound, manual_bound

    if manual_only:
        return allow_bound, allow_bound + 1

    allow_bound = manual_bound - 1
    if allow_bound < 0:
        return 0, 1
    return allow_bound, manual_bound


def adjust_limits(
    limits: CardLimits,
    recorded: Verdict,
    confirmed: Verdict,
    amount: int,
    divisor: int = 10,
) -> CardLimits:
    """Compute the card's new bounds for a disagreeing confirmed outcome."""
    if recorded == confirmed:
        raise ConflictError(
            "Feedback matches the recorded verdict",
            details={"result": recorded.value, "feedback": confirmed.value},
        )

    move_allow, move_manual = ADJUSTMENTS[(recorded, confirmed)]

    allow_bound = limits.allow_bound
    manual_bound = limits.manual_bound
    if move_allow:
        allow_bound = nudge(allow_bound, amount, divisor)
    if move_manual:
        manual_bound = nudge(manual_bound, amount, divisor)

    allow_bound, manual_bound = clamp(allow_bound, manual_bound, manual_only=not move_allow)
    return CardLimits(number=limits.number, allow_bound=allow_bound, manual_bound=manual_bound)


def apply_feedback(
    transaction: Transaction,
    confirmed: Verdict,
    limits: CardLimits,
    divisor: int = 10,
) -> CardLimits:
    """Check a correction against a stored transaction and adjust its card's limits.

    Raises:
        ConflictError: If feedback was already given or equals the verdict.
    """
    if transaction.feedback is not None:
        raise ConflictError(
            "Feedback already recorded for transaction",
            details={
                "transaction_id": transaction.transaction_id,
                "feedback": transaction.feedback.value,
            },
        )
    if transaction.result is None:
        raise ConflictError(
            "Transaction has no recorded verdict",
            details={"transaction_id": transaction.transaction_id},
        )
    return adjust_limits(limits, transaction.result, confirmed, transaction.amount, divisor)
