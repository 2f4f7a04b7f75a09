"""Unit tests for feedback-driven limit adjustment."""

import random

import pytest

from antifraud.core.errors import ConflictError, ValidationError
from antifraud.domain.models.transaction import CardLimits, Verdict
from antifraud.engine.feedback import (
    ADJUSTMENTS,
    adjust_limits,
    apply_feedback,
    clamp,
    nudge,
    parse_feedback,
    truncated_div,
)
from tests.conftest import CARD, make_transaction

A = Verdict.ALLOWED
M = Verdict.MANUAL_PROCESSING
P = Verdict.PROHIBITED


def _limits(allow: int, manual: int) -> CardLimits:
    return CardLimits(number=CARD, allow_bound=allow, manual_bound=manual)


def _bounds(limits: CardLimits) -> tuple[int, int]:
    return limits.allow_bound, limits.manual_bound


class TestArithmetic:
    def test_truncated_div_rounds_toward_zero(self):
        assert truncated_div(75, 10) == 7
        assert truncated_div(-75, 10) == -7
        assert truncated_div(-5, 10) == 0
        assert truncated_div(0, 10) == 0

    def test_nudge_up_and_down(self):
        assert nudge(200, 800, 10) == 260
        assert nudge(1500, 800, 10) == 1430

    def test_nudge_small_gap_does_not_move(self):
        assert nudge(200, 195, 10) == 200
        assert nudge(200, 205, 10) == 200

    def test_clamp_keeps_valid_bounds(self):
        assert clamp(200, 1500, manual_only=False) == (200, 1500)

    def test_clamp_lowers_allow_when_it_crossed(self):
        assert clamp(2180, 1500, manual_only=False) == (1499, 1500)

    def test_clamp_raises_manual_when_only_manual_moved(self):
        assert clamp(1000, 910, manual_only=True) == (1000, 1001)

    def test_clamp_negative_allow(self):
        assert clamp(-3, 10, manual_only=False) == (0, 10)

    def test_clamp_falls_back_to_minimum_pair(self):
        assert clamp(5, 0, manual_only=False) == (0, 1)


class TestAdjustLimits:
    """Every (recorded, confirmed) pair moves the documented bounds."""

    def test_manual_confirmed_allowed_raises_allow_bound(self):
        updated = adjust_limits(_limits(200, 1500), M, A, 800)
        assert _bounds(updated) == (260, 1500)

    def test_prohibited_confirmed_allowed_raises_both(self):
        updated = adjust_limits(_limits(200, 1500), P, A, 2000)
        assert _bounds(updated) == (380, 1550)

    def test_allowed_confirmed_manual_lowers_allow(self):
        updated = adjust_limits(_limits(200, 1500), A, M, 100)
        assert _bounds(updated) == (190, 1500)

    def test_prohibited_confirmed_manual_lowers_manual(self):
        updated = adjust_limits(_limits(200, 1500), P, M, 1000)
        assert _bounds(updated) == (200, 1450)

    def test_allowed_confirmed_prohibited_lowers_both(self):
        updated = adjust_limits(_limits(200, 1500), A, P, 100)
        assert _bounds(updated) == (190, 1360)

    def test_manual_confirmed_prohibited_lowers_manual(self):
        updated = adjust_limits(_limits(200, 1500), M, P, 800)
        assert _bounds(updated) == (200, 1430)

    def test_table_covers_all_disagreements(self):
        pairs = {(r, c) for r in Verdict for c in Verdict if r != c}
        assert set(ADJUSTMENTS) == pairs

    @pytest.mark.parametrize("verdict", list(Verdict))
    def test_agreeing_feedback_conflicts(self, verdict):
        with pytest.raises(ConflictError):
            adjust_limits(_limits(200, 1500), verdict, verdict, 800)

    def test_allow_overtaking_manual_is_clamped(self):
        updated = adjust_limits(_limits(200, 1500), M, A, 20000)
        assert _bounds(updated) == (1499, 1500)

    def test_manual_undercutting_allow_is_clamped(self):
        updated = adjust_limits(_limits(1000, 1010), M, P, 1)
        assert _bounds(updated) == (1000, 1001)

    def test_custom_divisor(self):
        updated = adjust_limits(_limits(200, 1500), M, A, 800, divisor=2)
        assert _bounds(updated) == (500, 1500)

    def test_number_is_preserved(self):
        assert adjust_limits(_limits(200, 1500), M, A, 800).number == CARD

    def test_invariant_holds_over_random_sequences(self):
        rng = random.Random(20221013)
        pairs = list(ADJUSTMENTS)
        limits = _limits(200, 1500)

        for _ in range(2000):
            recorded, confirmed = rng.choice(pairs)
            amount = rng.choice([1, 2, 10, rng.randint(1, 5000), rng.randint(1, 10**7)])
            limits = adjust_limits(limits, recorded, confirmed, amount)
            assert 0 <= limits.allow_bound < limits.manual_bound


class TestApplyFeedback:
    def test_applies_to_stored_transaction(self):
        transaction = make_transaction(amount=800, transaction_id=1, result=M)
        updated = apply_feedback(transaction, A, _limits(200, 1500))
        assert _bounds(updated) == (260, 1500)

    def test_second_feedback_conflicts(self):
        transaction = make_transaction(amount=800, transaction_id=1, result=M, feedback=A)
        with pytest.raises(ConflictError) as exc_info:
            apply_feedback(transaction, P, _limits(200, 1500))
        assert exc_info.value.details["feedback"] == "ALLOWED"

    def test_feedback_equal_to_result_conflicts(self):
        transaction = make_transaction(amount=800, transaction_id=1, result=M)
        with pytest.raises(ConflictError):
            apply_feedback(transaction, M, _limits(200, 1500))

    def test_unevaluated_transaction_conflicts(self):
        with pytest.raises(ConflictError):
            apply_feedback(make_transaction(amount=800), A, _limits(200, 1500))


class TestParseFeedback:
    @pytest.mark.parametrize("value", ["ALLOWED", "MANUAL_PROCESSING", "PROHIBITED"])
    def test_valid(self, value):
        assert parse_feedback(value) == Verdict(value)

    def test_passes_verdicts_through(self):
        assert parse_feedback(Verdict.PROHIBITED) is Verdict.PROHIBITED

    @pytest.mark.parametrize("value", ["allowed", "MAYBE", "", None, 1])
    def test_invalid(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_feedback(value)
        assert exc_info.value.details == {"field": "feedback"}
