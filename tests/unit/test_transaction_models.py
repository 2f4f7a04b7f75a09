"""Unit tests for domain models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from antifraud.domain.models.transaction import (
    CardLimits,
    Classification,
    Reason,
    ReasonCode,
    Verdict,
)
from tests.conftest import CARD, make_transaction


class TestVerdict:
    """Verdicts are ordered by severity, not alphabetically."""

    def test_severity_order(self):
        assert Verdict.ALLOWED < Verdict.MANUAL_PROCESSING < Verdict.PROHIBITED
        assert Verdict.PROHIBITED > Verdict.MANUAL_PROCESSING > Verdict.ALLOWED
        assert Verdict.ALLOWED <= Verdict.ALLOWED
        assert Verdict.PROHIBITED >= Verdict.PROHIBITED

    def test_max_is_most_severe(self):
        assert max([Verdict.ALLOWED, Verdict.PROHIBITED, Verdict.MANUAL_PROCESSING]) == (
            Verdict.PROHIBITED
        )
        assert max([Verdict.MANUAL_PROCESSING, Verdict.ALLOWED]) == Verdict.MANUAL_PROCESSING

    def test_sorted(self):
        ordered = sorted([Verdict.PROHIBITED, Verdict.ALLOWED, Verdict.MANUAL_PROCESSING])
        assert ordered == [Verdict.ALLOWED, Verdict.MANUAL_PROCESSING, Verdict.PROHIBITED]

    def test_string_values(self):
        assert Verdict("MANUAL_PROCESSING") is Verdict.MANUAL_PROCESSING
        assert Verdict.ALLOWED.value == "ALLOWED"

    def test_comparison_with_other_types_not_supported(self):
        with pytest.raises(TypeError):
            _ = Verdict.ALLOWED < 1


class TestCardLimits:
    def test_valid_limits(self):
        limits = CardLimits(number=CARD, allow_bound=0, manual_bound=1)
        assert limits.allow_bound == 0

    def test_allow_must_be_below_manual(self):
        with pytest.raises(PydanticValidationError):
            CardLimits(number=CARD, allow_bound=1500, manual_bound=1500)

    def test_allow_must_be_non_negative(self):
        with pytest.raises(PydanticValidationError):
            CardLimits(number=CARD, allow_bound=-1, manual_bound=10)

    def test_limits_are_immutable(self):
        limits = CardLimits(number=CARD, allow_bound=200, manual_bound=1500)
        with pytest.raises(PydanticValidationError):
            limits.allow_bound = 300


class TestTransaction:
    def test_amount_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            make_transaction(amount=0)

    def test_stored_fields_default_to_none(self):
        transaction = make_transaction()
        assert transaction.transaction_id is None
        assert transaction.feedback is None

    def test_stored_fields_parse_verdicts(self):
        transaction = make_transaction(transaction_id=7, result="PROHIBITED", feedback="ALLOWED")
        assert transaction.result is Verdict.PROHIBITED
        assert transaction.feedback is Verdict.ALLOWED


class TestClassification:
    def test_codes_sorted_and_unique(self):
        classification = Classification(
            verdict=Verdict.PROHIBITED,
            reasons=frozenset(
                {
                    Reason.of(ReasonCode.TOO_MANY_REGIONS, Verdict.PROHIBITED),
                    Reason.of(ReasonCode.STOLEN_CARD, Verdict.PROHIBITED),
                    Reason.of(ReasonCode.MANUAL_BOUND_EXCEEDED, Verdict.PROHIBITED),
                }
            ),
        )
        assert classification.codes == ["manual-bound-exceeded", "stolen-card", "too-many-regions"]

    def test_reasons_are_hashable_values(self):
        first = Reason.of(ReasonCode.STOLEN_CARD, Verdict.PROHIBITED)
        second = Reason.of(ReasonCode.STOLEN_CARD, Verdict.PROHIBITED)
        assert first == second
        assert len({first, second}) == 1
