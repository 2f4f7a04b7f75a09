"""Unit tests for the risk classifier."""

import pytest

from antifraud.domain.models.transaction import CardLimits, Verdict
from antifraud.engine.classifier import (
    ALLOW_BOUND_EXCEEDED,
    AMOUNT_WITHIN_LIMIT,
    MANUAL_BOUND_EXCEEDED,
    amount_reason,
    classify,
    format_reasons,
)
from antifraud.engine.correlation import MULTIPLE_IPS, MULTIPLE_REGIONS, TOO_MANY_REGIONS
from antifraud.engine.registry import STOLEN_CARD, SUSPICIOUS_IP
from tests.conftest import CARD, make_transaction


class TestAmountReason:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (1, AMOUNT_WITHIN_LIMIT),
            (200, AMOUNT_WITHIN_LIMIT),
            (201, ALLOW_BOUND_EXCEEDED),
            (1500, ALLOW_BOUND_EXCEEDED),
            (1501, MANUAL_BOUND_EXCEEDED),
        ],
    )
    def test_bounds_are_inclusive(self, amount, expected, default_limits):
        assert amount_reason(amount, default_limits) == expected


class TestClassify:
    """Tests for classify."""

    def test_small_amount_without_signals_is_allowed(self, default_limits):
        classification = classify(make_transaction(amount=150), [], [], default_limits)

        assert classification.verdict == Verdict.ALLOWED
        assert classification.codes == ["amount-within-limit"]

    def test_amount_between_bounds_needs_manual_processing(self, default_limits):
        classification = classify(make_transaction(amount=800), [], [], default_limits)

        assert classification.verdict == Verdict.MANUAL_PROCESSING
        assert format_reasons(classification) == "allow-bound-exceeded"

    def test_amount_above_manual_bound_is_prohibited(self, default_limits):
        classification = classify(make_transaction(amount=2000), [], [], default_limits)

        assert classification.verdict == Verdict.PROHIBITED
        assert format_reasons(classification) == "manual-bound-exceeded"

    def test_registry_hit_overrides_lower_reasons(self, default_limits):
        classification = classify(
            make_transaction(amount=800), [STOLEN_CARD], [MULTIPLE_REGIONS], default_limits
        )

        assert classification.verdict == Verdict.PROHIBITED
        assert format_reasons(classification) == "stolen-card"

    def test_all_reasons_at_top_severity_are_kept_sorted(self, default_limits):
        classification = classify(
            make_transaction(amount=5000),
            [SUSPICIOUS_IP, STOLEN_CARD],
            [TOO_MANY_REGIONS],
            default_limits,
        )

        assert classification.verdict == Verdict.PROHIBITED
        assert format_reasons(classification) == (
            "manual-bound-exceeded, stolen-card, suspicious-ip, too-many-regions"
        )

    def test_manual_reasons_combine(self, default_limits):
        classification = classify(
            make_transaction(amount=800), [], [MULTIPLE_REGIONS, MULTIPLE_IPS], default_limits
        )

        assert classification.verdict == Verdict.MANUAL_PROCESSING
        assert format_reasons(classification) == (
            "allow-bound-exceeded, multiple-ips, multiple-regions"
        )

    def test_correlation_escalates_small_amount(self, default_limits):
        classification = classify(make_transaction(amount=10), [], [MULTIPLE_IPS], default_limits)

        assert classification.verdict == Verdict.MANUAL_PROCESSING
        assert classification.codes == ["multiple-ips"]

    def test_uses_card_specific_limits(self):
        limits = CardLimits(number=CARD, allow_bound=260, manual_bound=1500)
        classification = classify(make_transaction(amount=250), [], [], limits)

        assert classification.verdict == Verdict.ALLOWED

    def test_severity_is_monotonic_in_amount(self, default_limits):
        previous = Verdict.ALLOWED
        for amount in range(1, 3000, 7):
            verdict = classify(make_transaction(amount=amount), [], [], default_limits).verdict
            assert verdict >= previous
            previous = verdict

    def test_monotonic_with_correlation_signal(self, default_limits):
        previous = Verdict.ALLOWED
        for amount in range(1, 3000, 13):
            verdict = classify(
                make_transaction(amount=amount), [], [MULTIPLE_REGIONS], default_limits
            ).verdict
            assert verdict >= previous
            previous = verdict
