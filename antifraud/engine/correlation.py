"""Correlation of a transaction with its card's recent history.

A card used from several regions or IPs within the trailing window is a
typical sign of a compromised card. The transaction under evaluation is
not in storage yet, so its own region and IP are added to the counts.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from antifraud.domain.models.transaction import Reason, ReasonCode, Transaction, Verdict
from antifraud.engine.collaborators import HistoryLookup

MULTIPLE_REGIONS = Reason.of(ReasonCode.MULTIPLE_REGIONS, Verdict.MANUAL_PROCESSING)
TOO_MANY_REGIONS = Reason.of(ReasonCode.TOO_MANY_REGIONS, Verdict.PROHIBITED)
MULTIPLE_IPS = Reason.of(ReasonCode.MULTIPLE_IPS, Verdict.MANUAL_PROCESSING)
TOO_MANY_IPS = Reason.of(ReasonCode.TOO_MANY_IPS, Verdict.PROHIBITED)


def window_start(reference: datetime, window: timedelta) -> datetime:
    return reference - window


def _grade(
    count: int,
    manual_threshold: int,
    prohibit_threshold: int,
    manual_reason: Reason,
    prohibit_reason: Reason,
) -> Reason | None:
    if count >= prohibit_threshold:
        return prohibit_reason
    if count == manual_threshold:
        return manual_reason
    return None


def correlation_reasons(
    transaction: Transaction,
    history: Iterable[Transaction],
    window: timedelta = timedelta(hours=1),
    manual_threshold: int = 2,
    prohibit_threshold: int = 3,
) -> frozenset[Reason]:
    """Grade distinct regions and IPs seen for the card within the window.

    History entries for other cards or outside ``[date - window, date]``
    are ignored.
    """
    since = window_start(transaction.date, window)

    regions = {transaction.region}
    ips = {transaction.ip}
    for previous in history:
        if previous.number != transaction.number:
            continue
        if not since <= previous.date <= transaction.date:
            continue
        regions.add(previous.region)
        ips.add(previous.ip)

    thresholds = (manual_threshold, prohibit_threshold)
    graded = (
        _grade(len(regions), *thresholds, MULTIPLE_REGIONS, TOO_MANY_REGIONS),
        _grade(len(ips), *thresholds, MULTIPLE_IPS, TOO_MANY_IPS),
    )
    return frozenset(reason for reason in graded if reason is not None)


class HistoryCorrelator:
    """Fetches the window of history and grades it."""

    def __init__(
        self,
        history: HistoryLookup,
        window: timedelta = timedelta(hours=1),
        manual_threshold: int = 2,
        prohibit_threshold: int = 3,
    ):
        self.history = history
        self.window = window
        self.manual_threshold = manual_threshold
        self.prohibit_threshold = prohibit_threshold

    async def correlate(self, transaction: Transaction) -> frozenset[Reason]:
        previous = await self.history.fetch_card_history(
            transaction.number,
            window_start(transaction.date, self.window),
            transaction.date,
        )
        return correlation_reasons(
            transaction,
            previous,
            window=self.window,
            manual_threshold=self.manual_threshold,
            prohibit_threshold=self.prohibit_threshold,
        )
