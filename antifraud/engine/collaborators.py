"""Interfaces the engine consumes from its collaborators.

The registries and the transaction history are owned outside the engine;
it only reads them through these protocols.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from antifraud.domain.models.transaction import CardLimits, Transaction


class RegistryLookup(Protocol):
    async def lookup_stolen_card(self, number: str) -> bool: ...

    async def lookup_suspicious_ip(self, ip: str) -> bool: ...


class HistoryLookup(Protocol):
    async def fetch_card_history(
        self, number: str, since: datetime, before: datetime
    ) -> Sequence[Transaction]:
        """Return prior transactions of ``number`` with ``since <= date <= before``."""
        ...


class LimitStore(Protocol):
    async def get_or_create(
        self, number: str, allow_bound: int, manual_bound: int
    ) -> CardLimits: ...
