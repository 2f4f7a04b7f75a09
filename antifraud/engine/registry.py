"""Stolen-card and suspicious-IP registry checks."""

from __future__ import annotations

import asyncio

from antifraud.domain.models.transaction import Reason, ReasonCode, Transaction, Verdict
from antifraud.engine.collaborators import RegistryLookup

STOLEN_CARD = Reason.of(ReasonCode.STOLEN_CARD, Verdict.PROHIBITED)
SUSPICIOUS_IP = Reason.of(ReasonCode.SUSPICIOUS_IP, Verdict.PROHIBITED)


class RegistryChecker:
    """Turns registry membership into PROHIBITED reasons."""

    def __init__(self, lookup: RegistryLookup):
        self.lookup = lookup

    async def is_stolen_card(self, number: str) -> bool:
        return await self.lookup.lookup_stolen_card(number)

    async def is_suspicious_ip(self, ip: str) -> bool:
        return await self.lookup.lookup_suspicious_ip(ip)

    async def check(self, transaction: Transaction) -> frozenset[Reason]:
        stolen, suspicious = await asyncio.gather(
            self.is_stolen_card(transaction.number),
            self.is_suspicious_ip(transaction.ip),
        )

        reasons = set()
        if stolen:
            reasons.add(STOLEN_CARD)
        if suspicious:
            reasons.add(SUSPICIOUS_IP)
        return frozenset(reasons)
