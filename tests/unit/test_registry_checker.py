"""Unit tests for registry checks."""

import pytest

from antifraud.engine.registry import STOLEN_CARD, SUSPICIOUS_IP, RegistryChecker
from tests.conftest import CARD, InMemoryRegistry, make_transaction


class TestRegistryChecker:
    @pytest.mark.asyncio
    async def test_no_hits(self):
        checker = RegistryChecker(InMemoryRegistry())
        assert await checker.check(make_transaction()) == frozenset()

    @pytest.mark.asyncio
    async def test_stolen_card(self):
        checker = RegistryChecker(InMemoryRegistry(stolen={CARD}))
        assert await checker.check(make_transaction()) == {STOLEN_CARD}

    @pytest.mark.asyncio
    async def test_suspicious_ip(self):
        checker = RegistryChecker(InMemoryRegistry(suspicious={"192.168.1.1"}))
        assert await checker.check(make_transaction(ip="192.168.1.1")) == {SUSPICIOUS_IP}

    @pytest.mark.asyncio
    async def test_both_hits(self):
        checker = RegistryChecker(InMemoryRegistry(stolen={CARD}, suspicious={"10.0.0.1"}))
        reasons = await checker.check(make_transaction(ip="10.0.0.1"))
        assert reasons == {STOLEN_CARD, SUSPICIOUS_IP}

    @pytest.mark.asyncio
    async def test_single_lookups(self):
        checker = RegistryChecker(InMemoryRegistry(stolen={CARD}))
        assert await checker.is_stolen_card(CARD) is True
        assert await checker.is_suspicious_ip("10.0.0.1") is False
