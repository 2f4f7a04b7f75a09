"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import random
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test environment variables before importing the service
# Unit tests use mocks, so these are just defaults
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AUTH0_DOMAIN", "test.local")
os.environ.setdefault("AUTH0_AUDIENCE", "https://card-antifraud-api")
os.environ.setdefault("AUTH0_ALGORITHMS", "RS256")

from antifraud.core.security.card_numbers import passes_luhn  # noqa: E402
from antifraud.domain.models.transaction import CardLimits, Transaction, Verdict  # noqa: E402

# =============================================================================
# Mock Token Payloads
# =============================================================================

ROLES_CLAIM = "https://card-antifraud-api/roles"

MOCK_MERCHANT_TOKEN = {
    "sub": "auth0|test-merchant",
    "email": "test-merchant@antifraud.test",
    ROLES_CLAIM: ["MERCHANT"],
    "exp": 9999999999,
}

MOCK_SUPPORT_TOKEN = {
    "sub": "auth0|test-support",
    "email": "test-support@antifraud.test",
    ROLES_CLAIM: ["SUPPORT"],
    "exp": 9999999999,
}

MOCK_ADMINISTRATOR_TOKEN = {
    "sub": "auth0|test-administrator",
    "email": "test-administrator@antifraud.test",
    ROLES_CLAIM: ["ADMINISTRATOR"],
    "exp": 9999999999,
}

# Card numbers passing the Luhn checksum
CARD = "4000008449430003"
OTHER_CARD = "4111111111111111"
# Fails the checksum
BAD_CARD = "1234567891011121"


def make_transaction(
    amount: int = 100,
    ip: str = "192.168.1.1",
    number: str = CARD,
    region: str = "EAP",
    date: datetime | str = "2022-01-22T16:04:00",
    **stored: object,
) -> Transaction:
    """Build a validated transaction; extra keyword args set stored fields."""
    if isinstance(date, str):
        date = datetime.fromisoformat(date)
    return Transaction(amount=amount, ip=ip, number=number, region=region, date=date, **stored)


def make_row(
    transaction_id: int = 1,
    amount: int = 800,
    ip: str = "192.168.1.1",
    number: str = CARD,
    region: str = "EAP",
    date: str = "2022-01-22T16:04:00",
    result: str = "MANUAL_PROCESSING",
    info: str = "allow-bound-exceeded",
    feedback: str | None = None,
) -> dict:
    """A transactions row as returned by TransactionRepository."""
    return {
        "id": transaction_id,
        "amount": amount,
        "ip": ip,
        "number": number,
        "region": region,
        "date": datetime.fromisoformat(date),
        "result": result,
        "info": info,
        "feedback": feedback,
    }


def raw_transaction(**overrides: object) -> dict:
    """A well-formed submitted transaction body."""
    raw = {
        "amount": 150,
        "ip": "192.168.1.1",
        "number": CARD,
        "region": "EAP",
        "date": "2022-01-22T16:04:00",
    }
    raw.update(overrides)
    return raw


def random_card_number() -> str:
    """A fresh 16-digit number passing the Luhn checksum."""
    prefix = "4" + "".join(random.choices("0123456789", k=14))
    for check_digit in "0123456789":
        if passes_luhn(prefix + check_digit):
            return prefix + check_digit
    raise AssertionError("no check digit found")


# =============================================================================
# In-memory collaborators
# =============================================================================


class InMemoryRegistry:
    """Registry lookup over two sets."""

    def __init__(self, stolen: set[str] | None = None, suspicious: set[str] | None = None):
        self.stolen = stolen or set()
        self.suspicious = suspicious or set()

    async def lookup_stolen_card(self, number: str) -> bool:
        return number in self.stolen

    async def lookup_suspicious_ip(self, ip: str) -> bool:
        return ip in self.suspicious


class InMemoryHistory:
    """History lookup over a list of stored transactions."""

    def __init__(self, transactions: Sequence[Transaction] = ()):
        self.transactions = list(transactions)
        self.calls: list[tuple[str, datetime, datetime]] = []

    async def fetch_card_history(
        self, number: str, since: datetime, before: datetime
    ) -> Sequence[Transaction]:
        self.calls.append((number, since, before))
        return [
            t for t in self.transactions if t.number == number and since <= t.date <= before
        ]


class InMemoryLimitStore:
    """Limit store over a dict, inserting defaults lazily."""

    def __init__(self, limits: dict[str, CardLimits] | None = None):
        self.limits = limits or {}

    async def get_or_create(self, number: str, allow_bound: int, manual_bound: int) -> CardLimits:
        if number not in self.limits:
            self.limits[number] = CardLimits(
                number=number, allow_bound=allow_bound, manual_bound=manual_bound
            )
        return self.limits[number]


@pytest.fixture
def registry() -> InMemoryRegistry:
    return InMemoryRegistry()


@pytest.fixture
def history() -> InMemoryHistory:
    return InMemoryHistory()


@pytest.fixture
def limit_store() -> InMemoryLimitStore:
    return InMemoryLimitStore()


@pytest.fixture
def default_limits() -> CardLimits:
    return CardLimits(number=CARD, allow_bound=200, manual_bound=1500)


@pytest.fixture
def mock_session():
    """Mock async database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


__all__ = [
    "CARD",
    "OTHER_CARD",
    "BAD_CARD",
    "Verdict",
    "make_transaction",
    "make_row",
    "raw_transaction",
    "random_card_number",
    "InMemoryRegistry",
    "InMemoryHistory",
    "InMemoryLimitStore",
]
