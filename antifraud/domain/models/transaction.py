"""Transaction, verdict and card-limit models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

_SEVERITY = {
    "ALLOWED": 0,
    "MANUAL_PROCESSING": 1,
    "PROHIBITED": 2,
}


class Verdict(str, Enum):
    """Outcome of an evaluation, totally ordered by severity.

    Comparisons use severity rather than the string value, so
    ``max(verdicts)`` yields the most severe verdict.
    """

    ALLOWED = "ALLOWED"
    MANUAL_PROCESSING = "MANUAL_PROCESSING"
    PROHIBITED = "PROHIBITED"

    @property
    def severity(self) -> int:
        return _SEVERITY[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Verdict):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Verdict):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Verdict):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Verdict):
            return NotImplemented
        return self.severity >= other.severity


class ReasonCode(str, Enum):
    AMOUNT_WITHIN_LIMIT = "amount-within-limit"
    ALLOW_BOUND_EXCEEDED = "allow-bound-exceeded"
    MANUAL_BOUND_EXCEEDED = "manual-bound-exceeded"
    STOLEN_CARD = "stolen-card"
    SUSPICIOUS_IP = "suspicious-ip"
    MULTIPLE_REGIONS = "multiple-regions"
    TOO_MANY_REGIONS = "too-many-regions"
    MULTIPLE_IPS = "multiple-ips"
    TOO_MANY_IPS = "too-many-ips"


class Reason(BaseModel):
    """A reason code tagged with the severity it contributes."""

    code: ReasonCode
    severity: Verdict

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, code: ReasonCode, severity: Verdict) -> Reason:
        return cls(code=code, severity=severity)


class Transaction(BaseModel):
    """A validated card transaction.

    ``transaction_id``, ``result``, ``info`` and ``feedback`` are only set
    on transactions read back from storage.
    """

    amount: int = Field(..., gt=0)
    ip: str
    number: str
    region: str
    date: datetime

    transaction_id: int | None = None
    result: Verdict | None = None
    info: str | None = None
    feedback: Verdict | None = None

    model_config = ConfigDict(frozen=True)


class CardLimits(BaseModel):
    """Adaptive amount thresholds for one card."""

    number: str
    allow_bound: int
    manual_bound: int

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_ordering(self) -> CardLimits:
        if self.allow_bound < 0:
            raise ValueError(f"allow_bound must be non-negative, got {self.allow_bound}")
        if self.allow_bound >= self.manual_bound:
            raise ValueError(
                f"allow_bound ({self.allow_bound}) must be lower than "
                f"manual_bound ({self.manual_bound})"
            )
        return self


class Classification(BaseModel):
    """Verdict plus the reasons that justify it."""

    verdict: Verdict
    reasons: frozenset[Reason]

    model_config = ConfigDict(frozen=True)

    @property
    def codes(self) -> list[str]:
        return sorted({reason.code.value for reason in self.reasons})
