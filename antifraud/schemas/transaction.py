"""Transaction evaluation and feedback schemas.

Wire field names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from antifraud.domain.models.transaction import Transaction


class TransactionRequest(BaseModel):
    """A transaction submitted for evaluation.

    Fields are accepted loosely here; the risk engine validates them in a
    fixed order and reports the first malformed field.
    """

    amount: Any = None
    ip: Any = None
    number: Any = None
    region: Any = None
    date: Any = None


class EvaluationResponse(BaseModel):
    """Verdict for a submitted transaction."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: int = Field(..., alias="transactionId")
    result: str
    info: str


class FeedbackRequest(BaseModel):
    """A reviewer's confirmed outcome for a stored transaction."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: int = Field(..., alias="transactionId")
    feedback: Any = Field(None, description="ALLOWED, MANUAL_PROCESSING or PROHIBITED")


class TransactionView(BaseModel):
    """A stored transaction as shown to reviewers."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: int = Field(..., alias="transactionId")
    amount: int
    ip: str
    number: str
    region: str
    date: datetime
    result: str
    feedback: str = ""

    @field_serializer("date")
    def serialize_date(self, value: datetime) -> str:
        return value.strftime("%Y-%m-%dT%H:%M:%S")

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionView":
        return cls(
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
            ip=transaction.ip,
            number=transaction.number,
            region=transaction.region,
            date=transaction.date,
            result=transaction.result.value if transaction.result else "",
            feedback=transaction.feedback.value if transaction.feedback else "",
        )
