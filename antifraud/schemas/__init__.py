"""Schemas package for request/response models."""

from antifraud.schemas.registry import (
    StatusResponse,
    StolenCardRequest,
    StolenCardResponse,
    SuspiciousIpRequest,
    SuspiciousIpResponse,
)
from antifraud.schemas.transaction import (
    EvaluationResponse,
    FeedbackRequest,
    TransactionRequest,
    TransactionView,
)

__all__ = [
    # Transaction
    "TransactionRequest",
    "EvaluationResponse",
    "FeedbackRequest",
    "TransactionView",
    # Registry
    "SuspiciousIpRequest",
    "SuspiciousIpResponse",
    "StolenCardRequest",
    "StolenCardResponse",
    "StatusResponse",
]
