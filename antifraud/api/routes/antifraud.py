"""API routes for transaction evaluation, feedback and history."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from antifraud.core.database import get_session
from antifraud.core.dependencies import RequireMerchant, RequireSupport, get_risk_engine
from antifraud.engine.engine import RiskEngine
from antifraud.schemas.transaction import (
    EvaluationResponse,
    FeedbackRequest,
    TransactionRequest,
    TransactionView,
)
from antifraud.services.feedback_service import FeedbackService
from antifraud.services.transaction_service import TransactionService

router = APIRouter(prefix="/antifraud", tags=["antifraud"])


def get_transaction_service(
    session: AsyncSession = Depends(get_session),
    engine: RiskEngine = Depends(get_risk_engine),
) -> TransactionService:
    """Get transaction service instance."""
    return TransactionService(session, engine)


def get_feedback_service(
    session: AsyncSession = Depends(get_session),
    engine: RiskEngine = Depends(get_risk_engine),
) -> FeedbackService:
    """Get feedback service instance."""
    return FeedbackService(session, engine)


@router.post("/transaction", response_model=EvaluationResponse)
async def evaluate_transaction(
    request: TransactionRequest,
    current_user: RequireMerchant,
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> dict:
    """Evaluate a transaction.

    The response carries the verdict (ALLOWED, MANUAL_PROCESSING or
    PROHIBITED) and the comma-separated reasons behind it.
    """
    return await transaction_service.evaluate(request.model_dump())


@router.put("/transaction", response_model=TransactionView)
async def give_feedback(
    request: FeedbackRequest,
    current_user: RequireSupport,
    feedback_service: FeedbackService = Depends(get_feedback_service),
) -> TransactionView:
    """Record a reviewer's confirmed outcome for a transaction."""
    return await feedback_service.correct(request.transaction_id, request.feedback)


@router.get("/history", response_model=list[TransactionView])
async def list_history(
    current_user: RequireSupport,
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> list[TransactionView]:
    """List all transactions ordered by ID."""
    return await transaction_service.list_history()


@router.get("/history/{number}", response_model=list[TransactionView])
async def list_card_history(
    number: str,
    current_user: RequireSupport,
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> list[TransactionView]:
    """List a card's transactions ordered by ID."""
    return await transaction_service.list_card_history(number)
