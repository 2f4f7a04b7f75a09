"""
FastAPI dependency injection utilities.

Provides reusable dependencies for authentication and the shared risk engine.
"""

from typing import Annotated

from fastapi import Depends

from antifraud.core.auth import (
    MERCHANT,
    SUPPORT,
    AuthenticatedUser,
    require_role,
)
from antifraud.core.config import get_settings
from antifraud.core.database import get_session_factory
from antifraud.engine.engine import RiskEngine
from antifraud.persistence.lookups import SqlLookups

_risk_engine: RiskEngine | None = None


# =============================================================================
# Role-based Dependencies
# =============================================================================


def require_merchant(
    user: AuthenticatedUser = Depends(require_role(MERCHANT)),
) -> AuthenticatedUser:
    """
    Dependency that enforces the merchant role.

    Use this for transaction submission.

    Raises:
        ForbiddenError: If user lacks the role
    """
    return user


def require_support(
    user: AuthenticatedUser = Depends(require_role(SUPPORT)),
) -> AuthenticatedUser:
    """
    Dependency that enforces the support role.

    Use this for feedback, history and registry administration.

    Raises:
        ForbiddenError: If user lacks the role
    """
    return user


RequireMerchant = Annotated[AuthenticatedUser, Depends(require_merchant)]
RequireSupport = Annotated[AuthenticatedUser, Depends(require_support)]


# =============================================================================
# Risk Engine
# =============================================================================


def get_risk_engine() -> RiskEngine:
    """Process-wide risk engine over the SQL registries and history."""
    global _risk_engine
    if _risk_engine is None:
        lookups = SqlLookups(get_session_factory())
        _risk_engine = RiskEngine(lookups, lookups, get_settings().risk)
    return _risk_engine


def reset_risk_engine() -> None:
    global _risk_engine
    _risk_engine = None
