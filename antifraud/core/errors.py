"""
Domain-specific exceptions for the Anti-Fraud API.

These exceptions represent invalid input or state and are mapped
to HTTP status codes in the API layer. None of them is retried.
"""

from typing import Any


class AntifraudError(Exception):
    """Base exception for all anti-fraud domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AntifraudError):
    """
    Raised when an input field is malformed or outside its domain.

    Examples:
    - Non-positive amount
    - Card number failing the Luhn checksum
    - Unknown region code
    - Feedback that is not a verdict

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(AntifraudError):
    """
    Raised when a referenced resource does not exist.

    Examples:
    - Transaction ID not found when submitting feedback
    - Unknown card number or IP on registry deletion

    HTTP Status: 404 Not Found
    """

    pass


class UnauthorizedError(AntifraudError):
    """
    Raised when the caller lacks valid authentication.

    HTTP Status: 401 Unauthorized
    """

    pass


class ForbiddenError(AntifraudError):
    """
    Raised when the caller is authenticated but lacks the required role.

    HTTP Status: 403 Forbidden
    """

    pass


class ConflictError(AntifraudError):
    """
    Raised when an operation conflicts with current state.

    Examples:
    - Feedback equal to the recorded verdict
    - Feedback supplied twice for the same transaction
    - Registry entry already present

    HTTP Status: 409 Conflict
    """

    pass


class CollaboratorUnavailableError(AntifraudError):
    """
    Raised when a registry or history lookup cannot be completed.

    Evaluation fails closed: no verdict is produced from partial signal.

    HTTP Status: 503 Service Unavailable
    """

    pass


ERROR_STATUS_MAP = {
    ValidationError: 400,
    NotFoundError: 404,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    ConflictError: 409,
    CollaboratorUnavailableError: 503,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
