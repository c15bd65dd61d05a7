"""Custom exception hierarchy for FolioForge HTTP errors.

Generation failures never surface here: the continuation orchestrator turns
them into a ``GenerationResult``. These exceptions cover what the HTTP layer
itself rejects.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Draft errors
    DRAFT_NOT_FOUND = "DRAFT_NOT_FOUND"

    # Generation errors
    GENERATION_NOT_CONFIGURED = "GENERATION_NOT_CONFIGURED"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Rate limiting
    RATE_LIMITED = "RATE_LIMITED"


class FolioException(Exception):
    """
    Base exception for all FolioForge errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class DraftNotFoundError(FolioException):
    """Draft not found in database."""

    def __init__(self, draft_id: str):
        super().__init__(
            f"Draft not found: {draft_id}",
            ErrorCode.DRAFT_NOT_FOUND,
            status_code=404,
            details={"draft_id": draft_id}
        )


class GenerationNotConfiguredError(FolioException):
    """No text-generation model is configured."""

    def __init__(self):
        super().__init__(
            "Portfolio generation is not configured. Set GENERATION_MODEL.",
            ErrorCode.GENERATION_NOT_CONFIGURED,
            status_code=503,
        )


class DatabaseError(FolioException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
