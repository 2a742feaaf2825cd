"""Application exception hierarchy.

All custom exceptions inherit from GigaChatAgentsError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "GCA-1000"
    CONFIGURATION_ERROR = "GCA-1001"
    VALIDATION_ERROR = "GCA-1002"
    TEMPLATE_ERROR = "GCA-1003"

    # Authentication errors (2xxx)
    AUTH_FAILED = "GCA-2000"
    AUTH_INVALID_RESPONSE = "GCA-2001"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "GCA-3000"
    EMBEDDING_DIMENSION_MISMATCH = "GCA-3001"
    EMBEDDING_EMPTY_RESPONSE = "GCA-3002"
    ZERO_NORM_VECTOR = "GCA-3003"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "GCA-5000"
    LLM_TIMEOUT = "GCA-5001"
    LLM_RATE_LIMIT = "GCA-5002"
    LLM_EMPTY_RESPONSE = "GCA-5003"


class GigaChatAgentsError(Exception):
    """Base exception for all agent errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(GigaChatAgentsError):
    """Agent options or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(GigaChatAgentsError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class TemplateError(GigaChatAgentsError):
    """Template rendering error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.TEMPLATE_ERROR, details)


class AuthenticationError(GigaChatAgentsError):
    """Access token exchange failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.AUTH_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EmbeddingError(GigaChatAgentsError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class SimilarityError(GigaChatAgentsError):
    """Two vectors cannot be compared."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ZERO_NORM_VECTOR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(GigaChatAgentsError):
    """LLM service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
