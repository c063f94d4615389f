"""
Error types for conversation extraction.

Extractors raise ExtractionError internally and convert it to a failed
ParseResult at their own boundary; only unexpected exceptions travel further.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""
    INVALID_URL = "INVALID_URL"                      # empty / non-string input
    UNSUPPORTED_PLATFORM = "UNSUPPORTED_PLATFORM"
    INVALID_URL_FORMAT = "INVALID_URL_FORMAT"        # known platform, wrong shape
    CONVERSATION_NOT_FOUND = "CONVERSATION_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    RATE_LIMITED = "RATE_LIMITED"
    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    NO_DATA = "NO_DATA"
    INVALID_MESSAGE = "INVALID_MESSAGE"
    EMPTY_CONVERSATION = "EMPTY_CONVERSATION"
    NO_MESSAGES_FOUND = "NO_MESSAGES_FOUND"
    BROWSER_ERROR = "BROWSER_ERROR"
    BROWSER_UNAVAILABLE = "BROWSER_UNAVAILABLE"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# HTTP statuses with a dedicated code; everything else maps to HTTP_ERROR
STATUS_ERROR_CODES: dict[int, tuple[ErrorCode, str]] = {
    404: (ErrorCode.CONVERSATION_NOT_FOUND, "Conversation not found"),
    403: (ErrorCode.ACCESS_DENIED, "Access denied"),
    429: (ErrorCode.RATE_LIMITED, "Rate limit exceeded"),
}


class ExtractionError(Exception):
    """Raised when a conversation cannot be extracted."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN_ERROR):
        super().__init__(message)
        self.message = message
        self.code = code

    @classmethod
    def from_status(cls, status_code: int) -> "ExtractionError":
        """Build the error matching an upstream HTTP status."""
        code, message = STATUS_ERROR_CODES.get(
            status_code, (ErrorCode.HTTP_ERROR, f"HTTP {status_code}")
        )
        return cls(message, code)

    @property
    def is_retryable(self) -> bool:
        """Whether a caller may reasonably try again later."""
        return self.code in (ErrorCode.RATE_LIMITED, ErrorCode.TIMEOUT, ErrorCode.NETWORK_ERROR)
