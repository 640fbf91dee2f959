"""
Domain exceptions.

Typed exceptions for the analysis pipeline. Every member of the analysis
taxonomy carries the message shown to the user and whether re-running the
pipeline can succeed.
"""

from __future__ import annotations

from typing import Optional

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# ANALYSIS TAXONOMY
# ═══════════════════════════════════════════════════════════


class AnalysisError(DomainError):
    """
    Base exception for a failed analysis attempt.

    Attributes:
        retryable: True if re-issuing the pipeline may succeed
    """

    retryable: bool = True

    @property
    def user_message(self) -> str:
        """Human-readable message for the UI."""
        return GENERIC_ERROR_MESSAGE


class MissingCredentialError(AnalysisError):
    """
    No API key configured.

    Raised before any network call is attempted. Requires configuration,
    retrying does not help.

    Example:
        >>> raise MissingCredentialError()
    """

    retryable = False

    def __init__(self) -> None:
        super().__init__("API key not configured")

    @property
    def user_message(self) -> str:
        return "OpenAI API key not configured. Please add your API key in Settings."


class ImageConversionError(AnalysisError):
    """
    Image could not be decoded, compressed or encoded.

    Example:
        >>> raise ImageConversionError("cannot identify image file")
    """

    @property
    def user_message(self) -> str:
        return "Failed to process the image. Please try again."


class NetworkError(AnalysisError):
    """
    Transport-level failure (connection, TLS, timeout).

    Attributes:
        cause: Underlying exception
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network failure: {cause!r}")
        self.cause = cause

    @property
    def user_message(self) -> str:
        return "Network error. Please check your connection and try again."


class RateLimitedError(AnalysisError):
    """
    HTTP 429 from the model endpoint.

    Attributes:
        retry_after: Seconds to wait, from the Retry-After header (if any)

    Example:
        >>> err = RateLimitedError(retry_after=30)
        >>> err.retry_after
        30
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        super().__init__(f"Rate limited (retry_after={retry_after})")
        self.retry_after = retry_after

    @property
    def user_message(self) -> str:
        if self.retry_after is not None:
            return f"Too many requests. Please wait {self.retry_after} seconds and try again."
        return "Too many requests. Please wait a moment and try again."


class ServerError(AnalysisError):
    """
    Any non-2xx, non-429 HTTP status.

    Attributes:
        status_code: HTTP status code
        body: Response body as text (for diagnostics)
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Server error {status_code}")
        self.status_code = status_code
        self.body = body

    @property
    def user_message(self) -> str:
        return f"Server error ({self.status_code}). Please try again later."


class InvalidResponseError(AnalysisError):
    """
    Response envelope not recognized.

    Attributes:
        reason: What was wrong with the envelope
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    @property
    def user_message(self) -> str:
        return f"Unexpected response from AI service. {self.reason}"


class AnalysisCancelledError(DomainError):
    """
    In-flight analysis abandoned by the caller.

    Not shown to users: the caller drops the attempt silently.
    """

    pass


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class InfrastructureError(DomainError):
    """Base class for storage errors."""

    pass


class RecordStoreError(InfrastructureError):
    """
    Record store operation failed.

    Example:
        >>> raise RecordStoreError("MongoDB connection lost")
    """

    pass


def describe_error(error: BaseException) -> str:
    """Map any exception to the single message shown to the user."""
    if isinstance(error, AnalysisError):
        return error.user_message
    return GENERIC_ERROR_MESSAGE
