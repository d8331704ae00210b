"""
Error taxonomy for the hadith engine.

Every error carries an internal diagnostic message, a separate message safe to
show to end users, and whether retrying the operation is sensible.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    """Bad caller input: empty text, oversized batch, malformed parameters."""

    LOOKUP = "lookup"
    """A dependency call (narrator directory, search history) failed."""

    TIMEOUT = "timeout"
    """A dependency call did not answer in time."""

    PROCESSING = "processing"
    """Unexpected failure inside normalization, extraction or scoring."""

    NOT_FOUND = "not_found"
    """The requested record (job, narrator) does not exist."""


class HadithEngineError(Exception):
    kind: ErrorKind = ErrorKind.PROCESSING
    retryable: bool = False
    default_user_message = "Failed to process hadith text. Please try again."

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or self.default_user_message
        if retryable is not None:
            self.retryable = retryable


class InputValidationError(HadithEngineError):
    kind = ErrorKind.VALIDATION
    retryable = False
    default_user_message = "Please provide a valid hadith text."

    def __init__(self, message: str, *, user_message: Optional[str] = None):
        # Validation messages are written for the user already.
        super().__init__(message, user_message=user_message or message, retryable=False)


class LookupFailedError(HadithEngineError):
    kind = ErrorKind.LOOKUP
    retryable = True
    default_user_message = "The narrator directory is temporarily unavailable."


class LookupTimeoutError(HadithEngineError):
    kind = ErrorKind.TIMEOUT
    retryable = True
    default_user_message = "The narrator directory took too long to respond."


class ProcessingError(HadithEngineError):
    kind = ErrorKind.PROCESSING
    retryable = False


class JobNotFoundError(HadithEngineError):
    kind = ErrorKind.NOT_FOUND
    retryable = False
    default_user_message = "No processing job with that id was found."


class NarratorNotFoundError(HadithEngineError):
    kind = ErrorKind.NOT_FOUND
    retryable = False
    default_user_message = "No narrator with that id was found."


class RetryPolicy(BaseModel):
    """Bounded exponential backoff for retryable dependency errors."""

    max_retries: int = Field(default=2, ge=0)
    base_delay_seconds: float = Field(default=0.5, ge=0.0)
    backoff_multiplier: float = Field(default=1.5, ge=1.0)
    max_delay_seconds: float = Field(default=3.0, ge=0.0)

    def can_retry(self, error: HadithEngineError, retry_count: int) -> bool:
        return error.retryable and retry_count < self.max_retries

    def get_backoff_seconds(self, retry_count: int) -> float:
        """Delay before retry number ``retry_count + 1``."""
        delay = self.base_delay_seconds * (self.backoff_multiplier**retry_count)
        return min(delay, self.max_delay_seconds)
