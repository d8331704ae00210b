"""Bulk processing job record and its state transitions."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from isnad_engine.models import HadithTextAnalysis, utcnow

COMPLETED_TEXT = "Processing completed"
FAILED_TEXT = "Processing failed"


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class JobStateError(RuntimeError):
    """Raised when a job record is asked to make a transition it cannot make."""


class BulkJob(BaseModel):
    job_id: str
    total: int = Field(..., ge=0)
    processed: int = Field(default=0, ge=0)
    status: JobStatus = JobStatus.PROCESSING
    current_text: Optional[str] = None
    results: Optional[List[HadithTextAnalysis]] = None
    error: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.ERROR)

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise JobStateError(f"Job {self.job_id} is already {self.status.value}")

    def advance(self, processed: int, current_text: str) -> None:
        self._ensure_open()
        if processed < self.processed or processed > self.total:
            raise JobStateError(
                f"Job {self.job_id}: processed must stay within {self.processed}..{self.total}, got {processed}"
            )
        self.processed = processed
        self.current_text = current_text
        self.updated_at = utcnow()

    def complete(self, results: List[HadithTextAnalysis]) -> None:
        self._ensure_open()
        self.status = JobStatus.COMPLETED
        self.processed = self.total
        self.current_text = COMPLETED_TEXT
        self.results = list(results)
        self.updated_at = utcnow()

    def fail(self, message: str) -> None:
        """Terminal error; ``processed`` keeps the partial progress reached."""
        self._ensure_open()
        self.status = JobStatus.ERROR
        self.current_text = FAILED_TEXT
        self.error = message or "Unknown error"
        self.updated_at = utcnow()
