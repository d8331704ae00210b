"""Keyed stores for bulk job progress records.

Each job has exactly one writer (its orchestrator task). Readers get
snapshot copies and may observe a record between two writes of the same item.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from sqlalchemy.orm import Session, sessionmaker

from isnad_engine.db.models import BulkProcessingJob
from isnad_engine.jobs.models import BulkJob


class InMemoryJobStore:
    kind = "memory"

    def __init__(self) -> None:
        self._jobs: Dict[str, BulkJob] = {}
        self._lock = threading.Lock()

    def create(self, job: BulkJob) -> None:
        with self._lock:
            if job.job_id in self._jobs:
                raise KeyError(f"Job {job.job_id} already exists")
            self._jobs[job.job_id] = job.model_copy(deep=True)

    def save(self, job: BulkJob) -> None:
        with self._lock:
            self._jobs[job.job_id] = job.model_copy(deep=True)

    def get(self, job_id: str) -> Optional[BulkJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job is not None else None

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


class SqlJobStore:
    """Persists job records in the ``bulk_processing_job`` table."""

    kind = "sql"

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    @staticmethod
    def _apply(row: BulkProcessingJob, job: BulkJob) -> None:
        row.user_id = job.user_id
        row.status = job.status.value
        row.processed = job.processed
        row.total = job.total
        row.current_text = job.current_text
        row.error = job.error
        row.results = (
            [result.model_dump(mode="json") for result in job.results] if job.results is not None else None
        )
        row.updated_at = job.updated_at

    def create(self, job: BulkJob) -> None:
        with self.session_factory() as session:
            if session.get(BulkProcessingJob, job.job_id) is not None:
                raise KeyError(f"Job {job.job_id} already exists")
            row = BulkProcessingJob(job_id=job.job_id, created_at=job.created_at)
            self._apply(row, job)
            session.add(row)
            session.commit()

    def save(self, job: BulkJob) -> None:
        with self.session_factory() as session:
            row = session.get(BulkProcessingJob, job.job_id)
            if row is None:
                row = BulkProcessingJob(job_id=job.job_id, created_at=job.created_at)
                session.add(row)
            self._apply(row, job)
            session.commit()

    def get(self, job_id: str) -> Optional[BulkJob]:
        with self.session_factory() as session:
            row = session.get(BulkProcessingJob, job_id)
            if row is None:
                return None
            return BulkJob.model_validate(
                {
                    "job_id": row.job_id,
                    "user_id": row.user_id,
                    "status": row.status,
                    "processed": row.processed,
                    "total": row.total,
                    "current_text": row.current_text,
                    "error": row.error,
                    "results": row.results,
                    "created_at": row.created_at,
                    "updated_at": row.updated_at,
                }
            )
