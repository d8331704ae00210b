"""Bulk job records, stores and the background orchestrator."""

from isnad_engine.jobs.models import BulkJob, JobStateError, JobStatus
from isnad_engine.jobs.orchestrator import BulkJobOrchestrator
from isnad_engine.jobs.store import InMemoryJobStore, SqlJobStore

__all__ = [
    "BulkJob",
    "BulkJobOrchestrator",
    "InMemoryJobStore",
    "JobStateError",
    "JobStatus",
    "SqlJobStore",
]
