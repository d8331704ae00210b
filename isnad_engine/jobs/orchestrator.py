"""Background bulk processing of many hadith texts."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

from isnad_engine.errors import InputValidationError
from isnad_engine.jobs.models import BulkJob
from isnad_engine.models import HadithTextAnalysis

logger = logging.getLogger(__name__)

MAX_BULK_TEXTS = 100
DEFAULT_THROTTLE_SECONDS = 0.1
PREVIEW_LENGTH = 50
FAILURE_SAVE_ATTEMPTS = 3
FAILURE_SAVE_DELAY_SECONDS = 0.05


def new_job_id() -> str:
    return f"bulk-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "..."


class BulkJobOrchestrator:
    """
    Accepts a batch of texts and processes them in submission order on a
    detached asyncio task. Callers poll ``get_progress``; there is no
    cancellation and no overall timeout.
    """

    def __init__(
        self,
        analyzer: Any,
        store: Any,
        *,
        max_texts: int = MAX_BULK_TEXTS,
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
    ):
        self.analyzer = analyzer
        self.store = store
        self.max_texts = min(max_texts, MAX_BULK_TEXTS)
        self.throttle_seconds = throttle_seconds
        self._tasks: Dict[str, asyncio.Task] = {}

    def validate(self, texts: Sequence[str]) -> List[str]:
        if texts is None or isinstance(texts, str):
            raise InputValidationError("No hadith texts provided for processing.")
        items = list(texts)
        if not items:
            raise InputValidationError("No hadith texts provided for processing.")
        if len(items) > self.max_texts:
            raise InputValidationError(f"Maximum {self.max_texts} hadiths can be processed at once.")
        for index, text in enumerate(items):
            if not isinstance(text, str) or not text.strip():
                raise InputValidationError(f"Hadith text #{index + 1} is empty.")
        return items

    async def submit(self, texts: Sequence[str], *, user_id: Optional[str] = None) -> str:
        """Validate, create the job record and start processing; returns at once."""
        items = self.validate(texts)

        job = BulkJob(job_id=new_job_id(), total=len(items), user_id=user_id)
        await asyncio.to_thread(self.store.create, job)
        logger.info("Created bulk processing job %s for %d texts", job.job_id, job.total)

        task = asyncio.create_task(self._run(job, items), name=job.job_id)
        self._tasks[job.job_id] = task
        task.add_done_callback(self._on_task_done)
        return job.job_id

    async def get_progress(self, job_id: str) -> Optional[BulkJob]:
        return await asyncio.to_thread(self.store.get, job_id)

    async def wait(self, job_id: str) -> Optional[BulkJob]:
        """Block until the job's task finishes, then return its final record."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return await self.get_progress(job_id)

    @property
    def running_jobs(self) -> int:
        return len(self._tasks)

    async def _save(self, job: BulkJob) -> None:
        await asyncio.to_thread(self.store.save, job)

    async def _run(self, job: BulkJob, texts: List[str]) -> None:
        results: List[HadithTextAnalysis] = []
        try:
            for index, text in enumerate(texts):
                job.advance(index + 1, preview(text))
                await self._save(job)
                logger.debug("Job %s: %d/%d", job.job_id, job.processed, job.total)

                results.append(await self.analyzer.analyze(text))

                # Throttle keeps narrator lookups from piling onto the directory.
                if self.throttle_seconds > 0 and index < len(texts) - 1:
                    await asyncio.sleep(self.throttle_seconds)

            # The live record only turns terminal once the store has accepted it.
            finished = job.model_copy(deep=True)
            finished.complete(results)
            await self._save(finished)
            logger.info("Completed bulk processing job %s", job.job_id)
        except Exception as exc:
            logger.exception("Error in bulk processing job %s", job.job_id)
            await self._save_failure(job, str(exc) or exc.__class__.__name__)

    async def _save_failure(self, job: BulkJob, message: str) -> None:
        failed = job.model_copy(deep=True)
        failed.fail(message)
        for attempt in range(1, FAILURE_SAVE_ATTEMPTS + 1):
            try:
                await self._save(failed)
                return
            except Exception:
                logger.exception(
                    "Could not save error state of job %s (attempt %d/%d)",
                    job.job_id,
                    attempt,
                    FAILURE_SAVE_ATTEMPTS,
                )
            if attempt < FAILURE_SAVE_ATTEMPTS:
                await asyncio.sleep(FAILURE_SAVE_DELAY_SECONDS * attempt)
        logger.error("Job %s left without a terminal record after %d attempts", job.job_id, FAILURE_SAVE_ATTEMPTS)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.pop(task.get_name(), None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Bulk job task %s ended with an unsaved error: %r", task.get_name(), exc)
