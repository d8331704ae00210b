"""Service boundary: every public operation returns a ``ServiceResult``."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from pydantic import BaseModel
from sqlalchemy.engine import Engine

from isnad_engine.config import EngineSettings
from isnad_engine.db.session import create_db_engine, create_session_factory, init_schema
from isnad_engine.errors import (
    ErrorKind,
    HadithEngineError,
    InputValidationError,
    JobNotFoundError,
    NarratorNotFoundError,
    ProcessingError,
    RetryPolicy,
)
from isnad_engine.export import export_analyses
from isnad_engine.history.store import SearchHistoryStore
from isnad_engine.jobs.orchestrator import BulkJobOrchestrator
from isnad_engine.jobs.store import InMemoryJobStore, SqlJobStore
from isnad_engine.models import BookmarkStatus, HadithTextAnalysis
from isnad_engine.narrators.directory import NarratorDirectory
from isnad_engine.narrators.resolver import NarratorResolver
from isnad_engine.pipeline import HadithAnalyzer

logger = logging.getLogger(__name__)


class ServiceError(BaseModel):
    kind: ErrorKind
    message: str
    user_message: str
    retryable: bool = False


class ServiceResult(BaseModel):
    success: bool
    data: Any = None
    error: Optional[ServiceError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, exc: HadithEngineError) -> "ServiceResult":
        return cls(
            success=False,
            error=ServiceError(
                kind=exc.kind,
                message=exc.message,
                user_message=exc.user_message,
                retryable=exc.retryable,
            ),
        )


class HadithService:
    def __init__(
        self,
        analyzer: HadithAnalyzer,
        orchestrator: BulkJobOrchestrator,
        *,
        directory: Optional[NarratorDirectory] = None,
        history: Optional[SearchHistoryStore] = None,
        engine: Optional[Engine] = None,
    ):
        self.analyzer = analyzer
        self.orchestrator = orchestrator
        self.directory = directory
        self.history = history
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "HadithService":
        engine = None
        directory = None
        history = None
        resolver = None
        job_store: Any = InMemoryJobStore()

        if not settings.skip_database:
            engine = create_db_engine(settings.database_url)
            if settings.create_tables or settings.database_url.startswith("sqlite"):
                init_schema(engine)
            session_factory = create_session_factory(engine)
            directory = NarratorDirectory(session_factory)
            history = SearchHistoryStore(session_factory)
            resolver = NarratorResolver(
                directory,
                timeout_seconds=settings.lookup_timeout_seconds,
                retry_policy=RetryPolicy(max_retries=settings.lookup_max_retries),
            )
            if settings.job_store == "sql":
                job_store = SqlJobStore(session_factory)

        analyzer = HadithAnalyzer(
            resolver=resolver,
            history=history,
            history_scan_limit=settings.history_scan_limit,
            similarity_threshold=settings.similarity_threshold,
            similarity_top_k=settings.similarity_top_k,
        )
        orchestrator = BulkJobOrchestrator(
            analyzer,
            job_store,
            max_texts=settings.bulk_max_texts,
            throttle_seconds=settings.bulk_throttle_seconds,
        )
        return cls(analyzer, orchestrator, directory=directory, history=history, engine=engine)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()

    async def _guard(self, operation: str, call: Callable[[], Awaitable[Any]]) -> ServiceResult:
        try:
            return ServiceResult.ok(await call())
        except HadithEngineError as exc:
            if exc.kind != ErrorKind.VALIDATION:
                logger.warning("%s failed: %s", operation, exc.message)
            return ServiceResult.failure(exc)
        except Exception as exc:
            logger.exception("Unexpected error in %s", operation)
            return ServiceResult.failure(ProcessingError(f"{operation}: {exc!r}"))

    async def analyze(
        self,
        text: str,
        *,
        include_similar: bool = True,
        record_search: bool = False,
        user_id: Optional[str] = None,
    ) -> ServiceResult:
        async def call() -> HadithTextAnalysis:
            analysis = await self.analyzer.analyze(text, include_similar=include_similar)
            if record_search and self.history is not None:
                try:
                    await asyncio.to_thread(self.history.append, text, bool(analysis.narrators), user_id)
                except Exception:
                    logger.exception("Failed to record search history")
            return analysis

        return await self._guard("analyze", call)

    async def find_similar(
        self,
        text: str,
        *,
        threshold: Optional[float] = None,
        top_k: Optional[int] = None,
    ) -> ServiceResult:
        return await self._guard(
            "find_similar",
            lambda: self.analyzer.find_similar(text, threshold=threshold, top_k=top_k),
        )

    async def submit_bulk(self, texts: List[str], *, user_id: Optional[str] = None) -> ServiceResult:
        async def call() -> dict:
            job_id = await self.orchestrator.submit(texts, user_id=user_id)
            return {"job_id": job_id}

        return await self._guard("submit_bulk", call)

    async def get_progress(self, job_id: str) -> ServiceResult:
        async def call():
            job = await self.orchestrator.get_progress(job_id)
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")
            return job

        return await self._guard("get_progress", call)

    async def export_job(self, job_id: str, fmt: str = "json") -> ServiceResult:
        async def call() -> str:
            job = await self.orchestrator.get_progress(job_id)
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")
            if job.results is None:
                raise InputValidationError(
                    f"Job {job_id} is {job.status.value}; only completed jobs can be exported."
                )
            return export_analyses(job.results, fmt)

        return await self._guard("export_job", call)

    async def search_narrators(self, name: str, limit: int = 10) -> ServiceResult:
        async def call():
            if not name or not name.strip():
                raise InputValidationError("Please provide a narrator name to search for.")
            if limit < 1:
                raise InputValidationError("limit must be a positive integer.")
            if self.directory is None:
                return []
            return await asyncio.to_thread(self.directory.find, name, limit)

        return await self._guard("search_narrators", call)

    async def narrator_opinions(self, narrator_id: int) -> ServiceResult:
        async def call():
            narrator = None
            if self.directory is not None:
                narrator = await asyncio.to_thread(self.directory.get, narrator_id)
            if narrator is None:
                raise NarratorNotFoundError(f"Narrator {narrator_id} not found")
            opinions = await asyncio.to_thread(self.directory.get_opinions, narrator_id)
            return {"narrator": narrator, "opinions": opinions}

        return await self._guard("narrator_opinions", call)

    async def _require_bookmark_target(self, narrator_id: int, user_id: Optional[str]) -> str:
        if not user_id or not user_id.strip():
            raise InputValidationError(
                "A user id is required for bookmarks.", user_message="Authentication required."
            )
        narrator = None
        if self.directory is not None:
            narrator = await asyncio.to_thread(self.directory.get, narrator_id)
        if narrator is None:
            raise NarratorNotFoundError(f"Narrator {narrator_id} not found")
        return user_id.strip()

    async def toggle_bookmark(self, narrator_id: int, user_id: Optional[str]) -> ServiceResult:
        async def call() -> BookmarkStatus:
            user = await self._require_bookmark_target(narrator_id, user_id)
            try:
                state = await asyncio.to_thread(self.directory.toggle_bookmark, narrator_id, user)
            except Exception as exc:
                raise ProcessingError(
                    f"toggle_bookmark: {exc!r}", user_message="Failed to update bookmark. Please try again."
                ) from exc
            logger.info("Narrator %s bookmark for %s set to %s", narrator_id, user, state)
            return BookmarkStatus(narrator_id=narrator_id, user_id=user, is_bookmarked=state)

        return await self._guard("toggle_bookmark", call)

    async def bookmark_status(self, narrator_id: int, user_id: Optional[str]) -> ServiceResult:
        async def call() -> BookmarkStatus:
            user = await self._require_bookmark_target(narrator_id, user_id)
            state = await asyncio.to_thread(self.directory.is_bookmarked, narrator_id, user)
            return BookmarkStatus(narrator_id=narrator_id, user_id=user, is_bookmarked=state)

        return await self._guard("bookmark_status", call)

    async def recent_searches(self, limit: int = 20, user_id: Optional[str] = None) -> ServiceResult:
        async def call():
            if limit < 1:
                raise InputValidationError("limit must be a positive integer.")
            if self.history is None:
                return []
            return await asyncio.to_thread(self.history.recent, limit, user_id)

        return await self._guard("recent_searches", call)
