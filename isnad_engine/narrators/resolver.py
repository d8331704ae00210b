"""Resolve extracted names to directory records without letting one bad lookup sink the analysis."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Set

from sqlalchemy.exc import DBAPIError, OperationalError

from isnad_engine.errors import (
    HadithEngineError,
    LookupFailedError,
    LookupTimeoutError,
    RetryPolicy,
)
from isnad_engine.models import NarratorProfile

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (OperationalError, ConnectionError, OSError)


class NarratorResolver:
    """
    Wraps a directory (anything with ``resolve(name)``) with a per-lookup
    timeout and bounded retries. Lookups run in a worker thread so the event
    loop keeps serving other requests while the database answers.
    """

    def __init__(
        self,
        directory: Any,
        *,
        timeout_seconds: float = 5.0,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.directory = directory
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy()

    async def _lookup_once(self, name: str) -> Optional[NarratorProfile]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.directory.resolve, name),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise LookupTimeoutError(
                f"Narrator lookup for {name!r} exceeded {self.timeout_seconds}s"
            ) from exc
        except _TRANSIENT_ERRORS as exc:
            raise LookupFailedError(f"Narrator lookup for {name!r} failed: {exc}") from exc
        except DBAPIError as exc:
            raise LookupFailedError(
                f"Narrator lookup for {name!r} failed: {exc}", retryable=bool(exc.connection_invalidated)
            ) from exc

    async def lookup(self, name: str) -> Optional[NarratorProfile]:
        """Resolve one name, retrying transient failures with backoff."""
        retry_count = 0
        while True:
            try:
                return await self._lookup_once(name)
            except HadithEngineError as exc:
                if not self.retry_policy.can_retry(exc, retry_count):
                    raise
                delay = self.retry_policy.get_backoff_seconds(retry_count)
                retry_count += 1
                logger.info("Retry %d for narrator %r after %.2fs: %s", retry_count, name, delay, exc.message)
                await asyncio.sleep(delay)

    async def resolve_all(self, names: Iterable[str]) -> List[NarratorProfile]:
        """First match per name, de-duplicated by narrator id; failures are skipped."""
        resolved: List[NarratorProfile] = []
        seen_ids: Set[int] = set()

        for name in names:
            try:
                profile = await self.lookup(name)
            except HadithEngineError as exc:
                logger.warning("Skipping narrator %r: %s", name, exc.message)
                continue
            except Exception:
                logger.exception("Unexpected error resolving narrator %r", name)
                continue

            if profile is None or profile.id in seen_ids:
                continue
            seen_ids.add(profile.id)
            resolved.append(profile)

        return resolved
