"""Runtime settings read from ``HADITH_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from isnad_engine.jobs.orchestrator import MAX_BULK_TEXTS

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./hadith.db"


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) == "1"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default


def _bulk_max_texts() -> int:
    value = _env_int("HADITH_BULK_MAX_TEXTS", MAX_BULK_TEXTS)
    if value > MAX_BULK_TEXTS:
        logger.warning("HADITH_BULK_MAX_TEXTS=%s exceeds the hard cap; using %s", value, MAX_BULK_TEXTS)
        return MAX_BULK_TEXTS
    if value < 1:
        logger.warning("Ignoring non-positive HADITH_BULK_MAX_TEXTS=%s; using %s", value, MAX_BULK_TEXTS)
        return MAX_BULK_TEXTS
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default


@dataclass
class EngineSettings:
    database_url: str = DEFAULT_DATABASE_URL
    skip_database: bool = False
    create_tables: bool = False
    job_store: str = "memory"
    bulk_max_texts: int = MAX_BULK_TEXTS
    bulk_throttle_seconds: float = 0.1
    similarity_threshold: float = 0.7
    similarity_top_k: int = 10
    history_scan_limit: int = 1000
    lookup_timeout_seconds: float = 5.0
    lookup_max_retries: int = 2
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "EngineSettings":
        job_store = os.getenv("HADITH_JOB_STORE", "memory").lower()
        if job_store not in {"memory", "sql"}:
            logger.warning("Unknown HADITH_JOB_STORE=%r; using the in-memory store", job_store)
            job_store = "memory"

        return cls(
            database_url=os.getenv("HADITH_DATABASE_URL", DEFAULT_DATABASE_URL),
            skip_database=_env_flag("HADITH_SKIP_DATABASE"),
            create_tables=_env_flag("HADITH_CREATE_TABLES"),
            job_store=job_store,
            bulk_max_texts=_bulk_max_texts(),
            bulk_throttle_seconds=_env_float("HADITH_BULK_THROTTLE_SECONDS", 0.1),
            similarity_threshold=_env_float("HADITH_SIMILARITY_THRESHOLD", 0.7),
            similarity_top_k=_env_int("HADITH_SIMILARITY_TOP_K", 10),
            history_scan_limit=_env_int("HADITH_HISTORY_SCAN_LIMIT", 1000),
            lookup_timeout_seconds=_env_float("HADITH_LOOKUP_TIMEOUT_SECONDS", 5.0),
            lookup_max_retries=_env_int("HADITH_LOOKUP_MAX_RETRIES", 2),
            log_level=os.getenv("HADITH_LOG_LEVEL", "INFO").upper(),
        )
