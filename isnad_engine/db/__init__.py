"""SQLAlchemy models and session helpers for the external stores."""

from isnad_engine.db.models import Base, Bookmark, BulkProcessingJob, Narrator, Opinion, Search
from isnad_engine.db.session import create_db_engine, create_session_factory, init_schema

__all__ = [
    "Base",
    "Bookmark",
    "BulkProcessingJob",
    "Narrator",
    "Opinion",
    "Search",
    "create_db_engine",
    "create_session_factory",
    "init_schema",
]
