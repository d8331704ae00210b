"""Search history: the comparison corpus for the similarity engine."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from isnad_engine.db.models import Search
from isnad_engine.models import SearchRecord

DEFAULT_SCAN_LIMIT = 1000


def _to_record(row: Search) -> SearchRecord:
    return SearchRecord(
        id=str(row.id),
        text=row.query,
        result_found=row.result_found,
        user_id=row.user_id,
        timestamp=row.searched_at,
    )


class SearchHistoryStore:
    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def recent(self, limit: int = DEFAULT_SCAN_LIMIT, user_id: Optional[str] = None) -> List[SearchRecord]:
        """Most recent searches first."""
        stmt = select(Search)
        if user_id is not None:
            stmt = stmt.where(Search.user_id == user_id)
        stmt = stmt.order_by(Search.searched_at.desc(), Search.id.desc()).limit(limit)
        with self.session_factory() as session:
            return [_to_record(row) for row in session.scalars(stmt).all()]

    def append(self, query: str, result_found: bool, user_id: Optional[str] = None) -> SearchRecord:
        with self.session_factory() as session:
            row = Search(query=query, result_found=result_found, user_id=user_id)
            session.add(row)
            session.commit()
            return _to_record(row)
