"""Narrator directory lookups against the relational store."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, sessionmaker

from isnad_engine.db.models import Bookmark, Narrator, Opinion
from isnad_engine.models import NarratorProfile, ScholarOpinion


def _to_profile(row: Narrator, matched_name: Optional[str] = None) -> NarratorProfile:
    return NarratorProfile(
        id=row.id,
        name_arabic=row.name_arabic,
        name_transliteration=row.name_transliteration,
        credibility=row.credibility,
        biography=row.biography,
        birth_year=row.birth_year,
        death_year=row.death_year,
        region=row.region,
        matched_name=matched_name,
    )


class NarratorDirectory:
    """Case-insensitive substring search over narrator names."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def find(self, name: str, limit: int = 5) -> List[NarratorProfile]:
        """Match ``name`` against the Arabic name or the transliteration."""
        pattern = (name or "").strip()
        if not pattern:
            return []

        stmt = (
            select(Narrator)
            .where(
                or_(
                    Narrator.name_arabic.icontains(pattern, autoescape=True),
                    Narrator.name_transliteration.icontains(pattern, autoescape=True),
                )
            )
            .order_by(Narrator.id)
            .limit(limit)
        )
        with self.session_factory() as session:
            rows = session.scalars(stmt).all()
            return [_to_profile(row, matched_name=pattern) for row in rows]

    def resolve(self, name: str) -> Optional[NarratorProfile]:
        """First directory match for an extracted name, or None."""
        matches = self.find(name, limit=1)
        return matches[0] if matches else None

    def get(self, narrator_id: int) -> Optional[NarratorProfile]:
        with self.session_factory() as session:
            row = session.get(Narrator, narrator_id)
            return _to_profile(row) if row is not None else None

    def get_by_name(self, name_arabic: str) -> Optional[NarratorProfile]:
        """Exact match on the stored Arabic name."""
        stmt = select(Narrator).where(Narrator.name_arabic == name_arabic).order_by(Narrator.id).limit(1)
        with self.session_factory() as session:
            row = session.scalars(stmt).first()
            return _to_profile(row) if row is not None else None

    def list_all(self, limit: int = 1000) -> List[NarratorProfile]:
        with self.session_factory() as session:
            rows = session.scalars(select(Narrator).order_by(Narrator.id).limit(limit)).all()
            return [_to_profile(row) for row in rows]

    def get_opinions(self, narrator_id: int) -> List[ScholarOpinion]:
        stmt = select(Opinion).where(Opinion.narrator_id == narrator_id).order_by(Opinion.scholar, Opinion.id)
        with self.session_factory() as session:
            return [
                ScholarOpinion(
                    id=row.id,
                    narrator_id=row.narrator_id,
                    scholar=row.scholar,
                    verdict=row.verdict,
                    reason=row.reason,
                    source_ref=row.source_ref,
                )
                for row in session.scalars(stmt).all()
            ]

    def toggle_bookmark(self, narrator_id: int, user_id: str) -> bool:
        """Remove the bookmark if present, otherwise add it. Returns the new state."""
        with self.session_factory() as session:
            existing = session.scalars(
                select(Bookmark).where(Bookmark.narrator_id == narrator_id, Bookmark.user_id == user_id)
            ).first()
            if existing is not None:
                session.delete(existing)
                session.commit()
                return False

            session.add(Bookmark(narrator_id=narrator_id, user_id=user_id))
            session.commit()
            return True

    def is_bookmarked(self, narrator_id: int, user_id: str) -> bool:
        stmt = select(Bookmark.id).where(Bookmark.narrator_id == narrator_id, Bookmark.user_id == user_id)
        with self.session_factory() as session:
            return session.scalars(stmt).first() is not None

    def add_narrator(
        self,
        name_arabic: str,
        credibility: str,
        *,
        name_transliteration: Optional[str] = None,
        biography: Optional[str] = None,
        birth_year: Optional[int] = None,
        death_year: Optional[int] = None,
        region: Optional[str] = None,
        opinions: Optional[List[dict]] = None,
    ) -> NarratorProfile:
        """Insert a narrator unless one with the same Arabic name exists."""
        with self.session_factory() as session:
            existing = session.scalars(
                select(Narrator).where(Narrator.name_arabic == name_arabic).order_by(Narrator.id).limit(1)
            ).first()
            if existing is not None:
                return _to_profile(existing)

            row = Narrator(
                name_arabic=name_arabic,
                name_transliteration=name_transliteration,
                credibility=credibility,
                biography=biography,
                birth_year=birth_year,
                death_year=death_year,
                region=region,
            )
            for opinion in opinions or []:
                row.opinions.append(
                    Opinion(
                        scholar=opinion["scholar"],
                        verdict=opinion["verdict"],
                        reason=opinion.get("reason"),
                        source_ref=opinion.get("source_ref"),
                    )
                )
            session.add(row)
            session.commit()
            return _to_profile(row)
