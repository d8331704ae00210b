from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Narrator(Base):
    __tablename__ = "narrator"
    __table_args__ = (
        CheckConstraint("credibility IN ('trustworthy', 'weak')", name="ck_narrator_credibility"),
        Index("idx_narrator_name_arabic", "name_arabic"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_arabic: Mapped[str] = mapped_column(Text, nullable=False)
    name_transliteration: Mapped[str | None] = mapped_column(Text, nullable=True)
    credibility: Mapped[str] = mapped_column(String(16), nullable=False)
    biography: Mapped[str | None] = mapped_column(Text, nullable=True)
    birth_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    death_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    region: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    opinions: Mapped[list["Opinion"]] = relationship(back_populates="narrator", cascade="all, delete-orphan")
    bookmarks: Mapped[list["Bookmark"]] = relationship(back_populates="narrator", cascade="all, delete-orphan")


class Opinion(Base):
    __tablename__ = "opinion"
    __table_args__ = (
        CheckConstraint("verdict IN ('trustworthy', 'weak')", name="ck_opinion_verdict"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    narrator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("narrator.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scholar: Mapped[str] = mapped_column(Text, nullable=False)
    verdict: Mapped[str] = mapped_column(String(16), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_ref: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    narrator: Mapped[Narrator] = relationship(back_populates="opinions")


class Bookmark(Base):
    __tablename__ = "bookmark"
    __table_args__ = (UniqueConstraint("user_id", "narrator_id", name="uq_bookmark_user_narrator"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    narrator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("narrator.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    narrator: Mapped[Narrator] = relationship(back_populates="bookmarks")


class Search(Base):
    __tablename__ = "search"
    __table_args__ = (Index("idx_search_searched_at", "searched_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    result_found: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    searched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class BulkProcessingJob(Base):
    __tablename__ = "bulk_processing_job"
    __table_args__ = (
        CheckConstraint(
            "status IN ('processing', 'completed', 'error')", name="ck_bulk_processing_job_status"
        ),
    )

    job_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    results: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
