"""Tests for the narrator directory, the resolver and search history."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

from isnad_engine.db.models import Bookmark
from isnad_engine.db.session import create_db_engine, create_session_factory, init_schema
from isnad_engine.errors import LookupFailedError, LookupTimeoutError, RetryPolicy
from isnad_engine.history.store import SearchHistoryStore
from isnad_engine.models import NarratorProfile
from isnad_engine.narrators.directory import NarratorDirectory
from isnad_engine.narrators.resolver import NarratorResolver

NO_DELAY = RetryPolicy(base_delay_seconds=0.0)


@pytest.fixture()
def session_factory(tmp_path: Path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'narrators.db'}")
    init_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def directory(session_factory) -> NarratorDirectory:
    directory = NarratorDirectory(session_factory)
    directory.add_narrator(
        "سفيان الثوري",
        "trustworthy",
        name_transliteration="Sufyan al-Thawri",
        region="Kufa",
        opinions=[
            {"scholar": "شعبه", "verdict": "trustworthy", "reason": "امير المومنين في الحديث"},
            {"scholar": "ابن معين", "verdict": "trustworthy"},
        ],
    )
    directory.add_narrator(
        "عبد الكريم بن ابي المخارق",
        "weak",
        name_transliteration="Abd al-Kareem ibn Abi al-Mukhariq",
        opinions=[{"scholar": "النسائي", "verdict": "weak", "reason": "متروك"}],
    )
    return directory


class FlakyDirectory:
    """Directory double that fails a fixed number of times before answering."""

    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or ConnectionError("connection reset")
        self.calls = 0

    def resolve(self, name: str):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return NarratorProfile(id=7, name_arabic=name, credibility="trustworthy", matched_name=name)


class SlowDirectory:
    def resolve(self, name: str):
        time.sleep(0.3)
        return None


class MappingDirectory:
    def __init__(self, mapping: dict) -> None:
        self.mapping = mapping

    def resolve(self, name: str):
        if name == "خطا":
            raise ValueError("unexpected")
        return self.mapping.get(name)


def test_find_by_arabic_substring(directory: NarratorDirectory) -> None:
    matches = directory.find("سفيان")
    assert [match.name_arabic for match in matches] == ["سفيان الثوري"]
    assert matches[0].matched_name == "سفيان"


def test_find_by_transliteration_is_case_insensitive(directory: NarratorDirectory) -> None:
    matches = directory.find("sufyan")
    assert len(matches) == 1
    assert matches[0].credibility == "trustworthy"


def test_find_escapes_like_wildcards(directory: NarratorDirectory) -> None:
    assert directory.find("%") == []
    assert directory.find("   ") == []


def test_resolve_and_get(directory: NarratorDirectory) -> None:
    profile = directory.resolve("المخارق")
    assert profile is not None
    assert profile.credibility == "weak"
    assert directory.get(profile.id).name_arabic == "عبد الكريم بن ابي المخارق"
    assert directory.resolve("مجهول") is None
    assert directory.get(9999) is None


def test_add_narrator_is_idempotent(directory: NarratorDirectory) -> None:
    first = directory.get_by_name("سفيان الثوري")
    again = directory.add_narrator("سفيان الثوري", "trustworthy")
    assert again.id == first.id
    assert len(directory.list_all()) == 2


def test_opinions(directory: NarratorDirectory) -> None:
    profile = directory.resolve("سفيان")
    opinions = directory.get_opinions(profile.id)
    assert {opinion.scholar for opinion in opinions} == {"شعبه", "ابن معين"}
    assert all(opinion.narrator_id == profile.id for opinion in opinions)
    assert directory.get_opinions(9999) == []


def test_toggle_bookmark(directory: NarratorDirectory) -> None:
    """Toggling flips the state and is tracked per user."""
    profile = directory.resolve("سفيان")

    assert directory.is_bookmarked(profile.id, "u1") is False
    assert directory.toggle_bookmark(profile.id, "u1") is True
    assert directory.is_bookmarked(profile.id, "u1") is True
    assert directory.is_bookmarked(profile.id, "u2") is False
    assert directory.toggle_bookmark(profile.id, "u1") is False
    assert directory.is_bookmarked(profile.id, "u1") is False


def test_bookmark_is_unique_per_user_and_narrator(directory: NarratorDirectory, session_factory) -> None:
    profile = directory.resolve("سفيان")
    directory.toggle_bookmark(profile.id, "u1")

    with session_factory() as session:
        session.add(Bookmark(narrator_id=profile.id, user_id="u1"))
        with pytest.raises(IntegrityError):
            session.commit()


def test_history_recent_newest_first(session_factory) -> None:
    history = SearchHistoryStore(session_factory)
    history.append("حدثنا مالك", True)
    history.append("قال رسول الله", False, user_id="u1")
    history.append("عن نافع", True, user_id="u1")

    records = history.recent()
    assert [record.text for record in records] == ["عن نافع", "قال رسول الله", "حدثنا مالك"]
    assert [record.text for record in history.recent(limit=1)] == ["عن نافع"]
    assert [record.text for record in history.recent(user_id="u1")] == ["عن نافع", "قال رسول الله"]


def test_resolver_retries_transient_failures() -> None:
    flaky = FlakyDirectory(failures=2)
    resolver = NarratorResolver(flaky, retry_policy=NO_DELAY)

    profile = asyncio.run(resolver.lookup("سفيان"))

    assert profile.id == 7
    assert flaky.calls == 3


def test_resolver_gives_up_after_max_retries() -> None:
    flaky = FlakyDirectory(failures=5)
    resolver = NarratorResolver(flaky, retry_policy=NO_DELAY)

    with pytest.raises(LookupFailedError) as excinfo:
        asyncio.run(resolver.lookup("سفيان"))
    assert excinfo.value.retryable is True
    assert flaky.calls == 3


def test_resolver_timeout() -> None:
    resolver = NarratorResolver(
        SlowDirectory(),
        timeout_seconds=0.05,
        retry_policy=RetryPolicy(max_retries=0),
    )
    with pytest.raises(LookupTimeoutError):
        asyncio.run(resolver.lookup("سفيان"))


def test_resolve_all_skips_failures_and_dedupes() -> None:
    shared = NarratorProfile(id=1, name_arabic="سفيان الثوري", credibility="trustworthy")
    other = NarratorProfile(id=2, name_arabic="وكيع بن الجراح", credibility="trustworthy")
    resolver = NarratorResolver(
        MappingDirectory({"سفيان": shared, "الثوري": shared, "وكيع": other}),
        retry_policy=NO_DELAY,
    )

    profiles = asyncio.run(resolver.resolve_all(["سفيان", "خطا", "مجهول", "الثوري", "وكيع"]))

    assert [profile.id for profile in profiles] == [1, 2]


def test_resolve_all_survives_a_dead_directory() -> None:
    resolver = NarratorResolver(FlakyDirectory(failures=100), retry_policy=NO_DELAY)
    assert asyncio.run(resolver.resolve_all(["سفيان", "وكيع"])) == []


def test_retry_policy_backoff() -> None:
    policy = RetryPolicy()
    assert policy.get_backoff_seconds(0) == 0.5
    assert policy.get_backoff_seconds(1) == 0.75
    assert policy.get_backoff_seconds(10) == 3.0
    assert policy.can_retry(LookupFailedError("x"), 1) is True
    assert policy.can_retry(LookupFailedError("x"), 2) is False
    assert policy.can_retry(LookupFailedError("x", retryable=False), 0) is False
