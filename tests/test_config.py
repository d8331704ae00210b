"""Tests for environment-driven settings."""

from __future__ import annotations

from isnad_engine.config import DEFAULT_DATABASE_URL, EngineSettings


def test_defaults(monkeypatch) -> None:
    for name in ("HADITH_DATABASE_URL", "HADITH_JOB_STORE", "HADITH_BULK_MAX_TEXTS", "HADITH_SKIP_DATABASE"):
        monkeypatch.delenv(name, raising=False)

    settings = EngineSettings.from_env()

    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.skip_database is False
    assert settings.job_store == "memory"
    assert settings.bulk_max_texts == 100
    assert settings.similarity_threshold == 0.7


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("HADITH_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("HADITH_SKIP_DATABASE", "1")
    monkeypatch.setenv("HADITH_JOB_STORE", "SQL")
    monkeypatch.setenv("HADITH_BULK_THROTTLE_SECONDS", "0")
    monkeypatch.setenv("HADITH_LOG_LEVEL", "debug")

    settings = EngineSettings.from_env()

    assert settings.database_url == "sqlite://"
    assert settings.skip_database is True
    assert settings.job_store == "sql"
    assert settings.bulk_throttle_seconds == 0.0
    assert settings.log_level == "DEBUG"


def test_malformed_values_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("HADITH_BULK_MAX_TEXTS", "lots")
    monkeypatch.setenv("HADITH_SIMILARITY_THRESHOLD", "high")
    monkeypatch.setenv("HADITH_JOB_STORE", "redis")

    settings = EngineSettings.from_env()

    assert settings.bulk_max_texts == 100
    assert settings.similarity_threshold == 0.7
    assert settings.job_store == "memory"


def test_bulk_cap_is_clamped(monkeypatch) -> None:
    """Larger batch sizes are capped at 100; smaller ones are honored."""
    monkeypatch.setenv("HADITH_BULK_MAX_TEXTS", "500")
    assert EngineSettings.from_env().bulk_max_texts == 100

    monkeypatch.setenv("HADITH_BULK_MAX_TEXTS", "0")
    assert EngineSettings.from_env().bulk_max_texts == 100

    monkeypatch.setenv("HADITH_BULK_MAX_TEXTS", "25")
    assert EngineSettings.from_env().bulk_max_texts == 25
