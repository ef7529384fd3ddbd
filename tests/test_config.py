"""Tests for environment-driven settings."""

from workout_tracker_api.config import DEFAULT_MAX_IMPORT_SESSIONS, DEFAULT_MAX_UPLOAD_BYTES, Settings


def test_defaults(monkeypatch):
    for name in ("ENVIRONMENT", "MAX_UPLOAD_BYTES", "MAX_JSON_NODES", "MAX_IMPORT_SESSIONS", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.ENVIRONMENT == "development"
    assert settings.MAX_UPLOAD_BYTES == DEFAULT_MAX_UPLOAD_BYTES
    assert settings.MAX_IMPORT_SESSIONS == DEFAULT_MAX_IMPORT_SESSIONS
    assert settings.MAX_JSON_NODES == 100_000
    assert settings.CORS_ORIGINS == ["http://localhost:3000", "http://localhost:3001"]


def test_overrides(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "1024")
    monkeypatch.setenv("CORS_ORIGINS", "https://tracker.example.com, http://localhost:5173,")

    settings = Settings()

    assert settings.ENVIRONMENT == "production"
    assert settings.MAX_UPLOAD_BYTES == 1024
    assert settings.CORS_ORIGINS == ["https://tracker.example.com", "http://localhost:5173"]


def test_bad_values_fall_back(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "qa")
    monkeypatch.setenv("MAX_JSON_NODES", "lots")

    settings = Settings()

    assert settings.ENVIRONMENT == "development"
    assert settings.MAX_JSON_NODES == 100_000


def test_anon_key_is_fallback(monkeypatch):
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    monkeypatch.setenv("SUPABASE_ANON_KEY", "eyJanon")
    assert Settings().SUPABASE_KEY == "eyJanon"


def test_import_session_cap(monkeypatch):
    monkeypatch.setenv("MAX_IMPORT_SESSIONS", "5")
    assert Settings().MAX_IMPORT_SESSIONS == 5

    monkeypatch.setenv("MAX_IMPORT_SESSIONS", "0")
    assert Settings().MAX_IMPORT_SESSIONS == 1
