"""Configuration settings for the workout tracker API."""
import os
from typing import List, Literal


EnvironmentType = Literal["development", "staging", "production"]

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_MAX_JSON_NODES = 100_000
DEFAULT_MAX_IMPORT_SESSIONS = 20


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"

    # Supabase
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None

    # Upload limits for the admin import
    MAX_UPLOAD_BYTES: int = DEFAULT_MAX_UPLOAD_BYTES
    MAX_JSON_NODES: int = DEFAULT_MAX_JSON_NODES
    # Import sessions kept in memory; the oldest are dropped first
    MAX_IMPORT_SESSIONS: int = DEFAULT_MAX_IMPORT_SESSIONS

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"

        # Supabase (service role key wins over the anon key)
        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")

        self.MAX_UPLOAD_BYTES = _int_env("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
        self.MAX_JSON_NODES = _int_env("MAX_JSON_NODES", DEFAULT_MAX_JSON_NODES)
        self.MAX_IMPORT_SESSIONS = max(1, _int_env("MAX_IMPORT_SESSIONS", DEFAULT_MAX_IMPORT_SESSIONS))

        origins = os.getenv("CORS_ORIGINS")
        if origins:
            self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]
        else:
            self.CORS_ORIGINS = list(Settings.CORS_ORIGINS)


settings = Settings()
