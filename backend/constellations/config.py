"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    constellations_env: str = "development"
    constellations_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Sessions
    session_secret: str = "development-session-secret"
    session_max_age_seconds: int = 14 * 24 * 3600
    impression_window_seconds: float = 24 * 3600

    # Previews
    previewer_url: str = ""
    preview_base_url: str = ""
    preview_timeout_seconds: float = 10.0

    # Storage: empty means in-memory only
    data_dir: str = ""

    # JSON table of bearer token -> principal for the bundled identity provider
    identity_tokens_file: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
