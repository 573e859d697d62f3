"""API configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]
    poll_enabled: bool = False  # Run the stream poller inside the API process

    model_config = {"env_prefix": "AUDITWATCH_API_"}


settings = Settings()
