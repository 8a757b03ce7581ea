"""
Runtime configuration for the Taskboard client.

Values are read from the environment (prefix ``TASKBOARD_``) or a local
``.env`` file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings."""

    # Base URL of the remote task/project store
    api_url: str = "http://localhost:5000/api"

    # Header carrying the session token. "Authorization" sends "Bearer <token>",
    # any other header name (e.g. "x-auth-token") sends the raw token.
    auth_header: str = "Authorization"

    # Seconds; None disables the timeout
    request_timeout: float | None = None

    debug: bool = False
    log_json: bool = False

    # Maximum number of undelivered notifications kept around
    notification_limit: int = 50

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
