import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase (durable game records)
    SUPABASE_URL: str
    SUPABASE_API_KEY: str
    GAMES_TABLE: str = "games"

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False
    INVITE_BASE_URL: str = "http://localhost:3000/join-game"

    # WebSocket config
    WS_HEARTBEAT_INTERVAL: int = 30
    WS_CONNECTION_TIMEOUT: int = 600

    # Persistence write queue
    PERSIST_MAX_RETRIES: int = 3
    PERSIST_RETRY_BACKOFF: float = 0.5

    @field_validator("SUPABASE_URL")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("SUPABASE_URL must be an HTTP(S) URL")
        return v.rstrip("/")

    @field_validator("INVITE_BASE_URL")
    @classmethod
    def strip_invite_base_url(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("PERSIST_MAX_RETRIES")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("PERSIST_MAX_RETRIES cannot be negative")
        return v

    @field_validator("PERSIST_RETRY_BACKOFF")
    @classmethod
    def validate_retry_backoff(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("PERSIST_RETRY_BACKOFF must be positive")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Supabase URL: %s", settings.SUPABASE_URL)
    logger.debug("Invite base URL: %s", settings.INVITE_BASE_URL)
    return settings
