"""Runtime configuration for the storefront.

Settings are read from ``STOREFRONT_*`` environment variables, with ``.env``
file support. ``STOREFRONT_ENV`` plays the role the domain environment
overlay plays elsewhere: ``test`` quiets logging, ``production`` switches to
JSON log output.

Example:
    STOREFRONT_ENV=development
    STOREFRONT_DATABASE_URL=sqlite+aiosqlite:///storefront.db
    STOREFRONT_SESSION_FILE=~/.storefront/session.json
    STOREFRONT_TRACE_ENABLED=true
"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DATABASE_URL = "memory://"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    env: str = "development"
    database_url: str = MEMORY_DATABASE_URL
    # None keeps the session identity in memory for the process lifetime
    session_file: str | None = None
    trace_enabled: bool = False
    tax_rate: Decimal = Decimal("0.10")
    log_level: str | None = None
    seed_catalogue: bool = True

    @property
    def uses_memory_store(self) -> bool:
        return self.database_url == MEMORY_DATABASE_URL


@lru_cache
def get_settings() -> Settings:
    return Settings()
