from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage: "sql" for a relational database, "memory" for the dict-backed store
    STORAGE_BACKEND: Literal["memory", "sql"] = "sql"
    DATABASE_URL: str = "sqlite:///./kivo.db"

    # Fixture directory for the memory backend (never used as a fallback)
    DATA_DIR: Optional[Path] = None

    # Catalog
    LOW_STOCK_THRESHOLD: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"

    # Bearer token -> external auth id, for the static identity provider
    AUTH_TOKENS: dict[str, str] = {}

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KIVO_",
        extra="ignore",
    )


settings = Settings()
