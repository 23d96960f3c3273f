"""Application settings loaded from environment variables.

Every field can be overridden with IMAGEVAULT_<SECTION>__<FIELD>, e.g.
IMAGEVAULT_DATABASE__URL or IMAGEVAULT_KRAKEN__API_KEY. A .env file in the
working directory is read as well.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Record store (SQLAlchemy) configuration."""

    url: str = "sqlite+aiosqlite:///./data/imagevault.db"
    echo: bool = False
    pool_pre_ping: bool = True
    # Only used for PostgreSQL - SQLite doesn't pool
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


class StorageSettings(BaseModel):
    """Blob store configuration."""

    root_path: Path = Path("./data/blobs")


class KrakenSettings(BaseModel):
    """Kraken.io optimization service configuration."""

    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None
    api_url: str = "https://api.kraken.io"
    lossy: bool = True
    # Upload-and-wait blocks until Kraken is done, so this is deliberately long
    timeout: float = 120.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_secret)


class HttpSettings(BaseModel):
    """Shared HTTP client pool configuration."""

    timeout: float = 30.0
    max_keepalive: int = 20
    max_connections: int = 50


class ObservabilitySettings(BaseModel):
    """Logging configuration."""

    log_json_format: bool = False


class Settings(BaseSettings):
    """ImageVault settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGEVAULT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "imagevault"
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    kraken: KrakenSettings = Field(default_factory=KrakenSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    def _get_sqlite_db_path(self) -> Path | None:
        """Filesystem path of the SQLite database, or None for other backends.

        In-memory databases (":memory:" or an empty path) also return None.
        """
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path.startswith(":memory:"):
            return None
        return Path(path.split("?", 1)[0])

    def ensure_directories(self) -> None:
        """Create the blob root directory if needed."""
        self.storage.root_path.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
