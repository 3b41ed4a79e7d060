"""Configuration management for the library catalog.

Settings are read from ``LIBRARY_CATALOG_*`` environment variables (or a
``.env`` file) and validated with Pydantic v2. The database layer, the
migration runner and the logging setup all read from the same
:class:`CatalogConfig` instance obtained through :func:`get_config`.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseSettings):
    """Runtime settings for the catalog's storage layer."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Database Configuration ===

    database_path: Path = Field(
        default=Path("data/library.db"),
        description="SQLite database file path (used when database_url is not set)",
    )

    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL, overrides database_path",
    )

    echo_sql: bool = Field(
        default=False,
        description="Log every SQL statement emitted by the engine",
    )

    pool_size: int = Field(
        default=10,
        description="Connection pool size for server databases",
        ge=1,
        le=100,
    )

    max_overflow: int = Field(
        default=20,
        description="Connections allowed beyond pool_size",
        ge=0,
    )

    # === Migrations ===

    product_version: str = Field(
        default="0.1.0",
        description="Version string recorded next to each applied migration",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Logging and tracing ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    enable_tracing: bool = Field(
        default=True,
        description="Wrap migrations and cascading deletes in logfire spans",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Resolve the path and make sure its directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Database directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        return self.debug or self.log_level == "DEBUG"

    def get_database_url(self) -> str:
        """Get the SQLAlchemy database URL."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_path}"


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: CatalogConfig | None = None


def get_config() -> CatalogConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = CatalogConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
