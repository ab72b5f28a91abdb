"""Application settings and configuration.

This module defines all configuration options for the Kvasari Stage application.
Settings are loaded from environment variables with sensible defaults.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ~40 MiB, the largest image payload accepted by the upload pipeline
DEFAULT_MAX_UPLOAD_BYTES = 41_943_040


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Kvasari Stage application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Kvasari Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Bearer tokens carry the user id; there is no credential check behind them.
    secret_key: str = Field(default="kvasari-development-secret", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./kvasari.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    database_timeout_seconds: float = Field(default=15.0, alias="DATABASE_TIMEOUT_SECONDS")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Artwork blobs, named after their content hash and detected format
    images_path: Path = Field(default=Path("./images"), alias="IMAGES_PATH")
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_BYTES, alias="MAX_UPLOAD_BYTES")

    # Stream pagination
    stream_page_size: int = Field(default=12, alias="STREAM_PAGE_SIZE")

    # Reconciliation of soft-deleted artworks
    reconcile_on_startup: bool = Field(default=True, alias="RECONCILE_ON_STARTUP")
    reconcile_interval_seconds: float = Field(
        default=3600.0,
        alias="RECONCILE_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
