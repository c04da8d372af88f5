"""Application settings and configuration.

This module defines all configuration options for the CTI registry service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="CTI Registry", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Caller identity (bearer tokens whose subject is the caller identity)
    secret_key: str = Field(default="change-me-in-production", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./cti_registry.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Listing limits
    default_page_size: int = Field(default=20, alias="DEFAULT_PAGE_SIZE")

    # Content store gateway; "{ref}" is replaced with the content reference.
    content_gateway_template: str = Field(
        default="https://{ref}.ipfs.w3s.link",
        alias="CONTENT_GATEWAY_TEMPLATE",
    )

    # Event relay (outbox delivery to an external indexer)
    event_webhook_url: str | None = Field(default=None, alias="EVENT_WEBHOOK_URL")
    event_relay_interval_seconds: float = Field(
        default=2.0,
        alias="EVENT_RELAY_INTERVAL_SECONDS",
    )
    event_relay_batch_size: int = Field(default=10, alias="EVENT_RELAY_BATCH_SIZE")
    event_max_retries: int = Field(default=5, alias="EVENT_MAX_RETRIES")
    event_http_timeout_seconds: float = Field(
        default=10.0,
        alias="EVENT_HTTP_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def relay_enabled(self) -> bool:
        """Return True when outbox events should be pushed to a webhook."""
        return bool(self.event_webhook_url)


settings = Settings()
