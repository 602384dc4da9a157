"""Configuration management for the Inkwell API."""

from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SESSION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="INKWELL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server configuration
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Runtime environment (development, staging, production)",
    )
    server_host: str = Field(default="localhost", description="Server bind host")
    server_port: int = Field(default=3000, description="Server bind port")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Public URL - single source of truth for OAuth callbacks and post-login redirects
    public_url: str = Field(
        default="http://localhost:3000",
        description="Public base URL for the application",
    )

    github_client_id: SecretStr = Field(
        default=SecretStr(""), description="GitHub App OAuth client id"
    )
    github_client_secret: SecretStr = Field(
        default=SecretStr(""), description="GitHub App OAuth client secret"
    )

    # Session and token lifetimes
    session_secret: SecretStr = Field(
        default=SecretStr(""),
        description="HMAC key for session and OAuth state cookies",
    )
    session_max_age_days: int = Field(
        default=7, ge=1, le=90, description="Session lifetime (days)"
    )
    oauth_state_max_age_seconds: int = Field(
        default=600, ge=60, le=3600, description="OAuth state cookie lifetime (seconds)"
    )
    csrf_cookie_max_age_days: int = Field(
        default=7, ge=1, le=30, description="CSRF cookie lifetime (days)"
    )
    csrf_exempt_prefixes: list[str] = Field(
        default_factory=list,
        description="Path prefixes whose unsafe requests skip CSRF validation",
    )
    default_redirect: str = Field(
        default="/repos",
        description="Landing path after login when no safe redirect was requested",
    )

    cookie_domain: str | None = Field(
        default=None,
        description="Cookie domain override (optional; defaults to host-only cookies)",
    )
    cookie_secure: bool | None = Field(
        default=None,
        description="Force Secure cookies on/off (default: auto from environment/public_url)",
    )

    # PostgreSQL
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_user: str = Field(default="inkwell", description="PostgreSQL user")
    postgres_password: SecretStr = Field(
        default=SecretStr("inkwell_dev"), description="PostgreSQL password"
    )
    postgres_db: str = Field(default="inkwell", description="PostgreSQL database name")
    postgres_pool_size: int = Field(default=10, description="Connection pool size")
    postgres_max_overflow: int = Field(default=20, description="Max overflow connections")

    # Rate limiting configuration
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting on API endpoints",
    )
    rate_limit_default: str = Field(
        default="60/minute",
        description="Default rate limit for API endpoints (e.g., '60/minute', '1000/hour')",
    )
    rate_limit_storage: str = Field(
        default="memory://",
        description="Rate limit storage backend (memory://, redis://host:port)",
    )

    @model_validator(mode="after")
    def validate_security_settings(self) -> "Settings":
        """Prevent insecure settings in production."""
        if self.environment == "production":
            if len(self.session_secret.get_secret_value()) < MIN_SESSION_SECRET_LENGTH:
                raise ValueError(
                    "CRITICAL: INKWELL_SESSION_SECRET must be at least "
                    f"{MIN_SESSION_SECRET_LENGTH} characters in production."
                )
            if self.postgres_password.get_secret_value() == "inkwell_dev":
                raise ValueError(
                    "CRITICAL: Default PostgreSQL password 'inkwell_dev' is forbidden in "
                    "production. Set INKWELL_POSTGRES_PASSWORD to a secure value."
                )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def callback_url(self) -> str:
        """OAuth callback registered with the GitHub App."""
        return f"{self.public_url.rstrip('/')}/auth/callback"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL for asyncpg."""
        password = self.postgres_password.get_secret_value()
        return f"postgresql+asyncpg://{self.postgres_user}:{password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"


settings = Settings()
