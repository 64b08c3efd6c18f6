"""Application settings using pydantic-settings."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration - single source of truth.

    All settings loaded from environment variables or .env files.

    Usage:
        settings = get_settings()
        print(settings.database_url)
        print(settings.access_token_ttl)
    """

    # Database (reference account store)
    db_url: str | None = Field(
        default=None,
        description="Full async SQLAlchemy URL; overrides the db_* parts when set.",
    )
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="postgres")
    db_name: str = Field(default="tokenguard")
    db_echo: bool = Field(default=False)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)

    # Signing
    secret_key: str = Field(default="", min_length=32)
    signing_key_id: str = Field(default="default")
    verification_keys: dict[str, str] = Field(
        default_factory=dict,
        description="Retired key id -> secret, still accepted for verification during rotation.",
    )
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(default="HS256")
    token_issuer: str = Field(default="tokenguard")
    token_audience: str = Field(default="tokenguard-clients")

    # Token lifetimes
    access_token_expire_minutes: int = Field(default=15, gt=0)
    refresh_token_expire_hours: int = Field(default=24, gt=0)

    # Lockout
    max_failed_attempts: int = Field(default=5, ge=1)
    lockout_duration_minutes: int = Field(default=15, gt=0)
    failure_window_minutes: int = Field(default=15, gt=0)
    lockout_idle_minutes: int = Field(default=60, gt=0)

    # Account store
    credential_timeout_seconds: float = Field(default=3.0, gt=0)

    # Revocation store
    revocation_backend: Literal["memory", "redis"] = Field(default="memory")
    redis_url: str = Field(default="redis://localhost:6379/0")
    revocation_sweep_interval_seconds: float = Field(default=60.0, gt=0)
    revoke_subject_on_refresh_reuse: bool = Field(
        default=False,
        description="Revoke every token of a subject when a rotated refresh token is replayed.",
    )

    # Authorization
    admin_role: str = Field(default="admin")

    # Application
    environment: Literal["dev", "prod", "test"] = Field(default="dev")
    debug: bool = Field(default=False)
    app_name: str = Field(default="Token Guard")
    app_version: str = Field(default="1.0.0")

    # CORS
    cors_origins: str = Field(default="http://localhost:3000")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Ensure secret_key is provided and meets requirements."""
        if not v or len(v) < 32:
            raise ValueError(
                "SECRET_KEY must be set in environment and be at least 32 characters long"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def validate_token_lifetimes(self) -> "Settings":
        """Refresh tokens must outlive the access tokens they replace."""
        if self.refresh_token_ttl <= self.access_token_ttl:
            raise ValueError(
                "REFRESH_TOKEN_EXPIRE_HOURS must be longer than ACCESS_TOKEN_EXPIRE_MINUTES"
            )
        if self.signing_key_id in self.verification_keys:
            raise ValueError("SIGNING_KEY_ID must not also appear in VERIFICATION_KEYS")
        return self

    @property
    def signing_keys(self) -> dict[str, str]:
        """Full keyring: the active key plus retired verification keys."""
        return {**self.verification_keys, self.signing_key_id: self.secret_key}

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.access_token_expire_minutes)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(hours=self.refresh_token_expire_hours)

    @property
    def lockout_duration(self) -> timedelta:
        return timedelta(minutes=self.lockout_duration_minutes)

    @property
    def failure_window(self) -> timedelta:
        return timedelta(minutes=self.failure_window_minutes)

    @property
    def lockout_idle_ttl(self) -> timedelta:
        return timedelta(minutes=self.lockout_idle_minutes)

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def database_url(self) -> str:
        """Build async database URL (PostgreSQL unless db_url overrides it)."""
        if self.db_url:
            return self.db_url
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "prod"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the application lifecycle.
    For testing, clear the cache with: get_settings.cache_clear()

    Returns:
        Settings instance loaded from environment
    """
    return Settings()
