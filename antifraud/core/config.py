"""Configuration management for the Anti-Fraud service.

Configuration is loaded from environment variables. Risk thresholds and
the correlation window live in ``RiskEngineConfig`` so they can be tuned
without touching the engine.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Constants for database URL construction
POSTGRESQL_PREFIX = "postgresql://"
ASYNCPG_DRIVER = "+asyncpg"
PSYCOPG_DRIVER = "+psycopg"

DEFAULT_REGIONS = ["EAP", "ECA", "HIC", "LAC", "MENA", "SA", "SSA"]

# Amounts and bounds are stored in BIGINT columns
MAX_AMOUNT = 2**63 - 1


class AppEnvironment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AppConfig(BaseSettings):
    name: str = Field(default="card-antifraud")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    model_config = SettingsConfigDict(env_prefix="APP_")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.upper())


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    workers: int = Field(default=4)

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class DatabaseConfig(BaseSettings):
    # Full connection URL takes precedence over the individual components
    url_app: str = Field(default="", alias="database_url_app")
    url_admin: str = Field(default="", alias="database_url_admin")

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    name: str = Field(default="antifraud")
    user: str = Field(default="postgres")
    password: SecretStr = Field(default=SecretStr(""))
    pool_size: int = Field(default=10)
    max_overflow: int = Field(default=20)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=1800)
    echo: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        populate_by_name=True,
    )

    @property
    def async_url(self) -> str:
        """Build async database URL."""
        if self.url_app:
            url = self.url_app
            if url.startswith(POSTGRESQL_PREFIX) and ASYNCPG_DRIVER not in url:
                new_prefix = POSTGRESQL_PREFIX.removesuffix("://") + ASYNCPG_DRIVER + "://"
                url = url.replace(POSTGRESQL_PREFIX, new_prefix, 1)
            return url
        password = self.password.get_secret_value()
        return (
            f"postgresql{ASYNCPG_DRIVER}://{self.user}:{password}"
            f"@{self.host}:{self.port}/{self.name}"
        )

    @property
    def sync_url(self) -> str:
        """Build sync database URL for schema setup."""
        url = self.url_admin or self.url_app
        if url:
            if ASYNCPG_DRIVER in url:
                return url.replace(ASYNCPG_DRIVER, PSYCOPG_DRIVER, 1)
            if PSYCOPG_DRIVER not in url:
                return url.replace(POSTGRESQL_PREFIX, "postgresql+psycopg://", 1)
            return url
        password = self.password.get_secret_value()
        return (
            f"postgresql{PSYCOPG_DRIVER}://{self.user}:{password}"
            f"@{self.host}:{self.port}/{self.name}"
        )


class Auth0Config(BaseSettings):
    domain: str = Field(default="")
    audience: str = Field(default="")
    algorithms: str = Field(default="RS256")  # Comma-separated
    jwks_cache_ttl: int = Field(default=600)

    model_config = SettingsConfigDict(env_prefix="AUTH0_")

    @property
    def jwks_url(self) -> str:
        """Build JWKS URL."""
        return f"https://{self.domain}/.well-known/jwks.json"

    @property
    def issuer_url(self) -> str:
        """Build issuer URL."""
        return f"https://{self.domain}/"

    @property
    def algorithms_list(self) -> list[str]:
        """Parse Auth0 algorithms string into a list."""
        return [algo.strip() for algo in self.algorithms.split(",")]

    @property
    def roles_claim(self) -> str:
        return f"{self.audience}/roles"


class ObservabilityConfig(BaseSettings):
    service_name: str = Field(default="card-antifraud")
    otlp_endpoint: str | None = Field(default=None)
    otlp_insecure: bool = Field(default=True)
    log_record_format: str = Field(default="json")

    model_config = SettingsConfigDict(env_prefix="OTEL_")


class SecurityConfig(BaseSettings):
    cors_allowed_origins: str = Field(default="http://localhost:3000")
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "DELETE"])
    cors_allow_headers: list[str] = Field(default=["Authorization", "Content-Type", "X-Request-ID"])
    sanitize_errors: bool = Field(default=True)

    # SECURITY: ONLY allowed in local environment, rejected by Settings otherwise
    skip_jwt_validation: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    @field_validator("cors_allowed_origins", mode="after")
    @classmethod
    def validate_cors_allowed_origins(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into list of origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("skip_jwt_validation", mode="before")
    @classmethod
    def parse_skip_jwt_validation(cls, v: bool | str) -> bool:
        """Parse boolean from environment variable (string "true"/"false")."""
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return v


class RiskEngineConfig(BaseSettings):
    """Tunable constants of the risk-evaluation engine."""

    default_allow_bound: int = Field(default=200, ge=0, lt=MAX_AMOUNT)
    default_manual_bound: int = Field(default=1500, gt=0, le=MAX_AMOUNT)
    correlation_window_seconds: int = Field(default=3600, gt=0)
    correlation_manual_threshold: int = Field(default=2, ge=2)
    correlation_prohibit_threshold: int = Field(default=3, ge=3)
    feedback_divisor: int = Field(default=10, gt=0)
    regions: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_REGIONS))

    model_config = SettingsConfigDict(env_prefix="RISK_")

    @field_validator("regions", mode="before")
    @classmethod
    def parse_regions(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated list of region codes."""
        if isinstance(v, str):
            return [region.strip().upper() for region in v.split(",") if region.strip()]
        return v

    @model_validator(mode="after")
    def validate_bounds(self) -> RiskEngineConfig:
        if self.default_allow_bound >= self.default_manual_bound:
            raise ValueError(
                "RISK_DEFAULT_ALLOW_BOUND must be lower than RISK_DEFAULT_MANUAL_BOUND "
                f"(got {self.default_allow_bound} >= {self.default_manual_bound})"
            )
        if self.correlation_manual_threshold >= self.correlation_prohibit_threshold:
            raise ValueError(
                "RISK_CORRELATION_MANUAL_THRESHOLD must be lower than "
                "RISK_CORRELATION_PROHIBIT_THRESHOLD"
            )
        if not self.regions:
            raise ValueError("RISK_REGIONS must name at least one region")
        return self


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth0: Auth0Config = Field(default_factory=Auth0Config)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    risk: RiskEngineConfig = Field(default_factory=RiskEngineConfig)

    @model_validator(mode="after")
    def validate_security_settings(self) -> Settings:
        """Validate security settings after all configs are loaded."""
        if self.security.skip_jwt_validation and self.app.env != AppEnvironment.LOCAL:
            raise ValueError(
                "SECURITY_SKIP_JWT_VALIDATION can only be set in local environment. "
                f"Current environment: {self.app.env.value}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    get_settings.cache_clear()
    return get_settings()
