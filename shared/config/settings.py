"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"


class PostgresSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = "localhost"
    port: int = 5432
    user: str = "metaworks"
    password: SecretStr = SecretStr("metaworks_dev_password")
    db: str = "metaworks"

    @property
    def async_url(self) -> str:
        """Generate async SQLAlchemy connection URL."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.db}"


class RedisSettings(BaseSettings):
    """Redis cache configuration."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = "localhost"
    port: int = 6379
    password: SecretStr = SecretStr("")
    db: int = 0

    @property
    def url(self) -> str:
        """Generate Redis connection URL."""
        pwd = self.password.get_secret_value()
        auth = f":{pwd}@" if pwd else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class OpenAISettings(BaseSettings):
    """OpenAI API configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: SecretStr = SecretStr("")
    model: str = "gpt-4o"


class LLMSettings(BaseSettings):
    """LLM provider configuration."""

    model_config = SettingsConfigDict(env_prefix="LLM_")

    provider: LLMProvider = LLMProvider.OPENAI
    temperature: float = 0.2
    max_retries: int = 3
    timeout_seconds: int = 120

    openai: OpenAISettings = Field(default_factory=OpenAISettings)


class JWTSettings(BaseSettings):
    """JWT authentication configuration."""

    model_config = SettingsConfigDict(env_prefix="JWT_")

    secret_key: SecretStr = SecretStr("your-jwt-secret-key-min-32-chars-long")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7


class ClerkSettings(BaseSettings):
    """Clerk hosted authentication configuration."""

    model_config = SettingsConfigDict(env_prefix="CLERK_")

    publishable_key: str = ""
    secret_key: SecretStr = SecretStr("")
    jwks_url: str = ""
    issuer: str = ""
    jwks_cache_seconds: int = 3600

    @property
    def enabled(self) -> bool:
        """Clerk tokens are accepted only when a JWKS endpoint is configured."""
        return bool(self.jwks_url)


class DIDSettings(BaseSettings):
    """D-ID talking avatar configuration."""

    model_config = SettingsConfigDict(env_prefix="DID_")

    api_key: SecretStr = SecretStr("")
    agent_id: str | None = None
    base_url: str = "https://api.d-id.com"
    presenter_id: str = "kgn-KqCZSo"
    driver_id: str = "mdo-gpt"
    voice_id: str = "en-US-ChristopherNeural"
    voice_style: str = "Calm"
    poll_interval_seconds: float = 1.0
    poll_timeout_seconds: float = 60.0
    request_timeout_seconds: float = 30.0


class UploadSettings(BaseSettings):
    """File upload storage configuration."""

    model_config = SettingsConfigDict(env_prefix="UPLOAD_")

    root: Path = Path("uploads")
    max_logo_bytes: int = 5 * 1024 * 1024
    max_document_bytes: int = 10 * 1024 * 1024
    max_template_bytes: int = 10 * 1024 * 1024


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = Field(default=5000, alias="PORT")

    # Project paths
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)

    # Tenant used when a user is not linked to a company
    default_company_id: int = 1

    # Database connections
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)

    # Integrations
    llm: LLMSettings = Field(default_factory=LLMSettings)
    did: DIDSettings = Field(default_factory=DIDSettings)
    risk_prediction_cache_ttl: int = 3600

    # Authentication
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    clerk: ClerkSettings = Field(default_factory=ClerkSettings)

    # Storage and security
    uploads: UploadSettings = Field(default_factory=UploadSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
