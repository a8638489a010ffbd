"""Application configuration loaded from environment variables."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "sqlite+pysqlite://",
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "test", "prod"] = "dev"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # SQLite for local runs; PostgreSQL in deployments
    DATABASE_URL: str = "sqlite:///./userapi.db"

    # JWT authentication (default lifetime is 7 days)
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 7 * 24 * 60

    # Bcrypt work factor; stored hashes carry their own cost so this can change freely.
    BCRYPT_ROUNDS: int = 12

    # First admin account, created on startup when missing
    SEED_ADMIN_ENABLED: bool = True
    SEED_ADMIN_USERNAME: str = "admin"
    SEED_ADMIN_EMAIL: str = "admin@example.com"
    SEED_ADMIN_PASSWORD: SecretStr = SecretStr("password123")

    @property
    def token_ttl(self) -> timedelta:
        """JWT_EXPIRE_MINUTES as a duration."""
        return timedelta(minutes=self.JWT_EXPIRE_MINUTES)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "prod"

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite or PostgreSQL URL (e.g. sqlite:///./userapi.db)"
            )
        return v.strip()

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("HS"):
            raise ValueError("JWT_ALGORITHM must be an HMAC algorithm (HS256, HS384, HS512)")
        return v

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 0 or v > 525600:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 0 and 525600 (up to 1 year)"
            )
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("SEED_ADMIN_USERNAME", "SEED_ADMIN_EMAIL")
    @classmethod
    def validate_seed_admin_identity(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SEED_ADMIN_USERNAME and SEED_ADMIN_EMAIL must be non-empty")
        return v.strip()


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
