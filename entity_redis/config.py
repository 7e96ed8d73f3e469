"""Configuration - environment-driven Redis connection settings via pydantic-settings.

Invariants:
    - Credentials come from environment variables or .env (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - redis_url is always a redis:// or rediss:// URL after validation

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env support
    - ENTITY_REDIS_ prefix: settings coexist with the host application's own
    - Defaults target a local Redis so tests and examples work out of the box
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection and logging settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENTITY_REDIS_", env_file=".env", case_sensitive=False,
    )

    # Redis
    redis_url: str = "redis://localhost:6379"
    redis_database: int = Field(default=0, ge=0)
    redis_username: str | None = None
    redis_password: str | None = None
    redis_socket_timeout_seconds: float | None = None
    admin_client_name: str = "entity-redis-admin"

    @field_validator("redis_url", mode="before")
    @classmethod
    def normalize_connection_string(cls, v: str) -> str:
        """Bare "host:port" connection strings become redis://host:port."""
        if isinstance(v, str) and "://" not in v:
            return f"redis://{v.strip()}"
        return v

    @field_validator("redis_url")
    @classmethod
    def require_redis_scheme(cls, v: str) -> str:
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must use redis://, rediss:// or unix://")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def client_options(self) -> dict:
        """Keyword arguments shared by every redis-py client built from these settings."""
        return {
            "db": self.redis_database,
            "username": self.redis_username,
            "password": self.redis_password,
            "socket_timeout": self.redis_socket_timeout_seconds,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
