"""Redis Store - explicitly owned data-plane and admin-plane redis-py clients.

Invariants:
    - Clients are built once by RedisStore.connect() and shared by reference;
      there is no module-level singleton
    - Sync clients are pinged on connect: a bad address or credentials raise
      StoreConnectionError immediately, never retried
    - Admin clients carry their own client name and are the only ones that FLUSHDB
    - All redis-py exceptions mapped to StoreConnectionError / StoreOperationError

Design Decisions:
    - RedisStore(...) accepts pre-built clients so tests inject fakeredis
    - Clients never decode responses: hash values stay bytes for the codec
    - A db number in redis_url's path overrides Settings.redis_database
      (redis-py from_url precedence)
"""

import logging
from contextlib import contextmanager
from collections.abc import Iterator

import redis
import redis.asyncio as aioredis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
    RedisError,
)

from entity_redis.config import Settings, get_settings
from entity_redis.core.errors import (
    ErrorContext, StoreConnectionError, StoreOperationError,
)
from entity_redis.core.store_protocols import CancellationSignal, is_cancelled

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str, key_name: str | None = None) -> Iterator[None]:
    """Map redis-py exceptions raised inside the block to core error types."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        logger.error(
            f"Redis connection error during {operation}: {e}",
            extra={"operation": operation, "error_code": "STORE_CONNECTION_ERROR"},
        )
        raise StoreConnectionError(
            str(e), ErrorContext(operation=operation, key_name=key_name),
        ) from e
    except RedisError as e:
        logger.error(
            f"Redis error during {operation}: {e}",
            extra={"operation": operation, "error_code": "STORE_OPERATION_ERROR"},
        )
        raise StoreOperationError(
            str(e), operation, ErrorContext(key_name=key_name),
        ) from e


class RedisStore:
    """Owns the Redis clients every service reads and writes through."""

    def __init__(
        self,
        database: redis.Redis,
        admin: redis.Redis,
        async_database: aioredis.Redis | None = None,
        async_admin: aioredis.Redis | None = None,
        database_number: int = 0,
    ):
        self.database = database
        self.admin = admin
        self._async_database = async_database
        self._async_admin = async_admin
        self.database_number = database_number

    @classmethod
    def connect(cls, settings: Settings | None = None) -> "RedisStore":
        """Build and verify all clients from settings."""
        settings = settings or get_settings()
        options = settings.client_options()
        admin_options = {**options, "client_name": settings.admin_client_name}
        try:
            database = redis.Redis.from_url(settings.redis_url, **options)
            admin = redis.Redis.from_url(settings.redis_url, **admin_options)
        except ValueError as e:
            raise StoreConnectionError(
                f"invalid redis_url: {e}", ErrorContext(operation="connect"),
            ) from e
        try:
            database.ping()
            admin.ping()
        except RedisError as e:
            database.close()
            admin.close()
            logger.error(
                f"Redis connection error during connect: {e}",
                extra={"operation": "connect", "error_code": "STORE_CONNECTION_ERROR"},
            )
            raise StoreConnectionError(str(e), ErrorContext(operation="connect")) from e

        store = cls(
            database,
            admin,
            aioredis.Redis.from_url(settings.redis_url, **options),
            aioredis.Redis.from_url(settings.redis_url, **admin_options),
            database_number=settings.redis_database,
        )
        logger.info(
            "Redis store connected",
            extra={"database": settings.redis_database, "operation": "connect"},
        )
        return store

    @property
    def async_database(self) -> aioredis.Redis:
        if self._async_database is None:
            raise RuntimeError("Async Redis client not configured")
        return self._async_database

    @property
    def async_admin(self) -> aioredis.Redis:
        if self._async_admin is None:
            raise RuntimeError("Async Redis admin client not configured")
        return self._async_admin

    def flush_database(self) -> None:
        """Delete every key in the configured logical database."""
        with store_errors("flushdb"):
            self.admin.flushdb()
        logger.warning(
            "Redis database flushed",
            extra={"database": self.database_number, "operation": "flushdb"},
        )

    async def flush_database_async(self, cancel: CancellationSignal | None = None) -> None:
        """Async flush_database; does nothing when already cancelled."""
        if is_cancelled(cancel):
            return
        with store_errors("flushdb"):
            await self.async_admin.flushdb()
        logger.warning(
            "Redis database flushed",
            extra={"database": self.database_number, "operation": "flushdb"},
        )

    def health_check(self) -> bool:
        """Check Redis connectivity (for readiness probes)."""
        try:
            return bool(self.database.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    def close(self) -> None:
        self.database.close()
        self.admin.close()

    async def aclose(self) -> None:
        if self._async_database is not None:
            await self._async_database.aclose()
        if self._async_admin is not None:
            await self._async_admin.aclose()

    def __enter__(self) -> "RedisStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
