"""RedisStore tests - flush, health check, error mapping, and connection failures.

Tests cover:
    - flush_database / flush_database_async remove every key
    - Cancelled async flush leaves data in place
    - health_check reports False instead of raising
    - store_errors maps redis-py exceptions to core errors
    - connect() to an unreachable address fails fast with StoreConnectionError
    - A failed connect closes the clients it built
    - Async accessors fail loudly when no async client was provided
"""

import asyncio

import fakeredis
import pytest
import redis
from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError

from entity_redis.config import Settings
from entity_redis.core.errors import StoreConnectionError, StoreOperationError
from entity_redis.infrastructure.store import RedisStore, store_errors


def test_flush_database_removes_all_keys(store, redis_client):
    redis_client.set("a", "1")
    redis_client.sadd("EF:Index:PK:Customer", "1")

    store.flush_database()

    assert redis_client.dbsize() == 0


async def test_flush_database_async_removes_all_keys(store, redis_client):
    redis_client.hset("EF:Data:Customer:1", "Id", "1")

    await store.flush_database_async()

    assert redis_client.dbsize() == 0


async def test_cancelled_async_flush_keeps_data(store, redis_client):
    redis_client.set("a", "1")
    cancel = asyncio.Event()
    cancel.set()

    await store.flush_database_async(cancel)

    assert redis_client.dbsize() == 1


def test_health_check_true_when_reachable(store):
    assert store.health_check() is True


def test_health_check_false_on_connection_error(store, monkeypatch):
    def refuse():
        raise RedisConnectionError("refused")

    monkeypatch.setattr(store.database, "ping", refuse)
    assert store.health_check() is False


def test_store_errors_maps_connection_errors():
    with pytest.raises(StoreConnectionError) as exc_info:
        with store_errors("hgetall", "EF:Data:Customer:1"):
            raise RedisConnectionError("refused")
    assert exc_info.value.context.key_name == "EF:Data:Customer:1"


def test_store_errors_maps_server_errors():
    with pytest.raises(StoreOperationError) as exc_info:
        with store_errors("hgetall"):
            raise ResponseError("WRONGTYPE")
    assert exc_info.value.operation == "hgetall"


def test_store_errors_leaves_other_exceptions_alone():
    with pytest.raises(KeyError):
        with store_errors("hgetall"):
            raise KeyError("x")


def test_connect_unreachable_raises_connection_error():
    settings = Settings(
        redis_url="redis://127.0.0.1:1", redis_socket_timeout_seconds=0.5,
    )
    with pytest.raises(StoreConnectionError):
        RedisStore.connect(settings)


def test_async_clients_required_for_async_calls():
    server = fakeredis.FakeServer()
    store = RedisStore(
        fakeredis.FakeRedis(server=server), fakeredis.FakeRedis(server=server),
    )
    with pytest.raises(RuntimeError):
        store.async_database


def test_context_manager_closes_clients(fake_server):
    with RedisStore(
        fakeredis.FakeRedis(server=fake_server), fakeredis.FakeRedis(server=fake_server),
    ) as store:
        assert store.health_check()


def test_connect_ping_failure_closes_clients(monkeypatch):
    closed = []

    def refuse(self, **kwargs):
        raise RedisConnectionError("refused")

    monkeypatch.setattr(redis.Redis, "ping", refuse)
    monkeypatch.setattr(redis.Redis, "close", lambda self: closed.append(self))

    with pytest.raises(StoreConnectionError) as exc_info:
        RedisStore.connect(Settings(redis_url="redis://127.0.0.1:1"))

    assert len({id(client) for client in closed}) == 2
    assert exc_info.value.message == "Redis connection failed: refused"
    assert exc_info.value.context.operation == "connect"
