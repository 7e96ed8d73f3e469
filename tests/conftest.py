"""Root conftest - shared entity types and an in-process Redis.

Invariants:
    - Every test gets a fresh fakeredis server (no state leaks between tests)
    - Sync and asyncio clients of one store share the same server
    - No test talks to a real Redis unless it asks for an unreachable address

Design Decisions:
    - fakeredis over a docker Redis: fast, no external dependency, supports
      WATCH/MULTI/EXEC which the batch writer relies on
"""

import os

import fakeredis
import pytest

from entity_redis.core.domain_types import ScalarKind
from entity_redis.core.metadata import EntityType, Property
from entity_redis.infrastructure.store import RedisStore

# Ensure settings never pick up a developer's real Redis by accident
os.environ.setdefault("ENTITY_REDIS_REDIS_URL", "redis://127.0.0.1:6379")


@pytest.fixture
def customer_type() -> EntityType:
    return EntityType(
        name="Customer",
        properties=(
            Property("Id", ScalarKind.INT32, nullable=False, index=0),
            Property("Name", ScalarKind.TEXT, nullable=True, index=1),
            Property("Age", ScalarKind.INT32, nullable=True, index=2),
        ),
        key=("Id",),
    )


@pytest.fixture
def order_line_type() -> EntityType:
    return EntityType(
        name="OrderLine",
        properties=(
            Property("Sku", ScalarKind.TEXT, nullable=False, index=2),
            Property("OrderId", ScalarKind.INT64, nullable=False, index=0),
            Property("LineNo", ScalarKind.INT16, nullable=False, index=1),
            Property("Quantity", ScalarKind.UINT32, nullable=False, index=3),
        ),
        key=("OrderId", "LineNo"),
    )


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def store(fake_server) -> RedisStore:
    return RedisStore(
        fakeredis.FakeRedis(server=fake_server),
        fakeredis.FakeRedis(server=fake_server),
        fakeredis.FakeAsyncRedis(server=fake_server),
        fakeredis.FakeAsyncRedis(server=fake_server),
    )


@pytest.fixture
def redis_client(store):
    """Raw client for asserting on stored keys."""
    return store.database
