"""Boundary Protocols - contracts between the pure core and the Redis shell.

Invariants:
    - Core NEVER imports redis-py; it only sees these structural types
    - CommandQueue matches a redis-py pipeline in MULTI mode (sync or asyncio),
      where every call buffers a command and returns immediately

Design Decisions:
    - Protocol over ABC: structural subtyping, threading.Event / asyncio.Event
      satisfy CancellationSignal without adapters
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from entity_redis.core.metadata import EntityType


class CancellationSignal(Protocol):
    """Cooperative cancellation flag, polled at coarse checkpoints only."""
    def is_set(self) -> bool: ...


class CommandQueue(Protocol):
    """Subset of a transactional pipeline the batch plan queues onto."""
    def hset(self, name: str, *, mapping: Mapping[str, bytes]) -> Any: ...
    def hdel(self, name: str, *keys: str) -> Any: ...
    def delete(self, *names: str) -> Any: ...
    def sadd(self, name: str, *values: str) -> Any: ...
    def srem(self, name: str, *values: str) -> Any: ...


# Hook supplied by the caller's change tracker to turn a positioned value
# list into an entity object.
Materializer = Callable[[EntityType, Sequence[Any]], Any]


def is_cancelled(cancel: CancellationSignal | None) -> bool:
    return cancel is not None and cancel.is_set()
