"""Query Executor - enumerates an entity type's records through its primary-key index.

Invariants:
    - Keys come from SMEMBERS of the type's index; yield order is unspecified
    - Full reads: one HGETALL per key, every declared property decoded
    - Projections: one HMGET per key, only the selected properties decoded
    - Results are lazy generators: a decode error stops the enumeration there
    - No cross-key read consistency; each command is atomic on its own key

Design Decisions:
    - Materialization is a caller hook (Materializer); without one, the raw
      positioned value list is yielded
"""

import logging
from collections.abc import Iterator
from typing import Any

from entity_redis.core.domain_types import CompositeKey
from entity_redis.core.key_naming import data_key_name, primary_key_index_name
from entity_redis.core.metadata import EntityType, RedisQuery
from entity_redis.core.record_mapper import materialize_values, project_values
from entity_redis.core.store_protocols import Materializer
from entity_redis.infrastructure.store import RedisStore, store_errors

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Read side of the mapping: index enumeration plus per-key hash reads."""

    def __init__(self, store: RedisStore):
        self.store = store

    def _index_members(self, entity_type: EntityType) -> list[CompositeKey]:
        index_key = primary_key_index_name(entity_type.name)
        with store_errors("smembers", index_key):
            members = self.store.database.smembers(index_key)
        logger.debug(
            f"Enumerating {len(members)} key(s)",
            extra={"entity_type": entity_type.name, "key_name": index_key},
        )
        return [CompositeKey(m.decode("utf-8")) for m in members]

    def iter_records(
        self, entity_type: EntityType, materialize: Materializer | None = None,
    ) -> Iterator[Any]:
        """Yield every persisted record of the type, fully decoded."""
        for key in self._index_members(entity_type):
            data_key = data_key_name(entity_type.name, key)
            with store_errors("hgetall", data_key):
                snapshot = self.store.database.hgetall(data_key)
            values = materialize_values(entity_type, snapshot)
            yield materialize(entity_type, values) if materialize else values

    def iter_projections(self, query: RedisQuery) -> Iterator[list[Any]]:
        """Yield the selected property values of every persisted record."""
        selected = query.selected_properties
        fields = [p.name for p in selected]
        for key in self._index_members(query.entity_type):
            data_key = data_key_name(query.entity_type.name, key)
            with store_errors("hmget", data_key):
                fetched = self.store.database.hmget(data_key, fields) if fields else []
            yield project_values(selected, fetched)
