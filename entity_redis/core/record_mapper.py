"""Record Mapper - one logical record to and from a Redis hash.

Invariants:
    - Field name = property name, exact and unescaped
    - A field is present iff the property's value is non-null (absence is null)
    - Absent fields yield None without invoking the codec
    - Full reads position values by Property.index; projections by selection order

Design Decisions:
    - Write path returns (upserts, removals) instead of issuing commands:
      batch_plan decides which half applies to inserts vs updates
"""

from collections.abc import Collection, Mapping, Sequence
from typing import Any

from entity_redis.core.metadata import EntityType, Property
from entity_redis.core.value_codec import decode_value, encode_value


def split_values(
    entity_type: EntityType,
    values: Mapping[str, Any],
    only: Collection[str] | None = None,
) -> tuple[dict[str, bytes], tuple[str, ...]]:
    """Split property values into encoded field upserts and field removals.

    When ``only`` is given, properties outside it are left out of both halves.
    """
    upserts: dict[str, bytes] = {}
    removals: list[str] = []
    for prop in entity_type.properties:
        if only is not None and prop.name not in only:
            continue
        value = values.get(prop.name)
        if value is None:
            removals.append(prop.name)
        else:
            upserts[prop.name] = encode_value(value, prop.kind, prop.name)
    return upserts, tuple(removals)


def _field_name(name: bytes | str) -> str:
    return name.decode("utf-8") if isinstance(name, bytes) else name


def materialize_values(
    entity_type: EntityType, snapshot: Mapping[bytes | str, bytes],
) -> list[Any]:
    """Decode a full HGETALL snapshot into a list positioned by Property.index."""
    fields = {_field_name(k): v for k, v in snapshot.items()}
    results: list[Any] = [None] * len(entity_type.properties)
    for prop in entity_type.properties:
        raw = fields.get(prop.name)
        if raw is not None:
            results[prop.index] = decode_value(raw, prop)
    return results


def project_values(
    selected: Sequence[Property], fetched: Sequence[bytes | None],
) -> list[Any]:
    """Decode an HMGET reply, one slot per selected property."""
    return [
        decode_value(raw, prop) if raw is not None else None
        for prop, raw in zip(selected, fetched)
    ]


def record_as_dict(entity_type: EntityType, values: Sequence[Any]) -> dict[str, Any]:
    """Materializer mapping property names to a positioned value list."""
    return {prop.name: values[prop.index] for prop in entity_type.properties}
