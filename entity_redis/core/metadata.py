"""Entity Metadata - schema descriptors and pending mutations consumed by the engine.

Invariants:
    - EntityType is immutable for the lifetime of an operation (frozen dataclass)
    - Property names are unique within an EntityType
    - Property indexes form exactly 0..n-1 (they position decoded values)
    - The primary key is a non-empty, ordered subset of the declared properties
    - PendingMutation.original_values defaults to current_values

Design Decisions:
    - Metadata validated once at construction: readers and writers trust it
    - Property kinds are not validated here; an unknown kind surfaces as a
      decode error naming the property (see value_codec)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from entity_redis.core.domain_types import MutationKind, ScalarKind
from entity_redis.core.errors import EntityConfigurationError


@dataclass(frozen=True)
class Property:
    """One named, typed column of an entity type."""
    name: str
    kind: ScalarKind
    nullable: bool = False
    index: int = 0


@dataclass(frozen=True)
class EntityType:
    """Schema descriptor: name, ordered properties, ordered primary key."""
    name: str
    properties: tuple[Property, ...]
    key: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "properties", tuple(self.properties))
        object.__setattr__(self, "key", tuple(self.key))
        if not self.name:
            raise EntityConfigurationError("Entity type name must not be empty")

        names = [p.name for p in self.properties]
        if len(set(names)) != len(names):
            raise EntityConfigurationError(
                f"Duplicate property names in '{self.name}'", self.name,
            )
        if sorted(p.index for p in self.properties) != list(range(len(names))):
            raise EntityConfigurationError(
                f"Property indexes of '{self.name}' must be 0..{len(names) - 1}",
                self.name,
            )
        if not self.key:
            raise EntityConfigurationError(
                f"Entity type '{self.name}' has no primary key", self.name,
            )
        unknown = [k for k in self.key if k not in names]
        if unknown:
            raise EntityConfigurationError(
                f"Primary key of '{self.name}' names unknown properties: {', '.join(unknown)}",
                self.name,
            )

    @property
    def key_properties(self) -> tuple[Property, ...]:
        return tuple(self.get_property(name) for name in self.key)

    def get_property(self, name: str) -> Property:
        for prop in self.properties:
            if prop.name == name:
                return prop
        raise EntityConfigurationError(
            f"Entity type '{self.name}' has no property '{name}'", self.name,
        )


def _frozen(values: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class PendingMutation:
    """One insert/update/delete handed over by the change tracker.

    ``current_values`` holds every property's present value. ``original_values``
    holds the values as last persisted; only the primary-key properties are read
    from it. ``modified`` names the properties an update touched.
    """
    kind: MutationKind
    entity_type: EntityType
    current_values: Mapping[str, Any]
    original_values: Mapping[str, Any] = field(default_factory=dict)
    modified: frozenset[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "current_values", _frozen(self.current_values))
        object.__setattr__(
            self, "original_values",
            _frozen(self.original_values or self.current_values),
        )
        object.__setattr__(self, "modified", frozenset(self.modified))

    @classmethod
    def insert(cls, entity_type: EntityType, values: Mapping[str, Any]) -> "PendingMutation":
        return cls(MutationKind.INSERT, entity_type, values)

    @classmethod
    def update(
        cls,
        entity_type: EntityType,
        values: Mapping[str, Any],
        modified: set[str] | frozenset[str],
        original_values: Mapping[str, Any] | None = None,
    ) -> "PendingMutation":
        return cls(
            MutationKind.UPDATE, entity_type, values,
            original_values or {}, frozenset(modified),
        )

    @classmethod
    def delete(
        cls,
        entity_type: EntityType,
        values: Mapping[str, Any],
        original_values: Mapping[str, Any] | None = None,
    ) -> "PendingMutation":
        return cls(MutationKind.DELETE, entity_type, values, original_values or {})

    def current(self, prop: Property) -> Any:
        return self.current_values.get(prop.name)

    def original(self, prop: Property) -> Any:
        return self.original_values.get(prop.name)


@dataclass(frozen=True)
class RedisQuery:
    """Projection query descriptor: which properties to read for an entity type."""
    entity_type: EntityType
    selected_properties: tuple[Property, ...]

    def __post_init__(self):
        object.__setattr__(self, "selected_properties", tuple(self.selected_properties))
