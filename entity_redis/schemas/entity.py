"""Entity Schemas - Pydantic models describing entity types declaratively.

Invariants:
    - EntityTypeSchema.name is non-empty and stripped
    - Property names are unique; key names reference declared properties
    - Property kinds must be ScalarKind values
    - to_entity_type() assigns Property.index by declaration order

Design Decisions:
    - model_validator for cross-field checks (key vs properties) so errors
      surface as pydantic ValidationError at the boundary, before core metadata
      is built
    - A key property is never nullable: a null key has no composite encoding
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from entity_redis.core.domain_types import ScalarKind
from entity_redis.core.metadata import EntityType, Property


class PropertySchema(BaseModel):
    """One property declaration."""
    name: str = Field(min_length=1)
    kind: ScalarKind
    nullable: bool = False


class EntityTypeSchema(BaseModel):
    """Entity type declaration - validates names, key, and kinds."""
    name: str = Field(min_length=1)
    properties: list[PropertySchema] = Field(min_length=1)
    key: list[str] = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def check_key(self) -> "EntityTypeSchema":
        names = [p.name for p in self.properties]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate property names: {', '.join(duplicates)}")
        by_name = {p.name: p for p in self.properties}
        for key_name in self.key:
            if key_name not in by_name:
                raise ValueError(f"key property '{key_name}' is not declared")
            if by_name[key_name].nullable:
                raise ValueError(f"key property '{key_name}' cannot be nullable")
        if len(set(self.key)) != len(self.key):
            raise ValueError("key lists a property more than once")
        return self

    def to_entity_type(self) -> EntityType:
        return EntityType(
            name=self.name,
            properties=tuple(
                Property(p.name, p.kind, p.nullable, index)
                for index, p in enumerate(self.properties)
            ),
            key=tuple(self.key),
        )


def load_entity_types(documents: list[dict]) -> dict[str, EntityType]:
    """Validate a list of declarations; returns entity types keyed by name."""
    entity_types = [EntityTypeSchema.model_validate(d).to_entity_type() for d in documents]
    result = {et.name: et for et in entity_types}
    if len(result) != len(entity_types):
        raise ValueError("entity type names must be unique")
    return result
