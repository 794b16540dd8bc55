"""Intermediate and relational data model.

Two layers:
- the database-agnostic schema model produced by extraction
  (Schema, SchemaProperty, SchemaRelation, PropertyConstraints)
- the relational model produced by synthesis (Table, Column, Index,
  ForeignKey, Relationship, DatabaseSchema)

Everything is frozen; collections are tuples.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class AbstractType(str, Enum):
    """Dialect-independent column type tag."""
    INTEGER = "integer"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    FLOAT = "float"
    STRING = "string"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESTAMP = "timestamp"
    JSON = "json"
    BLOB = "blob"


STRING_TYPES = frozenset({AbstractType.STRING, AbstractType.TEXT})
NUMERIC_TYPES = frozenset({
    AbstractType.INTEGER,
    AbstractType.BIGINT,
    AbstractType.DECIMAL,
    AbstractType.FLOAT,
})


class RelationType(str, Enum):
    """Relation kind as declared on a schema."""
    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"


class RelationshipType(str, Enum):
    """Relation kind between two tables."""
    ONE_TO_ONE = "ONE_TO_ONE"
    ONE_TO_MANY = "ONE_TO_MANY"
    MANY_TO_ONE = "MANY_TO_ONE"
    MANY_TO_MANY = "MANY_TO_MANY"


def default_foreign_key(target_schema: str) -> str:
    """Foreign key column derived from a target schema name."""
    return f"{target_schema.lower()}_id"


# =============================================================================
# Schema model
# =============================================================================

@dataclass(frozen=True)
class PropertyConstraints:
    """Validation keywords copied from an OpenAPI property."""
    unique: bool | None = None
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | int | None = None
    maximum: float | int | None = None
    pattern: str | None = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is None
            for name in ("unique", "min_length", "max_length", "minimum", "maximum", "pattern")
        )

    @classmethod
    def from_mapping(cls, definition: Mapping[str, Any]) -> PropertyConstraints | None:
        """Build constraints from an OpenAPI property definition.

        Returns None when the definition carries no validation keywords,
        so an empty bag is never attached to a property.
        """
        unique = definition.get("unique", definition.get("x-unique"))
        constraints = cls(
            unique=bool(unique) if unique is not None else None,
            min_length=definition.get("minLength"),
            max_length=definition.get("maxLength"),
            minimum=definition.get("minimum"),
            maximum=definition.get("maximum"),
            pattern=definition.get("pattern"),
        )
        if constraints.is_empty():
            return None
        return constraints


@dataclass(frozen=True)
class SchemaProperty:
    """A plain (non-reference) property of a schema."""
    name: str
    type: AbstractType
    required: bool = False
    default: Any = None
    constraints: PropertyConstraints | None = None
    format: str | None = None

    @property
    def is_unique(self) -> bool:
        return bool(self.constraints and self.constraints.unique)


@dataclass(frozen=True)
class SchemaRelation:
    """A reference from one schema to another, looked up by name."""
    type: RelationType
    target_schema: str
    foreign_key: str
    property_name: str = ""
    join_table: str | None = None
    required: bool = False
    on_delete: str | None = None
    on_update: str | None = None

    @property
    def is_to_one(self) -> bool:
        """Whether this relation puts a foreign key column on its owner."""
        return self.type in (RelationType.ONE_TO_ONE, RelationType.MANY_TO_ONE)


@dataclass(frozen=True)
class Schema:
    """One OpenAPI object schema."""
    name: str
    properties: tuple[SchemaProperty, ...] = ()
    relations: tuple[SchemaRelation, ...] = ()
    title: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Schema name must be non-empty")


# =============================================================================
# Relational model
# =============================================================================

@dataclass(frozen=True)
class SqlExpression:
    """A column default rendered verbatim (e.g. CURRENT_TIMESTAMP)."""
    sql: str

    def __str__(self) -> str:
        return self.sql


@dataclass(frozen=True)
class ForeignKey:
    """Reference from a column to another table's column."""
    table: str
    column: str = "id"
    on_delete: str | None = None
    on_update: str | None = None


@dataclass(frozen=True)
class Column:
    """A table column with its dialect-rendered type."""
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    auto_increment: bool = False
    unique: bool = False
    default: Any = None
    foreign_key: ForeignKey | None = None
    abstract_type: AbstractType | None = None
    constraints: PropertyConstraints | None = None


@dataclass(frozen=True)
class Index:
    """Secondary index on a table."""
    name: str
    columns: tuple[str, ...]
    unique: bool = False


@dataclass(frozen=True)
class Table:
    """A relational table."""
    name: str
    columns: tuple[Column, ...]
    indices: tuple[Index, ...] = ()
    primary_key: tuple[str, ...] = ("id",)
    is_join_table: bool = False

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def get_column(self, name: str) -> Column | None:
        return next((c for c in self.columns if c.name == name), None)


@dataclass(frozen=True)
class Relationship:
    """A relationship between two tables."""
    from_table: str
    to_table: str
    type: RelationshipType
    through_table: str | None = None
    foreign_key: str | None = None


@dataclass(frozen=True)
class DatabaseSchema:
    """Structured output consumed by downstream generators."""
    tables: tuple[Table, ...] = field(default_factory=tuple)
    relationships: tuple[Relationship, ...] = field(default_factory=tuple)
