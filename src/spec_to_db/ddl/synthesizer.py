"""Table synthesis from resolved schemas.

Entity tables have a fixed column layout:
    id, created_at, updated_at, <properties...>, <foreign keys...>

Many-to-many relations produce separate join tables with a two-column
composite primary key and no surrogate id.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from spec_to_db.ddl.dialects import Dialect, get_profile, map_type
from spec_to_db.schema.models import (
    AbstractType,
    Column,
    ForeignKey,
    Index,
    Relationship,
    RelationshipType,
    Schema,
    SchemaProperty,
    SchemaRelation,
    SqlExpression,
    Table,
)
from spec_to_db.schema.resolver import ResolutionResult

logger = logging.getLogger(__name__)

RESERVED_COLUMNS = ("id", "created_at", "updated_at")


class ComplexPropertyPolicy(str, Enum):
    """What to do with JSON-typed properties on dialects without a JSON type."""
    DROP = "drop"
    TEXT = "text"


@dataclass(frozen=True)
class SynthesisWarning:
    """Non-fatal problem found while lowering schemas to tables."""
    table: str
    column: str | None
    message: str

    def __str__(self) -> str:
        location = f"{self.table}.{self.column}" if self.column else self.table
        return f"{location}: {self.message}"


class TableSynthesizer:
    """Builds Table entities for one dialect.

    Non-fatal problems are collected on `warnings`.
    """

    def __init__(
        self,
        dialect: str | Dialect,
        table_names: Mapping[str, str] | None = None,
        complex_properties: ComplexPropertyPolicy | str = ComplexPropertyPolicy.DROP,
    ) -> None:
        self.profile = get_profile(dialect)
        self.dialect = self.profile.dialect
        self.table_names = table_names or {}
        self.complex_properties = ComplexPropertyPolicy(complex_properties)
        self.warnings: list[SynthesisWarning] = []

    def table_for(self, schema_name: str) -> str:
        return self.table_names.get(schema_name, schema_name.lower())

    def _warn(self, table: str, column: str | None, message: str) -> None:
        warning = SynthesisWarning(table, column, message)
        logger.warning(str(warning))
        self.warnings.append(warning)

    def synthesize(self, schema: Schema, relations: tuple[SchemaRelation, ...] | list[SchemaRelation]) -> Table:
        """Build the entity table for one schema.

        Args:
            schema: Extracted schema
            relations: Resolved relations of the schema

        Returns:
            Table with id, audit columns, property columns and foreign keys
        """
        table_name = self.table_for(schema.name)
        timestamp_type = map_type(AbstractType.TIMESTAMP, None, self.dialect)
        columns: list[Column] = [
            Column(
                name="id",
                type=self.profile.primary_key_type,
                nullable=False,
                primary_key=True,
                auto_increment=True,
            ),
            Column(
                name="created_at",
                type=timestamp_type,
                nullable=False,
                default=SqlExpression(self.profile.timestamp_default),
            ),
            Column(
                name="updated_at",
                type=timestamp_type,
                nullable=False,
                default=SqlExpression(self.profile.timestamp_default),
            ),
        ]
        indices: list[Index] = []

        for prop in schema.properties:
            if prop.name in RESERVED_COLUMNS:
                logger.info(f"{table_name}.{prop.name} is generated automatically, skipping property")
                continue
            column = self._property_column(table_name, prop)
            if column is None:
                continue
            columns.append(column)
            if prop.is_unique:
                indices.append(Index(
                    name=f"{schema.name.lower()}_{prop.name}_unique",
                    columns=(prop.name,),
                    unique=True,
                ))

        names = {c.name for c in columns}
        for relation in relations:
            if not relation.is_to_one:
                continue
            if relation.foreign_key in names:
                self._warn(
                    table_name, relation.foreign_key,
                    f"foreign key to {relation.target_schema} collides with an existing column",
                )
                continue
            names.add(relation.foreign_key)
            columns.append(Column(
                name=relation.foreign_key,
                type=self.profile.primary_key_type,
                nullable=not relation.required,
                foreign_key=ForeignKey(
                    table=self.table_for(relation.target_schema),
                    column="id",
                    on_delete=relation.on_delete,
                    on_update=relation.on_update,
                ),
                abstract_type=AbstractType.INTEGER,
            ))

        return Table(name=table_name, columns=tuple(columns), indices=tuple(indices))

    def _property_column(self, table_name: str, prop: SchemaProperty) -> Column | None:
        if prop.type == AbstractType.JSON and not self.profile.native_json:
            if self.complex_properties == ComplexPropertyPolicy.DROP:
                self._warn(
                    table_name, prop.name,
                    f"complex property dropped: {self.dialect.value} has no native JSON type",
                )
                return None
            logger.debug(f"{table_name}.{prop.name} stored as text on {self.dialect.value}")

        return Column(
            name=prop.name,
            type=map_type(prop.type, prop.format, self.dialect),
            nullable=not prop.required,
            unique=prop.is_unique,
            default=prop.default,
            abstract_type=prop.type,
            constraints=prop.constraints,
        )

    def synthesize_join_table(self, relationship: Relationship) -> Table:
        """Build the join table of a many-to-many relationship."""
        if relationship.type != RelationshipType.MANY_TO_MANY or not relationship.through_table:
            raise ValueError(f"Not a many-to-many relationship: {relationship}")

        source, target = relationship.from_table, relationship.to_table
        source_column = f"{source}_id"
        target_column = f"{target}_id" if target != source else f"related_{target}_id"

        columns = tuple(
            Column(
                name=name,
                type=self.profile.primary_key_type,
                nullable=False,
                primary_key=True,
                foreign_key=ForeignKey(table=table, column="id", on_delete="CASCADE"),
                abstract_type=AbstractType.INTEGER,
            )
            for name, table in ((source_column, source), (target_column, target))
        )
        return Table(
            name=relationship.through_table,
            columns=columns,
            primary_key=(source_column, target_column),
            is_join_table=True,
        )

    def synthesize_all(self, schemas: list[Schema], resolution: ResolutionResult) -> list[Table]:
        """Entity tables in schema order followed by join tables."""
        tables = [self.synthesize(s, resolution.relations_for(s.name)) for s in schemas]
        tables.extend(
            self.synthesize_join_table(r)
            for r in resolution.relationships
            if r.type == RelationshipType.MANY_TO_MANY
        )
        logger.info(f"Synthesized {len(tables)} tables for {self.dialect.value}")
        return tables
