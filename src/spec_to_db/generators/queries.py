"""Sample query generation for synthesized tables."""
from __future__ import annotations

from typing import Mapping

from spec_to_db.ddl.dialects import Dialect, get_dialect
from spec_to_db.schema.models import (
    STRING_TYPES,
    Relationship,
    RelationshipType,
    Table,
)
from spec_to_db.ddl.synthesizer import RESERVED_COLUMNS


def _pagination(dialect: Dialect) -> str:
    if dialect == Dialect.MSSQL:
        return "OFFSET 0 ROWS FETCH NEXT 10 ROWS ONLY"
    return "LIMIT 10 OFFSET 0"


def _child_foreign_key(child: Table, parent: str) -> str | None:
    for column in child.columns:
        if column.foreign_key is not None and column.foreign_key.table == parent:
            return column.name
    return None


def generate_sample_queries(
    table: Table,
    relationships: list[Relationship],
    tables: Mapping[str, Table],
    dialect: str | Dialect = Dialect.POSTGRESQL,
) -> str:
    """Generate example CRUD, search and join queries for one entity table.

    Args:
        table: Entity table to query
        relationships: All table relationships
        tables: Every synthesized table by name (join tables included)
        dialect: Dialect used for pagination syntax

    Returns:
        SQL text with one commented query per section
    """
    dialect = get_dialect(dialect)
    name = table.name
    data_columns = [c.name for c in table.columns if c.name not in RESERVED_COLUMNS]
    queries: list[str] = []

    queries.append(
        f"-- Basic select query\n"
        f"SELECT * FROM {name};\n\n"
        f"-- Select with pagination\n"
        f"SELECT * FROM {name}\n"
        f"ORDER BY created_at DESC\n"
        f"{_pagination(dialect)};\n\n"
        f"-- Select with specific columns\n"
        f"SELECT {', '.join(['id'] + data_columns)}\n"
        f"FROM {name};"
    )

    insert_columns = ["created_at", "updated_at"] + data_columns
    insert_values = ["CURRENT_TIMESTAMP", "CURRENT_TIMESTAMP"] + [f":{c}" for c in data_columns]
    queries.append(
        f"-- Insert new record\n"
        f"INSERT INTO {name} ({', '.join(insert_columns)})\n"
        f"VALUES ({', '.join(insert_values)});"
    )

    assignments = ",\n    ".join(
        [f"{c} = :{c}" for c in data_columns] + ["updated_at = CURRENT_TIMESTAMP"]
    )
    queries.append(
        f"-- Update record\n"
        f"UPDATE {name}\n"
        f"SET {assignments}\n"
        f"WHERE id = :id;"
    )

    queries.append(
        f"-- Delete record\n"
        f"DELETE FROM {name}\n"
        f"WHERE id = :id;"
    )

    searchable = [c.name for c in table.columns if c.abstract_type in STRING_TYPES]
    if searchable:
        conditions = "\n   OR ".join(f"{c} LIKE :search" for c in searchable)
        queries.append(
            f"-- Search in text columns\n"
            f"SELECT *\n"
            f"FROM {name}\n"
            f"WHERE {conditions};"
        )

    for relationship in relationships:
        if relationship.from_table != name:
            continue
        target = relationship.to_table

        if relationship.type == RelationshipType.MANY_TO_MANY:
            join = tables.get(relationship.through_table)
            if join is None or len(join.columns) != 2:
                continue
            source_column, target_column = join.columns[0].name, join.columns[1].name
            queries.append(
                f"-- Get all {target} for {name}\n"
                f"SELECT t.*\n"
                f"FROM {target} t\n"
                f"JOIN {join.name} j ON j.{target_column} = t.id\n"
                f"WHERE j.{source_column} = :id;"
            )
        elif relationship.type == RelationshipType.ONE_TO_MANY:
            child = tables.get(target)
            foreign_key = _child_foreign_key(child, name) if child else None
            if foreign_key is None:
                continue
            queries.append(
                f"-- Get all {target} for {name}\n"
                f"SELECT t.*\n"
                f"FROM {target} t\n"
                f"WHERE t.{foreign_key} = :id;"
            )
        elif relationship.foreign_key:
            queries.append(
                f"-- Get {target} for {name}\n"
                f"SELECT t.*\n"
                f"FROM {target} t\n"
                f"JOIN {name} s ON s.{relationship.foreign_key} = t.id\n"
                f"WHERE s.id = :id;"
            )

    return "\n\n".join(queries) + "\n"
