"""DDL statement emission.

Statement order:
1. CREATE TABLE for every entity table, in input order
2. CREATE UNIQUE INDEX for unique properties
3. CREATE TABLE for join tables (both referenced tables exist by now)
4. ALTER TABLE ... ADD CONSTRAINT ... FOREIGN KEY for to-one relationships

Foreign keys always trail the table declarations so forward references
never fail. SQLite cannot add constraints with ALTER TABLE; there the
foreign keys are declared inline and step 4 is skipped.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from spec_to_db.ddl.constraints import build_constraints
from spec_to_db.ddl.dialects import Dialect, DialectProfile, get_profile
from spec_to_db.schema.models import (
    Column,
    ForeignKey,
    Relationship,
    RelationshipType,
    SqlExpression,
    Table,
)

logger = logging.getLogger(__name__)

_TO_ONE = (RelationshipType.ONE_TO_ONE, RelationshipType.MANY_TO_ONE)


def format_default(value: Any, profile: DialectProfile) -> str:
    """Render a default value as a SQL literal."""
    if isinstance(value, SqlExpression):
        return value.sql
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return profile.true_literal if value else profile.false_literal
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"))
    return "'" + str(value).replace("'", "''") + "'"


def render_column(column: Column, profile: DialectProfile, composite_key: bool = False) -> str:
    """Render one column definition: name, type, nullability, default, constraints."""
    if column.primary_key and column.auto_increment and not composite_key:
        return f"{column.name} {profile.render_primary_key()}"

    parts = [column.name, column.type, "NULL" if column.nullable else "NOT NULL"]
    if column.default is not None:
        parts.append(f"DEFAULT {format_default(column.default, profile)}")
    parts.extend(build_constraints(
        column.name, column.abstract_type, column.constraints, profile.dialect, column.type
    ))
    if column.primary_key and not composite_key:
        parts.append("PRIMARY KEY")
    return " ".join(parts)


def _references(fk: ForeignKey) -> str:
    clause = f"REFERENCES {fk.table}({fk.column})"
    if fk.on_delete:
        clause += f" ON DELETE {fk.on_delete}"
    if fk.on_update:
        clause += f" ON UPDATE {fk.on_update}"
    return clause


def render_create_table(table: Table, profile: DialectProfile) -> str:
    """Render a CREATE TABLE statement."""
    composite = len(table.primary_key) > 1
    lines = [render_column(c, profile, composite_key=composite) for c in table.columns]

    if composite:
        lines.append(f"PRIMARY KEY ({', '.join(table.primary_key)})")

    # Join tables always carry inline keys; entity tables only where ALTER cannot add them
    if table.is_join_table or not profile.alter_add_constraint:
        for column in table.columns:
            if column.foreign_key is not None:
                lines.append(f"FOREIGN KEY ({column.name}) {_references(column.foreign_key)}")

    body = ",\n  ".join(lines)
    return f"CREATE TABLE {table.name} (\n  {body}\n);"


def render_foreign_key(table: str, column: Column) -> str:
    """Render a trailing ALTER TABLE ... ADD CONSTRAINT statement."""
    return (
        f"ALTER TABLE {table}\n"
        f"  ADD CONSTRAINT fk_{table}_{column.name}\n"
        f"  FOREIGN KEY ({column.name})\n"
        f"  {_references(column.foreign_key)};"
    )


def render_index(table: str, index_name: str, columns: Iterable[str], unique: bool) -> str:
    kind = "UNIQUE INDEX" if unique else "INDEX"
    return f"CREATE {kind} {index_name} ON {table} ({', '.join(columns)});"


def emit(
    tables: list[Table],
    relationships: list[Relationship],
    dialect: str | Dialect,
) -> list[str]:
    """Emit the ordered DDL statements for a set of tables.

    Args:
        tables: Entity and join tables (join tables flagged is_join_table)
        relationships: Table relationships from resolution
        dialect: Target dialect

    Returns:
        Ordered list of SQL statements, each terminated with ';'
    """
    profile = get_profile(dialect)
    entity_tables = [t for t in tables if not t.is_join_table]
    join_tables = [t for t in tables if t.is_join_table]
    by_name = {t.name: t for t in tables}
    statements: list[str] = []

    for table in entity_tables:
        statements.append(render_create_table(table, profile))

    for table in entity_tables:
        for index in table.indices:
            statements.append(render_index(table.name, index.name, index.columns, index.unique))

    for table in join_tables:
        statements.append(render_create_table(table, profile))

    if profile.alter_add_constraint:
        for relationship in relationships:
            if relationship.type not in _TO_ONE or not relationship.foreign_key:
                continue
            table = by_name.get(relationship.from_table)
            column = table.get_column(relationship.foreign_key) if table else None
            if column is None or column.foreign_key is None:
                logger.debug(f"No foreign key column for {relationship}, skipping")
                continue
            statements.append(render_foreign_key(table.name, column))

    logger.info(f"Emitted {len(statements)} statements for {profile.dialect.value}")
    return statements


def render_ddl(statements: list[str]) -> str:
    """Join statements into one script separated by blank lines."""
    if not statements:
        return ""
    return "\n\n".join(statements) + "\n"
