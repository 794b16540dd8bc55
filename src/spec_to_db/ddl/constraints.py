"""Column-level constraint clauses derived from validation keywords."""
from __future__ import annotations

from spec_to_db.ddl.dialects import Dialect, get_profile, is_character_type, map_type
from spec_to_db.schema.models import (
    NUMERIC_TYPES,
    STRING_TYPES,
    AbstractType,
    PropertyConstraints,
    SchemaProperty,
)


def _sql_number(value: float | int) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _sql_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def build_constraints(
    name: str,
    abstract_type: AbstractType | None,
    constraints: PropertyConstraints | None,
    dialect: str | Dialect,
    column_type: str | None = None,
) -> list[str]:
    """Build constraint clauses for one column.

    Clause order is fixed: UNIQUE, length bounds, value bounds, pattern.
    Length and pattern checks only apply to string types rendered as
    character columns (a native UUID column gets neither), value bounds
    only to numeric types.

    Args:
        name: Column name used inside CHECK expressions
        abstract_type: Abstract type of the column
        constraints: Validation keywords, or None
        dialect: Target dialect
        column_type: Rendered column type; derived from the abstract type
            when omitted

    Returns:
        Ordered list of clauses (possibly empty)
    """
    if constraints is None:
        return []

    profile = get_profile(dialect)
    if column_type is None:
        column_type = map_type(abstract_type, None, profile.dialect)
    is_string = abstract_type in STRING_TYPES and is_character_type(column_type)
    is_numeric = abstract_type in NUMERIC_TYPES
    clauses: list[str] = []

    if constraints.unique:
        clauses.append("UNIQUE")

    if is_string:
        if constraints.min_length is not None:
            clauses.append(f"CHECK ({profile.length_function}({name}) >= {constraints.min_length})")
        if constraints.max_length is not None:
            clauses.append(f"CHECK ({profile.length_function}({name}) <= {constraints.max_length})")

    if is_numeric:
        if constraints.minimum is not None:
            clauses.append(f"CHECK ({name} >= {_sql_number(constraints.minimum)})")
        if constraints.maximum is not None:
            clauses.append(f"CHECK ({name} <= {_sql_number(constraints.maximum)})")

    if is_string and constraints.pattern:
        clauses.append(
            f"CHECK ({name} {profile.regex_operator} {_sql_string(constraints.pattern)})"
        )

    return clauses


def build_property_constraints(prop: SchemaProperty, dialect: str | Dialect) -> list[str]:
    """Constraint clauses for a schema property."""
    column_type = map_type(prop.type, prop.format, dialect)
    return build_constraints(prop.name, prop.type, prop.constraints, dialect, column_type)
