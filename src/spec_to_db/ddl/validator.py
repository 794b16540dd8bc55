"""Emitted DDL validation using sqlglot.

Parses generated statements back in the target dialect so syntax
problems surface as warnings before the script reaches a database.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from spec_to_db.ddl.dialects import Dialect, get_profile
from spec_to_db.ddl.synthesizer import SynthesisWarning

logger = logging.getLogger(__name__)


@dataclass
class ParsedColumn:
    """Column definition read back from a CREATE TABLE."""
    name: str
    data_type: str


@dataclass
class ParsedTable:
    """CREATE TABLE statement read back through sqlglot."""
    table_name: str
    columns: list[ParsedColumn] = field(default_factory=list)


def parse_create_table(statement: str, dialect: str | Dialect = Dialect.POSTGRESQL) -> ParsedTable | None:
    """Parse a CREATE TABLE statement.

    Args:
        statement: SQL CREATE TABLE statement
        dialect: Dialect the statement was emitted for

    Returns:
        ParsedTable, or None if the statement is not a CREATE TABLE

    Raises:
        sqlglot.errors.ParseError: If the statement is not valid SQL
    """
    read = get_profile(dialect).sqlglot_dialect
    parsed = sqlglot.parse_one(statement, read=read)
    if not isinstance(parsed, exp.Create):
        return None

    schema_expr = parsed.this
    if not isinstance(schema_expr, exp.Schema):
        return None

    table_info = schema_expr.this
    table_name = table_info.name if hasattr(table_info, "name") else str(table_info)

    columns = []
    for expr in schema_expr.expressions:
        if isinstance(expr, exp.ColumnDef):
            kind = expr.args.get("kind")
            columns.append(ParsedColumn(
                name=expr.name,
                data_type=kind.sql(dialect=read) if kind is not None else "",
            ))

    return ParsedTable(table_name=table_name, columns=columns)


def validate_statements(statements: list[str], dialect: str | Dialect) -> list[SynthesisWarning]:
    """Parse every statement with sqlglot and report the ones that fail.

    Args:
        statements: Emitted DDL statements
        dialect: Target dialect

    Returns:
        One warning per statement sqlglot could not parse
    """
    read = get_profile(dialect).sqlglot_dialect
    warnings: list[SynthesisWarning] = []

    for statement in statements:
        try:
            sqlglot.parse_one(statement, read=read)
        except (ParseError, TokenError) as e:
            first_line = statement.splitlines()[0] if statement else ""
            warning = SynthesisWarning(
                table=first_line,
                column=None,
                message=f"sqlglot could not parse statement: {e}",
            )
            logger.warning(str(warning))
            warnings.append(warning)

    return warnings
