"""SQL dialect profiles and the abstract type mapper.

Every dialect carries a complete lookup table over AbstractType, so
map_type is total: unknown tags fall back to the dialect's generic
string type instead of raising.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from spec_to_db.errors import UnsupportedDialectError
from spec_to_db.schema.models import AbstractType

logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    """Supported target database engines."""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    SQLITE = "sqlite"
    MSSQL = "mssql"


_DIALECT_ALIASES = {
    "postgres": Dialect.POSTGRESQL,
    "pg": Dialect.POSTGRESQL,
    "sqlserver": Dialect.MSSQL,
    "tsql": Dialect.MSSQL,
}


def get_dialect(value: str | Dialect) -> Dialect:
    """Resolve a dialect name (or alias) to a Dialect.

    Raises:
        UnsupportedDialectError: If the name is not a known dialect
    """
    if isinstance(value, Dialect):
        return value
    key = str(value).strip().lower()
    if key in _DIALECT_ALIASES:
        return _DIALECT_ALIASES[key]
    try:
        return Dialect(key)
    except ValueError:
        raise UnsupportedDialectError(str(value)) from None


@dataclass(frozen=True)
class DialectProfile:
    """Type vocabulary and syntax details of one dialect."""
    dialect: Dialect
    types: Mapping[AbstractType, str]
    uuid_type: str
    double_type: str
    primary_key_type: str
    primary_key_template: str  # formatted with the primary key type
    timestamp_default: str
    length_function: str = "LENGTH"
    regex_operator: str = "REGEXP"
    true_literal: str = "1"
    false_literal: str = "0"
    native_json: bool = False
    alter_add_constraint: bool = True
    sqlglot_dialect: str = field(default="")

    @property
    def generic_string(self) -> str:
        return self.types[AbstractType.STRING]

    def render_primary_key(self) -> str:
        """Type and constraint clause of the surrogate `id` column."""
        return self.primary_key_template.format(type=self.primary_key_type)


_MYSQL_TYPES = {
    AbstractType.INTEGER: "INT",
    AbstractType.BIGINT: "BIGINT",
    AbstractType.DECIMAL: "DECIMAL",
    AbstractType.FLOAT: "FLOAT",
    AbstractType.STRING: "VARCHAR(255)",
    AbstractType.TEXT: "TEXT",
    AbstractType.BOOLEAN: "TINYINT(1)",
    AbstractType.DATE: "DATE",
    AbstractType.TIMESTAMP: "TIMESTAMP",
    AbstractType.JSON: "JSON",
    AbstractType.BLOB: "BLOB",
}


PROFILES: dict[Dialect, DialectProfile] = {
    Dialect.POSTGRESQL: DialectProfile(
        dialect=Dialect.POSTGRESQL,
        types={
            AbstractType.INTEGER: "INTEGER",
            AbstractType.BIGINT: "BIGINT",
            AbstractType.DECIMAL: "DECIMAL",
            AbstractType.FLOAT: "REAL",
            AbstractType.STRING: "VARCHAR(255)",
            AbstractType.TEXT: "TEXT",
            AbstractType.BOOLEAN: "BOOLEAN",
            AbstractType.DATE: "DATE",
            AbstractType.TIMESTAMP: "TIMESTAMP",
            AbstractType.JSON: "JSONB",
            AbstractType.BLOB: "BYTEA",
        },
        uuid_type="UUID",
        double_type="DOUBLE PRECISION",
        primary_key_type="INTEGER",
        primary_key_template="{type} GENERATED ALWAYS AS IDENTITY PRIMARY KEY",
        timestamp_default="CURRENT_TIMESTAMP",
        regex_operator="~",
        true_literal="TRUE",
        false_literal="FALSE",
        native_json=True,
        sqlglot_dialect="postgres",
    ),
    Dialect.MYSQL: DialectProfile(
        dialect=Dialect.MYSQL,
        types=_MYSQL_TYPES,
        uuid_type="CHAR(36)",
        double_type="DOUBLE",
        primary_key_type="INT",
        primary_key_template="{type} AUTO_INCREMENT PRIMARY KEY",
        timestamp_default="CURRENT_TIMESTAMP",
        native_json=True,
        sqlglot_dialect="mysql",
    ),
    # MySQL-compatible; JSON is an alias there but still accepted natively
    Dialect.MARIADB: DialectProfile(
        dialect=Dialect.MARIADB,
        types=_MYSQL_TYPES,
        uuid_type="UUID",
        double_type="DOUBLE",
        primary_key_type="INT",
        primary_key_template="{type} AUTO_INCREMENT PRIMARY KEY",
        timestamp_default="CURRENT_TIMESTAMP",
        native_json=True,
        sqlglot_dialect="mysql",
    ),
    Dialect.SQLITE: DialectProfile(
        dialect=Dialect.SQLITE,
        types={
            AbstractType.INTEGER: "INTEGER",
            AbstractType.BIGINT: "INTEGER",
            AbstractType.DECIMAL: "REAL",
            AbstractType.FLOAT: "REAL",
            AbstractType.STRING: "TEXT",
            AbstractType.TEXT: "TEXT",
            AbstractType.BOOLEAN: "INTEGER",
            AbstractType.DATE: "TEXT",
            AbstractType.TIMESTAMP: "TEXT",
            AbstractType.JSON: "TEXT",
            AbstractType.BLOB: "BLOB",
        },
        uuid_type="TEXT",
        double_type="REAL",
        primary_key_type="INTEGER",
        primary_key_template="{type} PRIMARY KEY AUTOINCREMENT",
        timestamp_default="CURRENT_TIMESTAMP",
        alter_add_constraint=False,
        sqlglot_dialect="sqlite",
    ),
    Dialect.MSSQL: DialectProfile(
        dialect=Dialect.MSSQL,
        types={
            AbstractType.INTEGER: "INT",
            AbstractType.BIGINT: "BIGINT",
            AbstractType.DECIMAL: "DECIMAL",
            AbstractType.FLOAT: "FLOAT",
            AbstractType.STRING: "NVARCHAR(255)",
            AbstractType.TEXT: "NVARCHAR(MAX)",
            AbstractType.BOOLEAN: "BIT",
            AbstractType.DATE: "DATE",
            AbstractType.TIMESTAMP: "DATETIME2",
            AbstractType.JSON: "NVARCHAR(MAX)",
            AbstractType.BLOB: "VARBINARY(MAX)",
        },
        uuid_type="UNIQUEIDENTIFIER",
        double_type="FLOAT",
        primary_key_type="INT",
        primary_key_template="{type} IDENTITY(1,1) PRIMARY KEY",
        timestamp_default="GETDATE()",
        length_function="LEN",
        sqlglot_dialect="tsql",
    ),
}


def get_profile(dialect: str | Dialect) -> DialectProfile:
    """Profile for a dialect name or Dialect."""
    return PROFILES[get_dialect(dialect)]


_CHARACTER_TYPES = {"CHAR", "VARCHAR", "NCHAR", "NVARCHAR", "TEXT"}


def is_character_type(type_string: str) -> bool:
    """Whether a rendered column type holds character data.

    "VARCHAR(255)" and "TEXT" do; "UUID" and "UNIQUEIDENTIFIER" do not.
    """
    return type_string.split("(", 1)[0].strip().upper() in _CHARACTER_TYPES


# Raw OpenAPI type names that may reach the mapper untranslated
_OPENAPI_ALIASES = {
    "number": AbstractType.DECIMAL,
    "array": AbstractType.JSON,
    "object": AbstractType.JSON,
    "datetime": AbstractType.TIMESTAMP,
}


def coerce_abstract_type(value: str | AbstractType | None) -> AbstractType | None:
    """Turn a tag or raw OpenAPI type name into an AbstractType, or None."""
    if value is None or isinstance(value, AbstractType):
        return value
    try:
        return AbstractType(value)
    except ValueError:
        return _OPENAPI_ALIASES.get(value)


def map_type(
    abstract_type: str | AbstractType | None,
    format: str | None,
    dialect: str | Dialect,
) -> str:
    """Map an abstract type and OpenAPI format to a dialect column type.

    Args:
        abstract_type: AbstractType tag (raw strings are tolerated)
        format: OpenAPI format keyword, if any
        dialect: Target dialect

    Returns:
        Dialect-specific type string; never empty
    """
    profile = get_profile(dialect)
    tag = coerce_abstract_type(abstract_type)

    if tag is None:
        logger.debug(f"Unknown type {abstract_type!r}, using {profile.generic_string}")
        return profile.generic_string

    if format:
        if tag in (AbstractType.STRING, AbstractType.TEXT):
            if format == "date-time":
                return profile.types[AbstractType.TIMESTAMP]
            if format == "date":
                return profile.types[AbstractType.DATE]
            if format == "uuid":
                return profile.uuid_type
            if format == "email":
                return profile.generic_string
        elif tag == AbstractType.INTEGER and format == "int64":
            return profile.types[AbstractType.BIGINT]
        elif tag in (AbstractType.DECIMAL, AbstractType.FLOAT):
            if format == "double":
                return profile.double_type
            if format == "float":
                return profile.types[AbstractType.FLOAT]

    return profile.types.get(tag, profile.generic_string)
