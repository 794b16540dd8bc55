"""Tests for dialect profiles and the abstract type mapper."""
import pytest

from spec_to_db.ddl.dialects import (
    PROFILES,
    Dialect,
    coerce_abstract_type,
    get_dialect,
    get_profile,
    map_type,
)
from spec_to_db.errors import UnsupportedDialectError
from spec_to_db.schema.models import AbstractType


# =============================================================================
# Totality
# =============================================================================

class TestTypeMapperTotality:
    """Every abstract type maps to a type string on every dialect."""

    @pytest.mark.parametrize("dialect", list(Dialect))
    def test_every_tag_has_a_mapping(self, dialect):
        """Should map all abstract types to non-empty strings."""
        for tag in AbstractType:
            result = map_type(tag, None, dialect)
            assert isinstance(result, str)
            assert result

    @pytest.mark.parametrize("dialect", list(Dialect))
    def test_profiles_cover_all_tags(self, dialect):
        """Should have a lookup entry for every AbstractType."""
        assert set(PROFILES[dialect].types) == set(AbstractType)

    @pytest.mark.parametrize("dialect", list(Dialect))
    def test_unknown_type_falls_back_to_string(self, dialect):
        """Should fall back to the generic string type instead of raising."""
        generic = get_profile(dialect).generic_string
        assert map_type("geometry", None, dialect) == generic
        assert map_type(None, None, dialect) == generic

    def test_raw_openapi_names_are_tolerated(self):
        """Should accept raw OpenAPI type names."""
        assert map_type("number", None, Dialect.POSTGRESQL) == "DECIMAL"
        assert map_type("object", None, Dialect.POSTGRESQL) == "JSONB"
        assert map_type("array", None, Dialect.MYSQL) == "JSON"
        assert coerce_abstract_type("integer") == AbstractType.INTEGER
        assert coerce_abstract_type("nonsense") is None


# =============================================================================
# Dialect-specific Mappings
# =============================================================================

class TestDialectMappings:
    """Base mappings per dialect."""

    def test_postgresql(self):
        assert map_type(AbstractType.STRING, None, "postgresql") == "VARCHAR(255)"
        assert map_type(AbstractType.BOOLEAN, None, "postgresql") == "BOOLEAN"
        assert map_type(AbstractType.JSON, None, "postgresql") == "JSONB"
        assert map_type(AbstractType.BLOB, None, "postgresql") == "BYTEA"

    def test_mysql_boolean_alias(self):
        """Should lower boolean to a one-byte integer on MySQL."""
        assert map_type(AbstractType.BOOLEAN, None, "mysql") == "TINYINT(1)"
        assert map_type(AbstractType.BOOLEAN, None, "mariadb") == "TINYINT(1)"

    def test_sqlite(self):
        assert map_type(AbstractType.STRING, None, "sqlite") == "TEXT"
        assert map_type(AbstractType.TIMESTAMP, None, "sqlite") == "TEXT"
        assert map_type(AbstractType.BOOLEAN, None, "sqlite") == "INTEGER"

    def test_mssql(self):
        assert map_type(AbstractType.STRING, None, "mssql") == "NVARCHAR(255)"
        assert map_type(AbstractType.BOOLEAN, None, "mssql") == "BIT"
        assert map_type(AbstractType.TIMESTAMP, None, "mssql") == "DATETIME2"


# =============================================================================
# Format Refinements
# =============================================================================

class TestFormatRefinements:
    """Format keywords refine string and number tags."""

    def test_date_time_and_date(self):
        assert map_type(AbstractType.STRING, "date-time", "postgresql") == "TIMESTAMP"
        assert map_type(AbstractType.STRING, "date", "postgresql") == "DATE"
        assert map_type(AbstractType.STRING, "date-time", "mssql") == "DATETIME2"

    def test_uuid(self):
        """Should use a native UUID type where one exists."""
        assert map_type(AbstractType.STRING, "uuid", "postgresql") == "UUID"
        assert map_type(AbstractType.STRING, "uuid", "mssql") == "UNIQUEIDENTIFIER"
        assert map_type(AbstractType.STRING, "uuid", "mysql") == "CHAR(36)"
        assert map_type(AbstractType.STRING, "uuid", "sqlite") == "TEXT"

    def test_email_is_bounded_string(self):
        assert map_type(AbstractType.STRING, "email", "postgresql") == "VARCHAR(255)"

    def test_int64_is_bigint(self):
        assert map_type(AbstractType.INTEGER, "int64", "postgresql") == "BIGINT"
        assert map_type(AbstractType.INTEGER, "int32", "postgresql") == "INTEGER"

    def test_number_formats(self):
        assert map_type(AbstractType.DECIMAL, None, "postgresql") == "DECIMAL"
        assert map_type(AbstractType.DECIMAL, "float", "postgresql") == "REAL"
        assert map_type(AbstractType.FLOAT, "double", "postgresql") == "DOUBLE PRECISION"
        assert map_type(AbstractType.FLOAT, "double", "mysql") == "DOUBLE"

    def test_format_ignored_for_other_tags(self):
        """Should not refine booleans by format."""
        assert map_type(AbstractType.BOOLEAN, "uuid", "postgresql") == "BOOLEAN"


# =============================================================================
# Dialect Lookup and Syntax
# =============================================================================

class TestDialectProfiles:
    """Dialect resolution and syntax details."""

    def test_aliases(self):
        assert get_dialect("postgres") == Dialect.POSTGRESQL
        assert get_dialect("PostgreSQL") == Dialect.POSTGRESQL
        assert get_dialect("sqlserver") == Dialect.MSSQL
        assert get_dialect(Dialect.SQLITE) == Dialect.SQLITE

    def test_unknown_dialect_raises(self):
        """Should raise immediately for unsupported dialects."""
        with pytest.raises(UnsupportedDialectError) as exc_info:
            get_dialect("oracle")
        assert exc_info.value.dialect == "oracle"

    def test_primary_key_rendering(self):
        assert get_profile("postgresql").render_primary_key() == (
            "INTEGER GENERATED ALWAYS AS IDENTITY PRIMARY KEY"
        )
        assert get_profile("mysql").render_primary_key() == "INT AUTO_INCREMENT PRIMARY KEY"
        assert get_profile("mariadb").render_primary_key() == "INT AUTO_INCREMENT PRIMARY KEY"
        assert get_profile("sqlite").render_primary_key() == "INTEGER PRIMARY KEY AUTOINCREMENT"
        assert get_profile("mssql").render_primary_key() == "INT IDENTITY(1,1) PRIMARY KEY"

    def test_timestamp_defaults(self):
        assert get_profile("postgresql").timestamp_default == "CURRENT_TIMESTAMP"
        assert get_profile("mysql").timestamp_default == "CURRENT_TIMESTAMP"
        assert get_profile("sqlite").timestamp_default == "CURRENT_TIMESTAMP"
        assert get_profile("mssql").timestamp_default == "GETDATE()"
