"""Dialect-aware lowering of schemas to tables and DDL.

Provides:
- Type mapping per dialect (PostgreSQL, MySQL, MariaDB, SQLite, MSSQL)
- Column constraint clauses from validation keywords
- Table synthesis and DDL statement emission
- Optional sqlglot validation of emitted statements
"""
from __future__ import annotations

from .dialects import (
    Dialect,
    DialectProfile,
    get_dialect,
    get_profile,
    map_type,
)

from .constraints import (
    build_constraints,
    build_property_constraints,
)

from .synthesizer import (
    ComplexPropertyPolicy,
    SynthesisWarning,
    TableSynthesizer,
)

from .emitter import (
    emit,
    render_ddl,
)

from .validator import (
    parse_create_table,
    validate_statements,
)

__all__ = [
    # Dialects
    "Dialect",
    "DialectProfile",
    "get_dialect",
    "get_profile",
    "map_type",
    # Constraints
    "build_constraints",
    "build_property_constraints",
    # Synthesis
    "ComplexPropertyPolicy",
    "SynthesisWarning",
    "TableSynthesizer",
    # Emission
    "emit",
    "render_ddl",
    # Validation
    "parse_create_table",
    "validate_statements",
]
