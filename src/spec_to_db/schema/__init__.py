"""Database-agnostic schema model.

Provides:
- Extraction of Schema entities from OpenAPI components.schemas
- Table naming strategies
- Relationship resolution (one-to-one, one-to-many, many-to-one, many-to-many)
"""
from __future__ import annotations

from .models import (
    AbstractType,
    Column,
    DatabaseSchema,
    ForeignKey,
    Index,
    PropertyConstraints,
    Relationship,
    RelationshipType,
    RelationType,
    Schema,
    SchemaProperty,
    SchemaRelation,
    SqlExpression,
    Table,
)

from .extractor import (
    SchemaExtractor,
    SchemaStrategy,
    extract_schemas,
)

from .naming import (
    NamingPolicy,
    NamingStrategy,
    mapping_namer,
)

from .resolver import (
    ManyToManyPolicy,
    RelationshipResolver,
    ResolutionResult,
)

__all__ = [
    # Model types
    "AbstractType",
    "Column",
    "DatabaseSchema",
    "ForeignKey",
    "Index",
    "PropertyConstraints",
    "Relationship",
    "RelationshipType",
    "RelationType",
    "Schema",
    "SchemaProperty",
    "SchemaRelation",
    "SqlExpression",
    "Table",
    # Extraction
    "SchemaExtractor",
    "SchemaStrategy",
    "extract_schemas",
    # Naming
    "NamingPolicy",
    "NamingStrategy",
    "mapping_namer",
    # Resolution
    "ManyToManyPolicy",
    "RelationshipResolver",
    "ResolutionResult",
]
