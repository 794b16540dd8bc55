"""Downstream artifact generators (sample queries, type definitions)."""
from __future__ import annotations

from typing import Mapping

from spec_to_db.errors import UnsupportedLanguageError
from spec_to_db.schema.models import Schema, SchemaRelation

from .queries import generate_sample_queries
from .types import generate_typescript_types

SUPPORTED_LANGUAGES = ("typescript",)


def generate_code(
    schemas: list[Schema],
    relations: Mapping[str, tuple[SchemaRelation, ...]] | None,
    language: str,
) -> dict[str, str]:
    """Generate type definitions for a target language.

    Args:
        schemas: Extracted schemas
        relations: Resolved relations by schema name
        language: Target language name

    Returns:
        Mapping of relative file path -> file content

    Raises:
        UnsupportedLanguageError: If no generator exists for the language
    """
    key = language.strip().lower()
    if key == "typescript":
        return {"types/index.ts": generate_typescript_types(schemas, relations)}
    raise UnsupportedLanguageError(language)


__all__ = [
    "SUPPORTED_LANGUAGES",
    "generate_code",
    "generate_sample_queries",
    "generate_typescript_types",
]
