"""Table naming strategies.

A NamingPolicy turns a Schema into a table identifier. All three
strategies are distinct:
- schema_id: the component key, lower-cased
- schema_title: the declared `title`, snake-cased (key when no title)
- custom: a caller-supplied callable
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Iterable, Mapping

from spec_to_db.errors import ConfigurationError
from spec_to_db.schema.models import Schema


class NamingStrategy(str, Enum):
    SCHEMA_TITLE = "schema_title"
    SCHEMA_ID = "schema_id"
    CUSTOM = "custom"


CustomNamer = Callable[[Schema], str]


def to_identifier(text: str) -> str:
    """Snake-case free text into a SQL identifier.

    "Blog Post" -> "blog_post", "OrderItem" -> "order_item"
    """
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", text.strip())
    text = re.sub(r"[^0-9a-zA-Z]+", "_", text)
    return text.strip("_").lower()


class NamingPolicy:
    """Derives table names from schemas according to a strategy."""

    def __init__(
        self,
        strategy: NamingStrategy | str = NamingStrategy.SCHEMA_ID,
        custom_namer: CustomNamer | None = None,
    ) -> None:
        self.strategy = NamingStrategy(strategy)
        if self.strategy == NamingStrategy.CUSTOM and custom_namer is None:
            raise ConfigurationError("custom naming strategy requires a naming function")
        self.custom_namer = custom_namer

    def table_name(self, schema: Schema) -> str:
        if self.strategy == NamingStrategy.SCHEMA_ID:
            return schema.name.lower()
        if self.strategy == NamingStrategy.SCHEMA_TITLE:
            return to_identifier(schema.title) if schema.title else schema.name.lower()
        name = self.custom_namer(schema)
        if not name:
            raise ConfigurationError(f"custom naming function returned no name for {schema.name}")
        return name

    def table_names(self, schemas: Iterable[Schema]) -> dict[str, str]:
        """Map schema name -> table name; duplicate table names are rejected."""
        names: dict[str, str] = {}
        taken: dict[str, str] = {}
        for schema in schemas:
            table = self.table_name(schema)
            if table in taken:
                raise ConfigurationError(
                    f"schemas {taken[table]!r} and {schema.name!r} both map to table {table!r}"
                )
            taken[table] = schema.name
            names[schema.name] = table
        return names


def mapping_namer(mapping: Mapping[str, str]) -> CustomNamer:
    """Custom namer backed by a schema-name -> table-name mapping.

    Unmapped schemas keep their lower-cased key.
    """
    def namer(schema: Schema) -> str:
        return mapping.get(schema.name, schema.name.lower())
    return namer
