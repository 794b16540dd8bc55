"""TypeScript interface generation from extracted schemas."""
from __future__ import annotations

import re
from typing import Mapping

from spec_to_db.schema.models import (
    AbstractType,
    RelationType,
    Schema,
    SchemaProperty,
    SchemaRelation,
)

_TS_TYPES = {
    AbstractType.INTEGER: "number",
    AbstractType.BIGINT: "number",
    AbstractType.DECIMAL: "number",
    AbstractType.FLOAT: "number",
    AbstractType.STRING: "string",
    AbstractType.TEXT: "string",
    AbstractType.BOOLEAN: "boolean",
    AbstractType.DATE: "Date",
    AbstractType.TIMESTAMP: "Timestamp",
    AbstractType.JSON: "unknown",
    AbstractType.BLOB: "Uint8Array",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _interface_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_$]", "", name) or "Unnamed"


def _field_name(name: str) -> str:
    return name if _IDENTIFIER.match(name) else f'"{name}"'


def _property_line(prop: SchemaProperty) -> str:
    optional = "" if prop.required else "?"
    return f"  {_field_name(prop.name)}{optional}: {_TS_TYPES.get(prop.type, 'unknown')};"


def _relation_line(relation: SchemaRelation) -> str:
    target = _interface_name(relation.target_schema)
    many = relation.type in (RelationType.ONE_TO_MANY, RelationType.MANY_TO_MANY)
    field = relation.property_name or relation.target_schema[:1].lower() + relation.target_schema[1:]
    optional = "" if relation.required else "?"
    return f"  {_field_name(field)}{optional}: {target}{'[]' if many else ''};"


def generate_typescript_types(
    schemas: list[Schema],
    relations: Mapping[str, tuple[SchemaRelation, ...]] | None = None,
) -> str:
    """Generate TypeScript interfaces, one per schema.

    Args:
        schemas: Extracted schemas
        relations: Resolved relations by schema name (falls back to the
            relations declared on each schema)

    Returns:
        Contents of a types/index.ts module
    """
    blocks = ["export type Timestamp = string;\n"]

    for schema in schemas:
        schema_relations = schema.relations if relations is None else relations.get(schema.name, ())
        lines = [f"export interface {_interface_name(schema.name)} {{", "  id: number;"]
        lines.extend(_property_line(p) for p in schema.properties if p.name != "id")
        lines.extend(_relation_line(r) for r in schema_relations)
        lines.append("  createdAt: Timestamp;")
        lines.append("  updatedAt: Timestamp;")
        lines.append("}\n")
        blocks.append("\n".join(lines))

    return "\n".join(blocks)
