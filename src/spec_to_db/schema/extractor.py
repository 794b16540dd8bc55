"""OpenAPI schema extraction.

Walks components.schemas and produces the intermediate Schema model:
- plain properties with abstract types, required-ness and constraints
- $ref / array-of-$ref properties as SchemaRelations (never as properties)

Malformed entries are recorded and skipped rather than aborting the walk.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from spec_to_db.errors import MalformedSpecError
from spec_to_db.schema.models import (
    AbstractType,
    PropertyConstraints,
    RelationType,
    Schema,
    SchemaProperty,
    SchemaRelation,
    default_foreign_key,
)

logger = logging.getLogger(__name__)


class SchemaStrategy(str, Enum):
    """How nested structures become tables."""
    ONE_TABLE_PER_SCHEMA = "one_table_per_schema"
    DENORMALIZED = "denormalized"


_REFERENTIAL_ACTIONS = {"CASCADE", "SET NULL", "RESTRICT", "NO ACTION"}


def ref_name(ref: str) -> str:
    """Schema name from a $ref pointer (last path segment)."""
    return ref.rsplit("/", 1)[-1]


def resolve_abstract_type(openapi_type: str | None, format: str | None) -> AbstractType:
    """Map an OpenAPI type/format pair to an AbstractType."""
    if openapi_type == "integer":
        return AbstractType.BIGINT if format == "int64" else AbstractType.INTEGER
    if openapi_type == "number":
        return AbstractType.FLOAT if format in ("float", "double") else AbstractType.DECIMAL
    if openapi_type == "boolean":
        return AbstractType.BOOLEAN
    if openapi_type in ("array", "object"):
        return AbstractType.JSON
    if format == "date-time":
        return AbstractType.TIMESTAMP
    if format == "date":
        return AbstractType.DATE
    if format in ("binary", "byte"):
        return AbstractType.BLOB
    return AbstractType.STRING


def _is_object_schema(definition: Mapping[str, Any]) -> bool:
    schema_type = definition.get("type")
    if schema_type is None:
        return "properties" in definition and "$ref" not in definition
    return schema_type == "object"


def _referential_action(definition: Mapping[str, Any], key: str) -> str | None:
    value = definition.get(key)
    if value is None:
        return None
    action = str(value).upper()
    if action not in _REFERENTIAL_ACTIONS:
        logger.warning(f"Ignoring unknown referential action {key}={value!r}")
        return None
    return action


class SchemaExtractor:
    """Extracts Schema entities from a parsed OpenAPI document.

    Malformed component entries are collected on `errors` and skipped.
    """

    def __init__(self, schema_strategy: SchemaStrategy | str = SchemaStrategy.ONE_TABLE_PER_SCHEMA) -> None:
        self.schema_strategy = SchemaStrategy(schema_strategy)
        self.errors: list[MalformedSpecError] = []
        self._components: Mapping[str, Any] = {}

    def extract(self, document: Mapping[str, Any]) -> list[Schema]:
        """Extract all object schemas in document order.

        Args:
            document: Deserialized OpenAPI document

        Returns:
            Ordered list of Schema entities

        Raises:
            MalformedSpecError: If the document or components.schemas is not a mapping
        """
        if not isinstance(document, Mapping):
            raise MalformedSpecError("OpenAPI document must be a mapping")

        components = document.get("components") or {}
        if not isinstance(components, Mapping):
            raise MalformedSpecError("'components' must be a mapping")

        raw_schemas = components.get("schemas") or {}
        if not isinstance(raw_schemas, Mapping):
            raise MalformedSpecError("'components.schemas' must be a mapping")

        self._components = raw_schemas
        schemas: list[Schema] = []

        for name, definition in raw_schemas.items():
            try:
                schema = self._extract_schema(name, definition)
            except MalformedSpecError as e:
                logger.warning(f"Skipping malformed schema {name!r}: {e}")
                self.errors.append(e)
                continue
            if schema is not None:
                schemas.append(schema)

        logger.info(f"Extracted {len(schemas)} schemas ({len(self.errors)} malformed)")
        return schemas

    def _extract_schema(self, name: Any, definition: Any) -> Schema | None:
        if not isinstance(name, str) or not name:
            raise MalformedSpecError("schema name must be a non-empty string", schema_name=str(name))
        if not isinstance(definition, Mapping):
            raise MalformedSpecError("schema definition must be a mapping", schema_name=name)
        if not _is_object_schema(definition):
            logger.debug(f"Skipping non-object schema {name}")
            return None

        properties, required = self._read_properties(name, definition)
        plain: list[SchemaProperty] = []
        relations: list[SchemaRelation] = []

        for prop_name, prop_def in properties.items():
            is_required = prop_name in required
            if self.schema_strategy == SchemaStrategy.DENORMALIZED:
                flattened = self._flatten(name, prop_name, prop_def, is_required, {name})
                if flattened is not None:
                    plain.extend(flattened)
                    continue

            relation = self._extract_relation(prop_name, prop_def, is_required, relations)
            if relation is not None:
                relations.append(relation)
            else:
                plain.append(self._extract_property(prop_name, prop_def, is_required))

        return Schema(
            name=name,
            properties=tuple(plain),
            relations=tuple(relations),
            title=definition.get("title"),
        )

    def _read_properties(
        self, name: str, definition: Mapping[str, Any]
    ) -> tuple[Mapping[str, Any], set[str]]:
        properties = definition.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise MalformedSpecError("'properties' must be a mapping", schema_name=name)
        for prop_name, prop_def in properties.items():
            if not isinstance(prop_def, Mapping):
                raise MalformedSpecError(
                    f"property {prop_name!r} must be a mapping", schema_name=name
                )

        required = definition.get("required") or []
        if not isinstance(required, list):
            raise MalformedSpecError("'required' must be a list", schema_name=name)
        return properties, set(required)

    def _extract_property(
        self, name: str, definition: Mapping[str, Any], required: bool
    ) -> SchemaProperty:
        fmt = definition.get("format")
        return SchemaProperty(
            name=name,
            type=resolve_abstract_type(definition.get("type"), fmt),
            required=required,
            default=definition.get("default"),
            constraints=PropertyConstraints.from_mapping(definition),
            format=fmt,
        )

    def _extract_relation(
        self,
        prop_name: str,
        definition: Mapping[str, Any],
        required: bool,
        existing: list[SchemaRelation],
    ) -> SchemaRelation | None:
        if "$ref" in definition:
            relation_type = RelationType.ONE_TO_ONE
            target = ref_name(definition["$ref"])
        else:
            items = definition.get("items")
            if definition.get("type") != "array" or not isinstance(items, Mapping) or "$ref" not in items:
                return None
            relation_type = RelationType.ONE_TO_MANY
            target = ref_name(items["$ref"])

        foreign_key = definition.get("x-foreign-key") or default_foreign_key(target)
        if any(r.foreign_key == foreign_key for r in existing):
            foreign_key = f"{prop_name.lower()}_id"
            logger.debug(f"Foreign key collision on {target}, using {foreign_key}")

        return SchemaRelation(
            type=relation_type,
            target_schema=target,
            foreign_key=foreign_key,
            property_name=prop_name,
            join_table=definition.get("x-join-table"),
            required=required,
            on_delete=_referential_action(definition, "x-on-delete"),
            on_update=_referential_action(definition, "x-on-update"),
        )

    # -------------------------------------------------------------------------
    # Denormalized strategy
    # -------------------------------------------------------------------------

    def _flatten(
        self,
        owner: str,
        prop_name: str,
        definition: Mapping[str, Any],
        required: bool,
        seen: set[str],
    ) -> list[SchemaProperty] | None:
        """Flatten an inline object or scalar $ref into prefixed properties.

        Returns None when the property is not flattenable (arrays, plain
        scalars, unknown or cyclic references).
        """
        if "$ref" in definition:
            target = ref_name(definition["$ref"])
            nested = self._components.get(target)
            if target in seen or not isinstance(nested, Mapping) or not _is_object_schema(nested):
                return None
            seen = seen | {target}
        elif definition.get("type") == "object" and isinstance(definition.get("properties"), Mapping):
            nested = definition
        else:
            return None

        try:
            properties, nested_required = self._read_properties(owner, nested)
        except MalformedSpecError:
            return None

        flattened: list[SchemaProperty] = []
        for sub_name, sub_def in properties.items():
            column = f"{prop_name}_{sub_name}"
            sub_required = required and sub_name in nested_required
            deeper = self._flatten(owner, column, sub_def, sub_required, seen)
            if deeper is not None:
                flattened.extend(deeper)
            elif "$ref" in sub_def or (
                sub_def.get("type") == "array" and "$ref" in (sub_def.get("items") or {})
            ):
                logger.warning(f"Dropping nested reference {owner}.{column} in denormalized mode")
            else:
                flattened.append(self._extract_property(column, sub_def, sub_required))
        return flattened


def extract_schemas(
    document: Mapping[str, Any],
    schema_strategy: SchemaStrategy | str = SchemaStrategy.ONE_TABLE_PER_SCHEMA,
    errors: list[MalformedSpecError] | None = None,
) -> list[Schema]:
    """Extract schemas from an OpenAPI document.

    Args:
        document: Deserialized OpenAPI document
        schema_strategy: Table layout strategy
        errors: Optional list that receives skipped malformed entries

    Returns:
        Ordered list of Schema entities
    """
    extractor = SchemaExtractor(schema_strategy)
    schemas = extractor.extract(document)
    if errors is not None:
        errors.extend(extractor.errors)
    return schemas
