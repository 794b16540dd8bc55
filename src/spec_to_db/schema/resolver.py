"""Relationship resolution between extracted schemas.

Classifies every extracted relation as one-to-one, one-to-many,
many-to-one or many-to-many, derives inverse foreign keys for
one-to-many references and names join tables. Unknown targets are
collected as DanglingReferenceErrors instead of failing fast.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping

from spec_to_db.errors import ConfigurationError, DanglingReferenceError
from spec_to_db.schema.models import (
    Relationship,
    RelationshipType,
    RelationType,
    Schema,
    SchemaRelation,
    default_foreign_key,
)
from spec_to_db.schema.naming import to_identifier

logger = logging.getLogger(__name__)


class ManyToManyPolicy(str, Enum):
    """How many-to-many relations are detected.

    SYMMETRIC: two array references pointing at each other form one
        many-to-many; x-join-table only names the join table.
    EXPLICIT: only relations carrying x-join-table are many-to-many.
    """
    SYMMETRIC = "symmetric"
    EXPLICIT = "explicit"


_RELATIONSHIP_TYPES = {
    RelationType.ONE_TO_ONE: RelationshipType.ONE_TO_ONE,
    RelationType.ONE_TO_MANY: RelationshipType.ONE_TO_MANY,
    RelationType.MANY_TO_ONE: RelationshipType.MANY_TO_ONE,
    RelationType.MANY_TO_MANY: RelationshipType.MANY_TO_MANY,
}


@dataclass
class ResolutionResult:
    """Output of relationship resolution."""
    relations: dict[str, tuple[SchemaRelation, ...]] = field(default_factory=dict)
    relationships: list[Relationship] = field(default_factory=list)
    dangling: list[DanglingReferenceError] = field(default_factory=list)

    def relations_for(self, schema_name: str) -> tuple[SchemaRelation, ...]:
        return self.relations.get(schema_name, ())


class RelationshipResolver:
    """Resolves schema relations against the full schema set."""

    def __init__(
        self,
        table_names: Mapping[str, str],
        policy: ManyToManyPolicy | str = ManyToManyPolicy.SYMMETRIC,
    ) -> None:
        self.table_names = table_names
        self.policy = ManyToManyPolicy(policy)

    def table_for(self, schema_name: str) -> str:
        return self.table_names.get(schema_name, schema_name.lower())

    def resolve(self, schemas: list[Schema]) -> ResolutionResult:
        """Resolve all relations of the given schemas.

        Args:
            schemas: Every schema extracted from the document

        Returns:
            ResolutionResult with final relations, table relationships
            and all dangling references
        """
        result = ResolutionResult()
        by_name = {s.name: s for s in schemas}

        # Drop (and report) relations whose target is not in the document
        valid: dict[str, list[SchemaRelation]] = {}
        for schema in schemas:
            kept = []
            for relation in schema.relations:
                if relation.target_schema not in by_name:
                    error = DanglingReferenceError(
                        schema.name, relation.property_name, relation.target_schema
                    )
                    logger.warning(str(error))
                    result.dangling.append(error)
                else:
                    kept.append(relation)
            valid[schema.name] = kept

        join_tables = self._pair_many_to_many(schemas, valid)
        inverses = self._derive_inverses(schemas, valid, join_tables)

        owned_joins: set[str] = set()
        for schema in schemas:
            final: list[SchemaRelation] = []
            source_table = self.table_for(schema.name)

            for relation in valid[schema.name]:
                target_table = self.table_for(relation.target_schema)
                key = (schema.name, relation.property_name)

                if key in join_tables:
                    join_table = join_tables[key]
                    relation = replace(relation, type=RelationType.MANY_TO_MANY, join_table=join_table)
                    if join_table not in owned_joins:
                        owned_joins.add(join_table)
                        result.relationships.append(Relationship(
                            from_table=source_table,
                            to_table=target_table,
                            type=RelationshipType.MANY_TO_MANY,
                            through_table=join_table,
                        ))
                else:
                    relation = replace(relation, join_table=None)
                    result.relationships.append(Relationship(
                        from_table=source_table,
                        to_table=target_table,
                        type=_RELATIONSHIP_TYPES[relation.type],
                        foreign_key=relation.foreign_key if relation.is_to_one else None,
                    ))
                final.append(relation)

            for inverse in inverses.get(schema.name, []):
                final.append(inverse)
                result.relationships.append(Relationship(
                    from_table=source_table,
                    to_table=self.table_for(inverse.target_schema),
                    type=RelationshipType.MANY_TO_ONE,
                    foreign_key=inverse.foreign_key,
                ))

            result.relations[schema.name] = tuple(final)

        logger.info(
            f"Resolved {len(result.relationships)} relationships "
            f"({len(owned_joins)} many-to-many, {len(result.dangling)} dangling)"
        )
        return result

    def _pair_many_to_many(
        self,
        schemas: list[Schema],
        valid: dict[str, list[SchemaRelation]],
    ) -> dict[tuple[str, str], str]:
        """Find many-to-many relations; maps (schema, property) -> join table.

        In symmetric mode every pair gets its own join table. A derived
        name already taken by another pair is qualified with the source
        property; two pairs naming the same x-join-table are rejected.

        Raises:
            ConfigurationError: If two symmetric pairs declare one join table
        """
        join_tables: dict[tuple[str, str], str] = {}
        used: set[str] = set()

        for schema in schemas:
            for relation in valid[schema.name]:
                key = (schema.name, relation.property_name)
                if key in join_tables:
                    continue

                if self.policy == ManyToManyPolicy.EXPLICIT:
                    if relation.join_table:
                        join_tables[key] = relation.join_table
                    continue

                if relation.type != RelationType.ONE_TO_MANY:
                    continue
                back = self._find_back_reference(schema.name, relation, valid, join_tables)
                if back is None:
                    continue
                join_table = relation.join_table or back.join_table
                if join_table is None:
                    join_table = self._derive_join_table(schema.name, relation, used)
                elif join_table in used:
                    raise ConfigurationError(
                        f"join table {join_table!r} is declared by more than one "
                        f"many-to-many relation ({schema.name}.{relation.property_name})"
                    )
                used.add(join_table)
                join_tables[key] = join_table
                join_tables[(relation.target_schema, back.property_name)] = join_table
                logger.debug(
                    f"Many-to-many {schema.name}.{relation.property_name} <-> "
                    f"{relation.target_schema}.{back.property_name} via {join_table}"
                )

        return join_tables

    def _derive_join_table(self, source: str, relation: SchemaRelation, used: set[str]) -> str:
        source_table = self.table_for(source)
        target_table = self.table_for(relation.target_schema)
        name = f"{source_table}_{target_table}"
        if name not in used:
            return name
        qualified = f"{source_table}_{to_identifier(relation.property_name)}_{target_table}"
        name, suffix = qualified, 2
        while name in used:
            name = f"{qualified}_{suffix}"
            suffix += 1
        logger.debug(f"Join table name {source_table}_{target_table} taken, using {name}")
        return name

    @staticmethod
    def _find_back_reference(
        source: str,
        relation: SchemaRelation,
        valid: dict[str, list[SchemaRelation]],
        join_tables: Mapping[tuple[str, str], str],
    ) -> SchemaRelation | None:
        for candidate in valid[relation.target_schema]:
            if candidate.type != RelationType.ONE_TO_MANY or candidate.target_schema != source:
                continue
            if relation.target_schema == source and candidate.property_name == relation.property_name:
                continue
            if (relation.target_schema, candidate.property_name) in join_tables:
                continue
            return candidate
        return None

    def _derive_inverses(
        self,
        schemas: list[Schema],
        valid: dict[str, list[SchemaRelation]],
        join_tables: Mapping[tuple[str, str], str],
    ) -> dict[str, list[SchemaRelation]]:
        """Place the foreign key of each one-to-many on its target.

        A scalar reference from the target back to the source is
        reclassified as many-to-one in place; otherwise a new many-to-one
        relation is added to the target.
        """
        inverses: dict[str, list[SchemaRelation]] = {}

        for schema in schemas:
            for relation in valid[schema.name]:
                if relation.type != RelationType.ONE_TO_MANY:
                    continue
                if (schema.name, relation.property_name) in join_tables:
                    continue

                target = relation.target_schema
                target_relations = valid[target]
                back_index = next(
                    (
                        i for i, r in enumerate(target_relations)
                        if r.type == RelationType.ONE_TO_ONE
                        and r.target_schema == schema.name
                        and (target, r.property_name) not in join_tables
                        and not (target == schema.name and r.property_name == relation.property_name)
                    ),
                    None,
                )
                if back_index is not None:
                    back = target_relations[back_index]
                    target_relations[back_index] = replace(back, type=RelationType.MANY_TO_ONE)
                    continue

                taken = {r.foreign_key for r in target_relations}
                taken.update(r.foreign_key for r in inverses.get(target, []))
                foreign_key = default_foreign_key(schema.name)
                if foreign_key in taken:
                    foreign_key = f"{schema.name.lower()}_{relation.property_name.lower()}_id"

                inverses.setdefault(target, []).append(SchemaRelation(
                    type=RelationType.MANY_TO_ONE,
                    target_schema=schema.name,
                    foreign_key=foreign_key,
                    on_delete=relation.on_delete,
                    on_update=relation.on_update,
                ))

        return inverses
