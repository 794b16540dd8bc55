"""End-to-end schema translation pipeline.

OpenAPI document -> extract -> resolve -> synthesize -> emit.

Extraction and resolution are dialect-independent, so several dialects
can be produced from one pass over the document (generate_for_dialects).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from spec_to_db.config.generator import DatabaseConfig, GeneratorConfig
from spec_to_db.ddl.dialects import Dialect, get_dialect
from spec_to_db.ddl.emitter import emit, render_ddl
from spec_to_db.ddl.synthesizer import SynthesisWarning, TableSynthesizer
from spec_to_db.ddl.validator import validate_statements
from spec_to_db.errors import DanglingReferenceError, MalformedSpecError, PipelineError
from spec_to_db.schema.extractor import SchemaExtractor
from spec_to_db.schema.models import (
    DatabaseSchema,
    Relationship,
    Schema,
    SchemaRelation,
    Table,
)
from spec_to_db.schema.naming import CustomNamer, NamingPolicy, NamingStrategy, mapping_namer
from spec_to_db.schema.resolver import RelationshipResolver, ResolutionResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run for one dialect."""
    dialect: Dialect
    schemas: list[Schema] = field(default_factory=list)
    relations: dict[str, tuple[SchemaRelation, ...]] = field(default_factory=dict)
    tables: list[Table] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
    warnings: list[SynthesisWarning] = field(default_factory=list)
    malformed: list[MalformedSpecError] = field(default_factory=list)
    dangling: list[DanglingReferenceError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.dangling

    @property
    def ddl(self) -> str:
        return render_ddl(self.statements)

    @property
    def model(self) -> DatabaseSchema:
        return DatabaseSchema(tables=tuple(self.tables), relationships=tuple(self.relationships))

    def raise_for_errors(self) -> None:
        """Raise PipelineError listing every problem if the run failed."""
        if not self.ok:
            raise PipelineError(self.dangling, self.malformed)


def _database_config(config: GeneratorConfig | DatabaseConfig | None) -> DatabaseConfig:
    if isinstance(config, GeneratorConfig):
        return config.database
    return config or DatabaseConfig()


def build_naming_policy(config: DatabaseConfig, custom_namer: CustomNamer | None = None) -> NamingPolicy:
    """Naming policy for a configuration; the table_names mapping backs `custom`."""
    if config.naming_strategy == NamingStrategy.CUSTOM and custom_namer is None and config.table_names:
        custom_namer = mapping_namer(config.table_names)
    return NamingPolicy(config.naming_strategy, custom_namer)


def _lower(
    schemas: list[Schema],
    resolution: ResolutionResult,
    table_names: Mapping[str, str],
    malformed: list[MalformedSpecError],
    config: DatabaseConfig,
    dialect: Dialect,
) -> PipelineResult:
    result = PipelineResult(
        dialect=dialect,
        schemas=schemas,
        relations=resolution.relations,
        malformed=list(malformed),
        dangling=list(resolution.dangling),
    )
    if resolution.dangling:
        logger.error(f"{len(resolution.dangling)} dangling reference(s), no DDL generated")
        return result

    synthesizer = TableSynthesizer(dialect, table_names, config.complex_properties)
    result.tables = synthesizer.synthesize_all(schemas, resolution)
    result.relationships = list(resolution.relationships)
    result.statements = emit(result.tables, result.relationships, dialect)
    result.warnings = list(synthesizer.warnings)

    if config.validate_ddl:
        result.warnings.extend(validate_statements(result.statements, dialect))

    return result


def generate_for_dialects(
    document: Mapping[str, Any],
    dialects: Iterable[str | Dialect],
    config: GeneratorConfig | DatabaseConfig | None = None,
    custom_namer: CustomNamer | None = None,
) -> dict[Dialect, PipelineResult]:
    """Run the pipeline once and lower the result for several dialects.

    Args:
        document: Deserialized OpenAPI document
        dialects: Target dialects
        config: Generator or database configuration (dialect field ignored)
        custom_namer: Naming function for the custom naming strategy

    Returns:
        Mapping of dialect -> PipelineResult

    Raises:
        UnsupportedDialectError: If any requested dialect is unknown
        MalformedSpecError: If the document cannot be walked at all
        ConfigurationError: If the naming configuration is unusable
    """
    db_config = _database_config(config)
    targets = [get_dialect(d) for d in dialects]
    naming = build_naming_policy(db_config, custom_namer)

    extractor = SchemaExtractor(db_config.schema_strategy)
    schemas = extractor.extract(document)
    table_names = naming.table_names(schemas)
    resolution = RelationshipResolver(table_names, db_config.many_to_many).resolve(schemas)

    return {
        dialect: _lower(schemas, resolution, table_names, extractor.errors, db_config, dialect)
        for dialect in targets
    }


def generate(
    document: Mapping[str, Any],
    config: GeneratorConfig | DatabaseConfig | None = None,
    custom_namer: CustomNamer | None = None,
) -> PipelineResult:
    """Translate an OpenAPI document into tables and DDL for one dialect.

    Args:
        document: Deserialized OpenAPI document
        config: Generator or database configuration (defaults apply if None)
        custom_namer: Naming function for the custom naming strategy

    Returns:
        PipelineResult; check `ok` (or call raise_for_errors) before using the DDL
    """
    db_config = _database_config(config)
    dialect = get_dialect(db_config.dialect)
    return generate_for_dialects(document, [dialect], db_config, custom_namer)[dialect]
