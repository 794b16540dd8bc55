from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

from spec_to_db import __version__
from spec_to_db.config import GeneratorConfig, load_generator_config
from spec_to_db.ddl.dialects import Dialect
from spec_to_db.ddl.synthesizer import ComplexPropertyPolicy
from spec_to_db.errors import SpecToDbError
from spec_to_db.generators import generate_code, generate_sample_queries
from spec_to_db.loader import load_openapi_document
from spec_to_db.pipeline import PipelineResult, generate
from spec_to_db.schema.extractor import SchemaStrategy
from spec_to_db.schema.naming import NamingStrategy
from spec_to_db.schema.resolver import ManyToManyPolicy

logger = logging.getLogger(__name__)


def _choices(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spec-to-db",
        description="Generate database setups from OpenAPI specifications"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate DDL from an OpenAPI specification")
    gen.add_argument("spec", help="Path to OpenAPI specification (JSON or YAML)")
    gen.add_argument("-c", "--config", help="Path to configuration YAML file")
    gen.add_argument("-d", "--dialect", help="Target database dialect")
    gen.add_argument("--naming-strategy", choices=_choices(NamingStrategy),
                     help="How table names are derived")
    gen.add_argument("--schema-strategy", choices=_choices(SchemaStrategy),
                     help="How nested structures become tables")
    gen.add_argument("--many-to-many", choices=_choices(ManyToManyPolicy),
                     help="Many-to-many detection policy")
    gen.add_argument("--complex-properties", choices=_choices(ComplexPropertyPolicy),
                     help="JSON properties on dialects without a JSON type")
    gen.add_argument("-o", "--output", help="Output directory for generated files")
    gen.add_argument("-f", "--force", action="store_true", default=None,
                     help="Overwrite existing files")
    gen.add_argument("--dry-run", action="store_true", default=None,
                     help="Print the DDL instead of writing files")
    gen.add_argument("--types", action="store_true", default=None,
                     help="Generate type definitions")
    gen.add_argument("--language", help="Language for type definitions (default: typescript)")
    gen.add_argument("--queries", action="store_true", default=None,
                     help="Generate sample queries per table")
    gen.add_argument("--validate", action="store_true", default=None,
                     help="Parse emitted DDL with sqlglot and report problems")
    gen.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                     help="Log level")

    sub.add_parser("dialects", help="List supported database dialects")
    return parser


def apply_overrides(config: GeneratorConfig, args: argparse.Namespace) -> GeneratorConfig:
    """Return a copy of config with command line flags applied."""
    data = config.model_dump(mode="json")
    overrides = {
        ("database", "dialect"): args.dialect,
        ("database", "naming_strategy"): args.naming_strategy,
        ("database", "schema_strategy"): args.schema_strategy,
        ("database", "many_to_many"): args.many_to_many,
        ("database", "complex_properties"): args.complex_properties,
        ("database", "validate_ddl"): args.validate,
        ("output", "directory"): args.output,
        ("output", "force"): args.force,
        ("output", "dry_run"): args.dry_run,
        ("output", "types"): args.types,
        ("output", "language"): args.language,
        ("output", "queries"): args.queries,
        ("logging", "level"): args.log_level,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            data[section][key] = value
    return GeneratorConfig.model_validate(data)


def write_outputs(result: PipelineResult, config: GeneratorConfig) -> list[Path]:
    """Write schema.sql and the optional generated files.

    Raises:
        FileExistsError: If a target file exists and force is off
    """
    out_dir = Path(config.output.directory)
    files: dict[str, str] = {"schema.sql": result.ddl}

    if config.output.types:
        files.update(generate_code(result.schemas, result.relations, config.output.language))

    if config.output.queries:
        tables = {t.name: t for t in result.tables}
        for table in result.tables:
            if table.is_join_table:
                continue
            files[f"queries/{table.name}.sql"] = generate_sample_queries(
                table, result.relationships, tables, result.dialect
            )

    targets = {out_dir / rel: content for rel, content in files.items()}
    if not config.output.force:
        existing = [str(p) for p in targets if p.exists()]
        if existing:
            raise FileExistsError(
                f"Refusing to overwrite existing files (use --force): {', '.join(existing)}"
            )

    for path, content in targets.items():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {path}")

    return list(targets)


def generate_cmd(spec_path: str, config: GeneratorConfig) -> int:
    """Run the pipeline for one OpenAPI document and write the results."""
    document = load_openapi_document(spec_path)
    result = generate(document, config)

    for malformed in result.malformed:
        print(f"Warning: skipped malformed schema: {malformed}", file=sys.stderr)
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if not result.ok:
        print("Error: unresolved schema references:", file=sys.stderr)
        for dangling in result.dangling:
            print(f"  - {dangling}", file=sys.stderr)
        return 1

    if config.output.dry_run:
        print(result.ddl, end="")
        return 0

    written = write_outputs(result, config)
    print(f"Generated {len(result.tables)} tables for {result.dialect.value}:")
    for path in written:
        print(f"  {path}")
    return 0


def list_dialects() -> int:
    for dialect in Dialect:
        print(dialect.value)
    return 0


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.cmd == "dialects":
            sys.exit(list_dialects())

        config = apply_overrides(load_generator_config(args.config), args)
        logging.basicConfig(
            level=getattr(logging, config.logging.level),
            format=config.logging.format,
            handlers=[logging.StreamHandler(sys.stderr)]
        )
        sys.exit(generate_cmd(args.spec, config))
    except (SpecToDbError, FileNotFoundError, FileExistsError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
