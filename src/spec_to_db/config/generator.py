"""Generator configuration loading and validation.

Configuration comes from a YAML file or from SPEC_TO_DB_* environment
variables (a .env file is honoured through python-dotenv).
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from spec_to_db.ddl.dialects import Dialect, get_dialect
from spec_to_db.ddl.synthesizer import ComplexPropertyPolicy
from spec_to_db.schema.extractor import SchemaStrategy
from spec_to_db.schema.naming import NamingStrategy
from spec_to_db.schema.resolver import ManyToManyPolicy

ENV_PREFIX = "SPEC_TO_DB_"


class DatabaseConfig(BaseModel):
    """Schema translation settings."""
    dialect: Dialect = Field(Dialect.POSTGRESQL, description="Target database dialect")
    naming_strategy: NamingStrategy = Field(NamingStrategy.SCHEMA_ID, description="Table naming strategy")
    schema_strategy: SchemaStrategy = Field(
        SchemaStrategy.ONE_TABLE_PER_SCHEMA, description="Table layout strategy"
    )
    many_to_many: ManyToManyPolicy = Field(
        ManyToManyPolicy.SYMMETRIC, description="Many-to-many detection policy"
    )
    complex_properties: ComplexPropertyPolicy = Field(
        ComplexPropertyPolicy.DROP,
        description="Handling of JSON properties on dialects without a JSON type",
    )
    table_names: dict[str, str] = Field(
        default_factory=dict, description="Schema -> table mapping for the custom naming strategy"
    )
    validate_ddl: bool = Field(False, description="Parse emitted DDL with sqlglot")

    @field_validator("dialect", mode="before")
    @classmethod
    def validate_dialect(cls, v: str | Dialect) -> Dialect:
        """Accept dialect aliases such as 'postgres' or 'sqlserver'."""
        return get_dialect(v)


class OutputConfig(BaseModel):
    """Output file settings."""
    directory: str = Field("./generated", description="Output directory")
    force: bool = Field(False, description="Overwrite existing files")
    dry_run: bool = Field(False, description="Print instead of writing files")
    types: bool = Field(False, description="Generate type definitions")
    queries: bool = Field(False, description="Generate sample queries")
    language: str = Field("typescript", description="Language for generated type definitions")

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("directory must not be empty")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("WARNING", description="Log level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return str(v).upper()


class GeneratorConfig(BaseModel):
    """Complete generator configuration."""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GeneratorConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated GeneratorConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration in {config_path}: expected a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls) -> GeneratorConfig:
        """Load configuration from SPEC_TO_DB_* environment variables.

        Unset variables keep their defaults.
        """
        load_dotenv()

        database = {}
        for key in ("dialect", "naming_strategy", "schema_strategy", "many_to_many", "complex_properties"):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value:
                database[key] = value
        if os.getenv(f"{ENV_PREFIX}VALIDATE_DDL"):
            database["validate_ddl"] = os.getenv(f"{ENV_PREFIX}VALIDATE_DDL", "").lower() == "true"

        output = {}
        if os.getenv(f"{ENV_PREFIX}OUTPUT"):
            output["directory"] = os.getenv(f"{ENV_PREFIX}OUTPUT")

        logging_config = {}
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            logging_config["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")

        try:
            return cls.model_validate(
                {"database": database, "output": output, "logging": logging_config}
            )
        except ValidationError as e:
            raise ValueError(f"Invalid {ENV_PREFIX}* environment configuration: {e}") from e


def load_generator_config(config_path: str | Path | None = None) -> GeneratorConfig:
    """Load generator configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Validated GeneratorConfig instance

    Raises:
        FileNotFoundError: If an explicit config file is missing
        ValueError: If configuration is invalid
    """
    if config_path:
        return GeneratorConfig.from_yaml(config_path)

    env_path = os.getenv(f"{ENV_PREFIX}CONFIG")
    if env_path:
        return GeneratorConfig.from_yaml(env_path)

    return GeneratorConfig.from_env()
