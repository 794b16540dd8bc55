"""Configuration management for spec-to-db."""
from .generator import (
    DatabaseConfig,
    GeneratorConfig,
    LoggingConfig,
    OutputConfig,
    load_generator_config,
)

__all__ = [
    "DatabaseConfig",
    "GeneratorConfig",
    "LoggingConfig",
    "OutputConfig",
    "load_generator_config",
]
