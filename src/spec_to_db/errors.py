"""Error types raised and collected by the schema-translation pipeline."""
from __future__ import annotations


class SpecToDbError(Exception):
    """Base class for all spec-to-db errors."""


class ConfigurationError(SpecToDbError):
    """Invalid generator configuration (e.g. custom naming without a namer)."""


class MalformedSpecError(SpecToDbError):
    """An entry under components.schemas is not a well-formed object.

    Non-fatal for individual entries: the extractor records it and skips
    the entry. Raised directly only when the document itself cannot be
    walked.
    """

    def __init__(self, message: str, schema_name: str | None = None) -> None:
        self.schema_name = schema_name
        super().__init__(message)


class DanglingReferenceError(SpecToDbError):
    """A relation points at a schema that is not in the document."""

    def __init__(self, schema_name: str, property_name: str, target_schema: str) -> None:
        self.schema_name = schema_name
        self.property_name = property_name
        self.target_schema = target_schema
        super().__init__(
            f"{schema_name}.{property_name} references unknown schema '{target_schema}'"
        )


class UnsupportedTypeError(SpecToDbError):
    """Kept for API completeness; the type mapper falls back instead of raising."""


class UnsupportedDialectError(SpecToDbError):
    """The requested SQL dialect is not implemented."""

    def __init__(self, dialect: str) -> None:
        self.dialect = dialect
        super().__init__(f"Unsupported database dialect: {dialect}")


class UnsupportedLanguageError(SpecToDbError):
    """The requested output language has no code generator."""

    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__(f"Unsupported language: {language}")


class PipelineError(SpecToDbError):
    """Aggregates every problem found during one pipeline run."""

    def __init__(
        self,
        dangling: list[DanglingReferenceError],
        malformed: list[MalformedSpecError],
    ) -> None:
        self.dangling = list(dangling)
        self.malformed = list(malformed)
        lines = [f"  - {e}" for e in self.dangling + self.malformed]
        super().__init__(
            f"{len(self.dangling)} dangling reference(s), "
            f"{len(self.malformed)} malformed schema(s):\n" + "\n".join(lines)
        )
