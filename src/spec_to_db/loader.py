"""OpenAPI document loading (JSON or YAML)."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from spec_to_db.errors import MalformedSpecError

logger = logging.getLogger(__name__)


def load_openapi_document(path: str | Path) -> dict[str, Any]:
    """Read and deserialize an OpenAPI document.

    Files ending in .yaml/.yml are parsed as YAML, everything else as JSON.

    Args:
        path: Path to the OpenAPI document

    Returns:
        Deserialized document

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedSpecError: If the file cannot be parsed or is not a mapping
    """
    spec_path = Path(path)
    if not spec_path.exists():
        raise FileNotFoundError(f"OpenAPI specification not found: {spec_path}")

    content = spec_path.read_text(encoding="utf-8")
    try:
        if spec_path.suffix.lower() in (".yaml", ".yml"):
            document = yaml.safe_load(content)
        else:
            document = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise MalformedSpecError(f"Could not parse {spec_path}: {e}") from e

    if not isinstance(document, dict):
        raise MalformedSpecError(f"{spec_path} does not contain an OpenAPI object")

    logger.info(f"Loaded OpenAPI document from {spec_path}")
    return document
