"""spec-to-db: relational database design from OpenAPI schema definitions."""
from __future__ import annotations

__version__ = "0.1.0"
