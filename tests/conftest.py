"""Shared pytest fixtures for all tests."""
from pathlib import Path

import pytest

from spec_to_db.loader import load_openapi_document


def ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


def array_of(name: str) -> dict:
    return {"type": "array", "items": ref(name)}


def document(schemas: dict) -> dict:
    """Wrap component schemas in a minimal OpenAPI document."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1.0.0"},
        "paths": {},
        "components": {"schemas": schemas},
    }


@pytest.fixture
def fixtures_dir():
    """Return path to OpenAPI fixtures directory."""
    return Path(__file__).parent / "fixtures" / "openapi"


@pytest.fixture
def blog_document(fixtures_dir):
    """Blog API with one-to-one, one-to-many and many-to-many references."""
    return load_openapi_document(fixtures_dir / "blog.yaml")


@pytest.fixture
def user_document():
    """Single User schema: name (required, maxLength 50), email (unique)."""
    return document({
        "User": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "maxLength": 50},
                "email": {"type": "string", "format": "email", "unique": True},
            },
        }
    })


@pytest.fixture
def post_tag_document():
    """Post and Tag referencing each other through arrays."""
    return document({
        "Post": {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "tags": array_of("Tag"),
            },
        },
        "Tag": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "posts": array_of("Post"),
            },
        },
    })
