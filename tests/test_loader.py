"""Tests for OpenAPI document loading."""
import pytest

from spec_to_db.errors import MalformedSpecError
from spec_to_db.loader import load_openapi_document


class TestLoadOpenapiDocument:
    def test_yaml(self, fixtures_dir):
        doc = load_openapi_document(fixtures_dir / "blog.yaml")
        assert doc["info"]["title"] == "Blog API"
        assert list(doc["components"]["schemas"]) == ["User", "Post", "Comment", "Tag", "Status"]

    def test_json(self, fixtures_dir, user_document):
        doc = load_openapi_document(str(fixtures_dir / "user.json"))
        assert doc["components"] == user_document["components"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_openapi_document(tmp_path / "nope.yaml")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(MalformedSpecError, match="Could not parse"):
            load_openapi_document(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("components: [unclosed\n")
        with pytest.raises(MalformedSpecError):
            load_openapi_document(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- one\n- two\n")
        with pytest.raises(MalformedSpecError, match="does not contain an OpenAPI object"):
            load_openapi_document(path)
