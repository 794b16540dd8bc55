"""Tests for sample query and type definition generators."""
import pytest

from conftest import array_of, document
from spec_to_db.errors import UnsupportedLanguageError
from spec_to_db.generators import generate_code, generate_sample_queries, generate_typescript_types
from spec_to_db.pipeline import generate


@pytest.fixture
def blog_result(blog_document):
    return generate(blog_document)


def queries_for(result, table_name):
    tables = {t.name: t for t in result.tables}
    return generate_sample_queries(tables[table_name], result.relationships, tables, result.dialect)


# =============================================================================
# Sample Queries
# =============================================================================

class TestSampleQueries:
    """CRUD, search and join queries per table."""

    def test_crud_sections(self, blog_result):
        sql = queries_for(blog_result, "user")

        assert "SELECT * FROM user;" in sql
        assert "LIMIT 10 OFFSET 0;" in sql
        assert "SELECT id, name, email, age, active\nFROM user;" in sql
        assert (
            "INSERT INTO user (created_at, updated_at, name, email, age, active)\n"
            "VALUES (CURRENT_TIMESTAMP, CURRENT_TIMESTAMP, :name, :email, :age, :active);"
        ) in sql
        assert "SET name = :name,\n    email = :email," in sql
        assert "updated_at = CURRENT_TIMESTAMP\nWHERE id = :id;" in sql
        assert "DELETE FROM user\nWHERE id = :id;" in sql

    def test_search_only_text_columns(self, blog_result):
        sql = queries_for(blog_result, "post")
        assert "WHERE title LIKE :search\n   OR body LIKE :search;" in sql
        assert "published_at LIKE" not in sql

    def test_join_queries(self, blog_result):
        sql = queries_for(blog_result, "post")

        assert "-- Get user for post" in sql
        assert "JOIN post s ON s.user_id = t.id" in sql
        assert "-- Get all tag for post" in sql
        assert "JOIN post_tag j ON j.tag_id = t.id\nWHERE j.post_id = :id;" in sql
        assert "-- Get all comment for post" in sql
        assert "FROM comment t\nWHERE t.post_id = :id;" in sql

    def test_many_to_one_join(self, blog_result):
        sql = queries_for(blog_result, "comment")
        assert "-- Get post for comment" in sql
        assert "JOIN comment s ON s.post_id = t.id" in sql

    def test_mssql_pagination(self, user_document):
        from spec_to_db.config import DatabaseConfig

        result = generate(user_document, DatabaseConfig(dialect="mssql"))
        sql = queries_for(result, "user")
        assert "OFFSET 0 ROWS FETCH NEXT 10 ROWS ONLY;" in sql
        assert "LIMIT" not in sql


# =============================================================================
# Type Definitions
# =============================================================================

class TestTypeScriptTypes:
    """TypeScript interfaces mirror the extracted schemas."""

    def test_blog_interfaces(self, blog_result):
        ts = generate_typescript_types(blog_result.schemas, blog_result.relations)

        assert ts.startswith("export type Timestamp = string;\n")
        assert (
            "export interface User {\n"
            "  id: number;\n"
            "  name: string;\n"
            "  email?: string;\n"
            "  age?: number;\n"
            "  active?: boolean;\n"
            "  createdAt: Timestamp;\n"
            "  updatedAt: Timestamp;\n"
            "}"
        ) in ts
        assert "  author: User;" in ts
        assert "  tags?: Tag[];" in ts
        assert "  comments?: Comment[];" in ts
        assert "  published_at?: Timestamp;" in ts
        assert "  post?: Post;" in ts

    def test_inverse_relation_field(self):
        doc = document({
            "Author": {"type": "object", "properties": {"books": array_of("Book")}},
            "Book": {"type": "object", "properties": {"title": {"type": "string"}}},
        })
        result = generate(doc)
        ts = generate_typescript_types(result.schemas, result.relations)
        assert "  author?: Author;" in ts

    def test_generate_code(self, blog_result):
        files = generate_code(blog_result.schemas, blog_result.relations, "TypeScript")
        assert list(files) == ["types/index.ts"]

    def test_unsupported_language(self, blog_result):
        with pytest.raises(UnsupportedLanguageError, match="Unsupported language: cobol"):
            generate_code(blog_result.schemas, blog_result.relations, "cobol")
