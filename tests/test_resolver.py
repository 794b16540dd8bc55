"""Tests for relationship resolution."""
import pytest

from conftest import array_of, document, ref
from spec_to_db.errors import ConfigurationError, DanglingReferenceError
from spec_to_db.schema.extractor import extract_schemas
from spec_to_db.schema.models import RelationshipType, RelationType
from spec_to_db.schema.naming import NamingPolicy
from spec_to_db.schema.resolver import ManyToManyPolicy, RelationshipResolver


def resolve(doc, policy=ManyToManyPolicy.SYMMETRIC):
    schemas = extract_schemas(doc)
    table_names = NamingPolicy().table_names(schemas)
    return RelationshipResolver(table_names, policy).resolve(schemas)


# =============================================================================
# Many-to-many
# =============================================================================

class TestManyToMany:
    """Symmetric array references collapse into one join table."""

    def test_symmetric_pair(self, post_tag_document):
        result = resolve(post_tag_document)

        assert len(result.relationships) == 1
        (relationship,) = result.relationships
        assert relationship.type == RelationshipType.MANY_TO_MANY
        assert relationship.from_table == "post"
        assert relationship.to_table == "tag"
        assert relationship.through_table == "post_tag"

        (tags,) = result.relations_for("Post")
        (posts,) = result.relations_for("Tag")
        assert tags.type == RelationType.MANY_TO_MANY
        assert posts.type == RelationType.MANY_TO_MANY
        assert tags.join_table == posts.join_table == "post_tag"

    def test_join_table_name_from_extension(self):
        doc = document({
            "Student": {"type": "object", "properties": {
                "courses": {**array_of("Course"), "x-join-table": "enrollment"},
            }},
            "Course": {"type": "object", "properties": {"students": array_of("Student")}},
        })
        result = resolve(doc)
        assert result.relationships[0].through_table == "enrollment"

    def test_explicit_policy_requires_extension(self, post_tag_document):
        """Should not pair mutual arrays without x-join-table."""
        result = resolve(post_tag_document, ManyToManyPolicy.EXPLICIT)
        assert all(r.type != RelationshipType.MANY_TO_MANY for r in result.relationships)

    def test_explicit_policy_with_extension(self):
        doc = document({
            "Post": {"type": "object", "properties": {
                "tags": {**array_of("Tag"), "x-join-table": "post_tags"},
            }},
            "Tag": {"type": "object", "properties": {"name": {"type": "string"}}},
        })
        result = resolve(doc, "explicit")

        (relationship,) = result.relationships
        assert relationship.type == RelationshipType.MANY_TO_MANY
        assert relationship.through_table == "post_tags"
        assert result.relations_for("Tag") == ()

    def test_parallel_pairs_get_separate_join_tables(self):
        """Should keep two pairs between the same schemas as two relationships."""
        doc = document({
            "Post": {"type": "object", "properties": {
                "tags": array_of("Tag"),
                "featuredTags": array_of("Tag"),
            }},
            "Tag": {"type": "object", "properties": {
                "posts": array_of("Post"),
                "featuredIn": array_of("Post"),
            }},
        })
        result = resolve(doc)

        many = [r for r in result.relationships if r.type == RelationshipType.MANY_TO_MANY]
        assert [r.through_table for r in many] == ["post_tag", "post_featured_tags_tag"]
        assert {r.property_name: r.join_table for r in result.relations_for("Tag")} == {
            "posts": "post_tag",
            "featuredIn": "post_featured_tags_tag",
        }

    def test_parallel_pairs_produce_two_join_tables(self):
        from spec_to_db.pipeline import generate

        doc = document({
            "Post": {"type": "object", "properties": {
                "tags": array_of("Tag"),
                "featuredTags": array_of("Tag"),
            }},
            "Tag": {"type": "object", "properties": {
                "posts": array_of("Post"),
                "featuredIn": array_of("Post"),
            }},
        })
        joins = [t.name for t in generate(doc).tables if t.is_join_table]
        assert joins == ["post_tag", "post_featured_tags_tag"]

    def test_duplicate_declared_join_table(self):
        """Should reject two pairs that declare the same join table."""
        doc = document({
            "Post": {"type": "object", "properties": {
                "tags": {**array_of("Tag"), "x-join-table": "links"},
                "featuredTags": {**array_of("Tag"), "x-join-table": "links"},
            }},
            "Tag": {"type": "object", "properties": {
                "posts": array_of("Post"),
                "featuredIn": array_of("Post"),
            }},
        })
        with pytest.raises(ConfigurationError, match="links"):
            resolve(doc)

    def test_self_referential(self):
        doc = document({
            "Person": {"type": "object", "properties": {
                "friends": array_of("Person"),
                "followers": array_of("Person"),
            }},
        })
        result = resolve(doc)
        many = [r for r in result.relationships if r.type == RelationshipType.MANY_TO_MANY]
        assert len(many) == 1
        assert many[0].through_table == "person_person"


# =============================================================================
# One-to-many and Inverses
# =============================================================================

class TestOneToMany:
    """The foreign key of a one-to-many lives on the target."""

    def test_inverse_many_to_one_added(self):
        doc = document({
            "Author": {"type": "object", "properties": {"books": array_of("Book")}},
            "Book": {"type": "object", "properties": {"title": {"type": "string"}}},
        })
        result = resolve(doc)

        (inverse,) = result.relations_for("Book")
        assert inverse.type == RelationType.MANY_TO_ONE
        assert inverse.target_schema == "Author"
        assert inverse.foreign_key == "author_id"

        types = [(r.from_table, r.to_table, r.type) for r in result.relationships]
        assert types == [
            ("author", "book", RelationshipType.ONE_TO_MANY),
            ("book", "author", RelationshipType.MANY_TO_ONE),
        ]
        assert result.relationships[0].foreign_key is None
        assert result.relationships[1].foreign_key == "author_id"

    def test_back_reference_reclassified(self, blog_document):
        result = resolve(blog_document)

        (post_ref,) = result.relations_for("Comment")
        assert post_ref.type == RelationType.MANY_TO_ONE
        assert post_ref.foreign_key == "post_id"
        assert post_ref.property_name == "post"

    def test_blog_relationships(self, blog_document):
        result = resolve(blog_document)
        summary = [
            (r.from_table, r.to_table, r.type, r.foreign_key, r.through_table)
            for r in result.relationships
        ]
        assert summary == [
            ("post", "user", RelationshipType.ONE_TO_ONE, "user_id", None),
            ("post", "tag", RelationshipType.MANY_TO_MANY, None, "post_tag"),
            ("post", "comment", RelationshipType.ONE_TO_MANY, None, None),
            ("comment", "post", RelationshipType.MANY_TO_ONE, "post_id", None),
        ]

    def test_inverse_foreign_key_collision(self):
        doc = document({
            "Team": {"type": "object", "properties": {
                "members": array_of("Player"),
                "reserves": array_of("Player"),
            }},
            "Player": {"type": "object", "properties": {"name": {"type": "string"}}},
        })
        result = resolve(doc)
        assert [r.foreign_key for r in result.relations_for("Player")] == [
            "team_id", "team_reserves_id",
        ]


# =============================================================================
# Dangling References
# =============================================================================

class TestDanglingReferences:
    """Unknown targets are reported all at once."""

    def test_all_dangling_collected(self, fixtures_dir):
        from spec_to_db.loader import load_openapi_document

        result = resolve(load_openapi_document(fixtures_dir / "dangling.yaml"))

        assert len(result.dangling) == 2
        assert all(isinstance(e, DanglingReferenceError) for e in result.dangling)
        assert [e.target_schema for e in result.dangling] == ["Customer", "LineItem"]
        assert str(result.dangling[0]) == "Order.customer references unknown schema 'Customer'"
        assert result.relations_for("Order") == ()
        assert result.relationships == []

    def test_valid_relations_kept(self):
        doc = document({
            "Post": {"type": "object", "properties": {
                "author": ref("User"),
                "editor": ref("Ghost"),
            }},
            "User": {"type": "object", "properties": {"name": {"type": "string"}}},
        })
        result = resolve(doc)
        assert [e.property_name for e in result.dangling] == ["editor"]
        assert [r.property_name for r in result.relations_for("Post")] == ["author"]
