"""Tests for single-line field parsing and relation classification."""

import pytest

from schemalang.models import Cardinality, SchemaField
from schemalang.parser.fields import build_relation, classify_relation, parse_field


class TestFieldShape:
    def test_plain_field(self):
        field = parse_field("name String")
        assert field.name == "name"
        assert field.type == "String"
        assert field.is_array is False
        assert field.is_optional is False
        assert field.attributes == []

    def test_optional_field(self):
        field = parse_field("bio String?")
        assert field.is_optional is True
        assert field.is_array is False

    def test_array_field(self):
        field = parse_field("roles Role[]")
        assert field.is_array is True
        assert field.is_optional is False

    def test_detached_brackets_are_not_an_array(self):
        field = parse_field("tags String []")
        assert field.type == "String"
        assert field.is_array is False

    @pytest.mark.parametrize("line", ["", "   ", "justaname", "@@index([a])", "1 Int"])
    def test_non_field_lines_yield_nothing(self, line):
        assert parse_field(line) is None

    def test_span_is_recorded(self):
        field = parse_field("  email String @unique")
        assert field.span.line == 1
        assert field.span.column == 3
        assert field.span.end_column == len("  email String @unique") + 1


class TestAttributes:
    def test_primary_key_and_default(self):
        field = parse_field("id String @id @default(uuid())")
        assert field.is_primary_key is True
        assert field.has_default is True
        assert field.default_value == "uuid()"
        assert field.attributes == ["@id", "@default(uuid())"]

    def test_unique(self):
        field = parse_field("email String @unique")
        assert field.is_unique is True
        assert field.is_primary_key is False

    def test_default_literal_kept_verbatim(self):
        field = parse_field('status String @default("a, b")')
        assert field.default_value == '"a, b"'

    def test_default_without_arguments(self):
        field = parse_field("updatedAt DateTime @default")
        assert field.has_default is True
        assert field.default_value is None

    def test_dotted_attribute(self):
        field = parse_field("name String @db.VarChar(255)")
        assert field.attributes == ["@db.VarChar(255)"]
        assert field.has_default is False

    def test_updated_at_is_not_a_key(self):
        field = parse_field("updatedAt DateTime @updatedAt")
        assert field.attributes == ["@updatedAt"]
        assert not (field.is_primary_key or field.is_unique or field.has_default)

    def test_trailing_comment_ignored(self):
        field = parse_field("count Int @default(0) // counter")
        assert field.default_value == "0"
        assert field.attributes == ["@default(0)"]


class TestRelations:
    def test_full_relation(self):
        field = parse_field(
            "author User @relation(fields: [authorId], references: [id], "
            "onDelete: Cascade, onUpdate: Restrict)"
        )
        assert field.relation is not None
        assert field.relation.model == "User"
        assert field.relation.fields == ["authorId"]
        assert field.relation.references == ["id"]
        assert field.relation.on_delete == "Cascade"
        assert field.relation.on_update == "Restrict"

    def test_sub_clauses_are_order_insensitive(self):
        field = parse_field(
            "author User @relation(onDelete: SetNull, references: [id], fields: [authorId])"
        )
        assert field.relation.fields == ["authorId"]
        assert field.relation.references == ["id"]
        assert field.relation.on_delete == "SetNull"
        assert field.relation.on_update is None

    def test_composite_keys(self):
        field = parse_field(
            "owner Account @relation(fields: [tenantId, ownerId], references: [tenantId, id])"
        )
        assert field.relation.fields == ["tenantId", "ownerId"]
        assert field.relation.references == ["tenantId", "id"]

    def test_named_relation_without_keys(self):
        field = parse_field('assigned Task[] @relation("AssignedTo")')
        assert field.relation.model == "Task"
        assert field.relation.fields is None
        assert field.relation.references is None

    def test_relation_requires_argument_list(self):
        field = parse_field("owner User @relation")
        assert field.relation is None

    def test_empty_relation_arguments_are_not_a_relation(self):
        field = parse_field("owner User @relation()")
        assert field.relation is None
        assert field.attributes == ["@relation()"]

    def test_scalar_type_never_has_relation(self):
        field = parse_field("ownerId String @relation(fields: [a], references: [b])")
        assert field.relation is None
        assert field.attributes == ["@relation(fields: [a], references: [b])"]

    def test_enum_type_never_has_relation(self):
        field = parse_field("role Role @relation(fields: [a])", enum_names={"Role"})
        assert field.relation is None

    def test_array_relation_is_one_to_many(self):
        field = parse_field('roles Role[] @relation("UserRoles")')
        assert field.is_array is True
        assert field.is_optional is False
        assert classify_relation(field) == Cardinality.ONE_TO_MANY


class TestRelationClassifier:
    @pytest.mark.parametrize(
        "is_array, is_optional, expected",
        [
            (True, False, Cardinality.ONE_TO_MANY),
            (True, True, Cardinality.ONE_TO_MANY),
            (False, True, Cardinality.ONE_TO_ONE),
            (False, False, Cardinality.MANY_TO_ONE),
        ],
    )
    def test_cardinality_from_modifiers(self, is_array, is_optional, expected):
        field = SchemaField(
            name="x", type="Other", is_array=is_array, is_optional=is_optional
        )
        assert classify_relation(field) == expected

    def test_build_relation(self):
        field = parse_field(
            "project Project @relation(fields: [projectId], references: [id], onDelete: Cascade)"
        )
        relation = build_relation("Scan", field)
        assert relation.from_model == "Scan"
        assert relation.to_model == "Project"
        assert relation.from_field == "project"
        assert relation.type == Cardinality.MANY_TO_ONE
        assert relation.on_delete == "Cascade"

    def test_plain_field_has_no_relation_edge(self):
        assert build_relation("Scan", parse_field("name String")) is None
