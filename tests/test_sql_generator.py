"""Tests for SQL DDL rendering."""

import pytest

from schemalang import SqlDialect, generate_sql_ddl, parse_schema
from schemalang.generators.sql import resolve_dialect, split_statements


def _table(sql, name, dialect=SqlDialect.POSTGRESQL):
    quote = "`" if dialect == SqlDialect.MYSQL else '"'
    start = sql.index(f"CREATE TABLE {quote}{name}{quote} (\n")
    end = sql.index("\n);", start)
    body = sql[start:end].split("\n")[1:]
    return [line.strip().rstrip(",") for line in body]


class TestPostgres:
    def test_statement_layout(self, sample_schema):
        statements = split_statements(generate_sql_ddl(sample_schema))
        assert len(statements) == 12
        assert statements[0].startswith('CREATE TYPE "Role"')
        assert statements[2].startswith('CREATE TABLE "Organization"')
        assert statements[6].startswith("CREATE INDEX")
        assert statements[8].startswith("ALTER TABLE")

    def test_header(self, sample_schema):
        sql = generate_sql_ddl(sample_schema)
        assert sql.startswith("-- postgresql DDL generated from schema\n-- Models: 4, Enums: 2")

    def test_enum_types(self, sample_schema):
        sql = generate_sql_ddl(sample_schema)
        assert "CREATE TYPE \"Role\" AS ENUM ('ADMIN', 'DEVELOPER', 'VIEWER');" in sql
        assert "CREATE TYPE \"Severity\" AS ENUM ('CRITICAL', 'HIGH', 'LOW');" in sql

    def test_organization_table(self, sample_schema):
        assert _table(generate_sql_ddl(sample_schema), "Organization") == [
            '"id" TEXT PRIMARY KEY',
            '"name" TEXT NOT NULL',
            '"slug" TEXT NOT NULL',
            "\"website\" TEXT DEFAULT 'https://example.com'",
            '"createdAt" TIMESTAMP(3) DEFAULT CURRENT_TIMESTAMP',
            'UNIQUE ("slug")',
        ]

    def test_user_table(self, sample_schema):
        assert _table(generate_sql_ddl(sample_schema), "User") == [
            '"id" SERIAL PRIMARY KEY',
            '"email" TEXT NOT NULL',
            "\"role\" \"Role\" DEFAULT 'VIEWER'",
            '"tags" TEXT[] NOT NULL',
            '"organizationId" TEXT',
            'UNIQUE ("email")',
        ]

    def test_composite_unique_constraint(self, sample_schema):
        lines = _table(generate_sql_ddl(sample_schema), "Project")
        assert lines[-1] == 'UNIQUE ("organizationId", "name")'

    def test_relation_fields_are_not_columns(self, sample_schema):
        lines = _table(generate_sql_ddl(sample_schema), "ScanResult")
        assert not any(line.startswith('"project"') for line in lines)
        assert not any(line.startswith('"assignee"') for line in lines)
        assert '"rawResult" JSONB NOT NULL' in lines
        assert '"assigneeId" INTEGER' in lines

    def test_indexes(self, sample_schema):
        sql = generate_sql_ddl(sample_schema)
        assert 'CREATE INDEX "Organization_slug_idx" ON "Organization" ("slug");' in sql
        assert (
            'CREATE INDEX "Project_organizationId_idx" ON "Project" ("organizationId");'
            in sql
        )

    def test_foreign_keys(self, sample_schema):
        sql = generate_sql_ddl(sample_schema)
        assert (
            'ALTER TABLE "Project" ADD CONSTRAINT "Project_organizationId_fkey" '
            'FOREIGN KEY ("organizationId") REFERENCES "Organization" ("id") '
            "ON DELETE CASCADE;"
        ) in sql
        assert (
            'ALTER TABLE "ScanResult" ADD CONSTRAINT "ScanResult_projectId_fkey" '
            'FOREIGN KEY ("projectId") REFERENCES "Project" ("id") '
            "ON DELETE CASCADE ON UPDATE CASCADE;"
        ) in sql
        assert "ON DELETE SET NULL;" in sql
        assert sql.count("ALTER TABLE") == 4

    def test_optional_statements_disabled(self, sample_schema):
        sql = generate_sql_ddl(
            sample_schema, include_foreign_keys=False, include_indexes=False
        )
        assert "ALTER TABLE" not in sql
        assert "CREATE INDEX" not in sql
        assert len(split_statements(sql)) == 6


class TestMysql:
    def test_statement_layout(self, sample_schema):
        sql = generate_sql_ddl(sample_schema, "mysql")
        assert "CREATE TYPE" not in sql
        assert len(split_statements(sql)) == 10

    def test_user_table(self, sample_schema):
        sql = generate_sql_ddl(sample_schema, SqlDialect.MYSQL)
        assert _table(sql, "User", SqlDialect.MYSQL) == [
            "`id` INT AUTO_INCREMENT PRIMARY KEY",
            "`email` VARCHAR(191) NOT NULL",
            "`role` VARCHAR(191) DEFAULT 'VIEWER'",
            "`tags` JSON NOT NULL",
            "`organizationId` VARCHAR(191)",
            "UNIQUE (`email`)",
        ]

    def test_timestamps(self, sample_schema):
        sql = generate_sql_ddl(sample_schema, "mysql")
        assert "`createdAt` DATETIME(3) DEFAULT CURRENT_TIMESTAMP(3)" in sql


class TestColumns:
    def test_not_null_rule(self, sample_schema):
        sql = generate_sql_ddl(sample_schema)
        for model in sample_schema.models:
            lines = _table(sql, model.name)
            for field in model.fields:
                column = next(
                    (line for line in lines if line.startswith(f'"{field.name}" ')), None
                )
                if column is None:
                    continue
                expected = not field.is_optional and not field.has_default
                assert ("NOT NULL" in column) == expected

    def test_defaulted_optional_field_has_no_not_null(self):
        schema = parse_schema('model A {\n  note String? @default("x")\n  n Int @default(0)\n}')
        assert _table(generate_sql_ddl(schema), "A") == [
            "\"note\" TEXT DEFAULT 'x'",
            '"n" INTEGER DEFAULT 0',
        ]

    @pytest.mark.parametrize(
        "declaration, expected",
        [
            ("flag Boolean @default(true)", '"flag" BOOLEAN DEFAULT TRUE'),
            ("ratio Float @default(-1.5)", '"ratio" DOUBLE PRECISION DEFAULT -1.5'),
            ("big BigInt @id @default(autoincrement())", '"big" BIGSERIAL PRIMARY KEY'),
            ("ref String @id @default(cuid())", '"ref" TEXT PRIMARY KEY'),
            ("quote String @default(\"it's\")", "\"quote\" TEXT DEFAULT 'it''s'"),
            (
                'uid String @default(dbgenerated("gen_random_uuid()"))',
                '"uid" TEXT DEFAULT gen_random_uuid()',
            ),
            ("geo Point", '"geo" Point NOT NULL'),
            ("scores Int[]", '"scores" INTEGER[] NOT NULL'),
        ],
    )
    def test_column_rendering(self, declaration, expected):
        schema = parse_schema(f"model A {{\n  {declaration}\n}}")
        assert _table(generate_sql_ddl(schema), "A") == [expected]


class TestEmptyTables:
    def test_model_without_columns_is_skipped(self):
        schema = parse_schema(
            "model Post {\n  id Int @id\n  tagId Int\n"
            "  tag Tag @relation(fields: [tagId], references: [id])\n}\n"
            "model Tag {\n  posts Post[]\n\n  @@index([posts])\n}"
        )
        for dialect in SqlDialect:
            sql = generate_sql_ddl(schema, dialect)
            assert "-- Tag: no columns, table skipped" in sql
            assert "CREATE INDEX" not in sql
            tables = [s for s in split_statements(sql) if s.startswith("CREATE TABLE")]
            assert len(tables) == 1
            assert "Post" in tables[0]
            assert "(\n\n);" not in sql


class TestDialects:
    @pytest.mark.parametrize("name", ["postgresql", "PostgreSQL", SqlDialect.POSTGRESQL])
    def test_resolve_postgres(self, name):
        assert resolve_dialect(name) == SqlDialect.POSTGRESQL

    def test_resolve_mysql(self):
        assert resolve_dialect("MySQL") == SqlDialect.MYSQL

    def test_unknown_dialect(self, sample_schema):
        with pytest.raises(ValueError, match="Unsupported SQL dialect"):
            generate_sql_ddl(sample_schema, "sqlite")

    def test_empty_schema(self):
        statements = split_statements(generate_sql_ddl(parse_schema("")))
        assert statements == []
