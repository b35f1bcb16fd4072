"""
Dialect-aware SQL DDL rendering.

Emits enum types (PostgreSQL only), one CREATE TABLE per model, then index
and foreign-key statements once every table exists. Relation fields are not
columns; their ``fields``/``references`` become foreign keys.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List, Optional, Set, Union

import sqlparse

from ..models import SCALAR_TYPES, ParsedSchema, SchemaField, SchemaModel


class SqlDialect(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


TYPE_MAPS: Dict[SqlDialect, Dict[str, str]] = {
    SqlDialect.POSTGRESQL: {
        "String": "TEXT",
        "Int": "INTEGER",
        "BigInt": "BIGINT",
        "Float": "DOUBLE PRECISION",
        "Decimal": "DECIMAL(65,30)",
        "Boolean": "BOOLEAN",
        "DateTime": "TIMESTAMP(3)",
        "Json": "JSONB",
        "Bytes": "BYTEA",
    },
    SqlDialect.MYSQL: {
        "String": "VARCHAR(191)",
        "Int": "INT",
        "BigInt": "BIGINT",
        "Float": "DOUBLE",
        "Decimal": "DECIMAL(65,30)",
        "Boolean": "BOOLEAN",
        "DateTime": "DATETIME(3)",
        "Json": "JSON",
        "Bytes": "LONGBLOB",
    },
}

# Column type for enum-typed fields on dialects without native enums.
MYSQL_ENUM_COLUMN_TYPE = "VARCHAR(191)"

REFERENTIAL_ACTIONS = {
    "Cascade": "CASCADE",
    "Restrict": "RESTRICT",
    "NoAction": "NO ACTION",
    "SetNull": "SET NULL",
    "SetDefault": "SET DEFAULT",
}

_SERIAL_TYPES = {"Int": "SERIAL", "BigInt": "BIGSERIAL"}
_LIST_RE = re.compile(r"\[([^\]]*)\]")
_IDENTIFIER_RE = re.compile(r"\s*(\w+)")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_DBGENERATED_RE = re.compile(r'dbgenerated\(\s*"(.*)"\s*\)')


def _quote(name: str, dialect: SqlDialect) -> str:
    if dialect == SqlDialect.MYSQL:
        return f"`{name}`"
    return f'"{name}"'


def _literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _annotation_columns(annotation: str) -> List[str]:
    """Column names of ``@@index([a, b(sort: Desc)])`` style annotations."""
    match = _LIST_RE.search(annotation)
    if not match:
        return []
    columns = []
    for part in match.group(1).split(","):
        name = _IDENTIFIER_RE.match(part)
        if name:
            columns.append(name.group(1))
    return columns


class _DdlWriter:
    def __init__(self, schema: ParsedSchema, dialect: SqlDialect) -> None:
        self.schema = schema
        self.dialect = dialect
        self.type_map = TYPE_MAPS[dialect]
        self.model_names: Set[str] = set(schema.model_names)
        self.enum_names: Set[str] = set(schema.enum_names)

    def q(self, name: str) -> str:
        return _quote(name, self.dialect)

    def q_list(self, names: List[str]) -> str:
        return ", ".join(self.q(name) for name in names)

    # -- columns ------------------------------------------------------------

    def is_column(self, field: SchemaField) -> bool:
        return field.relation is None and field.type not in self.model_names

    def column_type(self, field: SchemaField) -> str:
        autoincrement = field.default_value == "autoincrement()"
        if field.type in SCALAR_TYPES:
            if (
                autoincrement
                and self.dialect == SqlDialect.POSTGRESQL
                and field.type in _SERIAL_TYPES
            ):
                base = _SERIAL_TYPES[field.type]
            else:
                base = self.type_map[field.type]
        elif field.type in self.enum_names:
            if self.dialect == SqlDialect.POSTGRESQL:
                base = self.q(field.type)
            else:
                base = MYSQL_ENUM_COLUMN_TYPE
        else:
            # Unknown types are passed through untouched.
            base = field.type

        if field.is_array:
            base = f"{base}[]" if self.dialect == SqlDialect.POSTGRESQL else "JSON"
        if autoincrement and self.dialect == SqlDialect.MYSQL:
            base += " AUTO_INCREMENT"
        return base

    def default_clause(self, field: SchemaField) -> Optional[str]:
        value = field.default_value
        if value is None or value == "autoincrement()":
            return None
        if value == "now()":
            if self.dialect == SqlDialect.MYSQL:
                return "CURRENT_TIMESTAMP(3)"
            return "CURRENT_TIMESTAMP"
        if value in ("true", "false"):
            return value.upper()
        if _NUMBER_RE.fullmatch(value):
            return value
        if value.startswith('"') and value.endswith('"') and len(value) >= 2:
            return _literal(value[1:-1])
        if field.type in self.enum_names and re.fullmatch(r"\w+", value):
            return _literal(value)
        generated = _DBGENERATED_RE.fullmatch(value)
        if generated:
            return generated.group(1)
        # uuid(), cuid() and other client-side generators have no SQL default.
        return None

    def column(self, field: SchemaField) -> str:
        parts = [self.q(field.name), self.column_type(field)]
        if not field.is_optional and not field.has_default:
            parts.append("NOT NULL")
        default = self.default_clause(field)
        if default is not None:
            parts.append(f"DEFAULT {default}")
        if field.is_primary_key:
            parts.append("PRIMARY KEY")
        return " ".join(parts)

    # -- statements ---------------------------------------------------------

    def enum_types(self) -> List[str]:
        if self.dialect != SqlDialect.POSTGRESQL:
            return []
        statements = []
        for enum in self.schema.enums:
            values = ", ".join(_literal(value.split()[0]) for value in enum.values)
            statements.append(f"CREATE TYPE {self.q(enum.name)} AS ENUM ({values});")
        return statements

    def create_table(self, model: SchemaModel) -> str:
        columns = [f for f in model.fields if self.is_column(f)]
        if not columns:
            return f"-- {model.name}: no columns, table skipped"
        entries = [self.column(f) for f in columns]

        for field in columns:
            if field.is_unique and not field.is_primary_key:
                entries.append(f"UNIQUE ({self.q(field.name)})")
        for constraint in model.unique_constraints:
            names = _annotation_columns(constraint)
            if names:
                entries.append(f"UNIQUE ({self.q_list(names)})")

        body = ",\n".join(f"  {entry}" for entry in entries)
        return f"CREATE TABLE {self.q(model.name)} (\n{body}\n);"

    def create_indexes(self, model: SchemaModel) -> List[str]:
        statements = []
        if not any(self.is_column(f) for f in model.fields):
            return statements
        for annotation in model.indexes:
            names = _annotation_columns(annotation)
            if not names:
                continue
            index_name = "_".join([model.name, *names, "idx"])
            statements.append(
                f"CREATE INDEX {self.q(index_name)} ON {self.q(model.name)} "
                f"({self.q_list(names)});"
            )
        return statements

    def foreign_keys(self, model: SchemaModel) -> List[str]:
        statements = []
        for field in model.fields:
            relation = field.relation
            if relation is None or not relation.fields or not relation.references:
                continue
            constraint = "_".join([model.name, *relation.fields, "fkey"])
            clause = (
                f"ALTER TABLE {self.q(model.name)} ADD CONSTRAINT {self.q(constraint)} "
                f"FOREIGN KEY ({self.q_list(relation.fields)}) "
                f"REFERENCES {self.q(relation.model)} ({self.q_list(relation.references)})"
            )
            if relation.on_delete in REFERENTIAL_ACTIONS:
                clause += f" ON DELETE {REFERENTIAL_ACTIONS[relation.on_delete]}"
            if relation.on_update in REFERENTIAL_ACTIONS:
                clause += f" ON UPDATE {REFERENTIAL_ACTIONS[relation.on_update]}"
            statements.append(clause + ";")
        return statements


def generate_sql_ddl(
    schema: ParsedSchema,
    dialect: Union[SqlDialect, str] = SqlDialect.POSTGRESQL,
    *,
    include_foreign_keys: bool = True,
    include_indexes: bool = True,
) -> str:
    """Render *schema* as a DDL script for *dialect* (``postgresql`` or ``mysql``)."""
    dialect = resolve_dialect(dialect)
    writer = _DdlWriter(schema, dialect)

    statements: List[str] = writer.enum_types()
    statements.extend(writer.create_table(model) for model in schema.models)
    if include_indexes:
        for model in schema.models:
            statements.extend(writer.create_indexes(model))
    if include_foreign_keys:
        for model in schema.models:
            statements.extend(writer.foreign_keys(model))

    header = (
        f"-- {dialect.value} DDL generated from schema\n"
        f"-- Models: {len(schema.models)}, Enums: {len(schema.enums)}"
    )
    return "\n\n".join([header, *statements]) + "\n"


def resolve_dialect(dialect: Union[SqlDialect, str]) -> SqlDialect:
    """Map a dialect name (case-insensitive) to a SqlDialect."""
    supported = ", ".join(d.value for d in SqlDialect)
    if not isinstance(dialect, str):
        raise ValueError(f"Unsupported SQL dialect {dialect!r}. Supported: {supported}")
    try:
        return SqlDialect(dialect.lower())
    except ValueError as exc:
        raise ValueError(
            f"Unsupported SQL dialect {dialect!r}. Supported: {supported}"
        ) from exc


def split_statements(sql: str) -> List[str]:
    """Split a DDL script into individual statements, comments removed."""
    cleaned = sqlparse.format(sql, strip_comments=True)
    return [s.strip() for s in sqlparse.split(cleaned) if s.strip()]
