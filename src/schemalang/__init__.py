"""
schemalang: parser, analysis passes and generators for the schema
description language.

Parses model/enum definitions into a ParsedSchema, derives statistics and
relation cardinalities, diffs two snapshots, and renders Mermaid ER
diagrams, SQL DDL and Markdown documentation. Everything is a pure,
synchronous text-to-structure-to-text transform.
"""

from .analysis import (
    DetailedSchemaStats,
    SchemaDiff,
    SchemaStats,
    StatisticsConfig,
    diff_schemas,
    get_detailed_schema_stats,
    get_schema_stats,
)
from .generators import (
    ErdOptions,
    SqlDialect,
    generate_markdown_docs,
    generate_mermaid_erd,
    generate_sql_ddl,
)
from .models import (
    Cardinality,
    ParsedSchema,
    RelationRef,
    SchemaEnum,
    SchemaField,
    SchemaModel,
    SchemaRelation,
)
from .parser import (
    ParseDiagnostic,
    ParseResult,
    ParserConfig,
    SchemaParseError,
    parse_schema,
    parse_schema_with_diagnostics,
)

__all__ = [
    "Cardinality",
    "ParsedSchema",
    "RelationRef",
    "SchemaEnum",
    "SchemaField",
    "SchemaModel",
    "SchemaRelation",
    "ParseDiagnostic",
    "ParseResult",
    "ParserConfig",
    "SchemaParseError",
    "parse_schema",
    "parse_schema_with_diagnostics",
    "SchemaDiff",
    "diff_schemas",
    "SchemaStats",
    "DetailedSchemaStats",
    "StatisticsConfig",
    "get_schema_stats",
    "get_detailed_schema_stats",
    "ErdOptions",
    "SqlDialect",
    "generate_mermaid_erd",
    "generate_sql_ddl",
    "generate_markdown_docs",
]
