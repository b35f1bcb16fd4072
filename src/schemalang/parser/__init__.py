"""Lexer, field parser and block parser for the schema description language."""

from .diagnostics import (
    DiagnosticCode,
    DiagnosticSeverity,
    ParseDiagnostic,
    ParseResult,
    SchemaParseError,
)
from .fields import build_relation, classify_relation, parse_field
from .lexer import Token, TokenType, strip_comments, tokenize
from .parser import (
    ParserConfig,
    SchemaParser,
    extract_enums,
    extract_models,
    parse_schema,
    parse_schema_with_diagnostics,
)

__all__ = [
    "DiagnosticCode",
    "DiagnosticSeverity",
    "ParseDiagnostic",
    "ParseResult",
    "SchemaParseError",
    "ParserConfig",
    "SchemaParser",
    "Token",
    "TokenType",
    "strip_comments",
    "tokenize",
    "parse_field",
    "classify_relation",
    "build_relation",
    "parse_schema",
    "parse_schema_with_diagnostics",
    "extract_enums",
    "extract_models",
]
