"""Renderers that turn a ParsedSchema into diagram, SQL or Markdown text."""

from .erd import ErdOptions, generate_mermaid_erd
from .markdown import generate_markdown_docs
from .sql import SqlDialect, generate_sql_ddl, resolve_dialect, split_statements

__all__ = [
    "ErdOptions",
    "generate_mermaid_erd",
    "generate_markdown_docs",
    "SqlDialect",
    "generate_sql_ddl",
    "resolve_dialect",
    "split_statements",
]
