"""Markdown documentation rendering."""

from __future__ import annotations

from typing import List

from ..analysis.statistics import get_schema_stats
from ..models import ParsedSchema, SchemaField


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def _attribute_summary(field: SchemaField) -> str:
    parts = []
    if field.is_primary_key:
        parts.append("PK")
    if field.is_unique:
        parts.append("Unique")
    if field.has_default and field.default_value is not None:
        parts.append(f"Default: `{field.default_value}`")
    elif field.has_default:
        parts.append("Default")
    if field.relation is not None:
        parts.append(f"→ {field.relation.model}")
    return ", ".join(parts)


def generate_markdown_docs(
    schema: ParsedSchema, *, title: str = "Database Schema Documentation"
) -> str:
    """Render *schema* as Markdown: overview table, models, then enums."""
    stats = get_schema_stats(schema)
    lines: List[str] = [f"# {title}", "", "## Overview", ""]
    lines.append("| Metric | Count |")
    lines.append("|--------|-------|")
    lines.append(f"| Models | {stats.model_count} |")
    lines.append(f"| Enums | {stats.enum_count} |")
    lines.append(f"| Fields | {stats.total_fields} |")
    lines.append(f"| Relations | {stats.total_relations} |")
    lines.append(f"| Indexes | {stats.total_indexes} |")
    lines.append(f"| Avg fields per model | {stats.avg_fields_per_model} |")

    if schema.models:
        lines.extend(["", "## Models"])
    for model in schema.models:
        lines.extend(["", f"### {model.name}", ""])
        lines.append("| Field | Type | Attributes |")
        lines.append("|-------|------|------------|")
        for field in model.fields:
            lines.append(
                f"| {_cell(field.name)} | `{_cell(field.display_type)}` "
                f"| {_cell(_attribute_summary(field))} |"
            )
        if model.indexes:
            lines.extend(["", "**Indexes:**", ""])
            lines.extend(f"- `{index}`" for index in model.indexes)
        if model.unique_constraints:
            lines.extend(["", "**Unique constraints:**", ""])
            lines.extend(f"- `{constraint}`" for constraint in model.unique_constraints)

    if schema.enums:
        lines.extend(["", "## Enums"])
    for enum in schema.enums:
        lines.extend(["", f"### {enum.name}", ""])
        lines.extend(f"- `{value}`" for value in enum.values)

    return "\n".join(lines) + "\n"
