"""Mermaid ``erDiagram`` rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set

from ..models import Cardinality, ParsedSchema, SchemaField

RELATION_SYMBOLS = {
    Cardinality.ONE_TO_ONE: "||--||",
    Cardinality.ONE_TO_MANY: "||--o{",
    Cardinality.MANY_TO_ONE: "}o--||",
    Cardinality.MANY_TO_MANY: "}o--o{",
}


@dataclass
class ErdOptions:
    """Configuration for generate_mermaid_erd."""

    include_fields: bool = True
    # Field lines per entity before a "...N more" marker is emitted.
    max_fields_per_model: int = 15


def _key_indicator(field: SchemaField) -> str:
    if field.is_primary_key:
        return "PK"
    if field.is_unique:
        return "UK"
    return ""


def _field_line(field: SchemaField) -> str:
    # Mermaid type names cannot carry [] or ?, so modifiers go in the comment.
    modifiers = []
    if field.is_array:
        modifiers.append("array")
    if field.is_optional:
        modifiers.append("optional")

    comment_parts = []
    indicator = _key_indicator(field)
    if indicator:
        comment_parts.append(indicator)
    if modifiers:
        comment_parts.append(",".join(modifiers))
    comment = f' "{" ".join(comment_parts)}"' if comment_parts else ""

    return f"        {field.type.lower()} {field.name}{comment}"


def generate_mermaid_erd(
    schema: ParsedSchema, options: Optional[ErdOptions] = None
) -> str:
    """Render *schema* as Mermaid ER diagram markup.

    Relation fields are drawn as relationship lines instead of entity
    attributes. Only the first relation between any two models is drawn.
    """
    options = options or ErdOptions()
    if options.max_fields_per_model < 0:
        raise ValueError("max_fields_per_model must be >= 0")

    model_names = set(schema.model_names)
    lines: List[str] = ["erDiagram"]

    for model in schema.models:
        lines.append(f"    {model.name} {{")
        if options.include_fields:
            limit = options.max_fields_per_model
            for field in model.fields[:limit]:
                if field.relation is not None or field.type in model_names:
                    continue
                lines.append(_field_line(field))
            if len(model.fields) > limit:
                hidden = len(model.fields) - limit
                lines.append(f'        string more "...{hidden} more"')
        lines.append("    }")

    drawn: Set[frozenset] = set()
    for relation in schema.relations:
        pair = frozenset((relation.from_model, relation.to_model))
        if pair in drawn:
            continue
        drawn.add(pair)
        symbol = RELATION_SYMBOLS[relation.type]
        lines.append(
            f'    {relation.from_model} {symbol} {relation.to_model} : "{relation.from_field}"'
        )

    return "\n".join(lines) + "\n"
