"""
Field declaration parsing and relation classification.

A field declaration is a single line of a model body:

    <name> <Type>[[]][?] <attributes...>

where each attribute is ``@name``, ``@dotted.name`` or ``@name(args)`` with
balanced parentheses. The related model of an ``@relation(...)`` field is
always the field's own type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, List, Optional, Sequence, Tuple

from ..models import (
    SCALAR_TYPES,
    Cardinality,
    RelationRef,
    SchemaField,
    SchemaRelation,
    SourceSpan,
)
from .diagnostics import DiagnosticCode, DiagnosticSeverity, ParseDiagnostic
from .lexer import Token, TokenType, strip_comments, tokenize


PRIMARY_KEY_ATTRIBUTE = "id"
UNIQUE_ATTRIBUTE = "unique"
DEFAULT_ATTRIBUTE = "default"
RELATION_ATTRIBUTE = "relation"

_OPENERS = {TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE}
_CLOSERS = {TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE}


@dataclass
class _Attribute:
    name: str
    text: str
    args: Optional[List[Token]] = None
    args_text: Optional[str] = None


def _slice(line_text: str, first: Token, last: Token) -> str:
    return line_text[first.column - 1 : last.end_column - 1]


def _adjacent(previous: Token, current: Token) -> bool:
    return previous.line == current.line and previous.end_column == current.column


def _warn(
    report: Optional[List[ParseDiagnostic]],
    code: DiagnosticCode,
    message: str,
    token: Token,
) -> None:
    if report is not None:
        report.append(
            ParseDiagnostic(
                severity=DiagnosticSeverity.WARNING,
                code=code,
                message=message,
                line=token.line,
                column=token.column,
            )
        )


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def _read_attribute(
    tokens: Sequence[Token],
    start: int,
    line_text: str,
    report: Optional[List[ParseDiagnostic]],
) -> Tuple[Optional[_Attribute], int]:
    """Read one attribute starting at ``tokens[start]`` (an ``@`` token).

    Returns ``(attribute or None, next index)``.
    """
    at = tokens[start]
    index = start + 1
    if index >= len(tokens) or tokens[index].type != TokenType.IDENTIFIER:
        _warn(
            report, DiagnosticCode.IGNORED_TOKEN, "Attribute name expected after '@'", at
        )
        return None, index

    name_parts = [tokens[index].value]
    last = tokens[index]
    index += 1
    while (
        index + 1 < len(tokens)
        and tokens[index].type == TokenType.DOT
        and tokens[index + 1].type == TokenType.IDENTIFIER
        and _adjacent(last, tokens[index])
    ):
        name_parts.append(tokens[index + 1].value)
        last = tokens[index + 1]
        index += 2

    attribute = _Attribute(name=".".join(name_parts), text="")

    if (
        index < len(tokens)
        and tokens[index].type == TokenType.LPAREN
        and _adjacent(last, tokens[index])
    ):
        open_paren = tokens[index]
        depth = 0
        close_index = None
        for position in range(index, len(tokens)):
            token_type = tokens[position].type
            if token_type in _OPENERS:
                depth += 1
            elif token_type in _CLOSERS:
                depth -= 1
                if depth == 0:
                    close_index = position
                    break
        if close_index is None:
            _warn(
                report,
                DiagnosticCode.UNEXPECTED_TOKEN,
                f"Unclosed parenthesis in attribute '@{attribute.name}'",
                open_paren,
            )
            attribute.args = list(tokens[index + 1 :])
            last = tokens[-1]
            index = len(tokens)
            attribute.args_text = line_text[
                open_paren.end_column - 1 : last.end_column - 1
            ].strip()
        else:
            close_paren = tokens[close_index]
            attribute.args = list(tokens[index + 1 : close_index])
            attribute.args_text = line_text[
                open_paren.end_column - 1 : close_paren.column - 1
            ].strip()
            last = close_paren
            index = close_index + 1

    attribute.text = _slice(line_text, at, last)
    return attribute, index


def _split_top_level(tokens: Sequence[Token]) -> List[List[Token]]:
    """Split tokens on commas that are not nested in brackets or parentheses."""
    parts: List[List[Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.type in _OPENERS:
            depth += 1
        elif token.type in _CLOSERS:
            depth -= 1
        if token.type == TokenType.COMMA and depth == 0:
            parts.append([])
            continue
        parts[-1].append(token)
    return [part for part in parts if part]


def _list_values(tokens: Sequence[Token], line_text: str) -> Optional[List[str]]:
    """Read ``[a, b]`` into ``["a", "b"]``; ``None`` when absent or empty."""
    if not tokens or tokens[0].type != TokenType.LBRACKET:
        return None
    inner = list(tokens[1:])
    if inner and inner[-1].type == TokenType.RBRACKET:
        inner = inner[:-1]
    values = [_slice(line_text, part[0], part[-1]) for part in _split_top_level(inner)]
    return values or None


def _parse_relation_args(
    args: Sequence[Token], field_type: str, line_text: str
) -> RelationRef:
    values = {}
    for part in _split_top_level(args):
        if (
            len(part) < 3
            or part[0].type != TokenType.IDENTIFIER
            or part[1].type != TokenType.COLON
        ):
            # Positional arguments such as the relation name are not used.
            continue
        key, rest = part[0].value, part[2:]
        if key in ("fields", "references"):
            values[key] = _list_values(rest, line_text)
        elif key in ("onDelete", "onUpdate") and rest[0].type == TokenType.IDENTIFIER:
            values[key] = rest[0].value
    return RelationRef(
        model=field_type,
        fields=values.get("fields"),
        references=values.get("references"),
        on_delete=values.get("onDelete"),
        on_update=values.get("onUpdate"),
    )


# ---------------------------------------------------------------------------
# Field Parser
# ---------------------------------------------------------------------------


def parse_field_tokens(
    tokens: Sequence[Token],
    line_text: str,
    *,
    enum_names: Collection[str] = (),
    report: Optional[List[ParseDiagnostic]] = None,
) -> Optional[SchemaField]:
    """Parse the tokens of one declaration line into a SchemaField.

    *line_text* is the comment-free source line the tokens were read from.
    Returns ``None`` (and reports ``INVALID_FIELD``) when the line does not
    have the ``<name> <Type>`` shape.
    """
    if (
        len(tokens) < 2
        or tokens[0].type != TokenType.IDENTIFIER
        or tokens[1].type != TokenType.IDENTIFIER
    ):
        if tokens:
            _warn(
                report,
                DiagnosticCode.INVALID_FIELD,
                f"Not a field declaration: '{_slice(line_text, tokens[0], tokens[-1])}'",
                tokens[0],
            )
        return None

    name_token, type_token = tokens[0], tokens[1]
    last = type_token
    index = 2

    is_array = False
    if (
        index + 1 < len(tokens)
        and tokens[index].type == TokenType.LBRACKET
        and tokens[index + 1].type == TokenType.RBRACKET
        and _adjacent(last, tokens[index])
    ):
        is_array = True
        last = tokens[index + 1]
        index += 2

    is_optional = False
    if (
        index < len(tokens)
        and tokens[index].type == TokenType.QUESTION
        and _adjacent(last, tokens[index])
    ):
        is_optional = True
        last = tokens[index]
        index += 1

    attributes: List[_Attribute] = []
    while index < len(tokens):
        token = tokens[index]
        if token.type == TokenType.AT:
            attribute, index = _read_attribute(tokens, index, line_text, report)
            if attribute is not None:
                attributes.append(attribute)
                last = tokens[index - 1]
            continue
        _warn(
            report,
            DiagnosticCode.IGNORED_TOKEN,
            f"Ignored token {token.value!r} in declaration of '{name_token.value}'",
            token,
        )
        index += 1

    field_type = type_token.value
    names = {attribute.name for attribute in attributes}

    default_value = None
    relation = None
    for attribute in attributes:
        if attribute.name == DEFAULT_ATTRIBUTE and default_value is None:
            default_value = attribute.args_text or None
        if (
            attribute.name == RELATION_ATTRIBUTE
            and attribute.args
            and relation is None
        ):
            if field_type in SCALAR_TYPES or field_type in enum_names:
                _warn(
                    report,
                    DiagnosticCode.SCALAR_RELATION,
                    f"Field '{name_token.value}' of non-model type '{field_type}' "
                    "cannot declare a relation",
                    type_token,
                )
                continue
            relation = _parse_relation_args(attribute.args, field_type, line_text)

    return SchemaField(
        name=name_token.value,
        type=field_type,
        is_array=is_array,
        is_optional=is_optional,
        is_primary_key=PRIMARY_KEY_ATTRIBUTE in names,
        is_unique=UNIQUE_ATTRIBUTE in names,
        has_default=DEFAULT_ATTRIBUTE in names,
        default_value=default_value,
        relation=relation,
        attributes=[attribute.text for attribute in attributes],
        span=SourceSpan(
            line=name_token.line,
            column=name_token.column,
            end_line=last.line,
            end_column=last.end_column,
        ),
    )


def parse_field(
    line: str, *, enum_names: Collection[str] = ()
) -> Optional[SchemaField]:
    """Parse a single declaration line, e.g. ``email String @unique``."""
    text = strip_comments(line.split("\n")[0])
    tokens = [
        token
        for token in tokenize(text)
        if token.type not in (TokenType.NEWLINE, TokenType.EOF)
    ]
    return parse_field_tokens(tokens, text, enum_names=enum_names)


# ---------------------------------------------------------------------------
# Relation Classifier
# ---------------------------------------------------------------------------


def classify_relation(field: SchemaField) -> Cardinality:
    """Cardinality of a relation field, from its own modifiers.

    Array fields are ``1:N``, optional fields ``1:1`` and required fields
    ``N:1``. ``N:M`` is never inferred.
    """
    if field.is_array:
        return Cardinality.ONE_TO_MANY
    if field.is_optional:
        return Cardinality.ONE_TO_ONE
    return Cardinality.MANY_TO_ONE


def build_relation(model_name: str, field: SchemaField) -> Optional[SchemaRelation]:
    """Relation edge for *field* of *model_name*, or ``None`` for plain fields."""
    if field.relation is None:
        return None
    return SchemaRelation(
        from_model=model_name,
        to_model=field.relation.model,
        from_field=field.name,
        type=classify_relation(field),
        on_delete=field.relation.on_delete,
    )
