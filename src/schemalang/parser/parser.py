"""
Recursive-descent parser for the schema description language.

Builds a ParsedSchema from source text. Parsing is lenient: a line or block
that does not fit the grammar is dropped, reported as a ParseDiagnostic, and
parsing resumes at the next line. ``ParserConfig(strict=True)`` turns any
diagnostic into a SchemaParseError instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import ParsedSchema, SchemaEnum, SchemaModel, SchemaRelation, SourceSpan
from .diagnostics import (
    DiagnosticCode,
    DiagnosticSeverity,
    ParseDiagnostic,
    ParseResult,
    SchemaParseError,
)
from .fields import build_relation, parse_field_tokens
from .lexer import Token, TokenType, strip_comments, tokenize

logger = logging.getLogger(__name__)


MODEL_KEYWORD = "model"
ENUM_KEYWORD = "enum"
INDEX_DIRECTIVE = "index"
UNIQUE_DIRECTIVE = "unique"
# Blocks that configure tooling and carry no models.
CONFIG_BLOCK_KEYWORDS = ("generator", "datasource")


@dataclass
class ParserConfig:
    """Configuration for SchemaParser."""

    # Raise SchemaParseError when any diagnostic is produced.
    strict: bool = False


@dataclass
class _Block:
    kind: str
    name: str
    start: Token
    end: Token
    lines: List[List[Token]] = field(default_factory=list)


class SchemaParser:
    """Parses one source text into a ParseResult.

    A parser instance holds the scan position for a single text; create a new
    one (or use the module-level functions) for every parse.
    """

    def __init__(self, text: str, config: Optional[ParserConfig] = None) -> None:
        self._config = config or ParserConfig()
        self._lines = strip_comments(text).split("\n")
        self._tokens = tokenize(text)
        self._pos = 0
        self._diagnostics: List[ParseDiagnostic] = []

    # -- token helpers ------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _at(self, token_type: TokenType, offset: int = 0) -> bool:
        return self._peek(offset).type == token_type

    def _skip_newlines(self) -> None:
        while self._at(TokenType.NEWLINE):
            self._advance()

    def _skip_line(self) -> None:
        while not (self._at(TokenType.NEWLINE) or self._at(TokenType.EOF)):
            self._advance()

    def _line_text(self, first: Token, last: Token) -> str:
        return self._lines[first.line - 1][first.column - 1 : last.end_column - 1]

    def _report(
        self,
        severity: DiagnosticSeverity,
        code: DiagnosticCode,
        message: str,
        token: Token,
    ) -> None:
        self._diagnostics.append(
            ParseDiagnostic(
                severity=severity,
                code=code,
                message=message,
                line=token.line,
                column=token.column,
            )
        )

    # -- grammar ------------------------------------------------------------

    def _starts_block(self) -> bool:
        """``<keyword> <Name> {`` on the current line."""
        return (
            self._at(TokenType.IDENTIFIER)
            and self._at(TokenType.IDENTIFIER, 1)
            and self._at(TokenType.LBRACE, 2)
        )

    def _parse_blocks(self) -> List[_Block]:
        blocks: List[_Block] = []
        while True:
            self._skip_newlines()
            token = self._peek()
            if token.type == TokenType.EOF:
                return blocks

            if token.type == TokenType.IDENTIFIER and token.value in (
                MODEL_KEYWORD,
                ENUM_KEYWORD,
            ):
                block = self._parse_block()
                if block is not None:
                    blocks.append(block)
                continue

            if token.type == TokenType.IDENTIFIER and self._starts_block():
                if token.value not in CONFIG_BLOCK_KEYWORDS:
                    self._report(
                        DiagnosticSeverity.ERROR,
                        DiagnosticCode.UNEXPECTED_TOKEN,
                        f"Unknown block kind {token.value!r}, block skipped",
                        token,
                    )
                self._advance()
                self._advance()
                self._skip_braced()
                continue

            self._report(
                DiagnosticSeverity.WARNING,
                DiagnosticCode.UNEXPECTED_TOKEN,
                f"Unexpected {token.value!r} at top level",
                token,
            )
            self._skip_line()

    def _skip_braced(self) -> None:
        open_brace = self._advance()
        depth = 1
        while depth:
            token = self._advance()
            if token.type == TokenType.EOF:
                self._report(
                    DiagnosticSeverity.ERROR,
                    DiagnosticCode.UNCLOSED_BLOCK,
                    "Block is never closed",
                    open_brace,
                )
                return
            if token.type == TokenType.LBRACE:
                depth += 1
            elif token.type == TokenType.RBRACE:
                depth -= 1

    def _parse_block(self) -> Optional[_Block]:
        keyword = self._advance()
        if not self._at(TokenType.IDENTIFIER):
            self._report(
                DiagnosticSeverity.ERROR,
                DiagnosticCode.MISSING_BLOCK_NAME,
                f"'{keyword.value}' must be followed by a name",
                keyword,
            )
            if self._at(TokenType.LBRACE):
                self._skip_braced()
            else:
                self._skip_line()
            return None

        name = self._advance()
        header_end = self._pos
        self._skip_newlines()
        if not self._at(TokenType.LBRACE):
            self._report(
                DiagnosticSeverity.ERROR,
                DiagnosticCode.UNEXPECTED_TOKEN,
                f"Expected '{{' after {keyword.value} {name.value}",
                self._peek(),
            )
            self._pos = header_end
            self._skip_line()
            return None

        open_brace = self._advance()
        block = _Block(kind=keyword.value, name=name.value, start=keyword, end=open_brace)
        self._parse_body(block)
        return block

    def _parse_body(self, block: _Block) -> None:
        line: List[Token] = []
        depth = 0
        while True:
            token = self._peek()

            if token.type == TokenType.EOF:
                self._finish_line(block, line)
                self._report(
                    DiagnosticSeverity.ERROR,
                    DiagnosticCode.UNCLOSED_BLOCK,
                    f"{block.kind} {block.name} is never closed",
                    block.start,
                )
                block.end = token
                return

            if not line and self._starts_block() and token.value in (
                MODEL_KEYWORD,
                ENUM_KEYWORD,
            ):
                # A new block header inside a body: the current block lost its "}".
                self._report(
                    DiagnosticSeverity.ERROR,
                    DiagnosticCode.UNCLOSED_BLOCK,
                    f"{block.kind} {block.name} is not closed before "
                    f"{token.value} {self._peek(1).value}",
                    block.start,
                )
                return

            self._advance()
            if token.type == TokenType.NEWLINE:
                self._finish_line(block, line)
                line = []
                continue
            if token.type == TokenType.RBRACE and depth == 0:
                self._finish_line(block, line)
                block.end = token
                return
            if token.type == TokenType.LBRACE:
                depth += 1
            elif token.type == TokenType.RBRACE:
                depth -= 1
            line.append(token)

    @staticmethod
    def _finish_line(block: _Block, line: List[Token]) -> None:
        if line:
            block.lines.append(line)

    # -- building -----------------------------------------------------------

    def _span(self, block: _Block) -> SourceSpan:
        return SourceSpan(
            line=block.start.line,
            column=block.start.column,
            end_line=block.end.line,
            end_column=block.end.end_column,
        )

    def _build_enum(self, block: _Block) -> SchemaEnum:
        values = [self._line_text(line[0], line[-1]) for line in block.lines]
        return SchemaEnum(name=block.name, values=values, span=self._span(block))

    def _build_model(self, block: _Block, enum_names: List[str]) -> SchemaModel:
        fields = []
        indexes: List[str] = []
        unique_constraints: List[str] = []

        for line in block.lines:
            text = self._line_text(line[0], line[-1])
            if line[0].type == TokenType.ATAT:
                directive = line[1].value if len(line) > 1 else ""
                if directive == INDEX_DIRECTIVE:
                    indexes.append(text)
                elif directive == UNIQUE_DIRECTIVE:
                    unique_constraints.append(text)
                # Other block-level directives (@@map, @@id, ...) are dropped.
                continue

            parsed = parse_field_tokens(
                line,
                self._lines[line[0].line - 1],
                enum_names=enum_names,
                report=self._diagnostics,
            )
            if parsed is not None:
                fields.append(parsed)

        return SchemaModel(
            name=block.name,
            fields=fields,
            indexes=indexes,
            unique_constraints=unique_constraints,
            span=self._span(block),
        )

    def parse(self) -> ParseResult:
        blocks = self._parse_blocks()

        enums = [self._build_enum(b) for b in blocks if b.kind == ENUM_KEYWORD]
        enum_names = [enum.name for enum in enums]
        models = [
            self._build_model(b, enum_names) for b in blocks if b.kind == MODEL_KEYWORD
        ]

        relations: List[SchemaRelation] = []
        for model in models:
            for schema_field in model.fields:
                relation = build_relation(model.name, schema_field)
                if relation is not None:
                    relations.append(relation)

        schema = ParsedSchema(models=models, enums=enums, relations=relations)
        self._diagnostics.sort(key=lambda d: (d.line, d.column))

        logger.debug(
            "Parsed schema: %d models, %d enums, %d relations, %d diagnostics",
            len(models),
            len(enums),
            len(relations),
            len(self._diagnostics),
        )
        for diagnostic in self._diagnostics:
            logger.debug("%s", diagnostic)

        if self._config.strict and self._diagnostics:
            raise SchemaParseError(self._diagnostics, schema)

        return ParseResult(schema=schema, diagnostics=list(self._diagnostics))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_schema_with_diagnostics(
    text: str, config: Optional[ParserConfig] = None
) -> ParseResult:
    """Parse *text* and return the schema together with its diagnostics."""
    return SchemaParser(text, config).parse()


def parse_schema(text: str, config: Optional[ParserConfig] = None) -> ParsedSchema:
    """Parse *text* into a ParsedSchema.

    Lenient by default: malformed lines and blocks are skipped. Use
    :func:`parse_schema_with_diagnostics` to see what was skipped, or pass
    ``ParserConfig(strict=True)`` to raise on the first parse instead.
    """
    return parse_schema_with_diagnostics(text, config).schema


def extract_enums(text: str) -> List[SchemaEnum]:
    """All enum blocks of *text*, in source order (duplicates kept)."""
    return parse_schema(text).enums


def extract_models(text: str) -> List[SchemaModel]:
    """All model blocks of *text*, in source order."""
    return parse_schema(text).models
