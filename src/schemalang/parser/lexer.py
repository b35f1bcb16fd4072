"""Lexical analysis for the schema description language.

Strips line comments and converts source text into a flat token stream with
line/column positions. Newlines are kept as tokens because declarations
inside model and enum blocks are line-oriented.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Tuple


COMMENT_MARKER = "//"


class TokenType(Enum):
    """Token types of the schema language."""

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    AT = auto()
    ATAT = auto()

    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LPAREN = auto()
    RPAREN = auto()

    QUESTION = auto()
    COLON = auto()
    COMMA = auto()
    DOT = auto()
    EQUALS = auto()

    NEWLINE = auto()
    UNKNOWN = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token. ``value`` is the exact source text of the token."""

    type: TokenType
    value: str
    line: int
    column: int

    @property
    def end_column(self) -> int:
        """Column just past the last character of the token."""
        return self.column + len(self.value)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# An unterminated string literal runs to the end of the line.
_STRING_RE = r'"(?:[^"\\]|\\.)*"?'
_NUMBER_RE = r"-?\d+(?:\.\d+)?"
_IDENTIFIER_RE = r"[A-Za-z_][A-Za-z0-9_]*"

_PUNCTUATION: List[Tuple[str, TokenType]] = [
    ("@@", TokenType.ATAT),
    ("@", TokenType.AT),
    ("{", TokenType.LBRACE),
    ("}", TokenType.RBRACE),
    ("[", TokenType.LBRACKET),
    ("]", TokenType.RBRACKET),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    ("?", TokenType.QUESTION),
    (":", TokenType.COLON),
    (",", TokenType.COMMA),
    (".", TokenType.DOT),
    ("=", TokenType.EQUALS),
]

_TOKEN_RE = re.compile(
    "|".join(
        [
            r"(?P<WS>\s+)",
            rf"(?P<STRING>{_STRING_RE})",
            rf"(?P<NUMBER>{_NUMBER_RE})",
            rf"(?P<IDENTIFIER>{_IDENTIFIER_RE})",
            "(?P<PUNCT>" + "|".join(re.escape(p) for p, _ in _PUNCTUATION) + ")",
            r"(?P<UNKNOWN>.)",
        ]
    )
)

_PUNCT_TYPES = dict(_PUNCTUATION)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def find_comment_start(line: str) -> int:
    """Return the index of the first line-comment marker in *line*, or -1.

    Markers inside double-quoted string literals are not comments.
    """
    in_string = False
    escaped = False
    for index, char in enumerate(line):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif line.startswith(COMMENT_MARKER, index):
            return index
    return -1


def strip_comments(text: str) -> str:
    """Truncate every line of *text* at its first line-comment marker.

    Line structure is preserved, so positions in the result match the input.
    """
    lines = []
    for line in text.split("\n"):
        start = find_comment_start(line)
        lines.append(line[:start] if start >= 0 else line)
    return "\n".join(lines)


def iter_tokens(text: str) -> Iterator[Token]:
    """Yield the tokens of *text*, comments removed, ending with ``EOF``."""
    lines = strip_comments(text).split("\n")
    for line_no, line in enumerate(lines, start=1):
        for match in _TOKEN_RE.finditer(line):
            kind = match.lastgroup
            if kind == "WS":
                continue
            value = match.group()
            if kind == "PUNCT":
                token_type = _PUNCT_TYPES[value]
            else:
                token_type = TokenType[kind]
            yield Token(token_type, value, line_no, match.start() + 1)
        if line_no < len(lines):
            yield Token(TokenType.NEWLINE, "\n", line_no, len(line) + 1)
    last_line = len(lines)
    yield Token(TokenType.EOF, "", last_line, len(lines[-1]) + 1)


def tokenize(text: str) -> List[Token]:
    """Tokenize *text* into a list that always ends with an ``EOF`` token."""
    return list(iter_tokens(text))
