"""Structured parse diagnostics.

The parser is lenient: malformed lines and blocks are dropped and parsing
continues. Every drop is reported here with its source position so callers
can tell an empty schema from an unreadable one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..models import ParsedSchema


class DiagnosticSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class DiagnosticCode(str, Enum):
    INVALID_FIELD = "INVALID_FIELD"
    UNEXPECTED_TOKEN = "UNEXPECTED_TOKEN"
    UNCLOSED_BLOCK = "UNCLOSED_BLOCK"
    MISSING_BLOCK_NAME = "MISSING_BLOCK_NAME"
    SCALAR_RELATION = "SCALAR_RELATION"
    IGNORED_TOKEN = "IGNORED_TOKEN"


@dataclass(frozen=True)
class ParseDiagnostic:
    """One dropped line, token or block."""

    severity: DiagnosticSeverity
    code: DiagnosticCode
    message: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        return (
            f"Line {self.line}:{self.column} | [{self.code.value}] "
            f"{self.severity.value}: {self.message}"
        )


@dataclass
class ParseResult:
    """Lenient parse output plus the diagnostics collected on the way."""

    schema: ParsedSchema
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def warnings(self) -> List[ParseDiagnostic]:
        return [
            d for d in self.diagnostics if d.severity == DiagnosticSeverity.WARNING
        ]

    @property
    def errors(self) -> List[ParseDiagnostic]:
        return [d for d in self.diagnostics if d.severity == DiagnosticSeverity.ERROR]

    @property
    def is_clean(self) -> bool:
        return not self.diagnostics


class SchemaParseError(ValueError):
    """Raised in strict mode when the source produced any diagnostic."""

    def __init__(
        self,
        diagnostics: List[ParseDiagnostic],
        schema: Optional[ParsedSchema] = None,
    ) -> None:
        self.diagnostics = list(diagnostics)
        self.schema = schema
        summary = "; ".join(str(d) for d in self.diagnostics[:5])
        if len(self.diagnostics) > 5:
            summary += f"; ... {len(self.diagnostics) - 5} more"
        super().__init__(
            f"Schema has {len(self.diagnostics)} problem(s): {summary}"
        )
