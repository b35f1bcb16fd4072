"""
Pydantic models for parsed schemas.

Defines the typed tree produced by the parser (ParsedSchema and its models,
fields and enums) and the derived relation edges consumed by the analysis
passes and the generators. All models are frozen: a ParsedSchema is created
once and only read afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Built-in scalar type names of the schema language.
SCALAR_TYPES = frozenset(
    {
        "String",
        "Int",
        "BigInt",
        "Float",
        "Decimal",
        "Boolean",
        "DateTime",
        "Json",
        "Bytes",
    }
)


class FrozenModel(BaseModel):
    """Immutable model; dumps use camelCase names with ``by_alias=True``."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Cardinality(str, Enum):
    """Relation cardinality labels."""

    ONE_TO_ONE = "1:1"
    ONE_TO_MANY = "1:N"
    MANY_TO_ONE = "N:1"
    MANY_TO_MANY = "N:M"


# ---------------------------------------------------------------------------
# Schema nodes
# ---------------------------------------------------------------------------


class SourceSpan(FrozenModel):
    """1-based source position of a parsed node."""

    line: int
    column: int
    end_line: int
    end_column: int


class RelationRef(FrozenModel):
    """Arguments of a field's ``@relation(...)`` attribute."""

    model: str = Field(description="Target model name (always the field type)")
    fields: Optional[List[str]] = None
    references: Optional[List[str]] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None


class SchemaField(FrozenModel):
    """One typed member of a model."""

    name: str
    type: str
    is_array: bool = False
    is_optional: bool = False
    is_primary_key: bool = False
    is_unique: bool = False
    has_default: bool = False
    default_value: Optional[str] = None
    relation: Optional[RelationRef] = None
    attributes: List[str] = Field(
        default_factory=list,
        description="Raw attribute texts in declaration order",
    )
    span: Optional[SourceSpan] = Field(default=None, exclude=True, repr=False)

    @property
    def display_type(self) -> str:
        """Type name with ``[]`` / ``?`` modifiers, as written in the source."""
        suffix = "[]" if self.is_array else ""
        if self.is_optional:
            suffix += "?"
        return f"{self.type}{suffix}"


class SchemaModel(FrozenModel):
    """A named record type with ordered fields and block-level annotations."""

    name: str
    fields: List[SchemaField] = Field(default_factory=list)
    indexes: List[str] = Field(default_factory=list)
    unique_constraints: List[str] = Field(default_factory=list)
    span: Optional[SourceSpan] = Field(default=None, exclude=True, repr=False)

    def get_field(self, name: str) -> Optional[SchemaField]:
        for schema_field in self.fields:
            if schema_field.name == name:
                return schema_field
        return None


class SchemaEnum(FrozenModel):
    """An enumeration with its raw values in declaration order."""

    name: str
    values: List[str] = Field(default_factory=list)
    span: Optional[SourceSpan] = Field(default=None, exclude=True, repr=False)


class SchemaRelation(FrozenModel):
    """Directed relation edge derived from a relation field."""

    from_model: str = Field(alias="from")
    to_model: str = Field(alias="to")
    from_field: str
    type: Cardinality
    on_delete: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.from_model, self.to_model, self.from_field)


class ParsedSchema(FrozenModel):
    """Root value produced by the parser and consumed by every later stage."""

    models: List[SchemaModel] = Field(default_factory=list)
    enums: List[SchemaEnum] = Field(default_factory=list)
    relations: List[SchemaRelation] = Field(default_factory=list)

    @property
    def model_names(self) -> List[str]:
        return [model.name for model in self.models]

    @property
    def enum_names(self) -> List[str]:
        return [enum.name for enum in self.enums]

    def get_model(self, name: str) -> Optional[SchemaModel]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    def get_enum(self, name: str) -> Optional[SchemaEnum]:
        for enum in self.enums:
            if enum.name == name:
                return enum
        return None
