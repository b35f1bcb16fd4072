"""Semantic diff between two parsed schema snapshots."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple, TypeVar

from pydantic import Field

from ..models import (
    FrozenModel,
    ParsedSchema,
    SchemaEnum,
    SchemaField,
    SchemaModel,
    SchemaRelation,
)

T = TypeVar("T")

# Field properties compared for "modified". Attribute lists and default
# values are not part of the comparison.
COMPARED_FIELD_PROPERTIES = (
    "type",
    "is_array",
    "is_optional",
    "is_primary_key",
    "is_unique",
)


class ModelDiff(FrozenModel):
    name: str
    added_fields: List[str] = Field(default_factory=list)
    removed_fields: List[str] = Field(default_factory=list)
    modified_fields: List[str] = Field(default_factory=list)


class EnumDiff(FrozenModel):
    name: str
    added_values: List[str] = Field(default_factory=list)
    removed_values: List[str] = Field(default_factory=list)


class SchemaDiff(FrozenModel):
    added_models: List[str] = Field(default_factory=list)
    removed_models: List[str] = Field(default_factory=list)
    modified_models: List[ModelDiff] = Field(default_factory=list)
    added_enums: List[str] = Field(default_factory=list)
    removed_enums: List[str] = Field(default_factory=list)
    modified_enums: List[EnumDiff] = Field(default_factory=list)
    added_relations: List[SchemaRelation] = Field(default_factory=list)
    removed_relations: List[SchemaRelation] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.added_models
            or self.removed_models
            or self.modified_models
            or self.added_enums
            or self.removed_enums
            or self.modified_enums
            or self.added_relations
            or self.removed_relations
        )


def _to_index(items: Iterable[T], key) -> Dict:
    """Key -> first item with that key, in source order."""
    index: Dict = {}
    for item in items:
        index.setdefault(key(item), item)
    return index


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _field_changed(old: SchemaField, new: SchemaField) -> bool:
    return any(
        getattr(old, name) != getattr(new, name) for name in COMPARED_FIELD_PROPERTIES
    )


def _diff_model(old: SchemaModel, new: SchemaModel) -> ModelDiff:
    old_fields = _to_index(old.fields, lambda f: f.name)
    new_fields = _to_index(new.fields, lambda f: f.name)

    added = [name for name in new_fields if name not in old_fields]
    removed = [name for name in old_fields if name not in new_fields]
    modified = [
        name
        for name, new_field in new_fields.items()
        if name in old_fields and _field_changed(old_fields[name], new_field)
    ]
    return ModelDiff(
        name=new.name,
        added_fields=added,
        removed_fields=removed,
        modified_fields=modified,
    )


def _diff_enum(old: SchemaEnum, new: SchemaEnum) -> EnumDiff:
    old_values = set(old.values)
    new_values = set(new.values)
    return EnumDiff(
        name=new.name,
        added_values=_unique(v for v in new.values if v not in old_values),
        removed_values=_unique(v for v in old.values if v not in new_values),
    )


def _relation_key(relation: SchemaRelation) -> Tuple[str, str, str]:
    return relation.key


def diff_schemas(old: ParsedSchema, new: ParsedSchema) -> SchemaDiff:
    """Compare two schemas: models, fields, enums, enum values and relations.

    All comparisons are by name (or by ``(from, to, fromField)`` for
    relations). Additions are listed in *new* order, removals in *old* order.
    """
    old_models = _to_index(old.models, lambda m: m.name)
    new_models = _to_index(new.models, lambda m: m.name)

    modified_models: List[ModelDiff] = []
    for name, new_model in new_models.items():
        old_model = old_models.get(name)
        if old_model is None:
            continue
        model_diff = _diff_model(old_model, new_model)
        if (
            model_diff.added_fields
            or model_diff.removed_fields
            or model_diff.modified_fields
        ):
            modified_models.append(model_diff)

    old_enums = _to_index(old.enums, lambda e: e.name)
    new_enums = _to_index(new.enums, lambda e: e.name)

    modified_enums: List[EnumDiff] = []
    for name, new_enum in new_enums.items():
        old_enum = old_enums.get(name)
        if old_enum is None:
            continue
        enum_diff = _diff_enum(old_enum, new_enum)
        if enum_diff.added_values or enum_diff.removed_values:
            modified_enums.append(enum_diff)

    old_relations = _to_index(old.relations, _relation_key)
    new_relations = _to_index(new.relations, _relation_key)

    return SchemaDiff(
        added_models=[name for name in new_models if name not in old_models],
        removed_models=[name for name in old_models if name not in new_models],
        modified_models=modified_models,
        added_enums=[name for name in new_enums if name not in old_enums],
        removed_enums=[name for name in old_enums if name not in new_enums],
        modified_enums=modified_enums,
        added_relations=[
            r for key, r in new_relations.items() if key not in old_relations
        ],
        removed_relations=[
            r for key, r in old_relations.items() if key not in new_relations
        ],
    )
