"""Read-only statistics over a parsed schema."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field

from ..models import Cardinality, FrozenModel, ParsedSchema


# Known model names grouped into display categories. A model belongs to the
# first category that lists it.
DEFAULT_MODEL_CATEGORIES: Dict[str, List[str]] = {
    "Organization/Project": ["Organization", "Project", "Registry"],
    "User/Auth": [
        "User",
        "UserRole",
        "ApiToken",
        "UserSession",
        "LoginHistory",
        "UserInvitation",
        "UserMfa",
        "EmailVerification",
        "SsoConfig",
        "IpWhitelist",
        "PasswordPolicy",
        "PasswordHistory",
    ],
    "Scan/Vulnerability": [
        "ScanResult",
        "ScanSummary",
        "Vulnerability",
        "ScanVulnerability",
        "VulnerabilityComment",
        "VulnerabilityImpact",
        "VulnerabilityBookmark",
        "MergedVulnerability",
        "MitreMapping",
    ],
    "Policy/Exception": ["Policy", "PolicyRule", "PolicyException"],
    "Workflow": ["VulnerabilityWorkflow", "FixEvidence"],
    "Notification": ["NotificationChannel", "NotificationRule", "UserNotification"],
    "Report": ["ReportTemplate", "Report"],
    "Integration": [
        "GitIntegration",
        "GitRepository",
        "IssueTrackerIntegration",
        "LinkedIssue",
    ],
    "Settings/Misc": [
        "RiskScoreConfig",
        "AssetCriticality",
        "AuditLog",
        "SystemSettings",
        "AiExecution",
    ],
}

UNCATEGORIZED = "Uncategorized"
CASCADE_ACTION = "Cascade"


@dataclass
class StatisticsConfig:
    """Configuration for get_detailed_schema_stats."""

    categories: Dict[str, List[str]] = field(
        default_factory=lambda: {
            name: list(models) for name, models in DEFAULT_MODEL_CATEGORIES.items()
        }
    )
    uncategorized_label: str = UNCATEGORIZED
    # Length of the top-N rankings.
    top_n: int = 5
    cascade_action: str = CASCADE_ACTION


class ModelCount(FrozenModel):
    name: str
    count: int


class SchemaStats(FrozenModel):
    """Aggregate counts of a schema."""

    model_config = ConfigDict(protected_namespaces=())

    model_count: int
    enum_count: int
    total_fields: int
    total_relations: int
    total_indexes: int
    avg_fields_per_model: int


class DetailedSchemaStats(SchemaStats):
    """Aggregate counts plus distributions and rankings."""

    category_distribution: Dict[str, int] = Field(default_factory=dict)
    field_type_distribution: Dict[str, int] = Field(default_factory=dict)
    relation_type_distribution: Dict[str, int] = Field(default_factory=dict)
    top_models_by_fields: List[ModelCount] = Field(default_factory=list)
    top_models_by_relations: List[ModelCount] = Field(default_factory=list)
    cascade_delete_count: int = 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_schema_stats(schema: ParsedSchema) -> SchemaStats:
    """Model/enum/field/relation/index counts and the average model width."""
    total_fields = sum(len(model.fields) for model in schema.models)
    model_count = len(schema.models)
    return SchemaStats(
        model_count=model_count,
        enum_count=len(schema.enums),
        total_fields=total_fields,
        total_relations=len(schema.relations),
        total_indexes=sum(len(model.indexes) for model in schema.models),
        avg_fields_per_model=(
            _round_half_up(total_fields / model_count) if model_count else 0
        ),
    )


def _category_distribution(
    schema: ParsedSchema, config: StatisticsConfig
) -> Dict[str, int]:
    counts: Dict[str, int] = {name: 0 for name in config.categories}
    uncategorized = 0
    for model in schema.models:
        for category, model_names in config.categories.items():
            if model.name in model_names:
                counts[category] += 1
                break
        else:
            uncategorized += 1

    distribution = {name: count for name, count in counts.items() if count}
    if uncategorized:
        distribution[config.uncategorized_label] = (
            distribution.get(config.uncategorized_label, 0) + uncategorized
        )
    return distribution


def _top(counts: List[ModelCount], limit: int) -> List[ModelCount]:
    # sorted() is stable, so ties keep model declaration order.
    return sorted(counts, key=lambda item: item.count, reverse=True)[:limit]


def get_detailed_schema_stats(
    schema: ParsedSchema, config: Optional[StatisticsConfig] = None
) -> DetailedSchemaStats:
    """Counts, category/type/cardinality histograms and top-N rankings."""
    config = config or StatisticsConfig()
    basic = get_schema_stats(schema)

    field_types: Counter = Counter(
        schema_field.type for model in schema.models for schema_field in model.fields
    )

    relation_types: Dict[str, int] = {c.value: 0 for c in Cardinality}
    for relation in schema.relations:
        relation_types[relation.type.value] += 1

    outgoing = Counter(relation.from_model for relation in schema.relations)

    return DetailedSchemaStats(
        **basic.model_dump(),
        category_distribution=_category_distribution(schema, config),
        field_type_distribution=dict(field_types),
        relation_type_distribution=relation_types,
        top_models_by_fields=_top(
            [ModelCount(name=m.name, count=len(m.fields)) for m in schema.models],
            config.top_n,
        ),
        top_models_by_relations=_top(
            [ModelCount(name=m.name, count=outgoing[m.name]) for m in schema.models],
            config.top_n,
        ),
        cascade_delete_count=sum(
            1 for r in schema.relations if r.on_delete == config.cascade_action
        ),
    )
