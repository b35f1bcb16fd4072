"""Statistics and diff passes over parsed schemas."""

from .diff import EnumDiff, ModelDiff, SchemaDiff, diff_schemas
from .statistics import (
    DEFAULT_MODEL_CATEGORIES,
    DetailedSchemaStats,
    ModelCount,
    SchemaStats,
    StatisticsConfig,
    get_detailed_schema_stats,
    get_schema_stats,
)

__all__ = [
    "SchemaDiff",
    "ModelDiff",
    "EnumDiff",
    "diff_schemas",
    "DEFAULT_MODEL_CATEGORIES",
    "StatisticsConfig",
    "SchemaStats",
    "DetailedSchemaStats",
    "ModelCount",
    "get_schema_stats",
    "get_detailed_schema_stats",
]
