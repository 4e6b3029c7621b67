"""Comparison core: difference forest, differ, skip selections and lookup."""

from tabular_compare.core.comparison import Comparison
from tabular_compare.core.differ import ModelDiffer, definitions_equal, whitespace_insensitive
from tabular_compare.core.models import (
    ComparisonObject,
    ComparisonObjectStatus,
    ComparisonObjectType,
    UpdateAction,
)
from tabular_compare.core.schema import SchemaObject, SchemaSnapshot, TableObject
from tabular_compare.core.skip_selection import SkipSelection, SkipSelectionSet

__all__ = [
    "Comparison",
    "ComparisonObject",
    "ComparisonObjectStatus",
    "ComparisonObjectType",
    "ModelDiffer",
    "SchemaObject",
    "SchemaSnapshot",
    "SkipSelection",
    "SkipSelectionSet",
    "TableObject",
    "UpdateAction",
    "definitions_equal",
    "whitespace_insensitive",
]
