"""Schema comparers supplying the two snapshots of a comparison."""

from tabular_compare.connectors.base import SchemaComparer, StaticSchemaComparer
from tabular_compare.connectors.snapshot import SnapshotFileComparer

__all__ = [
    "SchemaComparer",
    "SnapshotFileComparer",
    "StaticSchemaComparer",
]
