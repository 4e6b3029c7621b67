"""Capability interface for the component that supplies source and target snapshots."""

from typing import Protocol, runtime_checkable

from tabular_compare.core.schema import SchemaSnapshot
from tabular_compare.exceptions import ComparisonNotConnectedError


@runtime_checkable
class SchemaComparer(Protocol):
    """Supplies the already-fetched source and target snapshots.

    Implementations own any external connections; ``disconnect`` releases them.
    The snapshot accessors raise ComparisonNotConnectedError until ``connect``
    has run.
    """

    @property
    def is_connected(self) -> bool: ...

    def source_snapshot(self) -> SchemaSnapshot: ...

    def target_snapshot(self) -> SchemaSnapshot: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...


class StaticSchemaComparer:
    """Comparer over snapshots that are already in memory."""

    def __init__(self, source: SchemaSnapshot, target: SchemaSnapshot):
        self._source = source
        self._target = target
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def source_snapshot(self) -> SchemaSnapshot:
        if not self._connected:
            raise ComparisonNotConnectedError("Comparer is not connected")
        return self._source

    def target_snapshot(self) -> SchemaSnapshot:
        if not self._connected:
            raise ComparisonNotConnectedError("Comparer is not connected")
        return self._target

    def replace_snapshots(self, source: SchemaSnapshot, target: SchemaSnapshot) -> None:
        """Swap in new snapshots, e.g. after the models changed."""
        self._source = source
        self._target = target

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False
