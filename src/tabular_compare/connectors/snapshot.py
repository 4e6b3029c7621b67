"""Comparer reading source and target snapshots from YAML or JSON exports."""

from pathlib import Path

from tabular_compare.core.persistence import load_snapshot
from tabular_compare.core.schema import SchemaSnapshot
from tabular_compare.exceptions import ComparisonNotConnectedError
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)


class SnapshotFileComparer:
    """Loads both snapshots from files on connect.

    Reconnecting re-reads the files, so a comparison picks up exports that
    changed since the previous run.
    """

    def __init__(self, source_file: Path | str, target_file: Path | str):
        """Initialize the comparer.

        Args:
            source_file: Path to the source model snapshot
            target_file: Path to the target model snapshot
        """
        self.source_file = Path(source_file)
        self.target_file = Path(target_file)
        self._source: SchemaSnapshot | None = None
        self._target: SchemaSnapshot | None = None

    @property
    def is_connected(self) -> bool:
        return self._source is not None and self._target is not None

    def source_snapshot(self) -> SchemaSnapshot:
        if self._source is None:
            raise ComparisonNotConnectedError(f"Source snapshot not loaded: {self.source_file}")
        return self._source

    def target_snapshot(self) -> SchemaSnapshot:
        if self._target is None:
            raise ComparisonNotConnectedError(f"Target snapshot not loaded: {self.target_file}")
        return self._target

    def connect(self) -> None:
        """Read both snapshot files.

        Raises:
            SnapshotLoadError: If either file cannot be loaded
        """
        self._source = load_snapshot(self.source_file)
        self._target = load_snapshot(self.target_file)
        logger.debug(
            "snapshots_connected",
            source=str(self.source_file),
            target=str(self.target_file),
        )

    def disconnect(self) -> None:
        self._source = None
        self._target = None
