"""Comparison session: the difference forest of two tabular models and its skip selections."""

from collections import Counter
from collections.abc import Iterator
from typing import TYPE_CHECKING

from tabular_compare.core.differ import ModelDiffer
from tabular_compare.core.events import (
    ComparisonEvents,
    ValidationMessage,
    ValidationMessageType,
)
from tabular_compare.core.models import (
    ComparisonObject,
    ComparisonObjectStatus,
    ComparisonObjectType,
    UpdateAction,
)
from tabular_compare.core.skip_selection import SkipSelection, SkipSelectionSet
from tabular_compare.exceptions import (
    CompatibilityLevelMismatchError,
    ComparisonError,
)
from tabular_compare.utils.logging import get_logger, log_comparison_summary

if TYPE_CHECKING:
    from tabular_compare.connectors.base import SchemaComparer

logger = get_logger(__name__)

_ACTIONABLE = (UpdateAction.CREATE, UpdateAction.UPDATE, UpdateAction.DELETE)


class Comparison:
    """A comparison of a source and a target tabular model.

    The comparison owns the forest of ComparisonObject instances and the skip
    selections remembered across runs. Every call to
    ``compare_tabular_models`` discards the forest, rebuilds it from the
    comparer's snapshots and re-applies the skip selections.

    Not thread-safe; callers serialize comparisons, captures and replays.
    """

    def __init__(
        self,
        comparer: "SchemaComparer",
        skip_selections: SkipSelectionSet | None = None,
        events: ComparisonEvents | None = None,
        differ: ModelDiffer | None = None,
    ):
        """Initialize the comparison.

        Args:
            comparer: Supplies the source and target snapshots
            skip_selections: Previously saved skip selections (empty if None)
            events: Optional notification callbacks
            differ: Differ with per-type definition comparators
        """
        self.comparer = comparer
        self.skip_selections = skip_selections if skip_selections is not None else SkipSelectionSet()
        self.events = events or ComparisonEvents()
        self.differ = differ or ModelDiffer()
        self.comparison_objects: list[ComparisonObject] = []
        self._compatibility_level: int | None = None
        self._disposed = False

    @property
    def compatibility_level(self) -> int | None:
        """Compatibility level shared by source and target, known once connected."""
        return self._compatibility_level

    @property
    def comparison_object_count(self) -> int:
        """Number of comparison objects in the forest, children included."""
        return sum(1 for _ in self.iter_comparison_objects())

    def connect(self) -> None:
        """Connect the comparer and check both models share a compatibility level.

        Raises:
            CompatibilityLevelMismatchError: If the levels differ
        """
        self._ensure_not_disposed()
        self.comparer.connect()

        source_level = self.comparer.source_snapshot().compatibility_level
        target_level = self.comparer.target_snapshot().compatibility_level
        if source_level != target_level:
            self._compatibility_level = None
            self.comparer.disconnect()
            raise CompatibilityLevelMismatchError(
                f"Source compatibility level {source_level} does not match "
                f"target compatibility level {target_level}"
            )

        self._compatibility_level = source_level
        logger.debug("comparison_connected", compatibility_level=source_level)

    def disconnect(self) -> None:
        """Disconnect the comparer."""
        self.comparer.disconnect()

    def compare_tabular_models(self) -> list[ComparisonObject]:
        """Rebuild the comparison forest and re-apply skip selections.

        Returns:
            The new forest
        """
        self._ensure_not_disposed()
        # Reconnect every run so file-backed comparers re-read their snapshots
        self.connect()

        self.comparison_objects = self.differ.build_comparison_objects(
            self.comparer.source_snapshot(), self.comparer.target_snapshot()
        )
        self.refresh_comparison_objects_from_skip_selections()

        log_comparison_summary(
            logger,
            {status.value: count for status, count in self.status_counts().items()},
            skip_selections=len(self.skip_selections),
        )

        return self.comparison_objects

    def iter_comparison_objects(self) -> Iterator[ComparisonObject]:
        """Yield every comparison object depth-first in display order."""
        for comparison_object in self.comparison_objects:
            yield from comparison_object.walk()

    def status_counts(self) -> Counter[ComparisonObjectStatus]:
        """Count comparison objects per status."""
        return Counter(obj.status for obj in self.iter_comparison_objects())

    def iter_actions(self) -> Iterator[tuple[ComparisonObject, UpdateAction]]:
        """Yield the objects an update step has to act on, with their action."""
        for comparison_object in self.iter_comparison_objects():
            if comparison_object.update_action in _ACTIONABLE:
                yield comparison_object, comparison_object.update_action

    def find_comparison_object(
        self,
        source_object_name: str | None,
        source_object_internal_name: str | None,
        target_object_name: str | None,
        target_object_internal_name: str | None,
        object_type: ComparisonObjectType,
    ) -> ComparisonObject | None:
        """Find the first comparison object matching all five criteria.

        Absent names may be passed as None or empty string.

        Returns:
            Matching ComparisonObject, or None if there is none
        """
        criteria = (
            source_object_name or "",
            source_object_internal_name or "",
            target_object_name or "",
            target_object_internal_name or "",
            object_type,
        )
        for comparison_object in self.iter_comparison_objects():
            if (
                comparison_object.source_object_name,
                comparison_object.source_object_internal_name,
                comparison_object.target_object_name,
                comparison_object.target_object_internal_name,
                comparison_object.comparison_object_type,
            ) == criteria:
                return comparison_object
        return None

    def refresh_skip_selections_from_comparison_objects(self) -> None:
        """Replace the skip selections with those of the currently skipped objects."""
        self.skip_selections.clear()

        for comparison_object in self.iter_comparison_objects():
            if comparison_object.is_difference and comparison_object.is_skipped:
                self.skip_selections.add(SkipSelection.from_comparison_object(comparison_object))

        logger.info("skip_selections_captured", count=len(self.skip_selections))

    def refresh_comparison_objects_from_skip_selections(self) -> None:
        """Mark every difference identified by a skip selection as Skip."""
        applied = 0

        for comparison_object in self.iter_comparison_objects():
            if not comparison_object.is_difference:
                continue
            if self.skip_selections.find_match(comparison_object) is not None:
                comparison_object.skip()
                applied += 1

        logger.info(
            "skip_selections_applied",
            selections=len(self.skip_selections),
            objects_skipped=applied,
        )

    def validate_selection(self) -> list[ValidationMessage]:
        """Check the selected actions and report problems through the events.

        Returns:
            All messages emitted, in order
        """
        messages: list[ValidationMessage] = []

        for comparison_object in self.iter_comparison_objects():
            if comparison_object.comparison_object_type == ComparisonObjectType.TABLE:
                messages.extend(self._validate_table(comparison_object))

        actions = Counter(obj.update_action for obj in self.iter_comparison_objects())
        messages.append(
            ValidationMessage(
                message=(
                    f"{actions[UpdateAction.CREATE]} to create, "
                    f"{actions[UpdateAction.UPDATE]} to update, "
                    f"{actions[UpdateAction.DELETE]} to delete, "
                    f"{actions[UpdateAction.SKIP]} skipped"
                ),
                message_type=ValidationMessageType.INFORMATIONAL,
            )
        )

        for message in messages:
            self.events.validation_message(message)
        self.events.resize_validation_headers()

        return messages

    def _validate_table(self, table: ComparisonObject) -> list[ValidationMessage]:
        messages = []

        if table.status == ComparisonObjectStatus.MISSING_IN_TARGET and table.is_skipped:
            for child in table.child_comparison_objects:
                if child.update_action == UpdateAction.CREATE:
                    messages.append(
                        ValidationMessage(
                            message=(
                                f"Unable to create {child.comparison_object_type.value} "
                                f"'{child.display_name}' because table "
                                f"'{table.display_name}' is skipped"
                            ),
                            message_type=ValidationMessageType.WARNING,
                            comparison_object_type=child.comparison_object_type,
                            status=child.status,
                        )
                    )

        if table.update_action == UpdateAction.DELETE and table.child_comparison_objects:
            messages.append(
                ValidationMessage(
                    message=(
                        f"Deleting table '{table.display_name}' also deletes its "
                        f"{len(table.child_comparison_objects)} child object(s)"
                    ),
                    message_type=ValidationMessageType.INFORMATIONAL,
                    comparison_object_type=ComparisonObjectType.TABLE,
                    status=table.status,
                )
            )

        return messages

    def dispose(self) -> None:
        """Release the comparer's connections and drop the forest."""
        if self._disposed:
            return
        self.comparer.disconnect()
        self.comparison_objects = []
        self._disposed = True
        logger.debug("comparison_disposed")

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise ComparisonError("Comparison has been disposed")

    def __enter__(self) -> "Comparison":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()
