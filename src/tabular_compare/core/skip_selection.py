"""Remembered decisions to skip specific differences across comparisons."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from tabular_compare.core.models import (
    ComparisonObject,
    ComparisonObjectStatus,
    ComparisonObjectType,
)
from tabular_compare.exceptions import InvalidSkipSelectionError


@dataclass(frozen=True)
class SkipSelection:
    """A skipped difference identified by status, type and internal names.

    The source internal name is empty for MissingInSource selections and the
    target internal name is empty for MissingInTarget selections.
    """

    status: ComparisonObjectStatus
    comparison_object_type: ComparisonObjectType
    source_object_internal_name: str = ""
    target_object_internal_name: str = ""

    def __post_init__(self) -> None:
        if self.status == ComparisonObjectStatus.SAME_DEFINITION:
            raise InvalidSkipSelectionError("SameDefinition objects cannot be skipped")

        has_source = bool(self.source_object_internal_name)
        has_target = bool(self.target_object_internal_name)

        if self.status == ComparisonObjectStatus.MISSING_IN_SOURCE:
            valid = not has_source and has_target
        elif self.status == ComparisonObjectStatus.MISSING_IN_TARGET:
            valid = has_source and not has_target
        else:
            valid = has_source and has_target

        if not valid:
            raise InvalidSkipSelectionError(
                f"{self.comparison_object_type.value} skip selection with status "
                f"{self.status.value} has contradictory internal names "
                f"(source='{self.source_object_internal_name}', "
                f"target='{self.target_object_internal_name}')"
            )

    @classmethod
    def from_comparison_object(cls, comparison_object: ComparisonObject) -> "SkipSelection":
        """Record the identity of a comparison object."""
        return cls(
            status=comparison_object.status,
            comparison_object_type=comparison_object.comparison_object_type,
            source_object_internal_name=comparison_object.source_object_internal_name,
            target_object_internal_name=comparison_object.target_object_internal_name,
        )

    def matches(self, comparison_object: ComparisonObject) -> bool:
        """Check if this selection identifies the comparison object.

        Internal names of the side an object is missing from are ignored.
        """
        return (
            comparison_object.status == self.status
            and comparison_object.comparison_object_type == self.comparison_object_type
            and (
                self.status == ComparisonObjectStatus.MISSING_IN_SOURCE
                or comparison_object.source_object_internal_name
                == self.source_object_internal_name
            )
            and (
                self.status == ComparisonObjectStatus.MISSING_IN_TARGET
                or comparison_object.target_object_internal_name
                == self.target_object_internal_name
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "comparison_object_type": self.comparison_object_type.value,
            "source_object_internal_name": self.source_object_internal_name,
            "target_object_internal_name": self.target_object_internal_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkipSelection":
        """Build a selection from its serialized form.

        Raises:
            InvalidSkipSelectionError: If a field is missing or holds an unknown value
        """
        try:
            return cls(
                status=ComparisonObjectStatus(data["status"]),
                comparison_object_type=ComparisonObjectType(data["comparison_object_type"]),
                source_object_internal_name=data.get("source_object_internal_name") or "",
                target_object_internal_name=data.get("target_object_internal_name") or "",
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise InvalidSkipSelectionError(f"Malformed skip selection {data!r}: {e}") from e


class SkipSelectionSet:
    """Insertion-ordered set of skip selections without duplicates."""

    def __init__(self, selections: Iterable[SkipSelection] = ()):
        self._selections: dict[SkipSelection, None] = {}
        for selection in selections:
            self.add(selection)

    def add(self, selection: SkipSelection) -> bool:
        """Add a selection unless an identical one is present.

        Returns:
            True if the selection was inserted
        """
        if selection in self._selections:
            return False
        self._selections[selection] = None
        return True

    def clear(self) -> None:
        """Remove all selections."""
        self._selections.clear()

    def find_match(self, comparison_object: ComparisonObject) -> SkipSelection | None:
        """Get the first selection that identifies the comparison object."""
        for selection in self._selections:
            if selection.matches(comparison_object):
                return selection
        return None

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize all selections in insertion order."""
        return [selection.to_dict() for selection in self._selections]

    def __contains__(self, selection: object) -> bool:
        return selection in self._selections

    def __iter__(self) -> Iterator[SkipSelection]:
        return iter(self._selections)

    def __len__(self) -> int:
        return len(self._selections)

    def __repr__(self) -> str:
        return f"SkipSelectionSet({list(self._selections)!r})"
