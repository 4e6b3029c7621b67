"""Data models for tabular model comparison results."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tabular_compare.exceptions import ComparisonInvariantError, InvalidUpdateActionError


class ComparisonObjectType(Enum):
    """Kinds of schema objects that take part in a comparison."""

    CONNECTION = "Connection"
    DATA_SOURCE = "DataSource"
    TABLE = "Table"
    RELATIONSHIP = "Relationship"
    MEASURE = "Measure"
    KPI = "Kpi"
    EXPRESSION = "Expression"
    PERSPECTIVE = "Perspective"
    CULTURE = "Culture"
    ROLE = "Role"
    ACTION = "Action"


class ComparisonObjectStatus(Enum):
    """Outcome of comparing one object across source and target."""

    SAME_DEFINITION = "SameDefinition"
    DIFFERENT_DEFINITIONS = "DifferentDefinitions"
    MISSING_IN_SOURCE = "MissingInSource"
    MISSING_IN_TARGET = "MissingInTarget"


class UpdateAction(Enum):
    """Action the update step performs on the target for one object."""

    NONE = "None"  # SameDefinition objects only
    SKIP = "Skip"
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


_DEFAULT_ACTIONS = {
    ComparisonObjectStatus.SAME_DEFINITION: UpdateAction.NONE,
    ComparisonObjectStatus.DIFFERENT_DEFINITIONS: UpdateAction.UPDATE,
    ComparisonObjectStatus.MISSING_IN_TARGET: UpdateAction.CREATE,
    ComparisonObjectStatus.MISSING_IN_SOURCE: UpdateAction.DELETE,
}

ALLOWED_ACTIONS: dict[ComparisonObjectStatus, frozenset[UpdateAction]] = {
    ComparisonObjectStatus.SAME_DEFINITION: frozenset({UpdateAction.NONE}),
    ComparisonObjectStatus.DIFFERENT_DEFINITIONS: frozenset(
        {UpdateAction.UPDATE, UpdateAction.SKIP}
    ),
    ComparisonObjectStatus.MISSING_IN_TARGET: frozenset({UpdateAction.CREATE, UpdateAction.SKIP}),
    ComparisonObjectStatus.MISSING_IN_SOURCE: frozenset({UpdateAction.DELETE, UpdateAction.SKIP}),
}


def default_update_action(status: ComparisonObjectStatus) -> UpdateAction:
    """Get the action a freshly matched object of this status starts with."""
    return _DEFAULT_ACTIONS[status]


@dataclass
class ComparisonObject:
    """One schema object observed on the source side, the target side, or both.

    Side-specific fields are empty strings when the object does not exist on
    that side. ``update_action`` defaults to the status default and can only
    move between the actions allowed for the status. Assigning a new
    ``status`` re-checks the side fields and falls back to the default action
    when the current one is not allowed for the new status.
    """

    comparison_object_type: ComparisonObjectType
    status: ComparisonObjectStatus
    source_object_name: str = ""
    source_object_internal_name: str = ""
    source_object_definition: str = ""
    target_object_name: str = ""
    target_object_internal_name: str = ""
    target_object_definition: str = ""
    child_comparison_objects: list["ComparisonObject"] = field(default_factory=list)
    _update_action: UpdateAction = field(
        default=UpdateAction.NONE, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for attr in (
            "source_object_name",
            "source_object_internal_name",
            "source_object_definition",
            "target_object_name",
            "target_object_internal_name",
            "target_object_definition",
        ):
            if getattr(self, attr) is None:
                setattr(self, attr, "")

        self._check_invariants()
        self._update_action = default_update_action(self.status)

    def __setattr__(self, name: str, value: Any) -> None:
        # Fields are assigned plainly during __init__; _update_action is the last one
        if name == "status" and "_update_action" in self.__dict__:
            self._change_status(value)
        else:
            super().__setattr__(name, value)

    def _change_status(self, status: ComparisonObjectStatus) -> None:
        previous = self.status
        super().__setattr__("status", status)
        try:
            self._check_invariants()
        except ComparisonInvariantError:
            super().__setattr__("status", previous)
            raise

        if self._update_action not in ALLOWED_ACTIONS[status]:
            self._update_action = default_update_action(status)

    def _check_invariants(self) -> None:
        """Ensure side-specific fields agree with the status."""
        has_source = bool(self.source_object_internal_name)
        has_target = bool(self.target_object_internal_name)

        if not has_source and not has_target:
            raise ComparisonInvariantError(
                f"{self.comparison_object_type.value} comparison object has neither "
                "a source nor a target object"
            )

        if self.status == ComparisonObjectStatus.MISSING_IN_SOURCE:
            if has_source or self.source_object_name or self.source_object_definition:
                raise ComparisonInvariantError(
                    f"{self.comparison_object_type.value} '{self.target_object_name}' is "
                    "MissingInSource but carries source fields"
                )
        elif self.status == ComparisonObjectStatus.MISSING_IN_TARGET:
            if has_target or self.target_object_name or self.target_object_definition:
                raise ComparisonInvariantError(
                    f"{self.comparison_object_type.value} '{self.source_object_name}' is "
                    "MissingInTarget but carries target fields"
                )
        elif not (has_source and has_target):
            raise ComparisonInvariantError(
                f"{self.comparison_object_type.value} comparison object with status "
                f"{self.status.value} needs both a source and a target object"
            )

    @property
    def update_action(self) -> UpdateAction:
        """Action the update step performs for this object."""
        return self._update_action

    @update_action.setter
    def update_action(self, action: UpdateAction) -> None:
        if action not in ALLOWED_ACTIONS[self.status]:
            raise InvalidUpdateActionError(
                f"Cannot set {self.comparison_object_type.value} '{self.display_name}' "
                f"to {action.value}",
                status=self.status.value,
                action=action.value,
            )
        self._update_action = action

    @property
    def display_name(self) -> str:
        """Name shown for the object, preferring the source side."""
        return self.source_object_name or self.target_object_name

    @property
    def is_difference(self) -> bool:
        """Check if source and target disagree about this object."""
        return self.status != ComparisonObjectStatus.SAME_DEFINITION

    @property
    def is_skipped(self) -> bool:
        """Check if the object is excluded from the update."""
        return self._update_action == UpdateAction.SKIP

    def skip(self) -> None:
        """Exclude this difference from the update."""
        self.update_action = UpdateAction.SKIP

    def unskip(self) -> None:
        """Restore the default action for this object's status."""
        self.update_action = default_update_action(self.status)

    def walk(self) -> Iterator["ComparisonObject"]:
        """Yield this object and all of its descendants depth-first."""
        yield self
        for child in self.child_comparison_objects:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary, children included."""
        return {
            "type": self.comparison_object_type.value,
            "status": self.status.value,
            "update_action": self.update_action.value,
            "source_object_name": self.source_object_name,
            "source_object_internal_name": self.source_object_internal_name,
            "target_object_name": self.target_object_name,
            "target_object_internal_name": self.target_object_internal_name,
            "children": [child.to_dict() for child in self.child_comparison_objects],
        }
