"""Custom exceptions for tabular-compare.

This module defines exception classes for the error conditions that can occur
while building, mutating and persisting a comparison of two tabular models.
"""


class TabularCompareError(Exception):
    """Base exception for all tabular-compare errors."""

    pass


class ConfigurationError(TabularCompareError):
    """Raised when configuration is invalid or missing."""

    pass


class ComparisonError(TabularCompareError):
    """Base class for errors raised by the comparison core."""

    pass


class ComparisonInvariantError(ComparisonError):
    """Raised when a comparison object's fields contradict its status.

    The differ never produces such objects, so this always indicates a
    programming error in the caller constructing nodes by hand.
    """

    pass


class InvalidUpdateActionError(ComparisonError):
    """Raised when an update action is not legal for an object's status."""

    def __init__(self, message: str, status: str | None = None, action: str | None = None):
        """Initialize invalid update action error.

        Args:
            message: Error message
            status: Status of the comparison object
            action: Rejected update action
        """
        self.message = message
        self.status = status
        self.action = action
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with status and action."""
        msg = self.message
        if self.status and self.action:
            msg = f"{msg} (status={self.status}, action={self.action})"
        return msg


class DuplicateObjectError(ComparisonError):
    """Raised when one side of a comparison holds two objects with the same internal name."""

    def __init__(self, message: str, object_type: str | None = None, internal_name: str | None = None):
        """Initialize duplicate object error.

        Args:
            message: Error message
            object_type: Type of the duplicated object
            internal_name: Internal name that occurs more than once
        """
        super().__init__(message)
        self.object_type = object_type
        self.internal_name = internal_name


class CompatibilityLevelMismatchError(ComparisonError):
    """Raised when source and target models have different compatibility levels."""

    pass


class ComparisonNotConnectedError(ComparisonError):
    """Raised when a comparison is run before its schema comparer connected."""

    pass


class SkipSelectionError(TabularCompareError):
    """Base class for skip selection errors."""

    pass


class InvalidSkipSelectionError(SkipSelectionError):
    """Raised when a skip selection has contradictory fields."""

    pass


class SessionFileError(TabularCompareError):
    """Raised when a session file cannot be read or written."""

    pass


class SnapshotLoadError(TabularCompareError):
    """Raised when a schema snapshot file cannot be loaded."""

    pass
