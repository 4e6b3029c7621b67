"""Loading schema snapshots and saving/loading comparison session files."""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tabular_compare.core.schema import SchemaSnapshot
from tabular_compare.core.skip_selection import SkipSelection, SkipSelectionSet
from tabular_compare.exceptions import (
    InvalidSkipSelectionError,
    SessionFileError,
    SnapshotLoadError,
)
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)

SESSION_FORMAT_VERSION = 1


def load_snapshot(snapshot_file: Path | str) -> SchemaSnapshot:
    """Load a schema snapshot from a YAML or JSON file.

    Args:
        snapshot_file: Path to a .yaml, .yml or .json snapshot

    Returns:
        Validated schema snapshot

    Raises:
        SnapshotLoadError: If the file is missing, unparsable or invalid
    """
    snapshot_path = Path(snapshot_file)

    if not snapshot_path.exists():
        raise SnapshotLoadError(f"Snapshot file not found: {snapshot_path}")

    try:
        with open(snapshot_path) as f:
            if snapshot_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotLoadError(f"Cannot parse snapshot {snapshot_path}: {e}") from e

    if not data:
        raise SnapshotLoadError(f"Empty snapshot file: {snapshot_path}")

    try:
        snapshot = SchemaSnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotLoadError(f"Invalid snapshot {snapshot_path}: {e}") from e

    if not snapshot.name:
        snapshot.name = snapshot_path.stem

    logger.info(
        "snapshot_loaded",
        file=str(snapshot_path),
        name=snapshot.name,
        compatibility_level=snapshot.compatibility_level,
        object_count=snapshot.object_count,
    )

    return snapshot


@dataclass
class SessionInfo:
    """Persistent state of a comparison session."""

    source: str = ""
    target: str = ""
    compatibility_level: int | None = None
    options: dict[str, Any] = field(default_factory=dict)
    skip_selections: SkipSelectionSet = field(default_factory=SkipSelectionSet)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "format_version": SESSION_FORMAT_VERSION,
            "saved_at": datetime.now(UTC).isoformat(),
            "source": self.source,
            "target": self.target,
            "compatibility_level": self.compatibility_level,
            "options": self.options,
            "skip_selections": self.skip_selections.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionInfo":
        """Build session info from its serialized form.

        Raises:
            InvalidSkipSelectionError: If a stored skip selection is malformed
        """
        return cls(
            source=data.get("source") or "",
            target=data.get("target") or "",
            compatibility_level=data.get("compatibility_level"),
            options=data.get("options") or {},
            skip_selections=SkipSelectionSet(
                SkipSelection.from_dict(item) for item in data.get("skip_selections") or []
            ),
        )


def save_session(session: SessionInfo, session_file: Path | str) -> Path:
    """Save a comparison session to a JSON file.

    Args:
        session: Session to save
        session_file: Destination path

    Returns:
        Path of the written file

    Raises:
        SessionFileError: If the file cannot be written
    """
    session_path = Path(session_file)

    try:
        session_path.parent.mkdir(parents=True, exist_ok=True)
        with open(session_path, "w") as f:
            json.dump(session.to_dict(), f, indent=2)
    except OSError as e:
        raise SessionFileError(f"Cannot write session file {session_path}: {e}") from e

    logger.info(
        "session_saved",
        file=str(session_path),
        skip_selections=len(session.skip_selections),
    )

    return session_path


def load_session(session_file: Path | str) -> SessionInfo:
    """Load a comparison session from a JSON file.

    Args:
        session_file: Path to the session file

    Returns:
        Loaded session

    Raises:
        SessionFileError: If the file is missing, unparsable or holds bad selections
    """
    session_path = Path(session_file)

    if not session_path.exists():
        raise SessionFileError(f"Session file not found: {session_path}")

    try:
        with open(session_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SessionFileError(f"Cannot parse session file {session_path}: {e}") from e

    if not isinstance(data, dict):
        raise SessionFileError(f"Session file {session_path} does not hold an object")

    version = data.get("format_version", SESSION_FORMAT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool):
        raise SessionFileError(
            f"Session file {session_path} has an invalid format version {version!r}"
        )
    if version > SESSION_FORMAT_VERSION:
        raise SessionFileError(
            f"Session file {session_path} has format version {version}, "
            f"newest supported is {SESSION_FORMAT_VERSION}"
        )
    if not isinstance(data.get("skip_selections") or [], list):
        raise SessionFileError(f"skip_selections in {session_path} is not a list")

    try:
        session = SessionInfo.from_dict(data)
    except InvalidSkipSelectionError as e:
        raise SessionFileError(f"Invalid skip selection in {session_path}: {e}") from e

    logger.info(
        "session_loaded",
        file=str(session_path),
        skip_selections=len(session.skip_selections),
        saved_at=data.get("saved_at"),
    )

    return session


def load_or_create_session(session_file: Path | str) -> SessionInfo:
    """Load a session file, or start an empty session if it does not exist yet."""
    if not Path(session_file).exists():
        logger.debug("session_file_missing", file=str(session_file))
        return SessionInfo()
    return load_session(session_file)
