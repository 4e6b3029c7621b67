"""
CLI context for tabular-compare.

This module provides the context object that is passed to all CLI commands,
containing configuration and the comparison built from it.
"""

from dataclasses import dataclass, field
from pathlib import Path

from tabular_compare.config import CompareConfig, load_config_from_yaml
from tabular_compare.connectors.snapshot import SnapshotFileComparer
from tabular_compare.core.comparison import Comparison
from tabular_compare.core.differ import ModelDiffer, definitions_equal, whitespace_insensitive
from tabular_compare.core.events import ComparisonEvents
from tabular_compare.core.persistence import SessionInfo, load_or_create_session, save_session
from tabular_compare.exceptions import ConfigurationError
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CompareContext:
    """
    Context object for CLI commands.

    Attributes:
        config_path: Path to configuration file (defaults are used if None)
        log_level: Logging level
        log_file: Optional log file path
        config: Loaded configuration
    """

    config_path: Path | None = None
    log_level: str = "WARNING"
    log_file: Path | None = None

    _config: CompareConfig | None = field(default=None, init=False, repr=False)

    @property
    def config(self) -> CompareConfig:
        """Get or load configuration."""
        if self._config is None:
            if self.config_path is None:
                logger.debug("No configuration file, using defaults and environment")
                self._config = CompareConfig()
            else:
                logger.debug("Loading configuration", config_path=str(self.config_path))
                self._config = load_config_from_yaml(self.config_path)
        return self._config

    def resolve_paths(
        self, source: Path | None, target: Path | None, session_file: Path | None
    ) -> tuple[Path, Path, Path | None]:
        """Fill in snapshot and session paths missing on the command line from config.

        Raises:
            ConfigurationError: If a snapshot path is given neither way
        """
        paths = self.config.paths
        source = source or (Path(paths.source_snapshot) if paths.source_snapshot else None)
        target = target or (Path(paths.target_snapshot) if paths.target_snapshot else None)
        session_file = session_file or (Path(paths.session_file) if paths.session_file else None)

        if source is None or target is None:
            raise ConfigurationError(
                "Source and target snapshots are required. "
                "Use --source/--target or set paths.source_snapshot/paths.target_snapshot."
            )

        return source, target, session_file

    def open_comparison(
        self,
        source: Path,
        target: Path,
        session_file: Path | None,
        ignore_whitespace: bool | None = None,
        events: ComparisonEvents | None = None,
    ) -> tuple[Comparison, SessionInfo]:
        """Create a comparison over two snapshot files with the session's skip selections."""
        session = load_or_create_session(session_file) if session_file else SessionInfo()

        if ignore_whitespace is None:
            ignore_whitespace = self.config.comparison.ignore_whitespace

        differ = ModelDiffer(
            default_comparator=whitespace_insensitive if ignore_whitespace else definitions_equal
        )
        comparison = Comparison(
            SnapshotFileComparer(source, target),
            skip_selections=session.skip_selections,
            events=events,
            differ=differ,
        )

        session.source = str(source)
        session.target = str(target)
        session.options["ignore_whitespace"] = ignore_whitespace

        return comparison, session

    def save_session(self, comparison: Comparison, session: SessionInfo, session_file: Path) -> Path:
        """Capture the comparison's skip selections into the session file."""
        comparison.refresh_skip_selections_from_comparison_objects()
        session.skip_selections = comparison.skip_selections
        session.compatibility_level = comparison.compatibility_level
        return save_session(session, session_file)
