"""Comparison report generation and display.

The forest is flattened into rows in display order; each row carries the
indentation level the object type is shown at (tables under connection-level
objects, relationships, measures and KPIs under tables) and the name of the
connection-level object or table whose group it belongs to.
"""

import json
from collections import Counter
from collections.abc import Iterator, Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tabular_compare.core.models import (
    ComparisonObject,
    ComparisonObjectStatus,
    ComparisonObjectType,
    UpdateAction,
)
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)

TYPE_LABELS = {
    ComparisonObjectType.DATA_SOURCE: "Data Source",
    ComparisonObjectType.KPI: "KPI",
}

STATUS_LABELS = {
    ComparisonObjectStatus.SAME_DEFINITION: "Same Definition",
    ComparisonObjectStatus.DIFFERENT_DEFINITIONS: "Different Definitions",
    ComparisonObjectStatus.MISSING_IN_TARGET: "Missing in Target",
    ComparisonObjectStatus.MISSING_IN_SOURCE: "Missing in Source",
}

STATUS_STYLES = {
    ComparisonObjectStatus.SAME_DEFINITION: "green",
    ComparisonObjectStatus.DIFFERENT_DEFINITIONS: "yellow",
    ComparisonObjectStatus.MISSING_IN_TARGET: "cyan",
    ComparisonObjectStatus.MISSING_IN_SOURCE: "red",
}

_LEVELS = {
    ComparisonObjectType.TABLE: 1,
    ComparisonObjectType.RELATIONSHIP: 2,
    ComparisonObjectType.MEASURE: 2,
    ComparisonObjectType.KPI: 2,
}


@dataclass
class ReportRow:
    """One flattened line of the comparison report."""

    object_type: str
    level: int
    group: str
    source_object_name: str
    source_object_definition: str
    status: str
    target_object_name: str
    target_object_definition: str
    update_action: str

    @property
    def is_group_header(self) -> bool:
        """Check if the row opens a connection-level or table group."""
        return self.level < 2


def type_label(object_type: ComparisonObjectType) -> str:
    """Get the human-readable label of an object type."""
    return TYPE_LABELS.get(object_type, object_type.value)


def _has_differences(comparison_object: ComparisonObject) -> bool:
    return any(obj.is_difference for obj in comparison_object.walk())


def _iter_rows(
    comparison_object: ComparisonObject, include_same_definitions: bool, group: str
) -> Iterator[ReportRow]:
    if not include_same_definitions and not _has_differences(comparison_object):
        return

    level = _LEVELS.get(comparison_object.comparison_object_type, 0)
    if level < 2:
        # Connection-level objects and tables head their own group
        group = comparison_object.display_name

    yield ReportRow(
        object_type=type_label(comparison_object.comparison_object_type),
        level=level,
        group=group,
        source_object_name=comparison_object.source_object_name,
        source_object_definition=comparison_object.source_object_definition,
        status=STATUS_LABELS[comparison_object.status],
        target_object_name=comparison_object.target_object_name,
        target_object_definition=comparison_object.target_object_definition,
        update_action=comparison_object.update_action.value,
    )

    for child in comparison_object.child_comparison_objects:
        yield from _iter_rows(child, include_same_definitions, group)


def build_report_rows(
    comparison_objects: Sequence[ComparisonObject],
    include_same_definitions: bool = True,
) -> list[ReportRow]:
    """Flatten a comparison forest into report rows.

    Args:
        comparison_objects: Top-level comparison objects
        include_same_definitions: Keep objects whose subtree has no differences

    Returns:
        Rows in display order
    """
    rows: list[ReportRow] = []
    for comparison_object in comparison_objects:
        rows.extend(_iter_rows(comparison_object, include_same_definitions, ""))
    return rows


def display_comparison_report(
    comparison_objects: Sequence[ComparisonObject],
    include_same_definitions: bool = False,
    console: Console | None = None,
    title: str = "Tabular Model Comparison",
) -> None:
    """Display the comparison forest as an indented table.

    Args:
        comparison_objects: Top-level comparison objects
        include_same_definitions: Show objects without differences
        console: Rich console (created if None)
        title: Table title
    """
    if console is None:
        console = Console()

    table = Table(title=title)
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Source Object Name", style="white")
    table.add_column("Status", justify="center")
    table.add_column("Target Object Name", style="white")
    table.add_column("Action", justify="center", style="magenta")

    status_by_label = {label: status for status, label in STATUS_LABELS.items()}

    for row in build_report_rows(comparison_objects, include_same_definitions):
        indent = "   " * row.level
        style = STATUS_STYLES[status_by_label[row.status]]
        action = "" if row.update_action == UpdateAction.NONE.value else row.update_action
        table.add_row(
            f"{indent}{row.object_type}",
            f"{indent}{escape(row.source_object_name)}" if row.source_object_name else "[dim]-[/dim]",
            f"[{style}]{row.status}[/{style}]",
            f"{indent}{escape(row.target_object_name)}" if row.target_object_name else "[dim]-[/dim]",
            action,
        )

    console.print(table)


def summarize(comparison_objects: Sequence[ComparisonObject]) -> dict[str, int]:
    """Count comparison objects per status label, children included."""
    counts = Counter(
        obj.status for comparison_object in comparison_objects for obj in comparison_object.walk()
    )
    return {label: counts.get(status, 0) for status, label in STATUS_LABELS.items()}


def display_comparison_summary(
    comparison_objects: Sequence[ComparisonObject], console: Console | None = None
) -> None:
    """Display the number of objects per status.

    Args:
        comparison_objects: Top-level comparison objects
        console: Rich console (created if None)
    """
    if console is None:
        console = Console()

    table = Table(title="Summary")
    table.add_column("Status", style="cyan")
    table.add_column("Objects", justify="right")

    for label, count in summarize(comparison_objects).items():
        table.add_row(label, str(count))

    console.print(table)


def generate_report_text(comparison_objects: Sequence[ComparisonObject]) -> str:
    """Generate a plain-text report of all differences.

    Args:
        comparison_objects: Top-level comparison objects

    Returns:
        Multi-line text report
    """
    lines = [
        "=" * 80,
        "Tabular Model Comparison Report",
        "=" * 80,
        "",
    ]

    for label, count in summarize(comparison_objects).items():
        lines.append(f"  {label}: {count}")
    lines.append("")

    for row in build_report_rows(comparison_objects, include_same_definitions=False):
        indent = "  " * row.level
        name = row.source_object_name or row.target_object_name
        lines.append(f"{indent}{row.object_type} '{name}': {row.status} [{row.update_action}]")

    lines.extend(["", "=" * 80, ""])

    return "\n".join(lines)


def save_report_json(
    comparison_objects: Sequence[ComparisonObject],
    output_path: Path | str,
    include_same_definitions: bool = True,
) -> Path:
    """Save the flattened report rows to a JSON file.

    Args:
        comparison_objects: Top-level comparison objects
        output_path: Path to output file
        include_same_definitions: Keep objects without differences

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    report: dict[str, Any] = {
        "report_version": "1.0",
        "generated_at": datetime.now(UTC).isoformat(),
        "summary": summarize(comparison_objects),
        "rows": [
            asdict(row) for row in build_report_rows(comparison_objects, include_same_definitions)
        ],
    }

    output_path.write_text(json.dumps(report, indent=2))
    logger.info("json_report_saved", path=str(output_path), rows=len(report["rows"]))

    return output_path
