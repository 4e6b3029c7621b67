"""Comparison CLI commands."""

from pathlib import Path

import click
from rich.console import Console

from tabular_compare.cli.context import CompareContext
from tabular_compare.cli.decorators import handle_errors, pass_context
from tabular_compare.cli.utils import echo_info, echo_success, echo_warning
from tabular_compare.core.events import ComparisonEvents, ValidationMessage, ValidationMessageType
from tabular_compare.reporting.comparison_report import (
    display_comparison_report,
    display_comparison_summary,
    save_report_json,
)
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)

source_option = click.option(
    "--source",
    "-s",
    type=click.Path(path_type=Path),
    help="Source model snapshot (YAML or JSON)",
)
target_option = click.option(
    "--target",
    "-t",
    type=click.Path(path_type=Path),
    help="Target model snapshot (YAML or JSON)",
)
session_option = click.option(
    "--session",
    "session_file",
    type=click.Path(path_type=Path),
    help="Session file with skip selections",
)


@click.command(name="compare")
@source_option
@target_option
@session_option
@click.option("--show-same", is_flag=True, help="Also list objects with identical definitions")
@click.option(
    "--ignore-whitespace/--exact",
    default=None,
    help="Treat definitions differing only in whitespace as equal",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Also write the report rows to a JSON file",
)
@pass_context
@handle_errors
def compare(
    ctx: CompareContext,
    source: Path | None,
    target: Path | None,
    session_file: Path | None,
    show_same: bool,
    ignore_whitespace: bool | None,
    output: Path | None,
) -> None:
    """Compare a source and a target model snapshot.

    Skip selections stored in the session file are re-applied to the
    fresh comparison.

    Examples:

        tabular-compare compare -s source.yaml -t target.yaml

        tabular-compare compare -s source.yaml -t target.yaml --session model.session.json
    """
    source, target, session_file = ctx.resolve_paths(source, target, session_file)
    comparison, _session = ctx.open_comparison(source, target, session_file, ignore_whitespace)

    with comparison:
        comparison.compare_tabular_models()

        console = Console()
        display_comparison_report(
            comparison.comparison_objects,
            include_same_definitions=show_same or ctx.config.comparison.include_same_definitions,
            console=console,
            title=f"{source.name} → {target.name}",
        )
        display_comparison_summary(comparison.comparison_objects, console=console)

        if output:
            save_report_json(comparison.comparison_objects, output)
            echo_success(f"Report written to {output}")


@click.command(name="validate")
@source_option
@target_option
@session_option
@click.option(
    "--ignore-whitespace/--exact",
    default=None,
    help="Treat definitions differing only in whitespace as equal",
)
@pass_context
@handle_errors
def validate(
    ctx: CompareContext,
    source: Path | None,
    target: Path | None,
    session_file: Path | None,
    ignore_whitespace: bool | None,
) -> None:
    """Validate the actions that an update would perform.

    Warnings point at selections the update cannot carry out, such as
    creating a measure whose new table is skipped.
    """
    source, target, session_file = ctx.resolve_paths(source, target, session_file)

    def show_message(message: ValidationMessage) -> None:
        if message.message_type == ValidationMessageType.WARNING:
            echo_warning(message.message)
        else:
            echo_info(message.message)

    comparison, _session = ctx.open_comparison(
        source,
        target,
        session_file,
        ignore_whitespace,
        events=ComparisonEvents(on_validation_message=show_message),
    )

    with comparison:
        comparison.compare_tabular_models()
        messages = comparison.validate_selection()

    warnings = sum(1 for m in messages if m.message_type == ValidationMessageType.WARNING)
    if warnings:
        raise click.ClickException(f"Selection has {warnings} warning(s)")

    echo_success("Selection is valid")
