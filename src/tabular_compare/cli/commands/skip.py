"""Commands for recording and removing skip selections."""

from pathlib import Path

import click

from tabular_compare.cli.commands.compare import session_option, source_option, target_option
from tabular_compare.cli.context import CompareContext
from tabular_compare.cli.decorators import handle_errors, pass_context
from tabular_compare.cli.utils import echo_info, echo_success, print_table
from tabular_compare.core.comparison import Comparison
from tabular_compare.core.models import ComparisonObject, ComparisonObjectType
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)

TYPE_CHOICES = [object_type.value for object_type in ComparisonObjectType]


def _select_differences(
    comparison: Comparison,
    object_type: str,
    source_id: str | None,
    target_id: str | None,
) -> list[ComparisonObject]:
    """Find the differences of a type matching the given internal names."""
    wanted_type = ComparisonObjectType(object_type)
    return [
        obj
        for obj in comparison.iter_comparison_objects()
        if obj.is_difference
        and obj.comparison_object_type == wanted_type
        and (source_id is None or obj.source_object_internal_name == source_id)
        and (target_id is None or obj.target_object_internal_name == target_id)
    ]


def _selection_options(f):
    f = click.option(
        "--all",
        "select_all",
        is_flag=True,
        help="Select every difference of the type",
    )(f)
    f = click.option("--target-id", help="Internal name of the target object")(f)
    f = click.option("--source-id", help="Internal name of the source object")(f)
    f = click.option(
        "--type",
        "object_type",
        type=click.Choice(TYPE_CHOICES, case_sensitive=False),
        required=True,
        help="Object type",
    )(f)
    return f


def _run_selection(
    ctx: CompareContext,
    source: Path | None,
    target: Path | None,
    session_file: Path | None,
    object_type: str,
    source_id: str | None,
    target_id: str | None,
    select_all: bool,
    skip: bool,
) -> None:
    if not (source_id or target_id or select_all):
        raise click.UsageError("Pass --source-id, --target-id or --all")

    source, target, session_file = ctx.resolve_paths(source, target, session_file)
    if session_file is None:
        raise click.UsageError("A session file is required to store skip selections")

    # Choice is case-insensitive; normalize to the enum value
    object_type = next(t for t in TYPE_CHOICES if t.lower() == object_type.lower())

    comparison, session = ctx.open_comparison(source, target, session_file)

    with comparison:
        comparison.compare_tabular_models()
        selected = _select_differences(comparison, object_type, source_id, target_id)

        if not selected:
            echo_info(f"No {object_type} differences match")
            return

        for obj in selected:
            if skip:
                obj.skip()
            else:
                obj.unskip()

        ctx.save_session(comparison, session, session_file)

    print_table(
        "Skipped" if skip else "Restored",
        ["Type", "Source", "Status", "Target", "Action"],
        [
            [
                obj.comparison_object_type.value,
                obj.source_object_name,
                obj.status.value,
                obj.target_object_name,
                obj.update_action.value,
            ]
            for obj in selected
        ],
    )
    echo_success(f"{len(session.skip_selections)} skip selection(s) saved to {session_file}")


@click.command(name="skip")
@source_option
@target_option
@session_option
@_selection_options
@pass_context
@handle_errors
def skip(
    ctx: CompareContext,
    source: Path | None,
    target: Path | None,
    session_file: Path | None,
    object_type: str,
    source_id: str | None,
    target_id: str | None,
    select_all: bool,
) -> None:
    """Skip differences so future updates leave them alone.

    Examples:

        tabular-compare skip -s src.yaml -t tgt.yaml --session s.json --type Measure --source-id m1
    """
    _run_selection(
        ctx, source, target, session_file, object_type, source_id, target_id, select_all, True
    )


@click.command(name="unskip")
@source_option
@target_option
@session_option
@_selection_options
@pass_context
@handle_errors
def unskip(
    ctx: CompareContext,
    source: Path | None,
    target: Path | None,
    session_file: Path | None,
    object_type: str,
    source_id: str | None,
    target_id: str | None,
    select_all: bool,
) -> None:
    """Restore the default action of previously skipped differences."""
    _run_selection(
        ctx, source, target, session_file, object_type, source_id, target_id, select_all, False
    )
