"""
Configuration management commands.

This module provides commands for validating and displaying
comparison configuration.
"""

from pathlib import Path

import click

from tabular_compare.cli.context import CompareContext
from tabular_compare.cli.decorators import handle_errors, pass_context
from tabular_compare.cli.utils import echo_info, echo_success, echo_warning, print_table
from tabular_compare.config import CompareConfig
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""
    pass


@config.command(name="validate")
@pass_context
@handle_errors
def validate(ctx: CompareContext) -> None:
    """Validate comparison configuration.

    Checks that the configuration parses and that configured snapshot
    files exist. A session file that does not exist yet only warns, since
    it is created on the first skip.

    Examples:

        tabular-compare --config config.yaml config validate
    """
    echo_info(f"Validating configuration: {ctx.config_path or 'defaults'}")
    config = ctx.config

    click.echo()
    _display_config_summary(config)

    click.echo()
    echo_info("Validating paths...")
    _validate_paths(config)

    click.echo()
    echo_success("Configuration is valid!")


def _display_config_summary(config: CompareConfig) -> None:
    """Display configuration summary."""
    rows = [
        ["Source Snapshot", config.paths.source_snapshot or "-"],
        ["Target Snapshot", config.paths.target_snapshot or "-"],
        ["Session File", config.paths.session_file or "-"],
        ["Report Directory", config.paths.report_dir],
        ["Ignore Whitespace", config.comparison.ignore_whitespace],
        ["Show Same Definitions", config.comparison.include_same_definitions],
        ["Log Level", config.logging.level],
    ]

    print_table(
        "Configuration Summary",
        ["Setting", "Value"],
        rows,
    )


def _validate_paths(config: CompareConfig) -> None:
    """Validate file paths in configuration."""
    for label, value in (
        ("Source snapshot", config.paths.source_snapshot),
        ("Target snapshot", config.paths.target_snapshot),
    ):
        if value is None:
            echo_warning(f"{label} not configured, pass it on the command line")
        elif not Path(value).is_file():
            raise click.ClickException(f"{label} not found: {value}")
        else:
            echo_success(f"{label} exists: {value}")

    session_file = config.paths.session_file
    if session_file and not Path(session_file).exists():
        echo_warning(f"Session file does not exist yet: {session_file}")


@config.command(name="show")
@pass_context
@handle_errors
def show(ctx: CompareContext) -> None:
    """Display current configuration.

    Examples:

        tabular-compare --config config.yaml config show
    """
    config = ctx.config

    _display_config_summary(config)

    click.echo("\nLogging Configuration:")
    click.echo(f"  Console Level: {config.logging.level}")
    click.echo(f"  File Level: {config.logging.file_level}")
    click.echo(f"  Format: {config.logging.format}")
    click.echo(f"  File: {config.logging.file or '-'}")
