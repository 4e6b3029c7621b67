"""
Decorators shared by the CLI commands.
"""

import functools
from collections.abc import Callable

import click

from tabular_compare.cli.context import CompareContext
from tabular_compare.cli.utils import echo_error
from tabular_compare.exceptions import (
    ComparisonError,
    ConfigurationError,
    SessionFileError,
    SkipSelectionError,
    SnapshotLoadError,
)
from tabular_compare.utils.logging import get_logger, log_error

logger = get_logger(__name__)

# (exception types, label, exit code), checked in order
ERROR_EXIT_CODES: tuple[tuple[tuple[type[Exception], ...], str, int], ...] = (
    ((ConfigurationError, FileNotFoundError, ValueError), "Configuration Error", 2),
    ((SnapshotLoadError, SessionFileError), "File Error", 3),
    ((ComparisonError, SkipSelectionError), "Comparison Error", 4),
)


def pass_context(f: Callable) -> Callable:
    """
    Hand the CompareContext to the command as its first argument.

    Usage:
        @click.command()
        @pass_context
        def my_command(ctx: CompareContext):
            print(ctx.config)
    """

    @click.pass_context
    @functools.wraps(f)
    def wrapper(click_ctx: click.Context, *args, **kwargs):
        compare_ctx: CompareContext = click_ctx.obj
        return f(compare_ctx, *args, **kwargs)

    return wrapper


def handle_errors(f: Callable) -> Callable:
    """
    Turn exceptions raised by a command into a message and an exit code.

    Exit codes:
        0: Success
        1: Unexpected error, or a ClickException raised by the command
        2: Configuration error
        3: Snapshot or session file error
        4: Comparison or skip selection error
    """

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.exceptions.Exit, click.ClickException):
            raise
        except Exception as e:
            for error_types, label, exit_code in ERROR_EXIT_CODES:
                if isinstance(e, error_types):
                    logger.error("command_failed", category=label, error=str(e))
                    echo_error(f"{label}: {e}")
                    raise click.exceptions.Exit(exit_code) from e

            log_error(logger, e, context=f.__name__)
            echo_error(f"Unexpected Error: {e}")
            click.echo("\nAn unexpected error occurred. Check the logs for details.", err=True)
            raise click.exceptions.Exit(1) from e

    return wrapper
