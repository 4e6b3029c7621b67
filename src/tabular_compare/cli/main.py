"""
Main CLI entry point for tabular-compare.

This module provides the command-line interface for comparing two tabular
model snapshots and curating which differences an update should skip.
"""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from tabular_compare import __version__
from tabular_compare.cli.commands import compare as compare_commands
from tabular_compare.cli.commands import config as config_commands
from tabular_compare.cli.commands import skip as skip_commands
from tabular_compare.cli.context import CompareContext
from tabular_compare.cli.decorators import handle_errors
from tabular_compare.utils.logging import configure_logging, get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="tabular-compare")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
    envvar="TABULAR_COMPARE_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Set console logging level",
    envvar="TABULAR_COMPARE_LOG_LEVEL",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Also write logs to this file",
    envvar="TABULAR_COMPARE_LOG_FILE",
)
@click.pass_context
@handle_errors
def cli(
    ctx: click.Context,
    config: Path | None,
    log_level: str,
    log_file: Path | None,
) -> None:
    """tabular-compare - Compare two tabular model schemas.

    Builds a tree of differences between a source and a target model,
    proposes an action for each one and remembers which differences you
    chose to skip.

    Examples:

        # Compare two snapshots
        tabular-compare compare -s source.yaml -t target.yaml

        # Skip a measure difference and remember it in a session file
        tabular-compare skip -s source.yaml -t target.yaml --session s.json \\
            --type Measure --source-id sales_total

        # Check the selection before updating
        tabular-compare validate -s source.yaml -t target.yaml --session s.json
    """
    compare_ctx = CompareContext(
        config_path=config,
        log_level=log_level,
        log_file=log_file,
    )

    # Console logging first, so configuration errors are reported through it
    configure_logging(level=log_level, log_file=str(log_file) if log_file else None)

    if log_file is None and config is not None:
        # Without --log-file the configuration file supplies the log file settings
        logging_config = compare_ctx.config.logging
        if logging_config.file:
            configure_logging(
                level=log_level,
                log_format=logging_config.format,
                log_file=logging_config.file,
                file_level=logging_config.file_level,
            )

    ctx.obj = compare_ctx

    logger.debug(
        "cli_initialized",
        config=str(config) if config else None,
        log_level=log_level,
    )


# Register command groups
cli.add_command(config_commands.config)

# Register standalone commands
cli.add_command(compare_commands.compare)
cli.add_command(compare_commands.validate)
cli.add_command(skip_commands.skip)
cli.add_command(skip_commands.unskip)


def main() -> int:
    """Main entry point for CLI."""
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0
    except click.exceptions.Exit as e:
        return e.exit_code
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except Exception as e:
        logger.error("unexpected_error", error=str(e), exc_info=True)
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
