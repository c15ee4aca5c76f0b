"""
Command-line entry point for catalogkeeper.

The root group sets up logging and the console, loads the configuration
once and shares it with the ``check`` and ``update`` subcommands.  Errors
are turned into exit codes by :func:`main`.
"""

from __future__ import annotations

import sys
import logging
from pathlib import Path
from typing import Optional

import click

from catalogkeeper.config import load_config
from catalogkeeper.__version__ import __version__
from catalogkeeper.context import CatalogKeeperContext
from catalogkeeper.exceptions import CatalogKeeperError, ConfigError
from catalogkeeper.commands.check import check
from catalogkeeper.commands.update import update
from catalogkeeper.utils.logger import get_logger, setup_logging, verbosity_to_level
from catalogkeeper.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="CATALOGKEEPER_CONFIG",
    help="Configuration file (catalogkeeper.toml or pyproject.toml).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Log more details to stderr (-v for info, -vv for debug).",
)
@click.option(
    "--color/--no-color",
    default=None,
    envvar="CATALOGKEEPER_COLOR",
    help="Force colored output on or off (default: auto-detect).",
)
@click.version_option(__version__, prog_name="catalogkeeper", message="%(prog)s %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: Optional[bool],
) -> None:
    """Keep a Gradle version catalog up to date.

    \b
    Examples:
      catalogkeeper check
      catalogkeeper check --format json gradle/libs.versions.toml
      catalogkeeper update --dry-run
      catalogkeeper -v update -y -k kotlin -k okhttp

    Run ``catalogkeeper COMMAND --help`` for the options of each command.
    """
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2, color=color)
    reconfigure_console(color)
    logger.debug(
        "catalogkeeper %s, log level %s", __version__, logging.getLevelName(level)
    )

    try:
        settings = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(EXIT_ERROR) from exc

    ctx.obj = CatalogKeeperContext(
        settings,
        config_path=config or settings.source_path,
        verbose=verbose,
        color=color,
    )
    logger.debug("Configuration: %s", ctx.obj.config_path or "<defaults>")


cli.add_command(check)
cli.add_command(update)


def main() -> int:
    """Run the CLI and translate its outcome into a process exit code.

    Returns:
        ``0`` on success, ``1`` when updates are available or an error
        occurred, ``2`` on usage errors and ``130`` when interrupted.
        Commands that exit explicitly (``sys.exit``) bypass this mapping.
    """
    try:
        cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except CatalogKeeperError as exc:
        print_error(str(exc))
        logger.debug("Failure details: %s", exc.details or "<none>", exc_info=True)
        return EXIT_ERROR
    except (KeyboardInterrupt, click.Abort):
        print_warning("\nOperation cancelled by user")
        return EXIT_INTERRUPTED
    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception")
        return EXIT_ERROR
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
