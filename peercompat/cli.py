"""
Command-line interface for peercompat.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from peercompat.config import load_config
from peercompat.__version__ import __version__
from peercompat.context import PeerCompatContext
from peercompat.commands.resolve import resolve
from peercompat.exceptions import ConfigError, PeerCompatError
from peercompat.utils.logger import get_logger, setup_logging
from peercompat.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="PEERCOMPAT_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="PEERCOMPAT_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="peercompat",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """peercompat: find versions compatible with your declared packages.

    \b
    Available commands:
      peercompat resolve TARGET...   Find compatible versions of TARGETs

    \b
    Examples:
      peercompat resolve sass
      peercompat resolve sass lodash --manifest app/package.json
      peercompat -v resolve sass --format json
    """
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    peercompat_ctx = PeerCompatContext()
    peercompat_ctx.config_path = config or loaded_config.source_path
    peercompat_ctx.color = color
    peercompat_ctx.verbose = verbose
    peercompat_ctx.config = loaded_config
    ctx.obj = peercompat_ctx

    logger.debug("peercompat v%s", __version__)
    logger.debug("Config path: %s", peercompat_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


cli.add_command(resolve)


def main() -> int:
    """Main entry point for the peercompat CLI.

    Returns:
        Exit code:
            0   Success
            1   Unresolved targets, or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except PeerCompatError as exc:
        print_error(str(exc))
        logger.debug(
            "PeerCompatError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
