"""Osiris CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version

import click

from .cli_types import ConsoleArgs, ListArgs
from .commands import cmd_console, cmd_list
from .exceptions import CommandFailureError, OsirisError, UserError

# Module logger
logger = logging.getLogger("osiris")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


def config_option(func):
    """Decorator adding --config to a command."""
    return click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        help="Path to config file (default: $OSIRIS_CONFIG or ~/.osiris/config).",
    )(func)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("osiris"), prog_name="osiris")
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging to stderr.",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """Osiris: New Relic incident console for infrastructure hosts."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    setup_logging(debug=debug)


@cli.command("console")
@config_option
@click.option(
    "--refresh-interval",
    type=int,
    help="Seconds between automatic refreshes (overrides the config file).",
)
def console(config_path: str | None, refresh_interval: int | None):
    """Interactive host dashboard (press ? inside for keys).

    While the dashboard runs, logs go to ~/.osiris/debug.log.
    """
    args = ConsoleArgs(config=config_path, refresh_interval=refresh_interval)
    cmd_console(args)


@cli.command("list")
@config_option
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Emit machine-readable JSON to stdout.",
)
@click.option(
    "--no-correlate",
    is_flag=True,
    help="Skip alert correlation (host list only).",
)
def list_hosts(config_path: str | None, json_output: bool, no_correlate: bool):
    """Fetch hosts once and print them with their alert status."""
    args = ListArgs(config=config_path, json=json_output, no_correlate=no_correlate)
    cmd_list(args)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except CommandFailureError as e:
        # Command already printed its error message, just exit
        sys.exit(e.rc)
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except OsirisError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
