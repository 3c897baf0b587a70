"""
Main CLI entry point for mamwrap.

This module defines the root CLI group and initializes the application.

Usage:
    mamwrap --help
    mamwrap wrap MyApp.ipa profile.mobileprovision
    mamwrap locate
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from mamwrap import __version__
from mamwrap.config import Config, get_config
from mamwrap.cli.commands import wrap, history

# Rich console for pretty output
console = Console()


def setup_logging(verbose: bool, debug: bool, log_level: str = "WARNING") -> None:
    """Configure logging based on verbosity flags, falling back to log_level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = getattr(logging, log_level.upper(), None)
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="mamwrap")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug output (more verbose than -v).",
)
@click.option(
    "--config",
    type=click.Path(exists=False),
    help="Path to config file.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    debug: bool,
    config: Optional[str],
) -> None:
    """
    mamwrap - Wrap iOS apps with the Intune App Wrapping Tool.

    Runs IntuneMAMPackager on an IPA with your provisioning profile,
    streams its output, and checks the wrapped result.

    Examples:

        Wrap an app:
        $ mamwrap wrap MyApp.ipa profile.mobileprovision

        Show the command to run on a Mac:
        $ mamwrap command MyApp.ipa profile.mobileprovision

        Find the wrapping tool:
        $ mamwrap locate
    """
    loaded = Config.load(Path(config)) if config else get_config()
    setup_logging(verbose, debug, loaded.log_level)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["console"] = console
    ctx.obj["config"] = loaded


cli.add_command(wrap.wrap_cmd)
cli.add_command(wrap.command_cmd)
cli.add_command(wrap.locate_cmd)
cli.add_command(wrap.instructions_cmd)
cli.add_command(history.history_cmd)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if "--debug" in sys.argv:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
