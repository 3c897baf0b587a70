"""
CLI commands for wrapping iOS apps.

This module provides commands for running the Intune App Wrapping Tool,
previewing its command line, and finding where it is installed.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mamwrap.config import Config, get_config
from mamwrap.constants import LAUNCH_FAILURE_EXIT_CODE
from mamwrap.core.command import render_command
from mamwrap.core.history import WrapHistory
from mamwrap.core.locator import ToolLocation, locate_tool
from mamwrap.core.models import (
    LogEntry,
    ProcessOutcome,
    WrapProgress,
    WrapRequest,
    suggest_output_path,
)
from mamwrap.core.orchestrator import WrapOrchestrator, install_instructions
from mamwrap.core.platform import (
    Capability,
    capability_for,
    platform_banner,
    platform_display_name,
)
from mamwrap.exceptions import (
    LaunchError,
    MamWrapError,
    PlatformUnsupportedError,
    ToolNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def get_console(ctx: click.Context) -> Console:
    """Get console from context or create new one."""
    if ctx.obj and "console" in ctx.obj:
        return ctx.obj["console"]
    return Console()


def get_cli_config(ctx: click.Context) -> Config:
    """Get config from context, falling back to the global one."""
    if ctx.obj and "config" in ctx.obj:
        return ctx.obj["config"]
    return get_config()


def resolve_location(config: Config, tool: Optional[str] = None) -> ToolLocation:
    """Locate the tool, honouring --tool and the configured override."""
    override = tool or config.tool_path
    return locate_tool(override=override)


def build_request(
    input_ipa: str,
    profile: str,
    output: Optional[str],
    signing_identity: Optional[str],
    verbose: bool,
    verify: bool,
) -> WrapRequest:
    """Build a request, suggesting an output path when none was given."""
    if not output and input_ipa and input_ipa.strip():
        output = str(suggest_output_path(input_ipa))
    return WrapRequest.create(
        input_path=input_ipa,
        output_path=output,
        profile_path=profile,
        signing_identity=signing_identity,
        verbose=verbose,
        verify_after_wrap=verify,
    )


def print_banner(console: Console) -> None:
    """Print the platform banner."""
    for line in platform_banner():
        style = "green" if line.startswith("✅") else "yellow"
        console.print(line, style=style, markup=False)
    console.print()


def print_prepared_command(console: Console, command: str) -> None:
    """Show a command for the user to run on a Mac."""
    console.print("📋 Prepared Command for macOS:")
    console.print()
    console.print(command, markup=False, highlight=False, soft_wrap=True)
    console.print()
    console.print(
        "[green]✅ Copy this command and run it on a Mac with Xcode installed[/green]"
    )


def record_run(
    console: Console,
    config: Config,
    orchestrator: WrapOrchestrator,
    request: WrapRequest,
    outcome: ProcessOutcome,
    save_log: bool,
) -> None:
    """Save the run's log if asked and add it to the wrap history."""
    log_file = None
    if save_log and orchestrator.last_log is not None:
        try:
            log_file = orchestrator.last_log.save(config.log_dir)
            console.print(f"[dim]Log saved to {log_file}[/dim]")
        except OSError as e:
            logger.warning(f"Could not save wrap log: {e}")
            console.print(f"[yellow]Warning:[/yellow] Could not save log: {e}")

    WrapHistory(config.history_file).record(request, outcome, log_file)


def wrap_options(func):
    """Options shared by 'wrap' and 'command'."""
    options = [
        click.argument("input_ipa"),
        click.argument("profile"),
        click.option(
            "--output", "-o",
            help="Output IPA path (default: <input>-wrapped.ipa).",
        ),
        click.option(
            "--signing-identity", "-c",
            help="Certificate name or SHA-1 used to re-sign the app.",
        ),
        click.option(
            "--tool-verbose/--no-tool-verbose",
            default=None,
            help="Pass -v to the wrapping tool (default from config).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command("wrap")
@wrap_options
@click.option(
    "--verify/--no-verify",
    default=None,
    help="Check the wrapped IPA after wrapping (default from config).",
)
@click.option(
    "--tool",
    type=click.Path(dir_okay=False),
    help="Path to IntuneMAMPackager (skips auto-detection).",
)
@click.option(
    "--yes", "-y",
    is_flag=True,
    help="Continue on unsupported platforms without asking.",
)
@click.option(
    "--save-log/--no-save-log",
    default=None,
    help="Write the wrap log to the log directory.",
)
@click.pass_context
def wrap_cmd(
    ctx: click.Context,
    input_ipa: str,
    profile: str,
    output: Optional[str],
    signing_identity: Optional[str],
    tool_verbose: Optional[bool],
    verify: Optional[bool],
    tool: Optional[str],
    yes: bool,
    save_log: Optional[bool],
) -> None:
    """
    Wrap an iOS app with the Intune App Wrapping Tool.

    INPUT_IPA is the app to wrap. PROFILE is the provisioning profile
    (.mobileprovision) used to sign the wrapped app.

    Examples:

        $ mamwrap wrap MyApp.ipa profile.mobileprovision
        $ mamwrap wrap MyApp.ipa profile.mobileprovision -o out/MyApp.ipa
        $ mamwrap wrap MyApp.ipa profile.mobileprovision -c "iPhone Distribution: Contoso"
    """
    console = get_console(ctx)
    config = get_cli_config(ctx)

    if tool_verbose is None:
        tool_verbose = config.verbose_tool
    if verify is None:
        verify = config.verify_after_wrap
    if save_log is None:
        save_log = config.save_logs

    request = build_request(
        input_ipa, profile, output, signing_identity, tool_verbose, verify
    )

    def confirm_unsupported(platform_name: str) -> bool:
        if yes:
            return True
        console.print(
            Panel(
                f"You are running on {platform_name}.\n\n"
                "iOS app wrapping requires macOS with Xcode installed.\n\n"
                "This tool can validate your files and prepare the command, "
                "but cannot perform actual wrapping.",
                title="Platform Limitation",
                border_style="yellow",
            )
        )
        return click.confirm("Continue anyway?")

    print_banner(console)

    orchestrator = WrapOrchestrator(
        locator=lambda: resolve_location(config, tool),
        confirm_unsupported=confirm_unsupported,
    )

    try:
        tool_path = orchestrator.prepare(request)
    except ValidationError as e:
        console.print(f"[red]Validation Error:[/red] {e.reason}")
        raise SystemExit(1)
    except PlatformUnsupportedError:
        console.print("Cancelled.")
        return
    except ToolNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        if e.instructions:
            console.print(
                Panel(e.instructions, title="Download Instructions", border_style="blue")
            )
        if orchestrator.capability is Capability.INCAPABLE and e.command:
            console.print()
            print_prepared_command(console, e.command)
        raise SystemExit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console,
        ) as progress:
            task = progress.add_task("Ready to wrap...", total=1.0)

            def on_line(entry: LogEntry) -> None:
                progress.console.print(
                    entry.render(), markup=False, highlight=False, soft_wrap=True
                )

            def on_progress(update: WrapProgress) -> None:
                progress.update(
                    task, description=update.message, completed=update.fraction
                )

            orchestrator.line_listener = on_line
            orchestrator.progress_listener = on_progress
            outcome = orchestrator.execute(request, tool_path)

    except LaunchError as e:
        console.print(f"[red]Error:[/red] An error occurred: {e}")
        failed = ProcessOutcome(exit_code=LAUNCH_FAILURE_EXIT_CODE, log=e.log)
        record_run(console, config, orchestrator, request, failed, save_log)
        raise SystemExit(1)
    except MamWrapError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    record_run(console, config, orchestrator, request, outcome, save_log)

    if outcome.succeeded:
        console.print(
            Panel(
                f"App wrapped successfully!\n\nOutput: {request.output_path}",
                title="Success",
                border_style="green",
            )
        )
        return

    console.print(
        f"[red]Error:[/red] Wrapping failed with exit code {outcome.exit_code}. "
        "Check the log for details."
    )
    raise SystemExit(1)


@click.command("command")
@wrap_options
@click.option(
    "--tool",
    type=click.Path(dir_okay=False),
    help="Executable to show instead of the bare tool name.",
)
@click.pass_context
def command_cmd(
    ctx: click.Context,
    input_ipa: str,
    profile: str,
    output: Optional[str],
    signing_identity: Optional[str],
    tool_verbose: Optional[bool],
    tool: Optional[str],
) -> None:
    """
    Print the wrapping command without running it.

    Use this on Windows or Linux to prepare the command, then run it
    on a Mac with Xcode installed.

    Examples:

        $ mamwrap command MyApp.ipa profile.mobileprovision
        $ mamwrap command "My App.ipa" profile.mobileprovision --no-tool-verbose
    """
    config = get_cli_config(ctx)
    if tool_verbose is None:
        tool_verbose = config.verbose_tool

    request = build_request(
        input_ipa, profile, output, signing_identity, tool_verbose, False
    )
    click.echo(render_command(request, tool))


@click.command("locate")
@click.option(
    "--tool",
    type=click.Path(dir_okay=False),
    help="Check this path instead of the default locations.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def locate_cmd(ctx: click.Context, tool: Optional[str], as_json: bool) -> None:
    """
    Show where the wrapping tool is expected and whether it is installed.

    Examples:

        $ mamwrap locate
        $ mamwrap locate --json
    """
    console = get_console(ctx)
    config = get_cli_config(ctx)

    location = resolve_location(config, tool)

    if as_json:
        click.echo(json.dumps(location.to_dict(), indent=2))
        return

    print_banner(console)

    table = Table(title="Wrapper Tool Locations")
    table.add_column("Priority", justify="right", style="dim")
    table.add_column("Path", style="cyan")
    table.add_column("Installed", justify="center")

    for index, candidate in enumerate(location.candidates, start=1):
        installed = location.found and candidate == location.path
        table.add_row(
            str(index),
            candidate,
            "[green]Yes[/green]" if installed else "[red]No[/red]",
        )

    console.print(table)
    console.print()
    console.print(f"[bold]Platform:[/bold] {platform_display_name(location.platform)}")
    console.print(f"[bold]Resolved:[/bold] {location.path}")

    if location.can_execute:
        console.print("[green]Ready to wrap.[/green]")
    elif location.capability is Capability.CAPABLE:
        console.print(
            "[yellow]Wrapper tool not installed.[/yellow] "
            "Run 'mamwrap instructions' for download steps."
        )
    else:
        console.print(
            "[dim]Wrapping cannot run on this platform. "
            "Use 'mamwrap command' to prepare the command for a Mac.[/dim]"
        )


@click.command("instructions")
@click.pass_context
def instructions_cmd(ctx: click.Context) -> None:
    """Show how to download and install the wrapping tool."""
    console = get_console(ctx)
    capability = capability_for()
    console.print(
        Panel(
            install_instructions(capability),
            title="Download Instructions",
            border_style="blue",
        )
    )
