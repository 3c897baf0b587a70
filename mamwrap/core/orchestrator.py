"""
Running IntuneMAMPackager as a child process.

This module handles the full workflow of a wrap:
1. Validate the request
2. Check the host platform and locate the tool
3. Launch the tool with its output piped
4. Drain stdout and stderr into the wrap log while it runs
5. Wait for exit and classify by exit code
6. Optionally verify the produced archive
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import IO, Callable, Optional

from mamwrap.constants import (
    EXCEPTION_PREFIX,
    MACOS_INSTALL_INSTRUCTIONS,
    OTHER_INSTALL_INSTRUCTIONS,
    PROGRESS_COMPLETE,
    PROGRESS_FAILED,
    PROGRESS_FINISHED,
    PROGRESS_LAUNCH,
    PROGRESS_RUNNING,
    PROGRESS_START,
    PROGRESS_VERIFYING,
)
from mamwrap.core.command import build_command, format_arguments, render_command
from mamwrap.core.locator import ToolLocation, locate_tool
from mamwrap.core.log import LogChannel, LineListener, WrapLog
from mamwrap.core.models import (
    LogSource,
    ProcessOutcome,
    WrapProgress,
    WrapRequest,
)
from mamwrap.core.platform import (
    Capability,
    capability_for,
    current_platform,
    platform_display_name,
)
from mamwrap.core.verify import verify_output
from mamwrap.exceptions import (
    LaunchError,
    PlatformUnsupportedError,
    ToolNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ProgressListener = Callable[[WrapProgress], None]
ConfirmCallback = Callable[[str], bool]
Locator = Callable[[], ToolLocation]


def validate_request(request: WrapRequest) -> None:
    """
    Check the request's paths before anything is launched.

    Raises:
        ValidationError: For the first failing check, in form order.
    """
    if not request.input_path:
        raise ValidationError("input_path", "Please select an input IPA file")
    if not os.path.isfile(request.input_path):
        raise ValidationError("input_path", "Input IPA file does not exist")
    if not request.profile_path:
        raise ValidationError("profile_path", "Please select a provisioning profile")
    if not os.path.isfile(request.profile_path):
        raise ValidationError("profile_path", "Provisioning profile does not exist")
    if not request.output_path:
        raise ValidationError("output_path", "Please specify an output location")


def install_instructions(capability: Capability) -> str:
    """Download instructions for the tool on this kind of host."""
    if capability is Capability.CAPABLE:
        return MACOS_INSTALL_INSTRUCTIONS
    if capability is Capability.INCAPABLE:
        return OTHER_INSTALL_INSTRUCTIONS
    raise ValueError(f"Unhandled capability: {capability}")


def _pump(stream: IO[str], source: LogSource, channel: LogChannel) -> None:
    """Read one pipe line by line into the channel."""
    try:
        for line in iter(stream.readline, ""):
            line = line.rstrip("\r\n")
            if line:
                channel.post(source, line)
    except Exception as e:
        channel.fail(source, e)
    finally:
        channel.close(source)


class WrapOrchestrator:
    """
    Runs wraps one at a time and reports their progress.

    Line and progress listeners are called from the thread running the
    wrap, never from the pipe readers.

    Example:
        orchestrator = WrapOrchestrator(
            confirm_unsupported=lambda platform: False,
            line_listener=lambda entry: print(entry.render()),
        )
        request = WrapRequest.create(
            "MyApp.ipa", "MyApp-wrapped.ipa", "profile.mobileprovision"
        )
        outcome = orchestrator.wrap(request)
        outcome.raise_for_status()
    """

    def __init__(
        self,
        platform: Optional[str] = None,
        locator: Optional[Locator] = None,
        confirm_unsupported: Optional[ConfirmCallback] = None,
        line_listener: Optional[LineListener] = None,
        progress_listener: Optional[ProgressListener] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            platform: Platform identifier (defaults to this host).
            locator: Returns the tool location; re-run on every wrap.
            confirm_unsupported: Asked whether to go on when the host cannot
                run the tool. Declines when not given.
            line_listener: Receives every log line as it is appended.
            progress_listener: Receives advisory progress milestones.
        """
        self.platform = platform or current_platform()
        self.capability = capability_for(self.platform)
        self._locator = locator or (lambda: locate_tool(self.platform))
        self._confirm_unsupported = confirm_unsupported
        self.line_listener = line_listener
        self.progress_listener = progress_listener
        self._executor: Optional[ThreadPoolExecutor] = None
        self._last_log: Optional[WrapLog] = None

    @property
    def last_log(self) -> Optional[WrapLog]:
        """Log of the most recent run that got as far as launching."""
        return self._last_log

    def locate(self) -> ToolLocation:
        """Resolve the tool location now."""
        return self._locator()

    def _progress(self, message: str, fraction: float) -> None:
        logger.debug(f"Progress {fraction:.0%}: {message}")
        if self.progress_listener is not None:
            self.progress_listener(WrapProgress(message, fraction))

    def check_platform(self) -> None:
        """
        Ask to continue when the host cannot run the tool.

        Raises:
            PlatformUnsupportedError: If the answer is no.
        """
        if self.capability is Capability.CAPABLE:
            return
        if self.capability is Capability.INCAPABLE:
            name = platform_display_name(self.platform)
            confirm = self._confirm_unsupported
            if confirm is None or not confirm(name):
                logger.info(f"Wrap declined on unsupported platform {name}")
                raise PlatformUnsupportedError(name)
            return
        raise ValueError(f"Unhandled capability: {self.capability}")

    def prepare(self, request: WrapRequest, tool: Optional[str] = None) -> str:
        """
        Run every precondition and return the tool path to launch.

        Raises:
            ValidationError: A path is missing or does not exist.
            PlatformUnsupportedError: Host cannot run the tool and the
                user chose not to continue.
            ToolNotFoundError: Nothing exists at the resolved tool path.
        """
        validate_request(request)
        self.check_platform()

        tool_path = tool or self.locate().path
        if not os.path.isfile(tool_path):
            logger.info(f"Wrapper tool missing at {tool_path}")
            raise ToolNotFoundError(
                tool_path,
                command=render_command(request),
                instructions=install_instructions(self.capability),
            )
        return tool_path

    def wrap(self, request: WrapRequest, tool: Optional[str] = None) -> ProcessOutcome:
        """
        Validate, launch the tool, and wait for it to finish.

        Args:
            request: Wrap parameters.
            tool: Tool path; resolved with the locator when omitted.

        Returns:
            ProcessOutcome classified by exit code. Nonzero exits are
            returned, not raised; use ``raise_for_status()``.

        Raises:
            ValidationError, PlatformUnsupportedError, ToolNotFoundError:
                Before anything is launched.
            LaunchError: The process could not start or a pipe read failed.
        """
        tool_path = self.prepare(request, tool)
        return self.execute(request, tool_path)

    def execute(self, request: WrapRequest, tool_path: str) -> ProcessOutcome:
        """
        Launch an already prepared request and wait for it to finish.

        Callers that skip ``prepare`` take on its checks themselves.

        Raises:
            LaunchError: The process could not start or a pipe read failed.
        """
        log = WrapLog(listener=self.line_listener)
        self._last_log = log

        self._progress("Starting wrapping process...", PROGRESS_START)
        log.message(f"Executing: {tool_path}")
        log.message(f"Arguments: {format_arguments(request)}")
        log.message()

        self._progress("Wrapping app with Intune wrapper...", PROGRESS_LAUNCH)
        exit_code = self._run(tool_path, request, log)

        self._progress("Wrapping completed", PROGRESS_FINISHED)
        log.message()
        if exit_code == 0:
            log.message("✅ SUCCESS! App wrapped successfully!")
            log.message(f"Wrapped IPA: {request.output_path}")
        else:
            log.message(f"❌ FAILED! Exit code: {exit_code}")
        logger.info(f"Wrapper tool exited with code {exit_code}")

        verification = None
        if request.verify_after_wrap:
            self._progress("Verifying wrapped IPA...", PROGRESS_VERIFYING)
            verification = verify_output(request.input_path, request.output_path, log)

        outcome = ProcessOutcome(
            exit_code=exit_code,
            log=log.lines,
            verification=verification,
        )
        if outcome.succeeded:
            self._progress("✅ Complete!", PROGRESS_COMPLETE)
        else:
            self._progress("❌ Wrapping failed", PROGRESS_FAILED)
        return outcome

    def _run(self, tool_path: str, request: WrapRequest, log: WrapLog) -> int:
        """Launch the tool, drain both pipes into ``log``, return the exit code."""
        argv = build_command(tool_path, request)
        logger.debug(f"Launching {argv}")

        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            self._launch_failed(log, e)
            raise LaunchError(tool_path, str(e), log.lines) from e

        channel = LogChannel()
        readers = [
            threading.Thread(
                name="wrap-stdout",
                target=_pump,
                args=(process.stdout, LogSource.STDOUT, channel),
                daemon=True,
            ),
            threading.Thread(
                name="wrap-stderr",
                target=_pump,
                args=(process.stderr, LogSource.STDERR, channel),
                daemon=True,
            ),
        ]

        try:
            for reader in readers:
                reader.start()
            self._progress("Processing... Please wait", PROGRESS_RUNNING)

            error = channel.drain(log, len(readers))
            if error is not None:
                process.kill()
                process.wait()
                self._launch_failed(log, error)
                raise LaunchError(tool_path, str(error), log.lines) from error

            return process.wait()
        except BaseException:
            if process.poll() is None:
                process.kill()
                process.wait()
            raise
        finally:
            for reader in readers:
                if reader.is_alive():
                    reader.join()
            process.stdout.close()
            process.stderr.close()

    def _launch_failed(self, log: WrapLog, error: BaseException) -> None:
        log.message(f"{EXCEPTION_PREFIX}{error}")
        self._progress("❌ Error occurred", PROGRESS_FAILED)
        logger.error(f"Wrapper tool failed to run: {error}")

    def submit(self, request: WrapRequest, tool: Optional[str] = None) -> Future:
        """
        Run ``wrap`` on a background worker.

        Only one wrap runs at a time; a second submit waits for the first.
        Listeners are called from the worker thread.

        Returns:
            Future resolving to the ProcessOutcome, or raising what
            ``wrap`` raised.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="mamwrap"
            )
        return self._executor.submit(self.wrap, request, tool)

    def close(self) -> None:
        """Shut down the background worker, waiting for a running wrap."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "WrapOrchestrator":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
