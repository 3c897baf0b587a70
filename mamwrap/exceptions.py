"""
Custom exceptions for the mamwrap package.

All mamwrap-specific exceptions inherit from MamWrapError to allow
catching all package exceptions with a single except clause.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from mamwrap.core.models import ProcessOutcome


class MamWrapError(Exception):
    """Base exception for all mamwrap errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(MamWrapError):
    """A required input is missing or does not exist."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__("Validation error", reason)


class ToolNotFoundError(MamWrapError):
    """The wrapping tool is not installed at the resolved location."""

    def __init__(
        self,
        tool_path: str,
        command: Optional[str] = None,
        instructions: Optional[str] = None,
    ):
        self.tool_path = tool_path
        self.command = command
        self.instructions = instructions
        super().__init__(
            "Wrapper tool not found",
            f"The Intune App Wrapping Tool is not found at: {tool_path}",
        )


class PlatformUnsupportedError(MamWrapError):
    """The host cannot run the wrapping tool and the user declined to go on."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(
            "Platform limitation",
            f"iOS app wrapping requires macOS with Xcode installed (running on {platform})",
        )


class ProcessFailureError(MamWrapError):
    """The wrapping tool exited with a nonzero status."""

    def __init__(self, exit_code: int, outcome: Optional[ProcessOutcome] = None):
        self.exit_code = exit_code
        self.outcome = outcome
        super().__init__(
            "Wrapping failed",
            f"Exit code {exit_code}. Check the log for details.",
        )


class LaunchError(MamWrapError):
    """The tool could not be started, or reading its output failed."""

    def __init__(
        self,
        tool_path: str,
        reason: Optional[str] = None,
        log: Sequence[str] = (),
    ):
        self.tool_path = tool_path
        self.log = tuple(log)
        details = f"Tool: {tool_path}"
        if reason:
            details += f", Reason: {reason}"
        super().__init__("Failed to run wrapper tool", details)


class VerificationError(MamWrapError):
    """Post-wrap verification could not complete.

    Recorded on the verification result; never escalated into a
    wrap failure.
    """

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        details = f"Path: {path}"
        if reason:
            details += f", Reason: {reason}"
        super().__init__("Verification error", details)
