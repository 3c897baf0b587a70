"""
mamwrap core library modules.

This package contains the tool locator, the wrap orchestrator, command
construction, the wrap log, post-wrap verification and run history.
"""

from mamwrap.core.command import build_arguments, build_command, render_command
from mamwrap.core.history import HistoryEntry, WrapHistory
from mamwrap.core.locator import ToolLocation, locate_tool, tool_candidates
from mamwrap.core.log import LogChannel, WrapLog
from mamwrap.core.models import (
    LogEntry,
    LogSource,
    OutcomeStatus,
    ProcessOutcome,
    VerificationResult,
    WrapProgress,
    WrapRequest,
    suggest_output_path,
)
from mamwrap.core.orchestrator import (
    WrapOrchestrator,
    install_instructions,
    validate_request,
)
from mamwrap.core.platform import Capability, capability_for
from mamwrap.core.verify import verify_output

__all__ = [
    # Platform & locator
    "Capability",
    "capability_for",
    "ToolLocation",
    "locate_tool",
    "tool_candidates",
    # Models
    "LogEntry",
    "LogSource",
    "OutcomeStatus",
    "ProcessOutcome",
    "VerificationResult",
    "WrapProgress",
    "WrapRequest",
    "suggest_output_path",
    # Command
    "build_arguments",
    "build_command",
    "render_command",
    # Orchestration
    "LogChannel",
    "WrapLog",
    "WrapOrchestrator",
    "install_instructions",
    "validate_request",
    "verify_output",
    # History
    "HistoryEntry",
    "WrapHistory",
]
