"""
Command-line construction for IntuneMAMPackager.

The same argument builder feeds both the real invocation and the
command preview, so what is shown is always what would run.
"""

from __future__ import annotations

import shlex
from typing import Optional

from mamwrap.constants import (
    FLAG_INPUT,
    FLAG_OUTPUT,
    FLAG_PROFILE,
    FLAG_SIGNING_IDENTITY,
    FLAG_VERBOSE,
    TOOL_NAME,
)
from mamwrap.core.models import WrapRequest


def build_arguments(request: WrapRequest) -> list[str]:
    """
    Build the tool arguments for a request.

    Each value is a separate list element, so paths with spaces keep
    their boundaries when passed to the process without a shell.
    """
    args = [
        FLAG_INPUT, request.input_path,
        FLAG_OUTPUT, request.output_path,
        FLAG_PROFILE, request.profile_path,
    ]
    if request.signing_identity:
        args += [FLAG_SIGNING_IDENTITY, request.signing_identity]
    if request.verbose:
        args.append(FLAG_VERBOSE)
    return args


def build_command(tool_path: str, request: WrapRequest) -> list[str]:
    """Full argv for launching the tool."""
    return [str(tool_path), *build_arguments(request)]


def format_arguments(request: WrapRequest) -> str:
    """Quoted argument string, as logged before launch."""
    return shlex.join(build_arguments(request))


def render_command(request: WrapRequest, tool: Optional[str] = None) -> str:
    """
    Render the command line for manual execution.

    Args:
        request: Wrap parameters.
        tool: Executable to show; defaults to the bare tool name, which is
              what a user would type on a Mac with the tool on PATH.

    Returns:
        Shell-quoted command line.
    """
    return shlex.join(build_command(tool or TOOL_NAME, request))
