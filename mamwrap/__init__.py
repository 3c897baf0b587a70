"""
mamwrap - Front-end for the Intune App Wrapping Tool for iOS.

This package locates IntuneMAMPackager, runs it against an IPA with a
provisioning profile, streams its output, and checks the result.
"""

__version__ = "0.1.0"
__author__ = "mamwrap Contributors"

from mamwrap.core import (
    ProcessOutcome,
    WrapOrchestrator,
    WrapRequest,
    locate_tool,
    render_command,
)

__all__ = [
    "ProcessOutcome",
    "WrapOrchestrator",
    "WrapRequest",
    "locate_tool",
    "render_command",
    "__version__",
]
