"""
Host platform capability detection.

The wrapping tool only runs on macOS. Every other host can still
validate inputs and prepare the command, but never executes it.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Optional

MACOS_PLATFORMS = ("darwin",)
WINDOWS_PLATFORMS = ("win32", "cygwin")


class Capability(Enum):
    """Whether the host can execute the wrapping tool."""

    CAPABLE = "capable"
    INCAPABLE = "incapable"


def current_platform() -> str:
    """Return the platform identifier of this host."""
    return sys.platform


def capability_for(platform: Optional[str] = None) -> Capability:
    """Map a platform identifier to its execution class."""
    platform = platform or current_platform()
    if platform in MACOS_PLATFORMS:
        return Capability.CAPABLE
    return Capability.INCAPABLE


def is_windows(platform: Optional[str] = None) -> bool:
    """Check whether a platform identifier names a Windows host."""
    return (platform or current_platform()) in WINDOWS_PLATFORMS


def platform_banner(platform: Optional[str] = None) -> list[str]:
    """Start-up lines describing what this host can do."""
    platform = platform or current_platform()
    capability = capability_for(platform)
    if capability is Capability.CAPABLE:
        return ["✅ Platform: macOS - Ready for iOS app wrapping!"]
    if capability is Capability.INCAPABLE:
        return [
            f"⚠️ Platform: {platform_display_name(platform)}",
            "⚠️ Note: Actual iOS app wrapping requires macOS with Xcode",
            "⚠️ This tool can prepare files and test on Windows/other platforms",
        ]
    raise ValueError(f"Unhandled capability: {capability}")


def platform_display_name(platform: Optional[str] = None) -> str:
    """Human-readable platform name for banners and prompts."""
    platform = platform or current_platform()
    if platform in MACOS_PLATFORMS:
        return "macOS"
    if platform in WINDOWS_PLATFORMS:
        return "Windows"
    if platform.startswith("linux"):
        return "Linux"
    return platform
