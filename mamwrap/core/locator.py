"""
Locating the IntuneMAMPackager executable.

On macOS the tool may live in one of a few install locations, probed
in a fixed order. Other hosts get a single informational path; the
tool is never run there.

Lookups are never cached: the tool may be installed while the
front-end is running, so every call reflects the disk as it is now.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from mamwrap.constants import (
    MACOS_APP_BUNDLE_PATH,
    MACOS_SYSTEM_BIN_PATH,
    MACOS_USER_RELATIVE_PATH,
    POSIX_TOOL_PATH,
    WINDOWS_TOOL_PATH,
)
from mamwrap.core.platform import (
    Capability,
    capability_for,
    current_platform,
    is_windows,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolLocation:
    """
    Resolved location of the wrapping tool.

    Attributes:
        path: Path to run (or to show, on hosts that cannot run it)
        capability: Execution class of the platform it was resolved for
        platform: Platform identifier used for the lookup
        found: Whether a file existed at ``path`` when it was resolved
        candidates: Every path that was considered, in priority order
    """

    path: str
    capability: Capability
    platform: str
    found: bool
    candidates: tuple[str, ...] = field(default_factory=tuple)

    @property
    def can_execute(self) -> bool:
        """Check if the tool can be launched from this location."""
        return self.found and self.capability is Capability.CAPABLE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "path": self.path,
            "capability": self.capability.value,
            "platform": self.platform,
            "found": self.found,
            "candidates": list(self.candidates),
        }


def tool_candidates(
    platform: Optional[str] = None,
    home: Optional[Path] = None,
) -> list[str]:
    """
    List the candidate tool paths for a platform in priority order.

    Args:
        platform: Platform identifier (defaults to this host).
        home: Home directory for the per-user location (defaults to
              the current user's home).

    Returns:
        Candidate paths; a single entry on hosts that cannot run the tool.
    """
    platform = platform or current_platform()
    capability = capability_for(platform)

    if capability is Capability.CAPABLE:
        home = home or Path.home()
        return [
            MACOS_APP_BUNDLE_PATH,
            str(home / MACOS_USER_RELATIVE_PATH),
            MACOS_SYSTEM_BIN_PATH,
        ]
    if capability is Capability.INCAPABLE:
        return [WINDOWS_TOOL_PATH if is_windows(platform) else POSIX_TOOL_PATH]

    raise ValueError(f"Unhandled capability: {capability}")


def locate_tool(
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    override: Optional[Union[str, Path]] = None,
) -> ToolLocation:
    """
    Resolve the wrapping tool path for a platform.

    On the capable platform, returns the first candidate that exists as a
    file, or the first candidate when none do. On any other platform the
    single fixed path is returned regardless of what is on disk.

    Args:
        platform: Platform identifier (defaults to this host).
        home: Home directory for the per-user location.
        override: Explicit tool path that replaces the candidate list.

    Returns:
        ToolLocation describing the resolved path.
    """
    platform = platform or current_platform()
    capability = capability_for(platform)

    if override is not None:
        candidates = [str(override)]
    else:
        candidates = tool_candidates(platform, home)

    if capability is Capability.CAPABLE:
        for candidate in candidates:
            if os.path.isfile(candidate):
                logger.debug(f"Found wrapper tool at {candidate}")
                return ToolLocation(
                    path=candidate,
                    capability=capability,
                    platform=platform,
                    found=True,
                    candidates=tuple(candidates),
                )
        logger.debug(f"Wrapper tool not found, defaulting to {candidates[0]}")
        return ToolLocation(
            path=candidates[0],
            capability=capability,
            platform=platform,
            found=False,
            candidates=tuple(candidates),
        )

    if capability is Capability.INCAPABLE:
        path = candidates[0]
        return ToolLocation(
            path=path,
            capability=capability,
            platform=platform,
            found=os.path.isfile(path),
            candidates=tuple(candidates),
        )

    raise ValueError(f"Unhandled capability: {capability}")
