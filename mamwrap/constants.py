"""
Constants used throughout the mamwrap package.

This module contains the tool locations, default values, progress
milestones and user-facing text used by various components. Import
from here rather than hardcoding values elsewhere.
"""

from pathlib import Path

# Version info
VERSION = "0.1.0"
APP_NAME = "mamwrap"

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".mamwrap"
DEFAULT_LOG_DIR = DEFAULT_CONFIG_DIR / "logs"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"
DEFAULT_HISTORY_FILE = DEFAULT_CONFIG_DIR / "history.json"

# External wrapping tool
TOOL_NAME = "IntuneMAMPackager"
TOOL_RELEASES_URL = "https://github.com/msintuneappsdk/intune-app-wrapping-tool-ios"
MIN_TOOL_VERSION = "20.8.0"

# Candidate install locations on macOS, in probe order. The user-relative
# entry is joined onto the home directory at lookup time.
MACOS_APP_BUNDLE_PATH = "/Applications/IntuneMAMPackager/IntuneMAMPackager"
MACOS_USER_RELATIVE_PATH = "IntuneWrapper/IntuneMAMPackager"
MACOS_SYSTEM_BIN_PATH = "/usr/local/bin/IntuneMAMPackager"

# Informational locations on hosts that cannot run the tool
WINDOWS_TOOL_PATH = r"C:\IntuneWrapper\IntuneMAMPackager\IntuneMAMPackager.exe"
POSIX_TOOL_PATH = "/opt/IntuneMAMPackager/IntuneMAMPackager"

# Tool command-line flags
FLAG_INPUT = "-i"
FLAG_OUTPUT = "-o"
FLAG_PROFILE = "-p"
FLAG_SIGNING_IDENTITY = "-c"
FLAG_VERBOSE = "-v"

# File naming
IPA_EXTENSION = ".ipa"
WRAPPED_SUFFIX = "-wrapped"
DEFAULT_OUTPUT_NAME = "wrapped-app.ipa"

# Log line prefixes
STDERR_PREFIX = "ERROR: "
EXCEPTION_PREFIX = "EXCEPTION: "

# Progress milestones (fraction of the bar). These follow orchestration
# phases only, never parsed tool output.
PROGRESS_START = 0.1
PROGRESS_LAUNCH = 0.3
PROGRESS_RUNNING = 0.5
PROGRESS_FINISHED = 0.8
PROGRESS_VERIFYING = 0.9
PROGRESS_COMPLETE = 1.0
PROGRESS_FAILED = 0.0

# History
MAX_HISTORY_ITEMS = 10

# Exit code recorded for runs that never produced one
LAUNCH_FAILURE_EXIT_CODE = -1
HISTORY_VERSION = 1

MACOS_INSTALL_INSTRUCTIONS = (
    "macOS Instructions:\n"
    f"1. Visit: {TOOL_RELEASES_URL}\n"
    f"2. Download the latest release (v{MIN_TOOL_VERSION} or higher)\n"
    "3. Extract to /Applications/IntuneMAMPackager/\n"
    "4. Make executable: chmod +x /Applications/IntuneMAMPackager/IntuneMAMPackager"
)

OTHER_INSTALL_INSTRUCTIONS = (
    "Windows/Linux Instructions:\n"
    f"1. Visit: {TOOL_RELEASES_URL}\n"
    "2. Note: Wrapping requires macOS - use this tool to prepare files\n"
    "3. Transfer files to a Mac or use CI/CD (GitHub Actions)"
)
