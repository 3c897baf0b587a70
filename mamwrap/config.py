"""
Configuration management for mamwrap.

Handles loading, saving, and accessing configuration values from
environment variables, config files, and default values.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from mamwrap.constants import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_HISTORY_FILE,
    DEFAULT_LOG_DIR,
)

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """
    Main configuration container for mamwrap.

    Configuration is loaded from (in order of precedence):
    1. Environment variables (MAMWRAP_*)
    2. Config file (~/.mamwrap/config.json)
    3. Default values

    Example:
        config = Config.load()
        print(config.tool_path or "auto-detect")

        # Or with custom config file
        config = Config.load(Path("/custom/config.json"))
    """

    # Directory paths
    config_dir: Path = field(default_factory=lambda: DEFAULT_CONFIG_DIR)
    log_dir: Path = field(default_factory=lambda: DEFAULT_LOG_DIR)
    history_file: Path = field(default_factory=lambda: DEFAULT_HISTORY_FILE)

    # Explicit tool location; skips probing the install candidates
    tool_path: Optional[Path] = None

    # Defaults for the wrap form
    verbose_tool: bool = True
    verify_after_wrap: bool = True

    # Logging
    log_level: str = "WARNING"
    save_logs: bool = False

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        self.config_dir = Path(self.config_dir)
        self.log_dir = Path(self.log_dir)
        self.history_file = Path(self.history_file)
        if self.tool_path is not None:
            self.tool_path = Path(self.tool_path)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file and environment.

        Args:
            config_path: Optional path to config file. If not provided,
                        uses default location (~/.mamwrap/config.json).

        Returns:
            Config instance with loaded values.
        """
        # Load environment variables from .env file if present
        load_dotenv()

        config_path = config_path or DEFAULT_CONFIG_FILE
        config_data: dict[str, Any] = {}

        if config_path.exists():
            try:
                with open(config_path) as f:
                    config_data = json.load(f)
                logger.debug(f"Loaded config from {config_path}")
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config from {config_path}: {e}")

        config_data = cls._apply_env_overrides(config_data)

        return cls._from_dict(config_data)

    @classmethod
    def _apply_env_overrides(cls, config_data: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config data."""
        env_mappings = {
            "MAMWRAP_CONFIG_DIR": "config_dir",
            "MAMWRAP_LOG_DIR": "log_dir",
            "MAMWRAP_HISTORY_FILE": "history_file",
            "MAMWRAP_TOOL_PATH": "tool_path",
            "MAMWRAP_VERBOSE_TOOL": "verbose_tool",
            "MAMWRAP_VERIFY": "verify_after_wrap",
            "MAMWRAP_LOG_LEVEL": "log_level",
            "MAMWRAP_SAVE_LOGS": "save_logs",
        }

        for env_var, config_key in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                config_data[config_key] = cls._parse_env_value(value)

        return config_data

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False
        return value

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Config:
        """Create Config from dictionary."""
        tool_path = data.get("tool_path")
        return cls(
            config_dir=Path(data.get("config_dir", DEFAULT_CONFIG_DIR)),
            log_dir=Path(data.get("log_dir", DEFAULT_LOG_DIR)),
            history_file=Path(data.get("history_file", DEFAULT_HISTORY_FILE)),
            tool_path=Path(tool_path) if tool_path else None,
            verbose_tool=bool(data.get("verbose_tool", True)),
            verify_after_wrap=bool(data.get("verify_after_wrap", True)),
            log_level=data.get("log_level", "WARNING"),
            save_logs=bool(data.get("save_logs", False)),
        )

    def save(self, config_path: Optional[Path] = None) -> None:
        """
        Save configuration to file.

        Args:
            config_path: Optional path to save to. If not provided,
                        uses default location.
        """
        config_path = config_path or DEFAULT_CONFIG_FILE

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

        logger.info(f"Saved config to {config_path}")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "config_dir": str(self.config_dir),
            "log_dir": str(self.log_dir),
            "history_file": str(self.history_file),
            "tool_path": str(self.tool_path) if self.tool_path else None,
            "verbose_tool": self.verbose_tool,
            "verify_after_wrap": self.verify_after_wrap,
            "log_level": self.log_level,
            "save_logs": self.save_logs,
        }

    def ensure_directories(self) -> None:
        """Create all configured directories if they don't exist."""
        for directory in [self.config_dir, self.log_dir]:
            directory.mkdir(parents=True, exist_ok=True)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config

