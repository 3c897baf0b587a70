"""
Recent wrap history.

Keeps a small JSON record of recent wrap runs so the CLI can show what
was wrapped, where it went, and how it ended.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from mamwrap.constants import (
    DEFAULT_HISTORY_FILE,
    HISTORY_VERSION,
    MAX_HISTORY_ITEMS,
)
from mamwrap.core.models import ProcessOutcome, WrapRequest

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    """One recorded wrap run."""

    input_path: str
    output_path: str
    profile_path: str
    exit_code: int
    status: str
    created_at: str
    signing_identity: Optional[str] = None
    size_increased: Optional[bool] = None
    log_file: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Create from dictionary."""
        return cls(
            input_path=data.get("input_path", ""),
            output_path=data.get("output_path", ""),
            profile_path=data.get("profile_path", ""),
            exit_code=data.get("exit_code", -1),
            status=data.get("status", ""),
            created_at=data.get("created_at", ""),
            signing_identity=data.get("signing_identity"),
            size_increased=data.get("size_increased"),
            log_file=data.get("log_file"),
        )

    def output_exists(self) -> bool:
        """Check if the wrapped archive is still on disk."""
        return Path(self.output_path).exists()


@dataclass
class HistoryState:
    """Full history file contents."""

    version: int = HISTORY_VERSION
    entries: list[HistoryEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryState:
        """Create from dictionary."""
        return cls(
            version=data.get("version", HISTORY_VERSION),
            entries=[HistoryEntry.from_dict(e) for e in data.get("entries", [])],
        )


class WrapHistory:
    """
    Persistent list of recent wrap runs, newest first.

    Example:
        history = WrapHistory()
        history.record(request, outcome)
        for entry in history.recent():
            print(entry.output_path, entry.status)
    """

    def __init__(self, history_file: Optional[Path] = None):
        """
        Initialize history.

        Args:
            history_file: Path to history file. Defaults to ~/.mamwrap/history.json
        """
        self._history_file = history_file or DEFAULT_HISTORY_FILE
        self._state = HistoryState()
        self._load()

    def _load(self) -> None:
        """Load history from file."""
        if not self._history_file.exists():
            return
        try:
            with open(self._history_file, "r") as f:
                data = json.load(f)
            self._state = HistoryState.from_dict(data)
            logger.debug(f"Loaded history from {self._history_file}")
        except (json.JSONDecodeError, OSError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load history: {e}")
            self._state = HistoryState()

    def _save(self) -> None:
        """Save history to file."""
        try:
            self._history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._history_file, "w") as f:
                json.dump(self._state.to_dict(), f, indent=2)
            logger.debug(f"Saved history to {self._history_file}")
        except OSError as e:
            logger.warning(f"Failed to save history: {e}")

    def record(
        self,
        request: WrapRequest,
        outcome: ProcessOutcome,
        log_file: Optional[Path] = None,
    ) -> HistoryEntry:
        """
        Record a finished wrap.

        Args:
            request: The request that was run
            outcome: Its outcome
            log_file: Saved log, if the log was written to disk

        Returns:
            The new entry.
        """
        verification = outcome.verification
        entry = HistoryEntry(
            input_path=request.input_path,
            output_path=request.output_path,
            profile_path=request.profile_path,
            exit_code=outcome.exit_code,
            status=outcome.status.value,
            created_at=datetime.now().isoformat(),
            signing_identity=request.signing_identity,
            size_increased=verification.size_increased if verification else None,
            log_file=str(log_file) if log_file else None,
        )

        self._state.entries.insert(0, entry)
        self._state.entries = self._state.entries[:MAX_HISTORY_ITEMS]
        self._save()
        return entry

    def recent(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """
        Get recent entries, newest first.

        Args:
            limit: Maximum number of entries to return
        """
        entries = list(self._state.entries)
        if limit is not None:
            entries = entries[:limit]
        return entries

    def last(self) -> Optional[HistoryEntry]:
        """Get the most recent entry."""
        return self._state.entries[0] if self._state.entries else None

    def clear(self) -> None:
        """Forget all recorded runs."""
        self._state = HistoryState()
        self._save()

    def to_dict(self) -> dict[str, Any]:
        """Get history as dictionary."""
        return self._state.to_dict()
