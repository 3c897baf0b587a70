"""
Wrap log with a single writer.

Output from the tool arrives on two reader threads at once. Readers never
touch the log: they post lines to a LogChannel, and the thread that owns
the WrapLog drains the channel and appends. Listeners are therefore only
ever called from the owning thread.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from mamwrap.core.models import LogEntry, LogSource

logger = logging.getLogger(__name__)

LineListener = Callable[[LogEntry], None]


class WrapLog:
    """
    Append-only log of a wrap run.

    Example:
        log = WrapLog(listener=lambda entry: print(entry.render()))
        log.message("Executing: /usr/local/bin/IntuneMAMPackager")
        log.append(LogEntry("warning: no entitlements", LogSource.STDERR))
        print(log.lines)
    """

    def __init__(self, listener: Optional[LineListener] = None):
        self._entries: list[LogEntry] = []
        self._listener = listener

    def append(self, entry: LogEntry) -> None:
        """Append an entry and notify the listener."""
        self._entries.append(entry)
        if self._listener is not None:
            self._listener(entry)

    def message(self, text: str = "") -> None:
        """Append an orchestrator message."""
        self.append(LogEntry(text, LogSource.ORCHESTRATOR))

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        """All entries in append order."""
        return tuple(self._entries)

    @property
    def lines(self) -> tuple[str, ...]:
        """All entries rendered as text, in append order."""
        return tuple(entry.render() for entry in self._entries)

    def from_source(self, source: LogSource) -> list[str]:
        """Raw text of the entries from one source."""
        return [e.text for e in self._entries if e.source is source]

    def __len__(self) -> int:
        return len(self._entries)

    def save(self, directory: Union[str, Path]) -> Path:
        """
        Write the log to ``directory/wrap-<timestamp>.log``.

        Returns:
            Path of the written file.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = directory / f"wrap-{stamp}.log"
        path.write_text("\n".join(self.lines) + "\n", encoding="utf-8")
        logger.info(f"Saved wrap log to {path}")
        return path


@dataclass(frozen=True)
class _StreamClosed:
    source: LogSource


@dataclass(frozen=True)
class _StreamFailed:
    source: LogSource
    error: BaseException


class LogChannel:
    """
    Queue between the stream readers and the log owner.

    Each reader posts its lines and then exactly one close marker. Order is
    kept per stream; lines from different streams interleave in whatever
    order they reached the queue.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()

    def post(self, source: LogSource, text: str) -> None:
        """Post one line from a stream."""
        self._queue.put(LogEntry(text, source))

    def fail(self, source: LogSource, error: BaseException) -> None:
        """Report that reading a stream raised."""
        self._queue.put(_StreamFailed(source, error))

    def close(self, source: LogSource) -> None:
        """Report that a stream reached end of file."""
        self._queue.put(_StreamClosed(source))

    def drain(self, log: WrapLog, streams: int) -> Optional[BaseException]:
        """
        Move lines into ``log`` until ``streams`` close markers arrive.

        Must be called from the thread that owns ``log``.

        Returns:
            The first reader error, if any reader failed.
        """
        first_error: Optional[BaseException] = None
        open_streams = streams
        while open_streams:
            item = self._queue.get()
            if isinstance(item, _StreamClosed):
                open_streams -= 1
            elif isinstance(item, _StreamFailed):
                logger.debug(f"Reader for {item.source.value} failed: {item.error}")
                if first_error is None:
                    first_error = item.error
            else:
                log.append(item)
        return first_error
