"""Tests for wrap history."""

from __future__ import annotations

import json
from pathlib import Path

from mamwrap.constants import MAX_HISTORY_ITEMS
from mamwrap.core.history import HistoryEntry, WrapHistory
from mamwrap.core.models import ProcessOutcome, VerificationResult, WrapRequest


def make_request(tmp_path: Path, name: str = "App") -> WrapRequest:
    return WrapRequest.create(
        tmp_path / f"{name}.ipa",
        tmp_path / f"{name}-wrapped.ipa",
        tmp_path / "profile.mobileprovision",
        signing_identity="Contoso",
    )


class TestWrapHistory:
    """Tests for WrapHistory."""

    def test_empty_without_file(self, tmp_path: Path) -> None:
        """A missing history file means no entries."""
        history = WrapHistory(tmp_path / "history.json")

        assert history.recent() == []
        assert history.last() is None

    def test_record_persists(self, tmp_path: Path) -> None:
        """Recorded runs are written and reloaded."""
        history_file = tmp_path / "history.json"
        outcome = ProcessOutcome(
            exit_code=0,
            verification=VerificationResult(True, 10, 20, size_increased=True),
        )

        WrapHistory(history_file).record(
            make_request(tmp_path), outcome, tmp_path / "wrap.log"
        )

        entry = WrapHistory(history_file).last()
        assert entry is not None
        assert entry.status == "success"
        assert entry.exit_code == 0
        assert entry.signing_identity == "Contoso"
        assert entry.size_increased is True
        assert entry.log_file == str(tmp_path / "wrap.log")

    def test_failure_recorded(self, tmp_path: Path) -> None:
        """Failed runs keep their exit code and have no verification."""
        history = WrapHistory(tmp_path / "history.json")

        entry = history.record(make_request(tmp_path), ProcessOutcome(exit_code=3))

        assert entry.status == "failure"
        assert entry.exit_code == 3
        assert entry.size_increased is None

    def test_newest_first_and_capped(self, tmp_path: Path) -> None:
        """Only the most recent runs are kept."""
        history = WrapHistory(tmp_path / "history.json")

        for i in range(MAX_HISTORY_ITEMS + 3):
            history.record(make_request(tmp_path, f"App{i}"), ProcessOutcome(0))

        entries = history.recent()
        assert len(entries) == MAX_HISTORY_ITEMS
        assert entries[0].input_path.endswith(f"App{MAX_HISTORY_ITEMS + 2}.ipa")
        assert history.recent(2) == entries[:2]

    def test_clear(self, tmp_path: Path) -> None:
        """Clearing empties the file too."""
        history_file = tmp_path / "history.json"
        history = WrapHistory(history_file)
        history.record(make_request(tmp_path), ProcessOutcome(0))

        history.clear()

        assert WrapHistory(history_file).recent() == []
        assert json.loads(history_file.read_text())["entries"] == []

    def test_corrupt_file_ignored(self, tmp_path: Path, caplog) -> None:
        """Bad JSON starts a fresh history with a warning."""
        history_file = tmp_path / "history.json"
        history_file.write_text("{not json")

        history = WrapHistory(history_file)

        assert history.recent() == []
        assert "Failed to load history" in caplog.text

    def test_blocked_location_does_not_raise(self, tmp_path: Path, caplog) -> None:
        """A history path under a regular file only warns."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        history = WrapHistory(blocker / "history.json")

        entry = history.record(make_request(tmp_path), ProcessOutcome(0))

        assert entry.status == "success"
        assert history.recent() == [entry]
        assert "Failed to save history" in caplog.text

    def test_unreadable_file_ignored(self, tmp_path: Path, caplog) -> None:
        """A history path that cannot be opened starts fresh."""
        history_dir = tmp_path / "history.json"
        history_dir.mkdir()

        history = WrapHistory(history_dir)

        assert history.recent() == []
        assert "Failed to load history" in caplog.text


class TestHistoryEntry:
    """Tests for HistoryEntry."""

    def test_round_trip(self) -> None:
        """Entries survive dict conversion."""
        entry = HistoryEntry(
            input_path="/a.ipa",
            output_path="/b.ipa",
            profile_path="/p.mobileprovision",
            exit_code=0,
            status="success",
            created_at="2026-01-01T10:00:00",
        )

        assert HistoryEntry.from_dict(entry.to_dict()) == entry

    def test_output_exists(self, tmp_path: Path) -> None:
        """output_exists reflects the disk."""
        output = tmp_path / "b.ipa"
        entry = HistoryEntry.from_dict({"output_path": str(output)})

        assert not entry.output_exists()
        output.write_bytes(b"x")
        assert entry.output_exists()
