"""
Tests for CLI commands.

Tests the command-line interface for mamwrap.
"""

from __future__ import annotations

import json
import logging
import shlex
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mamwrap.cli.main import cli, setup_logging
from mamwrap.config import Config
from mamwrap.constants import LAUNCH_FAILURE_EXIT_CODE
from mamwrap.core.history import WrapHistory
from mamwrap.core.models import ProcessOutcome
from mamwrap.core.platform import Capability


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(test_config: Config, tmp_path: Path) -> Path:
    """Write a config file pointing everything at tmp_path."""
    path = tmp_path / "config.json"
    test_config.save(path)
    return path


class TestCommandCommand:
    """Tests for 'mamwrap command'."""

    def test_prints_tool_invocation(
        self, cli_runner: CliRunner, config_file: Path
    ) -> None:
        """The preview lists every flag in order."""
        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "command", "My App.ipa", "profile.mobileprovision",
                "-o", "out.ipa", "-c", "Contoso Ltd",
            ],
        )

        assert result.exit_code == 0
        assert shlex.split(result.output) == [
            "IntuneMAMPackager",
            "-i", "My App.ipa",
            "-o", "out.ipa",
            "-p", "profile.mobileprovision",
            "-c", "Contoso Ltd",
            "-v",
        ]

    def test_suggests_output(self, cli_runner: CliRunner, config_file: Path) -> None:
        """Without -o the output sits beside the input."""
        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "command", "/apps/MyApp.ipa", "p.mobileprovision",
                "--no-tool-verbose",
            ],
        )

        assert result.exit_code == 0
        args = shlex.split(result.output)
        assert args[args.index("-o") + 1] == str(Path("/apps/MyApp-wrapped.ipa"))
        assert "-v" not in args

    def test_custom_tool(self, cli_runner: CliRunner, config_file: Path) -> None:
        """--tool replaces the bare tool name."""
        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "command", "a.ipa", "p.mobileprovision",
                "--tool", "/opt/wrap/IntuneMAMPackager",
            ],
        )

        assert result.exit_code == 0
        assert shlex.split(result.output)[0] == "/opt/wrap/IntuneMAMPackager"


class TestLocateCommand:
    """Tests for 'mamwrap locate'."""

    def test_json_with_override(
        self, cli_runner: CliRunner, config_file: Path, tmp_path: Path
    ) -> None:
        """An explicit tool path is the only candidate."""
        tool = tmp_path / "IntuneMAMPackager"
        tool.write_text("")

        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "locate", "--tool", str(tool), "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["path"] == str(tool)
        assert data["found"] is True
        assert data["candidates"] == [str(tool)]

    def test_table(self, cli_runner: CliRunner, config_file: Path) -> None:
        """The table shows the resolved path."""
        result = cli_runner.invoke(cli, ["--config", str(config_file), "locate"])

        assert result.exit_code == 0
        assert "Wrapper Tool Locations" in result.output
        assert "Resolved:" in result.output


class TestInstructionsCommand:
    """Tests for 'mamwrap instructions'."""

    def test_shows_download_steps(self, cli_runner: CliRunner) -> None:
        """Instructions name the releases page."""
        with patch("mamwrap.cli.commands.wrap.capability_for") as mock_capability:
            mock_capability.return_value = Capability.CAPABLE
            result = cli_runner.invoke(cli, ["instructions"])

        assert result.exit_code == 0
        assert "Download Instructions" in result.output
        assert "macOS Instructions" in result.output


class TestWrapCommand:
    """Tests for 'mamwrap wrap'."""

    def test_missing_input(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        profile_file: Path,
        tmp_path: Path,
    ) -> None:
        """A nonexistent IPA is a validation error."""
        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "wrap", str(tmp_path / "nope.ipa"), str(profile_file),
            ],
        )

        assert result.exit_code == 1
        assert "Input IPA file does not exist" in result.output

    def test_declined_on_unsupported_platform(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        ipa_file: Path,
        profile_file: Path,
    ) -> None:
        """Answering no at the platform prompt cancels quietly."""
        with patch(
            "mamwrap.core.orchestrator.current_platform", return_value="linux"
        ):
            result = cli_runner.invoke(
                cli,
                ["--config", str(config_file), "wrap", str(ipa_file), str(profile_file)],
                input="n\n",
            )

        assert result.exit_code == 0
        assert "Platform Limitation" in result.output
        assert "Cancelled." in result.output

    def test_tool_missing_shows_command(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        ipa_file: Path,
        profile_file: Path,
        tmp_path: Path,
    ) -> None:
        """On an unsupported host the prepared command is offered."""
        with patch(
            "mamwrap.core.orchestrator.current_platform", return_value="linux"
        ):
            result = cli_runner.invoke(
                cli,
                [
                    "--config", str(config_file),
                    "wrap", str(ipa_file), str(profile_file),
                    "--tool", str(tmp_path / "missing"),
                    "--yes",
                ],
            )

        assert result.exit_code == 1
        assert "Wrapper tool not found" in result.output
        assert "Download Instructions" in result.output
        assert "Prepared Command for macOS" in result.output

    @pytest.mark.skipif(
        sys.platform == "win32",
        reason="fake wrapping tools are POSIX shell scripts",
    )
    def test_successful_wrap(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        test_config: Config,
        ipa_file: Path,
        profile_file: Path,
        output_path: Path,
        fake_tool,
    ) -> None:
        """A zero exit is reported, logged, and recorded in history."""
        output_path.parent.mkdir(parents=True)
        tool = fake_tool(stdout=["Injecting MAM SDK"], output_size=4096)

        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "wrap", str(ipa_file), str(profile_file),
                "-o", str(output_path),
                "--tool", str(tool),
                "--yes", "--save-log",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Injecting MAM SDK" in result.output
        assert "Success" in result.output
        assert output_path.stat().st_size == 4096

        logs = list(test_config.log_dir.glob("wrap-*.log"))
        assert len(logs) == 1
        assert "Injecting MAM SDK" in logs[0].read_text()

        entry = WrapHistory(test_config.history_file).last()
        assert entry.status == "success"
        assert entry.log_file == str(logs[0])

    @pytest.mark.skipif(
        sys.platform == "win32",
        reason="fake wrapping tools are POSIX shell scripts",
    )
    def test_failed_wrap(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        test_config: Config,
        ipa_file: Path,
        profile_file: Path,
        output_path: Path,
        fake_tool,
    ) -> None:
        """A nonzero exit fails the command with its code."""
        tool = fake_tool(stderr=["Invalid profile"], exit_code=2)

        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "wrap", str(ipa_file), str(profile_file),
                "-o", str(output_path),
                "--tool", str(tool),
                "--yes", "--no-verify",
            ],
        )

        assert result.exit_code == 1
        assert "ERROR: Invalid profile" in result.output
        assert "exit code 2" in result.output
        assert WrapHistory(test_config.history_file).last().exit_code == 2


    @pytest.mark.skipif(
        sys.platform == "win32",
        reason="fake wrapping tools are POSIX shell scripts",
    )
    def test_history_failure_keeps_success(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        ipa_file: Path,
        profile_file: Path,
        output_path: Path,
        fake_tool,
    ) -> None:
        """An unwritable history location does not fail a good wrap."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        config_file = tmp_path / "blocked.json"
        Config(
            config_dir=tmp_path / "config",
            log_dir=tmp_path / "logs",
            history_file=blocker / "history.json",
        ).save(config_file)
        output_path.parent.mkdir(parents=True)
        tool = fake_tool(output_size=4096)

        result = cli_runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "wrap", str(ipa_file), str(profile_file),
                "-o", str(output_path),
                "--tool", str(tool),
                "--yes",
            ],
        )

        assert result.exit_code == 0, result.output
        assert output_path.exists()
        assert "Success" in result.output

    def test_launch_error_saved(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        test_config: Config,
        ipa_file: Path,
        profile_file: Path,
        tmp_path: Path,
    ) -> None:
        """A tool that cannot start still leaves a log and a history entry."""
        tool = tmp_path / "IntuneMAMPackager"
        tool.write_text("")

        with patch(
            "mamwrap.core.orchestrator.subprocess.Popen",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            result = cli_runner.invoke(
                cli,
                [
                    "--config", str(config_file),
                    "wrap", str(ipa_file), str(profile_file),
                    "--tool", str(tool),
                    "--yes", "--save-log",
                ],
            )

        assert result.exit_code == 1
        assert "Failed to run wrapper tool" in result.output

        logs = list(test_config.log_dir.glob("wrap-*.log"))
        assert len(logs) == 1
        assert "EXCEPTION: " in logs[0].read_text()

        entry = WrapHistory(test_config.history_file).last()
        assert entry.status == "failure"
        assert entry.exit_code == LAUNCH_FAILURE_EXIT_CODE
        assert entry.log_file == str(logs[0])

class TestHistoryCommand:
    """Tests for 'mamwrap history'."""

    def test_empty(self, cli_runner: CliRunner, config_file: Path) -> None:
        """No runs recorded yet."""
        result = cli_runner.invoke(cli, ["--config", str(config_file), "history"])

        assert result.exit_code == 0
        assert "No wrap runs recorded yet" in result.output

    def test_json_and_clear(
        self,
        cli_runner: CliRunner,
        config_file: Path,
        test_config: Config,
        wrap_request,
    ) -> None:
        """Recorded runs are listed, then cleared."""
        WrapHistory(test_config.history_file).record(
            wrap_request, ProcessOutcome(exit_code=0)
        )

        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "history", "--json"]
        )
        assert result.exit_code == 0
        entries = json.loads(result.output)
        assert entries[0]["input_path"] == wrap_request.input_path

        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "history", "--clear", "--yes"]
        )
        assert result.exit_code == 0
        assert "Wrap history cleared" in result.output
        assert WrapHistory(test_config.history_file).recent() == []

    def test_clear_declined(
        self, cli_runner: CliRunner, config_file: Path
    ) -> None:
        """Declining the prompt leaves history alone."""
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "history", "--clear"], input="n\n"
        )

        assert result.exit_code == 0
        assert "Cancelled." in result.output

    def test_limit_must_be_positive(
        self, cli_runner: CliRunner, config_file: Path
    ) -> None:
        """Zero or negative limits are rejected."""
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "history", "-n", "-1"]
        )

        assert result.exit_code == 2
        assert "Invalid value" in result.output


class TestLogging:
    """Tests for logging setup."""

    @pytest.mark.parametrize(
        "verbose, debug, log_level, expected",
        [
            (False, False, "ERROR", logging.ERROR),
            (False, False, "bogus", logging.WARNING),
            (True, False, "ERROR", logging.INFO),
            (False, True, "ERROR", logging.DEBUG),
        ],
    )
    def test_level(
        self, verbose: bool, debug: bool, log_level: str, expected: int
    ) -> None:
        """Flags win over the configured level."""
        with patch("mamwrap.cli.main.logging.basicConfig") as mock_basic:
            setup_logging(verbose, debug, log_level)

        assert mock_basic.call_args.kwargs["level"] == expected

    def test_configured_level_used(
        self, cli_runner: CliRunner, test_config: Config, tmp_path: Path
    ) -> None:
        """The config file's log_level reaches logging setup."""
        config_file = tmp_path / "config.json"
        test_config.log_level = "ERROR"
        test_config.save(config_file)

        with patch("mamwrap.cli.main.setup_logging") as mock_setup:
            result = cli_runner.invoke(cli, ["--config", str(config_file), "history"])

        assert result.exit_code == 0
        mock_setup.assert_called_once_with(False, False, "ERROR")
