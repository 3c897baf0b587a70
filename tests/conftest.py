"""
Pytest configuration and fixtures for mamwrap tests.

This module provides common fixtures used across the test suite,
including sample input files, configs, and fake wrapping tools.
"""

from __future__ import annotations

import json
import sys
import textwrap
from pathlib import Path
from typing import Callable, Sequence

import pytest

from mamwrap.config import Config
from mamwrap.core.models import WrapRequest


IPA_BYTES = b"PK\x03\x04" + b"\x00" * 1020
PROFILE_BYTES = b"<?xml version=\"1.0\"?><plist></plist>"


@pytest.fixture
def ipa_file(tmp_path: Path) -> Path:
    """Create a small input IPA."""
    path = tmp_path / "My App.ipa"
    path.write_bytes(IPA_BYTES)
    return path


@pytest.fixture
def profile_file(tmp_path: Path) -> Path:
    """Create a provisioning profile."""
    path = tmp_path / "profile.mobileprovision"
    path.write_bytes(PROFILE_BYTES)
    return path


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    """Output location for a wrapped IPA (not created)."""
    return tmp_path / "out" / "My App-wrapped.ipa"


@pytest.fixture
def wrap_request(ipa_file: Path, profile_file: Path, output_path: Path) -> WrapRequest:
    """A valid request with verification turned off."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return WrapRequest.create(
        input_path=ipa_file,
        output_path=output_path,
        profile_path=profile_file,
        verbose=True,
        verify_after_wrap=False,
    )


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with temporary directories."""
    return Config(
        config_dir=tmp_path / "config",
        log_dir=tmp_path / "logs",
        history_file=tmp_path / "config" / "history.json",
    )


FakeToolFactory = Callable[..., Path]


@pytest.fixture
def fake_tool(tmp_path: Path) -> FakeToolFactory:
    """
    Factory for a fake IntuneMAMPackager.

    The fake records its arguments to ``argv.json`` beside itself, prints
    the given lines, optionally writes ``output_size`` bytes to the path
    after ``-o``, and exits with ``exit_code``.
    """

    def make(
        stdout: Sequence[str] = (),
        stderr: Sequence[str] = (),
        exit_code: int = 0,
        output_size: int | None = None,
        name: str = "IntuneMAMPackager",
    ) -> Path:
        tool_dir = tmp_path / "tool"
        tool_dir.mkdir(exist_ok=True)
        script = tool_dir / "fake_packager.py"
        script.write_text(
            textwrap.dedent(
                f"""
                import json
                import sys

                args = sys.argv[1:]
                with open({str(tool_dir / "argv.json")!r}, "w") as f:
                    json.dump(args, f)

                for line in {list(stdout)!r}:
                    print(line, flush=True)
                for line in {list(stderr)!r}:
                    print(line, file=sys.stderr, flush=True)

                size = {output_size!r}
                if size is not None and "-o" in args:
                    with open(args[args.index("-o") + 1], "wb") as f:
                        f.write(b"\\0" * size)

                sys.exit({exit_code!r})
                """
            )
        )
        tool = tool_dir / name
        tool.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
        tool.chmod(0o755)
        return tool

    return make


def recorded_argv(tool: Path) -> list[str]:
    """Arguments the fake tool was last called with."""
    return json.loads((tool.parent / "argv.json").read_text())


@pytest.fixture
def tool_argv() -> Callable[[Path], list[str]]:
    """Read back the arguments a fake tool was called with."""
    return recorded_argv
