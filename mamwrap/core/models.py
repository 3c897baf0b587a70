"""
Data models for app wrapping.

This module defines the request, log, progress and outcome structures
passed between the orchestrator and the front-end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from mamwrap.constants import (
    DEFAULT_OUTPUT_NAME,
    IPA_EXTENSION,
    STDERR_PREFIX,
    WRAPPED_SUFFIX,
)
from mamwrap.exceptions import ProcessFailureError


@dataclass(frozen=True)
class WrapRequest:
    """
    Parameters for a single wrap run.

    Paths are kept as entered so that blank input can be told apart
    from the current directory during validation.

    Attributes:
        input_path: Application archive (.ipa) to wrap
        output_path: Where the wrapped archive is written
        profile_path: Provisioning profile (.mobileprovision)
        signing_identity: Certificate used to re-sign, if any
        verbose: Pass the tool's verbose flag
        verify_after_wrap: Run the post-wrap size check
    """

    input_path: str
    output_path: str
    profile_path: str
    signing_identity: Optional[str] = None
    verbose: bool = True
    verify_after_wrap: bool = True

    @classmethod
    def create(
        cls,
        input_path: Union[str, Path, None],
        output_path: Union[str, Path, None],
        profile_path: Union[str, Path, None],
        signing_identity: Optional[str] = None,
        verbose: bool = True,
        verify_after_wrap: bool = True,
    ) -> WrapRequest:
        """Build a request from raw user input, trimming whitespace."""
        identity = (signing_identity or "").strip()
        return cls(
            input_path=_clean(input_path),
            output_path=_clean(output_path),
            profile_path=_clean(profile_path),
            signing_identity=identity or None,
            verbose=verbose,
            verify_after_wrap=verify_after_wrap,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "input_path": self.input_path,
            "output_path": self.output_path,
            "profile_path": self.profile_path,
            "signing_identity": self.signing_identity,
            "verbose": self.verbose,
            "verify_after_wrap": self.verify_after_wrap,
        }


def _clean(value: Union[str, Path, None]) -> str:
    if value is None:
        return ""
    return str(value).strip()


def suggest_output_path(input_path: Union[str, Path, None]) -> Path:
    """
    Suggest an output path for a wrapped archive.

    ``/apps/MyApp.ipa`` becomes ``/apps/MyApp-wrapped.ipa``. Without an
    input the suggestion is ``wrapped-app.ipa`` in the home directory.
    """
    if not input_path or not str(input_path).strip():
        return Path.home() / DEFAULT_OUTPUT_NAME
    source = Path(str(input_path).strip())
    return source.with_name(f"{source.stem}{WRAPPED_SUFFIX}{IPA_EXTENSION}")


class LogSource(Enum):
    """Where a log line came from."""

    ORCHESTRATOR = "orchestrator"
    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True)
class LogEntry:
    """A single line in the wrap log."""

    text: str
    source: LogSource = LogSource.ORCHESTRATOR

    def render(self) -> str:
        """Render the line as shown in the log view."""
        if self.source is LogSource.STDERR:
            return f"{STDERR_PREFIX}{self.text}"
        return self.text


@dataclass(frozen=True)
class WrapProgress:
    """Advisory progress update for the front-end."""

    message: str
    fraction: float


class OutcomeStatus(Enum):
    """Classification of a finished wrap."""

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def from_exit_code(cls, exit_code: int) -> OutcomeStatus:
        """Exit code zero is the only success."""
        return cls.SUCCESS if exit_code == 0 else cls.FAILURE


@dataclass(frozen=True)
class VerificationResult:
    """
    Result of the post-wrap check.

    ``size_increased`` is a heuristic only: the wrapped archive is usually
    larger than the original, but a larger file does not prove the
    wrapper was applied, and a smaller one does not prove it wasn't.
    """

    artifact_present: bool
    original_size: Optional[int] = None
    produced_size: Optional[int] = None
    size_increased: bool = False
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        """Check if the output exists and nothing went wrong reading it."""
        return self.artifact_present and self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "artifact_present": self.artifact_present,
            "original_size": self.original_size,
            "produced_size": self.produced_size,
            "size_increased": self.size_increased,
            "error": self.error,
        }


@dataclass(frozen=True)
class ProcessOutcome:
    """
    Result of a completed tool run.

    Attributes:
        exit_code: Exit status of the tool
        log: Rendered log lines in the order they were received
        status: SUCCESS when exit_code is 0, FAILURE otherwise
        verification: Post-wrap check, when requested
    """

    exit_code: int
    log: tuple[str, ...] = field(default_factory=tuple)
    status: Optional[OutcomeStatus] = None
    verification: Optional[VerificationResult] = None

    def __post_init__(self) -> None:
        if self.status is None:
            object.__setattr__(
                self, "status", OutcomeStatus.from_exit_code(self.exit_code)
            )

    @property
    def succeeded(self) -> bool:
        """Check if the wrap succeeded."""
        return self.status is OutcomeStatus.SUCCESS

    def raise_for_status(self) -> None:
        """Raise ProcessFailureError if the tool exited nonzero."""
        if not self.succeeded:
            raise ProcessFailureError(self.exit_code, self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "exit_code": self.exit_code,
            "status": self.status.value,
            "log": list(self.log),
            "verification": (
                self.verification.to_dict() if self.verification else None
            ),
        }
