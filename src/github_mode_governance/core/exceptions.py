from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class GovernanceError(Exception):
    """Base error for governance checks."""


class ConfigError(GovernanceError):
    """Raised when github-mode-governance configuration is invalid."""


class ContractReadError(GovernanceError):
    """A policy contract document could not be read or parsed.

    The decision engine converts this into a FAIL decision; it never reaches
    the CLI on its own.
    """

    def __init__(self, path: Union[str, Path], detail: str) -> None:
        super().__init__(detail)
        self.path = str(path)
        self.detail = detail


class ScoreboardError(GovernanceError):
    """Scoreboard file could not be loaded."""


class ScoreboardValidationError(ScoreboardError):
    """Scoreboard content violates a structural invariant."""


class SpecTrackingError(GovernanceError):
    """Added spec artifacts are not paired with a scoreboard update."""

    def __init__(self, message: str, *, artifacts: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.artifacts = list(artifacts or [])


class GitError(GovernanceError):
    """Raised when a git command cannot be run."""

    def __init__(self, message: str, *, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class CliUsageError(GovernanceError):
    """Invalid combination of command-line options."""


__all__ = [
    "CliUsageError",
    "ConfigError",
    "ContractReadError",
    "GitError",
    "GovernanceError",
    "ScoreboardError",
    "ScoreboardValidationError",
    "SpecTrackingError",
]
