"""Base result types and the error hierarchy shared by all stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)


class ProcessingStatus(Enum):
    """Status of a processing operation."""

    SUCCESS = "success"


class ProcessingAction(Enum):
    """What actually happened to a file."""

    MERGED = "merged"
    TRANSFERRED = "transferred"
    DRY_RUN = "dry_run"


@dataclass
class ProcessingResult:
    """Result of processing a single file."""

    source_file: Path
    status: ProcessingStatus
    action: ProcessingAction | None = None
    message: str = ""
    output_file: Path | None = None
    original_size: int | None = None
    new_size: int | None = None
    transfer_method: str | None = None
    command: list[str] | None = None
    processing_time: float = 0.0


class SlimmerError(Exception):
    """Base exception for everything that can go wrong while slimming a file."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.cause = cause


class ValidationError(SlimmerError):
    """Bad input file, bad preference or unsafe source/target layout."""


class ConfigError(ValidationError):
    """Configuration could not be loaded or contains an invalid value."""


class DependencyError(SlimmerError):
    """A required external tool is not installed."""


class ProbeError(SlimmerError):
    """ffprobe is missing or produced unusable output."""


class TransferError(SlimmerError):
    """A move, copy or hard link failed."""


class MergeExecutionError(SlimmerError):
    """mkvmerge exited with a failure status."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
        file_path: Path | None = None,
    ) -> None:
        """Initialize merge error with detailed context."""
        super().__init__(message, file_path=file_path)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


_SUGGESTIONS = (
    (("permission denied",), "Try running with appropriate permissions or check file ownership"),
    (("no space left",), "Free up disk space or choose a different target directory"),
    (("not found", "no such file"), "Check that the file path is correct and the file exists"),
    (("mkvmerge",), "Make sure MKVToolNix is installed and mkvmerge is in your PATH"),
    (("ffprobe",), "Install ffmpeg to get detailed stream information"),
)


def suggest_solution(message: str) -> str | None:
    """Return a hint for well-known failure messages, if there is one."""
    lowered = message.lower()
    for needles, suggestion in _SUGGESTIONS:
        if any(needle in lowered for needle in needles):
            return suggestion
    return None
