"""Data model: streams, preferences, decisions, tasks and batch results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .base import ConfigError

LOG = logging.getLogger(__name__)


class StreamKind(Enum):
    """Kind of an elementary stream inside the container."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    ATTACHMENT = "attachment"
    UNKNOWN = "unknown"

    @classmethod
    def from_codec_type(cls, codec_type: str | None) -> StreamKind:
        """Map an ffprobe ``codec_type`` onto a stream kind."""
        try:
            return cls((codec_type or "").lower())
        except ValueError:
            return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value.title()


@dataclass(frozen=True)
class StreamDescriptor:
    """Normalized metadata for one track, in the order the probe reported it."""

    index: int
    kind: StreamKind
    codec: str = "unknown"
    language: str | None = None
    title: str | None = None
    is_default: bool = False
    is_forced: bool = False
    size_bytes: int | None = None
    duration_seconds: float | None = None

    # Video
    width: int | None = None
    height: int | None = None
    framerate: float | None = None
    hdr: bool | None = None

    # Audio
    channels: int | None = None
    sample_rate: int | None = None
    bitrate: int | None = None

    # Subtitle
    subtitle_format: str | None = None

    @property
    def resolution(self) -> str | None:
        if self.width is None or self.height is None:
            return None
        return f"{self.width}x{self.height}"

    @property
    def size_mb(self) -> float | None:
        if self.size_bytes is None:
            return None
        return self.size_bytes / (1024 * 1024)


@dataclass(frozen=True)
class SubtitlePreference:
    """A subtitle language to keep, optionally narrowed by a title prefix."""

    language: str
    title_prefix: str | None = None

    @classmethod
    def parse(cls, value: str) -> SubtitlePreference:
        """
        Parse ``"lang"`` or ``"lang, title prefix"``.

        An empty prefix after trimming means no title requirement.

        Raises:
            ConfigError: If the language part is empty.

        """
        language, _, prefix = value.partition(",")
        language = language.strip()
        prefix = prefix.strip()

        if not language:
            msg = (
                f"Language code cannot be empty in preference '{value}'. "
                "Use format 'language' or 'language, title prefix'"
            )
            raise ConfigError(msg)

        return cls(language=language, title_prefix=prefix or None)

    def matches(self, stream: StreamDescriptor) -> bool:
        """Check language equality and, when required, a case-insensitive title prefix."""
        if stream.language is None or stream.language != self.language:
            return False
        if self.title_prefix is None:
            return True
        if stream.title is None:
            return False
        return stream.title.casefold().startswith(self.title_prefix.casefold())

    def __str__(self) -> str:
        if self.title_prefix:
            return f"{self.language}, {self.title_prefix}"
        return self.language


@dataclass(frozen=True)
class RetentionDecision:
    """Which streams survive the remux and which audio/subtitle track becomes default."""

    retained: tuple[int, ...]
    default_audio: int | None = None
    default_subtitle: int | None = None

    def keeps(self, index: int) -> bool:
        return index in self.retained

    def wants_default(self, stream: StreamDescriptor) -> bool:
        """Return the default flag this stream should end up with."""
        if stream.kind is StreamKind.AUDIO:
            return stream.index == self.default_audio
        if stream.kind is StreamKind.SUBTITLE:
            return stream.index == self.default_subtitle
        return stream.is_default


class TransferMode(Enum):
    """How an unchanged file is placed at its destination."""

    MOVE = "Move"
    COPY = "Copy"
    HARD_LINK = "HardLink"
    HARD_LINK_OR_COPY = "HardLinkOrCopy"

    @classmethod
    def parse(cls, value: str | None) -> TransferMode | None:
        """Return the mode for a known string, ``None`` for anything else."""
        if value is None:
            return None
        normalized = value.strip().lower()
        for mode in cls:
            if mode.value.lower() == normalized:
                return mode
        return None


@dataclass(frozen=True)
class TransferContext:
    """Transfer-mode hint handed over by an external pipeline."""

    raw_mode: str | None = None

    @property
    def mode(self) -> TransferMode | None:
        return TransferMode.parse(self.raw_mode)

    @property
    def is_recognized(self) -> bool:
        return self.raw_mode is None or self.mode is not None


@dataclass(frozen=True)
class TransferOutcome:
    """Which transfer method succeeded and the size of the resulting file."""

    method: TransferMode
    destination: Path
    size_bytes: int


@dataclass
class ProcessingTask:
    """Everything needed to process one file, built once after probing."""

    source_file: Path
    target_location: Path
    streams: list[StreamDescriptor]
    output_filename: str | None = None

    def output_path(self) -> Path:
        return self.target_location / (self.output_filename or self.source_file.name)

    @property
    def source_filename(self) -> str:
        return self.source_file.name or str(self.source_file)


@dataclass
class BatchResult:
    """Counters and per-file errors accumulated during a batch run."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: dict[Path, str] = field(default_factory=dict)

    def record_success(self) -> None:
        self.total += 1
        self.successful += 1

    def record_failure(self, file_path: Path, message: str) -> None:
        self.total += 1
        self.failed += 1
        self.errors[file_path] = message

    @property
    def outcome(self) -> str:
        """One of ``empty``, ``success``, ``partial`` or ``failed``."""
        if self.total == 0:
            return "empty"
        if self.failed == 0:
            return "success"
        if self.successful > 0:
            return "partial"
        return "failed"
