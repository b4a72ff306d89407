"""ffprobe integration and stream normalization."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import TYPE_CHECKING, Any, ClassVar

from ..config.constants import FFPROBE_COMMAND, FFPROBE_TIMEOUT_SECONDS
from .base import ProbeError
from .models import StreamDescriptor, StreamKind

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)

HDR_COLORSPACE_MARKER = "bt2020"
DURATION_TAG_PARTS = 3


def _parse_frame_rate(frame_rate_str: str | None) -> float | None:
    """Parse a frame rate like '24000/1001' or '29.97'; None when unusable."""
    if not frame_rate_str:
        return None
    try:
        if "/" in frame_rate_str:
            numerator, denominator = frame_rate_str.split("/", 1)
            return float(numerator) / float(denominator) if float(denominator) != 0 else None
        return float(frame_rate_str)
    except ValueError:
        return None


def _parse_duration_tag(value: str | None) -> float | None:
    """Parse a Matroska ``DURATION`` tag of the form ``HH:MM:SS.fraction``."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) != DURATION_TAG_PARTS:
        return None
    try:
        hours, minutes, seconds = int(parts[0]), int(parts[1]), float(parts[2])
    except ValueError:
        return None
    return hours * 3600 + minutes * 60 + seconds


def _to_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None


def _to_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _tag(tags: dict[str, Any], name: str) -> str | None:
    """
    Look up a tag case-insensitively.

    mkvmerge writes statistics tags with a language suffix (``DURATION-eng``),
    so those are accepted as a fallback.
    """
    wanted = name.lower()
    suffixed = None
    for key, value in tags.items():
        lowered = key.lower()
        if lowered == wanted:
            return str(value)
        if suffixed is None and lowered.startswith(f"{wanted}-"):
            suffixed = str(value)
    return suffixed


def stream_from_probe(index: int, stream: dict[str, Any]) -> StreamDescriptor:
    """Build a descriptor from one entry of ffprobe's ``streams`` array."""
    kind = StreamKind.from_codec_type(stream.get("codec_type"))
    tags = stream.get("tags") or {}
    disposition = stream.get("disposition") or {}
    codec = stream.get("codec_name") or stream.get("codec_long_name") or "unknown"

    bitrate = _to_int(stream.get("bit_rate"))
    if bitrate is None:
        bitrate = _to_int(_tag(tags, "BPS"))

    duration = _parse_duration_tag(_tag(tags, "DURATION"))
    if duration is None:
        duration = _to_float(stream.get("duration"))

    size_bytes = _to_int(_tag(tags, "NUMBER_OF_BYTES"))
    if size_bytes is None and bitrate is not None and duration is not None:
        size_bytes = int(bitrate * duration / 8)

    fields: dict[str, Any] = {}
    if kind is StreamKind.VIDEO:
        color_space = stream.get("color_space") or ""
        fields.update(
            width=_to_int(stream.get("width")),
            height=_to_int(stream.get("height")),
            framerate=_parse_frame_rate(stream.get("r_frame_rate")),
            hdr=HDR_COLORSPACE_MARKER in color_space.lower(),
        )
    elif kind is StreamKind.AUDIO:
        fields.update(
            channels=_to_int(stream.get("channels")),
            sample_rate=_to_int(stream.get("sample_rate")),
        )
    elif kind is StreamKind.SUBTITLE:
        fields["subtitle_format"] = codec

    return StreamDescriptor(
        index=index,
        kind=kind,
        codec=codec,
        language=_tag(tags, "language") or None,
        title=_tag(tags, "title") or None,
        is_default=_to_int(disposition.get("default")) == 1,
        is_forced=_to_int(disposition.get("forced")) == 1,
        size_bytes=size_bytes,
        duration_seconds=duration,
        bitrate=bitrate,
        **fields,
    )


def parse_streams(probe_data: dict[str, Any]) -> list[StreamDescriptor]:
    """Normalize ffprobe JSON into descriptors, indexed in reported order."""
    return [stream_from_probe(index, stream) for index, stream in enumerate(probe_data.get("streams") or [])]


class FFprobe:
    """ffprobe wrapper with a per-process cache keyed on path and mtime."""

    _probe_cache: ClassVar[dict[tuple[Path, float], dict[str, Any]]] = {}

    @staticmethod
    def is_available() -> bool:
        return shutil.which(FFPROBE_COMMAND) is not None

    @classmethod
    def clear_cache(cls) -> None:
        cls._probe_cache.clear()

    @classmethod
    def probe(cls, file_path: Path) -> dict[str, Any]:
        """Run ffprobe on a file and return its parsed JSON output."""
        try:
            cache_key = (file_path, file_path.stat().st_mtime)
        except OSError:
            cache_key = None
        if cache_key is not None and cache_key in cls._probe_cache:
            return cls._probe_cache[cache_key]

        if not cls.is_available():
            msg = "ffprobe not available, using limited stream information"
            raise ProbeError(msg, file_path=file_path)

        cmd = [
            FFPROBE_COMMAND,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(file_path),
        ]

        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=FFPROBE_TIMEOUT_SECONDS,
                encoding="utf-8",
                errors="replace",
            )
            probe_data = json.loads(result.stdout)
        except subprocess.CalledProcessError as e:
            error_details = e.stderr or e.stdout or "No error output"
            msg = f"ffprobe failed for {file_path}: {error_details.strip()}"
            raise ProbeError(msg, file_path=file_path, cause=e) from e
        except subprocess.TimeoutExpired as e:
            msg = f"ffprobe timed out for {file_path}"
            raise ProbeError(msg, file_path=file_path, cause=e) from e
        except json.JSONDecodeError as e:
            msg = f"Could not parse ffprobe output for {file_path}: {e}"
            raise ProbeError(msg, file_path=file_path, cause=e) from e

        if not isinstance(probe_data, dict):
            msg = f"Unexpected ffprobe output for {file_path}"
            raise ProbeError(msg, file_path=file_path)

        if cache_key is not None:
            cls._probe_cache[cache_key] = probe_data
        return probe_data


def analyze_streams(file_path: Path) -> list[StreamDescriptor]:
    """
    Probe a file and normalize its streams.

    Never fails: without usable ffprobe output the file is described by a
    single unknown stream, which the retention policy always keeps.
    """
    try:
        streams = parse_streams(FFprobe.probe(file_path))
    except ProbeError as e:
        LOG.warning("%s", e)
        streams = []

    if not streams:
        LOG.warning("No stream information available for %s, using fallback", file_path)
        return [StreamDescriptor(index=0, kind=StreamKind.UNKNOWN)]
    return streams
