"""Per-file stream tables with keep/remove status."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from ..config.constants import ATTACHMENT_PREVIEW_COUNT, ATTACHMENT_SUMMARY_THRESHOLD, MAX_TITLE_LENGTH
from ..core.models import StreamKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..core.models import RetentionDecision, StreamDescriptor

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

ATTACHMENT_TYPES = {
    "ttf": "TrueType Font",
    "otf": "OpenType Font",
    "woff": "Web Font",
    "woff2": "Web Font",
    "jpg": "JPEG Image",
    "jpeg": "JPEG Image",
    "png": "PNG Image",
    "gif": "GIF Image",
    "webp": "WebP Image",
    "pdf": "PDF Document",
    "txt": "Text File",
}

SECTION_TITLES = {
    StreamKind.VIDEO: "🎬 Video Streams:",
    StreamKind.AUDIO: "🎵 Audio Streams:",
    StreamKind.SUBTITLE: "📄 Subtitle Streams:",
    StreamKind.ATTACHMENT: "📎 Attachments:",
    StreamKind.UNKNOWN: "❓ Unknown Streams:",
}


def format_size(size_bytes: int) -> str:
    """Format a byte count like ``1.5 GB``."""
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {SIZE_UNITS[unit]}"


def attachment_type(codec: str) -> str:
    if codec == "unknown":
        return "Unknown File"
    return ATTACHMENT_TYPES.get(codec.lower(), codec.upper())


def stream_status(stream: StreamDescriptor, decision: RetentionDecision) -> str:
    """Return ``KEEP``, ``KEEP (default)`` or ``REMOVE``."""
    if not decision.keeps(stream.index):
        return "REMOVE"
    if stream.kind in (StreamKind.AUDIO, StreamKind.SUBTITLE) and decision.wants_default(stream):
        return "KEEP (default)"
    return "KEEP"


def _size(stream: StreamDescriptor) -> str:
    return f"{stream.size_mb:.1f} MB" if stream.size_mb is not None else "?"


def _yes_no(flag: bool | None) -> str:
    return "Yes" if flag else "No"


def _truncate(text: str, limit: int = MAX_TITLE_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _row(stream: StreamDescriptor, decision: RetentionDecision) -> list[str]:
    status = stream_status(stream, decision)
    if stream.kind is StreamKind.VIDEO:
        fps = f"{stream.framerate:.2f}" if stream.framerate is not None else "?"
        return [str(stream.index), stream.codec, stream.resolution or "?", fps, _yes_no(stream.hdr), _size(stream), status]
    if stream.kind is StreamKind.AUDIO:
        channels = str(stream.channels) if stream.channels is not None else "?"
        rate = f"{stream.sample_rate} Hz" if stream.sample_rate is not None else "?"
        return [
            str(stream.index),
            stream.codec,
            stream.language or "none",
            channels,
            rate,
            _size(stream),
            _yes_no(stream.is_default),
            status,
        ]
    if stream.kind is StreamKind.SUBTITLE:
        return [
            str(stream.index),
            stream.subtitle_format or stream.codec,
            stream.language or "none",
            _truncate(stream.title or ""),
            _yes_no(stream.is_default),
            _yes_no(stream.is_forced),
            status,
        ]
    if stream.kind is StreamKind.ATTACHMENT:
        return [str(stream.index), attachment_type(stream.codec), _truncate(stream.title or ""), _size(stream)]
    return [str(stream.index), stream.codec, status]


HEADERS = {
    StreamKind.VIDEO: ["#", "Codec", "Resolution", "FPS", "HDR", "Size", "Status"],
    StreamKind.AUDIO: ["#", "Codec", "Language", "Channels", "Sample Rate", "Size", "Default", "Status"],
    StreamKind.SUBTITLE: ["#", "Format", "Language", "Title", "Default", "Forced", "Status"],
    StreamKind.ATTACHMENT: ["#", "Type", "Title", "Size"],
    StreamKind.UNKNOWN: ["#", "Codec", "Status"],
}


def _print_table(headers: list[str], rows: list[list[str]]) -> None:
    widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(headers)]
    print(" | ".join(header.ljust(width) for header, width in zip(headers, widths)))
    print("-+-".join("-" * width for width in widths))
    for row in rows:
        print(" | ".join(cell.ljust(width) for cell, width in zip(row, widths)))


def _print_attachments(streams: list[StreamDescriptor], decision: RetentionDecision) -> None:
    counts = Counter(attachment_type(stream.codec) for stream in streams)
    if len(streams) > ATTACHMENT_SUMMARY_THRESHOLD and len(counts) < len(streams):
        print("Attachment Summary:")
        for kind, count in counts.items():
            print(f"  {kind} files: {count}")
        print("\nFirst few attachments:")
        preview = streams[:ATTACHMENT_PREVIEW_COUNT]
        _print_table(HEADERS[StreamKind.ATTACHMENT], [_row(stream, decision) for stream in preview])
        print(f"... and {len(streams) - len(preview)} more attachments")
        return
    _print_table(HEADERS[StreamKind.ATTACHMENT], [_row(stream, decision) for stream in streams])


def print_stream_table(streams: Sequence[StreamDescriptor], decision: RetentionDecision) -> None:
    """Print one table per stream kind followed by a size summary."""
    for kind, title in SECTION_TITLES.items():
        of_kind = [stream for stream in streams if stream.kind is kind]
        if not of_kind:
            continue
        print(f"\n{title}")
        if kind is StreamKind.ATTACHMENT:
            _print_attachments(of_kind, decision)
        else:
            _print_table(HEADERS[kind], [_row(stream, decision) for stream in of_kind])

    print("\n📊 Summary:")
    total_size = sum(stream.size_bytes or 0 for stream in streams)
    keep_size = sum(stream.size_bytes or 0 for stream in streams if decision.keeps(stream.index))
    remove_count = len(streams) - len(decision.retained)

    if total_size > 0:
        savings = total_size - keep_size
        print(f"Original size: {format_size(total_size)}")
        print(f"After processing: {format_size(keep_size)}")
        print(f"Space savings: {format_size(savings)} ({savings / total_size * 100:.1f}%)")
        print(f"Streams to remove: {remove_count}")
    else:
        print("Unable to calculate size information")
