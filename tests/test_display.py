"""Tests for stream tables and the batch summary."""

from pathlib import Path

import pytest

from mkv_slimmer.cli.failure_table import print_batch_summary
from mkv_slimmer.cli.stream_table import attachment_type, format_size, print_stream_table, stream_status
from mkv_slimmer.core.models import BatchResult, StreamDescriptor, StreamKind, SubtitlePreference
from mkv_slimmer.core.retention import select


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0.0 B"), (1536, "1.5 KB"), (5 * 1024**3, "5.0 GB")],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


def test_attachment_type():
    assert attachment_type("ttf") == "TrueType Font"
    assert attachment_type("unknown") == "Unknown File"
    assert attachment_type("xyz") == "XYZ"


def test_stream_status(sample_streams):
    decision = select(sample_streams, ["eng"], [SubtitlePreference("eng", "Full")])

    assert [stream_status(stream, decision) for stream in sample_streams] == [
        "KEEP",
        "KEEP (default)",
        "REMOVE",
        "KEEP (default)",
    ]


def test_stream_table_with_sizes(capsys):
    streams = [
        StreamDescriptor(index=0, kind=StreamKind.VIDEO, codec="hevc", width=1920, height=1080, size_bytes=3 * 1024**2),
        StreamDescriptor(index=1, kind=StreamKind.AUDIO, codec="aac", language="eng", size_bytes=1024**2),
        StreamDescriptor(index=2, kind=StreamKind.AUDIO, codec="aac", language="ger", size_bytes=1024**2),
    ]
    decision = select(streams, ["eng"], [])

    print_stream_table(streams, decision)

    out = capsys.readouterr().out
    assert "Video Streams" in out
    assert "1920x1080" in out
    assert "Original size: 5.0 MB" in out
    assert "After processing: 4.0 MB" in out
    assert "(20.0%)" in out
    assert "Streams to remove: 1" in out


def test_stream_table_without_sizes(capsys):
    streams = [StreamDescriptor(index=0, kind=StreamKind.UNKNOWN)]

    print_stream_table(streams, select(streams, [], []))

    out = capsys.readouterr().out
    assert "Unknown Streams" in out
    assert "Unable to calculate size information" in out


def test_many_attachments_are_summarized(capsys):
    streams = [StreamDescriptor(index=i, kind=StreamKind.ATTACHMENT, codec="ttf") for i in range(12)]

    print_stream_table(streams, select(streams, [], []))

    out = capsys.readouterr().out
    assert "TrueType Font files: 12" in out
    assert "... and 7 more attachments" in out


def test_batch_summary_lists_failures(capsys):
    result = BatchResult()
    result.record_success()
    result.record_failure(Path("/library/broken.mkv"), "Invalid MKV file format (missing EBML header)")

    print_batch_summary(result)

    out = capsys.readouterr().out
    assert "Total files: 2" in out
    assert "broken.mkv" in out
    assert "Batch completed with some failures" in out
