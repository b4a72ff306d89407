"""Shared fixtures for mkv-slimmer tests."""

from pathlib import Path

import pytest

from mkv_slimmer.core.models import StreamDescriptor, StreamKind
from mkv_slimmer.core.probe import FFprobe

EBML_HEADER = b"\x1a\x45\xdf\xa3"


@pytest.fixture(autouse=True)
def clear_probe_cache():
    """Probe results are cached per process; keep tests independent."""
    FFprobe.clear_cache()
    yield
    FFprobe.clear_cache()


@pytest.fixture
def make_mkv():
    """Create a file that starts with the EBML header."""

    def _make(path: Path, payload: bytes = b"dummy matroska content" * 100) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(EBML_HEADER + payload)
        return path

    return _make


@pytest.fixture
def sample_streams():
    """Video, English and Japanese audio, English 'Full' subtitles."""
    return [
        StreamDescriptor(index=0, kind=StreamKind.VIDEO, codec="hevc"),
        StreamDescriptor(index=1, kind=StreamKind.AUDIO, codec="aac", language="eng", is_default=True),
        StreamDescriptor(index=2, kind=StreamKind.AUDIO, codec="aac", language="jpn"),
        StreamDescriptor(index=3, kind=StreamKind.SUBTITLE, codec="ass", language="eng", title="Full"),
    ]
