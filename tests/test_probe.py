"""Tests for ffprobe integration and stream normalization."""

import json
import subprocess
from unittest.mock import Mock, patch

import pytest

from mkv_slimmer.core.base import ProbeError
from mkv_slimmer.core.models import StreamKind
from mkv_slimmer.core.probe import FFprobe, analyze_streams, parse_streams

PROBE_OUTPUT = {
    "streams": [
        {
            "index": 0,
            "codec_name": "hevc",
            "codec_type": "video",
            "width": 3840,
            "height": 2160,
            "r_frame_rate": "24000/1001",
            "color_space": "bt2020nc",
            "disposition": {"default": 1, "forced": 0},
            "tags": {"DURATION": "00:01:40.000000000", "NUMBER_OF_BYTES": "500000000"},
        },
        {
            "index": 1,
            "codec_name": "eac3",
            "codec_type": "audio",
            "channels": 6,
            "sample_rate": "48000",
            "bit_rate": "8000",
            "duration": "50.0",
            "disposition": {"default": 1, "forced": 0},
            "tags": {"language": "eng", "DURATION-eng": "00:01:40.000000000"},
        },
        {
            "index": 2,
            "codec_name": "aac",
            "codec_type": "audio",
            "disposition": {"default": 0},
            "tags": {"LANGUAGE": "jpn", "BPS": "16000", "title": ""},
            "duration": "10",
        },
        {
            "index": 3,
            "codec_name": "ass",
            "codec_type": "subtitle",
            "disposition": {"default": 0, "forced": 1},
            "tags": {"language": "eng", "title": "Signs & Songs"},
        },
        {
            "index": 4,
            "codec_type": "attachment",
            "codec_long_name": "TrueType font",
            "tags": {"filename": "font.ttf", "mimetype": "font/ttf"},
        },
        {"index": 5, "codec_type": "data"},
    ]
}


@pytest.fixture
def streams():
    return parse_streams(PROBE_OUTPUT)


class TestParseStreams:
    def test_kinds_follow_codec_type(self, streams):
        assert [stream.kind for stream in streams] == [
            StreamKind.VIDEO,
            StreamKind.AUDIO,
            StreamKind.AUDIO,
            StreamKind.SUBTITLE,
            StreamKind.ATTACHMENT,
            StreamKind.UNKNOWN,
        ]
        assert [stream.index for stream in streams] == [0, 1, 2, 3, 4, 5]

    def test_video_fields(self, streams):
        video = streams[0]

        assert video.codec == "hevc"
        assert video.resolution == "3840x2160"
        assert video.framerate == pytest.approx(23.976, rel=1e-3)
        assert video.hdr is True
        assert video.is_default is True
        assert video.size_bytes == 500_000_000
        assert video.duration_seconds == pytest.approx(100.0)

    def test_duration_tag_beats_numeric_duration(self, streams):
        eng_audio = streams[1]

        assert eng_audio.duration_seconds == pytest.approx(100.0)
        assert eng_audio.size_bytes == 100_000
        assert eng_audio.channels == 6
        assert eng_audio.sample_rate == 48000
        assert eng_audio.language == "eng"

    def test_tags_are_case_insensitive_with_bps_fallback(self, streams):
        jpn_audio = streams[2]

        assert jpn_audio.language == "jpn"
        assert jpn_audio.bitrate == 16000
        assert jpn_audio.size_bytes == 20_000
        assert jpn_audio.title is None

    def test_subtitle_fields(self, streams):
        sub = streams[3]

        assert sub.subtitle_format == "ass"
        assert sub.title == "Signs & Songs"
        assert sub.is_forced is True
        assert sub.is_default is False
        assert sub.size_bytes is None

    def test_codec_falls_back_to_long_name_then_unknown(self, streams):
        assert streams[4].codec == "TrueType font"
        assert streams[5].codec == "unknown"

    @pytest.mark.parametrize(
        ("frame_rate", "expected"),
        [("25/1", 25.0), ("29.97", 29.97), ("0/0", None), ("garbage", None)],
    )
    def test_frame_rate_parsing(self, frame_rate, expected):
        data = {"streams": [{"codec_type": "video", "r_frame_rate": frame_rate}]}

        (video,) = parse_streams(data)

        assert video.framerate == (pytest.approx(expected) if expected is not None else None)

    def test_sdr_video_is_not_hdr(self):
        (video,) = parse_streams({"streams": [{"codec_type": "video", "color_space": "bt709"}]})

        assert video.hdr is False

    def test_missing_streams_key(self):
        assert parse_streams({"format": {}}) == []


class TestFFprobe:
    @patch("mkv_slimmer.core.probe.shutil.which", return_value="/usr/bin/ffprobe")
    @patch("mkv_slimmer.core.probe.subprocess.run")
    def test_probe_runs_ffprobe_and_caches(self, mock_run, mock_which, tmp_path):
        media = tmp_path / "movie.mkv"
        media.write_bytes(b"data")
        mock_run.return_value = Mock(stdout=json.dumps(PROBE_OUTPUT), returncode=0)

        first = FFprobe.probe(media)
        second = FFprobe.probe(media)

        assert first == PROBE_OUTPUT
        assert second is first
        mock_run.assert_called_once()
        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "ffprobe"
        assert "-show_streams" in cmd
        assert cmd[-1] == str(media)

    @patch("mkv_slimmer.core.probe.shutil.which", return_value=None)
    def test_probe_without_ffprobe(self, mock_which, tmp_path):
        media = tmp_path / "movie.mkv"
        media.write_bytes(b"data")

        with pytest.raises(ProbeError, match="not available"):
            FFprobe.probe(media)

    @patch("mkv_slimmer.core.probe.shutil.which", return_value="/usr/bin/ffprobe")
    @patch("mkv_slimmer.core.probe.subprocess.run")
    def test_probe_failure(self, mock_run, mock_which, tmp_path):
        media = tmp_path / "movie.mkv"
        media.write_bytes(b"data")
        mock_run.side_effect = subprocess.CalledProcessError(1, ["ffprobe"], stderr="Invalid data found")

        with pytest.raises(ProbeError, match="Invalid data found"):
            FFprobe.probe(media)

    @patch("mkv_slimmer.core.probe.shutil.which", return_value="/usr/bin/ffprobe")
    @patch("mkv_slimmer.core.probe.subprocess.run")
    def test_probe_timeout(self, mock_run, mock_which, tmp_path):
        media = tmp_path / "movie.mkv"
        media.write_bytes(b"data")
        mock_run.side_effect = subprocess.TimeoutExpired(["ffprobe"], 60)

        with pytest.raises(ProbeError, match="timed out"):
            FFprobe.probe(media)

    @patch("mkv_slimmer.core.probe.shutil.which", return_value="/usr/bin/ffprobe")
    @patch("mkv_slimmer.core.probe.subprocess.run")
    def test_probe_bad_json(self, mock_run, mock_which, tmp_path):
        media = tmp_path / "movie.mkv"
        media.write_bytes(b"data")
        mock_run.return_value = Mock(stdout="not json", returncode=0)

        with pytest.raises(ProbeError, match="Could not parse"):
            FFprobe.probe(media)


class TestAnalyzeStreams:
    @patch("mkv_slimmer.core.probe.shutil.which", return_value=None)
    def test_falls_back_to_single_unknown_stream(self, mock_which, tmp_path):
        media = tmp_path / "movie.mkv"
        media.write_bytes(b"data")

        streams = analyze_streams(media)

        assert len(streams) == 1
        assert streams[0].index == 0
        assert streams[0].kind is StreamKind.UNKNOWN

    @patch("mkv_slimmer.core.probe.FFprobe.probe", return_value={"streams": []})
    def test_empty_stream_list_falls_back(self, mock_probe, tmp_path):
        streams = analyze_streams(tmp_path / "movie.mkv")

        assert [stream.kind for stream in streams] == [StreamKind.UNKNOWN]

    @patch("mkv_slimmer.core.probe.FFprobe.probe", return_value=PROBE_OUTPUT)
    def test_returns_normalized_streams(self, mock_probe, tmp_path):
        streams = analyze_streams(tmp_path / "movie.mkv")

        assert len(streams) == 6
        assert streams[1].language == "eng"
