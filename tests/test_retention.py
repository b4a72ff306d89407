"""Tests for the track retention policy."""

from dataclasses import replace

import pytest

from mkv_slimmer.core.base import ValidationError
from mkv_slimmer.core.merge import is_merge_necessary
from mkv_slimmer.core.models import StreamDescriptor, StreamKind, SubtitlePreference
from mkv_slimmer.core.retention import select


def audio(index, language=None, *, default=False):
    return StreamDescriptor(index=index, kind=StreamKind.AUDIO, codec="aac", language=language, is_default=default)


def subtitle(index, language=None, title=None, *, default=False):
    return StreamDescriptor(
        index=index, kind=StreamKind.SUBTITLE, codec="subrip", language=language, title=title, is_default=default
    )


def test_keeps_preferred_audio_and_matching_subtitle(sample_streams):
    """English audio and 'Full' subtitles survive; Japanese audio is dropped."""
    decision = select(sample_streams, ["eng"], [SubtitlePreference("eng", "Full")])

    assert decision.retained == (0, 1, 3)
    assert decision.default_audio == 1
    assert decision.default_subtitle == 3
    assert is_merge_necessary(sample_streams, decision) is True


def test_audio_default_follows_preference_order(sample_streams):
    """Both audio tracks kept; English wins because it is listed first."""
    decision = select(sample_streams, ["eng", "jpn"], [])

    assert decision.retained == (0, 1, 2)
    assert decision.default_audio == 1
    assert decision.default_subtitle is None


def test_audio_default_uses_preference_order_not_stream_order():
    streams = [audio(0, "eng"), audio(1, "jpn")]

    decision = select(streams, ["jpn", "eng"], [])

    assert decision.default_audio == 1


def test_default_audio_is_earliest_index_of_best_language():
    streams = [audio(0, "jpn"), audio(1, "eng"), audio(2, "eng")]

    decision = select(streams, ["eng", "jpn"], [])

    assert decision.default_audio == 1


def test_video_attachment_and_unknown_always_kept():
    streams = [
        StreamDescriptor(index=0, kind=StreamKind.VIDEO),
        StreamDescriptor(index=1, kind=StreamKind.ATTACHMENT, codec="ttf"),
        StreamDescriptor(index=2, kind=StreamKind.UNKNOWN),
        audio(3, "ger"),
        subtitle(4, "ger"),
    ]

    decision = select(streams, [], [])

    assert decision.retained == (0, 1, 2)
    assert decision.default_audio is None
    assert decision.default_subtitle is None


def test_unlabeled_audio_dropped_when_preferred_language_exists():
    streams = [audio(0, None), audio(1, "eng"), audio(2, None)]

    decision = select(streams, ["eng"], [])

    assert decision.retained == (1,)
    assert decision.default_audio == 1


def test_unlabeled_audio_kept_as_fallback_without_matches():
    streams = [audio(0, None), audio(1, "ger"), audio(2, None)]

    decision = select(streams, ["eng"], [])

    assert decision.retained == (0, 2)
    assert decision.default_audio == 0


def test_no_audio_kept_without_matches_or_unlabeled_tracks():
    streams = [StreamDescriptor(index=0, kind=StreamKind.VIDEO), audio(1, "ger"), audio(2, "fre")]

    decision = select(streams, ["eng"], [])

    assert decision.retained == (0,)
    assert decision.default_audio is None


@pytest.mark.parametrize(
    ("title", "kept"),
    [
        ("Full Subtitles", True),
        ("full", True),
        ("FULL (Dialogue)", True),
        ("Signs & Songs", False),
        (None, False),
    ],
)
def test_subtitle_title_prefix_is_case_insensitive(title, kept):
    streams = [StreamDescriptor(index=0, kind=StreamKind.VIDEO), subtitle(1, "eng", title)]

    decision = select(streams, [], [SubtitlePreference("eng", "full")])

    assert decision.keeps(1) is kept


def test_subtitle_without_language_never_kept():
    streams = [StreamDescriptor(index=0, kind=StreamKind.VIDEO), subtitle(1, None, "Full")]

    decision = select(streams, [], [SubtitlePreference("eng")])

    assert decision.retained == (0,)


def test_subtitle_default_scans_preferences_in_priority_order():
    streams = [
        subtitle(0, "eng", "Signs"),
        subtitle(1, "eng", "Full"),
        subtitle(2, "spa"),
    ]
    prefs = [SubtitlePreference("spa"), SubtitlePreference("eng")]

    decision = select(streams, [], prefs)

    assert decision.retained == (0, 1, 2)
    assert decision.default_subtitle == 2


def test_subtitle_default_within_preference_uses_index_order():
    streams = [subtitle(0, "eng", "Signs"), subtitle(1, "eng", "Full")]

    decision = select(streams, [], [SubtitlePreference("eng")])

    assert decision.default_subtitle == 0


def test_empty_stream_list_is_rejected():
    with pytest.raises(ValidationError):
        select([], ["eng"], [SubtitlePreference("eng")])


def test_only_dropped_streams_is_rejected():
    with pytest.raises(ValidationError):
        select([audio(0, "ger")], ["eng"], [])


def test_decision_is_idempotent_after_merge(sample_streams):
    """Re-running on the remuxed output must not ask for another remux."""
    audio_prefs = ["eng"]
    subtitle_prefs = [SubtitlePreference("eng", "Full")]
    decision = select(sample_streams, audio_prefs, subtitle_prefs)

    merged = [
        replace(stream, index=new_index, is_default=decision.wants_default(stream))
        for new_index, stream in enumerate(s for s in sample_streams if decision.keeps(s.index))
    ]
    second = select(merged, audio_prefs, subtitle_prefs)

    assert second.retained == (0, 1, 2)
    assert is_merge_necessary(merged, second) is False
