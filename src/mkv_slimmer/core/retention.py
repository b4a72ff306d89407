"""Track retention policy: which streams to keep and which become default."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import ValidationError
from .models import RetentionDecision, StreamDescriptor, StreamKind, SubtitlePreference

if TYPE_CHECKING:
    from collections.abc import Sequence

LOG = logging.getLogger(__name__)

ALWAYS_KEPT = frozenset({StreamKind.VIDEO, StreamKind.ATTACHMENT, StreamKind.UNKNOWN})


def _retained_audio(audio: list[StreamDescriptor], audio_prefs: Sequence[str]) -> list[StreamDescriptor]:
    """
    Keep preferred-language audio; unlabeled audio only when nothing matched.

    Every unlabeled track is dropped as soon as a single preferred-language
    track exists in the file.
    """
    matched = [stream for stream in audio if stream.language is not None and stream.language in audio_prefs]
    if matched:
        return matched
    return [stream for stream in audio if stream.language is None]


def _retained_subtitles(
    subtitles: list[StreamDescriptor], subtitle_prefs: Sequence[SubtitlePreference]
) -> list[StreamDescriptor]:
    return [stream for stream in subtitles if any(pref.matches(stream) for pref in subtitle_prefs)]


def _default_audio(retained: list[StreamDescriptor], audio_prefs: Sequence[str]) -> int | None:
    for language in audio_prefs:
        for stream in retained:
            if stream.language == language:
                return stream.index
    return retained[0].index if retained else None


def _default_subtitle(
    retained: list[StreamDescriptor], subtitle_prefs: Sequence[SubtitlePreference]
) -> int | None:
    for pref in subtitle_prefs:
        for stream in retained:
            if pref.matches(stream):
                return stream.index
    return None


def select(
    streams: Sequence[StreamDescriptor],
    audio_prefs: Sequence[str],
    subtitle_prefs: Sequence[SubtitlePreference],
) -> RetentionDecision:
    """
    Decide which streams to keep and which audio/subtitle track is the default.

    Video, attachment and unknown streams are always kept. Audio is kept by
    language, subtitles by language plus optional title prefix.

    Args:
        streams: Streams of one file, in probe order
        audio_prefs: Audio languages in priority order
        subtitle_prefs: Subtitle preferences in priority order

    Returns:
        The retention decision for the file

    Raises:
        ValidationError: If no stream at all would be kept

    """
    audio = [stream for stream in streams if stream.kind is StreamKind.AUDIO]
    subtitles = [stream for stream in streams if stream.kind is StreamKind.SUBTITLE]

    kept_audio = _retained_audio(audio, audio_prefs)
    kept_subtitles = _retained_subtitles(subtitles, subtitle_prefs)
    kept_indices = {stream.index for stream in kept_audio} | {stream.index for stream in kept_subtitles}

    retained = tuple(
        stream.index for stream in streams if stream.kind in ALWAYS_KEPT or stream.index in kept_indices
    )
    if not retained:
        msg = "No streams would be retained; refusing to create an empty file"
        raise ValidationError(msg)

    decision = RetentionDecision(
        retained=retained,
        default_audio=_default_audio(kept_audio, audio_prefs),
        default_subtitle=_default_subtitle(kept_subtitles, subtitle_prefs),
    )
    LOG.debug(
        "Retaining %d of %d streams (default audio: %s, default subtitle: %s)",
        len(retained),
        len(streams),
        decision.default_audio,
        decision.default_subtitle,
    )
    return decision
