"""Configuration management for mkv-slimmer."""

from __future__ import annotations

from .settings import AudioConfig, ProcessingConfig, SlimmerConfig, SubtitleConfig, parse_subtitle_preferences

__all__ = [
    "AudioConfig",
    "ProcessingConfig",
    "SlimmerConfig",
    "SubtitleConfig",
    "parse_subtitle_preferences",
]
