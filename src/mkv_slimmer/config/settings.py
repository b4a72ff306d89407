"""Configuration management for mkv-slimmer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from ..core.base import ConfigError
from ..core.models import SubtitlePreference
from .constants import DEFAULT_AUDIO_LANGUAGES, DEFAULT_SUBTITLE_LANGUAGES

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

LOG = logging.getLogger(__name__)


def parse_subtitle_preferences(values: Iterable[str]) -> list[SubtitlePreference]:
    """Parse preference strings; the first invalid one raises ``ConfigError``."""
    return [SubtitlePreference.parse(str(value)) for value in values]


@dataclass
class AudioConfig:
    """Audio languages to keep, highest priority first."""

    keep_languages: list[str] = field(default_factory=lambda: list(DEFAULT_AUDIO_LANGUAGES))


@dataclass
class SubtitleConfig:
    """Subtitle preferences to keep, highest priority first."""

    keep_languages: list[SubtitlePreference] = field(
        default_factory=lambda: parse_subtitle_preferences(DEFAULT_SUBTITLE_LANGUAGES)
    )


@dataclass
class ProcessingConfig:
    """Processing behaviour."""

    dry_run: bool = False


@dataclass
class SlimmerConfig:
    """Main configuration class."""

    audio: AudioConfig = field(default_factory=AudioConfig)
    subtitles: SubtitleConfig = field(default_factory=SubtitleConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> SlimmerConfig:
        """
        Load configuration from a YAML file.

        A missing file yields the defaults; an unreadable or invalid one is an error.

        Raises:
            ConfigError: If the file cannot be read or parsed, or holds invalid values

        """
        if not config_path.exists():
            LOG.warning("Missing config file: %s, using defaults", config_path)
            return cls()

        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            msg = f"Failed to load config from {config_path}: {e}"
            raise ConfigError(msg, file_path=config_path, cause=e) from e

        if not isinstance(data, dict):
            msg = f"Config file {config_path} must contain a mapping at the top level"
            raise ConfigError(msg, file_path=config_path)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> SlimmerConfig:
        """Create config from dictionary."""
        return cls(
            audio=cls._parse_audio_config(data.get("audio") or {}),
            subtitles=cls._parse_subtitle_config(data.get("subtitles") or {}),
            processing=ProcessingConfig(dry_run=bool((data.get("processing") or {}).get("dry_run", False))),
        )

    @staticmethod
    def _language_list(section: dict[str, Any], name: str, default: Iterable[str]) -> list[str]:
        value = section.get("keep_languages")
        if value is None:
            return list(default)
        if not isinstance(value, list):
            msg = f"{name}.keep_languages must be a list, got {type(value).__name__}"
            raise ConfigError(msg)
        return [str(item) for item in value]

    @classmethod
    def _parse_audio_config(cls, audio_data: dict[str, Any]) -> AudioConfig:
        """Parse audio configuration."""
        languages = cls._language_list(audio_data, "audio", DEFAULT_AUDIO_LANGUAGES)
        return AudioConfig(keep_languages=[language.strip() for language in languages if language.strip()])

    @classmethod
    def _parse_subtitle_config(cls, subtitle_data: dict[str, Any]) -> SubtitleConfig:
        """Parse subtitle configuration."""
        languages = cls._language_list(subtitle_data, "subtitles", DEFAULT_SUBTITLE_LANGUAGES)
        return SubtitleConfig(keep_languages=parse_subtitle_preferences(languages))

    def merge_cli_args(
        self,
        audio_languages: list[str] | None = None,
        subtitle_languages: list[str] | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        """
        Override file values with command line values.

        Raises:
            ConfigError: If a subtitle preference is invalid

        """
        if audio_languages is not None:
            self.audio.keep_languages = [language.strip() for language in audio_languages if language.strip()]
        if subtitle_languages is not None:
            self.subtitles.keep_languages = parse_subtitle_preferences(subtitle_languages)
        if dry_run:
            self.processing.dry_run = True

    def validate(self) -> None:
        """
        Reject configurations that would strip every labeled track.

        Raises:
            ConfigError: If the audio or subtitle language list is empty

        """
        if not self.audio.keep_languages:
            msg = "At least one audio language must be specified"
            raise ConfigError(msg)
        if not self.subtitles.keep_languages:
            msg = "At least one subtitle language must be specified"
            raise ConfigError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML-serializable form of this configuration."""
        return {
            "audio": {"keep_languages": list(self.audio.keep_languages)},
            "subtitles": {"keep_languages": [str(pref) for pref in self.subtitles.keep_languages]},
            "processing": {"dry_run": self.processing.dry_run},
        }
