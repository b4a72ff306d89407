"""Sonarr custom import script integration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from ..config.constants import MOVE_STATUS_MOVE_COMPLETE, MOVE_STATUS_RENAME_REQUESTED
from ..core.models import TransferContext

if TYPE_CHECKING:
    from collections.abc import Mapping

LOG = logging.getLogger(__name__)

ENV_PREFIX = "sonarr_"


def _env(name: str) -> str:
    return field(default=None, metadata={"env": name})  # type: ignore[return-value]


@dataclass(frozen=True)
class SonarrContext:
    """Raw ``sonarr_*`` environment values; nothing is parsed beyond the transfer mode."""

    source_path: str | None = _env("sourcepath")
    destination_path: str | None = _env("destinationpath")

    instance_name: str | None = _env("instancename")
    application_url: str | None = _env("applicationurl")
    transfer_mode: str | None = _env("transfermode")

    series_id: str | None = _env("series_id")
    series_title: str | None = _env("series_title")
    series_title_slug: str | None = _env("series_titleslug")
    series_path: str | None = _env("series_path")
    series_tvdb_id: str | None = _env("series_tvdbid")
    series_tv_maze_id: str | None = _env("series_tvmazeid")
    series_tmdb_id: str | None = _env("series_tmdbid")
    series_imdb_id: str | None = _env("series_imdbid")
    series_type: str | None = _env("series_type")
    series_original_language: str | None = _env("series_originallanguage")
    series_genres: str | None = _env("series_genres")
    series_tags: str | None = _env("series_tags")

    episode_file_episode_count: str | None = _env("episodefile_episodecount")
    episode_file_episode_ids: str | None = _env("episodefile_episodeids")
    episode_file_season_number: str | None = _env("episodefile_seasonnumber")
    episode_file_episode_numbers: str | None = _env("episodefile_episodenumbers")
    episode_file_episode_air_dates: str | None = _env("episodefile_episodeairdates")
    episode_file_episode_air_dates_utc: str | None = _env("episodefile_episodeairdatesutc")
    episode_file_episode_titles: str | None = _env("episodefile_episodetitles")
    episode_file_episode_overviews: str | None = _env("episodefile_episodeoverviews")

    episode_file_quality: str | None = _env("episodefile_quality")
    episode_file_quality_version: str | None = _env("episodefile_qualityversion")
    episode_file_release_group: str | None = _env("episodefile_releasegroup")
    episode_file_scene_name: str | None = _env("episodefile_scenename")
    episode_file_media_info_audio_channels: str | None = _env("episodefile_mediainfo_audiochannels")
    episode_file_media_info_audio_codec: str | None = _env("episodefile_mediainfo_audiocodec")
    episode_file_media_info_audio_languages: str | None = _env("episodefile_mediainfo_audiolanguages")
    episode_file_media_info_languages: str | None = _env("episodefile_mediainfo_languages")
    episode_file_media_info_height: str | None = _env("episodefile_mediainfo_height")
    episode_file_media_info_width: str | None = _env("episodefile_mediainfo_width")
    episode_file_media_info_subtitles: str | None = _env("episodefile_mediainfo_subtitles")
    episode_file_media_info_video_codec: str | None = _env("episodefile_mediainfo_videocodec")
    episode_file_media_info_video_dynamic_range_type: str | None = _env(
        "episodefile_mediainfo_videodynamicrangetype"
    )

    episode_file_custom_format: str | None = _env("episodefile_customformat")
    episode_file_custom_format_score: str | None = _env("episodefile_customformatscore")

    download_client: str | None = _env("download_client")
    download_client_type: str | None = _env("download_client_type")
    download_id: str | None = _env("download_id")

    deleted_relative_paths: str | None = _env("deletedrelativepaths")
    deleted_paths: str | None = _env("deletedpaths")
    deleted_date_added: str | None = _env("deleteddateadded")
    deleted_recycle_bin_paths: str | None = _env("deletedrecyclebinpaths")

    @property
    def is_present(self) -> bool:
        return any(value is not None for value in (self.source_path, self.instance_name, self.series_id))

    @property
    def transfer_context(self) -> TransferContext:
        return TransferContext(raw_mode=self.transfer_mode)


def collect_sonarr_environment(environ: Mapping[str, str] | None = None) -> SonarrContext:
    """Collect ``sonarr_*`` variables, matching names case-insensitively."""
    if environ is None:
        environ = os.environ

    values = {key.lower(): value for key, value in environ.items() if key.lower().startswith(ENV_PREFIX)}
    context = SonarrContext(
        **{f.name: values.get(f"{ENV_PREFIX}{f.metadata['env']}") for f in fields(SonarrContext)}
    )

    if context.is_present:
        LOG.info("Detected Sonarr environment context")
        if context.series_title:
            LOG.info("Processing for series: %s", context.series_title)
        if context.episode_file_season_number and context.episode_file_episode_numbers:
            LOG.info("Episode: S%sE%s", context.episode_file_season_number, context.episode_file_episode_numbers)
    return context


def emit_move_status(*, merged: bool) -> None:
    """
    Tell Sonarr what happened to the file.

    A rewritten file must be treated as renamed; an unchanged one as simply moved.
    """
    print(MOVE_STATUS_RENAME_REQUESTED if merged else MOVE_STATUS_MOVE_COMPLETE, flush=True)
