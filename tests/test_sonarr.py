"""Tests for the Sonarr custom script integration."""

import logging

from mkv_slimmer.core.models import TransferMode
from mkv_slimmer.integrations.sonarr import SonarrContext, collect_sonarr_environment, emit_move_status


def test_collects_prefixed_variables_case_insensitively(caplog):
    environ = {
        "SONARR_SOURCEPATH": "/downloads/show.s01e01.mkv",
        "sonarr_destinationpath": "/tv/Show/Season 1/Show - S01E01.mkv",
        "Sonarr_TransferMode": "Move",
        "sonarr_series_title": "Show",
        "sonarr_episodefile_seasonnumber": "1",
        "sonarr_episodefile_episodenumbers": "1",
        "HOME": "/root",
    }

    with caplog.at_level(logging.INFO, logger="mkv_slimmer.integrations.sonarr"):
        context = collect_sonarr_environment(environ)

    assert context.is_present
    assert context.source_path == "/downloads/show.s01e01.mkv"
    assert context.destination_path == "/tv/Show/Season 1/Show - S01E01.mkv"
    assert context.series_title == "Show"
    assert context.transfer_context.mode is TransferMode.MOVE
    assert "Processing for series: Show" in caplog.text
    assert "S1E1" in caplog.text


def test_no_sonarr_variables():
    context = collect_sonarr_environment({"PATH": "/usr/bin"})

    assert context == SonarrContext()
    assert not context.is_present
    assert context.transfer_context.raw_mode is None


def test_instance_name_alone_marks_presence():
    assert collect_sonarr_environment({"sonarr_instancename": "Sonarr"}).is_present


def test_unknown_transfer_mode_is_kept_raw():
    context = collect_sonarr_environment({"sonarr_series_id": "7", "sonarr_transfermode": "Symlink"})

    assert context.transfer_context.raw_mode == "Symlink"
    assert context.transfer_context.mode is None
    assert not context.transfer_context.is_recognized


def test_emit_move_status(capsys):
    emit_move_status(merged=True)
    emit_move_status(merged=False)

    assert capsys.readouterr().out.splitlines() == [
        "[MoveStatus] RenameRequested",
        "[MoveStatus] MoveComplete",
    ]
