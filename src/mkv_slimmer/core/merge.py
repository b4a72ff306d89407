"""mkvmerge integration: necessity check, command synthesis and execution."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from typing import TYPE_CHECKING

from ..config.constants import FFPROBE_COMMAND, MKVMERGE_COMMAND, MKVMERGE_WARNING_EXIT_CODE
from .base import DependencyError, MergeExecutionError
from .models import StreamKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from .models import RetentionDecision, StreamDescriptor

LOG = logging.getLogger(__name__)

# kind -> (select flag, exclude-all flag)
TRACK_SELECTION_FLAGS = {
    StreamKind.VIDEO: ("--video-tracks", "--no-video"),
    StreamKind.AUDIO: ("--audio-tracks", "--no-audio"),
    StreamKind.SUBTITLE: ("--subtitle-tracks", "--no-subtitles"),
    StreamKind.ATTACHMENT: ("--attachments", "--no-attachments"),
}
DEFAULT_FLAG_KINDS = (StreamKind.AUDIO, StreamKind.SUBTITLE)


def check_dependencies() -> list[str]:
    """
    Check for the external tools.

    Returns:
        Missing optional tools (currently only ffprobe)

    Raises:
        DependencyError: If mkvmerge is not installed

    """
    if not shutil.which(MKVMERGE_COMMAND):
        msg = "mkvmerge is not available. Please install MKVToolNix to process MKV files: https://mkvtoolnix.download/"
        LOG.error(msg)
        raise DependencyError(msg)

    return [tool for tool in (FFPROBE_COMMAND,) if not shutil.which(tool)]


def is_merge_necessary(streams: Sequence[StreamDescriptor], decision: RetentionDecision) -> bool:
    """
    Return True when the file has to be remuxed.

    That is the case when any stream is dropped, or when any retained audio or
    subtitle stream carries a default flag different from the decided one.
    """
    if len(decision.retained) != len(streams):
        return True

    for stream in streams:
        if stream.kind not in DEFAULT_FLAG_KINDS or not decision.keeps(stream.index):
            continue
        if stream.is_default != decision.wants_default(stream):
            LOG.debug("Stream %d default flag needs to change to %s", stream.index, not stream.is_default)
            return True
    return False


def build_merge_command(
    streams: Sequence[StreamDescriptor],
    decision: RetentionDecision,
    source_file: Path,
    output_file: Path,
) -> list[str]:
    """
    Build the mkvmerge argument list for one file.

    A track selector is only emitted for a kind whose retained subset is a
    strict subset of its streams. Every retained audio and subtitle track gets
    an explicit default flag.
    """
    known = {stream.index for stream in streams}
    retained = [index for index in decision.retained if index in known]
    cmd = [MKVMERGE_COMMAND, "-o", str(output_file)]

    for kind, (select_flag, exclude_flag) in TRACK_SELECTION_FLAGS.items():
        of_kind = [stream.index for stream in streams if stream.kind is kind]
        kept = sorted(index for index in of_kind if index in retained)
        if len(kept) == len(of_kind):
            continue
        if kept:
            cmd.extend([select_flag, ",".join(str(index) for index in kept)])
        else:
            cmd.append(exclude_flag)

    for stream in streams:
        if stream.kind not in DEFAULT_FLAG_KINDS or stream.index not in retained:
            continue
        flag = "1" if decision.wants_default(stream) else "0"
        cmd.extend(["--default-track-flag", f"{stream.index}:{flag}"])

    cmd.append(str(source_file))
    return cmd


def _explain_failure(output: str, return_code: int) -> str:
    lowered = output.lower()
    if "no space left" in lowered:
        return "mkvmerge ran out of disk space while writing the output file"
    if "permission denied" in lowered:
        return "mkvmerge was denied permission to read the input or write the output"
    if "no such file" in lowered or "not found" in lowered or "does not exist" in lowered:
        return "mkvmerge could not find the input file"
    return f"mkvmerge failed with exit code {return_code}"


class MkvMerge:
    """Runs mkvmerge and turns failures into actionable errors."""

    def run(self, command: list[str], file_path: Path | None = None) -> subprocess.CompletedProcess:
        """
        Run a synthesized command and block until mkvmerge exits.

        Exit code 1 means mkvmerge finished with warnings and is treated as success.
        """
        LOG.info("Running mkvmerge command: %s", " ".join(command))
        start_time = time.time()

        try:
            result = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                check=False,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            msg = f"mkvmerge could not be started: {e}"
            raise MergeExecutionError(msg, command=command, file_path=file_path) from e

        LOG.debug("mkvmerge completed in %.2fs", time.time() - start_time)

        if result.returncode == MKVMERGE_WARNING_EXIT_CODE:
            LOG.warning("mkvmerge finished with warnings: %s", (result.stdout or "").strip())
        elif result.returncode != 0:
            # mkvmerge reports most errors on stdout
            output = f"{result.stderr or ''}\n{result.stdout or ''}"
            raise MergeExecutionError(
                _explain_failure(output, result.returncode),
                command=command,
                return_code=result.returncode,
                stderr=result.stderr,
                file_path=file_path,
            )
        return result
