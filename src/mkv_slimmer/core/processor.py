"""Per-file orchestration and sequential batch processing."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import psutil
from tqdm import tqdm

from ..integrations.sonarr import emit_move_status
from .base import (
    MergeExecutionError,
    ProcessingAction,
    ProcessingResult,
    ProcessingStatus,
    SlimmerError,
    ValidationError,
)
from .directory_processor import BatchScanner
from .file_manager import FileManager, resolve_transfer_mode
from .merge import MkvMerge, build_merge_command, is_merge_necessary
from .models import BatchResult, ProcessingTask, StreamDescriptor
from .probe import analyze_streams
from .retention import select
from .validation import validate_mkv_file

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from ..config.settings import SlimmerConfig
    from ..integrations.sonarr import SonarrContext
    from .models import RetentionDecision

LOG = logging.getLogger(__name__)


def analyze_file(source_file: Path, target_directory: Path, output_filename: str | None = None) -> ProcessingTask:
    """
    Validate and probe one file and wrap it in a task.

    Raises:
        ValidationError: If the file is not a readable MKV file

    """
    validate_mkv_file(source_file)
    streams = analyze_streams(source_file)
    return ProcessingTask(
        source_file=source_file,
        target_location=target_directory,
        streams=streams,
        output_filename=output_filename,
    )


def estimate_retained_size(streams: Sequence[StreamDescriptor], decision: RetentionDecision) -> int:
    """Sum of the known sizes of all retained streams."""
    return sum(stream.size_bytes or 0 for stream in streams if decision.keeps(stream.index))


def _check_free_space(target_directory: Path, needed: int) -> None:
    """Warn when the target filesystem looks too small for the merged file."""
    if needed <= 0:
        return
    existing = target_directory
    while not existing.exists() and existing != existing.parent:
        existing = existing.parent
    try:
        free = psutil.disk_usage(str(existing)).free
    except OSError as e:
        LOG.debug("Could not determine free space on %s: %s", existing, e)
        return
    if free < needed:
        LOG.warning(
            "Target %s has %.1f MB free but the output needs about %.1f MB",
            existing,
            free / (1024 * 1024),
            needed / (1024 * 1024),
        )


def _remove_partial_output(output_file: Path) -> None:
    try:
        output_file.unlink(missing_ok=True)
    except OSError as e:
        LOG.warning("Could not remove partial output %s: %s", output_file, e)


def process_task(
    task: ProcessingTask,
    config: SlimmerConfig,
    integration: SonarrContext | None = None,
    *,
    file_manager: FileManager | None = None,
    merger: MkvMerge | None = None,
) -> ProcessingResult:
    """
    Decide what to keep in one file and either remux or transfer it.

    Raises:
        SlimmerError: If any stage fails; nothing is caught here

    """
    start_time = time.time()
    decision = select(task.streams, config.audio.keep_languages, config.subtitles.keep_languages)
    output_file = task.output_path()
    dry_run = config.processing.dry_run
    original_size = task.source_file.stat().st_size

    if is_merge_necessary(task.streams, decision):
        command = build_merge_command(task.streams, decision, task.source_file, output_file)

        if dry_run:
            LOG.info("Dry run: would run %s", " ".join(command))
            return ProcessingResult(
                source_file=task.source_file,
                status=ProcessingStatus.SUCCESS,
                action=ProcessingAction.DRY_RUN,
                message="Remux required",
                output_file=output_file,
                original_size=original_size,
                command=command,
                processing_time=time.time() - start_time,
            )

        task.target_location.mkdir(parents=True, exist_ok=True)
        _check_free_space(task.target_location, estimate_retained_size(task.streams, decision))
        try:
            (merger or MkvMerge()).run(command, task.source_file)
        except MergeExecutionError:
            _remove_partial_output(output_file)
            raise

        new_size = output_file.stat().st_size
        LOG.info(
            "Remuxed %s -> %s (%d of %d streams kept)",
            task.source_filename,
            output_file,
            len(decision.retained),
            len(task.streams),
        )
        if integration is not None and integration.is_present:
            emit_move_status(merged=True)
        return ProcessingResult(
            source_file=task.source_file,
            status=ProcessingStatus.SUCCESS,
            action=ProcessingAction.MERGED,
            message="Remuxed",
            output_file=output_file,
            original_size=original_size,
            new_size=new_size,
            command=command,
            processing_time=time.time() - start_time,
        )

    raw_mode = integration.transfer_context.raw_mode if integration is not None else None

    if dry_run:
        mode = resolve_transfer_mode(raw_mode)
        LOG.info("Dry run: no remux needed, would transfer %s -> %s", task.source_file, output_file)
        return ProcessingResult(
            source_file=task.source_file,
            status=ProcessingStatus.SUCCESS,
            action=ProcessingAction.DRY_RUN,
            message="No remux needed",
            output_file=output_file,
            original_size=original_size,
            transfer_method=mode.value if mode else None,
            processing_time=time.time() - start_time,
        )

    outcome = (file_manager or FileManager()).transfer(task.source_file, output_file, raw_mode)
    if integration is not None and integration.is_present:
        emit_move_status(merged=False)
    return ProcessingResult(
        source_file=task.source_file,
        status=ProcessingStatus.SUCCESS,
        action=ProcessingAction.TRANSFERRED,
        message="No remux needed",
        output_file=outcome.destination,
        original_size=original_size,
        new_size=outcome.size_bytes,
        transfer_method=outcome.method.value,
        processing_time=time.time() - start_time,
    )


class BatchProcessor:
    """Processes every MKV file below a directory, one file at a time."""

    def __init__(  # noqa: PLR0913
        self,
        input_path: Path,
        target_directory: Path,
        config: SlimmerConfig,
        *,
        recursive: bool = False,
        filter_pattern: str | None = None,
        integration: SonarrContext | None = None,
    ) -> None:
        """Initialize batch processor; the source/target layout is validated by the caller."""
        self.scanner = BatchScanner(root=input_path, recursive=recursive, pattern=filter_pattern)
        self.target_directory = target_directory
        self.config = config
        self.integration = integration
        self.file_manager = FileManager()
        self.merger = MkvMerge()
        self.results: list[ProcessingResult] = []

    def process(self) -> BatchResult:
        """Process all discovered files; a failing file never stops the batch."""
        batch = BatchResult()
        files = self.scanner.discover()
        if not files:
            LOG.warning("No MKV files found matching criteria in %s", self.scanner.root)
            return batch

        LOG.info("Processing %d MKV files", len(files))
        progress_bar = tqdm(
            total=len(files),
            desc="Processing MKV files",
            unit="file",
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]",
        )

        try:
            for file_path in files:
                progress_bar.set_description(f"Processing {file_path.name}")
                try:
                    self.results.append(self.process_single_file(file_path))
                except SlimmerError as e:
                    LOG.error("Failed to process %s: %s", file_path, e)
                    batch.record_failure(file_path, str(e))
                    progress_bar.set_description(f"✗ Error {file_path.name}")
                except OSError as e:
                    LOG.exception("Failed to process %s", file_path)
                    batch.record_failure(file_path, str(e))
                    progress_bar.set_description(f"✗ Error {file_path.name}")
                else:
                    batch.record_success()
                    progress_bar.set_description(f"✓ Completed {file_path.name}")
                finally:
                    progress_bar.update(1)
        finally:
            progress_bar.close()

        summary = self.file_manager.get_session_summary()
        LOG.info(
            "Batch complete: %d successful, %d failed, %d transfer operations",
            batch.successful,
            batch.failed,
            summary["total_operations"],
        )
        return batch

    def process_single_file(self, file_path: Path) -> ProcessingResult:
        """Validate, probe and process one discovered file."""
        target_path = self.scanner.target_path(file_path, self.target_directory)
        if target_path.parent == target_path:
            msg = f"Cannot determine a target directory for {file_path}"
            raise ValidationError(msg, file_path=file_path)

        task = analyze_file(file_path, target_path.parent)
        return process_task(
            task,
            self.config,
            self.integration,
            file_manager=self.file_manager,
            merger=self.merger,
        )

