"""File transfer strategies for files that need no remux."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .base import TransferError
from .models import TransferMode, TransferOutcome

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)


@dataclass
class FileOperation:
    """One attempted transfer step, kept for the session summary."""

    method: TransferMode
    source_path: Path
    target_path: Path
    success: bool = False
    error: str | None = None
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if self.timestamp == 0.0:
            self.timestamp = time.time()


def resolve_transfer_mode(mode: TransferMode | str | None) -> TransferMode | None:
    """
    Turn a mode hint into a ``TransferMode``.

    Unrecognized strings are logged and treated like no hint at all.
    """
    if mode is None or isinstance(mode, TransferMode):
        return mode
    resolved = TransferMode.parse(mode)
    if resolved is None:
        LOG.warning("Unrecognized transfer mode '%s', using hard link with copy fallback", mode)
    return resolved


def _is_same_file(source: Path, destination: Path) -> bool:
    """True when an earlier run already linked ``destination`` to ``source``."""
    try:
        return destination.exists() and os.path.samefile(source, destination)
    except OSError:
        return False


def _remove_partial(destination: Path) -> None:
    try:
        destination.unlink(missing_ok=True)
    except OSError as e:
        LOG.warning("Could not remove partial copy %s: %s", destination, e)


class FileManager:
    """Places unchanged files at their destination with the cheapest operation available."""

    def __init__(self) -> None:
        """Initialize an empty session."""
        self.session_operations: list[FileOperation] = []

    def transfer(self, source: Path, destination: Path, mode: TransferMode | str | None = None) -> TransferOutcome:
        """
        Move, copy or hard-link ``source`` to ``destination``.

        Args:
            source: Existing file
            destination: Full path of the file to create
            mode: Transfer hint; ``None`` or an unrecognized string means
                hard link with copy fallback

        Returns:
            The method that succeeded and the resulting file size

        Raises:
            TransferError: If the requested transfer could not be completed

        """
        resolved = resolve_transfer_mode(mode)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Could not create target directory {destination.parent}: {e}"
            raise TransferError(msg, file_path=source, cause=e) from e

        if _is_same_file(source, destination):
            method = self._reuse_existing(source, destination, resolved)
        elif resolved is TransferMode.MOVE:
            method = self._move(source, destination)
        elif resolved is TransferMode.COPY:
            method = self._copy(source, destination)
        elif resolved is TransferMode.HARD_LINK:
            method = self._hard_link(source, destination)
        else:
            method = self._hard_link_or_copy(source, destination)

        size = destination.stat().st_size
        LOG.info("%s %s -> %s (%d bytes)", method.value, source, destination, size)
        return TransferOutcome(method=method, destination=destination, size_bytes=size)

    def _record(self, method: TransferMode, source: Path, destination: Path, error: OSError | None = None) -> None:
        self.session_operations.append(
            FileOperation(
                method=method,
                source_path=source,
                target_path=destination,
                success=error is None,
                error=str(error) if error else None,
            )
        )

    def _reuse_existing(self, source: Path, destination: Path, mode: TransferMode | None) -> TransferMode:
        """Leave an existing link in place; a move only has to drop the source name."""
        LOG.info("%s is already linked at %s", source, destination)
        if mode is not TransferMode.MOVE:
            self._record(TransferMode.HARD_LINK, source, destination)
            return TransferMode.HARD_LINK

        try:
            source.unlink()
        except OSError as e:
            self._record(TransferMode.MOVE, source, destination, e)
            msg = f"Could not remove {source} after finding it already linked at {destination}: {e}"
            raise TransferError(msg, file_path=source, cause=e) from e

        self._record(TransferMode.MOVE, source, destination)
        return TransferMode.MOVE

    def _move(self, source: Path, destination: Path) -> TransferMode:
        try:
            source.rename(destination)
        except OSError as e:
            if e.errno != errno.EXDEV:
                self._record(TransferMode.MOVE, source, destination, e)
                msg = f"Failed to move {source} to {destination}: {e}"
                raise TransferError(msg, file_path=source, cause=e) from e
            LOG.info("Source and target are on different filesystems, copying then deleting %s", source)
        else:
            self._record(TransferMode.MOVE, source, destination)
            return TransferMode.MOVE

        self._copy(source, destination)
        try:
            source.unlink()
        except OSError as e:
            self._record(TransferMode.MOVE, source, destination, e)
            msg = f"Copied {source} to {destination} but could not delete the source: {e}"
            raise TransferError(msg, file_path=source, cause=e) from e

        self._record(TransferMode.MOVE, source, destination)
        return TransferMode.MOVE

    def _copy(self, source: Path, destination: Path) -> TransferMode:
        try:
            shutil.copy2(source, destination)
        except (OSError, shutil.Error) as e:
            self._record(TransferMode.COPY, source, destination, e)
            if not isinstance(e, shutil.SameFileError):
                _remove_partial(destination)
            msg = f"Failed to copy {source} to {destination}: {e}"
            raise TransferError(msg, file_path=source, cause=e) from e

        self._record(TransferMode.COPY, source, destination)
        return TransferMode.COPY

    def _hard_link(self, source: Path, destination: Path) -> TransferMode:
        try:
            os.link(source, destination)
        except OSError as e:
            self._record(TransferMode.HARD_LINK, source, destination, e)
            msg = f"Failed to hard link {source} to {destination}: {e}"
            raise TransferError(msg, file_path=source, cause=e) from e

        self._record(TransferMode.HARD_LINK, source, destination)
        return TransferMode.HARD_LINK

    def _hard_link_or_copy(self, source: Path, destination: Path) -> TransferMode:
        try:
            return self._hard_link(source, destination)
        except TransferError as e:
            LOG.info("Hard link failed (%s), falling back to copy", e.cause)
            return self._copy(source, destination)

    def get_session_summary(self) -> dict[str, Any]:
        """Get summary of transfer operations in this session."""
        successful_ops = [op for op in self.session_operations if op.success]
        failed_ops = [op for op in self.session_operations if not op.success]

        return {
            "total_operations": len(self.session_operations),
            "successful_operations": len(successful_ops),
            "failed_operations": len(failed_ops),
            "operations": self.session_operations,
        }
