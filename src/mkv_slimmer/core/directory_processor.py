"""Batch file discovery and target path computation."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .base import ValidationError
from .validation import is_valid_mkv_file

LOG = logging.getLogger(__name__)


@dataclass
class BatchScanner:
    """
    Finds MKV files below a root directory.

    In recursive mode the glob filter applies to the path relative to the
    root, so ``season1/*.mkv`` selects one subdirectory. In non-recursive mode
    it applies to the bare file name.
    """

    root: Path
    recursive: bool = False
    pattern: str | None = None

    def discover(self) -> list[Path]:
        """Return matching files in a stable, sorted order."""
        if not self.root.is_dir():
            msg = f"Not a directory: {self.root}"
            raise ValidationError(msg, file_path=self.root)

        LOG.info("Scanning directory: %s (recursive: %s)", self.root, self.recursive)
        candidates = self._walk() if self.recursive else self._list()
        files = sorted(path for path in candidates if self._matches(path))
        LOG.info("Found %d MKV files", len(files))
        return files

    def _list(self) -> list[Path]:
        try:
            return [entry for entry in self.root.iterdir() if is_valid_mkv_file(entry)]
        except OSError as e:
            msg = f"Failed to read directory: {self.root}: {e}"
            raise ValidationError(msg, file_path=self.root, cause=e) from e

    def _walk(self) -> list[Path]:
        """Depth-first walk with an explicit stack; each real directory is visited once."""
        files: list[Path] = []
        visited: set[Path] = set()
        stack = [self.root]

        while stack:
            directory = stack.pop()
            real = directory.resolve()
            if real in visited:
                LOG.debug("Skipping already visited directory %s", directory)
                continue
            visited.add(real)

            try:
                entries = sorted(directory.iterdir(), reverse=True)
            except OSError as e:
                msg = f"Failed to read directory: {directory}: {e}"
                raise ValidationError(msg, file_path=directory, cause=e) from e

            for entry in entries:
                if entry.is_dir():
                    stack.append(entry)
                elif is_valid_mkv_file(entry):
                    files.append(entry)
        return files

    def _match_subject(self, file_path: Path) -> str:
        if self.recursive:
            return PurePosixPath(file_path.relative_to(self.root)).as_posix()
        return file_path.name

    def _matches(self, file_path: Path) -> bool:
        if self.pattern is None:
            return True
        return fnmatch.fnmatchcase(self._match_subject(file_path), self.pattern)

    def target_path(self, source_file: Path, target_root: Path) -> Path:
        """
        Compute where a discovered file goes.

        Recursive runs mirror the relative directory structure under the
        target root; flat runs put every file directly into it.

        Raises:
            ValidationError: If the relative path tries to escape the target root

        """
        if not self.recursive:
            return target_root / source_file.name

        try:
            relative = source_file.relative_to(self.root)
        except ValueError as e:
            msg = f"{source_file} is not inside {self.root}"
            raise ValidationError(msg, file_path=source_file, cause=e) from e

        if ".." in relative.parts:
            msg = f"Path traversal attempt detected in: {relative}"
            raise ValidationError(msg, file_path=source_file)
        return target_root / relative
