"""Input file validation and source/target path safety checks."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from ..config.constants import EBML_MAGIC, MKV_EXTENSIONS
from .base import ValidationError

LOG = logging.getLogger(__name__)


class TargetType(Enum):
    """Whether a target path names a file or a directory."""

    FILE = "file"
    DIRECTORY = "directory"


def has_mkv_extension(file_path: Path) -> bool:
    return file_path.suffix.lower() in MKV_EXTENSIONS


def is_valid_mkv_file(file_path: Path) -> bool:
    """Cheap, non-raising check used to filter directory listings."""
    if not file_path.is_file() or not has_mkv_extension(file_path):
        return False
    try:
        with file_path.open("rb"):
            pass
    except OSError:
        return False
    return True


def validate_mkv_file(file_path: Path) -> None:
    """
    Check that a file exists, has an MKV extension and starts with the EBML header.

    Raises:
        ValidationError: Describing the first check that failed

    """
    if not file_path.exists():
        msg = f"File not found: {file_path}"
        raise ValidationError(msg, file_path=file_path)
    if not file_path.is_file():
        msg = f"Not a file: {file_path}"
        raise ValidationError(msg, file_path=file_path)
    if not has_mkv_extension(file_path):
        msg = f"Not an MKV file (expected one of {', '.join(sorted(MKV_EXTENSIONS))}): {file_path}"
        raise ValidationError(msg, file_path=file_path)

    try:
        with file_path.open("rb") as f:
            header = f.read(len(EBML_MAGIC))
    except OSError as e:
        msg = f"Cannot read file: {file_path}: {e}"
        raise ValidationError(msg, file_path=file_path, cause=e) from e

    if header != EBML_MAGIC:
        msg = f"Invalid MKV file format (missing EBML header): {file_path}"
        raise ValidationError(msg, file_path=file_path)


def _canonical(path: Path) -> Path:
    """Resolve symlinks; missing trailing components resolve through their existing parents."""
    return path.expanduser().resolve(strict=False)


def validate_source_target(source_root: Path, target_root: Path) -> None:
    """
    Refuse source/target layouts where outputs and inputs could collide.

    Fails when both are the same directory, when the target lies inside the
    source (outputs would be picked up as inputs on a recursive run) or when
    the source lies inside the target (inputs could be overwritten).

    Raises:
        ValidationError: If the layout is unsafe

    """
    source = _canonical(source_root)
    target = _canonical(target_root)

    if source == target:
        msg = f"Source and target paths cannot be the same. Source: {source_root}, Target: {target_root}"
        raise ValidationError(msg)
    if target.is_relative_to(source):
        msg = (
            f"Target path cannot be nested within the source path. Source: {source_root}, Target: {target_root}. "
            "This would cause the output to be processed as input in recursive mode."
        )
        raise ValidationError(msg)
    if source.is_relative_to(target):
        msg = (
            f"Source path cannot be nested within the target path. Source: {source_root}, Target: {target_root}. "
            "This would overwrite source files during processing."
        )
        raise ValidationError(msg)

    LOG.debug("Source %s and target %s are independent", source, target)


def determine_target_type(target_path: Path) -> TargetType:
    """Existing paths are what they are; otherwise a suffix means a file."""
    if target_path.exists():
        return TargetType.FILE if target_path.is_file() else TargetType.DIRECTORY
    if target_path.suffix:
        return TargetType.FILE
    return TargetType.DIRECTORY
