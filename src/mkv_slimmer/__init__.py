"""mkv-slimmer - Remove unwanted audio and subtitle tracks from MKV files."""

from __future__ import annotations

__version__ = "0.1.0"
__description__ = "Remove unwanted audio and subtitle tracks from MKV files"

# Public API exports
from .config import SlimmerConfig
from .core import (
    BatchProcessor,
    BatchResult,
    FileManager,
    MkvMerge,
    ProcessingResult,
    ProcessingStatus,
    RetentionDecision,
    SlimmerError,
    StreamDescriptor,
    StreamKind,
    SubtitlePreference,
    TransferMode,
    build_merge_command,
    is_merge_necessary,
    process_task,
    select,
)

__all__ = [
    # Configuration
    "SlimmerConfig",
    # Decision engine
    "select",
    "is_merge_necessary",
    "build_merge_command",
    # Processing
    "BatchProcessor",
    "FileManager",
    "MkvMerge",
    "process_task",
    # Data classes
    "BatchResult",
    "ProcessingResult",
    "ProcessingStatus",
    "RetentionDecision",
    "StreamDescriptor",
    "StreamKind",
    "SubtitlePreference",
    "TransferMode",
    # Exceptions
    "SlimmerError",
]
