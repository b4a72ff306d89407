"""Core decision engine, external tool wrappers and orchestration."""

from .base import (
    ConfigError,
    DependencyError,
    MergeExecutionError,
    ProbeError,
    ProcessingAction,
    ProcessingResult,
    ProcessingStatus,
    SlimmerError,
    TransferError,
    ValidationError,
    suggest_solution,
)
from .models import (
    BatchResult,
    ProcessingTask,
    RetentionDecision,
    StreamDescriptor,
    StreamKind,
    SubtitlePreference,
    TransferContext,
    TransferMode,
    TransferOutcome,
)
from .directory_processor import BatchScanner
from .file_manager import FileManager
from .merge import MkvMerge, build_merge_command, check_dependencies, is_merge_necessary
from .probe import FFprobe, analyze_streams, parse_streams
from .retention import select
from .validation import TargetType, determine_target_type, validate_mkv_file, validate_source_target
from .processor import BatchProcessor, analyze_file, process_task

__all__ = [
    "BatchProcessor",
    "BatchResult",
    "BatchScanner",
    "ConfigError",
    "DependencyError",
    "FFprobe",
    "FileManager",
    "MergeExecutionError",
    "MkvMerge",
    "ProbeError",
    "ProcessingAction",
    "ProcessingResult",
    "ProcessingStatus",
    "ProcessingTask",
    "RetentionDecision",
    "SlimmerError",
    "StreamDescriptor",
    "StreamKind",
    "SubtitlePreference",
    "TargetType",
    "TransferContext",
    "TransferError",
    "TransferMode",
    "TransferOutcome",
    "ValidationError",
    "analyze_file",
    "analyze_streams",
    "build_merge_command",
    "check_dependencies",
    "determine_target_type",
    "is_merge_necessary",
    "parse_streams",
    "process_task",
    "select",
    "suggest_solution",
    "validate_mkv_file",
    "validate_source_target",
]
