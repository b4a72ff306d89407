"""Batch summary and failure table display."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config.constants import (
    ERROR_MSG_TRUNCATE_LENGTH,
    FILENAME_TRUNCATE_LENGTH,
    MAX_ERROR_MSG_LENGTH,
    MAX_FILENAME_LENGTH,
)

if TYPE_CHECKING:
    from ..core.models import BatchResult

OUTCOME_LINES = {
    "success": "🎉 All files processed successfully!",
    "partial": "⚠️  Batch completed with some failures",
    "failed": "💥 Batch processing failed completely",
    "empty": "⚠️  No MKV files found matching criteria",
}


def print_failure_table(errors: dict) -> None:
    """
    Print a simple table of failed files.

    Args:
        errors: Mapping of failed file path to error message

    """
    if not errors:
        return

    print("\n" + "=" * 80)
    print(f"{'PROCESSING FAILURES':^80}")
    print("=" * 80)
    print(f"Total failed: {len(errors)} files\n")

    print(f"{'FILE':<40} | {'ERROR':<35}")
    print("-" * 80)

    for file_path, message in sorted(errors.items()):
        filename = file_path.name
        if len(filename) > MAX_FILENAME_LENGTH:
            filename = filename[:FILENAME_TRUNCATE_LENGTH] + "..."

        error_msg = " ".join((message or "Unknown error").split())
        if len(error_msg) > MAX_ERROR_MSG_LENGTH:
            error_msg = error_msg[:ERROR_MSG_TRUNCATE_LENGTH] + "..."

        print(f"{filename:<40} | {error_msg:<35}")

    print("\n💡 TIP: Check mkvmerge installation, disk space and file permissions\n")


def print_batch_summary(result: BatchResult) -> None:
    """Print counts, the failure table and a one-line verdict."""
    print("\n📊 Batch Processing Summary:")
    print(f"   Total files: {result.total}")
    print(f"   Successful: {result.successful}")
    print(f"   Failed: {result.failed}")

    print_failure_table(result.errors)
    print(f"\n{OUTCOME_LINES[result.outcome]}")
