"""Main CLI interface for mkv-slimmer."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..config.constants import DEFAULT_CONFIG_FILENAME
from ..config.settings import SlimmerConfig
from ..core import (
    BatchProcessor,
    DependencyError,
    ProcessingAction,
    SlimmerError,
    TargetType,
    ValidationError,
    analyze_file,
    check_dependencies,
    determine_target_type,
    process_task,
    select,
    suggest_solution,
    validate_mkv_file,
    validate_source_target,
)
from ..integrations.sonarr import SonarrContext, collect_sonarr_environment
from .failure_table import print_batch_summary
from .stream_table import format_size, print_stream_table

LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class SlimmerCLI:
    """Command line front end: parses arguments and owns every exit code."""

    def __init__(self) -> None:
        """Initialize CLI; the pipeline context is collected per run."""
        self.integration: SonarrContext | None = None

    @staticmethod
    def setup_logging(verbosity: int) -> None:
        """Setup logging based on verbosity level."""
        level_map = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG,
        }

        level = level_map.get(verbosity, logging.DEBUG)
        log_format = "%(levelname)s: %(name)s: %(message)s" if verbosity >= 2 else "%(levelname)s: %(message)s"

        logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler(sys.stderr)])

        # ffprobe fallbacks are noisy on libraries without it
        if verbosity < 2:
            logging.getLogger("mkv_slimmer.core.probe").setLevel(logging.WARNING)

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        """Build the argument parser."""
        parser = argparse.ArgumentParser(
            prog="mkv-slimmer",
            description="Analyze and remove unnecessary streams from MKV files",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Keep English and Japanese audio, English subtitles
  mkv-slimmer movie.mkv /media/out -a eng -a jpn -s eng

  # Only keep English subtitles whose title starts with "Full"
  mkv-slimmer movie.mkv /media/out -s "eng, Full"

  # Process a whole library recursively, only season 1
  mkv-slimmer /media/in /media/out -r -f "Season 1/*.mkv"
            """,
        )

        parser.add_argument("input_path", type=Path, help="Path to the MKV file or directory to process")
        parser.add_argument(
            "target_path",
            type=Path,
            help="Path where the modified MKV will be created (can be a file or directory)",
        )
        parser.add_argument(
            "-a",
            "--audio-languages",
            action="append",
            metavar="LANG",
            help="Languages to keep for audio tracks (can be specified multiple times)",
        )
        parser.add_argument(
            "-s",
            "--subtitle-languages",
            action="append",
            metavar="PREF",
            help="Subtitle preference 'lang' or 'lang, title prefix' (can be specified multiple times)",
        )
        parser.add_argument(
            "-n",
            "--dry-run",
            action="store_true",
            help="Show what would be removed without modifying",
        )
        parser.add_argument(
            "-c",
            "--config",
            type=Path,
            default=Path(DEFAULT_CONFIG_FILENAME),
            help="Alternative config file path (uses defaults if not found)",
        )
        parser.add_argument(
            "-r",
            "--recursive",
            action="store_true",
            help="Process directories recursively (only applies when input is a directory)",
        )
        parser.add_argument(
            "-f",
            "--filter",
            dest="filter_pattern",
            metavar="PATTERN",
            help="Glob pattern to filter files (file name in non-recursive mode, relative path in recursive mode)",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase verbosity (-v for info, -vv for debug)",
        )
        return parser

    @staticmethod
    def load_config(args: argparse.Namespace) -> SlimmerConfig:
        config = SlimmerConfig.load_from_file(args.config)
        config.merge_cli_args(args.audio_languages, args.subtitle_languages, dry_run=args.dry_run)
        config.validate()
        return config

    @staticmethod
    def print_configuration_info(config: SlimmerConfig) -> None:
        print("\n⚙️  Configuration:")
        print(f"🎵 Audio languages: {', '.join(config.audio.keep_languages) or '(none)'}")
        print(f"📄 Subtitle languages: {'; '.join(str(p) for p in config.subtitles.keep_languages) or '(none)'}")
        if config.processing.dry_run:
            print("🔍 Mode: Dry run (no files will be modified)")
        else:
            print("💾 Mode: Live processing")
        print("ℹ️  Note: Video streams and attachments are always kept")
        print("     Forced subtitles are not automatically preserved\n")

    @staticmethod
    def validate_paths(input_path: Path, target_type: TargetType, target_path: Path) -> None:
        """Reject input/target combinations that cannot work."""
        if not input_path.exists():
            msg = f"Input path does not exist: {input_path}"
            raise ValidationError(msg, file_path=input_path)
        if input_path.is_dir() and target_type is TargetType.FILE:
            msg = f"Cannot process directory {input_path} into a single file {target_path}. Use a target directory."
            raise ValidationError(msg, file_path=input_path)
        if input_path.is_file() and target_type is TargetType.FILE and not target_path.parent.exists():
            msg = f"Target directory does not exist: {target_path.parent}. Please create it first."
            raise ValidationError(msg, file_path=target_path)
        if target_type is TargetType.DIRECTORY and not target_path.exists():
            msg = f"Target directory does not exist: {target_path}. Please create it first."
            raise ValidationError(msg, file_path=target_path)

    def process_single_file(self, args: argparse.Namespace, target_type: TargetType, config: SlimmerConfig) -> int:
        mkv_file: Path = args.input_path
        validate_mkv_file(mkv_file)

        if target_type is TargetType.FILE:
            target_directory, output_filename = args.target_path.parent, args.target_path.name
        else:
            target_directory, output_filename = args.target_path, None

        validate_source_target(mkv_file.parent, target_directory)

        print(f"📁 Analyzing: {mkv_file}")
        print(f"{'📄 Target file' if output_filename else '📂 Target directory'}: {args.target_path}")
        self.print_configuration_info(config)

        task = analyze_file(mkv_file, target_directory, output_filename)
        decision = select(task.streams, config.audio.keep_languages, config.subtitles.keep_languages)
        print_stream_table(task.streams, decision)

        print("\n🎬 Processing streams...")
        result = process_task(task, config, self.integration)

        if result.action is ProcessingAction.DRY_RUN:
            if result.command:
                print(f"🔍 Would run: {' '.join(result.command)}")
            else:
                print(f"🔍 No remux needed, would transfer to {result.output_file}")
        elif result.action is ProcessingAction.MERGED:
            print(f"✅ Remuxed to {result.output_file} ({format_size(result.new_size or 0)})")
        else:
            print(f"✅ No remux needed, {result.transfer_method} to {result.output_file}")
        return EXIT_OK

    def process_directory(self, args: argparse.Namespace, config: SlimmerConfig) -> int:
        validate_source_target(args.input_path, args.target_path)

        print(f"📁 Source directory: {args.input_path}")
        print(f"📂 Target directory: {args.target_path}")
        print(f"{'🔄 Mode: Recursive' if args.recursive else '📑 Mode: Non-recursive'}")
        if args.filter_pattern:
            print(f"🔍 Filter: {args.filter_pattern}")
        self.print_configuration_info(config)

        processor = BatchProcessor(
            args.input_path,
            args.target_path,
            config,
            recursive=args.recursive,
            filter_pattern=args.filter_pattern,
            integration=self.integration,
        )
        result = processor.process()
        print_batch_summary(result)
        return EXIT_OK if result.failed == 0 else EXIT_FAILURE

    def run(self, argv: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parser = self.build_parser()
        args = parser.parse_args(argv)
        self.setup_logging(args.verbose)

        try:
            missing = check_dependencies()
            if missing:
                LOG.warning("Missing optional dependencies: %s. Stream information will be limited.", ", ".join(missing))

            target_type = determine_target_type(args.target_path)
            self.validate_paths(args.input_path, target_type, args.target_path)
            config = self.load_config(args)

            sonarr = collect_sonarr_environment()
            self.integration = sonarr if sonarr.is_present else None

            if args.input_path.is_file():
                return self.process_single_file(args, target_type, config)
            return self.process_directory(args, config)

        except KeyboardInterrupt:
            LOG.info("Operation cancelled by user")
            return EXIT_INTERRUPTED
        except DependencyError as e:
            self._report(e)
            return EXIT_FAILURE
        except ValidationError as e:
            self._report(e)
            return EXIT_USAGE
        except SlimmerError as e:
            self._report(e)
            return EXIT_FAILURE
        except OSError as e:
            self._report(e)
            return EXIT_FAILURE

    @staticmethod
    def _report(error: Exception) -> None:
        LOG.error("❌ %s", error)
        hint = suggest_solution(str(error))
        if hint:
            LOG.error("💡 %s", hint)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    cli = SlimmerCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
