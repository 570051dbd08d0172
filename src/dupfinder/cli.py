#!/usr/bin/env python3
"""
DupFinder CLI: command line interface for duplicate file detection.
Runs the four-stage verification pipeline and prints, exports or acts on the groups.
Deletion is never permanent from here: --keep-one moves files to the system trash,
--delete-script only writes a script for the user to review.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import re
import sys
import time
from pathlib import Path
from typing import Optional, NoReturn

from dupfinder.core.errors import FatalError
from dupfinder.core.models import DeduplicationParams, DeduplicationResult
from dupfinder.commands import DeduplicationCommand
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.utils.path_format import PathFormatter
from dupfinder.services.file_service import FileService
from dupfinder.services.duplicate_service import DuplicateService
from dupfinder.services.report_service import ReportService
from dupfinder.services.script_service import ScriptService
from dupfinder.aliases import (
    HASH_ALIASES, HASH_CHOICES, HASH_HELP_TEXT,
    PATTERN_HELP_TEXT, REGEX_HELP_TEXT, EPILOG_TEXT
)

SEPARATOR = "=" * 70
LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding='utf-8')
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupfinder",
            description="DupFinder: find byte-identical files with 4-stage verification",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "path",
            nargs="?",
            default=".",
            help="Directory to scan (default: current directory)"
        )

        # Traversal options
        parser.add_argument(
            "--no-recursive", "-n",
            action="store_false",
            dest="recursive",
            help="Scan only the given directory, not its subdirectories"
        )
        parser.add_argument(
            "--follow-symlinks",
            action="store_true",
            help="Follow symbolic links (skipped by default)"
        )
        parser.add_argument(
            "--pattern", "-p",
            action="append",
            default=[],
            dest="patterns",
            metavar="GLOB",
            help=PATTERN_HELP_TEXT
        )
        parser.add_argument(
            "--regex",
            default=None,
            metavar="REGEX",
            help=REGEX_HELP_TEXT
        )
        parser.add_argument(
            "--min-size", "-m",
            default="",
            metavar="SIZE",
            help="Minimum file size (e.g., 500KB, 1MB). Default: no limit"
        )
        parser.add_argument(
            "--max-size", "-M",
            default="",
            metavar="SIZE",
            help="Maximum file size (e.g., 10MB, 1GB). Default: no limit"
        )
        parser.add_argument(
            "--skip-empty",
            action="store_true",
            help="Ignore zero-length files"
        )

        # Detection options
        parser.add_argument(
            "--hardlinks", "-H",
            action="store_true",
            help="Report hardlinks of the same file as duplicates (skipped by default)"
        )
        parser.add_argument(
            "--hash",
            choices=HASH_CHOICES,
            default="xxhash",
            dest="hash_algorithm",
            help=HASH_HELP_TEXT
        )

        # Output options
        parser.add_argument(
            "--size", "-S",
            action="store_true",
            dest="show_size",
            help="Show file sizes and potential space savings"
        )
        parser.add_argument(
            "--relative", "-R",
            action="store_true",
            help="Show paths relative to the scanned directory (default: absolute)"
        )
        parser.add_argument(
            "--json",
            metavar="FILE",
            default=None,
            help="Write a JSON report to FILE"
        )
        parser.add_argument(
            "--delete-script",
            metavar="FILE",
            default=None,
            help="Write a deletion script (bash or PowerShell) keeping the first file of each group"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show every stage, every skipped file and detailed statistics"
        )

        # Actions
        parser.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep the first file of each group and move the rest to trash. "
                 "Always shows preview before deletion for safety."
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --keep-one (for automation/scripts)"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.keep_one:
            self.error_exit("--force can only be used with --keep-one")

        # Prevent interactive confirmation in non-TTY environments
        if args.keep_one and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        root_path = Path(args.path).resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.path}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.path}")

        for size_str in (args.min_size, args.max_size):
            if size_str and not ConvertUtils.is_valid_size_format(size_str):
                self.error_exit(f"Invalid size format: '{size_str}'")

        if args.regex:
            try:
                re.compile(args.regex)
            except re.error as e:
                self.error_exit(f"Invalid regular expression '{args.regex}': {e}")

    def create_params(self, args: argparse.Namespace) -> DeduplicationParams:
        """Create DeduplicationParams from CLI arguments."""
        try:
            return DeduplicationParams.from_human_readable(
                root_dir=str(Path(args.path).resolve()),
                min_size_str=args.min_size,
                max_size_str=args.max_size,
                recursive=args.recursive,
                follow_symlinks=args.follow_symlinks,
                include_hardlinks=args.hardlinks,
                include_empty=not args.skip_empty,
                patterns=args.patterns,
                regex=args.regex,
                hash_algorithm=HASH_ALIASES.get(args.hash_algorithm, "xxhash"),
                verbose=args.verbose,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%)"
            )
            sys.stderr.flush()
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
            sys.stderr.flush()

    @staticmethod
    def stopped_flag() -> bool:
        """Check if operation should stop (placeholder for signal handling)."""
        return False

    def print_header(self, args: argparse.Namespace, params: DeduplicationParams) -> None:
        if self.quiet:
            return
        print("🔍 DupFinder - duplicate file finder")
        print(f"📂 Scan path: {params.root_dir}")
        if params.patterns:
            print(f"🔍 Glob patterns: {', '.join(params.patterns)}")
        if params.regex:
            print(f"🔍 Regex: {params.regex}")
        print(f"🔄 Recursive: {'on' if params.recursive else 'off (top level only)'}")
        if args.relative:
            print("📍 Paths: relative")
        if self.verbose:
            print("📋 Verbose mode: on")
        print()

    def run_deduplication(self, params: DeduplicationParams) -> DeduplicationResult:
        """Execute the scan and the verification pipeline."""
        command = DeduplicationCommand()
        try:
            result = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag
            )
        except FatalError as e:
            self.error_exit(str(e))

        if self.verbose:
            sys.stderr.write("\n")
            print(result.stats.print_summary())
        return result

    def output_failures(self, result: DeduplicationResult) -> None:
        """Every dropped file in verbose mode, only the failure count otherwise."""
        if self.quiet:
            return
        stats = result.stats
        if self.verbose:
            if stats.dropped:
                print(f"\n⚠️  Files left out ({len(stats.dropped)}):")
                for dropped in stats.dropped:
                    print(f"   {dropped}")
            for relation in stats.hardlinks:
                print(f"   ↪ hardlink: {relation.anchor.path} <-> {relation.linked.path}")
        elif result.failure_count:
            self.warning(f"{result.failure_count} file(s) could not be read (use --verbose for details)")

    def output_results(self, result: DeduplicationResult, formatter: PathFormatter, show_size: bool) -> None:
        """Output duplicate groups and statistics as plain text."""
        if self.quiet:
            return

        groups = result.groups
        if not groups:
            print("✅ No duplicate files found.")
            return

        print(f"\n{SEPARATOR}")
        print(f"📊 Found {len(groups)} duplicate groups")
        print(SEPARATOR)

        for idx, group in enumerate(groups, 1):
            print(f"\nGroup {idx}:")
            if show_size:
                print(f"  File size: {group.size} bytes")
            for file in group.files:
                print(f"  {formatter.display(file.path)}")

        print(f"\n{SEPARATOR}")
        print("📈 Statistics:")
        print(f"  Total duplicate files: {result.total_duplicate_files}")
        print(f"  Deletable files: {result.deletable_files} (keeping 1 per group)")
        if show_size:
            savings = result.potential_space_savings
            print(f"  Potential space savings: {ConvertUtils.bytes_to_human(savings)} ({savings} bytes)")
        print(SEPARATOR)

    def export_outputs(self, args: argparse.Namespace, params: DeduplicationParams,
                       result: DeduplicationResult) -> None:
        """Write the JSON report and/or the deletion script; failures are reported, not fatal."""
        if args.json:
            try:
                path = ReportService.export_json(
                    result, params.root_dir, args.json,
                    relative=args.relative, hash_algorithm=params.hash_algorithm,
                    include_hardlinks=params.include_hardlinks)
                if not self.quiet:
                    print(f"\n✅ JSON report saved to: {path}")
            except RuntimeError as e:
                print(f"❌ {e}", file=sys.stderr)

        if args.delete_script:
            try:
                path = ScriptService.generate(result, params.root_dir, args.delete_script)
                if not self.quiet:
                    print(f"\n✅ Deletion script written to: {path}")
                    print("   Review it carefully before running!")
                    if ScriptService.is_windows():
                        print(f"   Run: PowerShell -ExecutionPolicy Bypass -File {path}")
                    else:
                        print(f"   Run: bash {path}")
            except RuntimeError as e:
                print(f"❌ {e}", file=sys.stderr)

    def execute_keep_one(self, result: DeduplicationResult, force: bool = False) -> None:
        """Keep the first file per group, move the rest to trash. Always shows preview before deletion."""
        groups = result.groups
        if not groups:
            return

        files_to_delete = DuplicateService.keep_only_one_file_per_group(groups)
        space_saved_str = ConvertUtils.bytes_to_human(result.potential_space_savings)

        print()
        for idx, group in enumerate(groups, 1):
            print(f"📁 Group {idx} | Size: {ConvertUtils.bytes_to_human(group.size)} | Files: {len(group.files)}")
            print("-" * 60)
            print(f"   [KEEP] {group.kept.path}")
            for file in group.files[1:]:
                print(f"   [DEL]  {file.path}")
            print()

        print("=" * 60)
        print(f"Summary: Keep 1 file per group ({len(groups)} files preserved, {len(files_to_delete)} files deleted)")
        print(f"Total space saved: {space_saved_str}")
        print()

        if force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding with deletion...")
        else:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Lost interactive terminal during operation. "
                    "Use --force to proceed in non-interactive environments."
                )
            response = input(f"Are you sure you want to move {len(files_to_delete)} files to trash? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return

        print(f"\nMoving {len(files_to_delete)} files to trash...")

        def on_progress(index: int, total: int, path: str) -> None:
            if self.verbose:
                print(f"  [{index}/{total}] {os.path.basename(path)}")

        deleted_count, failed_files = FileService.move_each_to_trash(files_to_delete, on_progress)

        if failed_files:
            print(f"\n⚠️  Partial success: {deleted_count}/{len(files_to_delete)} files moved to trash.")
            print(f"Failed to delete {len(failed_files)} file(s):")
            for path, error in failed_files[:5]:
                print(f"  • {os.path.basename(path)}: {error}")
            if len(failed_files) > 5:
                print(f"  ...and {len(failed_files) - 5} more files")
        else:
            print(f"✅ Successfully moved {deleted_count} files to trash.")
            print(f"Total space saved: {space_saved_str}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    @staticmethod
    def configure_logging(verbose: bool) -> None:
        logging.basicConfig(
            level=logging.INFO if verbose else logging.ERROR,
            format=LOG_FORMAT,
            force=True
        )

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.configure_logging(self.verbose)

        self.validate_args(args)
        params = self.create_params(args)
        self.print_header(args, params)

        result = self.run_deduplication(params)
        formatter = PathFormatter(params.root_dir, relative=args.relative)

        self.output_failures(result)
        self.output_results(result, formatter, show_size=args.show_size)
        self.export_outputs(args, params, result)

        if args.keep_one:
            self.execute_keep_one(result, force=args.force)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
