#!/usr/bin/env python3
"""
keepone CLI — Command line interface for duplicate file detection and space reclamation.
All operations are safe: the newest copy of every group is kept, and deletion moves files
to the system trash unless --permanent is given.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import signal
import sys
import os
import threading
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

from keepone.core.models import DuplicateGroup, ScanParams, ScanState, ScanStats
from keepone.commands import ScanCommand
from keepone.core.sorter import GroupSorter
from keepone.utils.convert_utils import ConvertUtils
from keepone.services.duplicate_service import DuplicateService
from keepone.aliases import (
    PARTIAL_HASH_CHOICES, PARTIAL_HASH_HELP_TEXT,
    SORT_ALIASES, SORT_CHOICES, SORT_HELP_TEXT,
    TYPE_ALIASES, TYPE_CHOICES,
    EPILOG_TEXT
)

LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.command: Optional[ScanCommand] = None

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse and validate command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="keepone",
            description="keepone — find duplicate files and reclaim the space they waste",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            type=str,
            help="Input directory to scan for duplicates"
        )

        # Filtering options
        parser.add_argument(
            "--min-size", "-m",
            default="1K",
            type=str,
            metavar='',
            help="Minimum file size (e.g., 500KB, 1MB). Default: 1K"
        )
        parser.add_argument(
            "--max-size", "-M",
            default=None,
            type=str,
            metavar='',
            help="Maximum file size (e.g., 10MB, 1GB). Default: no limit"
        )
        parser.add_argument(
            "--excluded-dirs", '-e',
            nargs="+",
            default=[],
            type=str,
            metavar='',
            dest="excluded_dirs",
            help="Excluded/ignored directories (space separated)"
        )

        # Engine options
        parser.add_argument(
            "--workers", "-w",
            default=1,
            type=int,
            metavar='',
            help="Number of hashing threads. Default: 1"
        )
        parser.add_argument(
            "--partial-hash",
            choices=PARTIAL_HASH_CHOICES,
            default="sha256",
            type=str,
            dest="partial_hash",
            help=PARTIAL_HASH_HELP_TEXT
        )

        # Report options
        parser.add_argument(
            "--sort",
            choices=SORT_CHOICES,
            default="wasted",
            type=str,
            help=SORT_HELP_TEXT
        )
        parser.add_argument(
            "--type",
            choices=TYPE_CHOICES,
            default=None,
            type=str,
            dest="file_type",
            help="Only report groups of this file type"
        )
        parser.add_argument(
            "--search",
            default="",
            type=str,
            metavar='',
            help="Only report groups with a file whose name or path contains this text"
        )

        # Actions
        parser.add_argument(
            "--reclaim",
            action="store_true",
            help="Keep the newest file of every reported group and move the rest to trash. "
                 "Always shows preview before deletion for safety."
        )
        parser.add_argument(
            "--permanent",
            action="store_true",
            help="Delete permanently instead of moving to trash (requires --reclaim)"
        )

        # Output options
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --reclaim (for automation/scripts)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed statistics, progress and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.reclaim:
            self.error_exit("--force can only be used with --reclaim")

        if args.permanent and not args.reclaim:
            self.error_exit("--permanent can only be used with --reclaim")

        # Prevent interactive confirmation in non-TTY environments
        if args.reclaim and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        root_path = Path(args.input).expanduser().resolve()
        if not root_path.exists():
            self.error_exit(f"Directory not found: {args.input}")
        if not root_path.is_dir():
            self.error_exit(f"Path is not a directory: {args.input}")

        try:
            min_size = ConvertUtils.human_to_bytes(args.min_size)
            if args.max_size is not None:
                max_size = ConvertUtils.human_to_bytes(args.max_size)
                if max_size < min_size:
                    self.error_exit("Maximum size cannot be less than minimum size")
        except ValueError as e:
            self.error_exit(f"Invalid size format: {e}")

        if args.workers < 1:
            self.error_exit("--workers must be at least 1")

        for excl_dir in args.excluded_dirs:
            excl_path = Path(excl_dir).expanduser().resolve()
            if not excl_path.exists():
                self.warning(f"Excluded directory not found: {excl_dir}")
            elif not excl_path.is_dir():
                self.warning(f"Excluded path is not a directory: {excl_dir}")

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            excluded_dirs = [str(Path(item.strip()).expanduser().resolve()) for item in args.excluded_dirs]
            return ScanParams.from_human_readable(
                root_dir=str(Path(args.input).expanduser().resolve()),
                min_size_str=args.min_size,
                max_size_str=args.max_size,
                excluded_dirs=excluded_dirs,
                workers=args.workers,
                partial_algorithm=args.partial_hash,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, fraction: float, status: str) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return
        sys.stderr.write(f"\r  [{fraction * 100:5.1f}%] {status:<40}")
        sys.stderr.flush()

    def _handle_sigint(self, signum, frame) -> None:
        """First Ctrl+C cancels the scan cooperatively; a second one interrupts immediately."""
        signal.signal(signal.SIGINT, signal.default_int_handler)
        if self.command is not None:
            self.command.cancel()

    def run_scan(self, params: ScanParams, use_trash: bool = True) -> List[DuplicateGroup]:
        """Execute the scan, translating Ctrl+C into engine cancellation."""
        self.command = ScanCommand(use_trash=use_trash)
        if self.verbose:
            print(f"Finding duplicates (partial hash: {params.partial_algorithm}, workers: {params.workers})...")

        previous_handler = None
        in_main_thread = threading.current_thread() is threading.main_thread()
        if in_main_thread:
            previous_handler = signal.signal(signal.SIGINT, self._handle_sigint)

        try:
            groups, stats = self.command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
            )
        except Exception as e:
            self.error_exit(f"Scan failed: {e}")
        finally:
            if in_main_thread:
                signal.signal(signal.SIGINT, previous_handler or signal.default_int_handler)

        if self.verbose:
            sys.stderr.write("\n")
            print()
            print(stats.summary())

        if stats.state == ScanState.CANCELLED:
            print("\n⚠️  Scan cancelled by user (Ctrl+C)", file=sys.stderr)
            sys.exit(130)

        self.report_issues(stats)
        return groups

    def report_issues(self, stats: ScanStats) -> None:
        if not stats.issues or self.quiet:
            return
        self.warning(f"Skipped {len(stats.issues)} unreadable or vanished entries")
        if self.verbose:
            for issue in stats.issues[:10]:
                print(f"   • [{issue.stage}] {issue.path}: {issue.reason}", file=sys.stderr)
            if len(stats.issues) > 10:
                print(f"   • ...and {len(stats.issues) - 10} more", file=sys.stderr)

    def select_groups(self, groups: List[DuplicateGroup], args: argparse.Namespace) -> List[DuplicateGroup]:
        """Apply --type/--search filters and --sort order."""
        file_type = TYPE_ALIASES.get(args.file_type) if args.file_type else None
        filtered = DuplicateService.filter_groups(groups, search_text=args.search, file_type=file_type)
        return GroupSorter.sort_groups(filtered, SORT_ALIASES.get(args.sort))

    def output_results(self, groups: List[DuplicateGroup]) -> None:
        """Output duplicate groups as plain text in the requested order."""
        if self.quiet:
            return

        if not groups:
            print("No duplicate groups found.")
            return

        total_files = sum(len(g.files) for g in groups)
        wasted = ConvertUtils.bytes_to_human(DuplicateService.total_wasted_size(groups))
        print(f"\nFound {len(groups)} duplicate groups ({total_files} files), {wasted} wasted")

        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.file_size)
            wasted_str = ConvertUtils.bytes_to_human(group.wasted_size)
            print(f"\n📁 Group {idx} | {group.file_type.value} | Size: {size_str} | "
                  f"Files: {len(group.files)} | Wasted: {wasted_str}")

            for file in group.files:
                kept_marker = " ✅" if file.kept else ""
                modified = ConvertUtils.timestamp_to_human(file.modified)
                print(f"   {file.path} [{modified}]{kept_marker}")

    def execute_reclaim(self, groups: List[DuplicateGroup], force: bool = False) -> None:
        """Keep one file per group, trash the rest. Always shows preview before deletion."""
        if not groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return

        DuplicateService.select_all_duplicates(groups)
        files_to_delete = DuplicateService.files_to_reclaim(groups)
        if not files_to_delete:
            if not self.quiet:
                print("No files to delete.")
            return

        space_saved_str = ConvertUtils.bytes_to_human(DuplicateService.selected_size(groups))

        # Always show deletion preview before action (safety first)
        print()
        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.file_size)
            print(f"📁 Group {idx} | File size: {size_str} | Files: {len(group.files)}")
            print("-" * 60)

            kept = group.kept_file
            print(f"   [KEEP] {kept.path}")
            print(f"          Modified: {ConvertUtils.timestamp_to_human(kept.modified)} (newest copy)")

            for file in group.selected_files:
                print(f"   [DEL]  {file.path}")
                print(f"          Modified: {ConvertUtils.timestamp_to_human(file.modified)}")
            print()

        print("=" * 60)
        print(f"Summary: Keep 1 file per group ({len(groups)} files preserved, "
              f"{len(files_to_delete)} files deleted)")
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

            response = input(f"Are you sure you want to remove {len(files_to_delete)} files? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return

        print(f"\nRemoving {len(files_to_delete)} files...")
        result = self.command.reclaim(groups)

        if result.errors:
            print(f"\n⚠️  Partial success: {result.deleted_count}/{len(files_to_delete)} files removed "
                  f"({ConvertUtils.bytes_to_human(result.freed_bytes)} freed).")
            print(f"Failed to remove {len(result.errors)} file(s):")
            for error in result.errors[:5]:
                print(f"  • {os.path.basename(error.path)}: {error.kind.value}")
            if len(result.errors) > 5:
                print(f"  ...and {len(result.errors) - 5} more files")
        else:
            print(f"✅ Successfully removed {result.deleted_count} files.")
            print(f"Total space saved: {ConvertUtils.bytes_to_human(result.freed_bytes)}")

        remaining = DuplicateService.remove_files_from_groups(groups, result.removed_paths)
        if self.verbose and remaining:
            print(f"{len(remaining)} group(s) still contain duplicates.")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        logging.basicConfig(
            level=logging.DEBUG if self.verbose else logging.ERROR,
            format=LOG_FORMAT
        )

        self.validate_args(args)
        params = self.create_params(args)

        if not self.quiet:
            print(f"Scanning directory: {params.root_dir}")

        groups = self.run_scan(params, use_trash=not args.permanent)
        groups = self.select_groups(groups, args)

        if args.reclaim:
            self.execute_reclaim(groups, force=args.force)
        else:
            self.output_results(groups)

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
