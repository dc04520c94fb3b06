#!/usr/bin/env python3
"""
checkdupes CLI: find probable duplicate files and act on them.
Every operation that mutates the tree shows what it will do and asks for
confirmation first (unless --force).
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, NoReturn, Optional

from checkdupes.aliases import (
    CRITERIA_HELP_TEXT, CRITERION_FLAGS, EPILOG_TEXT, OPERATION_FLAGS, OPERATIONS_HELP_TEXT
)
from checkdupes.commands import DuplicateSearchCommand, ReferenceDiffCommand
from checkdupes.core.models import (
    DuplicateGroup, FileError, FileOperation, SearchConfig, SearchParams
)
from checkdupes.core.selector import MasterSelector
from checkdupes.exceptions import (
    InvalidArgumentCombination, InvalidDirectory, NoDuplicatesFound, OperationDeclined
)
from checkdupes.services.operations import FileOperationExecutor, OperationResult
from checkdupes.services.report import ReportWriter
from checkdupes.utils.convert_utils import ConvertUtils

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)
logger = logging.getLogger(__name__)


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: int = 0
        self.quiet: bool = False
        self.force: bool = False
        self.write_reports: bool = True

        # Undecodable file names are escaped on the console
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8', errors='backslashreplace')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="checkdupes",
            description="checkdupes: find probable duplicate files by metadata and content",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument("target", type=str, help="Target directory to search for duplicates")

        # Search depth
        depth = parser.add_mutually_exclusive_group()
        depth.add_argument("--recursive", "-r", action="store_true",
                           help="Search all subdirectories (default)")
        depth.add_argument("--flat", "-f", action="store_true",
                           help="Search only files directly inside the target")
        depth.add_argument("--max-depth", type=int, metavar="N",
                           help="Search N levels deep (1 = same as --flat)")

        # Match criteria
        criteria = parser.add_argument_group("match operations", CRITERIA_HELP_TEXT)
        criteria.add_argument("--inode", "-I", action="store_true", help="Match hard links")
        criteria.add_argument("--size", "-s", action="store_true", help="Match by size")
        criteria.add_argument("--name", "-n", action="store_true", help="Match by name")
        criteria.add_argument("--extension", "-e", action="store_true", help="Match by extension")
        criteria.add_argument("--time", "-d", action="store_true", help="Match by modification time")
        criteria.add_argument("--headtail", "-H", action="store_true", help="Match by first/last bytes")
        criteria.add_argument("--checksum", "-c", action="store_true", help="Match by content checksum")
        criteria.add_argument("--headtail-length", type=int, default=SearchConfig.HEADTAIL_LENGTH,
                              metavar="N", help=f"Bytes read at each end (default: {SearchConfig.HEADTAIL_LENGTH})")
        criteria.add_argument("--checksum-algorithm", choices=SearchConfig.CHECKSUM_ALGORITHMS,
                              default=SearchConfig.DEFAULT_CHECKSUM_ALGORITHM,
                              help=f"Checksum algorithm (default: {SearchConfig.DEFAULT_CHECKSUM_ALGORITHM})")

        # File operations
        operations = parser.add_argument_group("file operations", OPERATIONS_HELP_TEXT)
        exclusive = operations.add_mutually_exclusive_group()
        exclusive.add_argument("--list", "-N", action="store_true", help="Only list duplicates")
        exclusive.add_argument("--soft-link", "-S", action="store_true", dest="soft_link",
                               help="Link duplicates into LINKS_TO_DUPLICATES")
        exclusive.add_argument("--move", "-M", action="store_true", help="Move duplicates into DUPLICATES")
        exclusive.add_argument("--move-back", "-B", action="store_true", dest="move_back",
                               help="Move files in DUPLICATES back")
        exclusive.add_argument("--link-extras", "-L", action="store_true", dest="link_extras",
                               help="Replace extras by hard links")
        exclusive.add_argument("--remove-extras", "-R", action="store_true", dest="remove_extras",
                               help="Remove extras (to trash unless --permanent)")
        exclusive.add_argument("--copy-uniques", "-C", type=str, metavar="REFERENCE", dest="copy_uniques",
                               help="Copy files of REFERENCE missing from target")

        # Behaviour and output
        parser.add_argument("--exclude-dirs", "-x", nargs="+", default=[], type=str, metavar="",
                            dest="excluded_dirs", help="Directories (space separated) to skip")
        parser.add_argument("--workers", type=int, default=SearchConfig.default_workers(), metavar="N",
                            help="Threads used for indexing and reading files")
        parser.add_argument("--permanent", action="store_true",
                            help="With --remove-extras: delete instead of moving to trash")
        parser.add_argument("--force", action="store_true",
                            help="Skip confirmation prompts (for automation/scripts)")
        parser.add_argument("--no-report", action="store_true", dest="no_report",
                            help="Do not write report files into the target")
        parser.add_argument("--quiet", "-q", action="store_true", help="Suppress non-essential output")
        parser.add_argument("--verbose", "-v", action="count", default=0,
                            help="Show progress and statistics (-vv for debug logging)")

        return parser.parse_args(args)

    @staticmethod
    def selected_operation(args: argparse.Namespace) -> FileOperation:
        for dest, operation in OPERATION_FLAGS.items():
            if getattr(args, dest, None):
                return operation
        return FileOperation.LIST

    def configure_logging(self) -> None:
        if self.quiet:
            level = logging.ERROR
        elif self.verbose >= 2:
            level = logging.DEBUG
        elif self.verbose == 1:
            level = logging.INFO
        else:
            level = logging.WARNING
        logging.getLogger().setLevel(level)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        root_path = Path(args.target)
        if not root_path.exists():
            raise InvalidDirectory(args.target, "Directory not found")
        if not root_path.is_dir():
            raise InvalidDirectory(args.target, "Path is not a directory")

        operation = self.selected_operation(args)
        if operation.is_destructive and not args.force:
            # Prevent interactive confirmation in non-TTY environments
            if not sys.stdin.isatty():
                raise InvalidArgumentCombination(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when running in scripts."
                )

        if operation == FileOperation.MOVE_BACK and any(getattr(args, d) for d in CRITERION_FLAGS):
            self.warning("Match options are ignored when moving files back")

        for excl_dir in args.excluded_dirs:
            if not Path(excl_dir).is_dir():
                self.warning(f"Excluded directory not found: {excl_dir}")

    def create_params(self, args: argparse.Namespace) -> SearchParams:
        """Create SearchParams from CLI arguments. Raises InvalidArgumentCombination."""
        max_depth = 1 if args.flat else args.max_depth
        criteria = [criterion for dest, criterion in CRITERION_FLAGS.items() if getattr(args, dest)]
        operation = self.selected_operation(args)

        return SearchParams(
            root_dir=str(Path(args.target).resolve()),
            criteria=criteria,
            operation=operation,
            max_depth=max_depth,
            headtail_length=args.headtail_length,
            checksum_algorithm=args.checksum_algorithm,
            excluded_dirs=[str(Path(d).resolve()) for d in args.excluded_dirs],
            reference_dir=str(Path(args.copy_uniques).resolve()) if args.copy_uniques else None,
            workers=args.workers,
            permanent=args.permanent
        )

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    @staticmethod
    def stopped_flag() -> bool:
        """Check if operation should stop (placeholder for signal handling)."""
        return False

    # =============================
    # Confirmation
    # =============================

    def confirm_action(self, prompt: str) -> bool:
        """Asks for 'yes' or 'no', a bounded number of times."""
        if self.force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding...")
            return True

        if not sys.stdin.isatty():
            self.error_exit(
                "Lost interactive terminal during operation. "
                "Use --force to proceed in non-interactive environments."
            )

        for _ in range(SearchConfig.CONFIRM_ATTEMPTS):
            response = input(f"{prompt} [yes/no]: ").strip().lower()
            if response in ("y", "yes"):
                return True
            if response in ("n", "no"):
                return False
            print("Invalid response. Please enter 'yes' or 'no'.")
        return False

    # =============================
    # Output
    # =============================

    def output_groups(self, groups: List[DuplicateGroup]) -> None:
        """Print duplicate groups in stable order."""
        if self.quiet:
            return

        total_files = sum(len(g.files) for g in groups)
        criteria = ", ".join(c.value for c in groups[0].criteria) if groups else ""
        print(f"\nFound {len(groups)} duplicate groups ({total_files} files) matching on: {criteria}")

        for idx, group in enumerate(groups, 1):
            print(f"\n📁 Group {idx} | Size: {ConvertUtils.bytes_to_human(group.size)} | Files: {len(group.files)}")
            for file in group.files:
                print(f"   {file.path}")

    def output_split(self, groups: List[DuplicateGroup], operation: FileOperation) -> None:
        """Always show which file is kept and which are touched (safety first)."""
        split = MasterSelector.split(groups)
        action = "LINK" if operation == FileOperation.HARDLINK_EXTRAS else "DEL"
        print()
        for idx, group in enumerate(groups, 1):
            master, extras = MasterSelector.select(group)
            print(f"📁 Group {idx} | Size: {ConvertUtils.bytes_to_human(group.size)} | Files: {len(group.files)}")
            print("-" * 60)
            print(f"   [KEEP] {master.path}")
            for file in extras:
                print(f"   [{action}]  {file.path}")
            print()

        print("=" * 60)
        print(f"Summary: {len(split.masters)} master files kept, {len(split.extras)} extra files")
        print(f"Space held by extras: {ConvertUtils.bytes_to_human(split.extra_bytes)}")
        print()

    def output_paths(self, title: str, paths: List[str]) -> None:
        if self.quiet:
            return
        print(f"\n{title}")
        for path in paths:
            print(f"   {path}")
        print(f"Total: {len(paths)}")

    def output_errors(self, errors: List[FileError]) -> None:
        if not errors:
            return
        print(f"\n⚠️  {len(errors)} file(s) could not be processed:", file=sys.stderr)
        for error in errors[:5]:  # Show first 5 errors
            print(f"  • {error}", file=sys.stderr)
        if len(errors) > 5:
            print(f"  ...and {len(errors) - 5} more files", file=sys.stderr)

    def output_result(self, result: OperationResult) -> None:
        self.output_errors(result.errors)
        if self.quiet:
            return
        done = result.processed_count
        total = done + len(result.errors) + result.skipped
        if result.errors:
            print(f"\n⚠️  Partial success: {done}/{total} files processed ({result.operation.value}).")
        else:
            print(f"✅ Done: {done} files processed ({result.operation.value}).")

    # =============================
    # Workflows
    # =============================

    def run_search(self, params: SearchParams) -> List[DuplicateGroup]:
        """Index and narrow; returns groups, raising NoDuplicatesFound when empty."""
        command = DuplicateSearchCommand()
        result = command.execute(
            params,
            progress_callback=self.progress_callback if self.verbose else None,
            stopped_flag=self.stopped_flag
        )
        if self.verbose:
            sys.stderr.write("\n")
            print(result.stats.print_summary())
        self.output_errors(result.errors)
        return result.groups

    def run_operation(self, params: SearchParams) -> None:
        executor = FileOperationExecutor(params.root_dir)
        reports = ReportWriter(params.root_dir)
        operation = params.operation

        if operation == FileOperation.MOVE_BACK:
            moved = executor.find_moved()
            if not moved:
                print(f"No files found in {executor.duplicates_dir}.")
                return
            self.output_paths("Files found to be moved back:", moved)
            result = executor.execute(operation, confirm=self.confirm_action)
            self.output_result(result)
            return

        if operation == FileOperation.COPY_UNIQUES:
            self.run_copy(params, executor, reports)
            return

        groups = self.run_search(params)
        self.output_groups(groups)
        if self.write_reports:
            reports.write_duplicates(f for g in groups for f in g.files)

        if operation.uses_extras:
            self.output_split(groups, operation)
            if self.write_reports:
                reports.write_split(MasterSelector.split(groups))

        if operation == FileOperation.LIST:
            return

        result = executor.execute(
            operation,
            confirm=self.confirm_action,
            groups=groups,
            permanent=params.permanent,
            progress_callback=self.progress_callback if self.verbose else None
        )
        if self.verbose:
            sys.stderr.write("\n")
        if operation == FileOperation.MOVE and self.write_reports:
            reports.write_moved(result.records)
        self.output_result(result)

    def run_copy(self, params: SearchParams, executor: FileOperationExecutor, reports: ReportWriter) -> None:
        diff = ReferenceDiffCommand().execute(
            params,
            progress_callback=self.progress_callback if self.verbose else None,
            stopped_flag=self.stopped_flag
        )
        if self.verbose:
            sys.stderr.write("\n")
            print(diff.stats.print_summary())
        self.output_errors(diff.errors)

        self.output_paths("Reference files already present in target:", [f.path for f in diff.reference_extras])
        if not diff.reference_uniques:
            print("No unique files to copy.")
            return
        self.output_paths("Unique reference files to be copied:", [f.path for f in diff.reference_uniques])

        result = executor.execute(
            FileOperation.COPY_UNIQUES,
            confirm=self.confirm_action,
            uniques=diff.reference_uniques,
            reference_root=params.reference_dir
        )
        if self.write_reports:
            reports.write_copied(result.records)
        self.output_result(result)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.force = args.force
        self.write_reports = not args.no_report
        self.configure_logging()

        try:
            self.validate_args(args)
            params = self.create_params(args)
            if not self.quiet:
                print(f"Searching directory: {params.root_dir}")
            self.run_operation(params)
        except (InvalidDirectory, InvalidArgumentCombination) as e:
            self.error_exit(str(e))
        except NoDuplicatesFound as e:
            print(str(e))
        except OperationDeclined as e:
            print(str(e))

        if self.verbose:
            print(f"\n✅ Completed in {time.time() - self.start_time:.2f} seconds")


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
