#!/usr/bin/env python3
"""
redup CLI — Command line interface for finding duplicate files by hashing their contents.
Drives the concurrent core pipeline and renders its result as text, CSV or SQLite.
Nothing is ever deleted or modified; redup only reports.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import signal
import sys
import threading
import time
from typing import List, NoReturn, Optional

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
try:
    import xxhash  # noqa: F401
except ImportError:
    print("❌ Missing required dependency: xxhash", file=sys.stderr)
    print("   pip install xxhash", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from redup import __version__
from redup.aliases import EPILOG_TEXT, FORMAT_ALIASES, FORMAT_CHOICES, FORMAT_HELP_TEXT
from redup.commands import ScanCommand
from redup.core.models import OutputFormat, PipelineConfig, RedupError, ScanParams, ScanResult
from redup.services.file_service import FileService
from redup.services.output_service import OutputService
from redup.utils.convert_utils import ConvertUtils


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.command = ScanCommand()

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="redup",
            description="redup is a tool for finding duplicate files",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "roots",
            nargs="*",
            metavar="DIR",
            help="Directories (or files) to recursively search"
        )
        parser.add_argument(
            "--stdin",
            action="store_true",
            help="Read file paths from standard input, one per line (pipe ls output)"
        )

        # Output options
        parser.add_argument(
            "--output", "-o",
            type=str,
            default=None,
            metavar="FILE",
            help="The filepath of output (Default: print to stdout)"
        )
        parser.add_argument(
            "--format", "-f",
            choices=FORMAT_CHOICES,
            default="txt",
            type=str.lower,
            metavar="FORMAT",
            dest="output_format",
            help=FORMAT_HELP_TEXT
        )

        # Pipeline tuning
        parser.add_argument(
            "--jobs", "-j",
            type=int,
            default=PipelineConfig.CONCURRENCY_LIMIT,
            metavar="N",
            help=f"Maximum files hashed at the same time. Default: {PipelineConfig.CONCURRENCY_LIMIT}"
        )
        parser.add_argument(
            "--queue-size",
            type=int,
            default=PipelineConfig.QUEUE_CAPACITY,
            metavar="K",
            help=f"Discovered paths buffered ahead of hashing. Default: {PipelineConfig.QUEUE_CAPACITY}"
        )
        parser.add_argument(
            "--chunk-size",
            type=str,
            default="8K",
            metavar="SIZE",
            help="Read size for streaming hashes (e.g., 8K, 64KB, 1M). Default: 8K"
        )

        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress output message"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed progress"
        )
        parser.add_argument(
            "--version", "-V",
            action="version",
            version=f"%(prog)s {__version__}",
            help="Show version message"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before any scanning starts."""
        if args.quiet and args.verbose:
            self.error_exit("--quiet and --verbose cannot be used together")

        if not args.roots and not args.stdin:
            self.error_exit("No directory given. Pass DIR or use --stdin (see --help)")

        if args.jobs < 1:
            self.error_exit("--jobs must be at least 1")
        if args.queue_size < 1:
            self.error_exit("--queue-size must be at least 1")

        try:
            if ConvertUtils.human_to_bytes(args.chunk_size) < 1:
                self.error_exit("--chunk-size must be at least 1 byte")
        except ValueError as e:
            self.error_exit(f"Invalid chunk size: {e}")

        output_format = FORMAT_ALIASES[args.output_format]
        if output_format == OutputFormat.SQL and not args.output:
            self.error_exit("SQL output needs a database path (use --output)")

        try:
            FileService.check_output_target(args.output)
        except (FileExistsError, FileNotFoundError) as e:
            self.error_exit(str(e))

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments (and stdin, if requested)."""
        roots: List[str] = list(args.roots)
        if args.stdin:
            roots.extend(FileService.read_path_list(sys.stdin))
            if self.verbose:
                print(f"stdin files = {len(roots) - len(args.roots)}", file=sys.stderr)

        try:
            return ScanParams(
                roots=roots,
                concurrency=args.jobs,
                queue_capacity=args.queue_size,
                chunk_size=ConvertUtils.human_to_bytes(args.chunk_size),
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def diagnostic_sink(self, event: str, path: str, detail: Optional[str]) -> None:
        """CLI diagnostic sink - shows discovery and hashing progress in verbose mode."""
        if event == "skipped" or event == "hash_failed":
            self.warning(f"Skipped {path}: {detail}")
            return

        if not self.verbose:
            return

        if event == "searching":
            sys.stderr.write(f"Searching...\n\t{path}\n")
        elif event == "found":
            sys.stderr.write(f"\tFound file...\n\t\t{path}\n")

    def _handle_interrupt(self, signum, frame) -> None:
        """First Ctrl+C drains in-flight work and reports partial results; second aborts."""
        if self.command.is_stopped():
            raise KeyboardInterrupt
        self.warning("Interrupted: finishing files in progress (press Ctrl+C again to abort)")
        self.command.stop()

    def run_scan(self, params: ScanParams) -> ScanResult:
        """Execute the scan pipeline."""
        if self.verbose:
            print(
                f"Scanning {len(params.roots)} root(s) with {params.concurrency} workers "
                f"(chunk size: {ConvertUtils.bytes_to_human(params.chunk_size)})",
                file=sys.stderr
            )

        install_handler = threading.current_thread() is threading.main_thread()
        previous_handler = signal.signal(signal.SIGINT, self._handle_interrupt) if install_handler else None
        try:
            result = self.command.execute(params, diagnostic_sink=self.diagnostic_sink)
        except RedupError as e:
            self.error_exit(str(e))
        finally:
            if install_handler:
                signal.signal(signal.SIGINT, previous_handler)

        if self.verbose:
            print("\n" + result.stats.print_summary(), file=sys.stderr)
        if result.stats.aborted:
            self.warning("Scan was interrupted; results below are partial")
        return result

    def output_results(self, result: ScanResult, args: argparse.Namespace) -> None:
        """Render duplicate groups in the requested format to stdout or --output."""
        output_format = FORMAT_ALIASES[args.output_format]

        if output_format == OutputFormat.SQL:
            written = OutputService.write_sqlite(result, args.output)
            if not self.quiet:
                print(f"Wrote {written} duplicate groups to {args.output}")
            return

        if args.output:
            with open(args.output, "x", encoding="utf-8", newline="") as f:
                self._write_stream(result, output_format, f)
            if not self.quiet:
                print(f"Results written to {args.output}")
        else:
            self._write_stream(result, output_format, sys.stdout)

    def _write_stream(self, result: ScanResult, output_format: OutputFormat, stream) -> None:
        if output_format == OutputFormat.CSV:
            OutputService.write_csv(result, stream)
        else:
            OutputService.write_text(result, stream, quiet=self.quiet)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> int:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet

        if os.environ.get("REDUP_DEBUG") == "1":
            logging.getLogger().setLevel(logging.DEBUG)

        self.validate_args(args)
        params = self.create_params(args)

        result = self.run_scan(params)
        self.output_results(result, args)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds", file=sys.stderr)
        return 130 if result.stats.aborted else 0


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        sys.exit(app.run())
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("REDUP_DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
