#!/usr/bin/env python3
"""
Command-line interface for the sRGB composition verifier.

This module handles the CLI-specific stuff: argument parsing, coloured
output, report files and the exit status. The checks themselves live in
verifier.py and can be imported and run programmatically.

With no arguments the verifier runs the reference vectors and the four
property sweeps and exits 0 on success, 1 on any failure. Arguments it
does not recognise are ignored.
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

from .constants import RAMP_FOREGROUND, __version__
from .config import VerifierConfig
from .imaging import save_ramp
from .report import generate_summary, write_json_report
from .verifier import (
    run_verification,
    EVENT_SECTION,
    EVENT_PASS,
    EVENT_FAIL,
    EVENT_DETAIL,
    EVENT_SUMMARY,
)

# Create Rich consoles for output and errors
console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)

BANNER = "sRGB composition verifier: palette + tRNS + gamma blend formula"

_EVENT_STYLES = {
    EVENT_SECTION: "bold cyan",
    EVENT_PASS: "green",
    EVENT_FAIL: "red",
    EVENT_DETAIL: "yellow",
    EVENT_SUMMARY: "bold",
}


def print_event(event: str, message: str) -> None:
    """Render one verifier event on the console."""
    if not message:
        console.print()
        return
    style = _EVENT_STYLES.get(event)
    text = escape(message)
    console.print(f"[{style}]{text}[/{style}]" if style else text)


class _ArgumentParser(argparse.ArgumentParser):
    """Raises on a bad value for a known option instead of exiting with status 2."""

    def error(self, message):
        raise argparse.ArgumentError(None, message)


def build_parser() -> argparse.ArgumentParser:
    """Set up the command-line argument parser."""
    parser = _ArgumentParser(
        allow_abbrev=False,
        description="Verify the sRGB-space alpha composition formula used for "
                    "palette images with transparency and gamma correction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s --quiet --summary verify.md
  %(prog)s --exhaustive --json verify.json
  %(prog)s --ramp ramp.png --ramp-foreground 200

Exit status is 0 when every check passes and 1 otherwise.
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--exhaustive",
        action="store_true",
        help="Also sweep all four properties over every input with the vectorized "
             "compositor and cross-check it against the scalar one"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print failures and summaries"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log sweep sizes and timings"
    )

    parser.add_argument(
        "--max-violations",
        type=int,
        default=None,
        metavar="N",
        help="Print at most N violation lines per property (all are still counted)"
    )

    parser.add_argument(
        "--summary",
        type=str,
        default=None,
        metavar="FILE",
        help="Write a Markdown summary of the run"
    )

    parser.add_argument(
        "--json",
        type=str,
        default=None,
        metavar="FILE",
        help="Write a JSON report of the run"
    )

    parser.add_argument(
        "--ramp",
        type=str,
        default=None,
        metavar="FILE",
        help="Write a 256x256 PNG of the formula (rows: alpha, columns: background)"
    )

    parser.add_argument(
        "--ramp-foreground",
        type=int,
        default=RAMP_FOREGROUND,
        metavar="N",
        help=f"Foreground sample for --ramp (default: {RAMP_FOREGROUND})"
    )

    return parser


def _enable_logging() -> None:
    # Configure only this package's logger so other configurations are untouched
    package_logger = logging.getLogger("srgb_compose")
    package_logger.setLevel(logging.DEBUG)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("   [VERIFY] %(message)s"))
        package_logger.addHandler(handler)


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    try:
        args, _ignored = parser.parse_known_args(argv)
    except argparse.ArgumentError as e:
        error_console.print(f"[red]Error: Invalid arguments: {escape(str(e))}[/red]")
        sys.exit(1)

    try:
        config = VerifierConfig(
            exhaustive=args.exhaustive,
            show_passes=not args.quiet,
            max_violation_lines=args.max_violations
        )
    except ValueError as e:
        error_console.print(f"[red]Error: Invalid configuration: {escape(str(e))}[/red]")
        sys.exit(1)

    if args.verbose:
        _enable_logging()

    console.print(Panel.fit(f"[bold cyan]{BANNER}[/bold cyan]", border_style="cyan"))
    console.print()

    start_time = datetime.now()
    result = run_verification(config, callback=print_event)
    end_time = datetime.now()

    # Optional artifacts
    written = []
    try:
        if args.summary:
            written.append(("Summary", generate_summary(result, args.summary, start_time, end_time)))
        if args.json:
            written.append(("JSON report", write_json_report(result, args.json)))
        if args.ramp:
            written.append(("Ramp image", save_ramp(args.ramp, args.ramp_foreground)))
    except (OSError, ValueError, TypeError) as e:
        error_console.print(f"[red]Error: Could not write output: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print()
    stats_table = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    stats_table.add_column("Label", style="bold cyan")
    stats_table.add_column("Value", style="white")
    stats_table.add_row("Checks run:", str(result.checks_run))
    stats_table.add_row("Failures:", str(result.failure_count))
    stats_table.add_row("Duration:", f"{(end_time - start_time).total_seconds():.2f} s")
    for label, path in written:
        stats_table.add_row(f"{label}:", path)
    console.print(stats_table)

    if result.passed:
        console.print(Panel.fit(
            "[bold green]SUCCESS: All tests passed.[/bold green]",
            border_style="green"
        ))
        sys.exit(0)

    console.print(Panel.fit(
        f"[bold red]FAILURE: {result.failure_count} test(s) failed.[/bold red]",
        border_style="red"
    ))
    sys.exit(1)


if __name__ == "__main__":
    main()
