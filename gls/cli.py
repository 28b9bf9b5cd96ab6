"""Command-line front door for gls.

Parses ls-style flags, loads configuration, and runs the tier-aware listing.
Also hosts the color legend, the plain ``ls`` passthrough and the abort
policy applied to listing failures.
"""

from __future__ import annotations

import argparse
import cProfile
import logging
import os
import subprocess
import sys
from collections.abc import Sequence
from typing import TextIO

from .columnize import Color, TableWriter, columnize_row
from .config import ListingConfig, load_listing_config
from .errors import exit_code_for_exception
from .listing import Listing, build_request

logger = logging.getLogger(__name__)

DISABLE_WRAPPER_FLAG = "--disable-wrapper"
NATIVE_LS = "ls"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def build_parser(config: ListingConfig) -> argparse.ArgumentParser:
    """Build the argument parser; ``-h`` means human sizes, so help is ``--help`` only."""
    parser = argparse.ArgumentParser(
        prog="gls",
        description="List directory contents with GPFS tape-migration state.",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit.")
    parser.add_argument("-l", "--long", action="store_true", help="Long listing.")
    parser.add_argument("-h", "--human", action="store_true", help="Human readable listing.")
    parser.add_argument("-a", "--all", action="store_true", help="Show all files including hidden files.")
    parser.add_argument(
        DISABLE_WRAPPER_FLAG,
        dest="disable_wrapper",
        action="store_true",
        help="Disable wrapper and fall back to standard ls.",
    )
    parser.add_argument(
        "-H", "--hints", action="store_true", help="Display hints about color code meanings."
    )
    parser.add_argument("-t", "--time", action="store_true", help="Sort output by time last modified.")
    parser.add_argument(
        "-n",
        "--no-color",
        action="store_true",
        help="Disable coloring and use text for storage pool location.",
    )
    hidden = config.hide_debug_flags
    parser.add_argument(
        "--cpuprof",
        metavar="PATH",
        default=None,
        help=argparse.SUPPRESS if hidden else "Enable output of CPU profiling data.",
    )
    parser.add_argument(
        "-v",
        "--debug",
        action="store_true",
        help=argparse.SUPPRESS if hidden else "Display debug information.",
    )
    parser.add_argument("paths", nargs="*", default=["."], help="Paths to list.")
    return parser


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def display_hints(stream: TextIO, config: ListingConfig) -> None:
    """Print the color legend."""
    hints = config.state_hints
    legend: list[tuple[Color, str, str]] = [
        (Color.BLUE, "Blue:", "Indicates a directory"),
        (Color.GREEN, "Green:", hints["resident"]),
        (Color.YELLOW, "Yellow:", hints["premigrated"]),
        (Color.RED, "Red:", hints["migrated"]),
        (Color.LIGHT_BLUE, "Light Blue:", "Indicates a symbolic link"),
        (
            Color.BLINKING_RED_BACKGROUND,
            "White on Red:",
            "Indicates a file resident on disk that will never be able to migrate to tape because it is too large",
        ),
    ]
    with TableWriter.standard(stream) as writer:
        for color, label, text in legend:
            writer.emit_row(columnize_row(color, 0, [label, text]))


def run_native_ls(args: Sequence[str], stream: TextIO) -> int:
    """Run plain ``ls`` without ``--disable-wrapper``, echo its output, return its exit code."""
    cmd = [NATIVE_LS, *(arg for arg in args if arg != DISABLE_WRAPPER_FLAG)]
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise SystemExit(f"Cannot run {NATIVE_LS}: {exc}") from exc
    stream.write(proc.stdout)
    stream.flush()
    return proc.returncode


def normalize_paths(paths: Sequence[str]) -> list[str]:
    """Absolute, normalized form of each input path (symlinks are not resolved)."""
    return [os.path.normpath(os.path.abspath(path)) for path in paths]


def _run_listing(listing: Listing, stream: TextIO, cpuprof_path: str | None) -> None:
    if not cpuprof_path:
        listing.run(stream)
        return
    profiler = cProfile.Profile()
    profiler.enable()
    try:
        listing.run(stream)
    finally:
        profiler.disable()
        profiler.dump_stats(cpuprof_path)
        logger.debug("Wrote CPU profile to %s", cpuprof_path)


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and print the listing.

    Listing failures abort the whole run. With ``suppress_stack_trace``
    configured (the default) the reason is printed as ``Aborting: ...`` and
    the process exits non-zero; otherwise the exception propagates.
    """
    raw_args = list(sys.argv[1:] if argv is None else argv)
    config = load_listing_config()
    parser = build_parser(config)
    args = parser.parse_args(raw_args)
    configure_logging(args.debug)

    if args.hints:
        display_hints(sys.stdout, config)
        return

    if args.disable_wrapper:
        raise SystemExit(run_native_ls(raw_args, sys.stdout))

    request = build_request(
        normalize_paths(args.paths),
        config,
        long=args.long,
        human=args.human,
        show_all=args.all,
        sort_by_time=args.time,
        no_color=args.no_color,
        debug=args.debug,
    )
    listing = Listing(request, config)
    try:
        _run_listing(listing, sys.stdout, args.cpuprof)
    except Exception as exc:
        if not config.suppress_stack_trace:
            raise
        sys.stdout.flush()
        print(f"Aborting: {exc}")
        raise SystemExit(exit_code_for_exception(exc)) from exc


if __name__ == "__main__":
    main()
