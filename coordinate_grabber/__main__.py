"""Command-line entry point: prompt for paths, geocode the file, print the summary."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .errors import CoordinateGrabberError
from .geocoding import GoogleMapsStrategy
from .pipeline import report_summary, run_batch
from .settings import AppSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coordinate-grabber",
        description="Geocode a tab-delimited file of Address, City, State lines.",
    )
    parser.add_argument("--input", help="Address file to read (prompted for if omitted)")
    parser.add_argument("--output", help="File to write coordinates to (prompted for if omitted)")
    parser.add_argument(
        "--maps-uri",
        help="Geocoding URI template with a {0} slot for the query; saved for later runs",
    )
    parser.add_argument("--delay", type=float, help="Seconds to pause after each request")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (0 for none)")
    parser.add_argument(
        "--encoding", help="Text encoding of the input file (default utf-8); saved for later runs"
    )
    parser.add_argument("--settings", help="Use this INI file instead of the user settings store")
    parser.add_argument(
        "--no-wait", action="store_true", help="Exit without waiting for Enter at the end"
    )
    return parser


def _prompt(message: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    try:
        answer = input(f"{message}{suffix} ").strip()
    except EOFError:
        answer = ""
    return answer or default


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings.from_file(args.settings) if args.settings else AppSettings()

    exit_code = 0
    try:
        if args.maps_uri:
            settings.maps_uri = GoogleMapsStrategy.validate_template(args.maps_uri)
        uri = settings.require_maps_uri()
        delay = args.delay if args.delay is not None else settings.rate_limit_delay
        if delay < 0:
            raise CoordinateGrabberError(f"--delay must not be negative, got {delay}")
        timeout = settings.request_timeout
        if args.timeout is not None:
            timeout = args.timeout if args.timeout > 0 else None
        delimiter = settings.delimiter
        if args.encoding:
            settings.input_encoding = args.encoding
        encoding = settings.input_encoding

        input_path = args.input or _prompt("Enter full path of data file:", settings.last_input_path)
        output_path = args.output or _prompt(
            "Enter full path to save output file to:", settings.last_output_path
        )
        if not input_path or not output_path:
            raise CoordinateGrabberError("Both an input and an output path are required")
        settings.remember_paths(input_path, output_path)
        settings.sync()

        with GoogleMapsStrategy(uri, rate_limit_delay=delay, timeout=timeout, logger=print) as strategy:
            summary = run_batch(
                input_path, output_path, strategy, delimiter=delimiter, logger=print, encoding=encoding
            )
        report_summary(summary, print)
        print()
    except (CoordinateGrabberError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        exit_code = 1

    if not args.no_wait:
        try:
            input("Press Enter to exit…")
        except EOFError:
            pass
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
