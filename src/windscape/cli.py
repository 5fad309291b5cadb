"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import logging
import sys

from windscape import __version__
from windscape.analysis import generate_legend_bins
from windscape.config import get_settings
from windscape.errors import WindscapeError
from windscape.flows.analyze import analyze_all
from windscape.flows.export import export_all


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="windscape",
        description="Monthly wind-speed statistics, wind/terrain correlation and legend bins",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    subparsers.add_parser("analyze", help="Compute and store all output tables")

    export_parser = subparsers.add_parser("export", help="Write stored tables as CSV")
    export_parser.add_argument(
        "--include-location",
        action="store_true",
        help="Keep point_id, lon and lat in the correlation CSV",
    )

    legend_parser = subparsers.add_parser("legend", help="Print legend bins")
    legend_parser.add_argument(
        "--min",
        dest="min_value",
        type=float,
        default=None,
        help="Lower end of the stretch (default: legend_min from settings)",
    )
    legend_parser.add_argument(
        "--max",
        dest="max_value",
        type=float,
        default=None,
        help="Upper end of the stretch (default: legend_max from settings)",
    )

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Backend: {settings.backend}")
    print(f"Region: {settings.region_name} ({settings.region_iso3})")
    print(f"Years: {settings.start_year}-{settings.end_year}")
    print(f"Data dir: {settings.data_dir}")
    return 0


def cmd_analyze(_args: argparse.Namespace) -> int:
    """Handle the 'analyze' command."""
    settings = get_settings()
    try:
        result = analyze_all(settings)
    except WindscapeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Done: {result['monthly_rows']} monthly rows, {result['correlation_rows']} samples.")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Handle the 'export' command."""
    try:
        written = export_all(get_settings(), include_location=args.include_location)
    except WindscapeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if not written:
        print("Nothing to export.", file=sys.stderr)
        return 1
    return 0


def cmd_legend(args: argparse.Namespace) -> int:
    """Handle the 'legend' command: print one line per bin."""
    settings = get_settings()
    min_value = settings.legend_min if args.min_value is None else args.min_value
    max_value = settings.legend_max if args.max_value is None else args.max_value
    try:
        bins = generate_legend_bins(min_value, max_value, settings.legend_palette)
    except WindscapeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    for b in bins:
        print(f"{b.color}  {b.label}")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "analyze": cmd_analyze,
        "export": cmd_export,
        "legend": cmd_legend,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
