"""Perch CLI — inspect how a page's controllers would be dispatched.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — declarative controller binding for HTML documents.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch scan -------------------------------------------------------
    scan_parser = subparsers.add_parser("scan", help="Show the dispatch plan for a page")
    scan_parser.add_argument("page", help="Path to an HTML file")
    scan_parser.add_argument(
        "--controllers",
        default=None,
        help="Import string for a controllers mapping or Binder (e.g. myapp:controllers)",
    )
    scan_parser.add_argument("--selector", default=None, help="Override the candidate selector")
    scan_parser.add_argument(
        "--strict",
        action="store_true",
        help="Sort elements without a priority last",
    )
    scan_parser.add_argument(
        "--run",
        action="store_true",
        help="Start the controllers after printing the plan",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "scan":
        from perch.cli._scan import run_scan

        run_scan(args)
