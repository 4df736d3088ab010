"""Argument parser construction for the linkcheck command."""

from __future__ import annotations

import argparse
from typing import List, Optional

from .urls import DEFAULT_ROOT


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkcheck",
        description=(
            "linkcheck takes a root URL and recurses down through the links it "
            "finds in the HTML pages, checking for broken links (HTTP status "
            "outside 2xx) and fragments that point at missing ids."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Exit status:
  0  no problems found
  1  broken links or missing fragments found
  2  invalid configuration or unexpected error
  3  interrupted before the crawl finished (partial report printed)

Environment:
  LINKCHECK_CRAWLERS, LINKCHECK_EXCLUDE, LINKCHECK_TIMEOUT and
  LINKCHECK_USER_AGENT provide defaults for the matching options. They may
  also be set in ./.env or ~/.config/linkcheck/.env.

Examples:
  # Check a local development server
  linkcheck

  # Check a deployed site with 8 concurrent crawlers
  linkcheck --crawlers 8 https://docs.example.com/

  # Ignore links into a known-broken area
  linkcheck --exclude https://example.com/legacy/,https://example.com/tmp/ https://example.com/

  # Machine-readable report
  linkcheck --json https://example.com/ > report.json
""",
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=None,
        help=f"Root URL to start crawling from (default: {DEFAULT_ROOT})",
    )
    parser.add_argument(
        "--crawlers",
        type=int,
        default=None,
        help="Number of concurrent crawlers (default: number of CPUs)",
    )
    parser.add_argument(
        "--exclude",
        type=str,
        default=None,
        help="Comma separated list of URL prefixes to ignore",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds, 0 to disable (default: 30)",
    )
    parser.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="User-Agent header sent with every request",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def parse_check_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
