"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import sys
from importlib import resources
from typing import List, Optional

from sitemap_crawler.core import CrawlStats, Crawler, FETCH_ERROR, LINK_ERROR
from sitemap_crawler.errors import InvalidSeedUrlError
from sitemap_crawler.fetch import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT

USAGE_FILENAME = "usage.txt"

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_INVALID_TARGET = 4

ERROR_LABELS = {
    FETCH_ERROR: "Pages that could not be read",
    LINK_ERROR: "Links that could not be parsed",
}


def load_usage() -> str:
    """Read the usage text shipped with the package."""
    return resources.files("sitemap_crawler").joinpath(USAGE_FILENAME).read_text(encoding="utf-8")


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total pages visited:    {stats.pages_visited}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for kind, count in sorted(stats.error_counts.items()):
            sys.stderr.write(f"  {ERROR_LABELS.get(kind, kind)}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitemap-crawler",
        description="Crawl a website from a start URL and print a tab-indented sitemap of its domain.",
    )
    parser.add_argument("-t", "--target", help="Start URL (e.g. https://example.com)")
    parser.add_argument("-u", "--usage", action="store_true", help="Show the full usage text and exit")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_S,
                        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--workers", type=positive_int, default=1,
                        help="Pages fetched in parallel (default: 1)")
    parser.add_argument("--max-pages", type=positive_int, help="Maximum pages to visit (default: no limit)")
    parser.add_argument("--verbose", action="store_true", help="Show a summary when done")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    if args.usage:
        sys.stdout.write(load_usage())
        return EXIT_OK

    if not args.target:
        sys.stderr.write(load_usage())
        return EXIT_USAGE

    with Crawler(
        timeout_s=args.timeout,
        user_agent=args.user_agent,
        workers=args.workers,
        max_pages=args.max_pages,
    ) as crawler:
        try:
            stats = crawler.crawl(args.target, sys.stdout)
        except InvalidSeedUrlError as e:
            sys.stderr.write(f"Unable to parse target URL. Target URL: \"{args.target}\" ({e.reason})\n")
            return EXIT_INVALID_TARGET

    if args.verbose:
        print_summary(stats)

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
