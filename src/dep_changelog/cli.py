"""Command-line entry point.

Usage:
    dep-changelog --input changelog_config.json
    cat changelog_config.json | dep-changelog

Prints the changelog manifest as JSON, or ``null`` when the dependency is
not eligible for one.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from dep_changelog.changelog import compute_changelog
from dep_changelog.logging_config import setup_logging
from dep_changelog.schemas import ChangeLogConfig


def main(argv: list[str] | None = None) -> None:
    """Read a ChangeLogConfig from a file or stdin and print the result."""
    parser = argparse.ArgumentParser(description="Dependency changelog lookup")
    parser.add_argument(
        "--input", "-i",
        type=str,
        help="Path to JSON file with the changelog config (reads stdin if omitted)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (defaults to LOG_LEVEL or INFO)",
    )
    args = parser.parse_args(argv)

    if not args.input and sys.stdin.isatty():
        parser.print_usage()
        print("Provide --input FILE or pipe JSON via stdin.")
        return

    setup_logging(log_level=args.log_level)

    if args.input:
        with open(args.input) as f:
            data = json.load(f)
    else:
        data = json.load(sys.stdin)

    config = ChangeLogConfig.model_validate(data)
    result = asyncio.run(compute_changelog(config))

    if result is None:
        print("null")
    else:
        print(result.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
