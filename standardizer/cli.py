"""Command-line entry point: standardize every source file under a directory."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .models import RunSummary
from .pipeline import DiscoveryError, discover_files, iter_outcomes
from .report import format_outcome, format_summary, print_banner
from .rules import EXCLUDED_DIR_NAMES, TARGET_EXTENSIONS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="standardize-sources",
        description="Convert source files to UTF-8 (no BOM) with CRLF line endings",
    )
    ap.add_argument("directory", nargs="?", help="Folder to process recursively")
    return ap


def run(root: Path) -> RunSummary:
    """Process every target file under ``root``, printing one line per file."""
    files = discover_files(root)
    if not files:
        print(
            f"No matching files ({' '.join(TARGET_EXTENSIONS)}) were found in the specified "
            f"directory (excluding {', '.join(EXCLUDED_DIR_NAMES)})."
        )
        return RunSummary()

    print(f"Found {len(files)} files to process. Starting conversion...")
    print()

    summary = RunSummary()
    for outcome in iter_outcomes(files):
        print(format_outcome(outcome))
        summary = summary.record(outcome)

    print()
    print(format_summary(summary))
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    print_banner(TARGET_EXTENSIONS)

    if not args.directory:
        print("ERROR: No folder path provided.")
        parser.print_usage()
        return 2

    root = Path(args.directory)
    if not root.is_dir():
        print(f"ERROR: The specified directory does not exist: {root}")
        return 1

    try:
        run(root)
    except DiscoveryError as e:
        logger.debug("enumeration failed", exc_info=True)
        print("An unexpected error occurred:")
        print(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
