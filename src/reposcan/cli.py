"""Command-line argument parsing for reposcan."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from . import __version__


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a pulse scan.

    Returns:
        Parsed CLI arguments containing the config file, token file, output
        directory and verbosity.
    """
    parser = argparse.ArgumentParser(
        prog="reposcan",
        description=(
            "Generate two-week pulse metrics (open, merged and churned pull requests, "
            "normalized for team and PR size) for GitHub repositories."
        ),
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.json"),
        help="JSON configuration file (default: config.json).",
    )
    parser.add_argument(
        "--token-file",
        type=Path,
        default=Path(".token"),
        help="File holding the GitHub token when GITHUB_TOKEN is unset (default: .token).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory the CSV reports are written to (default: current directory).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)
