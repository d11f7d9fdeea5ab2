"""Application entry point and orchestration for reposcan."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence

from . import __version__
from .align import scan_repositories
from .cli import parse_args
from .config import load_config, split_repo_name
from .errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
    PulseRangeError,
)
from .github_client import GitHubClient
from .models import RepositorySnapshot
from .report import write_reports

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_AUTHENTICATION_ERROR = 3
EXIT_API_ERROR = 4
EXIT_DATA_ERROR = 5


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def orchestrate_scan(argv: Optional[Sequence[str]] = None) -> int:
    """Run a complete scan and return a process exit code.

    Steps: load configuration and token, fetch every configured repository,
    compute aligned pulse metrics and write the CSV reports.
    """
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)
        logger.info("reposcan v%s", __version__)

        config = load_config(config_path=args.config, token_file=args.token_file)
        client = GitHubClient(token=config.token)

        snapshots: List[RepositorySnapshot] = []
        for repo_name in config.repos:
            org, repo = split_repo_name(repo_name)
            snapshots.append(client.fetch_repository(org, repo))

        result = scan_repositories(snapshots, config.settings)
        write_reports(args.output_dir, result)

        logger.info("done.")
        return EXIT_SUCCESS
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION_ERROR
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION_ERROR
    except ApiError as exc:
        logger.error("GitHub API error: %s", exc)
        return EXIT_API_ERROR
    except (DataValidationError, PulseRangeError) as exc:
        logger.error("Cannot compute pulse metrics: %s", exc)
        return EXIT_DATA_ERROR
    except OSError as exc:
        logger.error("Cannot write reports: %s", exc)
        return EXIT_UNEXPECTED_ERROR
    except Exception:
        logger.exception("Unexpected error while scanning repositories")
        return EXIT_UNEXPECTED_ERROR


def main() -> int:
    """Console script entry point."""
    return orchestrate_scan()


if __name__ == "__main__":
    sys.exit(main())
