"""
Command line entry point for the PR Commenter.

Reads configuration from the GitHub Actions environment, loads the findings,
opens a session for the pull request and writes one review comment per
finding. Exit status: 0 when every finding was posted, already present or
outside the diff; 1 when at least one write failed; 2 when the run could not
start at all.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from .config import Config, LoggingConfig
from .findings import FindingsError, load_findings
from .github_client import GitHubClient, GitHubClientError
from .session import Session, SessionError


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED_FINDINGS = 1
EXIT_SETUP_ERROR = 2


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger from LoggingConfig."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.level.value))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(config.format)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if config.enable_file_logging:
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_file_path,
            maxBytes=config.max_log_size,
            backupCount=config.backup_count
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def main(config: Optional[Config] = None) -> int:
    """Run the commenter for the pull request described by the environment."""
    try:
        config = config or Config.from_environment()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"The commenter failed with the following error: {e}")
        return EXIT_SETUP_ERROR

    setup_logging(config.logging)
    logger.info("Starting the github commenter...")

    client = GitHubClient(config.github)
    try:
        findings = load_findings(config.commenter.results_file, config.commenter.workspace_path)
        pr_details = client.get_pr_details_from_event(
            config.commenter.event_path, config.commenter.repository
        )
        session = Session.for_pull_request(client, pr_details, config)
    except (FindingsError, GitHubClientError, SessionError) as e:
        logger.error(f"The commenter failed with the following error: {e}")
        client.close()
        return EXIT_SETUP_ERROR

    with session:
        result = session.process_findings(findings)

    if result.failures:
        logger.error(f"There were {len(result.failures)} errors:")
        for outcome in result.failures:
            logger.error(f"{outcome.location}: {outcome.reason}")
        return EXIT_FAILED_FINDINGS

    return EXIT_OK


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
