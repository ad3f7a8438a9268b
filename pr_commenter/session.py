"""
Commenting session for the PR Commenter.

A Session is the composition root for one pull request: it authenticates
once, captures the head commit, loads the diff and the existing review
comments, and then writes one comment per finding through a CommentWriter.
All state is owned by the Session instance, so tests can pass in a fake
hosting client.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from .comment_set import ExistingCommentSet, compute_fingerprint
from .comment_writer import CommentWriter
from .config import Config
from .diff_index import DiffIndex
from .github_client import GitHubClient, GitHubClientError
from .models import BatchResult, CommentKey, CommentOutcome, Finding, OutcomeKind, PRDetails


logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when a session cannot be set up for a pull request."""
    pass


class Session:
    """Owns the client, diff index and comment set for one pull request."""

    def __init__(
        self,
        client,
        pr_details: PRDetails,
        diff_index: DiffIndex,
        existing_comments: ExistingCommentSet,
        config: Optional[Config] = None
    ):
        self.client = client
        self.pr_details = pr_details
        self.diff_index = diff_index
        self.existing_comments = existing_comments
        self.config = config

        embed_marker = config.commenter.embed_fingerprint_marker if config else True
        self.writer = CommentWriter(
            client, pr_details, diff_index, existing_comments,
            embed_fingerprint_marker=embed_marker
        )

    @classmethod
    def open(
        cls,
        config: Config,
        owner: str,
        repo: str,
        pull_number: int,
        client=None
    ) -> 'Session':
        """Authenticate and load everything the writer needs for one pull request.

        Raises:
            SessionError: If the pull request, its files or its comments cannot be read
        """
        client = client or GitHubClient(config.github)
        try:
            pr_details = client.get_pr_details(owner, repo, pull_number)
            return cls.for_pull_request(client, pr_details, config)
        except GitHubClientError as e:
            raise SessionError(f"Could not open session for {owner}/{repo}#{pull_number}: {e}") from e

    @classmethod
    def for_pull_request(cls, client, pr_details: PRDetails, config: Optional[Config] = None) -> 'Session':
        """Build a session for an already resolved pull request."""
        if not pr_details.head_sha:
            raise SessionError(f"PR #{pr_details.pull_number} has no head commit SHA")

        try:
            files = client.get_pr_files(pr_details)
            diff_index = DiffIndex.build({f['filename']: f.get('patch') for f in files})
            existing_comments = ExistingCommentSet.load(client, pr_details, diff_index)
        except GitHubClientError as e:
            raise SessionError(f"Could not load PR #{pr_details.pull_number}: {e}") from e

        logger.info(
            f"Opened session for {pr_details.repo_full_name}#{pr_details.pull_number} "
            f"at {pr_details.head_sha[:7]}"
        )
        return cls(client, pr_details, diff_index, existing_comments, config)

    def write_comment(self, file_path: str, start_line: int, end_line: int, body: str) -> CommentOutcome:
        """Write one review comment; never raises for a single finding."""
        try:
            result = self.writer.write(file_path, start_line, end_line, body)
        except Exception as e:
            logger.error(f"Unexpected error writing comment on {file_path}: {e}")
            result = CommentOutcome(
                file_path=file_path,
                start_line=start_line,
                end_line=end_line,
                kind=OutcomeKind.FAILED,
                reason=str(e),
                error=e
            )
        self._log_outcome(result)
        return result

    def write_finding(self, finding: Finding) -> CommentOutcome:
        return self.write_comment(finding.file_path, finding.start_line, finding.end_line, finding.body)

    def process_findings(self, findings: Iterable[Finding]) -> BatchResult:
        """Write a comment for every finding and collect the outcomes in order."""
        findings = list(findings)
        result = BatchResult(pr_details=self.pr_details, start_time=time.time())

        performance = self.config.performance if self.config else None
        if performance and performance.enable_concurrent_processing and len(findings) > 1:
            result.outcomes = self._process_concurrently(findings, performance.max_concurrent_writes)
        else:
            result.outcomes = [self.write_finding(finding) for finding in findings]

        result.end_time = time.time()
        logger.info(
            f"Processed {len(findings)} finding(s): {result.posted} posted, "
            f"{result.duplicates} duplicate, {result.rejected} not in diff, "
            f"{len(result.failures)} failed"
        )
        return result

    def _process_concurrently(self, findings: List[Finding], max_workers: int) -> List[CommentOutcome]:
        # Findings sharing a comment key go to one worker, in input order, so a
        # later twin only sees DUPLICATE once the earlier write has settled.
        groups: Dict[CommentKey, List[int]] = {}
        for index, finding in enumerate(findings):
            key = (finding.file_path, finding.start_line, finding.end_line, compute_fingerprint(finding.body))
            groups.setdefault(key, []).append(index)

        max_workers = min(max_workers, len(groups))
        logger.info(
            f"Writing {len(findings)} comments ({len(groups)} distinct) with up to {max_workers} workers"
        )

        def write_group(indices: List[int]) -> List[CommentOutcome]:
            return [self.write_finding(findings[i]) for i in indices]

        outcomes: List[Optional[CommentOutcome]] = [None] * len(findings)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            # write_finding never raises
            for indices, group_outcomes in zip(groups.values(), executor.map(write_group, groups.values())):
                for index, outcome in zip(indices, group_outcomes):
                    outcomes[index] = outcome
        return outcomes

    @staticmethod
    def _log_outcome(outcome: CommentOutcome) -> None:
        if outcome.kind is OutcomeKind.POSTED:
            logger.info(f"Writing comment to {outcome.location} (position {outcome.diff_position})")
        elif outcome.kind is OutcomeKind.DUPLICATE:
            logger.info(f"Comment already written on {outcome.location}, not writing")
        elif outcome.kind is OutcomeKind.REJECTED:
            logger.info(f"Comment not written on {outcome.location}: {outcome.reason}")
        else:
            logger.error(f"Comment on {outcome.location} failed: {outcome.reason}")

    def close(self):
        """Clean up resources."""
        close = getattr(self.client, 'close', None)
        if callable(close):
            close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
