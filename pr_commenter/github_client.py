"""
GitHub API client for the PR Commenter.

This module handles all GitHub API interactions: reading the pull request,
its changed files and existing review comments, and creating inline review
comments. Reads are retried on transient network errors; comment creation is
never retried because a repeated POST could post the same comment twice.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import requests
from github import (
    BadCredentialsException, Github, GithubException,
    RateLimitExceededException, UnknownObjectException
)
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import GitHubConfig
from .models import PRDetails
from .utils import sanitize_text
from .validators import validate_repository_name


logger = logging.getLogger(__name__)

# GitHub answers 422 with one of these when the anchor is not part of the diff
# (stale head commit, line force-pushed away, start line in another hunk...).
NOT_IN_DIFF_RE = re.compile(
    r"must be part of the diff"
    r"|not part of the pull request"
    r"|No commit found for SHA"
    r"|\bcommit_id\b"
    r"|part of the same hunk"
    r"|could not be resolved"
    r"|position is invalid"
    r"|outside the diff"
    r"|pull_request_review_thread\.(?:line|start_line|position|path)",
    re.IGNORECASE,
)

_TRANSIENT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""
    pass


class PRNotFoundError(GitHubClientError):
    """Exception raised when PR is not found."""
    pass


class RateLimitError(GitHubClientError):
    """Exception raised when GitHub API rate limit is exceeded."""
    pass


class AuthenticationError(GitHubClientError):
    """Exception raised when the token is rejected."""
    pass


class CommentNotValidError(GitHubClientError):
    """GitHub refused the comment because its anchor is not part of the diff."""
    pass


def is_not_part_of_diff(message: str) -> bool:
    return bool(message) and NOT_IN_DIFF_RE.search(message) is not None


class GitHubClient:
    """GitHub API client with retry logic and error classification."""

    def __init__(self, config: GitHubConfig):
        """Initialize GitHub client with configuration."""
        self.config = config
        self._client = Github(
            config.token,
            base_url=config.api_base_url,
            timeout=config.timeout,
            per_page=100,
            retry=config.max_retries
        )
        self._session = requests.Session()
        self._session.headers.update({
            'Authorization': f'Bearer {config.token}',
            'User-Agent': 'PR-Commenter/1.0',
            'Accept': 'application/vnd.github.v3+json'
        })

        logger.info("Initialized GitHub client")

    def get_pr_details_from_event(self, event_path: str, repository: str = "") -> PRDetails:
        """Resolve the pull request from a GitHub Actions event payload.

        Args:
            event_path: Path to the event JSON written by the runner
            repository: ``owner/repo``; read from the payload when empty
        """
        try:
            with open(event_path, "r") as f:
                event_data = json.load(f)
            logger.info("Successfully loaded GitHub event data")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load GitHub event data: {str(e)}")
            raise GitHubClientError(f"Failed to load event data: {str(e)}")

        pull_number = self._extract_pull_number(event_data)
        if not repository:
            repository = (event_data.get("repository") or {}).get("full_name", "")

        if not validate_repository_name(repository):
            raise GitHubClientError(f"Invalid repository name: {repository!r}")

        owner, repo = repository.split("/", 1)
        logger.info(f"Processing PR #{pull_number} in repository {repository}")
        return self.get_pr_details(owner, repo, pull_number)

    @staticmethod
    def _extract_pull_number(event_data: Dict[str, Any]) -> int:
        # Direct PR events carry "number"; comment triggers carry it on the issue.
        candidates = [
            event_data.get("number"),
            (event_data.get("pull_request") or {}).get("number"),
            (event_data.get("issue") or {}).get("number"),
        ]
        for candidate in candidates:
            if candidate is None:
                continue
            try:
                number = int(str(candidate))
            except ValueError:
                continue
            if number > 0:
                return number
        raise GitHubClientError("Event payload does not contain a pull request number")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True
    )
    def get_pr_details(self, owner: str, repo: str, pull_number: int) -> PRDetails:
        """Get pull request details, including the head commit comments anchor to."""
        logger.debug(f"Fetching PR details for {owner}/{repo}#{pull_number}")

        pr = self._get_pr(f"{owner}/{repo}", pull_number)
        pr_details = PRDetails(
            owner=owner,
            repo=repo,
            pull_number=pull_number,
            head_sha=pr.head.sha,
            base_sha=pr.base.sha,
            title=sanitize_text(pr.title or "")
        )
        logger.debug(f"Retrieved PR details: {pr_details.title} (head {str(pr_details.head_sha)[:7]})")
        return pr_details

    def _get_pr(self, repo_name: str, pull_number: int):
        try:
            repo_obj = self._client.get_repo(repo_name)
            return repo_obj.get_pull(pull_number)
        except GithubException as e:
            raise self._translate(e, f"PR #{pull_number} in {repo_name}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True
    )
    def get_pr_files(self, pr_details: PRDetails) -> List[Dict[str, Any]]:
        """List every file changed in the pull request with its patch (all pages)."""
        pr = self._get_pr(pr_details.repo_full_name, pr_details.pull_number)
        files = []
        try:
            for file in pr.get_files():
                files.append({
                    'filename': file.filename,
                    'status': file.status,
                    'patch': getattr(file, 'patch', None)
                })
        except GithubException as e:
            raise self._translate(e, f"files of PR #{pr_details.pull_number}") from e

        logger.info(f"Retrieved {len(files)} files from PR #{pr_details.pull_number}")
        return files

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True
    )
    def get_review_comments(self, pr_details: PRDetails) -> List[Dict[str, Any]]:
        """List every review comment on the pull request (all pages)."""
        pr = self._get_pr(pr_details.repo_full_name, pr_details.pull_number)
        comments = []
        try:
            for c in pr.get_review_comments():
                comments.append({
                    'id': getattr(c, 'id', None),
                    'path': getattr(c, 'path', None),
                    'body': getattr(c, 'body', '') or '',
                    'position': getattr(c, 'position', None),
                    'original_position': getattr(c, 'original_position', None),
                    'line': getattr(c, 'line', None),
                    'original_line': getattr(c, 'original_line', None),
                    'start_line': getattr(c, 'start_line', None),
                    'original_start_line': getattr(c, 'original_start_line', None),
                    'commit_id': getattr(c, 'commit_id', None),
                })
        except GithubException as e:
            raise self._translate(e, f"review comments of PR #{pr_details.pull_number}") from e

        logger.debug(f"Retrieved {len(comments)} review comments from PR #{pr_details.pull_number}")
        return comments

    def create_review_comment(
        self,
        pr_details: PRDetails,
        path: str,
        body: str,
        position: Optional[int] = None,
        start_line: Optional[int] = None,
        line: Optional[int] = None
    ) -> Dict[str, Any]:
        """Create an inline review comment anchored at the PR's head commit.

        Single-line comments are anchored by diff ``position``. A range is
        anchored by ``start_line``/``line`` on the RIGHT side, since positions
        cannot express a span.

        Raises:
            CommentNotValidError: GitHub says the anchor is not part of the diff
            AuthenticationError, RateLimitError, PRNotFoundError, GitHubClientError:
                any other failure
        """
        if not pr_details.head_sha:
            raise GitHubClientError("Head commit SHA is unknown; cannot anchor a comment")

        payload: Dict[str, Any] = {
            'body': body,
            'commit_id': pr_details.head_sha,
            'path': path,
        }
        if start_line is not None and line is not None and start_line < line:
            payload.update({
                'start_line': start_line,
                'line': line,
                'start_side': 'RIGHT',
                'side': 'RIGHT',
            })
        elif position is not None:
            payload['position'] = position
        elif line is not None:
            payload.update({'line': line, 'side': 'RIGHT'})
        else:
            raise GitHubClientError("A diff position or line is required to anchor a comment")

        api_url = (
            f"{self.config.api_base_url}/repos/{pr_details.repo_full_name}"
            f"/pulls/{pr_details.pull_number}/comments"
        )
        logger.debug(f"Creating review comment on {path}: {payload.get('position') or payload.get('line')}")

        try:
            response = self._session.post(api_url, json=payload, timeout=self.config.timeout)
        except requests.exceptions.Timeout as e:
            raise GitHubClientError(f"Timed out creating review comment on {path}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise GitHubClientError(f"Request failed creating review comment on {path}: {e}") from e

        if response.status_code in (200, 201):
            return response.json()

        message = self._response_message(response)
        status = response.status_code
        if status == 422 and is_not_part_of_diff(message):
            raise CommentNotValidError(f"{path}: {message}")
        if status == 401:
            raise AuthenticationError(f"GitHub rejected the token: {message}")
        if status == 429 or (status == 403 and "rate limit" in message.lower()):
            raise RateLimitError(f"GitHub API rate limit exceeded: {message}")
        if status == 404:
            raise PRNotFoundError(f"PR #{pr_details.pull_number} not found in {pr_details.repo_full_name}")
        raise GitHubClientError(f"Failed to create review comment on {path} (HTTP {status}): {message}")

    @staticmethod
    def _response_message(response) -> str:
        try:
            data = response.json()
        except ValueError:
            return (response.text or "")[:500]
        if not isinstance(data, dict):
            return str(data)[:500]

        parts = [str(data.get('message', ''))]
        for error in data.get('errors') or []:
            if isinstance(error, dict):
                detail = error.get('message') or error.get('code') or ''
                field = error.get('field')
                if field and detail:
                    parts.append(f"{field}: {detail}")
                else:
                    parts.append(str(field or detail or error))
            else:
                parts.append(str(error))
        return "; ".join(part for part in parts if part)

    @staticmethod
    def _translate(error: GithubException, what: str) -> GitHubClientError:
        """Map a PyGithub exception onto this module's error classes."""
        status = getattr(error, 'status', None)
        data = getattr(error, 'data', None)
        message = data.get('message', '') if isinstance(data, dict) else str(data or '')

        if isinstance(error, BadCredentialsException) or status == 401:
            return AuthenticationError(f"GitHub rejected the token while reading {what}")
        if isinstance(error, RateLimitExceededException) or (
            status == 403 and "rate limit" in message.lower()
        ):
            return RateLimitError(f"GitHub API rate limit exceeded while reading {what}")
        if isinstance(error, UnknownObjectException) or status == 404:
            return PRNotFoundError(f"{what} not found")
        return GitHubClientError(f"Failed to read {what} (HTTP {status}): {message}")

    def close(self):
        """Clean up resources."""
        if hasattr(self, '_session'):
            self._session.close()
        logger.debug("GitHub client closed")
