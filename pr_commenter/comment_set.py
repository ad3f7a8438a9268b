"""
Existing review comments for the PR Commenter.

Indexes the review comments already on a pull request by
(file, start line, end line, body fingerprint) so a re-run of the pipeline
does not post the same comment twice. Comments written during the run are
recorded in the same index.
"""

import hashlib
import logging
import re
import threading
from typing import Any, Dict, Iterable, Optional

from .models import CommentKey, PostedComment, PRDetails
from .utils import normalize_whitespace


logger = logging.getLogger(__name__)

FINGERPRINT_MARKER_RE = re.compile(
    r'<!--\s*pr-commenter:fingerprint=([a-f0-9]{6,})\s*-->', re.IGNORECASE
)


def strip_fingerprint_marker(body: str) -> str:
    """Remove the hidden fingerprint marker from a comment body, if present."""
    return FINGERPRINT_MARKER_RE.sub('', body or '').rstrip()


def compute_fingerprint(body: str) -> str:
    """Whitespace-insensitive SHA-1 of a comment body."""
    normalized = normalize_whitespace(strip_fingerprint_marker(body))
    return hashlib.sha1(normalized.encode('utf-8')).hexdigest()


def append_fingerprint_marker(body: str, fingerprint: str) -> str:
    """Append a hidden HTML comment carrying the fingerprint, once."""
    if FINGERPRINT_MARKER_RE.search(body or ''):
        return body
    return f"{body}\n<!-- pr-commenter:fingerprint={fingerprint} -->"


def extract_fingerprint_marker(body: str) -> Optional[str]:
    match = FINGERPRINT_MARKER_RE.search(body or '')
    return match.group(1).lower() if match else None


class ExistingCommentSet:
    """Append-only, thread-safe index of review comments on one pull request."""

    def __init__(self, comments: Iterable[PostedComment] = ()):
        self._lock = threading.Lock()
        self._comments: Dict[CommentKey, Optional[PostedComment]] = {}
        for comment in comments:
            self._comments[comment.key] = comment

    @classmethod
    def load(cls, client, pr_details: PRDetails, diff_index=None) -> 'ExistingCommentSet':
        """Fetch every review comment on the pull request and index it.

        Args:
            client: Hosting client exposing ``get_review_comments(pr_details)``
            pr_details: The pull request to read
            diff_index: Optional DiffIndex used to derive the line of comments
                that only carry a diff position
        """
        comment_set = cls()
        raw_comments = client.get_review_comments(pr_details)
        skipped = 0
        for raw in raw_comments:
            posted = cls._from_api(raw, diff_index)
            if posted is None:
                skipped += 1
                continue
            comment_set._comments[posted.key] = posted

            # Comments from earlier runs carry the fingerprint they were
            # posted with; index it too in case the body was edited.
            embedded = extract_fingerprint_marker(raw.get('body', ''))
            if embedded and embedded != posted.body_fingerprint:
                alias = PostedComment(
                    file_path=posted.file_path,
                    start_line=posted.start_line,
                    end_line=posted.end_line,
                    body_fingerprint=embedded,
                    diff_position=posted.diff_position,
                    comment_id=posted.comment_id,
                    commit_id=posted.commit_id,
                )
                comment_set._comments[alias.key] = alias

        logger.info(
            f"Loaded {len(comment_set)} existing review comment key(s) for PR "
            f"#{pr_details.pull_number} ({skipped} skipped)"
        )
        return comment_set

    @staticmethod
    def _from_api(raw: Dict[str, Any], diff_index=None) -> Optional[PostedComment]:
        path = raw.get('path')
        if not path:
            return None

        position = raw.get('position')
        if position is None:
            position = raw.get('original_position')

        end_line = raw.get('line') or raw.get('original_line')
        if not end_line and position is not None and diff_index is not None:
            end_line = diff_index.line_for_position(path, position)
        if not end_line:
            logger.debug(f"Could not derive a line for existing comment {raw.get('id')} on {path}")
            return None

        start_line = raw.get('start_line') or raw.get('original_start_line') or end_line

        return PostedComment(
            file_path=path,
            start_line=int(start_line),
            end_line=int(end_line),
            body_fingerprint=compute_fingerprint(raw.get('body', '')),
            diff_position=position,
            comment_id=raw.get('id'),
            commit_id=raw.get('commit_id'),
        )

    def contains(self, file_path: str, start_line: int, end_line: int, body_fingerprint: str) -> bool:
        with self._lock:
            return (file_path, start_line, end_line, body_fingerprint) in self._comments

    def reserve(self, key: CommentKey) -> bool:
        """Claim a key before writing. Returns False if it is already present.

        Check and claim happen under one lock so two concurrent writers can
        never both see the key as absent.
        """
        with self._lock:
            if key in self._comments:
                return False
            self._comments[key] = None
            return True

    def release(self, key: CommentKey) -> None:
        """Drop a reservation whose write did not happen."""
        with self._lock:
            if key in self._comments and self._comments[key] is None:
                del self._comments[key]

    def record(self, comment: PostedComment) -> None:
        """Add a successfully written comment. Does not touch the remote side."""
        with self._lock:
            self._comments[comment.key] = comment

    def get(self, key: CommentKey) -> Optional[PostedComment]:
        with self._lock:
            return self._comments.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._comments)
