"""
Comment writer for the PR Commenter.

Decides, for one finding at a time, whether a review comment should be
posted and performs the write. Every call ends in exactly one outcome:

    POSTED     the comment was created
    DUPLICATE  an equivalent comment is already on the pull request
    REJECTED   the range is not part of the diff (locally or per GitHub)
    FAILED     anything else; the error is carried on the outcome

Nothing here raises for a single finding, so a batch always runs to the end.
"""

import logging
from typing import Optional

from .comment_set import ExistingCommentSet, append_fingerprint_marker, compute_fingerprint
from .diff_index import DiffIndex
from .github_client import CommentNotValidError
from .models import CommentOutcome, OutcomeKind, PostedComment, PRDetails
from .validators import is_valid_line_range


logger = logging.getLogger(__name__)


class CommentWriter:
    """Posts at most one comment per (file, start, end, body fingerprint)."""

    def __init__(
        self,
        client,
        pr_details: PRDetails,
        diff_index: DiffIndex,
        existing_comments: ExistingCommentSet,
        embed_fingerprint_marker: bool = True
    ):
        """Initialize the writer.

        Args:
            client: Hosting client exposing ``create_review_comment``
            pr_details: Pull request, with the head SHA captured at session start
            diff_index: Index of the pull request's diff
            existing_comments: Comments already present, updated as we write
            embed_fingerprint_marker: Append a hidden fingerprint to posted bodies
        """
        self.client = client
        self.pr_details = pr_details
        self.diff_index = diff_index
        self.existing_comments = existing_comments
        self.embed_fingerprint_marker = embed_fingerprint_marker

    def write(self, file_path: str, start_line: int, end_line: int, body: str) -> CommentOutcome:
        """Write one review comment unless it is a duplicate or outside the diff."""

        def outcome(kind: OutcomeKind, position: Optional[int] = None, reason: str = "",
                    error: Optional[BaseException] = None) -> CommentOutcome:
            return CommentOutcome(
                file_path=file_path,
                start_line=start_line,
                end_line=end_line,
                kind=kind,
                diff_position=position,
                reason=reason,
                error=error
            )

        if not file_path or not is_valid_line_range(start_line, end_line):
            return outcome(OutcomeKind.REJECTED, reason=f"invalid range {start_line}-{end_line}")

        fingerprint = compute_fingerprint(body)
        key = (file_path, start_line, end_line, fingerprint)

        if not self.existing_comments.reserve(key):
            logger.debug(f"Comment already written on {file_path}:{start_line}-{end_line}")
            return outcome(OutcomeKind.DUPLICATE, reason="comment already exists")

        position = self.diff_index.resolve_range(file_path, start_line, end_line)
        if position is None:
            self.existing_comments.release(key)
            return outcome(OutcomeKind.REJECTED, reason="not part of the pull request diff")

        comment_body = body
        if self.embed_fingerprint_marker:
            comment_body = append_fingerprint_marker(body, fingerprint)

        try:
            created = self.client.create_review_comment(
                self.pr_details,
                path=file_path,
                body=comment_body,
                position=position,
                start_line=start_line if end_line > start_line else None,
                line=end_line
            )
        except CommentNotValidError as e:
            self.existing_comments.release(key)
            logger.warning(f"GitHub refused anchor {file_path}:{start_line}-{end_line}: {e}")
            return outcome(OutcomeKind.REJECTED, position, reason=str(e))
        except Exception as e:
            self.existing_comments.release(key)
            logger.error(f"Failed to write comment on {file_path}:{start_line}-{end_line}: {e}")
            return outcome(OutcomeKind.FAILED, position, reason=str(e), error=e)

        created = created if isinstance(created, dict) else {}
        self.existing_comments.record(PostedComment(
            file_path=file_path,
            start_line=start_line,
            end_line=end_line,
            body_fingerprint=fingerprint,
            diff_position=position,
            comment_id=created.get('id'),
            commit_id=self.pr_details.head_sha,
        ))
        return outcome(OutcomeKind.POSTED, position)
