"""
Data models for the PR Commenter.

This module contains the dataclasses and enums shared by the diff index,
the existing-comment set, the comment writer and the session.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .validators import validate_line_range, validate_required_string


# (file_path, start_line, end_line, body_fingerprint)
CommentKey = Tuple[str, int, int, str]


class ChangeKind(Enum):
    """Kind of a line inside a unified diff hunk."""
    ADDED = "added"
    CONTEXT = "context"
    REMOVED = "removed"


class OutcomeKind(Enum):
    """Result of attempting to write one review comment."""
    POSTED = "posted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class Finding:
    """A static-analysis result to be posted as a review comment."""
    file_path: str
    start_line: int
    end_line: int
    body: str

    def __post_init__(self):
        validate_required_string(self.file_path, "file_path")
        validate_line_range(self.start_line, self.end_line)

    @property
    def is_multi_line(self) -> bool:
        return self.end_line > self.start_line


@dataclass(frozen=True)
class DiffLine:
    """A single line of a hunk.

    ``line_number`` is the new-file line for added and context lines and the
    old-file line for removed lines.
    """
    line_number: int
    position: int
    kind: ChangeKind
    content: str = ""

    @property
    def is_commentable(self) -> bool:
        return self.kind in (ChangeKind.ADDED, ChangeKind.CONTEXT)


@dataclass
class DiffHunk:
    """A contiguous block of changes in one file's patch."""
    file_path: str
    source_start: int
    source_lines: int
    target_start: int
    target_lines: int
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def target_end(self) -> int:
        """Last new-file line covered by this hunk (inclusive)."""
        return self.target_start + max(self.target_lines, 1) - 1

    def contains_target_line(self, line_number: int) -> bool:
        return self.target_lines > 0 and self.target_start <= line_number <= self.target_end

    @property
    def positions(self) -> List[int]:
        return [line.position for line in self.lines]


@dataclass(frozen=True)
class PostedComment:
    """A review comment present on the pull request, or written this run."""
    file_path: str
    start_line: int
    end_line: int
    body_fingerprint: str
    diff_position: Optional[int] = None
    comment_id: Optional[int] = None
    commit_id: Optional[str] = None

    @property
    def key(self) -> CommentKey:
        return (self.file_path, self.start_line, self.end_line, self.body_fingerprint)


@dataclass
class PRDetails:
    """Pull request identity plus the commit comments are anchored against."""
    owner: str
    repo: str
    pull_number: int
    head_sha: Optional[str] = None
    base_sha: Optional[str] = None
    title: str = ""

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class CommentOutcome:
    """Per-finding result returned to the caller.

    Callers should branch on ``kind``; ``error`` is only set for FAILED
    outcomes and carries the underlying exception.
    """
    file_path: str
    start_line: int
    end_line: int
    kind: OutcomeKind
    diff_position: Optional[int] = None
    reason: str = ""
    error: Optional[BaseException] = None

    @property
    def is_failure(self) -> bool:
        return self.kind is OutcomeKind.FAILED

    @property
    def location(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.file_path}:{self.start_line}"
        return f"{self.file_path}:{self.start_line}-{self.end_line}"


@dataclass
class BatchResult:
    """Aggregated outcomes of processing a batch of findings."""
    pr_details: PRDetails
    outcomes: List[CommentOutcome] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for outcome in self.outcomes if outcome.kind is kind)

    @property
    def posted(self) -> int:
        return self._count(OutcomeKind.POSTED)

    @property
    def duplicates(self) -> int:
        return self._count(OutcomeKind.DUPLICATE)

    @property
    def rejected(self) -> int:
        return self._count(OutcomeKind.REJECTED)

    @property
    def failures(self) -> List[CommentOutcome]:
        return [outcome for outcome in self.outcomes if outcome.is_failure]

    @property
    def success(self) -> bool:
        """True when no finding ended in a FAILED outcome."""
        return not self.failures

    @property
    def duration(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time
