"""
Tests for pr_commenter/models.py
"""

import pytest
from dataclasses import FrozenInstanceError

from pr_commenter.models import (
    BatchResult,
    ChangeKind,
    CommentOutcome,
    DiffHunk,
    DiffLine,
    Finding,
    OutcomeKind,
    PostedComment,
    PRDetails,
)


class TestFinding:
    """Tests for Finding dataclass."""

    def test_basic_creation(self):
        finding = Finding("main.tf", 3, 5, "body")
        assert finding.file_path == "main.tf"
        assert finding.is_multi_line is True

    def test_single_line(self):
        assert Finding("main.tf", 3, 3, "body").is_multi_line is False

    def test_immutable(self):
        finding = Finding("main.tf", 3, 3, "body")
        with pytest.raises(FrozenInstanceError):
            finding.start_line = 4

    @pytest.mark.parametrize("start,end", [(0, 1), (2, 1), (-1, -1)])
    def test_invalid_range(self, start, end):
        with pytest.raises(ValueError):
            Finding("main.tf", start, end, "body")

    def test_path_required(self):
        with pytest.raises(ValueError, match="file_path"):
            Finding("", 1, 1, "body")


class TestDiffLine:
    """Tests for DiffLine dataclass."""

    def test_commentable_kinds(self):
        assert DiffLine(1, 1, ChangeKind.ADDED).is_commentable is True
        assert DiffLine(1, 1, ChangeKind.CONTEXT).is_commentable is True
        assert DiffLine(1, 1, ChangeKind.REMOVED).is_commentable is False


class TestDiffHunk:
    """Tests for DiffHunk dataclass."""

    def test_target_range(self):
        hunk = DiffHunk("main.go", 10, 5, 10, 7)
        assert hunk.target_end == 16
        assert hunk.contains_target_line(10) is True
        assert hunk.contains_target_line(16) is True
        assert hunk.contains_target_line(17) is False

    def test_empty_target(self):
        hunk = DiffHunk("gone.go", 1, 2, 0, 0)
        assert hunk.contains_target_line(0) is False
        assert hunk.contains_target_line(1) is False


class TestPostedComment:
    """Tests for PostedComment dataclass."""

    def test_key(self):
        comment = PostedComment("a.py", 1, 2, "abc", diff_position=3, comment_id=9)
        assert comment.key == ("a.py", 1, 2, "abc")


class TestPRDetails:
    """Tests for PRDetails dataclass."""

    def test_repo_full_name_property(self):
        pr = PRDetails(owner="myorg", repo="myrepo", pull_number=1)
        assert pr.repo_full_name == "myorg/myrepo"
        assert pr.head_sha is None


class TestCommentOutcome:
    """Tests for CommentOutcome dataclass."""

    def test_location_single_line(self):
        outcome = CommentOutcome("a.py", 4, 4, OutcomeKind.POSTED, diff_position=2)
        assert outcome.location == "a.py:4"
        assert outcome.is_failure is False

    def test_location_range(self):
        outcome = CommentOutcome("a.py", 4, 6, OutcomeKind.FAILED, error=RuntimeError("x"))
        assert outcome.location == "a.py:4-6"
        assert outcome.is_failure is True


class TestBatchResult:
    """Tests for BatchResult dataclass."""

    def test_counts(self):
        pr = PRDetails("o", "r", 1)
        result = BatchResult(pr_details=pr, outcomes=[
            CommentOutcome("a", 1, 1, OutcomeKind.POSTED),
            CommentOutcome("a", 2, 2, OutcomeKind.POSTED),
            CommentOutcome("a", 3, 3, OutcomeKind.DUPLICATE),
            CommentOutcome("a", 4, 4, OutcomeKind.REJECTED),
            CommentOutcome("a", 5, 5, OutcomeKind.FAILED),
        ])
        assert result.posted == 2
        assert result.duplicates == 1
        assert result.rejected == 1
        assert len(result.failures) == 1
        assert result.success is False

    def test_success_without_failures(self):
        result = BatchResult(pr_details=PRDetails("o", "r", 1))
        assert result.success is True

    def test_duration(self):
        result = BatchResult(pr_details=PRDetails("o", "r", 1), start_time=100.0)
        assert result.duration is None
        result.end_time = 102.5
        assert result.duration == 2.5
