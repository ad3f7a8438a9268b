"""
Tests for pr_commenter/comment_writer.py
"""

import pytest
from unittest.mock import Mock

import requests

from pr_commenter.comment_set import ExistingCommentSet, compute_fingerprint
from pr_commenter.comment_writer import CommentWriter
from pr_commenter.diff_index import DiffIndex
from pr_commenter.github_client import (
    AuthenticationError,
    CommentNotValidError,
    GitHubClientError,
    RateLimitError,
)
from pr_commenter.models import OutcomeKind, PostedComment


class TestCommentWriter:
    """Tests for CommentWriter.write."""

    @pytest.fixture
    def client(self):
        client = Mock()
        client.create_review_comment.return_value = {'id': 99}
        return client

    @pytest.fixture
    def existing(self):
        return ExistingCommentSet()

    @pytest.fixture
    def writer(self, client, pr_details, main_go_patch, existing):
        diff_index = DiffIndex.build({'main.go': main_go_patch})
        return CommentWriter(client, pr_details, diff_index, existing)

    def test_posts_multi_line_comment(self, writer, client, pr_details, existing):
        outcome = writer.write('main.go', 12, 13, 'X')

        assert outcome.kind is OutcomeKind.POSTED
        assert outcome.diff_position == 4
        assert outcome.error is None

        client.create_review_comment.assert_called_once()
        args, kwargs = client.create_review_comment.call_args
        assert args == (pr_details,)
        assert kwargs['path'] == 'main.go'
        assert kwargs['position'] == 4
        assert kwargs['start_line'] == 12
        assert kwargs['line'] == 13
        assert kwargs['body'].startswith('X\n<!-- pr-commenter:fingerprint=')

        posted = existing.get(('main.go', 12, 13, compute_fingerprint('X')))
        assert posted.comment_id == 99
        assert posted.diff_position == 4
        assert posted.commit_id == pr_details.head_sha

    def test_single_line_comment_has_no_start_line(self, writer, client):
        outcome = writer.write('main.go', 15, 15, 'X')

        assert outcome.kind is OutcomeKind.POSTED
        kwargs = client.create_review_comment.call_args.kwargs
        assert kwargs['start_line'] is None
        assert kwargs['position'] == 7

    def test_marker_can_be_disabled(self, client, pr_details, main_go_patch):
        writer = CommentWriter(
            client, pr_details, DiffIndex.build({'main.go': main_go_patch}),
            ExistingCommentSet(), embed_fingerprint_marker=False
        )
        writer.write('main.go', 12, 12, 'plain')
        assert client.create_review_comment.call_args.kwargs['body'] == 'plain'

    def test_second_write_is_duplicate(self, writer, client):
        assert writer.write('main.go', 12, 13, 'X').kind is OutcomeKind.POSTED
        outcome = writer.write('main.go', 12, 13, '  X  ')

        assert outcome.kind is OutcomeKind.DUPLICATE
        assert client.create_review_comment.call_count == 1

    def test_existing_comment_is_duplicate_without_network(self, client, pr_details, main_go_patch):
        existing = ExistingCommentSet([
            PostedComment('main.go', 12, 13, compute_fingerprint('X'))
        ])
        writer = CommentWriter(client, pr_details, DiffIndex.build({'main.go': main_go_patch}), existing)

        outcome = writer.write('main.go', 12, 13, 'X')

        assert outcome.kind is OutcomeKind.DUPLICATE
        client.create_review_comment.assert_not_called()

    def test_line_outside_diff_rejected(self, writer, client):
        outcome = writer.write('main.go', 30, 30, 'X')

        assert outcome.kind is OutcomeKind.REJECTED
        assert outcome.error is None
        client.create_review_comment.assert_not_called()

    def test_unchanged_file_rejected(self, writer, client):
        outcome = writer.write('README.md', 1, 1, 'X')
        assert outcome.kind is OutcomeKind.REJECTED
        client.create_review_comment.assert_not_called()

    def test_rejected_is_not_remembered(self, writer, existing):
        writer.write('main.go', 30, 30, 'X')
        assert len(existing) == 0

    @pytest.mark.parametrize("start,end", [(13, 12), (0, 1), (1, 0)])
    def test_invalid_range_rejected(self, writer, client, start, end):
        outcome = writer.write('main.go', start, end, 'X')
        assert outcome.kind is OutcomeKind.REJECTED
        assert "invalid range" in outcome.reason
        client.create_review_comment.assert_not_called()

    def test_remote_not_in_diff_is_rejected(self, writer, client, existing):
        client.create_review_comment.side_effect = CommentNotValidError(
            "main.go: pull request review thread line must be part of the diff"
        )

        outcome = writer.write('main.go', 12, 13, 'X')

        assert outcome.kind is OutcomeKind.REJECTED
        assert outcome.error is None
        assert outcome.diff_position == 4
        assert len(existing) == 0

    @pytest.mark.parametrize("error", [
        AuthenticationError("bad token"),
        RateLimitError("slow down"),
        GitHubClientError("HTTP 502"),
        requests.exceptions.ConnectionError("network down"),
    ])
    def test_other_errors_fail_with_cause(self, writer, client, existing, error):
        client.create_review_comment.side_effect = error

        outcome = writer.write('main.go', 12, 13, 'X')

        assert outcome.kind is OutcomeKind.FAILED
        assert outcome.is_failure
        assert outcome.error is error
        assert len(existing) == 0

    def test_failed_write_can_be_retried(self, writer, client):
        client.create_review_comment.side_effect = [GitHubClientError("HTTP 500"), {'id': 1}]

        assert writer.write('main.go', 12, 13, 'X').kind is OutcomeKind.FAILED
        assert writer.write('main.go', 12, 13, 'X').kind is OutcomeKind.POSTED

    def test_non_dict_response_still_recorded(self, writer, client, existing):
        client.create_review_comment.return_value = None

        outcome = writer.write('main.go', 12, 12, 'X')

        assert outcome.kind is OutcomeKind.POSTED
        assert existing.contains('main.go', 12, 12, compute_fingerprint('X'))
