"""
Pytest configuration and fixtures for pr_commenter tests.
"""

import pytest
import sys
import os
from typing import Any, Dict, List, Optional

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pr_commenter.models import PRDetails


# main.go: hunk @@ -10,5 +10,7 @@ covering new lines 10-16
MAIN_GO_PATCH = """@@ -10,5 +10,7 @@ func main() {
 	a := 1
 	b := 2
+	c := 3
+	d := 4
 	fmt.Println(a)
-	fmt.Println(b)
+	fmt.Println(b, c)
 	return
"""


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient used by engine tests."""

    def __init__(self, files=None, comments=None, head_sha="abc1234def"):
        self.files: Dict[str, Optional[str]] = dict(files or {})
        self.comments: List[Dict[str, Any]] = list(comments or [])
        self.head_sha = head_sha
        self.created: List[Dict[str, Any]] = []
        # 1-based create_review_comment call number -> exception to raise
        self.failures: Dict[int, Exception] = {}
        self.create_calls = 0
        self.closed = False

    def get_pr_details(self, owner, repo, pull_number):
        return PRDetails(owner=owner, repo=repo, pull_number=pull_number, head_sha=self.head_sha)

    def get_pr_files(self, pr_details):
        return [{'filename': name, 'status': 'modified', 'patch': patch} for name, patch in self.files.items()]

    def get_review_comments(self, pr_details):
        return [dict(c) for c in self.comments]

    def create_review_comment(self, pr_details, path, body, position=None, start_line=None, line=None):
        self.create_calls += 1
        error = self.failures.get(self.create_calls)
        if error is not None:
            raise error
        comment = {
            'id': 1000 + len(self.created),
            'path': path,
            'body': body,
            'position': position,
            'line': line,
            'start_line': start_line,
            'commit_id': pr_details.head_sha,
        }
        self.created.append(comment)
        # Mirror GitHub: the comment shows up in later listings
        self.comments.append(comment)
        return comment

    def close(self):
        self.closed = True


@pytest.fixture
def main_go_patch():
    return MAIN_GO_PATCH


@pytest.fixture
def fake_client():
    return FakeGitHubClient(files={'main.go': MAIN_GO_PATCH})


@pytest.fixture
def pr_details():
    return PRDetails(owner="owner", repo="repo", pull_number=42, head_sha="abc1234def")


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith(("GITHUB_", "INPUT_", "LOG_", "ENABLE_", "MAX_CONCURRENT")):
            monkeypatch.delenv(key, raising=False)
