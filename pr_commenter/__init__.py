"""
PR Commenter Package

Posts static-analysis findings as inline review comments on a GitHub pull
request, only on lines the pull request touches and never twice.
"""

__version__ = "1.0.0"
__author__ = "pr-commenter contributors"
__description__ = "Inline pull request review comments for static-analysis findings"

# Submodules are loaded on first attribute access so that importing the
# package (e.g. for the diff index alone) does not pull in PyGithub.

__all__ = [
    # Main classes
    'Config', 'Session', 'SessionError', 'CommentWriter',
    # Data models
    'Finding', 'PostedComment', 'PRDetails', 'CommentOutcome', 'OutcomeKind',
    'BatchResult', 'DiffHunk', 'DiffLine', 'ChangeKind',
    # Engine components
    'DiffIndex', 'DiffParsingError', 'ExistingCommentSet', 'compute_fingerprint',
    # Client classes
    'GitHubClient', 'GitHubClientError', 'CommentNotValidError',
    # Findings
    'load_findings', 'FindingsError',
]

# Lazy import map: attribute -> (module_path, attr_name)
_lazy_exports = {
    'Config': ('pr_commenter.config', 'Config'),
    'Session': ('pr_commenter.session', 'Session'),
    'SessionError': ('pr_commenter.session', 'SessionError'),
    'CommentWriter': ('pr_commenter.comment_writer', 'CommentWriter'),
    'Finding': ('pr_commenter.models', 'Finding'),
    'PostedComment': ('pr_commenter.models', 'PostedComment'),
    'PRDetails': ('pr_commenter.models', 'PRDetails'),
    'CommentOutcome': ('pr_commenter.models', 'CommentOutcome'),
    'OutcomeKind': ('pr_commenter.models', 'OutcomeKind'),
    'BatchResult': ('pr_commenter.models', 'BatchResult'),
    'DiffHunk': ('pr_commenter.models', 'DiffHunk'),
    'DiffLine': ('pr_commenter.models', 'DiffLine'),
    'ChangeKind': ('pr_commenter.models', 'ChangeKind'),
    'DiffIndex': ('pr_commenter.diff_index', 'DiffIndex'),
    'DiffParsingError': ('pr_commenter.diff_index', 'DiffParsingError'),
    'ExistingCommentSet': ('pr_commenter.comment_set', 'ExistingCommentSet'),
    'compute_fingerprint': ('pr_commenter.comment_set', 'compute_fingerprint'),
    'GitHubClient': ('pr_commenter.github_client', 'GitHubClient'),
    'GitHubClientError': ('pr_commenter.github_client', 'GitHubClientError'),
    'CommentNotValidError': ('pr_commenter.github_client', 'CommentNotValidError'),
    'load_findings': ('pr_commenter.findings', 'load_findings'),
    'FindingsError': ('pr_commenter.findings', 'FindingsError'),
}


def __getattr__(name):
    target = _lazy_exports.get(name)
    if not target:
        raise AttributeError(f"module 'pr_commenter' has no attribute '{name}'")
    module_path, attr_name = target
    try:
        module = __import__(module_path, fromlist=[attr_name])
        value = getattr(module, attr_name)
        globals()[name] = value  # cache for future access
        return value
    except ImportError as e:
        raise ImportError(f"Failed to import '{name}' from '{module_path}': {e}") from e
