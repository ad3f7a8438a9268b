"""
Shared utility functions for the PR Commenter.
"""

import re


_WHITESPACE_RE = re.compile(r'\s+')


def sanitize_text(text: str) -> str:
    """Lightly sanitize text while preserving Markdown and code formatting.

    Removes null bytes and non-printable control characters (tabs and
    newlines are kept) and trims surrounding whitespace. No HTML escaping:
    GitHub renders Markdown and escapes HTML itself.

    Args:
        text: The text to sanitize

    Returns:
        Sanitized text
    """
    if not isinstance(text, str):
        return str(text) if text is not None else ""

    cleaned = ''.join(ch for ch in text if ord(ch) >= 32 or ch in '\t\n\r')
    return cleaned.strip()


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to one space and strip the ends."""
    return _WHITESPACE_RE.sub(' ', text or '').strip()


def strip_workspace_prefix(file_path: str, workspace_path: str) -> str:
    """Make a path reported by an analysis tool relative to the repository root.

    Args:
        file_path: Path as written in the results file (absolute or relative)
        workspace_path: The CI checkout directory, e.g. ``/github/workspace``

    Returns:
        The path with the workspace prefix and any leading ``./`` removed
    """
    path = (file_path or "").replace('\\', '/')
    if workspace_path:
        prefix = workspace_path.replace('\\', '/').rstrip('/') + '/'
        path = path.replace(prefix, '')
    while path.startswith('./'):
        path = path[2:]
    return path
