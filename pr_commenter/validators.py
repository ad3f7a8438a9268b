"""
Validation utilities for the PR Commenter.

Small reusable checks shared by the configuration dataclasses and the
data models.
"""


def validate_required_string(value: str, field_name: str) -> None:
    """Validate that a required string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Raises:
        ValueError: If the value is empty
    """
    if not value:
        raise ValueError(f"{field_name} is required")


def validate_positive_int(value: int, field_name: str) -> None:
    """Validate that an integer value is positive.

    Args:
        value: The integer value to validate
        field_name: Name of the field for error messages

    Raises:
        ValueError: If the value is not positive
    """
    if value <= 0:
        raise ValueError(f"{field_name} must be positive")


def validate_line_range(start_line: int, end_line: int) -> None:
    """Validate a 1-based inclusive line range.

    Args:
        start_line: First line of the range
        end_line: Last line of the range, inclusive

    Raises:
        ValueError: If either bound is below 1 or start_line > end_line
    """
    if not isinstance(start_line, int) or not isinstance(end_line, int):
        raise ValueError("start_line and end_line must be integers")
    if start_line < 1 or end_line < 1:
        raise ValueError(f"line numbers must be >= 1 (got {start_line}-{end_line})")
    if start_line > end_line:
        raise ValueError(f"start_line {start_line} is after end_line {end_line}")


def is_valid_line_range(start_line: int, end_line: int) -> bool:
    """Check a line range without raising.

    Returns:
        True if validate_line_range accepts the range, False otherwise
    """
    try:
        validate_line_range(start_line, end_line)
    except ValueError:
        return False
    return True


def validate_github_token_format(token: str) -> bool:
    """Validate GitHub token format.

    Classic tokens are 40 characters; newer tokens carry a type prefix
    (``ghp_``, ``ghs_`` for Actions installation tokens, ``github_pat_``...).

    Args:
        token: The GitHub token to validate

    Returns:
        True if token format appears valid, False otherwise
    """
    if not token or not isinstance(token, str):
        return False
    return len(token) >= 4 and (
        len(token) == 40 or
        token.startswith(('ghp_', 'ghs_', 'gho_', 'ghu_', 'github_pat_'))
    )


def validate_repository_name(full_name: str) -> bool:
    """Validate repository name format.

    Args:
        full_name: Repository name in ``owner/repo`` format

    Returns:
        True if both owner and repo parts are present, False otherwise
    """
    if not full_name or not isinstance(full_name, str):
        return False
    parts = full_name.split("/")
    return len(parts) == 2 and all(parts)


def ensure_positive_or_default(value: int, default: int) -> int:
    """Return value if positive, otherwise default.

    Args:
        value: The value to check
        default: Value to use when value is zero or negative

    Returns:
        value or default
    """
    return value if value > 0 else default
