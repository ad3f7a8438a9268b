"""
Environment variable helpers for the PR Commenter.

GitHub Actions exposes action inputs as ``INPUT_<NAME>`` while the runner
sets ``GITHUB_*`` variables, so every reader accepts a primary key followed
by fallback keys and returns the first non-empty value.
"""

import os
from enum import Enum
from typing import Optional


def get_env_str(key: str, default: str = "", *fallback_keys: str) -> str:
    """Get string value from environment with fallback keys.

    Args:
        key: Primary environment variable key
        default: Default value if not found
        *fallback_keys: Additional keys to try if primary is not found

    Returns:
        The first non-empty value found, or default
    """
    for candidate in (key,) + fallback_keys:
        value = os.environ.get(candidate, "")
        if value:
            return value
    return default


def get_env_int(key: str, default: int, *fallback_keys: str) -> int:
    """Get integer value from environment with fallback keys.

    Args:
        key: Primary environment variable key
        default: Default value if not found or conversion fails
        *fallback_keys: Additional keys to try if primary is not found

    Returns:
        The environment variable value as integer or default
    """
    value = get_env_str(key, "", *fallback_keys)
    if value:
        try:
            return int(value.strip())
        except ValueError:
            pass
    return default


def get_env_bool(key: str, default: bool, *fallback_keys: str) -> bool:
    """Get boolean value from environment.

    Recognizes 'true', 'yes', '1' as True and 'false', 'no', '0' as False
    (case-insensitive). Anything else yields the default.

    Args:
        key: Primary environment variable key
        default: Default value if not found or not recognized
        *fallback_keys: Additional keys to try if primary is not found

    Returns:
        The environment variable value as boolean or default
    """
    value = get_env_str(key, "", *fallback_keys).strip().lower()
    if value in ('true', 'yes', '1'):
        return True
    if value in ('false', 'no', '0'):
        return False
    return default


def get_env_enum(key: str, enum_class: type[Enum], default: Enum, *fallback_keys: str) -> Enum:
    """Get enum member from environment with fallback keys.

    The value may be either the member's value or its name, compared
    case-insensitively, so ``debug`` and ``DEBUG`` both select LogLevel.DEBUG.

    Args:
        key: Primary environment variable key
        enum_class: Enum class to look the value up in
        default: Default member if not found or not a valid member
        *fallback_keys: Additional keys to try if primary is not found

    Returns:
        The matching enum member or default
    """
    value = get_env_str(key, "", *fallback_keys).strip()
    if not value:
        return default
    member = _match_enum(enum_class, value)
    return member if member is not None else default


def _match_enum(enum_class: type[Enum], value: str) -> Optional[Enum]:
    lowered = value.lower()
    for member in enum_class:
        if str(member.value).lower() == lowered or member.name.lower() == lowered:
            return member
    return None
