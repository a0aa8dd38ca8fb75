"""
Utility functions and helpers.
"""

import re

MAX_INPUT_LENGTH = 50000


def sanitize_input(text: str) -> str:
    """
    Clean user-supplied text before it goes into a prompt.

    Args:
        text: Raw input.

    Returns:
        Text without null bytes, capped at MAX_INPUT_LENGTH characters, with
        runs of 10+ whitespace characters collapsed to 10 spaces.
    """
    if not isinstance(text, str):
        return ""
    sanitized = text.replace("\0", "")
    sanitized = sanitized[:MAX_INPUT_LENGTH]
    sanitized = re.sub(r"\s{10,}", " " * 10, sanitized)
    return sanitized


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate.
        max_length: Maximum length.
        suffix: Suffix to add if truncated.

    Returns:
        Truncated text.
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix
