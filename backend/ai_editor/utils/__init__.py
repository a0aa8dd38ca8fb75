"""
Utils package initialization.
"""

from ai_editor.utils.helpers import (
    sanitize_input,
    truncate_text,
)

__all__ = [
    "sanitize_input",
    "truncate_text",
]
