"""
Utility functions and helpers.

Provides common utilities used across the codebase.
"""

from gitsemver.utils.logging_config import setup_logging
from gitsemver.utils.validation import validate_path, validate_tag_name

__all__ = [
    "setup_logging",
    "validate_path",
    "validate_tag_name",
]
