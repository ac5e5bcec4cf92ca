"""
Input validation utilities.

Provides validation functions for repository paths and tag names.
"""

import os
import re
from pathlib import Path
from typing import Optional, Tuple

# Subset of git-check-ref-format(1) rules relevant to tag names
_INVALID_REF_CHARS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def validate_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a local filesystem path.

    Args:
        path: Path to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not path:
        return False, "Path cannot be empty"

    try:
        path_obj = Path(path).resolve()
    except (OSError, RuntimeError) as e:
        return False, f"Invalid path format: {e}"

    if not path_obj.exists():
        return False, f"Path does not exist: {path}"

    if not path_obj.is_dir():
        return False, f"Path is not a directory: {path}"

    if not os.access(path_obj, os.R_OK):
        return False, f"Path is not readable: {path}"

    return True, None


def validate_tag_name(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a tag name before handing it to git.

    Args:
        name: Tag name to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not name:
        return False, "Tag name cannot be empty"

    if _INVALID_REF_CHARS.search(name):
        return False, f"Tag name contains invalid characters: {name}"

    if name.startswith(("-", "/", ".")) or name.endswith(("/", ".", ".lock")):
        return False, f"Tag name has an invalid start or end: {name}"

    if ".." in name or "@{" in name or "//" in name:
        return False, f"Tag name contains an invalid sequence: {name}"

    return True, None
