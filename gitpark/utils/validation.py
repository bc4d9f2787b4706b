"""
Input validation utilities.
"""

import os
from pathlib import Path
from typing import Optional, Tuple


def validate_root(path) -> Tuple[bool, Optional[str]]:
    """
    Validate a working root directory.

    The root must exist, be a directory, and be readable and writable,
    since both operations create and remove entries directly in it.

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

    if not os.access(path_obj, os.R_OK | os.W_OK | os.X_OK):
        return False, f"Path is not readable and writable: {path}"

    return True, None
