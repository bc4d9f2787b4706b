"""
Utility functions and helpers.
"""

from gitpark.utils.logging_config import setup_logging
from gitpark.utils.validation import validate_root

__all__ = [
    "setup_logging",
    "validate_root",
]
