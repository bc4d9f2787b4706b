"""
Selection of nested VCS metadata entries.
"""

from gitpark.selection.selector import Selector

__all__ = ["Selector"]
