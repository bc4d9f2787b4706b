"""
gitpark - park nested VCS metadata in a sidecar archive.

Moves the repository directories and marker files of nested
repositories out of a working tree into a single archive, and
restores them to their original locations later.
"""

__version__ = "1.0.0"
__author__ = "gitpark"
