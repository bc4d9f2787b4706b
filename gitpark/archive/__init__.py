"""
Staging, packing and restoring of nested metadata.
"""

from gitpark.archive.archiver import Archiver
from gitpark.archive.codec import PackResult, UnpackResult, pack_directory, unpack_archive
from gitpark.archive.guard import Guard

__all__ = [
    "Archiver",
    "Guard",
    "PackResult",
    "UnpackResult",
    "pack_directory",
    "unpack_archive",
]
