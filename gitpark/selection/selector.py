"""
Selection of nested VCS metadata.

Walks a working root and collects every metadata directory or file
found below its top level. The root's own metadata and the staging
area are never selected.
"""

import logging
import os
from pathlib import Path
from typing import Iterator, List

from gitpark.core.config import ParkConfig
from gitpark.core.results import MetadataEntry

logger = logging.getLogger(__name__)


class Selector:
    """
    Finds nested metadata entries under a working root.

    Matched directories are still descended into, so entries inside a
    nested `.git` may be returned alongside the directory itself. The
    result is ordered shallowest first so that a mover handles
    ancestors before their descendants.
    """

    def __init__(self, root: Path, config: ParkConfig):
        self.root = Path(root).resolve()
        self.config = config

    def _matches(self, name: str, is_dir: bool) -> bool:
        if is_dir:
            return self.config.is_metadata_dir(name)
        return self.config.is_metadata_file(name)

    def iter_matches(self) -> Iterator[MetadataEntry]:
        """
        Yield matching entries in walk order.

        Top-level entries are skipped, and the walk does not enter the
        staging area or the root's own metadata directories.
        """
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            at_top = current == self.root

            if at_top:
                dirnames[:] = [
                    d for d in dirnames
                    if d != self.config.staging_dir_name
                    and not self.config.is_metadata_dir(d)
                ]
            dirnames.sort()

            if at_top:
                continue

            relative_dir = current.relative_to(self.root)

            for name in dirnames:
                if self._matches(name, is_dir=True):
                    yield MetadataEntry(relative_path=relative_dir / name, is_dir=True)

            for name in sorted(filenames):
                if not self._matches(name, is_dir=False):
                    continue
                if not (current / name).is_file():
                    logger.debug(f"Skipping non-regular file: {relative_dir / name}")
                    continue
                yield MetadataEntry(relative_path=relative_dir / name, is_dir=False)

    def select(self) -> List[MetadataEntry]:
        """
        Collect all nested metadata entries.

        Returns:
            Entries sorted by depth, then by relative path.
        """
        entries = sorted(
            self.iter_matches(),
            key=lambda e: (e.depth, e.relative_path.as_posix()),
        )

        logger.info(f"Selected {len(entries)} metadata entries under {self.root}")
        for entry in entries:
            logger.debug(f"  {'dir ' if entry.is_dir else 'file'} {entry}")

        return entries
