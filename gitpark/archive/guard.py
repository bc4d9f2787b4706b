"""
Pre-flight existence checks.

The guard is the only defense against applying an operation twice or
entering an operation while a previous run's staging area is still
around. It never mutates anything.
"""

import logging
from pathlib import Path

from gitpark.core.config import ParkConfig
from gitpark.core.exceptions import PreconditionViolation
from gitpark.core.results import WorkingState

logger = logging.getLogger(__name__)


class Guard:
    """Checks staging-area and archive existence for a working root."""

    def __init__(self, root: Path, config: ParkConfig):
        self.root = Path(root).resolve()
        self.config = config

    @property
    def staging_path(self) -> Path:
        return self.root / self.config.staging_dir_name

    @property
    def archive_path(self) -> Path:
        return self.root / self.config.archive_name

    def _exists(self, path: Path) -> bool:
        # A dangling symlink still occupies the name.
        return path.exists() or path.is_symlink()

    def _require_no_staging(self) -> None:
        if self._exists(self.staging_path):
            raise PreconditionViolation(
                f"Staging area already exists: {self.staging_path}. "
                "It is probably left over from a failed run; inspect and remove it manually.",
                details={"path": str(self.staging_path)},
            )

    def check_extract(self) -> None:
        """
        Verify that an extract may start.

        Raises:
            PreconditionViolation: If the staging area or the archive exists.
        """
        self._require_no_staging()
        if self._exists(self.archive_path):
            raise PreconditionViolation(
                f"Archive already exists: {self.archive_path}. "
                "Metadata appears to be extracted already; restore it first.",
                details={"path": str(self.archive_path)},
            )
        logger.debug("Extract preconditions satisfied")

    def check_restore(self) -> None:
        """
        Verify that a restore may start.

        Raises:
            PreconditionViolation: If the archive is missing or the staging area exists.
        """
        if not self.archive_path.is_file():
            raise PreconditionViolation(
                f"Archive not found: {self.archive_path}. Nothing to restore.",
                details={"path": str(self.archive_path)},
            )
        self._require_no_staging()
        logger.debug("Restore preconditions satisfied")

    def state(self) -> WorkingState:
        """Classify the working root without touching it."""
        if self._exists(self.staging_path):
            return WorkingState.INCONSISTENT
        if self._exists(self.archive_path):
            return WorkingState.EXTRACTED
        return WorkingState.RESTORED
