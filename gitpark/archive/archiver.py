"""
Extract and restore of nested VCS metadata.

`extract` moves selected entries into the staging area, packs it into
the archive and removes the staging area. `restore` unpacks the archive
into the staging area, lays its contents back onto the working root and
removes both. Item-level failures are recorded in the report and do not
stop a run; fatal conditions raise ParkError subclasses.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Set

from gitpark.archive.codec import pack_directory, unpack_archive
from gitpark.archive.guard import Guard
from gitpark.core.config import ParkConfig
from gitpark.core.exceptions import (
    ArchiveExtractError,
    ArchivePackError,
    InvalidRootError,
    StagingError,
)
from gitpark.core.results import (
    FailureKind,
    MetadataEntry,
    OperationReport,
    PhaseResult,
    WorkingState,
)
from gitpark.selection.selector import Selector
from gitpark.utils.validation import validate_root

logger = logging.getLogger(__name__)


class Archiver:
    """
    Moves nested metadata between a working root and its archive.

    One instance serves one working root. Operations are synchronous and
    must not be run concurrently against the same root.
    """

    def __init__(self, root: Path, config: ParkConfig):
        is_valid, error = validate_root(root)
        if not is_valid:
            raise InvalidRootError(str(root), error)

        self.root = Path(root).resolve()
        self.config = config
        self.guard = Guard(self.root, config)
        self.selector = Selector(self.root, config)

    @property
    def staging_path(self) -> Path:
        return self.guard.staging_path

    @property
    def archive_path(self) -> Path:
        return self.guard.archive_path

    def state(self) -> WorkingState:
        """Report where the nested metadata currently lives."""
        return self.guard.state()

    # ------------------------------------------------------------------
    # out
    # ------------------------------------------------------------------

    def extract(self) -> OperationReport:
        """
        Park all nested metadata in the archive.

        Returns:
            Report of the run. An empty selection yields a no-op report
            and leaves the working root untouched.

        Raises:
            PreconditionViolation: If the staging area or archive exists.
            StagingError: If the staging area cannot be created.
            ArchivePackError: If packing fails. The staging area is kept.
        """
        self.guard.check_extract()

        report = OperationReport(operation="out", root=self.root)

        select = report.begin("select")
        entries = self.selector.select()
        report.entries = entries
        select.complete(selected=len(entries))

        if not entries:
            logger.info("No nested metadata found; nothing to extract")
            return report

        stage = report.begin("stage")
        moved = self._stage_entries(entries, stage)

        pack = report.begin("pack")
        if moved == 0:
            stage.fail("No metadata entry could be moved into the staging area")
            pack.skip("staging area is empty")
            cleanup = report.begin("cleanup")
            self._remove_staging(cleanup)
            cleanup.complete()
            return report

        try:
            result = pack_directory(
                self.staging_path,
                self.archive_path,
                compression_level=self.config.compression_level,
            )
        except ArchivePackError as e:
            pack.fail(str(e))
            logger.error(
                f"Packing failed; moved metadata is kept in {self.staging_path}"
            )
            raise

        report.archive_path = result.archive_path
        pack.complete(
            files_packed=result.files_packed,
            dirs_packed=result.dirs_packed,
            total_size=result.total_size,
            compressed_size=result.compressed_size,
            links_packed=result.links_packed,
        )

        cleanup = report.begin("cleanup")
        self._remove_staging(cleanup)
        cleanup.complete()

        return report

    def _stage_entries(self, entries: List[MetadataEntry], phase: PhaseResult) -> int:
        """Move entries into a fresh staging area, shallowest first."""
        try:
            self._create_staging()
        except OSError as e:
            phase.fail(str(e))
            raise StagingError(
                f"Could not create staging area {self.staging_path}: {e}",
                details={"path": str(self.staging_path), "error": str(e)},
            ) from e

        moved_dirs: Set[Path] = set()
        moved = 0
        covered = 0

        for entry in sorted(entries, key=lambda e: e.depth):
            rel = entry.relative_path

            if any(parent in moved_dirs for parent in rel.parents):
                # Already travelled with its ancestor.
                logger.debug(f"Skipping {entry}: moved with an ancestor directory")
                covered += 1
                continue

            source = self.root / rel
            destination = self.staging_path / rel

            if not source.exists() and not source.is_symlink():
                logger.warning(f"Cannot move {entry}: source no longer exists")
                phase.record_failure(FailureKind.ITEM_MOVE, rel, "source no longer exists")
                continue

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(source), str(destination))
            except (OSError, shutil.Error) as e:
                logger.warning(f"Failed to move {entry}: {e}")
                phase.record_failure(FailureKind.ITEM_MOVE, rel, e)
                continue

            logger.info(f"Moved {entry}")
            moved += 1
            if entry.is_dir:
                moved_dirs.add(rel)

        phase.complete(moved=moved, covered=covered, failed=len(phase.failures))
        return moved

    # ------------------------------------------------------------------
    # in
    # ------------------------------------------------------------------

    def restore(self) -> OperationReport:
        """
        Return parked metadata to its original locations.

        Existing files at a destination are overwritten; existing
        directories are left as they are.

        Returns:
            Report of the run, including any cleanup warnings.

        Raises:
            PreconditionViolation: If the archive is missing or the staging
                area exists.
            ArchiveExtractError: If the archive cannot be unpacked. No
                restoration is attempted.
        """
        self.guard.check_restore()

        report = OperationReport(
            operation="in", root=self.root, archive_path=self.archive_path
        )

        unpack = report.begin("unpack")
        try:
            self._create_staging()
        except OSError as e:
            unpack.fail(str(e))
            raise ArchiveExtractError(
                f"Could not create staging area {self.staging_path}: {e}",
                details={"path": str(self.staging_path), "error": str(e)},
            ) from e

        try:
            result = unpack_archive(self.archive_path, self.staging_path)
        except ArchiveExtractError as e:
            unpack.fail(str(e))
            self._discard_failed_staging()
            raise
        unpack.complete(
            files_written=result.files_written,
            dirs_created=result.dirs_created,
            links_created=result.links_created,
        )

        restore = report.begin("restore")
        self._restore_entries(restore)

        cleanup = report.begin("cleanup")
        self._remove_staging(cleanup)
        if restore.failures:
            logger.warning(
                f"Keeping {self.archive_path.name}: "
                f"{len(restore.failures)} entries were not restored"
            )
            cleanup.record_failure(
                FailureKind.CLEANUP,
                self.archive_path,
                f"archive kept because {len(restore.failures)} entries were not restored",
            )
        else:
            self._remove_archive(cleanup)
        cleanup.complete()

        return report

    def _restore_entries(self, phase: PhaseResult) -> None:
        """Lay the staging tree onto the working root."""
        files_restored = 0
        dirs_created = 0
        dirs_existing = 0

        for dirpath, dirnames, filenames in os.walk(self.staging_path):
            current = Path(dirpath)
            # Links to directories are moved as links, not recreated.
            links = [d for d in dirnames if (current / d).is_symlink()]
            dirnames[:] = sorted(d for d in dirnames if d not in links)
            rel_dir = current.relative_to(self.staging_path)

            for name in dirnames:
                rel = rel_dir / name
                destination = self.root / rel
                if destination.is_dir():
                    dirs_existing += 1
                    continue
                try:
                    destination.mkdir()
                except OSError as e:
                    logger.warning(f"Failed to create directory {rel.as_posix()}: {e}")
                    phase.record_failure(FailureKind.ITEM_MOVE, rel, e)
                    continue
                dirs_created += 1
                logger.debug(f"Created {rel.as_posix()}/")

            for name in sorted(filenames + links):
                rel = rel_dir / name
                destination = self.root / rel
                try:
                    os.replace(current / name, destination)
                except OSError as e:
                    logger.warning(f"Failed to restore {rel.as_posix()}: {e}")
                    phase.record_failure(FailureKind.ITEM_MOVE, rel, e)
                    continue
                files_restored += 1
                logger.debug(f"Restored {rel.as_posix()}")

        logger.info(
            f"Restored {files_restored} files, created {dirs_created} directories "
            f"({dirs_existing} already present)"
        )
        phase.complete(
            files_restored=files_restored,
            dirs_created=dirs_created,
            dirs_existing=dirs_existing,
            failed=len(phase.failures),
        )

    # ------------------------------------------------------------------
    # cleanup
    # ------------------------------------------------------------------

    def _create_staging(self) -> None:
        self.staging_path.mkdir()
        logger.debug(f"Created staging area {self.staging_path}")

    def _remove_staging(self, phase: PhaseResult) -> None:
        try:
            shutil.rmtree(self.staging_path)
            logger.debug(f"Removed staging area {self.staging_path}")
        except OSError as e:
            logger.warning(
                f"Could not remove staging area {self.staging_path}: {e}. Remove it manually."
            )
            phase.record_failure(FailureKind.CLEANUP, self.staging_path, e)

    def _remove_archive(self, phase: PhaseResult) -> None:
        try:
            self.archive_path.unlink()
            logger.debug(f"Removed archive {self.archive_path}")
        except OSError as e:
            logger.warning(
                f"Could not remove archive {self.archive_path}: {e}. Remove it manually."
            )
            phase.record_failure(FailureKind.CLEANUP, self.archive_path, e)

    def _discard_failed_staging(self) -> None:
        """Remove a staging area that received a failed unpack."""
        try:
            shutil.rmtree(self.staging_path)
        except OSError as e:
            logger.warning(
                f"Could not remove staging area {self.staging_path}: {e}. Remove it manually."
            )
