"""
ZIP packing and unpacking of the staging area.

The archive stores every path relative to the staging area, including
explicit entries for directories so that empty directories (common
inside `.git`) survive the round trip. File mode bits are kept in the
entries' external attributes and reapplied on unpack. Symbolic links
are stored as link members holding their target, never followed.
"""

import logging
import os
import shutil
import stat
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Set, Tuple

from gitpark.core.exceptions import ArchiveExtractError, ArchivePackError

logger = logging.getLogger(__name__)

KIND_DIR = "dir"
KIND_FILE = "file"
KIND_LINK = "link"

# Unix "made by" value for ZipInfo.create_system
_UNIX_SYSTEM = 3

# Raised by zipfile while decoding member data
_READ_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
)


@dataclass(frozen=True)
class PackResult:
    """Statistics for a packed archive."""
    archive_path: Path
    files_packed: int
    dirs_packed: int
    total_size: int
    compressed_size: int
    links_packed: int = 0


@dataclass(frozen=True)
class UnpackResult:
    """Statistics for an unpacked archive."""
    output_dir: Path
    files_written: int
    dirs_created: int
    links_created: int = 0


def _raise_walk_error(error: OSError) -> None:
    raise error


def _collect_entries(directory: Path) -> List[Tuple[Path, str, str]]:
    """
    Collect everything below directory with its archive name.

    Returns list of (filesystem_path, archive_name, kind) tuples in
    top-down walk order. An unreadable directory raises OSError rather
    than being left out.
    """
    entries = []
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise_walk_error):
        dirnames.sort()
        current = Path(dirpath)
        for name in dirnames:
            path = current / name
            rel = path.relative_to(directory).as_posix()
            if path.is_symlink():
                entries.append((path, rel, KIND_LINK))
            else:
                entries.append((path, rel + "/", KIND_DIR))
        for name in sorted(filenames):
            path = current / name
            rel = path.relative_to(directory).as_posix()
            entries.append((path, rel, KIND_LINK if path.is_symlink() else KIND_FILE))
    return entries


def _write_link(zf: zipfile.ZipFile, path: Path, arcname: str) -> None:
    info = zipfile.ZipInfo(arcname)
    info.create_system = _UNIX_SYSTEM
    info.external_attr = (stat.S_IFLNK | 0o777) << 16
    info.compress_type = zipfile.ZIP_STORED
    zf.writestr(info, os.fsencode(os.readlink(path)))


def _is_link_member(info: zipfile.ZipInfo) -> bool:
    return info.create_system == _UNIX_SYSTEM and stat.S_ISLNK(info.external_attr >> 16)


def pack_directory(
    directory: Path,
    archive_path: Path,
    compression_level: int = 6,
) -> PackResult:
    """
    Pack the contents of directory into a ZIP archive.

    A partially written archive is removed before the error is raised,
    so a failed pack never leaves a file that the guard would mistake
    for a completed extract. The source directory is never modified.
    Timestamps before 1980 are clamped, as ZIP cannot represent them.

    Args:
        directory: Directory whose contents are packed.
        archive_path: Archive file to create.
        compression_level: DEFLATE level (0-9).

    Returns:
        PackResult describing the archive.

    Raises:
        ArchivePackError: If the directory cannot be read completely or
            the archive cannot be written.
    """
    directory = Path(directory)
    archive_path = Path(archive_path)

    if not directory.is_dir():
        raise ArchivePackError(
            f"Directory not found: {directory}",
            details={"path": str(directory)},
        )

    try:
        entries = _collect_entries(directory)
        total_size = 0
        files_packed = 0
        dirs_packed = 0
        links_packed = 0

        with zipfile.ZipFile(
            archive_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
            strict_timestamps=False,
        ) as zf:
            for fs_path, arcname, kind in entries:
                if kind == KIND_LINK:
                    _write_link(zf, fs_path, arcname)
                    links_packed += 1
                elif kind == KIND_DIR:
                    zf.write(fs_path, arcname)
                    dirs_packed += 1
                else:
                    zf.write(fs_path, arcname)
                    total_size += fs_path.stat().st_size
                    files_packed += 1
                logger.debug(f"Packed {arcname}")

        result = PackResult(
            archive_path=archive_path,
            files_packed=files_packed,
            dirs_packed=dirs_packed,
            total_size=total_size,
            compressed_size=archive_path.stat().st_size,
            links_packed=links_packed,
        )
        logger.info(
            f"Packed {files_packed} files, {dirs_packed} directories and "
            f"{links_packed} links into {archive_path.name} ({result.compressed_size:,} bytes)"
        )
        return result

    except (OSError, ValueError, zipfile.LargeZipFile) as e:
        _remove_partial(archive_path)
        raise ArchivePackError(
            f"Failed to write archive {archive_path}: {e}",
            details={"path": str(archive_path), "error": str(e)},
        ) from e


def _remove_partial(archive_path: Path) -> None:
    try:
        if archive_path.exists():
            archive_path.unlink()
            logger.debug(f"Removed partial archive {archive_path}")
    except OSError as e:
        logger.warning(f"Could not remove partial archive {archive_path}: {e}")


def _safe_target(output_dir: Path, name: str, links: Set[PurePosixPath]) -> Path:
    """Map an archive member name onto output_dir, rejecting escapes."""
    member = PurePosixPath(name)
    if (
        member.is_absolute()
        or ".." in member.parts
        or not member.parts
        or any(parent in links for parent in member.parents)
    ):
        raise ArchiveExtractError(
            f"Unsafe archive member: {name!r}",
            details={"member": name},
        )
    return output_dir.joinpath(*member.parts)


def unpack_archive(archive_path: Path, output_dir: Path) -> UnpackResult:
    """
    Unpack a ZIP archive into output_dir, which must already exist.

    Args:
        archive_path: Archive to read.
        output_dir: Destination directory.

    Returns:
        UnpackResult with counts of written entries.

    Raises:
        ArchiveExtractError: If the archive is missing, corrupt, contains
            unsafe member names, or cannot be written out.
    """
    archive_path = Path(archive_path)
    output_dir = Path(output_dir)

    if not archive_path.is_file():
        raise ArchiveExtractError(
            f"Archive not found: {archive_path}",
            details={"path": str(archive_path)},
        )

    if not zipfile.is_zipfile(archive_path):
        raise ArchiveExtractError(
            f"Not a valid ZIP file: {archive_path}",
            details={"path": str(archive_path)},
        )

    files_written = 0
    dirs_created = 0
    links_created = 0
    links: Set[PurePosixPath] = set()

    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            for info in zf.infolist():
                target = _safe_target(output_dir, info.filename, links)

                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    dirs_created += 1
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)

                if _is_link_member(info):
                    os.symlink(os.fsdecode(zf.read(info)), target)
                    links.add(PurePosixPath(info.filename))
                    links_created += 1
                    logger.debug(f"Unpacked link {info.filename}")
                    continue

                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                mode = stat.S_IMODE(info.external_attr >> 16)
                if mode:
                    os.chmod(target, mode)
                files_written += 1
                logger.debug(f"Unpacked {info.filename}")

    except _READ_ERRORS as e:
        raise ArchiveExtractError(
            f"Corrupt ZIP file {archive_path}: {e}",
            details={"path": str(archive_path), "error": str(e)},
        ) from e
    except OSError as e:
        raise ArchiveExtractError(
            f"Failed to unpack {archive_path}: {e}",
            details={"path": str(archive_path), "error": str(e)},
        ) from e

    logger.info(
        f"Unpacked {files_written} files, {dirs_created} directories and "
        f"{links_created} links from {archive_path.name}"
    )
    return UnpackResult(
        output_dir=output_dir,
        files_written=files_written,
        dirs_created=dirs_created,
        links_created=links_created,
    )
