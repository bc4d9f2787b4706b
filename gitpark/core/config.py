"""
Configuration for gitpark runs.

The sentinel names and the metadata pattern set are fixed; they are
bundled into an immutable ParkConfig built once per run and passed
explicitly to every component. Only ambient settings (verbosity and
log destination) can be supplied through the environment.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

STAGING_DIR_NAME = ".gitpark-staging"
ARCHIVE_NAME = ".gitpark-archive.zip"

# Order matters only for log output.
METADATA_DIRS: Tuple[str, ...] = (".git",)
METADATA_FILES: Tuple[str, ...] = (
    ".gitignore",
    ".gitattributes",
    ".gitmodules",
    ".gitkeep",
)


@dataclass(frozen=True)
class ParkConfig:
    """Immutable per-run configuration shared by selector, guard and archiver."""

    staging_dir_name: str = STAGING_DIR_NAME
    archive_name: str = ARCHIVE_NAME

    # Names matched only when the entry is a directory
    metadata_dirs: Tuple[str, ...] = METADATA_DIRS

    # Names matched only when the entry is a regular file
    metadata_files: Tuple[str, ...] = METADATA_FILES

    # zlib level used for DEFLATE (0-9)
    compression_level: int = 6

    @property
    def patterns(self) -> Tuple[str, ...]:
        """All metadata names, directories first."""
        return self.metadata_dirs + self.metadata_files

    def is_metadata_dir(self, name: str) -> bool:
        return name in self.metadata_dirs

    def is_metadata_file(self, name: str) -> bool:
        return name in self.metadata_files


@dataclass
class RuntimeSettings:
    """Ambient settings that do not influence what gets parked."""

    verbose: bool = False
    log_file: Optional[str] = None

    @property
    def log_level(self) -> str:
        # Console messages already cover progress at the default level.
        return "DEBUG" if self.verbose else "WARNING"


@dataclass
class Settings:
    """Everything a CLI invocation needs."""

    park: ParkConfig = field(default_factory=ParkConfig)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)


class Config:
    """
    Builds configuration values for a run.

    Environment variables are prefixed with GITPARK_ and may also be
    provided through a .env file in the current directory.
    """

    @staticmethod
    def default() -> ParkConfig:
        """Return the fixed configuration."""
        return ParkConfig()

    @staticmethod
    def load_from_env() -> Settings:
        """
        Build settings with environment overrides applied.

        Returns:
            Settings holding the fixed ParkConfig and runtime overrides.
        """
        load_dotenv()

        runtime = RuntimeSettings()

        if os.getenv("GITPARK_VERBOSE"):
            runtime.verbose = os.getenv("GITPARK_VERBOSE").lower() in ("true", "1", "yes")

        if os.getenv("GITPARK_LOG_FILE"):
            runtime.log_file = os.getenv("GITPARK_LOG_FILE")

        return Settings(park=ParkConfig(), runtime=runtime)
