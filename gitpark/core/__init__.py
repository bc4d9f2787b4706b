"""
Core module containing configuration, result types and exceptions.
"""

from gitpark.core.config import Config, ParkConfig, RuntimeSettings, Settings
from gitpark.core.results import (
    FailureKind,
    ItemFailure,
    MetadataEntry,
    OperationReport,
    PhaseResult,
    PhaseStatus,
    WorkingState,
)
from gitpark.core.exceptions import (
    ParkError,
    PreconditionViolation,
    ArchivePackError,
    ArchiveExtractError,
    InvalidRootError,
    StagingError,
)

__all__ = [
    "Config",
    "ParkConfig",
    "RuntimeSettings",
    "Settings",
    "FailureKind",
    "ItemFailure",
    "MetadataEntry",
    "OperationReport",
    "PhaseResult",
    "PhaseStatus",
    "WorkingState",
    "ParkError",
    "PreconditionViolation",
    "ArchivePackError",
    "ArchiveExtractError",
    "InvalidRootError",
    "StagingError",
]
