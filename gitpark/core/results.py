"""
Result types for gitpark phases.

Every phase of an operation (select, stage, pack, unpack, restore,
cleanup) records a PhaseResult. Item-level failures accumulate in the
phase instead of aborting it; the OperationReport gathers the phases
of one run so the caller decides how to react to them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class PhaseStatus(Enum):
    """Status of a single phase."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class FailureKind(Enum):
    """Non-fatal failure kinds recorded against individual paths."""
    ITEM_MOVE = "ItemMoveFailure"
    CLEANUP = "CleanupFailure"


class WorkingState(Enum):
    """Where a working root's nested metadata currently lives."""
    RESTORED = "restored"
    EXTRACTED = "extracted"
    INCONSISTENT = "inconsistent"


@dataclass(frozen=True)
class MetadataEntry:
    """A matched metadata file or directory, relative to the working root."""

    relative_path: Path
    is_dir: bool

    @property
    def depth(self) -> int:
        return len(self.relative_path.parts)

    def __str__(self) -> str:
        return self.relative_path.as_posix()


@dataclass(frozen=True)
class ItemFailure:
    """A path that could not be moved or removed."""

    kind: FailureKind
    path: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "path": self.path, "reason": self.reason}


@dataclass
class PhaseResult:
    """Outcome of one phase of an operation."""

    phase: str
    status: PhaseStatus = PhaseStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    failures: List[ItemFailure] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (PhaseStatus.COMPLETED, PhaseStatus.SKIPPED)

    def start(self) -> "PhaseResult":
        self.status = PhaseStatus.RUNNING
        self.started_at = datetime.now()
        return self

    def complete(self, **metrics: Any) -> "PhaseResult":
        self.status = PhaseStatus.COMPLETED
        self.completed_at = datetime.now()
        self.metrics.update(metrics)
        return self

    def fail(self, error: str) -> "PhaseResult":
        self.status = PhaseStatus.FAILED
        self.completed_at = datetime.now()
        self.error = error
        return self

    def skip(self, reason: str) -> "PhaseResult":
        self.status = PhaseStatus.SKIPPED
        self.completed_at = datetime.now()
        self.metrics["skip_reason"] = reason
        return self

    def record_failure(self, kind: FailureKind, path: Any, reason: Any) -> ItemFailure:
        failure = ItemFailure(kind=kind, path=str(path), reason=str(reason))
        self.failures.append(failure)
        return failure

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "phase": self.phase,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
            "failures": [f.to_dict() for f in self.failures],
            "metrics": self.metrics,
        }


@dataclass
class OperationReport:
    """
    Collected phase results for one `out` or `in` run.

    A report is returned only when the run reached its end; fatal
    conditions are raised as exceptions instead.
    """

    operation: str
    root: Path
    phases: List[PhaseResult] = field(default_factory=list)
    entries: List[MetadataEntry] = field(default_factory=list)
    archive_path: Optional[Path] = None

    def begin(self, phase: str) -> PhaseResult:
        """Start and register a new phase."""
        result = PhaseResult(phase=phase).start()
        self.phases.append(result)
        return result

    def get_phase(self, phase: str) -> Optional[PhaseResult]:
        for result in self.phases:
            if result.phase == phase:
                return result
        return None

    @property
    def is_noop(self) -> bool:
        """True when an extract found nothing to park."""
        select = self.get_phase("select")
        return select is not None and select.metrics.get("selected", 0) == 0

    @property
    def failures(self) -> List[ItemFailure]:
        return [
            f for p in self.phases for f in p.failures
            if f.kind == FailureKind.ITEM_MOVE
        ]

    @property
    def warnings(self) -> List[ItemFailure]:
        return [
            f for p in self.phases for f in p.failures
            if f.kind == FailureKind.CLEANUP
        ]

    @property
    def succeeded(self) -> bool:
        return all(p.success for p in self.phases)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary for serialization."""
        return {
            "operation": self.operation,
            "root": str(self.root),
            "archive_path": str(self.archive_path) if self.archive_path else None,
            "entries": [str(e) for e in self.entries],
            "phases": [p.to_dict() for p in self.phases],
            "noop": self.is_noop,
        }
