"""
Exceptions raised by gitpark operations.

Only fatal conditions are exceptions. Per-item move failures and
cleanup failures are recorded in phase results instead and do not
interrupt a run.
"""


class ParkError(Exception):
    """Base exception for all gitpark errors."""

    def __init__(self, message: str, phase: str = None, details: dict = None):
        super().__init__(message)
        self.phase = phase
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.phase:
            return f"[{self.phase}] {base_msg}"
        return base_msg


class PreconditionViolation(ParkError):
    """Raised when the archive or staging area is in the wrong existence state."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, phase="Guard", details=details)


class ArchivePackError(ParkError):
    """Raised when the staging area cannot be packed into the archive."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, phase="Pack", details=details)


class ArchiveExtractError(ParkError):
    """Raised when the archive cannot be unpacked."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, phase="Unpack", details=details)


class InvalidRootError(ParkError):
    """Raised when the working root cannot be operated on."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid working root: {reason}",
            phase="Validation",
            details={"path": path, "reason": reason},
        )


class StagingError(ParkError):
    """Raised when the staging area cannot be created."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, phase="Stage", details=details)
