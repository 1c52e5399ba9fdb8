"""Exception hierarchy for vmmaint."""

from typing import List, Optional


class MaintenanceError(RuntimeError):
    """Base class for failures of a maintenance procedure."""


class MetadataError(MaintenanceError):
    """The instance metadata server could not provide the VM identity."""


class SnapshotAPIError(MaintenanceError):
    """A snapshot create/list/delete call failed."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class SnapshotCreationError(SnapshotAPIError):
    """Snapshot creation failed; pruning must not run."""


class RebootError(MaintenanceError):
    """The reboot command could not be executed."""


class SetupError(MaintenanceError):
    """A setup step failed; the remaining steps were not run."""


class ConfigError(ValueError):
    """Configuration file is missing, unreadable or invalid."""
