"""
vmmaint - scheduled maintenance for a single Compute Engine VM.

Weekly disk snapshots with retention pruning, daily unattended security
updates and a weekly reboot when the OS asks for one.
"""

__version__ = "0.1.0"
__author__ = "vmmaint Team"

from vmmaint.config import MaintenanceConfig
from vmmaint.reboot import RebootChecker, RebootOutcome
from vmmaint.snapshots import BackupManager, RetentionPolicy, Snapshot

__all__ = [
    "BackupManager",
    "MaintenanceConfig",
    "RebootChecker",
    "RebootOutcome",
    "RetentionPolicy",
    "Snapshot",
    "__version__",
]
