"""Disk snapshot backups and retention for vmmaint."""

from .models import RetentionPolicy, Snapshot, derive_storage_location, select_for_pruning
from .manager import BackupManager, BackupResult, PruneResult

__all__ = [
    "BackupManager",
    "BackupResult",
    "PruneResult",
    "RetentionPolicy",
    "Snapshot",
    "derive_storage_location",
    "select_for_pruning",
]
