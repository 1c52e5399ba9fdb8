#!/usr/bin/env python3
"""Data models for disk snapshots and their retention."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

_ZONE_SUFFIX = re.compile(r"-[a-z]$")


def derive_storage_location(zone: str) -> str:
    """Region a snapshot of a disk in *zone* is stored in.

    Strips one trailing ``-<letter>``: ``us-central1-a`` -> ``us-central1``.
    """
    return _ZONE_SUFFIX.sub("", zone)


def _parse_timestamp(value: str) -> datetime:
    # gcloud emits RFC 3339, e.g. 2024-01-07T02:00:05.123-08:00
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Snapshot:
    """A point-in-time copy of a disk."""

    name: str
    created_at: datetime
    source_disk: Optional[str] = None
    storage_locations: List[str] = field(default_factory=list)
    status: Optional[str] = None
    disk_size_gb: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "source_disk": self.source_disk,
            "storage_locations": list(self.storage_locations),
            "status": self.status,
            "disk_size_gb": self.disk_size_gb,
        }

    @classmethod
    def from_gcloud(cls, data: Dict[str, Any]) -> "Snapshot":
        """Create from one entry of ``gcloud compute snapshots list --format=json``."""
        source_disk = data.get("sourceDisk")
        if source_disk:
            source_disk = source_disk.rstrip("/").rsplit("/", 1)[-1]
        size = data.get("diskSizeGb")
        return cls(
            name=data["name"],
            created_at=_parse_timestamp(data["creationTimestamp"]),
            source_disk=source_disk,
            storage_locations=list(data.get("storageLocations", [])),
            status=data.get("status"),
            disk_size_gb=int(size) if size is not None else None,
        )


def select_for_pruning(snapshots: Iterable[Snapshot], keep: int) -> List[Snapshot]:
    """Snapshots beyond the *keep* most recent, newest first."""
    if keep < 0:
        raise ValueError("keep must be >= 0")
    ordered = sorted(snapshots, key=lambda s: s.created_at, reverse=True)
    return ordered[keep:]


@dataclass
class RetentionPolicy:
    """Naming and retention rules for automatic backups."""

    keep: int = 4
    name_suffix: str = "auto-backup"

    def __post_init__(self):
        if self.keep < 1:
            raise ValueError("keep must be >= 1")

    def prefix(self, vm_name: str) -> str:
        """Name marker shared by every backup of *vm_name*."""
        return f"{vm_name}-{self.name_suffix}"

    def snapshot_name(self, vm_name: str, now: datetime) -> str:
        return f"{self.prefix(vm_name)}-{now.strftime(TIMESTAMP_FORMAT)}"

    def matches(self, vm_name: str, snapshot_name: str) -> bool:
        return self.prefix(vm_name) in snapshot_name

    def retention_set(self, vm_name: str, snapshots: Iterable[Snapshot]) -> List[Snapshot]:
        """Backups of *vm_name*, newest first."""
        matching = [s for s in snapshots if self.matches(vm_name, s.name)]
        return sorted(matching, key=lambda s: s.created_at, reverse=True)

    def select_for_pruning(self, vm_name: str, snapshots: Iterable[Snapshot]) -> List[Snapshot]:
        return select_for_pruning(self.retention_set(vm_name, snapshots), self.keep)
