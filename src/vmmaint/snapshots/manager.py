#!/usr/bin/env python3
"""Weekly backup: snapshot the data disk, then prune old backups."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from ..errors import SnapshotAPIError
from ..interfaces.identity import IdentityProvider, InstanceIdentity
from ..interfaces.snapshots import SnapshotAPI
from .models import RetentionPolicy, Snapshot

log = structlog.get_logger(__name__)


@dataclass
class PruneResult:
    """Outcome of one pruning pass."""

    kept: List[str] = field(default_factory=list)
    # With dry_run, the snapshots that would have been deleted
    deleted: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    dry_run: bool = False


@dataclass
class BackupResult:
    """Outcome of one backup run."""

    snapshot_name: str
    created: bool
    error: Optional[str] = None
    prune: Optional[PruneResult] = None
    dry_run: bool = False

    @property
    def exit_code(self) -> int:
        # Only a failed snapshot creation fails the run.
        return 1 if self.error else 0


class BackupManager:
    """Snapshot a VM's data disk and keep the newest N backups."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        snapshot_api: SnapshotAPI,
        policy: Optional[RetentionPolicy] = None,
        disk_name: str = "{vm_name}-disk",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.identity_provider = identity_provider
        self.snapshot_api = snapshot_api
        self.policy = policy or RetentionPolicy()
        self.disk_name = disk_name
        self.clock = clock

    def run(self, dry_run: bool = False) -> BackupResult:
        """Create a snapshot and, if that succeeded, prune old backups.

        Args:
            dry_run: Log the planned snapshot and deletions without making them
        """
        identity = self.identity_provider.get_identity()
        now = self.clock()
        name = self.policy.snapshot_name(identity.vm_name, now)
        disk = self.disk_name.format(vm_name=identity.vm_name)

        blog = log.bind(vm_name=identity.vm_name, snapshot=name)
        blog.info(
            "backup.started",
            disk=disk,
            zone=identity.zone,
            storage_location=identity.region,
            dry_run=dry_run,
        )

        pending: List[Snapshot] = []
        if dry_run:
            blog.info("snapshot.create_skipped", reason="dry-run")
            # Stand-in for the snapshot a real run would have created
            pending.append(Snapshot(name=name, created_at=now, source_disk=disk))
        else:
            try:
                self.snapshot_api.create_snapshot(
                    disk=disk,
                    name=name,
                    zone=identity.zone,
                    storage_location=identity.region,
                )
            except SnapshotAPIError as e:
                blog.error("backup.failed", error=str(e))
                return BackupResult(snapshot_name=name, created=False, error=str(e))
            blog.info("snapshot.created")

        prune = self._prune(identity, dry_run=dry_run, extra=pending)
        blog.info(
            "backup.completed",
            deleted=len(prune.deleted),
            failed=len(prune.failed),
            prune_error=prune.error,
        )
        return BackupResult(
            snapshot_name=name,
            created=not dry_run,
            prune=prune,
            dry_run=dry_run,
        )

    def prune(self, dry_run: bool = False) -> PruneResult:
        """Delete every backup beyond the newest ``policy.keep``."""
        return self._prune(self.identity_provider.get_identity(), dry_run=dry_run)

    def list_backups(self) -> List[Snapshot]:
        """The retention set of this VM, newest first."""
        identity = self.identity_provider.get_identity()
        return self._retention_set(identity)

    def _retention_set(
        self, identity: InstanceIdentity, extra: Iterable[Snapshot] = ()
    ) -> List[Snapshot]:
        prefix = self.policy.prefix(identity.vm_name)
        listed = self.snapshot_api.list_snapshots(prefix)
        return self.policy.retention_set(identity.vm_name, [*listed, *extra])

    def _prune(
        self, identity: InstanceIdentity, dry_run: bool, extra: Iterable[Snapshot] = ()
    ) -> PruneResult:
        plog = log.bind(vm_name=identity.vm_name, keep=self.policy.keep)
        result = PruneResult(dry_run=dry_run)

        try:
            backups = self._retention_set(identity, extra)
        except SnapshotAPIError as e:
            plog.error("prune.list_failed", error=str(e))
            result.error = str(e)
            return result

        excess = self.policy.select_for_pruning(identity.vm_name, backups)
        excess_names = {s.name for s in excess}
        result.kept = [s.name for s in backups if s.name not in excess_names]

        if not excess:
            plog.info("prune.nothing_to_do", backups=len(backups))
            return result

        plog.info("prune.started", backups=len(backups), excess=len(excess))
        for snapshot in excess:
            if dry_run:
                plog.info("snapshot.delete_skipped", snapshot=snapshot.name, reason="dry-run")
                result.deleted.append(snapshot.name)
                continue
            plog.info("snapshot.deleting", snapshot=snapshot.name)
            try:
                self.snapshot_api.delete_snapshot(snapshot.name)
            except SnapshotAPIError as e:
                # Remaining deletions are still attempted.
                plog.warning("snapshot.delete_failed", snapshot=snapshot.name, error=str(e))
                result.failed[snapshot.name] = str(e)
                continue
            result.deleted.append(snapshot.name)

        plog.info("prune.completed", deleted=len(result.deleted), failed=len(result.failed))
        return result
