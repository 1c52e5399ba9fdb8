"""Snapshot API implementation on top of the gcloud CLI."""

import json
import subprocess
from typing import List, Optional

import structlog

from ..errors import SnapshotAPIError, SnapshotCreationError
from ..interfaces.process import ProcessResult, ProcessRunner
from ..interfaces.snapshots import SnapshotAPI
from ..snapshots.models import Snapshot

log = structlog.get_logger(__name__)


class GcloudSnapshotAPI(SnapshotAPI):
    """Create, list and delete Compute Engine snapshots with ``gcloud``."""

    def __init__(
        self,
        runner: ProcessRunner,
        gcloud: str = "gcloud",
        project: Optional[str] = None,
    ):
        self.runner = runner
        self.gcloud = gcloud
        self.project = project

    def create_snapshot(self, disk: str, name: str, zone: str, storage_location: str) -> None:
        cmd = self._command(
            "disks",
            "snapshot",
            disk,
            f"--snapshot-names={name}",
            f"--zone={zone}",
            f"--storage-location={storage_location}",
        )
        self._run(cmd, error_cls=SnapshotCreationError)

    def list_snapshots(self, name_filter: str) -> List[Snapshot]:
        cmd = self._command(
            "snapshots",
            "list",
            f"--filter=name~{name_filter}",
            "--sort-by=~creationTimestamp",
            "--format=json",
        )
        result = self._run(cmd)
        try:
            entries = json.loads(result.stdout or "[]")
            snapshots = [Snapshot.from_gcloud(entry) for entry in entries]
        except (ValueError, KeyError, TypeError) as e:
            raise SnapshotAPIError(
                f"Unexpected snapshot listing output: {e}", command=cmd, stderr=result.stderr
            ) from e
        return sorted(snapshots, key=lambda s: s.created_at, reverse=True)

    def delete_snapshot(self, name: str) -> None:
        cmd = self._command("snapshots", "delete", name, "--quiet")
        self._run(cmd)

    def _command(self, resource: str, *args: str) -> List[str]:
        cmd = [self.gcloud, "compute", resource, *args]
        if self.project:
            cmd.append(f"--project={self.project}")
        return cmd

    def _run(self, cmd: List[str], error_cls=SnapshotAPIError) -> ProcessResult:
        try:
            result = self.runner.run(cmd, check=False)
        except (OSError, subprocess.SubprocessError) as e:
            raise error_cls(f"Failed to run {cmd[0]}: {e}", command=cmd) from e

        if not result.success:
            stderr = result.stderr.strip()
            log.debug("gcloud.failed", command=cmd, returncode=result.returncode, stderr=stderr)
            raise error_cls(
                f"{' '.join(cmd[:4])} exited with {result.returncode}: {stderr}",
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )
        return result
