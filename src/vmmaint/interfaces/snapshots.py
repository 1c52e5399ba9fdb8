"""Interface for the cloud disk-snapshot API."""

from abc import ABC, abstractmethod
from typing import List

from ..snapshots.models import Snapshot


class SnapshotAPI(ABC):
    """Abstract interface for snapshot create/list/delete."""

    @abstractmethod
    def create_snapshot(self, disk: str, name: str, zone: str, storage_location: str) -> None:
        """Snapshot *disk* in *zone* as *name*, stored in *storage_location*.

        Raises:
            SnapshotCreationError: if the snapshot was not created.
        """
        pass

    @abstractmethod
    def list_snapshots(self, name_filter: str) -> List[Snapshot]:
        """Snapshots whose name contains *name_filter*, newest first."""
        pass

    @abstractmethod
    def delete_snapshot(self, name: str) -> None:
        """Delete snapshot *name*.

        Raises:
            SnapshotAPIError: if the deletion failed.
        """
        pass
