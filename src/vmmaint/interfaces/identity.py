"""Interfaces for resolving which VM we are running on."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..snapshots.models import derive_storage_location


@dataclass(frozen=True)
class InstanceIdentity:
    """Name and zone of the running VM."""

    vm_name: str
    zone: str

    @property
    def region(self) -> str:
        return derive_storage_location(self.zone)


class IdentityProvider(ABC):
    """Abstract interface for the runtime identity lookup."""

    @abstractmethod
    def get_identity(self) -> InstanceIdentity:
        """Return the identity of the current instance.

        Raises:
            MetadataError: if the identity cannot be determined.
        """
        pass


class StaticIdentityProvider(IdentityProvider):
    """Identity fixed by configuration instead of the metadata server."""

    def __init__(self, vm_name: str, zone: str):
        self._identity = InstanceIdentity(vm_name=vm_name, zone=zone)

    def get_identity(self) -> InstanceIdentity:
        return self._identity
