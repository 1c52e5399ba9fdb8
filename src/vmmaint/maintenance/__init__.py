"""Static configuration emitted by `vmmaint setup`."""

from .installer import MaintenanceInstaller, SetupReport

__all__ = ["MaintenanceInstaller", "SetupReport"]
