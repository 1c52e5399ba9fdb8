"""IoC container for dependency injection in vmmaint."""

import inspect
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from .config import MaintenanceConfig

T = TypeVar("T")


@dataclass
class ServiceRegistration:
    """Registration info for a service."""

    factory: Callable[..., Any]
    singleton: bool = True
    instance: Optional[Any] = None


class DependencyContainer:
    """
    IoC container for dependency injection.

    Usage:
        container = DependencyContainer()

        # Register services
        container.register(ProcessRunner, SubprocessRunner)
        container.register(SnapshotAPI, instance=FakeSnapshotAPI())

        # Resolve dependencies
        manager = container.resolve(BackupManager)
    """

    def __init__(self):
        self._registrations: Dict[Type, ServiceRegistration] = {}
        self._lock = threading.RLock()

    def register(
        self,
        interface: Type[T],
        implementation: Type[T] = None,
        factory: Callable[..., T] = None,
        singleton: bool = True,
        instance: T = None,
    ) -> "DependencyContainer":
        """
        Register a service.

        Args:
            interface: The interface/base class
            implementation: Concrete implementation class
            factory: Factory function to create instance
            singleton: If True, reuse same instance
            instance: Pre-created instance to use
        """
        if instance is not None:
            self._registrations[interface] = ServiceRegistration(
                factory=lambda: instance,
                singleton=True,
                instance=instance,
            )
        elif factory is not None:
            self._registrations[interface] = ServiceRegistration(
                factory=factory,
                singleton=singleton,
            )
        elif implementation is not None:
            self._registrations[interface] = ServiceRegistration(
                factory=implementation,
                singleton=singleton,
            )
        else:
            raise ValueError("Must provide implementation, factory, or instance")

        return self

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance."""
        with self._lock:
            if interface not in self._registrations:
                # Concrete classes are built on the fly from their annotations
                if inspect.isclass(interface) and not inspect.isabstract(interface):
                    return self._create_instance(interface)
                raise KeyError(f"No registration for {interface}")

            reg = self._registrations[interface]

            if reg.singleton and reg.instance is not None:
                return reg.instance

            instance = self._create_instance(reg.factory)

            if reg.singleton:
                reg.instance = instance

            return instance

    def _create_instance(self, factory: Callable) -> Any:
        """Create instance, resolving constructor dependencies."""
        try:
            sig = inspect.signature(factory)
        except ValueError:
            return factory()

        kwargs = {}

        for name, param in sig.parameters.items():
            if param.annotation == inspect.Parameter.empty:
                continue
            if param.annotation in self._registrations or param.default == inspect.Parameter.empty:
                kwargs[name] = self.resolve(param.annotation)

        return factory(**kwargs)


# Global container instance
_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = create_default_container()
    return _container


def set_container(container: Optional[DependencyContainer]) -> None:
    """Set the global container (useful for testing)."""
    global _container
    _container = container


def create_default_container(
    config: Optional[MaintenanceConfig] = None,
    config_path: Optional[Path] = None,
) -> DependencyContainer:
    """Create container with default registrations for *config*."""
    from .backends.gce_metadata import MetadataIdentityProvider
    from .backends.gcloud import GcloudSnapshotAPI
    from .backends.subprocess_runner import SubprocessRunner
    from .interfaces.identity import IdentityProvider, StaticIdentityProvider
    from .interfaces.process import ProcessRunner
    from .interfaces.snapshots import SnapshotAPI
    from .maintenance.installer import MaintenanceInstaller
    from .reboot import RebootChecker
    from .snapshots import BackupManager, RetentionPolicy

    config = config or MaintenanceConfig()
    container = DependencyContainer()

    def identity_provider() -> IdentityProvider:
        if config.identity.is_static:
            return StaticIdentityProvider(config.identity.vm_name, config.identity.zone)
        return MetadataIdentityProvider(
            base_url=config.identity.metadata_url,
            timeout_seconds=config.identity.timeout_seconds,
        )

    container.register(MaintenanceConfig, instance=config)
    container.register(ProcessRunner, SubprocessRunner)
    container.register(IdentityProvider, factory=identity_provider)
    container.register(
        SnapshotAPI,
        factory=lambda: GcloudSnapshotAPI(
            runner=container.resolve(ProcessRunner),
            gcloud=config.backup.gcloud,
            project=config.backup.project,
        ),
    )
    container.register(
        BackupManager,
        factory=lambda: BackupManager(
            identity_provider=container.resolve(IdentityProvider),
            snapshot_api=container.resolve(SnapshotAPI),
            policy=RetentionPolicy(keep=config.backup.keep, name_suffix=config.backup.name_suffix),
            disk_name=config.backup.disk_name,
        ),
        singleton=False,
    )
    container.register(
        RebootChecker,
        factory=lambda: RebootChecker(
            runner=container.resolve(ProcessRunner),
            sentinel=config.reboot.sentinel,
            packages_file=config.reboot.packages_file,
            command=config.reboot.command,
        ),
        singleton=False,
    )
    container.register(
        MaintenanceInstaller,
        factory=lambda: MaintenanceInstaller(
            config=config,
            runner=container.resolve(ProcessRunner),
            identity_provider=container.resolve(IdentityProvider),
            config_path=config_path,
        ),
        singleton=False,
    )

    return container
