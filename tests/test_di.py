#!/usr/bin/env python3
"""Tests for the dependency injection container."""

from pathlib import Path

import pytest

from vmmaint.backends.gce_metadata import MetadataIdentityProvider
from vmmaint.backends.gcloud import GcloudSnapshotAPI
from vmmaint.backends.subprocess_runner import SubprocessRunner
from vmmaint.config import MaintenanceConfig
from vmmaint.di import (
    DependencyContainer,
    create_default_container,
    get_container,
    set_container,
)
from vmmaint.interfaces.identity import IdentityProvider, StaticIdentityProvider
from vmmaint.interfaces.process import ProcessRunner
from vmmaint.interfaces.snapshots import SnapshotAPI
from vmmaint.maintenance import MaintenanceInstaller
from vmmaint.reboot import RebootChecker
from vmmaint.snapshots import BackupManager

from fakes import FakeRunner, FakeSnapshotAPI


class TestDependencyContainer:
    def test_register_implementation_singleton(self):
        container = DependencyContainer()
        container.register(ProcessRunner, FakeRunner)

        assert isinstance(container.resolve(ProcessRunner), FakeRunner)
        assert container.resolve(ProcessRunner) is container.resolve(ProcessRunner)

    def test_register_transient(self):
        container = DependencyContainer()
        container.register(ProcessRunner, FakeRunner, singleton=False)
        assert container.resolve(ProcessRunner) is not container.resolve(ProcessRunner)

    def test_register_instance(self):
        api = FakeSnapshotAPI()
        container = DependencyContainer().register(SnapshotAPI, instance=api)
        assert container.resolve(SnapshotAPI) is api

    def test_register_requires_something(self):
        with pytest.raises(ValueError):
            DependencyContainer().register(SnapshotAPI)

    def test_unregistered_interface(self):
        with pytest.raises(KeyError):
            DependencyContainer().resolve(SnapshotAPI)

    def test_autowires_concrete_class(self, identity):
        api = FakeSnapshotAPI()
        container = DependencyContainer()
        container.register(IdentityProvider, instance=identity)
        container.register(SnapshotAPI, instance=api)

        manager = container.resolve(BackupManager)

        assert manager.snapshot_api is api
        assert manager.identity_provider is identity
        assert manager.policy.keep == 4


class TestDefaultContainer:
    def test_default_wiring(self):
        container = create_default_container()

        assert isinstance(container.resolve(ProcessRunner), SubprocessRunner)
        assert isinstance(container.resolve(IdentityProvider), MetadataIdentityProvider)
        assert isinstance(container.resolve(SnapshotAPI), GcloudSnapshotAPI)

    def test_static_identity_from_config(self):
        config = MaintenanceConfig.model_validate(
            {"identity": {"vm_name": "db-1", "zone": "europe-west1-d"}}
        )
        provider = create_default_container(config).resolve(IdentityProvider)

        assert isinstance(provider, StaticIdentityProvider)
        assert provider.get_identity().region == "europe-west1"

    def test_backup_manager_follows_config(self):
        config = MaintenanceConfig.model_validate(
            {"backup": {"keep": 7, "name_suffix": "nightly", "disk_name": "{vm_name}-data"}}
        )
        manager = create_default_container(config).resolve(BackupManager)

        assert manager.policy.keep == 7
        assert manager.policy.name_suffix == "nightly"
        assert manager.disk_name == "{vm_name}-data"

    def test_gcloud_settings(self):
        config = MaintenanceConfig.model_validate(
            {"backup": {"gcloud": "/snap/bin/gcloud", "project": "prod"}}
        )
        api = create_default_container(config).resolve(SnapshotAPI)

        assert api.gcloud == "/snap/bin/gcloud"
        assert api.project == "prod"

    def test_reboot_checker_follows_config(self, tmp_path):
        config = MaintenanceConfig.model_validate(
            {"reboot": {"sentinel": str(tmp_path / "marker"), "command": ["shutdown", "-r", "now"]}}
        )
        checker = create_default_container(config).resolve(RebootChecker)

        assert checker.sentinel == tmp_path / "marker"
        assert checker.command == ["shutdown", "-r", "now"]

    def test_installer_gets_config_path(self):
        path = Path("/etc/vmmaint/site.yaml")
        installer = create_default_container(config_path=path).resolve(MaintenanceInstaller)
        assert installer.config_path == path

    def test_managers_are_not_shared(self):
        container = create_default_container()
        assert container.resolve(BackupManager) is not container.resolve(BackupManager)


class TestGlobalContainer:
    def test_get_container_creates_default(self):
        assert isinstance(get_container().resolve(ProcessRunner), SubprocessRunner)

    def test_set_container(self):
        container = DependencyContainer()
        set_container(container)
        assert get_container() is container
