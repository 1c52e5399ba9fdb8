#!/usr/bin/env python3
"""Tests for configuration models."""

from pathlib import Path

import pytest
import yaml

from vmmaint.config import MaintenanceConfig, ScheduleEntry
from vmmaint.errors import ConfigError


class TestDefaults:
    def test_default_config(self):
        config = MaintenanceConfig()
        assert config.backup.keep == 4
        assert config.backup.disk_name == "{vm_name}-disk"
        assert config.reboot.sentinel == Path("/var/run/reboot-required")
        assert config.reboot.command == ["reboot"]
        assert config.schedule.backup.cron_expression() == "0 2 * * 0"
        assert config.schedule.reboot_check.cron_expression() == "0 3 * * 0"
        assert config.setup.root == Path("/")
        assert config.identity.is_static is False


class TestValidation:
    @pytest.mark.parametrize("keep,valid", [
        (1, True),
        (4, True),
        (0, False),
        (-3, False),
    ])
    def test_keep(self, keep, valid):
        data = {"backup": {"keep": keep}}
        if valid:
            assert MaintenanceConfig.model_validate(data).backup.keep == keep
        else:
            with pytest.raises(ValueError):
                MaintenanceConfig.model_validate(data)

    @pytest.mark.parametrize("hour,valid", [
        (0, True),
        (23, True),
        (24, False),
    ])
    def test_schedule_hour(self, hour, valid):
        if valid:
            assert ScheduleEntry(hour=hour).hour == hour
        else:
            with pytest.raises(ValueError):
                ScheduleEntry(hour=hour)

    def test_identity_requires_both_fields(self):
        with pytest.raises(ValueError):
            MaintenanceConfig.model_validate({"identity": {"vm_name": "vm1"}})

    def test_static_identity(self):
        config = MaintenanceConfig.model_validate(
            {"identity": {"vm_name": "vm1", "zone": "us-central1-a"}}
        )
        assert config.identity.is_static

    def test_disk_name_placeholder(self):
        with pytest.raises(ValueError):
            MaintenanceConfig.model_validate({"backup": {"disk_name": "{zone}-disk"}})

    def test_relative_log_path_rejected(self):
        with pytest.raises(ValueError):
            MaintenanceConfig.model_validate({"schedule": {"backup_log": "backup.log"}})

    def test_empty_reboot_command_rejected(self):
        with pytest.raises(ValueError):
            MaintenanceConfig.model_validate({"reboot": {"command": []}})


class TestLoad:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "backup": {"keep": 6, "project": "prod"},
            "schedule": {"backup": {"hour": 4, "minute": 15}},
        }))

        config = MaintenanceConfig.load(path)

        assert config.backup.keep == 6
        assert config.backup.project == "prod"
        assert config.schedule.backup.cron_expression() == "15 4 * * 0"
        assert config.schedule.reboot_check.hour == 3

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert MaintenanceConfig.load(path) == MaintenanceConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            MaintenanceConfig.load(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            MaintenanceConfig.load(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("backup: {keep: [")
        with pytest.raises(ConfigError):
            MaintenanceConfig.load(path)

    def test_invalid_values_become_config_error(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("backup:\n  keep: 0\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            MaintenanceConfig.load(path)

    def test_save_and_load(self, tmp_path):
        config = MaintenanceConfig.model_validate({"backup": {"keep": 8}})
        path = tmp_path / "nested" / "config.yaml"

        config.save(path)

        assert MaintenanceConfig.load(path) == config


class TestDiscover:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("backup:\n  keep: 2\n")
        assert MaintenanceConfig.discover(path).backup.keep == 2

    def test_explicit_missing_path_is_an_error(self, tmp_path):
        with pytest.raises(ConfigError):
            MaintenanceConfig.discover(tmp_path / "missing.yaml")

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("backup:\n  keep: 9\n")
        monkeypatch.setenv("VMMAINT_CONFIG", str(path))
        assert MaintenanceConfig.discover().backup.keep == 9

    def test_defaults_when_nothing_exists(self, tmp_path, monkeypatch):
        monkeypatch.setenv("VMMAINT_CONFIG", str(tmp_path / "absent.yaml"))
        assert MaintenanceConfig.discover() == MaintenanceConfig()
