#!/usr/bin/env python3
"""
Pydantic models for vmmaint configuration.

All fields have defaults matching a stock Compute Engine VM, so running
without a configuration file is the normal case.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from vmmaint import paths
from vmmaint.errors import ConfigError

METADATA_URL = "http://metadata.google.internal/computeMetadata/v1"


class IdentitySettings(BaseModel):
    """Where the VM name and zone come from."""

    vm_name: Optional[str] = Field(default=None, description="Static VM name")
    zone: Optional[str] = Field(default=None, description="Static zone, e.g. us-central1-a")
    metadata_url: str = Field(default=METADATA_URL, description="Metadata server base URL")
    timeout_seconds: float = Field(default=5.0, gt=0, le=60, description="Metadata request timeout")

    @model_validator(mode="after")
    def static_identity_is_complete(self) -> "IdentitySettings":
        if (self.vm_name is None) != (self.zone is None):
            raise ValueError("identity.vm_name and identity.zone must be set together")
        return self

    @property
    def is_static(self) -> bool:
        return self.vm_name is not None and self.zone is not None


class BackupSettings(BaseModel):
    """Snapshot and retention settings."""

    disk_name: str = Field(default="{vm_name}-disk", description="Disk name template")
    keep: int = Field(default=4, ge=1, le=1000, description="Snapshots kept after pruning")
    name_suffix: str = Field(default="auto-backup", description="Backup name marker")
    gcloud: str = Field(default="gcloud", description="gcloud executable")
    project: Optional[str] = Field(default=None, description="GCP project override")

    @field_validator("disk_name")
    @classmethod
    def disk_name_must_be_valid(cls, v: str) -> str:
        try:
            v.format(vm_name="vm")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"disk_name may only use the {{vm_name}} placeholder: {e}")
        return v

    @field_validator("name_suffix")
    @classmethod
    def name_suffix_must_be_valid(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name_suffix cannot be empty")
        return v.strip()


class RebootSettings(BaseModel):
    """Reboot-check settings."""

    sentinel: Path = Field(default=paths.REBOOT_REQUIRED_FILE, description="Reboot marker")
    packages_file: Path = Field(
        default=paths.REBOOT_REQUIRED_PKGS_FILE, description="Packages requiring reboot"
    )
    command: List[str] = Field(default_factory=lambda: ["reboot"], description="Reboot command")

    @field_validator("command")
    @classmethod
    def command_must_not_be_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("reboot.command cannot be empty")
        return v


class ScheduleEntry(BaseModel):
    """A weekly cron slot."""

    minute: int = Field(default=0, ge=0, le=59)
    hour: int = Field(default=2, ge=0, le=23)
    day_of_week: int = Field(default=0, ge=0, le=7, description="0 and 7 are Sunday")

    def cron_expression(self) -> str:
        return f"{self.minute} {self.hour} * * {self.day_of_week}"


class ScheduleSettings(BaseModel):
    """Cron slots and the log files the jobs append to."""

    backup: ScheduleEntry = Field(default_factory=lambda: ScheduleEntry(hour=2))
    reboot_check: ScheduleEntry = Field(default_factory=lambda: ScheduleEntry(hour=3))
    backup_log: Path = Field(default=paths.BACKUP_LOG_FILE)
    reboot_check_log: Path = Field(default=paths.REBOOT_CHECK_LOG_FILE)
    user: str = Field(default="root", description="User the cron jobs run as")
    path: str = Field(
        default="/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin:/snap/bin",
        description="PATH for the cron jobs (gcloud is a snap on Ubuntu images)",
    )

    @field_validator("backup_log", "reboot_check_log")
    @classmethod
    def log_paths_must_be_absolute(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError(f"Log path must be absolute: {v}")
        return v


class SetupSettings(BaseModel):
    """One-time bootstrap settings."""

    root: Path = Field(default=Path("/"), description="Filesystem root to write into")
    install_packages: bool = Field(default=True)
    packages: List[str] = Field(
        default_factory=lambda: ["unattended-upgrades", "apt-listchanges"]
    )
    command: Optional[str] = Field(
        default=None, description="Command cron uses to invoke vmmaint"
    )
    apt_conf_dir: Path = Field(default=paths.APT_CONF_DIR)
    cron_dir: Path = Field(default=paths.CRON_DIR)
    logrotate_dir: Path = Field(default=paths.LOGROTATE_DIR)

    @field_validator("apt_conf_dir", "cron_dir", "logrotate_dir")
    @classmethod
    def dirs_must_be_absolute(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError(f"Directory must be absolute: {v}")
        return v


class MaintenanceConfig(BaseModel):
    """Complete vmmaint configuration."""

    version: str = Field(default="1", description="Config version")
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    backup: BackupSettings = Field(default_factory=BackupSettings)
    reboot: RebootSettings = Field(default_factory=RebootSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    setup: SetupSettings = Field(default_factory=SetupSettings)

    def save(self, path: Path) -> None:
        """Save configuration to YAML file."""
        config_dict = self.model_dump(mode="json", exclude_none=True)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.dump(config_dict, default_flow_style=False, sort_keys=False))

    @classmethod
    def load(cls, path: Path) -> "MaintenanceConfig":
        """Load configuration from YAML file."""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config file {path}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must be a YAML mapping: {path}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {path}: {e}")

    @classmethod
    def discover(cls, path: Optional[Path] = None) -> "MaintenanceConfig":
        """Load the explicit *path*, else $VMMAINT_CONFIG or the system file.

        An explicitly requested file must exist; the default location is
        optional and plain defaults are used when it is absent.
        """
        if path is not None:
            return cls.load(Path(path))
        default = paths.default_config_path()
        if default.exists():
            return cls.load(default)
        return cls()
