#!/usr/bin/env python3
"""
One-time maintenance bootstrap.

Installs the unattended-upgrades packages and writes the apt, cron and
logrotate files. Steps run in order and the first failure stops the
setup; files already written are left in place.
"""

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from vmmaint.config import MaintenanceConfig
from vmmaint.errors import MaintenanceError, SetupError
from vmmaint.interfaces.identity import IdentityProvider, InstanceIdentity
from vmmaint.interfaces.process import ProcessRunner
from vmmaint.logging import log_operation
from vmmaint.maintenance.apt import render_apt_documents
from vmmaint.maintenance.cron import build_cron_jobs
from vmmaint.maintenance.logrotate import LOGROTATE_FILE, LogrotatePolicy
from vmmaint.paths import under_root

log = structlog.get_logger(__name__)


@dataclass
class SetupReport:
    """What a setup run did."""

    identity: InstanceIdentity
    root: Path
    packages: List[str] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)
    dry_run: bool = False


class MaintenanceInstaller:
    """Configure backups, security updates and the reboot check on this VM."""

    def __init__(
        self,
        config: MaintenanceConfig,
        runner: ProcessRunner,
        identity_provider: IdentityProvider,
        config_path: Optional[Path] = None,
        command: Optional[str] = None,
    ):
        self.config = config
        self.runner = runner
        self.identity_provider = identity_provider
        self.config_path = config_path
        self.command = command

    @property
    def root(self) -> Path:
        return self.config.setup.root

    def render_files(self) -> Dict[Path, str]:
        """Absolute target path -> content, before staging under the root."""
        setup = self.config.setup
        files: Dict[Path, str] = {}

        for name, content in render_apt_documents().items():
            files[setup.apt_conf_dir / name] = content

        for job in build_cron_jobs(self.config, self.command, self.config_path):
            files[setup.cron_dir / job.file_name] = job.render()

        schedule = self.config.schedule
        files[setup.logrotate_dir / LOGROTATE_FILE] = LogrotatePolicy().render(
            [schedule.backup_log, schedule.reboot_check_log]
        )
        return files

    def install(self, skip_packages: bool = False, dry_run: bool = False) -> SetupReport:
        """Run every setup step, stopping at the first failure.

        Raises:
            SetupError: if any step fails.
        """
        slog = log.bind(root=str(self.root), dry_run=dry_run)

        with log_operation(slog, "setup.identity"):
            try:
                identity = self.identity_provider.get_identity()
            except MaintenanceError as e:
                raise SetupError(f"Cannot determine VM identity: {e}") from e
        slog.info("setup.vm", vm_name=identity.vm_name, zone=identity.zone)

        report = SetupReport(identity=identity, root=self.root, dry_run=dry_run)

        packages = self.config.setup.packages
        if self.config.setup.install_packages and not skip_packages and packages:
            with log_operation(slog, "setup.packages", packages=packages):
                if not dry_run:
                    self._install_packages(packages)
            report.packages = list(packages)

        files = self.render_files()
        with log_operation(slog, "setup.files", count=len(files)):
            for target, content in files.items():
                staged = under_root(self.root, target)
                if not dry_run:
                    self._write(staged, content)
                report.files.append(staged)

        return report

    def _install_packages(self, packages: List[str]) -> None:
        cmd = ["apt-get", "install", "-y", *packages]
        env = dict(os.environ, DEBIAN_FRONTEND="noninteractive")
        try:
            result = self.runner.run(cmd, check=False, env=env)
        except (OSError, subprocess.SubprocessError) as e:
            raise SetupError(f"Failed to run apt-get: {e}") from e
        if not result.success:
            raise SetupError(
                f"apt-get install exited with {result.returncode}: {result.stderr.strip()}"
            )

    def _write(self, path: Path, content: str, mode: int = 0o644) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            os.chmod(path, mode)
        except OSError as e:
            raise SetupError(f"Failed to write {path}: {e}") from e
        log.debug("setup.file_written", path=str(path))
