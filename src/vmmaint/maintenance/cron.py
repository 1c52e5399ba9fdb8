"""Cron entries for the scheduled maintenance jobs."""

import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from vmmaint.config import MaintenanceConfig, ScheduleEntry

BACKUP_CRON_FILE = "vm-weekly-backup"
REBOOT_CHECK_CRON_FILE = "vm-reboot-check"


def default_command() -> str:
    """Invoke vmmaint through the interpreter it is installed in."""
    return f"{shlex.quote(sys.executable)} -m vmmaint"


@dataclass
class CronJob:
    """One /etc/cron.d entry."""

    file_name: str
    schedule: ScheduleEntry
    user: str
    command: str
    log_file: Path
    path: Optional[str] = None

    def render_line(self) -> str:
        return (
            f"{self.schedule.cron_expression()} {self.user} "
            f"{self.command} >> {shlex.quote(str(self.log_file))} 2>&1"
        )

    def render(self) -> str:
        lines = ["# Managed by vmmaint; changes are overwritten by `vmmaint setup`."]
        if self.path:
            lines.append(f"PATH={self.path}")
        lines.append(self.render_line())
        return "\n".join(lines) + "\n"


def build_cron_jobs(
    config: MaintenanceConfig,
    command: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> List[CronJob]:
    """Backup and reboot-check jobs for *config*.

    Args:
        config: Loaded configuration
        command: Base vmmaint command, overriding ``setup.command``
        config_path: Passed to the jobs as ``--config`` when given
    """
    base = command or config.setup.command or default_command()
    if config_path is not None:
        base = f"{base} --config {shlex.quote(str(config_path))}"

    schedule = config.schedule
    return [
        CronJob(
            file_name=BACKUP_CRON_FILE,
            schedule=schedule.backup,
            user=schedule.user,
            command=f"{base} backup",
            log_file=schedule.backup_log,
            path=schedule.path,
        ),
        CronJob(
            file_name=REBOOT_CHECK_CRON_FILE,
            schedule=schedule.reboot_check,
            user=schedule.user,
            command=f"{base} reboot-check",
            log_file=schedule.reboot_check_log,
            path=schedule.path,
        ),
    ]
