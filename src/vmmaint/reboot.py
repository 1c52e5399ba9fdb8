"""
Weekly reboot check.

apt drops a marker file when an installed update (typically a kernel)
needs a restart. Unattended upgrades never reboot on their own; this
check is the only place that does.
"""

import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional

import structlog

from vmmaint import paths
from vmmaint.errors import RebootError
from vmmaint.interfaces.process import ProcessRunner

log = structlog.get_logger(__name__)


class RebootOutcome(Enum):
    """What the reboot check did."""

    REBOOTED = "rebooted"
    NOT_REQUIRED = "not-required"
    DRY_RUN = "dry-run"


class RebootChecker:
    """Reboot the machine if the reboot-required marker exists."""

    def __init__(
        self,
        runner: ProcessRunner,
        sentinel: Path = paths.REBOOT_REQUIRED_FILE,
        packages_file: Optional[Path] = paths.REBOOT_REQUIRED_PKGS_FILE,
        command: Optional[List[str]] = None,
    ):
        self.runner = runner
        self.sentinel = Path(sentinel)
        self.packages_file = Path(packages_file) if packages_file else None
        self.command = command or ["reboot"]

    def reboot_required(self) -> bool:
        return self.sentinel.exists()

    def pending_packages(self) -> List[str]:
        """Packages listed as needing the reboot, if apt recorded them."""
        if self.packages_file is None or not self.packages_file.exists():
            return []
        try:
            lines = self.packages_file.read_text().splitlines()
        except OSError as exc:
            log.debug("reboot.packages_unreadable", path=str(self.packages_file), error=str(exc))
            return []
        return sorted({line.strip() for line in lines if line.strip()})

    def check(self, dry_run: bool = False) -> RebootOutcome:
        if not self.reboot_required():
            log.info("reboot.not_required", sentinel=str(self.sentinel))
            return RebootOutcome.NOT_REQUIRED

        packages = self.pending_packages()
        if dry_run:
            log.info("reboot.required", packages=packages, command=self.command, dry_run=True)
            return RebootOutcome.DRY_RUN

        log.warning("reboot.required", packages=packages, command=self.command)
        try:
            self.runner.run(self.command, check=True)
        except (OSError, subprocess.SubprocessError) as e:
            raise RebootError(f"Reboot command {' '.join(self.command)} failed: {e}") from e
        return RebootOutcome.REBOOTED
