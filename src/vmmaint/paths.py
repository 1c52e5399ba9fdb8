"""
Canonical file locations used by vmmaint.

Everything that writes into the host filesystem resolves its target
through :func:`under_root` so a whole setup can be staged below a
different root directory.
"""

import os
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)


# ── configuration ────────────────────────────────────────────────────────────

SYSTEM_CONFIG_FILE = Path("/etc/vmmaint/config.yaml")


def default_config_path() -> Path:
    """$VMMAINT_CONFIG, falling back to /etc/vmmaint/config.yaml."""
    return Path(os.getenv("VMMAINT_CONFIG", str(SYSTEM_CONFIG_FILE)))


# ── OS-managed files ─────────────────────────────────────────────────────────

REBOOT_REQUIRED_FILE = Path("/var/run/reboot-required")
REBOOT_REQUIRED_PKGS_FILE = Path("/var/run/reboot-required.pkgs")

APT_CONF_DIR = Path("/etc/apt/apt.conf.d")
CRON_DIR = Path("/etc/cron.d")
LOGROTATE_DIR = Path("/etc/logrotate.d")

BACKUP_LOG_FILE = Path("/var/log/vm-backup.log")
REBOOT_CHECK_LOG_FILE = Path("/var/log/vm-reboot-check.log")


# ── staging ──────────────────────────────────────────────────────────────────

def under_root(root: Path, path: Path) -> Path:
    """Re-anchor an absolute *path* below *root*.

    ``under_root(Path("/tmp/stage"), Path("/etc/cron.d/x"))`` gives
    ``/tmp/stage/etc/cron.d/x``; with root ``/`` the path is unchanged.
    """
    path = Path(path)
    if not path.is_absolute():
        raise ValueError(f"Expected an absolute path: {path}")
    staged = Path(root) / path.relative_to(path.anchor)
    if Path(root) != Path("/"):
        log.debug("path_staged", path=str(path), staged=str(staged))
    return staged
