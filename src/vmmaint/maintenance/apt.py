"""
apt configuration for unattended security updates.

Two documents enable apt's built-in daily timer. Automatic reboot stays
off: restarts are left to the weekly reboot check.
"""

from typing import Dict, List, Tuple

UNATTENDED_UPGRADES_FILE = "50unattended-upgrades"
AUTO_UPGRADES_FILE = "20auto-upgrades"

ALLOWED_ORIGINS: List[str] = [
    "${distro_id}:${distro_codename}",
    "${distro_id}:${distro_codename}-security",
    "${distro_id}ESMApps:${distro_codename}-apps-security",
    "${distro_id}ESM:${distro_codename}-infra-security",
]

UNATTENDED_UPGRADE_OPTIONS: List[Tuple[str, str]] = [
    ("AutoFixInterruptedDpkg", "true"),
    ("MinimalSteps", "true"),
    ("InstallOnShutdown", "false"),
    ("Remove-Unused-Kernel-Packages", "true"),
    ("Remove-Unused-Dependencies", "true"),
    ("Automatic-Reboot", "false"),
    ("Automatic-Reboot-WithUsers", "false"),
]

PERIODIC_OPTIONS: List[Tuple[str, str]] = [
    ("Update-Package-Lists", "1"),
    ("Download-Upgradeable-Packages", "1"),
    ("AutocleanInterval", "7"),
    ("Unattended-Upgrade", "1"),
]


def render_unattended_upgrades(origins: List[str] = None) -> str:
    """Render /etc/apt/apt.conf.d/50unattended-upgrades."""
    origins = ALLOWED_ORIGINS if origins is None else origins
    lines = ["Unattended-Upgrade::Allowed-Origins {"]
    lines.extend(f'    "{origin}";' for origin in origins)
    lines.append("};")
    lines.append("")
    lines.extend(f'Unattended-Upgrade::{key} "{value}";' for key, value in UNATTENDED_UPGRADE_OPTIONS)
    return "\n".join(lines) + "\n"


def render_auto_upgrades() -> str:
    """Render /etc/apt/apt.conf.d/20auto-upgrades."""
    return "".join(f'APT::Periodic::{key} "{value}";\n' for key, value in PERIODIC_OPTIONS)


def render_apt_documents() -> Dict[str, str]:
    """File name -> content for both apt documents."""
    return {
        UNATTENDED_UPGRADES_FILE: render_unattended_upgrades(),
        AUTO_UPGRADES_FILE: render_auto_upgrades(),
    }
