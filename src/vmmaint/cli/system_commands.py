#!/usr/bin/env python3
"""
Setup and reboot-check commands for the vmmaint CLI.
"""

from rich.markup import escape
from rich.panel import Panel

from vmmaint.cli.utils import console
from vmmaint.config import MaintenanceConfig
from vmmaint.di import get_container
from vmmaint.maintenance import MaintenanceInstaller, SetupReport
from vmmaint.paths import under_root
from vmmaint.reboot import RebootChecker, RebootOutcome


def _setup_summary(report: SetupReport, config: MaintenanceConfig) -> str:
    schedule = config.schedule
    lines = [
        f"VM: [cyan]{escape(report.identity.vm_name)}[/]  Zone: [cyan]{escape(report.identity.zone)}[/]",
        "",
        f"✅ Weekly backups ({schedule.backup.cron_expression()})",
        f"   - Keeps last {config.backup.keep} backups",
        f"   - View logs: sudo tail -f {schedule.backup_log}",
        "",
        "✅ Daily security updates",
        "   - Security origins only",
        "   - No automatic reboots",
        "",
        f"✅ Weekly reboot check ({schedule.reboot_check.cron_expression()})",
        "   - Only if an update requires it",
        f"   - View logs: sudo tail -f {schedule.reboot_check_log}",
        "",
        "✅ Log rotation (weekly, keep 4)",
    ]
    if report.packages:
        lines += ["", f"Installed: {', '.join(report.packages)}"]
    lines += [
        "",
        "[bold]Files:[/]",
        *(f"  {escape(str(path))}" for path in report.files),
        "",
        "To test backup manually:  [bold]sudo vmmaint backup[/]",
        "To check for updates now: [bold]sudo unattended-upgrade --dry-run[/]",
    ]
    return "\n".join(lines)


def cmd_setup(args) -> int:
    """Install packages and write the maintenance configuration files."""
    container = get_container()
    config = container.resolve(MaintenanceConfig)
    installer = container.resolve(MaintenanceInstaller)

    report = installer.install(skip_packages=args.skip_packages, dry_run=args.dry_run)

    title = "Automated maintenance (dry run)" if report.dry_run else "Automated maintenance configured"
    console.print(Panel(_setup_summary(report, config), title=title, border_style="green"))
    return 0


def cmd_render(args) -> int:
    """Print the files `setup` would write."""
    container = get_container()
    installer = container.resolve(MaintenanceInstaller)

    for target, content in installer.render_files().items():
        console.rule(f"[cyan]{escape(str(under_root(installer.root, target)))}[/]")
        console.print(content, markup=False, highlight=False, soft_wrap=True, end="")
    return 0


def cmd_reboot_check(args) -> int:
    """Reboot if the OS left a reboot-required marker."""
    checker = get_container().resolve(RebootChecker)
    outcome = checker.check(dry_run=args.dry_run)

    if outcome is RebootOutcome.NOT_REQUIRED:
        console.print("[green]No reboot required.[/]")
    elif outcome is RebootOutcome.DRY_RUN:
        console.print("[yellow]Reboot required (dry run, not rebooting).[/]")
    else:
        console.print("[yellow]Reboot required. Rebooting now...[/]")
    return 0
