#!/usr/bin/env python3
"""
Backup commands for the vmmaint CLI.
"""

import json

from rich.markup import escape
from rich.table import Table

from vmmaint.cli.utils import console, print_error
from vmmaint.di import get_container
from vmmaint.snapshots import BackupManager, PruneResult, RetentionPolicy


def _print_prune(result: PruneResult) -> None:
    verb = "Would delete" if result.dry_run else "Deleted"
    for name in result.deleted:
        console.print(f"  🗑  {verb}: {escape(name)}")
    for name, error in result.failed.items():
        console.print(f"  [yellow]⚠  Could not delete {escape(name)}: {escape(error)}[/]")
    if result.kept:
        console.print(f"  [dim]Keeping {len(result.kept)} backup(s)[/]")


def cmd_backup(args) -> int:
    """Snapshot the data disk and prune old backups."""
    manager = get_container().resolve(BackupManager)
    result = manager.run(dry_run=args.dry_run)

    if result.error:
        print_error(f"Backup failed: {result.error}")
        return result.exit_code

    if result.dry_run:
        console.print(f"[cyan]Would create snapshot: {escape(result.snapshot_name)}[/]")
    else:
        console.print(f"[green]✅ Backup successful: {escape(result.snapshot_name)}[/]")

    if result.prune is not None:
        if result.prune.error:
            console.print(f"[yellow]⚠  Cleanup skipped: {escape(result.prune.error)}[/]")
        else:
            _print_prune(result.prune)
            if not result.prune.deleted and not result.prune.failed:
                console.print("  [dim]Nothing to clean up[/]")

    return result.exit_code


def cmd_prune(args) -> int:
    """Delete backups beyond the retention count."""
    manager = get_container().resolve(BackupManager)
    if args.keep is not None:
        manager.policy = RetentionPolicy(keep=args.keep, name_suffix=manager.policy.name_suffix)

    result = manager.prune(dry_run=args.dry_run)
    if result.error:
        print_error(f"Could not list backups: {result.error}")
        return 1

    if not result.deleted and not result.failed:
        console.print(f"[dim]Nothing to clean up ({len(result.kept)} backup(s) kept)[/]")
    else:
        _print_prune(result)
    return 0


def cmd_list(args) -> int:
    """List this VM's automatic backups."""
    manager = get_container().resolve(BackupManager)
    backups = manager.list_backups()

    if args.json:
        console.print_json(json.dumps([s.to_dict() for s in backups]))
        return 0

    if not backups:
        console.print("[dim]No automatic backups found[/]")
        return 0

    keep = manager.policy.keep
    table = Table(title=f"Automatic backups (keeping {keep})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Created", style="blue")
    table.add_column("Disk", style="green")
    table.add_column("Location", style="yellow")
    table.add_column("Status", style="magenta")

    for idx, snapshot in enumerate(backups, 1):
        table.add_row(
            str(idx),
            escape(snapshot.name) if idx <= keep else f"[strike]{escape(snapshot.name)}[/]",
            snapshot.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            snapshot.source_disk or "",
            ", ".join(snapshot.storage_locations),
            snapshot.status or "",
        )

    console.print(table)
    return 0
