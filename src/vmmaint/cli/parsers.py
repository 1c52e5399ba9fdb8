#!/usr/bin/env python3
"""
Argument parsers for the vmmaint CLI.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from vmmaint import __version__
from vmmaint.cli.backup_commands import cmd_backup, cmd_list, cmd_prune
from vmmaint.cli.system_commands import cmd_reboot_check, cmd_render, cmd_setup
from vmmaint.cli.utils import console, install_container, load_config, print_error
from vmmaint.errors import ConfigError, MaintenanceError
from vmmaint.logging import bind_run, configure_logging


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vmmaint",
        description="Weekly snapshots, security updates and reboot checks for a Compute Engine VM",
    )
    parser.add_argument("--version", action="version", version=f"vmmaint {__version__}")
    parser.add_argument(
        "--config", "-c", default=None, help="Config file (default: $VMMAINT_CONFIG or /etc/vmmaint/config.yaml)"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    parser.add_argument(
        "--log-file", type=Path, default=None, help="Also append JSON log lines to this file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Setup command
    setup_parser = subparsers.add_parser(
        "setup", help="Install packages and write apt, cron and logrotate configuration"
    )
    setup_parser.add_argument("--root", help="Write files below this directory instead of /")
    setup_parser.add_argument(
        "--skip-packages", action="store_true", help="Don't apt-get install anything"
    )
    setup_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be done without changing anything"
    )
    setup_parser.set_defaults(func=cmd_setup)

    # Render command
    render_parser = subparsers.add_parser("render", help="Print the files setup would write")
    render_parser.add_argument("--root", help="Show paths below this directory")
    render_parser.set_defaults(func=cmd_render)

    # Backup command
    backup_parser = subparsers.add_parser(
        "backup", help="Snapshot the data disk and prune old backups"
    )
    backup_parser.add_argument(
        "--dry-run", action="store_true", help="Log planned actions without calling gcloud"
    )
    backup_parser.set_defaults(func=cmd_backup)

    # Prune command
    prune_parser = subparsers.add_parser("prune", help="Delete backups beyond the retention count")
    prune_parser.add_argument("--keep", type=_positive_int, help="Override the retention count")
    prune_parser.add_argument("--dry-run", action="store_true", help="Only show what would be deleted")
    prune_parser.set_defaults(func=cmd_prune)

    # List command
    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List this VM's backups")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_parser.set_defaults(func=cmd_list)

    # Reboot-check command
    reboot_parser = subparsers.add_parser(
        "reboot-check", help="Reboot if an update left the reboot-required marker"
    )
    reboot_parser.add_argument("--dry-run", action="store_true", help="Report but don't reboot")
    reboot_parser.set_defaults(func=cmd_reboot_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        configure_logging(
            level=args.log_level, json_output=args.json_logs, log_file=args.log_file
        )
        bind_run(args.command)
        config = load_config(args.config)
        if getattr(args, "root", None):
            config.setup.root = Path(args.root)
        install_container(config, args.config)
        return args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        return 1
    except (MaintenanceError, ConfigError) as e:
        print_error(str(e))
        return 1
