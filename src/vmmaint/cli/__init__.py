#!/usr/bin/env python3
"""
vmmaint CLI package.
"""

from .parsers import build_parser, main
from .utils import console, load_config
from .backup_commands import cmd_backup, cmd_list, cmd_prune
from .system_commands import cmd_reboot_check, cmd_render, cmd_setup

__all__ = [
    "main",
    "build_parser",
    "console",
    "load_config",
    "cmd_backup",
    "cmd_list",
    "cmd_prune",
    "cmd_reboot_check",
    "cmd_render",
    "cmd_setup",
]
