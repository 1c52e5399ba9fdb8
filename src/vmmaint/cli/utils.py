#!/usr/bin/env python3
"""
Shared utilities for the vmmaint CLI.
"""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from vmmaint.config import MaintenanceConfig
from vmmaint.di import DependencyContainer, create_default_container, set_container

console = Console()


def load_config(config_path: Optional[str]) -> MaintenanceConfig:
    """Load the config named on the command line, or discover the default."""
    return MaintenanceConfig.discover(Path(config_path) if config_path else None)


def install_container(config: MaintenanceConfig, config_path: Optional[str]) -> DependencyContainer:
    """Build the default container for *config* and make it the global one."""
    container = create_default_container(
        config, Path(config_path).resolve() if config_path else None
    )
    set_container(container)
    return container


def print_error(message: str) -> None:
    console.print(f"[red]❌ {escape(message)}[/]")
