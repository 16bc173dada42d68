"""``attachkit settings`` — show the effective storage settings."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from attachkit.config import StorageSettings

console = Console()


def settings_cmd() -> None:
    """Print settings as resolved from ATTACHKIT_* variables and .env."""
    settings = StorageSettings()
    table = Table(title="attachkit settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in settings.model_dump().items():
        if name in ("file_mode", "dir_mode"):
            value = oct(value)
        table.add_row(name, str(value))

    console.print(table)
