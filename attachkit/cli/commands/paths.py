"""``attachkit paths STORED_PATH`` — show where a stored file lives.

Prints the relative path, public and private filesystem paths and URL for
the original and each requested version, marking which files exist.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from attachkit.config import StorageSettings
from attachkit.core.errors import InvalidPathError
from attachkit.core.path_resolver import PathResolver
from attachkit.models.paths import StorageRoot

console = Console()


def _mark(exists: bool) -> str:
    return "[green]yes[/green]" if exists else "[dim]no[/dim]"


def paths_cmd(
    stored_path: str = typer.Argument(
        ...,
        help="Relative path as stored on the entity, e.g. 2024/01/01/abc.jpg.",
    ),
    versions: list[str] = typer.Option(
        [],
        "--version",
        "-v",
        help="Version name to resolve; repeat for several.",
    ),
) -> None:
    """Resolve a stored path for the original and the given versions."""
    resolver = PathResolver(StorageSettings())
    try:
        file_id = resolver.parse(stored_path)
        names: list[str | None] = [None, *versions]
        rows = [
            (
                name or "(original)",
                file_id.versioned(name),
                resolver.path(file_id, name, StorageRoot.PUBLIC),
                resolver.path(file_id, name, StorageRoot.PRIVATE),
                resolver.url(file_id, name),
            )
            for name in names
        ]
    except InvalidPathError as exc:
        console.print(f"[bold red]Invalid path:[/bold red] {exc}")
        raise typer.Exit(code=1)

    table = Table(title=f"Stored file {file_id.file_id}")
    table.add_column("Version", style="cyan")
    table.add_column("Relative")
    table.add_column("Public")
    table.add_column("Exists", justify="center")
    table.add_column("Private")
    table.add_column("Exists", justify="center")
    table.add_column("URL", style="green")

    for name, relative, public, private, url in rows:
        table.add_row(
            name,
            relative,
            str(public),
            _mark(public.is_file()),
            str(private),
            _mark(private.is_file()),
            url,
        )

    console.print(table)
