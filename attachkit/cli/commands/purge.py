"""``attachkit purge STORED_PATH`` — delete every version of a stored file.

Removes the original and all derived versions from both the public and the
private root.  The entity field pointing at the path is not touched.
"""

from __future__ import annotations

import typer
from rich.console import Console

from attachkit.config import StorageSettings
from attachkit.core.errors import InvalidPathError, StorageError
from attachkit.core.path_resolver import PathResolver
from attachkit.core.storage_placer import StoragePlacer
from attachkit.models.paths import StorageRoot

console = Console()


def purge_cmd(
    stored_path: str = typer.Argument(
        ...,
        help="Relative path as stored on the entity.",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation.",
    ),
) -> None:
    """Delete the original and all versions of STORED_PATH in both roots."""
    resolver = PathResolver(StorageSettings())
    placer = StoragePlacer(resolver)
    try:
        file_id = resolver.parse(stored_path)
    except InvalidPathError as exc:
        console.print(f"[bold red]Invalid path:[/bold red] {exc}")
        raise typer.Exit(code=1)

    candidates = placer.list_versions(file_id, StorageRoot.PUBLIC) + placer.list_versions(
        file_id, StorageRoot.PRIVATE
    )
    if not candidates:
        console.print(f"[dim]No files stored for {file_id.unversioned}.[/dim]")
        return

    for path in candidates:
        console.print(f"  {path}")
    if not yes and not typer.confirm(f"Delete {len(candidates)} file(s)?"):
        console.print("[yellow]Aborted.[/yellow]")
        raise typer.Exit(code=1)

    try:
        removed = placer.delete_everywhere(file_id)
    except StorageError as exc:
        console.print(f"[bold red]Delete failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(f"[bold green]Deleted {len(removed)} file(s).[/bold green]")
