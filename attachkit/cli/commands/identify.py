"""``attachkit identify FILE`` — report image format and dimensions."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from attachkit.config import StorageSettings
from attachkit.core.errors import ImageMagickError
from attachkit.transform.imagemagick import ImageMagickBackend

console = Console()


def identify_cmd(
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="File to inspect.",
    ),
) -> None:
    """Run ImageMagick ``identify`` on FILE."""
    backend = ImageMagickBackend(StorageSettings())
    try:
        info = backend.info(file)
    except ImageMagickError as exc:
        console.print(f"[bold red]Not an image:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(
        f"[bold]{file.name}[/bold]  format=[cyan]{info.format}[/cyan]  "
        f"size=[cyan]{info.width}x{info.height}[/cyan]"
    )
