"""Main Typer application — registers all CLI commands.

Entry point: ``attachkit`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from attachkit.cli.commands.identify import identify_cmd
from attachkit.cli.commands.paths import paths_cmd
from attachkit.cli.commands.purge import purge_cmd
from attachkit.cli.commands.settings_cmd import settings_cmd

app = typer.Typer(
    name="attachkit",
    help="attachkit: attachment storage paths, versions and cleanup.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="paths", help="Show public, private and URL forms of a stored path.")(paths_cmd)
app.command(name="purge", help="Delete every version of a stored file.")(purge_cmd)
app.command(name="identify", help="Show image format and size via ImageMagick.")(identify_cmd)
app.command(name="settings", help="Show the effective storage settings.")(settings_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
