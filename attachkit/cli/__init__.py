"""attachkit CLI — Typer-based operator commands.

Provides the ``attachkit`` command with subcommands for inspecting stored
paths, purging every version of a stored file, identifying images and
showing the effective storage settings.

All output uses Rich for formatted terminal display.
"""
