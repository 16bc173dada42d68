"""Running external commands for version generation."""

from __future__ import annotations

import logging
import subprocess

from attachkit.core.errors import CommandFailedError

logger = logging.getLogger(__name__)


def run_command(
    argv: list[str],
    *,
    timeout: float | None = None,
    error_cls: type[CommandFailedError] = CommandFailedError,
) -> str:
    """Run *argv* without a shell and return its stdout.

    Non-zero exit, timeouts and missing executables all raise *error_cls*.
    """
    logger.debug("Running %s", argv)
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise error_cls(argv, f"timed out after {timeout}s") from exc
    except (subprocess.SubprocessError, OSError) as exc:
        raise error_cls(argv, str(exc)) from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise error_cls(argv, detail, returncode=result.returncode)
    return result.stdout
