"""ImageMagick command-line backend.

Works on files only: the original is never decoded in-process.  Options are
taken from the enumerated ``ImageOp`` set, so every argument that reaches
the command line has been validated at configuration time.

Example
-------
::

    cmd = ImageCommand("original.jpg").add(ImageOp.RESIZE, "40x30")
    cmd.render_convert("new.jpg")
    # 'convert original.jpg -resize 40x30 new.jpg'
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from attachkit.config import StorageSettings
from attachkit.core.errors import ImageMagickError
from attachkit.models.config import ImageOp, ImageOperation
from attachkit.transform.command import run_command

logger = logging.getLogger(__name__)


class ImageInfo(BaseModel):
    """Format and dimensions reported by ``identify``."""

    model_config = ConfigDict(frozen=True)

    format: str
    width: int
    height: int


class ImageCommand:
    """Accumulates options for one image and renders convert/mogrify calls.

    Parameters
    ----------
    filename:
        The input image.
    operations:
        Initial options, applied in order.
    """

    def __init__(
        self,
        filename: Path | str,
        operations: Iterable[ImageOperation] = (),
        *,
        convert_bin: str = "convert",
        mogrify_bin: str = "mogrify",
    ) -> None:
        self.filename = str(filename)
        self.operations: list[ImageOperation] = list(operations)
        self._convert_bin = convert_bin
        self._mogrify_bin = mogrify_bin

    def add(self, op: ImageOp | str, value: object = None) -> "ImageCommand":
        """Append one option; returns ``self`` for chaining."""
        self.operations.append(
            ImageOperation(op=ImageOp(op), value=None if value is None else str(value))
        )
        return self

    def _option_args(self) -> list[str]:
        args: list[str] = []
        for operation in self.operations:
            args.extend(operation.to_args())
        return args

    def convert_argv(self, output_filename: Path | str) -> list[str]:
        return [self._convert_bin, self.filename, *self._option_args(), str(output_filename)]

    def mogrify_argv(self) -> list[str]:
        return [self._mogrify_bin, *self._option_args(), self.filename]

    def render_convert(self, output_filename: Path | str) -> str:
        """The shell command ``save_as`` would run, without running it."""
        return shlex.join(self.convert_argv(output_filename))

    def render_mogrify(self) -> str:
        """The shell command ``save`` would run, without running it."""
        return shlex.join(self.mogrify_argv())


class ImageMagickBackend:
    """Runs ``convert``, ``mogrify`` and ``identify`` as subprocesses.

    Parameters
    ----------
    settings:
        Supplies the tool names and the per-command timeout.
    """

    def __init__(self, settings: StorageSettings | None = None) -> None:
        self._settings = settings or StorageSettings()

    def command(self, filename: Path | str, operations: Iterable[ImageOperation] = ()) -> ImageCommand:
        return ImageCommand(
            filename,
            operations,
            convert_bin=self._settings.imagemagick_convert,
            mogrify_bin=self._settings.imagemagick_mogrify,
        )

    def _run(self, argv: list[str]) -> str:
        return run_command(
            argv, timeout=self._settings.transform_timeout, error_cls=ImageMagickError
        )

    def convert(
        self,
        input_path: Path | str,
        output_path: Path | str,
        operations: Iterable[ImageOperation],
    ) -> None:
        """Write a transformed copy of *input_path* to *output_path*."""
        argv = self.command(input_path, operations).convert_argv(output_path)
        logger.debug("ImageMagick running %s", shlex.join(argv))
        self._run(argv)

    def mogrify(self, path: Path | str, operations: Iterable[ImageOperation]) -> None:
        """Transform *path* in place."""
        argv = self.command(path, operations).mogrify_argv()
        logger.debug("ImageMagick running %s", shlex.join(argv))
        self._run(argv)

    def info(self, path: Path | str) -> ImageInfo:
        """Format and size of the first frame of *path*."""
        argv = [self._settings.imagemagick_identify, "-format", "%m %w %h\n", str(path)]
        output = self._run(argv).strip()
        first = output.splitlines()[0] if output else ""
        parts = first.split()
        if len(parts) != 3 or not parts[1].isdigit() or not parts[2].isdigit():
            raise ImageMagickError(argv, f"unexpected identify output {output!r}")
        return ImageInfo(format=parts[0].lower(), width=int(parts[1]), height=int(parts[2]))

    def is_image(self, path: Path | str) -> bool:
        """True if ``identify`` recognises *path* as an image."""
        argv = [self._settings.imagemagick_identify, str(path)]
        try:
            output = self._run(argv)
        except ImageMagickError as exc:
            logger.debug("Not an image: %s (%s)", path, exc)
            return False
        return bool(output.strip())
