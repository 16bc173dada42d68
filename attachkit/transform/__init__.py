"""Transformation backends — the external tools that derive versions."""

from attachkit.transform.base import ImageBackend, Transformer, VersionTransformer
from attachkit.transform.command import run_command
from attachkit.transform.imagemagick import ImageCommand, ImageInfo, ImageMagickBackend

__all__ = [
    "Transformer",
    "ImageBackend",
    "VersionTransformer",
    "run_command",
    "ImageCommand",
    "ImageInfo",
    "ImageMagickBackend",
]
