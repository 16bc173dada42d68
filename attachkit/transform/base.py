"""Pluggable transformation backends for version generation.

Defines the ``Transformer`` and ``ImageBackend`` Protocols the engine talks
to, and ``VersionTransformer``, the default transformer that dispatches on
the kind of version spec:

1. ``ImageVersion``    -> the image backend (ImageMagick by default).
2. ``CommandVersion``  -> an external command with ``{input}``/``{output}``.
3. ``CallbackVersion`` -> the configured Python callable.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from attachkit.config import StorageSettings
from attachkit.models.config import (
    CallbackVersion,
    CommandVersion,
    ImageOperation,
    ImageVersion,
    VersionSpec,
)
from attachkit.transform.command import run_command


@runtime_checkable
class Transformer(Protocol):
    """Produces one version file from an original.

    Implementations must create *output_path* and raise on failure.
    """

    def transform(self, input_path: str, output_path: str, spec: VersionSpec) -> None:
        ...


@runtime_checkable
class ImageBackend(Protocol):
    """File-based image tooling: validity checks and conversion."""

    def is_image(self, path: str) -> bool:
        ...

    def convert(
        self, input_path: str, output_path: str, operations: Iterable[ImageOperation]
    ) -> None:
        ...


class VersionTransformer:
    """Default ``Transformer``: routes each spec kind to its executor.

    Parameters
    ----------
    image_backend:
        Backend for ``ImageVersion`` specs.
    settings:
        Supplies the timeout for ``CommandVersion`` specs.
    """

    def __init__(
        self, image_backend: ImageBackend, settings: StorageSettings | None = None
    ) -> None:
        self._image_backend = image_backend
        self._timeout = (settings or StorageSettings()).transform_timeout

    def transform(self, input_path: str, output_path: str, spec: VersionSpec) -> None:
        if isinstance(spec, ImageVersion):
            self._image_backend.convert(input_path, output_path, spec.operations)
        elif isinstance(spec, CommandVersion):
            run_command(spec.argv(input_path, output_path), timeout=self._timeout)
        elif isinstance(spec, CallbackVersion):
            spec.callback(input_path, output_path)
        else:
            raise TypeError(f"Unsupported version spec {type(spec).__name__}")
