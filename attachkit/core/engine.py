"""Attachment engine — wires settings, paths, storage and transformers together.

One engine is built per host entity type at startup.  It owns the attribute
registry and hands out a fresh ``AttachmentCoordinator`` for every entity
instance that stages changes.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from attachkit.config import StorageSettings, configure_logging
from attachkit.core.coordinator import AttachmentCoordinator
from attachkit.core.path_resolver import PathResolver
from attachkit.core.registry import AttachmentRegistry
from attachkit.core.storage_placer import StoragePlacer
from attachkit.core.version_pipeline import VersionPipeline
from attachkit.models.config import AttachmentConfig
from attachkit.transform.base import ImageBackend, Transformer, VersionTransformer
from attachkit.transform.imagemagick import ImageMagickBackend


class AttachmentEngine:
    """Entry point for hosts.

    Parameters
    ----------
    settings:
        Roots, URL prefix and tool settings.  Read from the environment
        when not provided.
    registry:
        Pre-built attribute registry; an empty one is created otherwise.
    image_backend:
        Image validity checks and ``ImageVersion`` conversions.  Defaults to
        the ImageMagick command-line tools.
    transformer:
        Version producer.  Defaults to ``VersionTransformer`` over
        *image_backend*.
    """

    def __init__(
        self,
        settings: StorageSettings | None = None,
        *,
        registry: AttachmentRegistry | None = None,
        image_backend: ImageBackend | None = None,
        transformer: Transformer | None = None,
    ) -> None:
        self.settings = settings or StorageSettings()
        configure_logging(self.settings)

        self.registry = registry or AttachmentRegistry()
        self.image_backend = image_backend or ImageMagickBackend(self.settings)
        self.transformer = transformer or VersionTransformer(self.image_backend, self.settings)

        self.resolver = PathResolver(self.settings)
        self.placer = StoragePlacer(self.resolver)
        self.pipeline = VersionPipeline(self.resolver, self.placer, self.transformer)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def has_file(self, name: str, **options: Any) -> AttachmentConfig:
        return self.registry.has_file(name, **options)

    def has_image(self, name: str, **options: Any) -> AttachmentConfig:
        return self.registry.has_image(name, **options)

    # ------------------------------------------------------------------
    # Per-entity operations
    # ------------------------------------------------------------------

    def coordinator(self) -> AttachmentCoordinator:
        """A new coordinator for one entity instance."""
        return AttachmentCoordinator(
            self.registry, self.resolver, self.placer, self.pipeline, self.image_backend
        )

    def url(
        self, entity: MutableMapping[str, Any], attribute: str, version: str | None = None
    ) -> str | None:
        """URL of a stored attachment version, or ``None`` without a file."""
        return self.coordinator().url(entity, attribute, version)

    def destroy_all(self, entity: MutableMapping[str, Any]) -> list[str]:
        """Delete every stored file of *entity*; call after the entity is gone."""
        return self.coordinator().destroy_all(entity)
