"""Places an original and derives its configured versions."""

from __future__ import annotations

import logging

from attachkit.core.errors import TransformationError
from attachkit.core.path_resolver import PathResolver
from attachkit.core.storage_placer import StoragePlacer
from attachkit.models.config import AttachmentConfig
from attachkit.models.paths import StorageRoot, StoredFileId
from attachkit.models.uploads import UploadedFile
from attachkit.transform.base import Transformer

logger = logging.getLogger(__name__)


class VersionPipeline:
    """Writes the original and runs the transformer once per version.

    Parameters
    ----------
    resolver:
        Computes the public and private paths for each version.
    placer:
        Writes the original.
    transformer:
        Produces each derived version file.
    """

    def __init__(
        self, resolver: PathResolver, placer: StoragePlacer, transformer: Transformer
    ) -> None:
        self._resolver = resolver
        self._placer = placer
        self._transformer = transformer

    @staticmethod
    def original_root(config: AttachmentConfig) -> StorageRoot:
        """Where the original of *config* is stored."""
        if config.has_versions and config.public_original:
            return StorageRoot.PRIVATE
        return StorageRoot.PUBLIC

    def materialize(
        self, config: AttachmentConfig, file_id: StoredFileId, upload: UploadedFile
    ) -> str:
        """Store *upload* under *file_id* and derive every configured version.

        Versions run in configuration order.  A failing version raises
        ``TransformationError``; files already written are left for the
        caller to clean up.  Returns the unversioned relative path.
        """
        root = self.original_root(config)
        original_path = self._placer.write_original(file_id, upload, root)

        if config.has_versions:
            self._placer.ensure_dir(self._resolver.directory(file_id, StorageRoot.PUBLIC))

        for version, spec in config.versions.items():
            output_path = self._resolver.public_path(file_id, version)
            logger.debug("Creating version %s of %s at %s", version, config.name, output_path)
            try:
                self._transformer.transform(str(original_path), str(output_path), spec)
            except Exception as exc:
                raise TransformationError(config.name, version, exc) from exc
            if not output_path.is_file():
                raise TransformationError(
                    config.name,
                    version,
                    FileNotFoundError(f"transformer did not create {output_path}"),
                )

        return file_id.unversioned
