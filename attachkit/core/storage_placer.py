"""Filesystem writes, reads and deletes for resolved attachment paths.

Layout: {root}/{dir}/{file_id}{ext} for the original and
{root}/{dir}/{file_id}_{version}{ext} for every derived version.
Deleting a file id removes all of them at once, whatever versions are
currently configured.
"""

from __future__ import annotations

import glob
import logging
import os
import tempfile
from pathlib import Path

from attachkit.core.errors import StorageDeleteError, StorageWriteError
from attachkit.core.path_resolver import PathResolver
from attachkit.models.paths import StorageRoot, StoredFileId
from attachkit.models.uploads import UploadedFile

logger = logging.getLogger(__name__)

FILE_CHUNK_SIZE = 64 * 1024


class StoragePlacer:
    """Persists originals and removes every stored version of a file id.

    Parameters
    ----------
    resolver:
        Path resolver bound to the configured roots.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver
        self._file_mode = resolver.settings.file_mode
        self._dir_mode = resolver.settings.dir_mode

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def ensure_dir(self, path: Path) -> None:
        """Create *path* and its parents; existing directories are fine."""
        try:
            Path(path).mkdir(mode=self._dir_mode, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageWriteError(f"Cannot create directory {path}: {exc}") from exc

    def write_original(
        self, file_id: StoredFileId, source: UploadedFile, root: StorageRoot
    ) -> Path:
        """Copy the whole upload to the unversioned path under *root*.

        The content goes to a temporary file in the destination directory
        which is renamed into place, so a failed write never leaves a
        partial file under the final name.
        """
        destination = self._resolver.path(file_id, None, root)
        self.ensure_dir(destination.parent)

        source.rewind()
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{file_id.file_id}.", suffix=".part", dir=destination.parent
            )
        except OSError as exc:
            raise StorageWriteError(f"Cannot write {destination}: {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as out:
                while chunk := source.stream.read(FILE_CHUNK_SIZE):
                    out.write(chunk)
            os.chmod(tmp_name, self._file_mode)
            os.replace(tmp_name, destination)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StorageWriteError(f"Cannot write {destination}: {exc}") from exc

        logger.debug("Wrote original %s (%s bytes)", destination, source.size)
        return destination

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def exists(
        self, file_id: StoredFileId, version: str | None = None, root: StorageRoot = StorageRoot.PUBLIC
    ) -> bool:
        return self._resolver.path(file_id, version, root).is_file()

    def read_bytes(
        self, file_id: StoredFileId, version: str | None = None, root: StorageRoot = StorageRoot.PUBLIC
    ) -> bytes:
        """Return the stored bytes of *version*; ``FileNotFoundError`` if absent."""
        path = self._resolver.path(file_id, version, root)
        if not path.is_file():
            raise FileNotFoundError(f"Stored file not found: {path}")
        return path.read_bytes()

    def list_versions(self, file_id: StoredFileId, root: StorageRoot) -> list[Path]:
        """Every stored file of *file_id* under *root*, sorted."""
        directory = self._resolver.directory(file_id, root)
        base = glob.escape(str(directory / file_id.file_id))
        matches: set[str] = set()
        # The file id itself, ``id.ext`` and ``id_version.ext``; a longer
        # generated (hex) id sharing the prefix never matches.
        for pattern in (base, f"{base}.*", f"{base}_*"):
            matches.update(glob.glob(pattern))
        return sorted(Path(m) for m in matches if os.path.isfile(m))

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_all_versions(self, file_id: StoredFileId, root: StorageRoot) -> list[Path]:
        """Delete every version of *file_id* under *root*.

        Nothing to delete is not an error.  Returns the removed paths.
        """
        removed: list[Path] = []
        for path in self.list_versions(file_id, root):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StorageDeleteError(f"Cannot delete {path}: {exc}") from exc
            removed.append(path)

        if removed:
            logger.debug(
                "Deleted %d %s file(s) of %s", len(removed), root.value, file_id.unversioned
            )
        return removed

    def delete_everywhere(self, file_id: StoredFileId) -> list[Path]:
        """Delete every version of *file_id* under both roots."""
        removed = self.delete_all_versions(file_id, StorageRoot.PUBLIC)
        removed += self.delete_all_versions(file_id, StorageRoot.PRIVATE)
        return removed
