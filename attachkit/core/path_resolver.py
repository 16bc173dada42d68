"""Pure path computation for stored attachments (no I/O).

A stored attachment is identified by a relative path such as
``avatars/2024/03/07/<sha256>.png``.  Every version lives next to it as
``<sha256>_<version>.png`` and can be resolved under the public root, the
private root, or the URL prefix.
"""

from __future__ import annotations

import os
import posixpath
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import ValidationError

from attachkit.config import StorageSettings
from attachkit.core.errors import InvalidPathError
from attachkit.core.hasher import compute_file_id, date_bucket
from attachkit.models.paths import StorageRoot, StoredFileId


class PathResolver:
    """Maps ``StoredFileId`` values to filesystem paths and URLs.

    Parameters
    ----------
    settings:
        Supplies ``public_root``, ``private_root`` and ``url_prefix``.
    """

    def __init__(self, settings: StorageSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> StorageSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, path: str | Mapping[str, str] | StoredFileId) -> StoredFileId:
        """Decompose a relative path (or a dir/file_id/ext mapping).

        The basename up to its first dot is the file id and the last suffix
        is the extension, so parsing an unversioned path returns the id that
        produced it.
        """
        if isinstance(path, StoredFileId):
            return path
        if isinstance(path, Mapping):
            try:
                return StoredFileId(
                    dir=path.get("dir", "."),
                    file_id=path.get("file_id", ""),
                    ext=path.get("ext", ""),
                )
            except ValidationError as exc:
                raise InvalidPathError(f"Invalid file id components {dict(path)!r}: {exc}") from exc

        if not isinstance(path, str) or not path.strip():
            raise InvalidPathError(f"Cannot parse empty path {path!r}")

        cleaned = posixpath.normpath(path.strip().replace("\\", "/")).lstrip("/")
        if cleaned in ("", ".", "..") or cleaned.startswith("../"):
            raise InvalidPathError(f"Path {path!r} does not name a file inside the storage root")

        dirname, basename = posixpath.split(cleaned)
        file_id = basename.split(".")[0]
        ext = posixpath.splitext(basename)[1]
        try:
            return StoredFileId(dir=dirname or ".", file_id=file_id, ext=ext)
        except ValidationError as exc:
            raise InvalidPathError(f"Cannot parse stored path {path!r}: {exc}") from exc

    def fresh_id(
        self,
        attribute: str,
        identity: object,
        filename: str,
        *,
        base_dir: str = "",
        now: datetime | None = None,
    ) -> StoredFileId:
        """New id under ``{base_dir}/YYYY/MM/DD`` with the upload's extension."""
        bucket = date_bucket(now)
        directory = f"{base_dir}/{bucket}" if base_dir else bucket
        ext = posixpath.splitext(filename.replace("\\", "/"))[1]
        return StoredFileId(
            dir=directory,
            file_id=compute_file_id(attribute, identity, now),
            ext=ext,
        )

    # ------------------------------------------------------------------
    # Relative forms
    # ------------------------------------------------------------------

    @staticmethod
    def unversioned(file_id: StoredFileId) -> str:
        return file_id.unversioned

    @staticmethod
    def versioned(file_id: StoredFileId, version: str | None = None) -> str:
        return file_id.versioned(version)

    # ------------------------------------------------------------------
    # Rooted forms
    # ------------------------------------------------------------------

    def root(self, root: StorageRoot) -> Path:
        if root == StorageRoot.PUBLIC:
            return Path(self._settings.public_root)
        return Path(self._settings.private_root)

    def path(self, file_id: StoredFileId, version: str | None, root: StorageRoot) -> Path:
        joined = os.path.join(str(self.root(root)), file_id.versioned(version))
        return Path(os.path.normpath(joined))

    def public_path(self, file_id: StoredFileId, version: str | None = None) -> Path:
        """Filesystem path of *version* under the public root."""
        return self.path(file_id, version, StorageRoot.PUBLIC)

    def private_path(self, file_id: StoredFileId, version: str | None = None) -> Path:
        """Filesystem path of *version* under the private root."""
        return self.path(file_id, version, StorageRoot.PRIVATE)

    def directory(self, file_id: StoredFileId, root: StorageRoot) -> Path:
        return Path(os.path.normpath(os.path.join(str(self.root(root)), file_id.dir)))

    def url(self, file_id: StoredFileId, version: str | None = None) -> str:
        """Browser URL of *version*.

        Only the path component of the prefix is normalized, so absolute
        prefixes such as ``https://cdn.example.com/files/`` keep their scheme.
        """
        prefix = self._settings.url_prefix
        parts = urlsplit(prefix)
        if not parts.scheme:
            joined = posixpath.normpath(f"{prefix}/{file_id.versioned(version)}")
            # normpath keeps a leading "//"
            return "/" + joined.lstrip("/") if prefix.startswith("/") else joined
        joined = posixpath.normpath(f"/{parts.path}/{file_id.versioned(version)}")
        return urlunsplit((parts.scheme, parts.netloc, "/" + joined.lstrip("/"), "", ""))
