"""Stored file identifiers — the dir/file_id/ext triple behind every attachment."""

from __future__ import annotations

import posixpath
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

from attachkit.core.errors import InvalidPathError

_FORBIDDEN_IN_VERSION = ("/", "\\", ".")


class StorageRoot(str, Enum):
    """The two filesystem areas a stored file can live in."""

    PUBLIC = "public"
    PRIVATE = "private"


def check_version_name(version: str) -> str:
    """Return *version* unchanged if it can be embedded in a file name.

    Raises ``InvalidPathError`` for names containing path separators or dots.
    """
    if any(ch in version for ch in _FORBIDDEN_IN_VERSION):
        raise InvalidPathError(
            f"Version name {version!r} must not contain '/', '\\' or '.'"
        )
    return version


def normalize_dir(value: str) -> str:
    """Normalize a relative directory segment (``.`` means no directory)."""
    value = value.replace("\\", "/").strip()
    if not value:
        return "."
    cleaned = posixpath.normpath(value).lstrip("/") or "."
    if cleaned == ".." or cleaned.startswith("../"):
        raise InvalidPathError(f"Directory {value!r} escapes the storage root")
    return cleaned


class StoredFileId(BaseModel):
    """Identifies one logical attachment instance.

    ``file_id`` never contains ``.`` or separators and version names never
    contain ``.``, so the extension always splits off cleanly.  Ids made by
    ``PathResolver.fresh_id`` are lowercase hex, which keeps
    ``{file_id}_{version}{ext}`` unambiguous; stored paths from elsewhere
    may carry ``_`` in their id and still parse.
    """

    model_config = ConfigDict(frozen=True)

    dir: str = "."
    file_id: str
    ext: str = ""

    @field_validator("dir")
    @classmethod
    def _normalize_dir(cls, value: str) -> str:
        return normalize_dir(value)

    @field_validator("file_id")
    @classmethod
    def _check_file_id(cls, value: str) -> str:
        if not value:
            raise ValueError("file_id must not be empty")
        for ch in ("/", "\\", "."):
            if ch in value:
                raise ValueError(f"file_id {value!r} must not contain {ch!r}")
        return value

    @field_validator("ext")
    @classmethod
    def _check_ext(cls, value: str) -> str:
        if value and (not value.startswith(".") or "/" in value or "\\" in value):
            raise ValueError(f"Extension {value!r} must start with '.' and have no separators")
        return value

    def versioned(self, version: str | None = None) -> str:
        """Relative path of *version*; ``None`` or ``""`` is the unversioned file."""
        suffix = f"_{check_version_name(version)}" if version else ""
        name = f"{self.file_id}{suffix}{self.ext}"
        return name if self.dir == "." else f"{self.dir}/{name}"

    @property
    def unversioned(self) -> str:
        """Relative path of the original, the value persisted on the host entity."""
        return self.versioned(None)

    def __str__(self) -> str:
        return self.unversioned
