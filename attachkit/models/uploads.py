"""Uploaded file handles handed to the coordinator by the transport layer."""

from __future__ import annotations

import io
import os
from pathlib import Path, PurePosixPath
from typing import BinaryIO


class UploadedFile:
    """A rewindable byte stream plus the client's original filename.

    Parameters
    ----------
    stream:
        Seekable binary stream holding the upload.
    filename:
        Filename as sent by the client; only its extension is used.
    size:
        Byte length.  Measured from the stream when omitted.
    path:
        Local path of the spooled upload, if the transport has one.  Image
        checks use it directly instead of spooling the stream again.
    """

    def __init__(
        self,
        stream: BinaryIO,
        filename: str,
        size: int | None = None,
        *,
        path: Path | str | None = None,
    ) -> None:
        self.stream = stream
        self.filename = filename
        self.path = Path(path) if path is not None else None
        self.size = size if size is not None else self._measure()

    @classmethod
    def from_bytes(cls, data: bytes, filename: str) -> "UploadedFile":
        return cls(io.BytesIO(data), filename, len(data))

    @classmethod
    def from_path(cls, path: Path | str) -> "UploadedFile":
        """Open a local file as an upload.  Close it with ``close()``."""
        path = Path(path)
        return cls(path.open("rb"), path.name, path.stat().st_size, path=path)

    def _measure(self) -> int:
        pos = self.stream.tell()
        self.stream.seek(0, os.SEEK_END)
        size = self.stream.tell()
        self.stream.seek(pos)
        return size

    @property
    def extension(self) -> str:
        """Extension of the original filename including the dot, or ``""``."""
        name = self.filename.replace("\\", "/")
        return PurePosixPath(name).suffix

    def rewind(self) -> None:
        self.stream.seek(0)

    def read(self) -> bytes:
        """Rewind and return the full content."""
        self.rewind()
        return self.stream.read()

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "UploadedFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"UploadedFile(filename={self.filename!r}, size={self.size})"
