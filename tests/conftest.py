"""Shared test fixtures for attachkit."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from attachkit.config import StorageSettings
from attachkit.core.engine import AttachmentEngine
from attachkit.core.path_resolver import PathResolver
from attachkit.core.storage_placer import StoragePlacer
from attachkit.models.uploads import UploadedFile

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"


class FakeImageBackend:
    """Image backend that copies files and recognises PNG/JPEG magic bytes."""

    def __init__(self) -> None:
        self.converted: list[tuple[str, str, list[Any]]] = []
        self.checked: list[str] = []

    def is_image(self, path: str) -> bool:
        self.checked.append(path)
        head = Path(path).read_bytes()[:8]
        return head.startswith(PNG_MAGIC) or head.startswith(JPEG_MAGIC)

    def convert(self, input_path: str, output_path: str, operations: Any) -> None:
        ops = list(operations)
        self.converted.append((input_path, output_path, ops))
        shutil.copyfile(input_path, output_path)
        with open(output_path, "ab") as out:
            for op in ops:
                out.write(f"|{op.op.value}={op.value}".encode())


@pytest.fixture
def settings(tmp_path: Path) -> StorageSettings:
    """Storage settings with both roots inside a temp directory."""
    return StorageSettings(
        public_root=tmp_path / "public",
        private_root=tmp_path / "private",
        url_prefix="/media/",
    )


@pytest.fixture
def resolver(settings: StorageSettings) -> PathResolver:
    return PathResolver(settings)


@pytest.fixture
def placer(resolver: PathResolver) -> StoragePlacer:
    return StoragePlacer(resolver)


@pytest.fixture
def image_backend() -> FakeImageBackend:
    return FakeImageBackend()


@pytest.fixture
def engine(settings: StorageSettings, image_backend: FakeImageBackend) -> AttachmentEngine:
    """Engine wired to temp roots and the fake image backend."""
    return AttachmentEngine(settings, image_backend=image_backend)


@pytest.fixture
def png_bytes() -> bytes:
    """2 KB of data that the fake backend treats as a PNG."""
    return PNG_MAGIC + b"\x00" * (2048 - len(PNG_MAGIC))


@pytest.fixture
def make_upload(png_bytes: bytes) -> Callable[..., UploadedFile]:
    """Factory fixture: an in-memory upload, PNG content by default."""

    def _factory(filename: str = "cat.png", data: bytes | None = None) -> UploadedFile:
        return UploadedFile.from_bytes(png_bytes if data is None else data, filename)

    return _factory


@pytest.fixture
def copy_version() -> Callable[[str, str], None]:
    """Callback transformer that copies the original to the version path."""

    def _copy(input_path: str, output_path: str) -> None:
        shutil.copyfile(input_path, output_path)

    return _copy
