"""Tests for StoragePlacer — atomic writes, permissions, glob deletion."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from attachkit.core.errors import StorageDeleteError, StorageWriteError
from attachkit.core.path_resolver import PathResolver
from attachkit.core.storage_placer import StoragePlacer
from attachkit.models.paths import StorageRoot, StoredFileId
from attachkit.models.uploads import UploadedFile


@pytest.fixture
def fid() -> StoredFileId:
    return StoredFileId(dir="2024/01/01", file_id="abc", ext=".jpg")


def _touch(path: Path, data: bytes = b"x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


class TestWriteOriginal:
    def test_write_public(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        upload = UploadedFile.from_bytes(b"jpeg bytes", "photo.jpg")
        upload.stream.read()  # stream not at start
        written = placer.write_original(fid, upload, StorageRoot.PUBLIC)
        assert written == resolver.public_path(fid)
        assert written.read_bytes() == b"jpeg bytes"
        assert not resolver.private_path(fid).exists()

    def test_write_private(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        placer.write_original(fid, UploadedFile.from_bytes(b"secret", "a.jpg"), StorageRoot.PRIVATE)
        assert resolver.private_path(fid).read_bytes() == b"secret"
        assert not resolver.public_path(fid).exists()

    def test_file_mode_applied(self, placer: StoragePlacer, fid: StoredFileId):
        written = placer.write_original(fid, UploadedFile.from_bytes(b"x", "a.jpg"), StorageRoot.PUBLIC)
        assert stat.S_IMODE(written.stat().st_mode) == 0o664

    def test_no_temp_files_left(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        placer.write_original(fid, UploadedFile.from_bytes(b"x", "a.jpg"), StorageRoot.PUBLIC)
        directory = resolver.directory(fid, StorageRoot.PUBLIC)
        assert sorted(p.name for p in directory.iterdir()) == ["abc.jpg"]

    def test_overwrite_existing(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        placer.write_original(fid, UploadedFile.from_bytes(b"old", "a.jpg"), StorageRoot.PUBLIC)
        placer.write_original(fid, UploadedFile.from_bytes(b"new", "a.jpg"), StorageRoot.PUBLIC)
        assert resolver.public_path(fid).read_bytes() == b"new"

    def test_failed_write_leaves_nothing(
        self,
        placer: StoragePlacer,
        resolver: PathResolver,
        fid: StoredFileId,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def fail_replace(src, dst):
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr(os, "replace", fail_replace)
        with pytest.raises(StorageWriteError, match="read-only"):
            placer.write_original(fid, UploadedFile.from_bytes(b"x", "a.jpg"), StorageRoot.PUBLIC)
        directory = resolver.directory(fid, StorageRoot.PUBLIC)
        assert list(directory.iterdir()) == []

    def test_unwritable_root(self, tmp_path: Path, fid: StoredFileId):
        from attachkit.config import StorageSettings

        blocker = _touch(tmp_path / "not_a_dir")
        placer = StoragePlacer(PathResolver(StorageSettings(public_root=blocker)))
        with pytest.raises(StorageWriteError):
            placer.write_original(fid, UploadedFile.from_bytes(b"x", "a.jpg"), StorageRoot.PUBLIC)


class TestEnsureDir:
    def test_idempotent(self, placer: StoragePlacer, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c"
        placer.ensure_dir(target)
        placer.ensure_dir(target)
        assert target.is_dir()


class TestDeleteAllVersions:
    def test_deletes_original_and_versions(
        self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId
    ):
        for version in (None, "small", "large"):
            _touch(resolver.public_path(fid, version))
        other_ext = _touch(resolver.directory(fid, StorageRoot.PUBLIC) / "abc.png")

        removed = placer.delete_all_versions(fid, StorageRoot.PUBLIC)

        assert len(removed) == 4
        assert not other_ext.exists()
        assert placer.list_versions(fid, StorageRoot.PUBLIC) == []

    def test_keeps_other_ids(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        _touch(resolver.public_path(fid))
        directory = resolver.directory(fid, StorageRoot.PUBLIC)
        longer = _touch(directory / "abcdef.jpg")
        sibling = _touch(directory / "xyz_small.jpg")

        placer.delete_all_versions(fid, StorageRoot.PUBLIC)

        assert longer.exists()
        assert sibling.exists()

    def test_only_touches_given_root(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        _touch(resolver.public_path(fid))
        private = _touch(resolver.private_path(fid))
        placer.delete_all_versions(fid, StorageRoot.PUBLIC)
        assert private.exists()

    def test_second_call_is_noop(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        _touch(resolver.public_path(fid, "small"))
        assert len(placer.delete_all_versions(fid, StorageRoot.PUBLIC)) == 1
        assert placer.delete_all_versions(fid, StorageRoot.PUBLIC) == []

    def test_missing_directory_is_noop(self, placer: StoragePlacer, fid: StoredFileId):
        assert placer.delete_everywhere(fid) == []

    def test_glob_characters_in_dir_are_literal(self, placer: StoragePlacer, resolver: PathResolver):
        fid = StoredFileId(dir="weird[1]", file_id="abc", ext=".jpg")
        path = _touch(resolver.public_path(fid))
        assert placer.delete_all_versions(fid, StorageRoot.PUBLIC) == [path]

    def test_delete_everywhere(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        _touch(resolver.public_path(fid, "small"))
        _touch(resolver.private_path(fid))
        removed = placer.delete_everywhere(fid)
        assert len(removed) == 2

    def test_permission_error_raises(
        self,
        placer: StoragePlacer,
        resolver: PathResolver,
        fid: StoredFileId,
        monkeypatch: pytest.MonkeyPatch,
    ):
        _touch(resolver.public_path(fid))

        def deny(self, missing_ok=False):
            raise PermissionError("denied")

        monkeypatch.setattr(Path, "unlink", deny)
        with pytest.raises(StorageDeleteError, match="denied"):
            placer.delete_all_versions(fid, StorageRoot.PUBLIC)


class TestRead:
    def test_exists_and_read(self, placer: StoragePlacer, resolver: PathResolver, fid: StoredFileId):
        assert placer.exists(fid) is False
        _touch(resolver.public_path(fid, "small"), b"thumb")
        assert placer.exists(fid, "small") is True
        assert placer.read_bytes(fid, "small") == b"thumb"

    def test_read_missing(self, placer: StoragePlacer, fid: StoredFileId):
        with pytest.raises(FileNotFoundError):
            placer.read_bytes(fid, None, StorageRoot.PRIVATE)
