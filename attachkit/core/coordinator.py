"""Per-entity staging and commit of attachment changes.

The host calls ``stage_upload``/``stage_removal`` while handling a request,
``validate`` during its validation phase, ``commit`` from its save path and
``destroy_all`` after deleting the entity.  Nothing happens on the
filesystem until ``commit``.

Commit order per attribute:

- removal: delete every stored version, then clear the field;
- upload: write the original and all versions under a fresh id, then delete
  the previous files, then store the new path.

A failure in one attribute rolls back only that attribute's new files and
leaves its previous files and field untouched; other attributes proceed.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

from attachkit.core.errors import (
    AttachkitError,
    AttachmentValidationError,
    InvalidStateError,
    StorageError,
)
from attachkit.core.path_resolver import PathResolver
from attachkit.core.registry import AttachmentRegistry
from attachkit.core.storage_placer import StoragePlacer
from attachkit.core.version_pipeline import VersionPipeline
from attachkit.models.config import AttachmentConfig
from attachkit.models.operations import (
    VALID_TRANSITIONS,
    CommitReport,
    CoordinatorState,
    PendingOperations,
)
from attachkit.models.paths import StoredFileId
from attachkit.models.uploads import UploadedFile
from attachkit.transform.base import ImageBackend

logger = logging.getLogger(__name__)

# Values a form checkbox may submit to request removal.
REMOVAL_FLAGS = {True, 1, "1", "true", "on", "yes"}

HostEntity = MutableMapping[str, Any]


class AttachmentCoordinator:
    """Stages and commits attachment changes for one host entity instance.

    Not thread-safe: a coordinator belongs to the entity that owns it, and
    saves of the same entity must be serialized by the caller.

    Parameters
    ----------
    registry:
        The attachment attributes of the host entity type.
    resolver, placer, pipeline:
        Engine components shared across coordinators.
    image_backend:
        Used for ``is_image`` checks on image attributes.
    """

    def __init__(
        self,
        registry: AttachmentRegistry,
        resolver: PathResolver,
        placer: StoragePlacer,
        pipeline: VersionPipeline,
        image_backend: ImageBackend,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._placer = placer
        self._pipeline = pipeline
        self._image_backend = image_backend
        self._state = CoordinatorState.CLEAN
        self._pending: PendingOperations | None = None
        self.errors: dict[str, list[str]] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def pending(self) -> PendingOperations:
        """Staged operations, created on first access."""
        if self._pending is None:
            self._pending = PendingOperations()
        return self._pending

    def has_changes(self) -> bool:
        return self._pending is not None and not self._pending.is_empty()

    def _transition(self, target: CoordinatorState) -> None:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidStateError(
                f"Cannot go from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        self._state = target

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    def stage_removal(self, attribute: str, flag: Any = True) -> bool:
        """Mark *attribute* for removal if *flag* is a checkbox-style true.

        Returns whether the removal was staged.
        """
        self._registry.get(attribute)
        if isinstance(flag, (list, tuple)):
            # multi-valued form field: the last submitted value counts
            flag = flag[-1] if flag else None
        normalized = flag.lower() if isinstance(flag, str) else flag
        try:
            requested = normalized in REMOVAL_FLAGS
        except TypeError:
            requested = False
        if not requested:
            return False
        self._transition(CoordinatorState.STAGED)
        self.pending.removals.add(attribute)
        return True

    def stage_upload(self, attribute: str, upload: UploadedFile | str | None) -> bool:
        """Stage *upload* for *attribute*; a later upload replaces it.

        Empty form values (``None`` or strings) are ignored.  Returns whether
        the upload was staged.
        """
        self._registry.get(attribute)
        if upload is None or isinstance(upload, str):
            return False
        self._transition(CoordinatorState.STAGED)
        self.pending.uploads[attribute] = upload
        self.errors.pop(attribute, None)
        return True

    def discard(self) -> None:
        """Drop everything staged without touching the filesystem."""
        if self._state == CoordinatorState.STAGED:
            self._transition(CoordinatorState.CLEAN)
        self._pending = None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> dict[str, list[str]]:
        """Check staged uploads against size limits and image type.

        Failing uploads are unstaged so they can never be committed, together
        with any removal staged for the same attribute, so the stored file
        survives a rejected replacement.  The messages are returned and kept
        on ``self.errors``.
        """
        if self._pending is None:
            return {}
        failed: dict[str, list[str]] = {}
        for attribute, upload in list(self._pending.uploads.items()):
            messages = self._check_upload(self._registry.get(attribute), upload)
            if messages:
                failed[attribute] = messages
                del self._pending.uploads[attribute]
                self._pending.removals.discard(attribute)
                logger.info("Upload for %s rejected: %s", attribute, "; ".join(messages))
        self.errors.update(failed)
        return failed

    def _check_upload(self, config: AttachmentConfig, upload: UploadedFile) -> list[str]:
        messages: list[str] = []
        if config.max_size is not None and upload.size > config.max_size:
            messages.append("file too large")
        if config.is_image:
            with _local_copy(upload) as path:
                if not self._image_backend.is_image(path):
                    messages.append("is not an image")
        return messages

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def commit(
        self, entity: HostEntity, identity: object = None, *, strict: bool = True
    ) -> CommitReport:
        """Apply staged removals and uploads to the filesystem and *entity*.

        *identity* feeds the file id hash; defaults to ``entity["id"]`` or
        the entity's object identity.  Every attribute is processed even if
        another fails; with *strict* the collected errors are raised at the
        end (see ``CommitReport.raise_for_errors``).
        """
        previous = self._state
        self._transition(CoordinatorState.COMMITTING)
        try:
            failed = self.validate()
        except Exception:
            # nothing was applied yet; keep the staged changes for a retry
            self._state = previous
            raise

        report = CommitReport()
        try:
            for attribute, messages in failed.items():
                report.errors[attribute] = AttachmentValidationError({attribute: messages})

            pending = self._pending or PendingOperations()
            if identity is None:
                identity = entity.get("id") or id(entity)

            for attribute in pending.effective_removals():
                self._commit_removal(self._registry.get(attribute), entity, report)

            for attribute, upload in pending.uploads.items():
                self._commit_upload(self._registry.get(attribute), entity, upload, identity, report)
        finally:
            self._pending = None
            self._transition(CoordinatorState.COMMITTED)

        if strict:
            report.raise_for_errors()
        return report

    def _commit_removal(
        self, config: AttachmentConfig, entity: HostEntity, report: CommitReport
    ) -> None:
        stored = entity.get(config.field_name)
        if stored:
            try:
                self._placer.delete_everywhere(self._resolver.parse(stored))
            except AttachkitError as exc:
                logger.warning("Could not remove %s (%s): %s", config.name, stored, exc)
                report.errors[config.name] = exc
                return
        entity[config.field_name] = None
        report.removed.append(config.name)
        logger.info("Removed attachment %s (%s)", config.name, stored or "no file")

    def _commit_upload(
        self,
        config: AttachmentConfig,
        entity: HostEntity,
        upload: UploadedFile,
        identity: object,
        report: CommitReport,
    ) -> None:
        logger.debug("Setting file %s %r", config.name, upload)
        file_id = self._resolver.fresh_id(
            config.name, identity, upload.filename, base_dir=config.base_dir
        )
        try:
            new_path = self._pipeline.materialize(config, file_id, upload)
        except AttachkitError as exc:
            logger.warning("Could not store %s: %s", config.name, exc)
            self._rollback(file_id)
            report.errors[config.name] = exc
            return

        previous = entity.get(config.field_name)
        if previous:
            try:
                self._placer.delete_everywhere(self._resolver.parse(previous))
            except AttachkitError as exc:
                logger.warning("Could not delete previous %s (%s): %s", config.name, previous, exc)
                report.orphaned.append(previous)

        entity[config.field_name] = new_path
        report.committed[config.name] = new_path
        logger.info("Stored attachment %s at %s", config.name, new_path)

    def _rollback(self, file_id: StoredFileId) -> None:
        try:
            self._placer.delete_everywhere(file_id)
        except StorageError as exc:
            logger.warning("Could not roll back %s: %s", file_id, exc)

    # ------------------------------------------------------------------
    # Destroy and read
    # ------------------------------------------------------------------

    def destroy_all(self, entity: HostEntity) -> list[str]:
        """Delete the files of every attribute; the field store is left alone.

        Returns the attributes whose files were deleted.  Failures are
        collected and raised after all attributes were attempted.
        """
        report = CommitReport()
        for config in self._registry:
            stored = entity.get(config.field_name)
            if not stored:
                continue
            try:
                self._placer.delete_everywhere(self._resolver.parse(stored))
            except AttachkitError as exc:
                logger.warning("Could not destroy %s (%s): %s", config.name, stored, exc)
                report.errors[config.name] = exc
                continue
            report.removed.append(config.name)
        self._pending = None
        report.raise_for_errors()
        return report.removed

    def url(self, entity: HostEntity, attribute: str, version: str | None = None) -> str | None:
        """URL of *version* of *attribute*, or ``None`` when no file is stored."""
        config = self._registry.get(attribute)
        stored = entity.get(config.field_name)
        if not stored:
            return None
        return self._resolver.url(self._resolver.parse(stored), version)


@contextmanager
def _local_copy(upload: UploadedFile) -> Iterator[str]:
    """Yield a filesystem path holding the upload's bytes."""
    if upload.path is not None:
        yield str(upload.path)
        return
    with tempfile.NamedTemporaryFile(suffix=upload.extension) as tmp:
        upload.rewind()
        shutil.copyfileobj(upload.stream, tmp)
        tmp.flush()
        yield tmp.name
    upload.rewind()
