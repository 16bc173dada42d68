"""attachkit data models — Pydantic v2 where the data is plain, frozen where it is configuration."""

from attachkit.models.config import (
    AttachmentConfig,
    CallbackVersion,
    CommandVersion,
    ImageOp,
    ImageOperation,
    ImageVersion,
    VersionSpec,
)
from attachkit.models.operations import (
    VALID_TRANSITIONS,
    CommitReport,
    CoordinatorState,
    PendingOperations,
)
from attachkit.models.paths import StorageRoot, StoredFileId, check_version_name
from attachkit.models.uploads import UploadedFile

__all__ = [
    # paths
    "StorageRoot",
    "StoredFileId",
    "check_version_name",
    # config
    "AttachmentConfig",
    "ImageOp",
    "ImageOperation",
    "ImageVersion",
    "CommandVersion",
    "CallbackVersion",
    "VersionSpec",
    # uploads
    "UploadedFile",
    # operations
    "CoordinatorState",
    "VALID_TRANSITIONS",
    "PendingOperations",
    "CommitReport",
]
