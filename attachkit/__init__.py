"""attachkit: file attachments with derived versions for persisted entities.

Stores uploads under hashed, date-bucketed relative paths, derives named
versions (thumbnails etc.) through external tools, keeps originals public or
private, and cleans up old files on replacement, removal and destroy.
"""

__version__ = "0.1.0"
__description__ = "Attachment path and versioning engine with public/private storage"

from attachkit.config import StorageSettings
from attachkit.core.coordinator import AttachmentCoordinator
from attachkit.core.engine import AttachmentEngine
from attachkit.models.config import (
    AttachmentConfig,
    CallbackVersion,
    CommandVersion,
    ImageOp,
    ImageVersion,
)
from attachkit.models.uploads import UploadedFile

__all__ = [
    "AttachmentEngine",
    "AttachmentCoordinator",
    "AttachmentConfig",
    "StorageSettings",
    "UploadedFile",
    "ImageVersion",
    "ImageOp",
    "CommandVersion",
    "CallbackVersion",
    "__version__",
]
