"""Exception taxonomy for the attachment engine.

Every error raised by attachkit derives from ``AttachkitError``.  Errors that
belong to a single attribute carry the attribute name so the coordinator can
report them per attribute without aborting its siblings.
"""

from __future__ import annotations


class AttachkitError(Exception):
    """Base class for all attachkit errors."""


class InvalidPathError(AttachkitError, ValueError):
    """Raised when a relative path or id component cannot be decomposed."""


class ConfigurationError(AttachkitError, ValueError):
    """Raised when an attachment attribute is registered with bad options."""


class InvalidStateError(AttachkitError, RuntimeError):
    """Raised when the coordinator is asked for a transition it does not allow."""


class AttachmentValidationError(AttachkitError):
    """Raised when staged uploads fail size or type checks.

    Parameters
    ----------
    errors:
        Mapping of attribute name to the list of messages recorded for it.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = {attr: list(msgs) for attr, msgs in errors.items()}
        summary = "; ".join(
            f"{attr}: {', '.join(msgs)}" for attr, msgs in self.errors.items()
        )
        super().__init__(f"Attachment validation failed ({summary})")


class StorageError(AttachkitError, OSError):
    """Base class for filesystem failures in the storage placer."""


class StorageWriteError(StorageError):
    """Raised when an original cannot be written to its destination."""


class StorageDeleteError(StorageError):
    """Raised when stored files exist but cannot be removed."""


class TransformationError(AttachkitError):
    """Raised when the external transformer fails to produce a version.

    The failing attribute, version name and underlying cause are kept on the
    exception and repeated in its message.
    """

    def __init__(self, attribute: str, version: str, cause: BaseException) -> None:
        self.attribute = attribute
        self.version = version
        self.cause = cause
        super().__init__(
            f"Could not create version '{version}' of '{attribute}': {cause}"
        )


class PartialFailureError(AttachkitError):
    """Raised when more than one attribute failed during a commit or destroy.

    ``errors`` maps each failing attribute to its own error.
    """

    def __init__(self, errors: dict[str, AttachkitError]) -> None:
        self.errors = dict(errors)
        super().__init__(
            "Attachment operations failed for: " + ", ".join(sorted(self.errors))
        )


class CommandFailedError(AttachkitError):
    """Raised when an external command exits non-zero, times out or cannot start."""

    def __init__(self, argv: list[str], message: str, *, returncode: int | None = None) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        super().__init__(f"Command {' '.join(self.argv)!r} failed: {message}")


class ImageMagickError(CommandFailedError):
    """Raised when an ImageMagick tool fails."""
