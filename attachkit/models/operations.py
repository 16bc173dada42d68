"""Coordinator state model, staged operations and commit results."""

from __future__ import annotations

from enum import Enum

from attachkit.core.errors import AttachkitError, PartialFailureError
from attachkit.models.uploads import UploadedFile


class CoordinatorState(str, Enum):
    """Lifecycle of the staged attachment changes of one entity instance."""

    CLEAN = "clean"
    STAGED = "staged"
    COMMITTING = "committing"
    COMMITTED = "committed"


# Valid state transitions — enforced by AttachmentCoordinator.
# COMMITTING accepts nothing but completion: staging from inside a
# transformer callback or a re-entrant commit is rejected.
VALID_TRANSITIONS: dict[CoordinatorState, set[CoordinatorState]] = {
    CoordinatorState.CLEAN: {CoordinatorState.STAGED, CoordinatorState.COMMITTING},
    CoordinatorState.STAGED: {
        CoordinatorState.STAGED,
        CoordinatorState.CLEAN,
        CoordinatorState.COMMITTING,
    },
    CoordinatorState.COMMITTING: {CoordinatorState.COMMITTED},
    CoordinatorState.COMMITTED: {CoordinatorState.STAGED, CoordinatorState.COMMITTING},
}


class PendingOperations:
    """Removals and uploads staged on one entity, consumed once at commit."""

    def __init__(self) -> None:
        self.removals: set[str] = set()
        self.uploads: dict[str, UploadedFile] = {}

    def effective_removals(self) -> list[str]:
        """Removals not superseded by an upload for the same attribute."""
        return sorted(self.removals - self.uploads.keys())

    def is_empty(self) -> bool:
        return not self.removals and not self.uploads

    def __repr__(self) -> str:
        return (
            f"PendingOperations(removals={sorted(self.removals)}, "
            f"uploads={sorted(self.uploads)})"
        )


class CommitReport:
    """What a commit did, attribute by attribute.

    Attributes
    ----------
    committed:
        Attribute name -> new unversioned relative path.
    removed:
        Attributes whose files were deleted and field cleared.
    errors:
        Attribute name -> error that stopped that attribute.
    orphaned:
        Previous paths whose files could not be deleted after a successful
        replacement.
    """

    def __init__(self) -> None:
        self.committed: dict[str, str] = {}
        self.removed: list[str] = []
        self.errors: dict[str, AttachkitError] = {}
        self.orphaned: list[str] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise the single recorded error, or a ``PartialFailureError``."""
        if not self.errors:
            return
        if len(self.errors) == 1:
            raise next(iter(self.errors.values()))
        raise PartialFailureError(self.errors)

    def __repr__(self) -> str:
        return (
            f"CommitReport(committed={self.committed}, removed={self.removed}, "
            f"errors={sorted(self.errors)}, orphaned={self.orphaned})"
        )
