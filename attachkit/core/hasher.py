"""Hashing helpers for fresh, content-independent file ids.

A file id is the SHA-256 of attribute name, entity identity and the commit
timestamp.  A process-local sequence number is mixed in so two commits in
the same clock tick still get different ids.
"""

from __future__ import annotations

import hashlib
import itertools
from datetime import datetime, timezone

_sequence = itertools.count()


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_file_id(attribute: str, identity: object, now: datetime | None = None) -> str:
    """SHA-256 hex of ``attribute + identity + timestamp + sequence``."""
    now = now or datetime.now(timezone.utc)
    payload = f"{attribute}{identity}{now.isoformat()}{next(_sequence)}"
    return sha256_hex(payload.encode("utf-8"))


def date_bucket(now: datetime | None = None) -> str:
    """``YYYY/MM/DD`` directory bucket for *now*."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y/%m/%d")
