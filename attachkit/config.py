"""Storage configuration — env-driven, read-only once constructed.

Settings are read from ATTACHKIT_* environment variables or a .env file and
passed explicitly into the engine.  The roots and URL prefix are used for
every path computation; changing them without moving existing files breaks
previously stored URLs.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Filesystem roots, URL prefix and external tool settings.

    Examples
    --------
    Override via environment::

        export ATTACHKIT_PUBLIC_ROOT=/srv/app/public/photo_data
        export ATTACHKIT_PRIVATE_ROOT=/srv/app/private
        export ATTACHKIT_URL_PREFIX=/photo_data/

    Or construct directly::

        StorageSettings(public_root=tmp / "public", private_root=tmp / "private")
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ATTACHKIT_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Storage areas
    public_root: Path = Path("public/attachments")
    private_root: Path = Path("private/attachments")
    url_prefix: str = "/attachments/"

    # Permission bits for written originals and created directories
    file_mode: int = 0o664
    dir_mode: int = 0o775

    # ImageMagick command-line tools
    imagemagick_convert: str = "convert"
    imagemagick_mogrify: str = "mogrify"
    imagemagick_identify: str = "identify"
    transform_timeout: float = 60.0

    # Observability
    log_level: str = "INFO"

    @field_validator("url_prefix")
    @classmethod
    def _prefix_not_empty(cls, value: str) -> str:
        return value.strip() or "/"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def configure_logging(settings: StorageSettings) -> logging.Logger:
    """Apply ``settings.log_level`` to the ``attachkit`` logger hierarchy."""
    logger = logging.getLogger("attachkit")
    logger.setLevel(settings.log_level)
    return logger
