"""Per-attribute attachment configuration and typed version specs."""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from attachkit.core.errors import InvalidPathError
from attachkit.models.paths import check_version_name, normalize_dir

_GEOMETRY = re.compile(r"^(\d+(\.\d+)?)?(x(\d+(\.\d+)?)?)?([+-]\d+[+-]\d+)?[%!<>^@]?$")
_GRAVITY = {
    "northwest", "north", "northeast", "west", "center",
    "east", "southwest", "south", "southeast",
}
_ATTRIBUTE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ImageOp(str, Enum):
    """ImageMagick ``convert`` options supported for image versions."""

    RESIZE = "resize"
    THUMBNAIL = "thumbnail"
    CROP = "crop"
    EXTENT = "extent"
    GRAVITY = "gravity"
    QUALITY = "quality"
    ROTATE = "rotate"
    STRIP = "strip"
    AUTO_ORIENT = "auto-orient"


# Operations that are bare flags on the command line.
FLAG_OPS = {ImageOp.STRIP, ImageOp.AUTO_ORIENT}
GEOMETRY_OPS = {ImageOp.RESIZE, ImageOp.THUMBNAIL, ImageOp.CROP, ImageOp.EXTENT}


class ImageOperation(BaseModel):
    """One typed ImageMagick option, e.g. ``-resize 10x10``."""

    model_config = ConfigDict(frozen=True)

    op: ImageOp
    value: str | None = None

    @model_validator(mode="after")
    def _check_value(self) -> "ImageOperation":
        if self.op in FLAG_OPS:
            if self.value is not None:
                raise ValueError(f"-{self.op.value} takes no argument")
            return self
        if self.value is None or not self.value.strip():
            raise ValueError(f"-{self.op.value} requires an argument")
        value = self.value.strip()
        if self.op in GEOMETRY_OPS and not _GEOMETRY.match(value):
            raise ValueError(f"Invalid geometry {value!r} for -{self.op.value}")
        if self.op == ImageOp.GRAVITY and value.lower() not in _GRAVITY:
            raise ValueError(f"Unknown gravity {value!r}")
        if self.op == ImageOp.QUALITY and not (value.isdigit() and 1 <= int(value) <= 100):
            raise ValueError(f"Quality must be an integer 1-100, got {value!r}")
        if self.op == ImageOp.ROTATE:
            try:
                float(value)
            except ValueError:
                raise ValueError(f"Rotation must be a number of degrees, got {value!r}") from None
        return self

    def to_args(self) -> list[str]:
        """Render as command-line arguments."""
        if self.value is None:
            return [f"-{self.op.value}"]
        return [f"-{self.op.value}", self.value.strip()]


class ImageVersion(BaseModel):
    """A version derived by running ImageMagick ``convert`` on the original."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    operations: list[ImageOperation] = []

    @classmethod
    def resize_to(cls, width: int, height: int, *, exact: bool = False) -> "ImageVersion":
        """Shortcut for a single ``-resize WxH`` (``WxH!`` when *exact*)."""
        geometry = f"{width}x{height}{'!' if exact else ''}"
        return cls(operations=[ImageOperation(op=ImageOp.RESIZE, value=geometry)])

    @classmethod
    def of(cls, *pairs: tuple[ImageOp | str, Any]) -> "ImageVersion":
        """Build from ``(op, value)`` pairs, e.g. ``of(("resize", "15x20"))``."""
        return cls(
            operations=[
                ImageOperation(op=ImageOp(op), value=None if value is None else str(value))
                for op, value in pairs
            ]
        )


class CommandVersion(BaseModel):
    """A version produced by an arbitrary external command.

    ``{input}`` and ``{output}`` in *args* are replaced with the original and
    destination paths.  When neither placeholder appears, the two paths are
    appended in that order.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["command"] = "command"
    command: str
    args: list[str] = []

    @field_validator("command")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("command must not be empty")
        return value

    def argv(self, input_path: str, output_path: str) -> list[str]:
        uses_placeholders = any("{input}" in a or "{output}" in a for a in self.args)
        args = [a.replace("{input}", input_path).replace("{output}", output_path) for a in self.args]
        if not uses_placeholders:
            args += [input_path, output_path]
        return [self.command, *args]


class CallbackVersion(BaseModel):
    """A version produced by a Python callable ``(input_path, output_path)``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["callback"] = "callback"
    callback: Callable[[str, str], Any]


VersionSpec = Annotated[
    Union[ImageVersion, CommandVersion, CallbackVersion],
    Field(discriminator="kind"),
]


class AttachmentConfig(BaseModel):
    """Configuration of one attachment attribute, immutable once registered.

    The host entity stores the unversioned relative path in the field named
    ``{name}_path``.

    ``public_original`` only matters when versions are defined: if true the
    original is kept in the private root and only derived versions are
    public; if false the original is public as well.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    max_size: int | None = None
    is_image: bool = False
    versions: dict[str, VersionSpec] = {}
    public_original: bool = False
    base_dir: str = ""

    @model_validator(mode="before")
    @classmethod
    def _versions_from_pairs(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("versions"), (list, tuple)):
            seen: dict[str, Any] = {}
            for name, spec in data["versions"]:
                if name in seen:
                    raise ValueError(f"Duplicate version name {name!r}")
                seen[name] = spec
            data = {**data, "versions": seen}
        return data

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not _ATTRIBUTE_NAME.match(value):
            raise ValueError(f"Attribute name {value!r} is not a valid identifier")
        return value

    @field_validator("max_size")
    @classmethod
    def _check_max_size(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError(f"max_size must be positive, got {value}")
        return value

    @field_validator("versions")
    @classmethod
    def _check_versions(cls, value: dict[str, Any]) -> dict[str, Any]:
        for version in value:
            if not version:
                raise ValueError("Version names must not be empty")
            try:
                check_version_name(version)
            except InvalidPathError as exc:
                raise ValueError(str(exc)) from None
        return value

    @field_validator("base_dir")
    @classmethod
    def _check_base_dir(cls, value: str) -> str:
        if not value.strip():
            return ""
        try:
            normalized = normalize_dir(value)
        except InvalidPathError as exc:
            raise ValueError(str(exc)) from None
        return "" if normalized == "." else normalized

    @model_validator(mode="after")
    def _image_versions_need_image(self) -> "AttachmentConfig":
        if not self.is_image:
            for version, spec in self.versions.items():
                if isinstance(spec, ImageVersion):
                    raise ValueError(
                        f"Version {version!r} uses image operations but "
                        f"'{self.name}' is not an image attribute"
                    )
        return self

    @property
    def field_name(self) -> str:
        """Name of the host entity field holding the stored path."""
        return f"{self.name}_path"

    @property
    def has_versions(self) -> bool:
        return bool(self.versions)
