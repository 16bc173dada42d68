"""Registration of attachment attributes for a host entity type.

Usage mirrors a model definition::

    registry = AttachmentRegistry()
    registry.has_image(
        "picture",
        max_size=500 * 1024,
        versions={"tiny": ImageVersion.of(("resize", "15x20"))},
    )

Each call validates its options into an immutable ``AttachmentConfig``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from attachkit.core.errors import ConfigurationError
from attachkit.models.config import AttachmentConfig


class AttachmentRegistry:
    """Ordered set of attachment attributes, keyed by attribute name."""

    def __init__(self, configs: Sequence[AttachmentConfig] = ()) -> None:
        self._configs: dict[str, AttachmentConfig] = {}
        for config in configs:
            self.register(config)

    def register(self, config: AttachmentConfig) -> AttachmentConfig:
        if config.name in self._configs:
            raise ConfigurationError(f"Attachment attribute '{config.name}' is already registered")
        self._configs[config.name] = config
        return config

    def has_file(
        self,
        name: str,
        *,
        max_size: int | None = None,
        versions: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None,
        public_original: bool = False,
        base_dir: str = "",
        is_image: bool = False,
    ) -> AttachmentConfig:
        """Declare a file attribute stored in the ``{name}_path`` field.

        *versions* maps version names to ``ImageVersion``, ``CommandVersion``
        or ``CallbackVersion`` specs (or plain callables, which are wrapped as
        callbacks).  A sequence of pairs is accepted so duplicate names can
        be reported.
        """
        try:
            config = AttachmentConfig(
                name=name,
                max_size=max_size,
                is_image=is_image,
                versions=_coerce_versions(versions),
                public_original=public_original,
                base_dir=base_dir,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid options for attachment '{name}': {exc}") from exc
        return self.register(config)

    def has_image(self, name: str, **options: Any) -> AttachmentConfig:
        """Like ``has_file`` with image validation and image versions enabled."""
        options["is_image"] = True
        return self.has_file(name, **options)

    def get(self, name: str) -> AttachmentConfig:
        try:
            return self._configs[name]
        except KeyError:
            raise ConfigurationError(f"Unknown attachment attribute '{name}'") from None

    @property
    def names(self) -> list[str]:
        return list(self._configs)

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __iter__(self) -> Iterator[AttachmentConfig]:
        return iter(self._configs.values())

    def __len__(self) -> int:
        return len(self._configs)


def _coerce_versions(
    versions: Mapping[str, Any] | Sequence[tuple[str, Any]] | None,
) -> list[tuple[str, Any]]:
    if versions is None:
        return []
    pairs = list(versions.items()) if isinstance(versions, Mapping) else list(versions)
    return [
        (name, {"kind": "callback", "callback": spec} if callable(spec) else spec)
        for name, spec in pairs
    ]
