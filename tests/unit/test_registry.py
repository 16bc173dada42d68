"""Tests for AttachmentRegistry — declaration, lookup and option errors."""

from __future__ import annotations

import pytest

from attachkit.core.errors import ConfigurationError
from attachkit.core.registry import AttachmentRegistry
from attachkit.models.config import (
    AttachmentConfig,
    CallbackVersion,
    CommandVersion,
    ImageVersion,
)


class TestDeclaration:
    def test_has_file(self):
        registry = AttachmentRegistry()
        config = registry.has_file("document", max_size=1024, base_dir="docs")
        assert config.field_name == "document_path"
        assert config.is_image is False
        assert config.base_dir == "docs"
        assert registry.get("document") is config

    def test_has_image_forces_image_flag(self):
        registry = AttachmentRegistry()
        config = registry.has_image(
            "picture", versions={"tiny": ImageVersion.of(("resize", "15x20"))}
        )
        assert config.is_image is True
        assert list(config.versions) == ["tiny"]

    def test_plain_callable_wrapped_as_callback(self):
        def shrink(input_path: str, output_path: str) -> None:
            return None

        config = AttachmentRegistry().has_file("doc", versions={"small": shrink})
        assert isinstance(config.versions["small"], CallbackVersion)
        assert config.versions["small"].callback is shrink

    def test_version_pairs(self):
        config = AttachmentRegistry().has_file(
            "doc",
            versions=[("pdf", CommandVersion(command="soffice")), ("txt", CommandVersion(command="cat"))],
        )
        assert list(config.versions) == ["pdf", "txt"]

    def test_order_preserved(self):
        registry = AttachmentRegistry()
        for name in ("picture", "document", "avatar"):
            registry.has_file(name)
        assert registry.names == ["picture", "document", "avatar"]
        assert [c.name for c in registry] == registry.names
        assert len(registry) == 3
        assert "avatar" in registry
        assert "banner" not in registry

    def test_prebuilt_configs(self):
        registry = AttachmentRegistry([AttachmentConfig(name="a"), AttachmentConfig(name="b")])
        assert registry.names == ["a", "b"]


class TestErrors:
    def test_duplicate_attribute(self):
        registry = AttachmentRegistry()
        registry.has_file("document")
        with pytest.raises(ConfigurationError, match="already registered"):
            registry.has_image("document")

    def test_unknown_attribute(self):
        with pytest.raises(ConfigurationError, match="Unknown attachment attribute 'nope'"):
            AttachmentRegistry().get("nope")

    def test_duplicate_version_names(self):
        with pytest.raises(ConfigurationError, match="picture"):
            AttachmentRegistry().has_image(
                "picture",
                versions=[("a", ImageVersion.resize_to(1, 1)), ("a", ImageVersion.resize_to(2, 2))],
            )

    def test_image_version_on_file_attribute(self):
        with pytest.raises(ConfigurationError):
            AttachmentRegistry().has_file("doc", versions={"small": ImageVersion.resize_to(10, 10)})

    def test_bad_max_size(self):
        with pytest.raises(ConfigurationError):
            AttachmentRegistry().has_file("doc", max_size=0)

    def test_failed_declaration_not_registered(self):
        registry = AttachmentRegistry()
        with pytest.raises(ConfigurationError):
            registry.has_file("doc", base_dir="../outside")
        assert "doc" not in registry
