"""Unit tests for the CLI — Typer command registration and basic behavior.

Storage roots are pointed at a temp directory through ATTACHKIT_* variables
and every command is invoked via typer.testing.CliRunner.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from attachkit.cli.app import app

runner = CliRunner()


@pytest.fixture
def roots(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Path, Path]:
    public, private = tmp_path / "public", tmp_path / "private"
    monkeypatch.setenv("ATTACHKIT_PUBLIC_ROOT", str(public))
    monkeypatch.setenv("ATTACHKIT_PRIVATE_ROOT", str(private))
    monkeypatch.setenv("ATTACHKIT_URL_PREFIX", "/media/")
    return public, private


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x")
    return path


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("paths", "purge", "identify", "settings"):
            assert name in result.output


# ---------------------------------------------------------------------------
# Test: commands
# ---------------------------------------------------------------------------


class TestPathsCommand:
    def test_resolves_versions(self, roots: tuple[Path, Path]):
        result = runner.invoke(app, ["paths", "2024/01/01/abc.jpg", "-v", "small"])
        assert result.exit_code == 0
        assert "Stored file abc" in result.output

    def test_invalid_path(self, roots: tuple[Path, Path]):
        result = runner.invoke(app, ["paths", "../etc/passwd"])
        assert result.exit_code == 1
        assert "Invalid path" in result.output


class TestPurgeCommand:
    def test_purge_with_yes(self, roots: tuple[Path, Path]):
        public, private = roots
        created = [
            _touch(public / "2024/01/01/abc.jpg"),
            _touch(public / "2024/01/01/abc_small.jpg"),
            _touch(private / "2024/01/01/abc.jpg"),
        ]
        keep = _touch(public / "2024/01/01/abcd.jpg")

        result = runner.invoke(app, ["purge", "2024/01/01/abc.jpg", "--yes"])

        assert result.exit_code == 0
        assert "Deleted 3 file(s)" in result.output
        assert not any(p.exists() for p in created)
        assert keep.exists()

    def test_purge_declined(self, roots: tuple[Path, Path]):
        public, _ = roots
        stored = _touch(public / "2024/01/01/abc.jpg")
        result = runner.invoke(app, ["purge", "2024/01/01/abc.jpg"], input="n\n")
        assert result.exit_code == 1
        assert stored.exists()

    def test_purge_nothing_stored(self, roots: tuple[Path, Path]):
        result = runner.invoke(app, ["purge", "2024/01/01/abc.jpg", "-y"])
        assert result.exit_code == 0
        assert "No files stored" in result.output


class TestOtherCommands:
    def test_settings(self, roots: tuple[Path, Path]):
        result = runner.invoke(app, ["settings"])
        assert result.exit_code == 0
        assert "url_prefix" in result.output
        assert "0o664" in result.output

    def test_identify_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["identify", str(tmp_path / "missing.png")])
        assert result.exit_code != 0
