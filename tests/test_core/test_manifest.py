"""Unit tests for peercompat.core.manifest."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from peercompat.models import CompatibleRange, ResolvedTarget
from peercompat.core.manifest import read_manifest, write_resolved
from peercompat.exceptions import FileOperationError, ManifestError


def write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    return write_json(
        tmp_path / "package.json",
        {
            "name": "web-app",
            "version": "0.1.0",
            "dependencies": {"react": "18.2.0", "next": "^13.5.1"},
            "devDependencies": {"typescript": "5.2.2", "react": "^18.0.0"},
            "peerDependencies": {"react-dom": "18.2.0"},
        },
    )


@pytest.mark.unit
class TestReadManifest:
    def test_merges_sections(self, manifest: Path) -> None:
        result = read_manifest(manifest)

        assert result == {
            "react-dom": "18.2.0",
            "typescript": "5.2.2",
            "react": "18.2.0",
            "next": "^13.5.1",
        }

    def test_dependencies_take_precedence(self, manifest: Path) -> None:
        assert read_manifest(manifest)["react"] == "18.2.0"

    def test_exclude_dev(self, manifest: Path) -> None:
        result = read_manifest(manifest, include_dev=False)

        assert "typescript" not in result
        assert result["react"] == "18.2.0"

    def test_manifest_without_dependencies(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "package.json", {"name": "empty"})

        assert read_manifest(path) == {}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{ not json", encoding="utf-8")

        with pytest.raises(ManifestError, match="Invalid JSON"):
            read_manifest(path)

    def test_non_object_root(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "package.json", ["react"])

        with pytest.raises(ManifestError, match="JSON object"):
            read_manifest(path)

    def test_section_must_be_object(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "package.json", {"dependencies": ["react"]})

        with pytest.raises(ManifestError, match="'dependencies'"):
            read_manifest(path)

    def test_version_must_be_string(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "package.json", {"dependencies": {"react": 18}})

        with pytest.raises(ManifestError, match="react"):
            read_manifest(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="not found"):
            read_manifest(tmp_path / "package.json")


@pytest.mark.unit
class TestWriteResolved:
    @pytest.fixture
    def resolved(self) -> list:
        return [
            ResolvedTarget("sass", CompatibleRange(oldest="1.0.0", latest="1.69.5")),
            ResolvedTarget("next", CompatibleRange(oldest="13.0.0", latest="13.5.6")),
        ]

    def test_adds_adopted_specifiers(self, manifest: Path, resolved: list) -> None:
        write_resolved(manifest, resolved, backup=False)

        data: Dict[str, Any] = json.loads(manifest.read_text(encoding="utf-8"))
        assert data["dependencies"] == {
            "react": "18.2.0",
            "next": "^13.5.1",
            "sass": "~1.69.5",
        }
        assert data["name"] == "web-app"

    def test_keeps_key_order_and_trailing_newline(
        self, manifest: Path, resolved: list
    ) -> None:
        write_resolved(manifest, resolved, backup=False)

        text = manifest.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert list(json.loads(text)) == [
            "name",
            "version",
            "dependencies",
            "devDependencies",
            "peerDependencies",
        ]

    def test_creates_missing_section(self, tmp_path: Path, resolved: list) -> None:
        path = write_json(tmp_path / "package.json", {"name": "empty"})

        write_resolved(path, resolved, section="devDependencies", backup=False)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["devDependencies"] == {"sass": "~1.69.5", "next": "~13.5.6"}

    def test_creates_backup(self, manifest: Path, resolved: list) -> None:
        original = manifest.read_text(encoding="utf-8")

        backup = write_resolved(manifest, resolved)

        assert backup is not None
        assert backup.read_text(encoding="utf-8") == original

    def test_no_backup(self, manifest: Path, resolved: list) -> None:
        assert write_resolved(manifest, resolved, backup=False) is None
