"""Tests for package.json loading."""

import json

import pytest

from errors import ManifestNotFoundError, ManifestParseError
from manifest import load_manifest


def _write(tmp_path, content):
    path = tmp_path / "package.json"
    path.write_text(content if isinstance(content, str) else json.dumps(content))
    return str(path)


class TestLoadManifest:
    """Happy path and fatal errors."""

    def test_reads_both_sections(self, tmp_path):
        path = _write(tmp_path, {
            "name": "demo",
            "dependencies": {"a": "^1.0.0"},
            "devDependencies": {"jest": "^29.0.0"},
        })

        manifest = load_manifest(path)

        assert manifest.name == "demo"
        assert manifest.dependencies == {"a": "^1.0.0"}
        assert manifest.dev_dependencies == {"jest": "^29.0.0"}

    def test_sections_are_optional(self, tmp_path):
        manifest = load_manifest(_write(tmp_path, {"name": "empty"}))
        assert manifest.dependencies == {}
        assert manifest.dependency_ranges(include_dev=True) == {}

    def test_dependency_ranges_merges_dev_on_request(self, tmp_path):
        manifest = load_manifest(_write(tmp_path, {
            "dependencies": {"a": "^1.0.0", "shared": "^1.0.0"},
            "devDependencies": {"shared": "^2.0.0", "jest": "*"},
        }))

        assert manifest.dependency_ranges() == {"a": "^1.0.0", "shared": "^1.0.0"}
        assert manifest.dependency_ranges(include_dev=True) == {
            "a": "^1.0.0",
            "shared": "^2.0.0",
            "jest": "*",
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestNotFoundError) as excinfo:
            load_manifest(str(tmp_path / "package.json"))
        assert "not found" in str(excinfo.value)

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[]",
            '{"dependencies": ["a"]}',
            '{"dependencies": {"a": 1}}',
            '{"devDependencies": "a"}',
        ],
    )
    def test_invalid_content(self, tmp_path, content):
        with pytest.raises(ManifestParseError):
            load_manifest(_write(tmp_path, content))
