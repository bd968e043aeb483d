"""Tests for project name discovery."""

import json

from asset_publisher.utils.project import discover_project_name


class TestDiscoverProjectName:
    """Tests for discover_project_name."""

    def test_package_json(self, tmp_path):
        (tmp_path / "package.json").write_text(json.dumps({"name": "storefront", "version": "1.0.0"}))

        assert discover_project_name(tmp_path) == "storefront"

    def test_pyproject(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "docs-site"\n')

        assert discover_project_name(tmp_path) == "docs-site"

    def test_package_json_wins(self, tmp_path):
        (tmp_path / "package.json").write_text('{"name": "web"}')
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "py"\n')

        assert discover_project_name(tmp_path) == "web"

    def test_falls_through_to_pyproject(self, tmp_path):
        """Test a package.json without a name does not stop the search."""
        (tmp_path / "package.json").write_text('{"private": true}')
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "py"\n')

        assert discover_project_name(tmp_path) == "py"

    def test_no_manifest(self, tmp_path):
        assert discover_project_name(tmp_path) == ""

    def test_malformed_manifests(self, tmp_path):
        (tmp_path / "package.json").write_text("{not json")
        (tmp_path / "pyproject.toml").write_text("[project\nname=")

        assert discover_project_name(tmp_path) == ""

    def test_non_string_name(self, tmp_path):
        (tmp_path / "package.json").write_text('{"name": 7}')

        assert discover_project_name(tmp_path) == ""

    def test_uses_pwd(self, tmp_path, monkeypatch):
        (tmp_path / "package.json").write_text('{"name": "from-pwd"}')
        monkeypatch.setenv("PWD", str(tmp_path))

        assert discover_project_name() == "from-pwd"
