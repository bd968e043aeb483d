"""Tests for remote prefix and key computation."""

import warnings

import pytest

from asset_publisher.publisher.errors import ConfigValidationWarning
from asset_publisher.publisher.prefix import PrefixCalculator, build_remote_key


class CountingDiscovery:
    def __init__(self, name: str) -> None:
        self.name = name
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return self.name


class TestBuildRemoteKey:
    """Tests for build_remote_key."""

    def test_joins_with_separator(self):
        assert build_remote_key("a", "b.js") == "a/b.js"

    def test_collapses_doubled_separator(self):
        assert build_remote_key("a/", "b.js") == "a/b.js"

    def test_collapses_leading_separator_on_name(self):
        assert build_remote_key("static/app", "/js/main.js") == "static/app/js/main.js"

    def test_nested_names_kept(self):
        assert build_remote_key("p", "css/site.css") == "p/css/site.css"

    def test_empty_prefix_has_no_leading_separator(self):
        assert build_remote_key("", "main.js") == "main.js"


class TestPrefixCalculator:
    """Tests for PrefixCalculator."""

    def test_explicit_prefix_verbatim(self, make_config):
        """Test an explicit prefix ignores base dir and project name."""
        discovery = CountingDiscovery("manifest-name")
        config = make_config(prefix="X", oss_base_dir="base", project_name="proj")

        assert PrefixCalculator(config, discover=discovery).compute() == "X"
        assert discovery.calls == 0

    def test_base_dir_and_project_name(self, make_config):
        config = make_config(oss_base_dir="ci", project_name="storefront")

        assert PrefixCalculator(config).compute() == "ci/storefront"

    def test_discovered_project_name(self, make_config):
        """Test the manifest name is used when none is configured."""
        discovery = CountingDiscovery("from-manifest")
        calculator = PrefixCalculator(make_config(oss_base_dir="ci"), discover=discovery)

        assert calculator.compute() == "ci/from-manifest"
        assert calculator.project_name == "from-manifest"

    def test_missing_project_name_falls_back_to_base_dir(self, make_config):
        """Test an empty project name yields the base dir exactly, with a warning."""
        calculator = PrefixCalculator(
            make_config(oss_base_dir="auto_upload_ci"), discover=CountingDiscovery("")
        )

        with pytest.warns(ConfigValidationWarning, match="auto_upload_ci"):
            prefix = calculator.compute()

        assert prefix == "auto_upload_ci"

    def test_memoized(self, make_config):
        """Test the prefix is computed once however many keys are built."""
        discovery = CountingDiscovery("proj")
        calculator = PrefixCalculator(make_config(oss_base_dir="ci"), discover=discovery)

        keys = [calculator.remote_key(f"chunk-{i}.js") for i in range(5)]

        assert discovery.calls == 1
        assert keys[0] == "ci/proj/chunk-0.js"
        assert len(set(keys)) == 5

    def test_warning_emitted_once(self, make_config):
        calculator = PrefixCalculator(make_config(), discover=CountingDiscovery(""))

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            calculator.compute()
            calculator.compute()

        assert len([w for w in caught if issubclass(w.category, ConfigValidationWarning)]) == 1

    def test_empty_base_dir_writes_to_bucket_root(self, make_config, caplog):
        """Test an empty base dir and project name give root-level keys and a warning."""
        calculator = PrefixCalculator(make_config(oss_base_dir=""), discover=CountingDiscovery(""))

        with pytest.warns(ConfigValidationWarning):
            key = calculator.remote_key("main.js")

        assert key == "main.js"
        assert "bucket root" in caplog.text
