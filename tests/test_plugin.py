"""Tests for the build plugin and host hook registration."""

import asyncio
import gc
from unittest.mock import MagicMock, patch

import pytest

from asset_publisher.plugin.hooks import (
    AsyncHookRegistrar,
    LegacyCallbackRegistrar,
    registrar_for,
)
from asset_publisher.plugin.plugin import PLUGIN_NAME, BuildPlugin
from asset_publisher.publisher.errors import UploadError


class EmitHook:
    def __init__(self):
        self.taps = []

    def tap_async(self, name, fn):
        self.taps.append((name, fn))


class Hooks:
    def __init__(self):
        self.emit = EmitHook()


class AsyncHost:
    """Host with the async hook API."""

    def __init__(self):
        self.hooks = Hooks()


class LegacyHost:
    """Host with the legacy plugin() API."""

    def __init__(self):
        self.registered = []

    def plugin(self, event, fn):
        self.registered.append((event, fn))


def make_plugin(store, **overrides):
    overrides.setdefault("prefix", "static/app")
    return BuildPlugin(overrides, store=store, environ={})


class TestRegistrars:
    """Tests for hook style detection."""

    def test_async_host(self):
        assert isinstance(registrar_for(AsyncHost()), AsyncHookRegistrar)

    def test_legacy_host(self):
        assert isinstance(registrar_for(LegacyHost()), LegacyCallbackRegistrar)

    def test_async_preferred_when_both_present(self):
        host = AsyncHost()
        host.plugin = MagicMock()

        assert isinstance(registrar_for(host), AsyncHookRegistrar)

    def test_unsupported_host(self):
        with pytest.raises(TypeError, match="neither"):
            registrar_for(object())


class TestApply:
    def test_apply_async_host(self, fake_store):
        host = AsyncHost()
        plugin = make_plugin(fake_store())

        plugin.apply(host)

        assert host.hooks.emit.taps == [(PLUGIN_NAME, plugin.on_emit)]

    def test_apply_legacy_host(self, fake_store):
        host = LegacyHost()
        plugin = make_plugin(fake_store())

        plugin.apply(host)

        assert host.registered == [("emit", plugin.on_emit)]

    def test_apply_unsupported_host(self, fake_store):
        with pytest.raises(TypeError):
            make_plugin(fake_store()).apply(object())


class TestOnEmit:
    """Tests for the emit callback."""

    def test_publishes_and_calls_done_once(self, fake_store, compilation_factory, host_asset):
        store = fake_store()
        plugin = make_plugin(store, use_gzip=False)
        compilation = compilation_factory(
            {
                "main.js": host_asset("console.log(1)", exists_at="/dist/main.js"),
                "index.html": host_asset("<html></html>"),
            }
        )
        done = MagicMock()

        report = plugin.on_emit(compilation, done)

        done.assert_called_once_with()
        assert report.uploaded == ["static/app/main.js"]
        assert store.written == {"static/app/main.js": b"console.log(1)"}
        assert list(compilation.assets) == ["index.html"]
        assert compilation.errors == []

    def test_failure_recorded_on_compilation(self, fake_store, compilation_factory):
        store = fake_store(always_fail=True)
        plugin = make_plugin(store, retry=1)
        compilation = compilation_factory({"a.js": b"x", "b.js": b"y"})
        done = MagicMock()

        report = plugin.on_emit(compilation, done)

        done.assert_called_once_with()
        assert len(store.put_calls) == 2
        assert len(compilation.errors) == 1
        assert isinstance(compilation.errors[0], UploadError)
        assert report.failed == "static/app/a.js"
        assert report.error is compilation.errors[0]

    def test_ignore_errors(self, fake_store, compilation_factory):
        plugin = make_plugin(fake_store(always_fail=True), retry=0, ignore_errors=True)
        compilation = compilation_factory({"a.js": b"x"})
        done = MagicMock()

        report = plugin.on_emit(compilation, done)

        done.assert_called_once_with()
        assert compilation.errors == []
        assert not report.success

    def test_unsupported_asset_content(self, fake_store, compilation_factory):
        """Test a selection failure is handled like a publish failure."""
        plugin = make_plugin(fake_store())
        compilation = compilation_factory({"a.js": 12345})
        done = MagicMock()

        report = plugin.on_emit(compilation, done)

        done.assert_called_once_with()
        assert isinstance(compilation.errors[0], TypeError)
        assert report.error is compilation.errors[0]

    def test_custom_exclude(self, fake_store, compilation_factory):
        store = fake_store()
        plugin = make_plugin(store, exclude=r"\.map$", remove_mode=False)
        compilation = compilation_factory({"a.js": b"1", "a.js.map": b"2", "index.html": b"3"})

        report = plugin.on_emit(compilation, MagicMock())

        assert report.uploaded == ["static/app/a.js", "static/app/index.html"]
        assert len(compilation.assets) == 3

    def test_inside_running_loop_returns_task(self, fake_store, compilation_factory):
        store = fake_store()
        plugin = make_plugin(store)
        compilation = compilation_factory({"a.js": b"1"})
        done = MagicMock()

        async def host_emit():
            task = plugin.on_emit(compilation, done)
            assert isinstance(task, asyncio.Task)
            return await task

        report = asyncio.run(host_emit())

        done.assert_called_once_with()
        assert report.uploaded == ["static/app/a.js"]

    def test_dropped_task_runs_to_completion(self, fake_store, compilation_factory):
        """Test a host that discards the returned task still gets done called."""
        store = fake_store()
        plugin = make_plugin(store)
        done = MagicMock()

        async def host_emit():
            plugin.on_emit(compilation_factory({"a.js": b"1"}), done)
            gc.collect()
            while plugin._tasks:
                await asyncio.sleep(0)

        asyncio.run(host_emit())

        done.assert_called_once_with()
        assert "static/app/a.js" in store.written

    def test_failing_done_callback_logged(self, fake_store, compilation_factory, caplog):
        plugin = make_plugin(fake_store())
        done = MagicMock(side_effect=RuntimeError("host closed"))

        async def host_emit():
            plugin.on_emit(compilation_factory({"a.js": b"1"}), done)
            while plugin._tasks:
                await asyncio.sleep(0)

        asyncio.run(host_emit())

        done.assert_called_once_with()
        assert "Emit task failed" in caplog.text
        assert "host closed" in caplog.text

    def test_done_called_when_run_raises(self, fake_store, compilation_factory):
        plugin = make_plugin(fake_store())
        done = MagicMock()

        with patch.object(plugin, "run", side_effect=RuntimeError("host gone")):
            with pytest.raises(RuntimeError):
                plugin.on_emit(compilation_factory({}), done)

        done.assert_called_once_with()


class TestConstruction:
    def test_store_created_lazily(self, compilation_factory):
        with patch("asset_publisher.plugin.plugin.create_store") as create_store:
            plugin = BuildPlugin({"prefix": "p"}, environ={})
            create_store.assert_not_called()

            plugin.publisher

            create_store.assert_called_once_with(plugin.config)

    def test_prefix_resolved_eagerly(self, fake_store):
        with patch(
            "asset_publisher.publisher.prefix.discover_project_name", return_value="shop"
        ):
            plugin = BuildPlugin({"oss_base_dir": "ci"}, store=fake_store(), environ={})

        assert plugin.prefix.compute() == "ci/shop"

    def test_publisher_shares_prefix(self, fake_store):
        plugin = make_plugin(fake_store())

        assert plugin.publisher.prefix is plugin.prefix

    def test_unknown_option_rejected(self, fake_store):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            BuildPlugin({"bucket_name": "x"}, store=fake_store(), environ={})

    def test_config_file(self, fake_store, tmp_path):
        """Test settings from a YAML file, with explicit overrides on top."""
        config_file = tmp_path / "publish.yaml"
        config_file.write_text("prefix: from-file\nretry: 1\nexist_check: false\n")

        plugin = BuildPlugin({"retry": 2}, store=fake_store(), environ={}, config_path=config_file)

        assert plugin.config.prefix == "from-file"
        assert plugin.config.retry == 2
        assert plugin.config.exist_check is False

    def test_invalid_config_file(self, fake_store, tmp_path):
        config_file = tmp_path / "publish.yaml"
        config_file.write_text("prefix: p\nremove_mod: false\n")

        with pytest.raises(ValueError, match="remove_mod"):
            BuildPlugin(store=fake_store(), environ={}, config_path=config_file)
