"""Shared fixtures: in-memory object store and host build objects."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from prometheus_client import CollectorRegistry

from asset_publisher.storage.base import RemoteObjectSummary
from asset_publisher.utils.config import resolve_config
from asset_publisher.utils.metrics import PublishMetrics

UPLOADED_AT = datetime(2026, 3, 14, 9, 26, tzinfo=timezone.utc)


class FakeStore:
    """
    In-memory ObjectStore.

    Args:
        existing: Keys already present in the bucket
        put_failures: Number of put calls that fail before puts succeed
        always_fail: Every put call fails
        list_error: Exception raised by every list call
    """

    def __init__(
        self,
        existing: Optional[List[str]] = None,
        put_failures: int = 0,
        always_fail: bool = False,
        list_error: Optional[Exception] = None,
    ) -> None:
        self.objects: Dict[str, Any] = {key: UPLOADED_AT for key in existing or []}
        self.put_failures = put_failures
        self.always_fail = always_fail
        self.list_error = list_error
        self.list_calls: List[tuple] = []
        self.put_calls: List[tuple] = []
        self.written: Dict[str, bytes] = {}

    async def list_objects(self, prefix: str, max_keys: int) -> List[RemoteObjectSummary]:
        self.list_calls.append((prefix, max_keys))
        if self.list_error is not None:
            raise self.list_error
        keys = sorted(key for key in self.objects if key.startswith(prefix))
        return [RemoteObjectSummary(key=key, last_modified=self.objects[key]) for key in keys[:max_keys]]

    async def put_object(self, key: str, data: bytes, options: Any = None) -> None:
        self.put_calls.append((key, data, options))
        if self.always_fail or self.put_failures > 0:
            self.put_failures -= 1
            raise ConnectionError(f"write to {key} refused")
        self.objects[key] = UPLOADED_AT
        self.written[key] = data


class HostAsset:
    """Host build-tool asset object."""

    def __init__(self, content: Any, exists_at: Optional[str] = None) -> None:
        self._content = content
        self.exists_at = exists_at

    def source(self) -> Any:
        return self._content


class Compilation:
    """Host compilation exposing a mutable asset collection and an error list."""

    def __init__(self, assets: Dict[str, Any]) -> None:
        self.assets = dict(assets)
        self.errors: List[Exception] = []


@pytest.fixture
def fake_store():
    """Factory for FakeStore instances."""
    return FakeStore


@pytest.fixture
def compilation_factory():
    return Compilation


@pytest.fixture
def host_asset():
    return HostAsset


@pytest.fixture
def make_config():
    """Resolve a config from overrides without reading the process environment."""

    def _make(**overrides: Any):
        return resolve_config(overrides, environ={})

    return _make


@pytest.fixture
def metrics() -> PublishMetrics:
    return PublishMetrics(registry=CollectorRegistry())


@pytest.fixture
def uploaded_at():
    """Timestamp FakeStore reports for every stored object."""
    return UPLOADED_AT
