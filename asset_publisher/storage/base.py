"""
Object store interface used by the publish pipeline.

The pipeline needs two operations: list objects by key prefix, and write one
object. Both are awaitable so a run suspends only on store I/O.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Protocol, runtime_checkable

# Transport option headers that map to first-class object properties
CONTENT_ENCODING = "Content-Encoding"
CONTENT_TYPE = "Content-Type"
CACHE_CONTROL = "Cache-Control"
CONTENT_DISPOSITION = "Content-Disposition"

# Lower-cased name -> canonical spelling
_CANONICAL_HEADERS = {
    name.lower(): name
    for name in (CONTENT_ENCODING, CONTENT_TYPE, CACHE_CONTROL, CONTENT_DISPOSITION)
}


@dataclass(frozen=True)
class RemoteObjectSummary:
    """One entry of a store listing."""

    key: str
    last_modified: Optional[datetime] = None


@runtime_checkable
class ObjectStore(Protocol):
    """Minimal async object store."""

    async def list_objects(self, prefix: str, max_keys: int) -> List[RemoteObjectSummary]:
        """Return up to ``max_keys`` objects whose key starts with ``prefix``."""
        ...

    async def put_object(
        self,
        key: str,
        data: bytes,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Write ``data`` at ``key``. Raises on failure."""
        ...


def split_options(options: Optional[Mapping[str, Any]]) -> tuple:
    """
    Split transport options into (headers, metadata).

    Options look like ``{"headers": {...}, "meta": {...}}``; other keys are
    store-specific and ignored by the adapters in this package. Known header
    names are matched case-insensitively and returned in canonical spelling.
    """
    if not options:
        return {}, {}
    headers = {
        _CANONICAL_HEADERS.get(str(name).lower(), name): value
        for name, value in (options.get("headers") or {}).items()
    }
    metadata = {str(k): str(v) for k, v in (options.get("meta") or {}).items()}
    return headers, metadata
