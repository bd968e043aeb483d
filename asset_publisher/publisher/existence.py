"""
Existence check before upload.

A failed query never blocks publishing: any error while listing is treated
exactly like "not found" and the asset is uploaded.
"""

from typing import Optional

from asset_publisher.publisher.errors import ExistenceQueryFailure
from asset_publisher.publisher.models import RemoteObjectSummary
from asset_publisher.storage.base import ObjectStore
from asset_publisher.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_KEYS = 50


class ExistenceChecker:
    """Looks up an exact remote key with one bounded prefix listing."""

    def __init__(self, store: ObjectStore, max_keys: int = DEFAULT_MAX_KEYS) -> None:
        self.store = store
        self.max_keys = max_keys

    async def _query(self, remote_key: str) -> Optional[RemoteObjectSummary]:
        try:
            objects = await self.store.list_objects(remote_key, self.max_keys)
            for item in objects or []:
                if item.key == remote_key:
                    return item
        except Exception as e:
            raise ExistenceQueryFailure(
                f"Existence query failed for {remote_key}: {e}", remote_key
            ) from e
        return None

    async def find(self, remote_key: str) -> Optional[RemoteObjectSummary]:
        """
        Return the stored object at exactly ``remote_key``, or None.

        None also covers a failed query.
        """
        try:
            return await self._query(remote_key)
        except ExistenceQueryFailure as e:
            logger.debug(f"{e}; uploading anyway")
            return None

    async def exists(self, remote_key: str) -> bool:
        return await self.find(remote_key) is not None
