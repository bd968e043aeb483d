"""
Google Cloud Storage object store.

Authenticates with Application Default Credentials
(GOOGLE_APPLICATION_CREDENTIALS or the ambient service account); only the
bucket name is taken from the auth config. The SDK is synchronous, so each
call runs in a worker thread.
"""

import asyncio
from typing import Any, List, Mapping, Optional

from google.cloud import storage

from asset_publisher.storage.base import (
    CACHE_CONTROL,
    CONTENT_DISPOSITION,
    CONTENT_ENCODING,
    CONTENT_TYPE,
    RemoteObjectSummary,
    split_options,
)
from asset_publisher.utils.config import AuthConfig
from asset_publisher.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
UPLOAD_TIMEOUT_SECONDS = 300


class GCSStore:
    """
    ObjectStore backed by a GCS bucket.

    Args:
        auth: Auth config; ``bucket`` is required
        client: Pre-configured storage.Client (for testing)
    """

    def __init__(self, auth: AuthConfig, client: Optional[storage.Client] = None) -> None:
        if not auth.bucket:
            raise ValueError("Store bucket name is required")
        self.bucket_name = auth.bucket
        self._client = client if client is not None else storage.Client()
        self._bucket = self._client.bucket(self.bucket_name)

    def _list(self, prefix: str, max_keys: int) -> List[RemoteObjectSummary]:
        blobs = self._client.list_blobs(
            self.bucket_name, prefix=prefix, max_results=max_keys
        )
        return [RemoteObjectSummary(key=blob.name, last_modified=blob.updated) for blob in blobs]

    def _put(self, key: str, data: bytes, options: Optional[Mapping[str, Any]]) -> None:
        headers, metadata = split_options(options)
        blob = self._bucket.blob(key)

        if CONTENT_ENCODING in headers:
            blob.content_encoding = headers[CONTENT_ENCODING]
        if CACHE_CONTROL in headers:
            blob.cache_control = headers[CACHE_CONTROL]
        if CONTENT_DISPOSITION in headers:
            blob.content_disposition = headers[CONTENT_DISPOSITION]
        if metadata:
            blob.metadata = metadata

        blob.upload_from_string(
            data,
            content_type=headers.get(CONTENT_TYPE, DEFAULT_CONTENT_TYPE),
            timeout=UPLOAD_TIMEOUT_SECONDS,
        )

    async def list_objects(self, prefix: str, max_keys: int) -> List[RemoteObjectSummary]:
        return await asyncio.to_thread(self._list, prefix, max_keys)

    async def put_object(
        self,
        key: str,
        data: bytes,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        await asyncio.to_thread(self._put, key, data, options)
