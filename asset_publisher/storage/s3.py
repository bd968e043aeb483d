"""
S3-compatible object store.

Talks to Aliyun OSS through its S3-compatible API by default, and to AWS S3,
MinIO or any other S3-compatible service when an explicit endpoint is given.
boto3 is synchronous, so each call runs in a worker thread.

Endpoint resolution:
    auth.endpoint when set, otherwise https://{region}.aliyuncs.com where
    region is normalized to the "oss-" form (cn-hangzhou -> oss-cn-hangzhou).
"""

import asyncio
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

import boto3
from botocore.config import Config

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

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = get_logger(__name__)

# Transport headers -> boto3 put_object parameters
_HEADER_PARAMS = {
    CONTENT_ENCODING: "ContentEncoding",
    CONTENT_TYPE: "ContentType",
    CACHE_CONTROL: "CacheControl",
    CONTENT_DISPOSITION: "ContentDisposition",
}


def oss_endpoint(region: str) -> str:
    """Aliyun OSS endpoint for a region name."""
    if not region:
        raise ValueError("Store region is required when no endpoint is configured")
    if not region.startswith("oss-"):
        region = f"oss-{region}"
    return f"https://{region}.aliyuncs.com"


class S3CompatibleStore:
    """
    ObjectStore backed by an S3-compatible bucket.

    Args:
        auth: Credentials, bucket and region/endpoint
        client: Pre-configured boto3 S3 client (for testing)
    """

    def __init__(self, auth: AuthConfig, client: Optional["S3Client"] = None) -> None:
        if not auth.bucket:
            raise ValueError("Store bucket name is required")
        self.bucket = auth.bucket
        self._client = client if client is not None else self._create_client(auth)

    @staticmethod
    def _create_client(auth: AuthConfig) -> "S3Client":
        endpoint_url = auth.endpoint or oss_endpoint(auth.region)
        logger.debug(f"Creating S3 client for {endpoint_url}")
        client_kwargs: Dict[str, Any] = {
            "endpoint_url": endpoint_url,
            "config": Config(s3={"addressing_style": "virtual"}, signature_version="s3v4"),
        }
        if auth.region:
            client_kwargs["region_name"] = auth.region
        if auth.access_key_id:
            client_kwargs["aws_access_key_id"] = auth.access_key_id
            client_kwargs["aws_secret_access_key"] = auth.access_key_secret
        return boto3.client("s3", **client_kwargs)

    def _list(self, prefix: str, max_keys: int) -> List[RemoteObjectSummary]:
        response = self._client.list_objects_v2(
            Bucket=self.bucket, Prefix=prefix, MaxKeys=max_keys
        )
        return [
            RemoteObjectSummary(key=item["Key"], last_modified=item.get("LastModified"))
            for item in response.get("Contents", [])
        ]

    def _put(self, key: str, data: bytes, options: Optional[Mapping[str, Any]]) -> None:
        headers, metadata = split_options(options)
        params: Dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": data}
        for header, value in headers.items():
            param = _HEADER_PARAMS.get(header)
            if param:
                params[param] = value
            else:
                logger.debug(f"Ignoring unsupported header {header} for {key}")
        if metadata:
            params["Metadata"] = metadata
        self._client.put_object(**params)

    async def list_objects(self, prefix: str, max_keys: int) -> List[RemoteObjectSummary]:
        return await asyncio.to_thread(self._list, prefix, max_keys)

    async def put_object(
        self,
        key: str,
        data: bytes,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        await asyncio.to_thread(self._put, key, data, options)
