"""Store construction from a resolved PublishConfig."""

from asset_publisher.storage.base import ObjectStore
from asset_publisher.storage.gcs import GCSStore
from asset_publisher.storage.s3 import S3CompatibleStore
from asset_publisher.utils.config import PublishConfig
from asset_publisher.utils.logging import log_function_call


@log_function_call
def create_store(config: PublishConfig) -> ObjectStore:
    """
    Create the object store selected by ``config.backend``.

    Raises:
        ValueError: For an unknown backend or missing bucket
    """
    if config.backend == "oss":
        return S3CompatibleStore(config.auth)
    if config.backend == "gcs":
        return GCSStore(config.auth)
    raise ValueError(f"Unsupported backend: {config.backend}")
