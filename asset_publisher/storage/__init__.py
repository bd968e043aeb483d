"""
Object store adapters.

Provides the async ObjectStore interface and two implementations: an
S3-compatible store (Aliyun OSS by default) and a Google Cloud Storage store.
"""

from .base import ObjectStore
from .factory import create_store
from .gcs import GCSStore
from .s3 import S3CompatibleStore, oss_endpoint

__all__ = [
    "GCSStore",
    "ObjectStore",
    "S3CompatibleStore",
    "create_store",
    "oss_endpoint",
]
