"""
Build Asset Publisher

Publishes a build's in-memory assets to an object-storage bucket once the
build emits them: selection, remote-key computation, skip-if-present,
gzip encoding and bounded-retry upload.

This package provides modular components for each stage:
- publisher: the publish pipeline (selection, prefix, encoding, upload)
- storage: S3-compatible (Aliyun OSS) and Google Cloud Storage adapters
- plugin: host build-tool integration
- utils: configuration, logging, retry and metrics
"""

__version__ = "0.1.0"

from asset_publisher.plugin import BuildPlugin
from asset_publisher.publisher import Asset, PublishReport, Publisher
from asset_publisher.utils.config import PublishConfig, resolve_config

__all__ = [
    "Asset",
    "BuildPlugin",
    "PublishConfig",
    "PublishReport",
    "Publisher",
    "resolve_config",
]
