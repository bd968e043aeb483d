"""
Prometheus metrics for publish runs.

Metrics Provided:
    - asset_publish_total: Counter of assets by outcome (uploaded/skipped/failed)
    - asset_publish_bytes_total: Counter of encoded bytes written to the store
    - asset_upload_retries_total: Counter of upload attempts after the first
    - asset_upload_duration_seconds: Histogram of per-asset upload time

Usage:
    from asset_publisher.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_upload():
        await engine.upload_with_retry(key, buffer, options)
    metrics.record_uploaded(len(buffer))
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from asset_publisher.utils.logging import get_logger

logger = get_logger(__name__)


class PublishMetrics:
    """
    Prometheus collectors for the publish pipeline.

    Example:
        >>> from prometheus_client import CollectorRegistry
        >>> metrics = PublishMetrics(registry=CollectorRegistry())
        >>> metrics.record_skipped()
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        """
        Initialize metrics collectors.

        Args:
            registry: Registry to register with (default process registry)
        """
        self.registry = registry if registry is not None else REGISTRY

        self.publish_requests = Counter(
            name="asset_publish_total",
            documentation="Assets processed by the publisher",
            labelnames=["outcome"],  # uploaded, skipped, failed
            registry=self.registry,
        )

        self.publish_bytes = Counter(
            name="asset_publish_bytes_total",
            documentation="Encoded bytes written to the object store",
            registry=self.registry,
        )

        self.upload_retries = Counter(
            name="asset_upload_retries_total",
            documentation="Upload attempts made after the first one",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="asset_upload_duration_seconds",
            documentation="Time spent uploading one asset, retries included",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=self.registry,
        )

    @contextmanager
    def track_upload(self) -> Iterator[None]:
        """Time one asset's upload, retries included."""
        with self.upload_duration.time():
            yield

    def record_uploaded(self, bytes_uploaded: int) -> None:
        self.publish_requests.labels(outcome="uploaded").inc()
        self.publish_bytes.inc(bytes_uploaded)

    def record_skipped(self) -> None:
        self.publish_requests.labels(outcome="skipped").inc()

    def record_failed(self) -> None:
        self.publish_requests.labels(outcome="failed").inc()

    def record_retry(self) -> None:
        self.upload_retries.inc()


_metrics: Optional[PublishMetrics] = None


def get_metrics() -> PublishMetrics:
    """Get or create the process-wide metrics instance."""
    global _metrics
    if _metrics is None:
        logger.debug("Initializing PublishMetrics")
        _metrics = PublishMetrics()
    return _metrics
