"""
Publish orchestrator.

Drives the per-asset sequence for one run, strictly in order:

    remote key -> existence check (optional) -> encode -> upload with retry
    -> removal from the build's asset collection (optional)

The first terminal failure aborts the remaining assets. The exception is
re-raised to the caller with the partial PublishReport attached as
``error.report``.

Example usage:
    >>> publisher = Publisher(config, store)
    >>> report = await publisher.publish(select_assets(assets, config.exclude), assets)
    >>> report.uploaded
    ['auto_upload_ci/storefront/main.js']
"""

from datetime import datetime
from typing import Any, MutableMapping, Optional, Sequence

from asset_publisher.publisher.encoder import encode_content
from asset_publisher.publisher.errors import PublishError
from asset_publisher.publisher.existence import ExistenceChecker
from asset_publisher.publisher.models import Asset, PublishReport, UploadAttempt
from asset_publisher.publisher.prefix import PrefixCalculator
from asset_publisher.publisher.uploader import UploadEngine
from asset_publisher.storage.base import ObjectStore
from asset_publisher.utils.config import PublishConfig
from asset_publisher.utils.logging import get_logger
from asset_publisher.utils.metrics import PublishMetrics, get_metrics

logger = get_logger(__name__)


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "unknown time"
    return value.strftime("%Y-%m-%d %H:%M")


class Publisher:
    """
    Publishes candidate assets for one pipeline instance.

    Attributes:
        config: Resolved publish configuration
        prefix: Memoized prefix calculator shared by every asset
        checker: Existence checker (used only when exist_check is on)
        engine: Upload engine with the configured retry limit
    """

    def __init__(
        self,
        config: PublishConfig,
        store: ObjectStore,
        prefix: Optional[PrefixCalculator] = None,
        metrics: Optional[PublishMetrics] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.prefix = prefix or PrefixCalculator(config)
        self.metrics = metrics or get_metrics()
        self.checker = ExistenceChecker(store)
        self.engine = UploadEngine(
            store,
            retry_limit=config.retry,
            retry_delay=config.retry_delay,
            on_attempt=self._on_attempt,
        )

    def _progress(self, message: str) -> None:
        if self.config.enable_log:
            logger.info(message)
        else:
            logger.debug(message)

    def _on_attempt(self, attempt: UploadAttempt) -> None:
        if attempt.attempt > 1:
            self.metrics.record_retry()
        if attempt.error is not None:
            logger.debug(
                f"Attempt {attempt.attempt} for {attempt.remote_key} failed: {attempt.error}"
            )

    def _remove(self, asset: Asset, collection: Optional[MutableMapping[str, Any]]) -> None:
        if self.config.remove_mode and collection is not None:
            collection.pop(asset.name, None)

    async def publish(
        self,
        candidates: Sequence[Asset],
        collection: Optional[MutableMapping[str, Any]] = None,
    ) -> PublishReport:
        """
        Publish every candidate asset in order.

        Args:
            candidates: Selected assets
            collection: The build's asset collection; published or skipped
                assets are removed from it when remove_mode is on

        Returns:
            PublishReport for the run

        Raises:
            EncodingError: If compressing an asset failed
            UploadError: If an asset could not be written after all retries
        """
        total = len(candidates)
        report = PublishReport(total=total)

        for index, asset in enumerate(candidates, start=1):
            remote_key = self.prefix.remote_key(asset.name)
            try:
                await self._publish_one(asset, remote_key, index, total, report, collection)
            except PublishError as e:
                report.failed = remote_key
                report.error = e
                e.report = report
                self.metrics.record_failed()
                raise

        return report

    async def _publish_one(
        self,
        asset: Asset,
        remote_key: str,
        index: int,
        total: int,
        report: PublishReport,
        collection: Optional[MutableMapping[str, Any]],
    ) -> None:
        if self.config.exist_check:
            existing = await self.checker.find(remote_key)
            if existing is not None:
                self._progress(
                    f"Already exists, skipped upload "
                    f"(Uploaded at {format_timestamp(existing.last_modified)}) "
                    f"{index}/{total}: {remote_key}"
                )
                report.skipped.append(remote_key)
                self.metrics.record_skipped()
                self._remove(asset, collection)
                return

        encoded = encode_content(asset, self.config.use_gzip, self.config.options)

        self._progress(f"Uploading {index}/{total}: {remote_key}")
        with self.metrics.track_upload():
            attempts = await self.engine.upload_with_retry(
                remote_key, encoded.buffer, encoded.options, asset_name=asset.name
            )

        retry_note = f" after {attempts - 1} retries" if attempts > 1 else ""
        self._progress(f"Upload successful {index}/{total}: {remote_key}{retry_note}")
        report.uploaded.append(remote_key)
        report.bytes_uploaded += len(encoded.buffer)
        self.metrics.record_uploaded(len(encoded.buffer))
        self._remove(asset, collection)
