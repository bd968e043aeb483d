"""
Build plugin: publishes a build's assets when the host emits them.

Example usage:
    >>> from asset_publisher import BuildPlugin
    >>> plugin = BuildPlugin({"prefix": "static/storefront", "retry": 2})
    >>> plugin.apply(compiler)  # host build tool object

The host's emit callback always gets its ``done`` callback invoked exactly
once. A terminal publish error is logged, and added to
``compilation.errors`` unless ``ignore_errors`` is set.
"""

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Set, Union

from asset_publisher.plugin.hooks import registrar_for
from asset_publisher.publisher.models import PublishReport
from asset_publisher.publisher.prefix import PrefixCalculator
from asset_publisher.publisher.publisher import Publisher
from asset_publisher.publisher.selector import select_assets
from asset_publisher.storage.base import ObjectStore
from asset_publisher.storage.factory import create_store
from asset_publisher.utils.config import resolve_config
from asset_publisher.utils.config_loader import load_overrides
from asset_publisher.utils.logging import get_logger, set_run_id, setup_logging

logger = get_logger(__name__)

PLUGIN_NAME = "AssetPublisherPlugin"


class BuildPlugin:
    """
    Host-facing entry point of the publisher.

    Args:
        overrides: Caller configuration (see resolve_config)
        store: Object store to use; created from config on first use if None
        environ: Environment mapping for configuration (defaults to os.environ)
        config_path: YAML override file; explicit overrides take precedence
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Any]] = None,
        store: Optional[ObjectStore] = None,
        environ: Optional[Mapping[str, str]] = None,
        config_path: Optional[Union[str, Path]] = None,
    ) -> None:
        if config_path is not None:
            overrides = load_overrides(config_path, overrides)
        self.config = resolve_config(overrides, environ)
        if self.config.enable_log and not logging.getLogger().handlers:
            setup_logging(level="INFO")
        self.prefix = PrefixCalculator(self.config)
        self.prefix.compute()
        self._store = store
        self._publisher: Optional[Publisher] = None
        # Emit tasks scheduled on a host loop, held until they finish
        self._tasks: Set[asyncio.Task] = set()

    @property
    def publisher(self) -> Publisher:
        if self._publisher is None:
            store = self._store if self._store is not None else create_store(self.config)
            self._publisher = Publisher(self.config, store, prefix=self.prefix)
        return self._publisher

    def _progress(self, message: str) -> None:
        if self.config.enable_log:
            logger.info(message)
        else:
            logger.debug(message)

    def apply(self, host: Any) -> None:
        """Register the emit callback on a host build tool."""
        registrar_for(host).register(PLUGIN_NAME, self.on_emit)

    def on_emit(self, compilation: Any, callback: Callable[[], None]) -> Any:
        """
        Emit-time callback handed to the host.

        Schedules the run on the host's event loop when one is running,
        otherwise runs it to completion before returning.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self._emit(compilation, callback))
        task = loop.create_task(self._emit(compilation, callback))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Emit task failed ::: {type(error).__name__}: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )

    async def _emit(self, compilation: Any, callback: Callable[[], None]) -> PublishReport:
        try:
            return await self.run(compilation)
        finally:
            callback()

    async def run(self, compilation: Any) -> PublishReport:
        """
        Publish the compilation's assets.

        Args:
            compilation: Host object exposing ``assets`` (mutable mapping of
                name -> asset) and ``errors`` (list)

        Returns:
            PublishReport; ``report.error`` holds the terminal error, if any
        """
        set_run_id(uuid.uuid4().hex[:12])
        assets = compilation.assets
        report = PublishReport()

        self._progress("Upload started...")
        try:
            candidates = select_assets(assets, self.config.exclude)
            report.total = len(candidates)
            report = await self.publisher.publish(candidates, assets)
        except Exception as err:
            report = getattr(err, "report", None) or report
            report.error = err
            logger.error(f"Upload error ::: {type(err).__name__}: {err}")
            if not self.config.ignore_errors:
                compilation.errors.append(err)
            return report

        self._progress(
            f"Upload completed: {len(report.uploaded)} uploaded, "
            f"{len(report.skipped)} skipped"
        )
        return report
