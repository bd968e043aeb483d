"""
Upload engine: one store write plus the bounded retry loop around it.

Total attempts per object = retry_limit + 1, first success wins. Retries are
immediate unless a retry delay is configured, in which case the delay grows
exponentially between attempts.
"""

from typing import Any, Callable, List, Mapping, Optional

from asset_publisher.publisher.errors import UploadError
from asset_publisher.publisher.models import UploadAttempt
from asset_publisher.storage.base import ObjectStore
from asset_publisher.utils.config import validate_retry
from asset_publisher.utils.logging import get_logger
from asset_publisher.utils.retry import RetryExhausted, RetryPolicy, retry_async

logger = get_logger(__name__)


class UploadEngine:
    """
    Writes encoded buffers to the store with bounded retry.

    Attributes:
        store: Object store to write to
        retry_limit: Retries after the first attempt
        retry_delay: Base backoff delay in seconds (0 = retry immediately)
        on_attempt: Optional observer called with every UploadAttempt
    """

    def __init__(
        self,
        store: ObjectStore,
        retry_limit: int = 0,
        retry_delay: float = 0.0,
        on_attempt: Optional[Callable[[UploadAttempt], None]] = None,
    ) -> None:
        self.store = store
        self.retry_limit = validate_retry(retry_limit)
        self.policy = RetryPolicy(retries=self.retry_limit, base_delay=retry_delay)
        self.on_attempt = on_attempt

    async def upload_once(
        self, remote_key: str, buffer: bytes, options: Optional[Mapping[str, Any]]
    ) -> None:
        await self.store.put_object(remote_key, buffer, options)

    async def upload_with_retry(
        self,
        remote_key: str,
        buffer: bytes,
        options: Optional[Mapping[str, Any]] = None,
        asset_name: str = "",
    ) -> int:
        """
        Upload one object, retrying on failure.

        Args:
            remote_key: Destination key
            buffer: Encoded payload
            options: Transport options for the write
            asset_name: Name of the asset being written, for attempt records

        Returns:
            Number of attempts used

        Raises:
            UploadError: After retry_limit + 1 failed attempts; the last
                store error is chained as ``__cause__``
        """
        attempts: List[UploadAttempt] = []

        def record(attempt: int, error: Optional[BaseException]) -> None:
            outcome = UploadAttempt(
                asset_name=asset_name,
                remote_key=remote_key,
                attempt=attempt,
                outcome="failure" if error else "success",
                error=error,
            )
            attempts.append(outcome)
            if self.on_attempt:
                self.on_attempt(outcome)

        try:
            await retry_async(
                lambda: self.upload_once(remote_key, buffer, options),
                self.policy,
                on_attempt=record,
                name=f"upload {remote_key}",
            )
        except RetryExhausted as e:
            raise UploadError(
                f"Upload failed for {remote_key} after {e.attempts} attempts: {e.last_error}",
                remote_key=remote_key,
                attempts=e.attempts,
                last_error=e.last_error,
            ) from e.last_error

        return len(attempts)
