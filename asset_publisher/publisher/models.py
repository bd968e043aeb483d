"""
Data model for the publish pipeline.

Assets are immutable once selected. Reports and attempts are transient and
never persisted between runs.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from asset_publisher.storage.base import RemoteObjectSummary


@dataclass(frozen=True)
class Asset:
    """
    A single named in-memory build output.

    Attributes:
        name: Asset name, relative to the build output directory
        content: Raw payload bytes
        local_path: Where the host build tool would write the asset, if known
    """

    name: str
    content: bytes
    local_path: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class EncodedContent:
    """Payload ready for the store plus the transport options that describe it."""

    buffer: bytes
    options: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class UploadAttempt:
    """Outcome of a single write to the store."""

    asset_name: str
    remote_key: str
    attempt: int
    outcome: str  # "success" or "failure"
    error: Optional[BaseException] = None


@dataclass
class PublishReport:
    """
    Aggregate result of one publish run.

    Attributes:
        total: Number of candidate assets handed to the run
        uploaded: Remote keys written in this run, in order
        skipped: Remote keys that already existed in the store
        failed: Remote key of the asset that aborted the run, if any
        error: The terminal exception, if any
        bytes_uploaded: Sum of encoded payload sizes written
    """

    total: int = 0
    uploaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Optional[str] = None
    error: Optional[BaseException] = None
    bytes_uploaded: int = 0

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def processed(self) -> int:
        return len(self.uploaded) + len(self.skipped)
