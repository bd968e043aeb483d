"""
Exception types raised by the publish pipeline.

Only EncodingError and UploadError ever reach the caller of a publish run.
ExistenceQueryFailure is raised inside the existence checker and converted
to "not found" there.
"""

from typing import Optional


class ConfigValidationWarning(UserWarning):
    """Non-fatal configuration problem; the pipeline continues with a fallback."""


class PublishError(Exception):
    """Base class for terminal publish failures."""

    def __init__(self, message: str, remote_key: Optional[str] = None) -> None:
        super().__init__(message)
        self.remote_key = remote_key
        # Partial PublishReport, attached by the publisher when the run aborts
        self.report = None


class EncodingError(PublishError):
    """Compressing an asset failed. Deterministic, so never retried."""


class ExistenceQueryFailure(PublishError):
    """Listing the remote store failed or returned something unusable."""


class UploadError(PublishError):
    """All upload attempts for one object failed."""

    def __init__(
        self,
        message: str,
        remote_key: Optional[str] = None,
        attempts: int = 0,
        last_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, remote_key)
        self.attempts = attempts
        self.last_error = last_error
