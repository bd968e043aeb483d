"""
Publish pipeline.

Selects build assets, computes their remote keys, skips ones already in the
store, gzips content and uploads with bounded retry.
"""

from .encoder import encode_content
from .errors import (
    ConfigValidationWarning,
    EncodingError,
    ExistenceQueryFailure,
    PublishError,
    UploadError,
)
from .existence import ExistenceChecker
from .models import Asset, EncodedContent, PublishReport, RemoteObjectSummary, UploadAttempt
from .prefix import PrefixCalculator, build_remote_key
from .publisher import Publisher
from .selector import select_assets
from .uploader import UploadEngine

__all__ = [
    "Asset",
    "ConfigValidationWarning",
    "EncodedContent",
    "EncodingError",
    "ExistenceChecker",
    "ExistenceQueryFailure",
    "PrefixCalculator",
    "PublishError",
    "PublishReport",
    "Publisher",
    "RemoteObjectSummary",
    "UploadAttempt",
    "UploadEngine",
    "UploadError",
    "build_remote_key",
    "encode_content",
    "select_assets",
]
