"""
Content encoding.

Optionally gzips an asset and derives the transport options that go with the
encoded buffer. The statically configured options are copied, never touched.
"""

import gzip
import zlib
from typing import Any, Dict, Mapping, Optional, Union

from asset_publisher.publisher.errors import EncodingError
from asset_publisher.publisher.models import Asset, EncodedContent

CONTENT_ENCODING_HEADER = "Content-Encoding"
GZIP_ENCODING = "gzip"
DEFAULT_GZIP_LEVEL = 6


def gzip_enabled(use_gzip: Union[bool, int]) -> bool:
    """True for ``True`` or any numeric level; ``False`` disables compression."""
    if isinstance(use_gzip, bool):
        return use_gzip
    return isinstance(use_gzip, int)


def derive_options(
    options: Optional[Mapping[str, Any]], use_gzip: Union[bool, int]
) -> Optional[Dict[str, Any]]:
    """
    Transport options for one write.

    Without compression the configured options are returned as a plain copy
    (``None`` stays ``None``). With compression a Content-Encoding header is
    added to a copy of the configured headers, replacing any existing
    Content-Encoding entry whatever its case.
    """
    if not gzip_enabled(use_gzip):
        return dict(options) if options is not None else None

    derived: Dict[str, Any] = dict(options) if options is not None else {}
    headers = {
        name: value
        for name, value in (derived.get("headers") or {}).items()
        if str(name).lower() != CONTENT_ENCODING_HEADER.lower()
    }
    headers[CONTENT_ENCODING_HEADER] = GZIP_ENCODING
    derived["headers"] = headers
    return derived


def encode_content(
    asset: Asset,
    use_gzip: Union[bool, int],
    options: Optional[Mapping[str, Any]] = None,
) -> EncodedContent:
    """
    Encode an asset for upload.

    Args:
        asset: Asset to encode
        use_gzip: False, True (default level) or a gzip level 0-9
        options: Statically configured transport options

    Returns:
        EncodedContent with the buffer to write and its transport options

    Raises:
        EncodingError: If compression fails
    """
    if not gzip_enabled(use_gzip):
        return EncodedContent(buffer=asset.content, options=derive_options(options, use_gzip))

    level = DEFAULT_GZIP_LEVEL if isinstance(use_gzip, bool) else use_gzip
    try:
        buffer = gzip.compress(asset.content, compresslevel=level)
    except (ValueError, zlib.error) as e:
        raise EncodingError(f"Failed to gzip {asset.name}: {e}") from e

    return EncodedContent(buffer=buffer, options=derive_options(options, use_gzip))
