"""
Asset selection.

Turns the host build tool's asset collection into Asset records, dropping
anything whose name matches the exclusion pattern. Input order is kept.
"""

from typing import Any, List, Mapping, Pattern

from asset_publisher.publisher.models import Asset


def to_asset(name: str, source: Any) -> Asset:
    """
    Build an Asset from one entry of a host asset collection.

    ``source`` may be an Asset, raw bytes/str, or a host asset object
    exposing ``source()`` and optionally ``exists_at``.
    """
    if isinstance(source, Asset):
        return source

    local_path = None
    if hasattr(source, "source"):
        local_path = getattr(source, "exists_at", None)
        source = source.source()

    if isinstance(source, str):
        content = source.encode("utf-8")
    elif isinstance(source, (bytes, bytearray, memoryview)):
        content = bytes(source)
    else:
        raise TypeError(f"Unsupported content for asset {name!r}: {type(source).__name__}")

    return Asset(name=name, content=content, local_path=local_path)


def select_assets(assets: Mapping[str, Any], exclude: Pattern[str]) -> List[Asset]:
    """
    Filter the asset collection against the exclusion pattern.

    Args:
        assets: Asset name -> content or host asset object
        exclude: Names matching this pattern (anywhere) are dropped

    Returns:
        Candidate assets, in input order
    """
    return [
        to_asset(name, source)
        for name, source in assets.items()
        if not exclude.search(name)
    ]
