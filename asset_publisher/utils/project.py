"""
Project name discovery from build manifests.

Looks for package.json first (front-end builds), then pyproject.toml. Any
problem reading a manifest means "no name", never an error.
"""

import json
import os
import tomllib
from pathlib import Path
from typing import Optional, Union

from asset_publisher.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


def _name_from_package_json(path: Path) -> str:
    data = json.loads(path.read_text(encoding="utf-8"))
    name = data.get("name") if isinstance(data, dict) else None
    return name if isinstance(name, str) else ""


def _name_from_pyproject(path: Path) -> str:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    name = data.get("project", {}).get("name")
    return name if isinstance(name, str) else ""


@log_function_call
def discover_project_name(cwd: Optional[Union[str, Path]] = None) -> str:
    """
    Read the project name from the manifest in ``cwd``.

    Args:
        cwd: Directory to search (defaults to $PWD, then the process cwd)

    Returns:
        Project name, or "" when no readable manifest declares one
    """
    base = Path(cwd or os.environ.get("PWD") or os.getcwd())

    for filename, reader in (
        ("package.json", _name_from_package_json),
        ("pyproject.toml", _name_from_pyproject),
    ):
        manifest = base / filename
        if not manifest.is_file():
            continue
        try:
            name = reader(manifest)
        except (OSError, ValueError) as e:
            logger.debug(f"Could not read project name from {manifest}: {e}")
            continue
        if name:
            logger.debug(f"Discovered project name {name!r} from {manifest}")
            return name

    return ""
