"""
Remote prefix and key computation.

Every object uploaded by one pipeline instance shares one prefix, computed
on first use and cached afterwards.
"""

import re
import warnings
from typing import Callable, Optional

from asset_publisher.publisher.errors import ConfigValidationWarning
from asset_publisher.utils.config import PublishConfig
from asset_publisher.utils.logging import get_logger
from asset_publisher.utils.project import discover_project_name

logger = get_logger(__name__)

_REPEATED_SEPARATORS = re.compile(r"/{2,}")


def build_remote_key(prefix: str, name: str) -> str:
    """
    Join prefix and asset name, collapsing repeated separators.

    Leading separators are dropped, so an empty prefix puts the object at the
    bucket root instead of under an empty top-level directory.

    Example:
        >>> build_remote_key("a/", "b.js")
        'a/b.js'
    """
    return _REPEATED_SEPARATORS.sub("/", f"{prefix}/{name}").lstrip("/")


class PrefixCalculator:
    """
    Memoized remote prefix for one pipeline instance.

    Resolution order:
        1. An explicit ``prefix`` is used verbatim.
        2. Otherwise ``oss_base_dir/project_name``, where the project name
           comes from config or from the project manifest.
        3. With no project name, ``oss_base_dir`` alone (with a warning).
    """

    def __init__(
        self,
        config: PublishConfig,
        discover: Optional[Callable[[], str]] = None,
    ) -> None:
        self._config = config
        self._discover = discover or discover_project_name
        self._prefix: Optional[str] = None
        self.project_name = config.project_name

    def compute(self) -> str:
        if self._prefix is not None:
            return self._prefix

        if self._config.prefix:
            self._prefix = self._config.prefix
        else:
            self.project_name = self._config.project_name or self._discover() or ""
            if not self.project_name:
                message = f"Using default upload directory: {self._config.oss_base_dir}"
                logger.warning(message)
                warnings.warn(message, ConfigValidationWarning, stacklevel=2)
                self._prefix = self._config.oss_base_dir
            else:
                self._prefix = f"{self._config.oss_base_dir}/{self.project_name}"

        if not self._prefix.strip("/"):
            logger.warning("Upload directory is empty, objects go to the bucket root")
        logger.debug(f"Using remote directory: {self._prefix}")
        return self._prefix

    def remote_key(self, name: str) -> str:
        return build_remote_key(self.compute(), name)
