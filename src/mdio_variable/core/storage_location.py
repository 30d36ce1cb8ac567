"""StorageLocation class for resolving URIs into Variable key-value store specs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import fsspec

logger = logging.getLogger(__name__)

_PROTOCOL_DRIVERS = {"gs": "gcs", "gcs": "gcs", "s3": "s3", "memory": "memory", "file": "file"}


class StorageLocation:
    """A local, in-memory, or cloud location of a Variable's array.

    Note, we do not want to make it a dataclass because we want the uri and the options
    to be read-only immutable properties.

    Args:
        uri: The URI of the array (e.g., '/path/to/velocity', 'file:///path/to/velocity',
            'memory://velocity', 's3://bucket/velocity', 'gs://bucket/velocity').
        options: Optional dictionary of options for the cloud, such as credentials.

    Examples:
        >>> StorageLocation("gs://bucket/survey/velocity").to_kvstore_spec()
        {'driver': 'gcs', 'bucket': 'bucket', 'path': 'survey/velocity'}
    """

    def __init__(self, uri: str = "", options: dict[str, Any] | None = None):
        self._uri = uri
        self._options = options or {}
        self._fs = None

        if "://" in uri and not uri.startswith("file://"):
            return

        # For local paths, ensure they are absolute and resolved
        self._uri = str(Path(self._uri.removeprefix("file://")).resolve())

    @property
    def uri(self) -> str:
        """Get the URI (read-only)."""
        return self._uri

    @property
    def options(self) -> dict[str, Any]:
        """Get the options (read-only)."""
        return self._options.copy()

    @property
    def _filesystem(self) -> fsspec.AbstractFileSystem:
        """Get the fsspec filesystem instance for this storage location."""
        if self._fs is None:
            self._fs = fsspec.filesystem(self._protocol, **self._options)
        return self._fs

    @property
    def _path(self) -> str:
        """Extract the path portion from the URI."""
        if "://" in self._uri:
            return self._uri.split("://", 1)[1]
        return self._uri

    @property
    def _protocol(self) -> str:
        """Extract the protocol/scheme from the URI."""
        if "://" in self._uri:
            return self._uri.split("://", 1)[0]
        return "file"

    @property
    def driver(self) -> str:
        """Key-value driver serving this location.

        Raises:
            ValueError: If the protocol has no matching driver.
        """
        if self._protocol not in _PROTOCOL_DRIVERS:
            msg = f"Unsupported protocol {self._protocol!r} in {self._uri!r}"
            raise ValueError(msg)
        return _PROTOCOL_DRIVERS[self._protocol]

    def exists(self) -> bool:
        """Check if the storage location exists using fsspec."""
        try:
            return self._filesystem.exists(self._path)
        except (ImportError, OSError, ValueError) as e:
            logger.warning("Error checking existence of %s: %s", self._uri, e)
            return False

    def to_kvstore_spec(self) -> dict[str, Any]:
        """The ``kvstore`` section of a Variable spec addressing this location."""
        driver = self.driver
        if driver in ("file", "memory"):
            spec: dict[str, Any] = {"driver": driver, "path": self._path}
        else:
            bucket, _, path = self._path.partition("/")
            spec = {"driver": driver, "bucket": bucket, "path": path}

        if self._options and driver not in ("file", "memory"):
            spec["storage_options"] = self.options
        return spec

    def __str__(self) -> str:
        """String representation of the storage location."""
        return self._uri

    def __repr__(self) -> str:
        """Developer representation of the storage location."""
        return f"StorageLocation(uri='{self._uri}', options={self._options})"
