"""Constant values used across MDIO Variable."""

from enum import IntEnum
from enum import StrEnum


class ZarrFormat(IntEnum):
    """Zarr version enum."""

    V2 = 2
    V3 = 3


class OpenMode(StrEnum):
    """How a Variable is opened.

    ``OPEN`` requires an existing array and its attributes document. ``CREATE`` fails
    if the array already exists and ``CREATE_CLEAN`` replaces whatever is there.
    """

    OPEN = "open"
    CREATE = "create"
    CREATE_CLEAN = "create_clean"


# Side-document (user attributes) keys. Object stores don't tolerate a leading separator.
ZATTRS_PATH_KEY = "/.zattrs"
ZATTRS_OBJECT_KEY = ".zattrs"

# Annotation key used by xarray/zarr v2 for dimension names.
ARRAY_DIMENSIONS_KEY = "_ARRAY_DIMENSIONS"

DEFAULT_CLOUD_DRIVERS = ("gcs", "s3")

# Keys routed through the attribute cell rather than the reduced metadata.
USER_ATTRIBUTE_KEYS = ("attributes", "statsV1")
