"""MDIO Variable library."""

from __future__ import annotations

from importlib import metadata

from mdio_variable.constants import OpenMode
from mdio_variable.core.domain import IndexDomain
from mdio_variable.core.dtype import ScalarType
from mdio_variable.exceptions import AlreadyExistsError
from mdio_variable.exceptions import EnvironmentFormatError
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import MDIOError
from mdio_variable.exceptions import NotFoundError
from mdio_variable.schemas.metadata import UserAttributes
from mdio_variable.variable import LabeledArray
from mdio_variable.variable import SliceDescriptor
from mdio_variable.variable import Variable
from mdio_variable.variable import VariableData
from mdio_variable.variable import from_variable

try:
    __version__ = metadata.version("mdio-variable")
except metadata.PackageNotFoundError:
    __version__ = "unknown"


__all__ = [
    "__version__",
    "AlreadyExistsError",
    "EnvironmentFormatError",
    "IndexDomain",
    "InvalidArgumentError",
    "LabeledArray",
    "MDIOError",
    "NotFoundError",
    "OpenMode",
    "ScalarType",
    "SliceDescriptor",
    "UserAttributes",
    "Variable",
    "VariableData",
    "from_variable",
]
