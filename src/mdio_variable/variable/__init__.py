"""The Variable: a labeled, typed, metadata-bearing handle over a durable array."""

from mdio_variable.variable.data import LabeledArray
from mdio_variable.variable.data import VariableData
from mdio_variable.variable.data import from_variable
from mdio_variable.variable.slicing import SliceDescriptor
from mdio_variable.variable.variable import Variable

__all__ = [
    "LabeledArray",
    "SliceDescriptor",
    "Variable",
    "VariableData",
    "from_variable",
]
