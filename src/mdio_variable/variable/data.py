"""In-memory representation of Variable data."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from dataclasses import replace
from typing import TYPE_CHECKING
from typing import Any

import numpy as np
import xarray as xr

from mdio_variable.core.dtype import ScalarType
from mdio_variable.core.dtype import check_reinterpret
from mdio_variable.core.dtype import element_type_of
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.variable.slicing import apply_slices
from mdio_variable.variable.slicing import resolve_slices_strict

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from mdio_variable.core.domain import IndexDomain
    from mdio_variable.variable.slicing import SliceDescriptor
    from mdio_variable.variable.variable import Variable


@dataclass(slots=True)
class LabeledArray:
    """A numpy array with a labeled index domain.

    Plain numpy arrays have no labels and no origin, so they can't be sliced with
    labels like "inline" or "crossline". The domain supplies both.

    Attributes:
        domain: Labels, origin, and shape of the data.
        data: The values, shaped like `domain`.
    """

    domain: IndexDomain
    data: NDArray

    def __post_init__(self) -> None:
        """Validate that data matches the domain."""
        if tuple(self.data.shape) != self.domain.shape:
            msg = "Array shape doesn't match its domain"
            raise InvalidArgumentError(msg, expected=str(self.domain.shape), actual=str(self.data.shape))

    def slice(self, *descriptors: SliceDescriptor) -> LabeledArray:
        """Copy out a sub-array.

        Every descriptor must name a dimension of the array, bounds are clamped to the
        domain. The result owns its buffer and keeps the absolute origins.

        Raises:
            InvalidArgumentError: If a step isn't 1 or bounds are inverted.
            NotFoundError: If a label doesn't exist in the domain.
        """
        slices = resolve_slices_strict(self.domain, descriptors)
        domain = apply_slices(self.domain, slices)

        local = tuple(
            slice(lower - base, upper - base)
            for lower, upper, base in zip(domain.origin, domain.exclusive_max, self.domain.origin, strict=True)
        )
        return LabeledArray(domain=domain, data=np.array(self.data[local], copy=True, order="C"))

    def get_data(self) -> NDArray:
        """The underlying array."""
        return self.data


@dataclass(slots=True)
class VariableData:
    """The in-memory representation of a Variable's data.

    Only built by `Variable.read` or `from_variable`. It holds no reference to the
    Variable it came from and is persisted with `Variable.write`.

    Attributes:
        variable_name: Identifier of the variable.
        long_name: Descriptive name, may be empty.
        metadata: The variable's metadata at read time.
        data: The labeled values.
    """

    variable_name: str
    long_name: str
    metadata: dict[str, Any]
    data: LabeledArray

    def __str__(self) -> str:
        """Name and domain, then dtype and rank."""
        return f"{self.variable_name}\t{self.data.domain}\n{self.dtype}\t{self.data.domain.rank}"

    @property
    def dimensions(self) -> IndexDomain:
        """Origin, shape and labels of the data."""
        return self.data.domain

    @property
    def num_samples(self) -> int:
        """Total number of elements."""
        return self.data.domain.size

    @property
    def dtype(self) -> np.dtype:
        """Data type of the values."""
        return self.data.data.dtype

    @property
    def element_type(self) -> ScalarType:
        """Element type of the values."""
        return element_type_of(self.dtype)

    def slice(self, *descriptors: SliceDescriptor) -> VariableData:
        """Copy out a labeled sub-region. See `LabeledArray.slice`."""
        return replace(self, metadata=copy.deepcopy(self.metadata), data=self.data.slice(*descriptors))

    def get_data_accessor(self) -> NDArray:
        """The values as a numpy array, for direct manipulation."""
        return self.data.get_data()

    def reinterpret(self, element_type: ScalarType | str) -> VariableData:
        """View the data as `element_type`, failing if the types are inconsistent."""
        check_reinterpret(self.dtype, element_type)
        return self

    def to_xarray(self) -> xr.DataArray:
        """Convert to an `xarray.DataArray` with index coordinates from the domain."""
        domain = self.data.domain
        dims = [label or f"dim_{index}" for index, label in enumerate(domain.labels)]
        coords = {
            dim: np.arange(lower, upper)
            for dim, lower, upper in zip(dims, domain.origin, domain.exclusive_max, strict=True)
        }
        attrs = copy.deepcopy(self.metadata)
        if self.long_name:
            attrs["long_name"] = self.long_name
        return xr.DataArray(self.data.data, dims=dims, coords=coords, name=self.variable_name, attrs=attrs)


def from_variable(variable: Variable, element_type: ScalarType | str = ScalarType.VOID) -> VariableData:
    """Allocate zero-initialized data shaped like a Variable.

    Args:
        variable: The Variable whose domain and dtype are used.
        element_type: Element type the data must have, ``VOID`` accepts any.

    Returns:
        A `VariableData` over the variable's domain.

    Raises:
        InvalidArgumentError: If the variable's type is inconsistent with `element_type`.
    """
    check_reinterpret(variable.dtype, element_type)
    domain = variable.dimensions
    array = np.zeros(domain.shape, dtype=variable.dtype, order="C")
    return VariableData(
        variable_name=variable.variable_name,
        long_name=variable.long_name,
        metadata=variable.get_reduced_metadata(),
        data=LabeledArray(domain=domain, data=array),
    )
