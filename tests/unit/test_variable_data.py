"""Tests for in-memory Variable data."""

import numpy as np
import pytest

from mdio_variable.core.domain import IndexDomain
from mdio_variable.core.dtype import ScalarType
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError
from mdio_variable.variable.data import LabeledArray
from mdio_variable.variable.data import VariableData
from mdio_variable.variable.slicing import SliceDescriptor


@pytest.fixture
def velocity_data() -> VariableData:
    """A 10 x 20 snapshot with distinct values."""
    domain = IndexDomain(shape=(10, 20), labels=("inline", "crossline"))
    values = np.arange(200, dtype="float32").reshape(10, 20)
    metadata = {"dimension_names": ["inline", "crossline"], "unitsV1": {"speed": "m/s"}}
    return VariableData("velocity", "Interval velocity", metadata, LabeledArray(domain, values))


class TestLabeledArray:
    """Labeled numpy arrays."""

    def test_shape_mismatch(self) -> None:
        """Data must have the shape of its domain."""
        with pytest.raises(InvalidArgumentError, match="Expected: \\(2, 3\\)"):
            LabeledArray(IndexDomain(shape=(2, 3)), np.zeros((3, 2)))

    def test_slice_copies(self, velocity_data: VariableData) -> None:
        """Slices own their buffer."""
        sliced = velocity_data.data.slice(SliceDescriptor("inline", 2, 4))
        sliced.get_data()[:] = -1
        assert velocity_data.get_data_accessor().min() == 0
        assert sliced.get_data().flags.c_contiguous


class TestVariableData:
    """Snapshots of Variables."""

    def test_properties(self, velocity_data: VariableData) -> None:
        """Shape, size, and type come from the labeled array."""
        assert velocity_data.num_samples == 200
        assert velocity_data.dtype == np.float32
        assert velocity_data.element_type is ScalarType.FLOAT32
        assert velocity_data.dimensions.labels == ("inline", "crossline")
        assert str(velocity_data) == 'velocity\t{ "inline": [0, 10), "crossline": [0, 20) }\nfloat32\t2'

    def test_slice(self, velocity_data: VariableData) -> None:
        """Slicing keeps absolute origins and copies the region."""
        sliced = velocity_data.slice(SliceDescriptor("inline", 2, 4), SliceDescriptor("crossline", 5, 1000))
        assert sliced.dimensions.origin == (2, 5)
        assert sliced.dimensions.shape == (2, 15)
        np.testing.assert_array_equal(sliced.get_data_accessor(), velocity_data.get_data_accessor()[2:4, 5:])

        resliced = sliced.slice(SliceDescriptor("inline", 3, 4))
        np.testing.assert_array_equal(resliced.get_data_accessor(), velocity_data.get_data_accessor()[3:4, 5:])

    def test_slice_unknown_label(self, velocity_data: VariableData) -> None:
        """Snapshots only slice along labels they have."""
        with pytest.raises(NotFoundError):
            velocity_data.slice(SliceDescriptor("time", 0, 10))

    def test_slice_bad_step(self, velocity_data: VariableData) -> None:
        """Non-unit steps fail and leave the snapshot unchanged."""
        with pytest.raises(InvalidArgumentError, match="Only step 1"):
            velocity_data.slice(SliceDescriptor("inline", 0, 5, 2))
        assert velocity_data.dimensions.shape == (10, 20)

    def test_reinterpret(self, velocity_data: VariableData) -> None:
        """Snapshots reinterpret to void or their own element type only."""
        assert velocity_data.reinterpret(ScalarType.VOID) is velocity_data
        assert velocity_data.reinterpret("float32") is velocity_data
        with pytest.raises(InvalidArgumentError):
            velocity_data.reinterpret(ScalarType.INT32)

    def test_to_xarray(self, velocity_data: VariableData) -> None:
        """Snapshots convert to labeled xarray objects."""
        sliced = velocity_data.slice(SliceDescriptor("inline", 2, 4))
        data_array = sliced.to_xarray()
        assert data_array.name == "velocity"
        assert data_array.dims == ("inline", "crossline")
        assert data_array["inline"].values.tolist() == [2, 3]
        assert data_array.attrs["long_name"] == "Interval velocity"
        assert data_array.attrs["unitsV1"] == {"speed": "m/s"}
