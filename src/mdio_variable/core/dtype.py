"""Element types of Variables.

We take booleans, unsigned and signed integers, floats, and complex numbers from numpy
data types and allow those. Structured (record) and otherwise untyped arrays map to
``ScalarType.VOID``, which every Variable can be reinterpreted as.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

import numpy as np

from mdio_variable.exceptions import InvalidArgumentError


class ScalarType(StrEnum):
    """Scalar array data type."""

    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    VOID = "void"


def parse_zarr_dtype(value: Any) -> np.dtype:  # noqa: ANN401
    """Parse a zarr v2 ``dtype`` entry into a numpy dtype.

    Args:
        value: Either a type string such as ``"<f4"`` or a list of ``[name, type]``
            (optionally ``[name, type, shape]``) field entries.

    Returns:
        The numpy dtype.

    Raises:
        InvalidArgumentError: If the entry is not a valid zarr v2 dtype.
    """
    try:
        if isinstance(value, str):
            return np.dtype(value)
        if isinstance(value, list) and value:
            return np.dtype([tuple(field) for field in value])
    except (TypeError, ValueError) as e:
        msg = f"Invalid zarr dtype: {value!r}"
        raise InvalidArgumentError(msg) from e

    msg = f"Invalid zarr dtype: {value!r}"
    raise InvalidArgumentError(msg)


def to_zarr_dtype(dtype: np.dtype) -> str | list[list[Any]]:
    """Inverse of `parse_zarr_dtype`, the JSON form of a numpy dtype."""
    if dtype.names is None:
        return dtype.str
    return [list(field) for field in dtype.descr]


def element_type_of(dtype: np.dtype) -> ScalarType:
    """Map a numpy dtype onto the closed element type enumeration."""
    if dtype.names is not None:
        return ScalarType.VOID
    try:
        return ScalarType(dtype.name)
    except ValueError:
        return ScalarType.VOID


def check_reinterpret(dtype: np.dtype, element_type: ScalarType | str) -> ScalarType:
    """Validate that data of `dtype` can be viewed as `element_type`.

    Args:
        dtype: The stored numpy dtype.
        element_type: The requested element type.

    Returns:
        The requested element type as a `ScalarType`.

    Raises:
        InvalidArgumentError: If the types are inconsistent.
    """
    try:
        requested = ScalarType(element_type)
    except ValueError as e:
        msg = f"Unknown element type {element_type!r}"
        raise InvalidArgumentError(msg) from e

    if requested is ScalarType.VOID:
        return requested

    actual = element_type_of(dtype)
    if actual is not requested:
        msg = "Cannot reinterpret element type"
        raise InvalidArgumentError(msg, expected=str(requested), actual=str(actual))
    return requested
