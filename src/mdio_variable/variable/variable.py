"""The durable Variable handle.

A Variable is an MDIO specified zarr v2 array: a labeled, typed view over durable
(on-disk, in-cloud, etc.) data, plus the metadata kept in its ``.zattrs``
side-document.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING
from typing import Any

import numpy as np
from zarr.core.sync import sync

from mdio_variable.constants import OpenMode
from mdio_variable.core.dtype import ScalarType
from mdio_variable.core.dtype import check_reinterpret
from mdio_variable.core.dtype import element_type_of
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError
from mdio_variable.schemas.metadata import UserAttributes
from mdio_variable.variable.data import LabeledArray
from mdio_variable.variable.data import VariableData
from mdio_variable.variable.slicing import resolve_slices
from mdio_variable.variable.slicing import slice_in_range

if TYPE_CHECKING:
    from mdio_variable.core.domain import DimensionIdentifier
    from mdio_variable.core.domain import IndexDomain
    from mdio_variable.core.storage import ArrayHandle
    from mdio_variable.variable.attributes import AttributeCell
    from mdio_variable.variable.slicing import SliceDescriptor


logger = logging.getLogger(__name__)


class Variable:
    """A labeled, typed handle over a durable array.

    Variables are built by `Variable.open`. Copies and slices of a Variable share its
    attribute cell, so an attribute update through one of them is visible to all.
    Each instance remembers which generation of the attributes it last saw, which
    `was_updated` compares against.

    Args:
        variable_name: An identifier for the variable.
        long_name: Descriptive name, may be empty.
        metadata: The reduced metadata, without mutable user attributes.
        store: Handle to the labeled durable array.
        attributes: Cell holding the user attributes.

    Examples:
        >>> velocity = Variable.open(spec, mode=OpenMode.CREATE)  # doctest: +SKIP
        >>> data = velocity.read()  # doctest: +SKIP
        >>> data.get_data_accessor()[:] = 1.0  # doctest: +SKIP
        >>> velocity.write(data)  # doctest: +SKIP
    """

    def __init__(
        self,
        variable_name: str,
        long_name: str,
        metadata: dict[str, Any],
        store: ArrayHandle,
        attributes: AttributeCell,
    ):
        self._variable_name = variable_name
        self._long_name = long_name
        self._metadata = metadata
        self._store = store
        self.attributes = attributes
        self._observed_generation = attributes.generation

    @classmethod
    async def open_async(cls, json_spec: dict[str, Any], mode: OpenMode = OpenMode.OPEN) -> Variable:
        """Open or create a Variable asynchronously. See `Variable.open`."""
        from mdio_variable.variable.reconciler import open_or_create

        return await open_or_create(json_spec, mode)

    @classmethod
    def open(cls, json_spec: dict[str, Any], mode: OpenMode = OpenMode.OPEN) -> Variable:
        """Open or create a Variable.

        Args:
            json_spec: Schema document. Creating requires ``kvstore``, ``metadata``
                (with ``dtype`` and ``shape``) and ``attributes.dimension_names``. When
                opening, a supplied ``attributes`` section must agree with the stored one.
            mode: Whether to open an existing Variable or create a new one.

        Returns:
            The Variable.
        """
        return sync(cls.open_async(json_spec, mode))

    def __str__(self) -> str:
        """Name and domain, then dtype and rank."""
        return f"{self._variable_name}\t{self.dimensions}\n{self.dtype}\t{self.dimensions.rank}"

    def __repr__(self) -> str:
        """Developer representation of the Variable."""
        return f"Variable(name={self._variable_name!r}, domain={self.dimensions}, dtype={self.dtype})"

    async def read_async(self) -> VariableData:
        """Read the data of the Variable into memory. See `Variable.read`."""
        data = await self._store.read()
        labeled = LabeledArray(domain=self.dimensions, data=data)
        return VariableData(self._variable_name, self._long_name, self.get_metadata(), labeled)

    def read(self) -> VariableData:
        """Read the data of the Variable into memory.

        Returns:
            The in-memory data, labeled with the Variable's domain.
        """
        return sync(self.read_async())

    async def write_async(self, source: VariableData) -> None:
        """Write in-memory data to the Variable. See `Variable.write`."""
        if source.dtype != self.dtype:
            msg = "The source and target dtypes do not match."
            raise InvalidArgumentError(msg, expected=str(self.dtype), actual=str(source.dtype))

        if source.dimensions.shape != self.dimensions.shape:
            msg = "The source and target shapes do not match."
            raise InvalidArgumentError(msg, expected=str(self.dimensions.shape), actual=str(source.dimensions.shape))

        logger.debug("Writing %d samples to variable %s", source.num_samples, self._variable_name)
        await self._store.write(source.get_data_accessor())

    def write(self, source: VariableData) -> None:
        """Write in-memory data to the Variable.

        Args:
            source: Data with the same dtype and shape as the Variable.

        Raises:
            InvalidArgumentError: If the dtypes or shapes don't match.
        """
        sync(self.write_async(source))

    @property
    def dimensions(self) -> IndexDomain:
        """Origin, shape and labels of the Variable."""
        return self._store.domain

    @property
    def num_samples(self) -> int:
        """Total number of elements in the Variable."""
        return self.dimensions.size

    @property
    def dtype(self) -> np.dtype:
        """Data type of the Variable."""
        return self._store.dtype

    @property
    def element_type(self) -> ScalarType:
        """Element type of the Variable, ``VOID`` for structured arrays."""
        return element_type_of(self.dtype)

    def spec(self) -> dict[str, Any]:
        """Engine spec of the Variable: kvstore, array metadata, and domain transform."""
        return self._store.spec()

    def has_label(self, label: DimensionIdentifier) -> bool:
        """Whether the Variable has a dimension with this label or index."""
        return self.dimensions.has(label)

    def slice_in_range(self, desc: SliceDescriptor) -> SliceDescriptor:
        """Clamp a slice descriptor to the domain of the Variable."""
        return slice_in_range(self.dimensions, desc)

    def slice(self, *descriptors: SliceDescriptor) -> Variable:
        """Slice the Variable along the described dimensions.

        The slice is a half-open interval and out-of-range bounds are clamped to the
        domain. Dimensions that are not described, or that the Variable doesn't have,
        remain fully intact.

        Args:
            descriptors: The descriptors used to specify the slice.

        Returns:
            A Variable over the narrower view, sharing this one's attributes.

        Raises:
            InvalidArgumentError: If a step isn't 1 or a start is greater than its stop.

        Examples:
            >>> desc1 = SliceDescriptor("inline", 0, 100)  # doctest: +SKIP
            >>> desc2 = SliceDescriptor("crossline", 0, 200)  # doctest: +SKIP
            >>> sliced_velocity = velocity.slice(desc1, desc2)  # doctest: +SKIP
        """
        slices = resolve_slices(self.dimensions, descriptors)
        if not slices:
            return self

        dims, starts, stops = zip(*slices, strict=True)
        store = self._store.restrict(dims, starts, stops)
        return Variable(self._variable_name, self._long_name, self._metadata, store, self.attributes)

    def _spec_metadata_array(self, key: str) -> list[int]:
        spec = self.spec()
        if "metadata" not in spec:
            msg = "Metadata did not contain key 'metadata'."
            raise NotFoundError(msg)
        if key not in spec["metadata"]:
            msg = f"Metadata did not contain key '{key}'."
            raise NotFoundError(msg)
        if not isinstance(spec["metadata"][key], list):
            msg = f"Metadata['{key}'] is not an array."
            raise InvalidArgumentError(msg)
        return [int(value) for value in spec["metadata"][key]]

    def get_chunk_shape(self) -> list[int]:
        """Chunk shape of the stored array.

        Raises:
            NotFoundError: If the engine spec doesn't record chunks.
            InvalidArgumentError: If the chunks aren't an array.
        """
        return self._spec_metadata_array("chunks")

    def get_store_shape(self) -> list[int]:
        """Full shape of the stored array, regardless of slicing.

        Raises:
            NotFoundError: If the engine spec doesn't record a shape.
            InvalidArgumentError: If the shape isn't an array.
        """
        return self._spec_metadata_array("shape")

    async def publish_metadata_async(self) -> None:
        """Persist the current metadata. See `Variable.publish_metadata`."""
        from mdio_variable.variable.reconciler import publish_metadata

        await publish_metadata(self)

    def publish_metadata(self) -> None:
        """Persist the current metadata to the Variable's ``.zattrs`` side-document.

        This should be called by the owner of the Variable collection, publishing from
        a copy leaves the collection's view of the attributes stale.
        """
        sync(self.publish_metadata_async())

    def update_attributes(self, new_attrs: dict[str, Any]) -> None:
        """Replace the user attributes (``attributes`` and/or ``statsV1``).

        The change is visible to every copy of the Variable but isn't persisted until
        the metadata is published.

        Args:
            new_attrs: The JSON form of the new user attributes.

        Raises:
            InvalidArgumentError: If `new_attrs` doesn't validate, the previous
                attributes are kept.

        Examples:
            >>> to_update = var.get_attributes()  # doctest: +SKIP
            >>> to_update.setdefault("attributes", {})["new_attr"] = "new_value"  # doctest: +SKIP
            >>> var.update_attributes(to_update)  # doctest: +SKIP
        """
        value = UserAttributes.from_json(new_attrs)
        generation = self.attributes.replace(value)
        logger.debug("Attributes of variable %s moved to generation %d", self._variable_name, generation)

    def get_attributes(self) -> dict[str, Any]:
        """The user attributes as JSON."""
        return self.attributes.value.to_json()

    def get_metadata(self) -> dict[str, Any]:
        """The entire metadata, user attributes included."""
        metadata = self.get_reduced_metadata()
        attrs = self.get_attributes()
        if attrs:
            nested = metadata.get("metadata")
            metadata["metadata"] = {**(nested if isinstance(nested, dict) else {}), **attrs}
        return metadata

    def get_reduced_metadata(self) -> dict[str, Any]:
        """The metadata without the mutable user attributes.

        Note:
            The ``long_name`` is assigned to a copy that is then discarded, so it only
            appears here when it was part of the stored metadata.
        """
        ret = copy.deepcopy(self._metadata)
        ret["long_name"] = self._long_name
        return copy.deepcopy(self._metadata)

    def was_updated(self) -> bool:
        """Whether the attributes were replaced since this instance last saw them."""
        return self._observed_generation != self.attributes.generation

    def reinterpret(self, element_type: ScalarType | str) -> Variable:
        """View the Variable as `element_type`.

        ``VOID`` always succeeds, any other type must match the stored one.

        Raises:
            InvalidArgumentError: If the types are inconsistent.
        """
        check_reinterpret(self.dtype, element_type)
        return self

    @property
    def variable_name(self) -> str:
        """An identifier for the variable."""
        return self._variable_name

    @property
    def long_name(self) -> str:
        """Descriptive name of the variable, may be empty."""
        return self._long_name

    @property
    def store(self) -> ArrayHandle:
        """Handle to the durable array."""
        return self._store

    def _on_metadata_committed(self) -> None:
        """Mark the current attributes as seen.

        Only called after the metadata was committed to durable media, and only on the
        instance that published it. Other copies keep reporting `was_updated`.
        """
        self._observed_generation = self.attributes.generation
