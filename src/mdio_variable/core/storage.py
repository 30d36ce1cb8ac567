"""Adapter over the zarr storage engine.

Variables talk to the engine only through this module: opening or creating a typed
array view, reading and writing its data, and a key-value pair scoped to the same
backend for the attributes side-document. Arrays use the zarr v2 on-disk format.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import replace
from typing import TYPE_CHECKING
from typing import Any

import numpy as np
import zarr.api.asynchronous as zarr_async
from pydantic import ValidationError
from zarr.core.buffer.core import default_buffer_prototype
from zarr.errors import ContainsArrayError
from zarr.errors import ContainsGroupError
from zarr.storage import FsspecStore
from zarr.storage import LocalStore
from zarr.storage import MemoryStore

from mdio_variable.constants import OpenMode
from mdio_variable.constants import ZarrFormat
from mdio_variable.core.config import cloud_drivers
from mdio_variable.core.domain import IndexDomain
from mdio_variable.core.dtype import parse_zarr_dtype
from mdio_variable.core.dtype import to_zarr_dtype
from mdio_variable.exceptions import AlreadyExistsError
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError
from mdio_variable.schemas.metadata import KvStoreSpec

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray
    from zarr import AsyncArray
    from zarr.abc.store import Store
    from zarr.core.buffer import Buffer


logger = logging.getLogger(__name__)

# Backing dict of the "memory" driver, shared by every store in the process.
_MEMORY_BACKEND: dict[str, Buffer] = {}

_FSSPEC_PROTOCOLS = {"gcs": "gs", "s3": "s3"}


def _make_store(spec: KvStoreSpec) -> tuple[Store, str]:
    """Build a zarr store and the array's root path within it."""
    if spec.driver == "file":
        return LocalStore(spec.path), ""

    if spec.driver == "memory":
        return MemoryStore(_MEMORY_BACKEND), spec.path.strip("/")

    protocol = _FSSPEC_PROTOCOLS[spec.driver]
    path = spec.path.strip("/")
    url = f"{protocol}://{spec.bucket}/{path}" if spec.bucket else f"{protocol}://{path}"
    return FsspecStore.from_url(url, storage_options=spec.storage_options or {}), ""


@dataclass(frozen=True)
class KeyValueStore:
    """Byte-level read/write of keys next to an array.

    Keys are resolved against the array's root. A leading separator anchors the key at
    that root, so ``"/.zattrs"`` and ``".zattrs"`` address the same object.

    Attributes:
        spec: The key-value part of the engine spec.
        store: The zarr store holding the array.
        root: Path of the array inside `store`.
    """

    spec: KvStoreSpec
    store: Store
    root: str = ""

    @classmethod
    def open(cls, spec: KvStoreSpec | dict[str, Any]) -> KeyValueStore:
        """Open the store described by a ``kvstore`` spec."""
        if not isinstance(spec, KvStoreSpec):
            try:
                spec = KvStoreSpec.model_validate(spec)
            except ValidationError as e:
                msg = f"Invalid kvstore spec: {e}"
                raise InvalidArgumentError(msg) from e

        store, root = _make_store(spec)
        return cls(spec=spec, store=store, root=root)

    @property
    def is_cloud(self) -> bool:
        """Whether the backend addresses objects rather than paths."""
        return self.spec.driver in cloud_drivers()

    def resolve(self, key: str) -> str:
        """Absolute key within the zarr store."""
        return "/".join(part for part in (self.root, key.lstrip("/")) if part)

    async def read(self, key: str) -> bytes | None:
        """Read a value, ``None`` when the key doesn't exist."""
        full_key = self.resolve(key)
        logger.debug("Reading key %s from %s store", full_key, self.spec.driver)
        buffer = await self.store.get(full_key, prototype=default_buffer_prototype())
        return None if buffer is None else buffer.to_bytes()

    async def write(self, key: str, value: bytes) -> None:
        """Write a value, replacing any previous one."""
        full_key = self.resolve(key)
        logger.debug("Writing %d bytes to key %s of %s store", len(value), full_key, self.spec.driver)
        await self.store.set(full_key, default_buffer_prototype().buffer.from_bytes(value))


@dataclass(frozen=True)
class ArrayHandle:
    """A typed, labeled view over a durable zarr array.

    The view covers `domain`, expressed in the array's absolute index space. Labeling
    or restricting the view builds a new handle and never touches storage.

    Attributes:
        array: The zarr array.
        kvstore: Key-value access scoped to the array.
        domain: The addressable region of the view.
        field: Selected field of a structured array, if any.
    """

    array: AsyncArray
    kvstore: KeyValueStore
    domain: IndexDomain
    field: str | None = None

    @property
    def dtype(self) -> np.dtype:
        """Element dtype of the view."""
        dtype = np.dtype(self.array.dtype)
        return dtype[self.field] if self.field is not None else dtype

    @property
    def chunks(self) -> tuple[int, ...]:
        """Chunk shape of the underlying array."""
        return tuple(self.array.chunks)

    def label(self, dim: int, label: str) -> ArrayHandle:
        """Relabel one dimension."""
        return replace(self, domain=self.domain.with_label(dim, label))

    def restrict(self, dims: Sequence[int], starts: Sequence[int], stops: Sequence[int]) -> ArrayHandle:
        """Narrow the view to half-open intervals along `dims`."""
        return replace(self, domain=self.domain.restrict(dims, starts, stops))

    async def read(self) -> NDArray:
        """Materialize the view into memory."""
        data = np.asarray(await self.array.getitem(self.domain.to_slices()))
        if self.field is not None:
            data = np.ascontiguousarray(data[self.field])
        return data

    async def write(self, values: NDArray) -> None:
        """Write `values` over the whole view."""
        selection = self.domain.to_slices()
        if self.field is not None:
            region = np.array(await self.array.getitem(selection))
            region[self.field] = values
            values = region
        await self.array.setitem(selection, values)

    def spec(self) -> dict[str, Any]:
        """JSON spec of the view, including engine defaults."""
        spec = {
            "driver": "zarr",
            "kvstore": self.kvstore.spec.model_dump(mode="json", exclude_none=True),
            "metadata": {
                "dtype": to_zarr_dtype(np.dtype(self.array.dtype)),
                "shape": list(self.array.shape),
                "chunks": list(self.chunks),
                "zarr_format": ZarrFormat.V2.value,
            },
            "transform": self.domain.to_json(),
        }
        if self.field is not None:
            spec["field"] = self.field
        return spec


def _check_field(dtype: np.dtype, field: str | None) -> None:
    if field is None:
        return
    if dtype.names is None or field not in dtype.names:
        msg = f"Field {field!r} is not part of dtype {dtype}"
        raise InvalidArgumentError(msg)


def _check_existing_metadata(array: AsyncArray, metadata: dict[str, Any]) -> None:
    """Verify that an opened array matches metadata given by the caller."""
    if "shape" in metadata and list(metadata["shape"]) != list(array.shape):
        msg = "Array shape doesn't match the requested metadata"
        raise InvalidArgumentError(msg, expected=str(list(metadata["shape"])), actual=str(list(array.shape)))

    if "dtype" in metadata:
        expected = parse_zarr_dtype(metadata["dtype"])
        if expected != np.dtype(array.dtype):
            msg = "Array dtype doesn't match the requested metadata"
            raise InvalidArgumentError(msg, expected=str(expected), actual=str(array.dtype))


async def open_array(spec: dict[str, Any], mode: OpenMode = OpenMode.OPEN) -> ArrayHandle:
    """Open or create the array described by an engine spec.

    Args:
        spec: Engine spec with ``kvstore``, optional ``metadata`` and optional ``field``.
        mode: Whether to open an existing array or create a new one.

    Returns:
        An unlabeled handle over the full array.

    Raises:
        InvalidArgumentError: If the engine spec is incomplete or doesn't match the stored array.
        NotFoundError: If opening an array that doesn't exist.
        AlreadyExistsError: If creating over an existing array with `OpenMode.CREATE`.
    """
    if "kvstore" not in spec:
        msg = "Variable spec requires kvstore"
        raise InvalidArgumentError(msg)

    kvstore = KeyValueStore.open(spec["kvstore"])
    metadata = spec.get("metadata")
    mode = OpenMode(mode)

    if mode is OpenMode.OPEN:
        logger.debug("Opening array at %s (%s)", kvstore.spec.path, kvstore.spec.driver)
        try:
            array = await zarr_async.open_array(store=kvstore.store, path=kvstore.root, zarr_format=ZarrFormat.V2)
        except FileNotFoundError as e:
            msg = f"No array found at {kvstore.spec.path!r}"
            raise NotFoundError(msg) from e
        if metadata:
            _check_existing_metadata(array, metadata)
    else:
        if not metadata or "shape" not in metadata or "dtype" not in metadata:
            msg = "Variable metadata requires dtype and shape to create an array"
            raise InvalidArgumentError(msg)

        dtype = parse_zarr_dtype(metadata["dtype"])
        chunks = tuple(metadata["chunks"]) if metadata.get("chunks") else "auto"
        # Engine picks the dtype default when no fill value is given.
        fill_kwargs = {"fill_value": metadata["fill_value"]} if "fill_value" in metadata else {}
        logger.debug("Creating array at %s (%s) with mode %s", kvstore.spec.path, kvstore.spec.driver, mode)
        try:
            array = await zarr_async.create_array(
                store=kvstore.store,
                name=kvstore.root or None,
                shape=tuple(metadata["shape"]),
                chunks=chunks,
                dtype=dtype,
                **fill_kwargs,
                zarr_format=ZarrFormat.V2,
                overwrite=mode is OpenMode.CREATE_CLEAN,
            )
        except (ContainsArrayError, ContainsGroupError) as e:
            msg = f"An array already exists at {kvstore.spec.path!r}"
            raise AlreadyExistsError(msg) from e

    field = spec.get("field")
    _check_field(np.dtype(array.dtype), field)

    return ArrayHandle(array=array, kvstore=kvstore, domain=IndexDomain(shape=array.shape), field=field)
