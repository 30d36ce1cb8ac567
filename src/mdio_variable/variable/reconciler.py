"""Keep a Variable's metadata consistent between memory and durable storage.

A Variable's schema document carries an engine spec (``kvstore``, ``metadata``,
``field``) and an ``attributes`` section with the Variable's own metadata. The engine
only understands the former, the latter is persisted in a side-document (``.zattrs``)
next to the array. Creating writes both. Opening reads the side-document back and,
when the caller supplies expected attributes, checks that they agree with what is
stored.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from typing import Any

from mdio_variable.constants import ARRAY_DIMENSIONS_KEY
from mdio_variable.constants import USER_ATTRIBUTE_KEYS
from mdio_variable.constants import ZATTRS_OBJECT_KEY
from mdio_variable.constants import ZATTRS_PATH_KEY
from mdio_variable.constants import OpenMode
from mdio_variable.core.config import ignore_checks
from mdio_variable.core.dtype import parse_zarr_dtype
from mdio_variable.core.json_tree import check_conformance
from mdio_variable.core.json_tree import is_blank
from mdio_variable.core.json_tree import merge_up
from mdio_variable.core.storage import open_array
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError
from mdio_variable.schemas.metadata import UserAttributes
from mdio_variable.variable.attributes import AttributeCell
from mdio_variable.variable.variable import Variable

if TYPE_CHECKING:
    from mdio_variable.core.storage import ArrayHandle
    from mdio_variable.core.storage import KeyValueStore


logger = logging.getLogger(__name__)


def side_document_key(kvstore: KeyValueStore) -> str:
    """Key of the attributes side-document for a backend."""
    return ZATTRS_OBJECT_KEY if kvstore.is_cloud else ZATTRS_PATH_KEY


def validate_and_process_json(json_spec: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a schema document into the engine spec and the Variable's attributes.

    Args:
        json_spec: Schema document with an ``attributes`` section holding at least
            ``dimension_names``.

    Returns:
        The engine spec without ``attributes``, and the ``attributes`` section with its
        ``variable_name`` set to the stem of the array's path.

    Raises:
        InvalidArgumentError: If ``attributes`` or ``attributes.dimension_names`` is missing.
    """
    if "attributes" not in json_spec:
        msg = "The json_spec does not contain 'attributes'."
        raise InvalidArgumentError(msg)

    if "dimension_names" not in json_spec["attributes"]:
        msg = "The 'attributes' does not contain 'dimension_names'."
        raise InvalidArgumentError(msg)

    json_store = copy.deepcopy(json_spec)
    json_var = json_store.pop("attributes")

    path = json_spec.get("kvstore", {}).get("path", "")
    json_var["variable_name"] = PurePosixPath(path).stem
    return json_store, json_var


def compose_side_document(json_var: dict[str, Any]) -> dict[str, Any]:
    """Build the persisted side-document from a Variable's attributes.

    ``dimension_names`` becomes ``_ARRAY_DIMENSIONS``, ``variable_name`` is dropped
    (the path names the variable), the ``metadata`` sub-document is hoisted to the top
    level without its ``chunkGrid`` (owned by the array), and empty ``long_name`` or
    ``coordinates`` are dropped.
    """
    output = merge_up(json_var, key="metadata", drop=("chunkGrid",))
    output.pop("variable_name", None)
    if "dimension_names" in output:
        output[ARRAY_DIMENSIONS_KEY] = output.pop("dimension_names")

    for key in ("long_name", "coordinates"):
        if key in output and is_blank(output[key]):
            del output[key]
    return output


def variable_from_json(spec: dict[str, Any], store: ArrayHandle) -> Variable:
    """Build a Variable from its metadata document and a labeled store.

    Args:
        spec: The Variable's attributes, optionally wrapped in an ``attributes`` section.
        store: Handle to the labeled array.

    Returns:
        The Variable, with its mutable user attributes held in a fresh cell.

    Raises:
        NotFoundError: If the document has no ``variable_name``.
        InvalidArgumentError: If the user attributes don't validate.
    """
    attributes = spec
    if isinstance(attributes.get("attributes"), dict) and "variable_name" in attributes["attributes"]:
        attributes = attributes["attributes"]

    if "variable_name" not in attributes:
        msg = "Could not find Variable's name."
        raise NotFoundError(msg)
    name = attributes["variable_name"]

    scrubbed = copy.deepcopy(attributes)
    del scrubbed["variable_name"]
    user_attributes = UserAttributes.from_variable_json(spec)

    long_name = ""
    if "long_name" in scrubbed:
        if isinstance(scrubbed["long_name"], str) and scrubbed["long_name"]:
            long_name = scrubbed["long_name"]
        else:
            del scrubbed["long_name"]

    # Mutable, these live in the attribute cell.
    for key in USER_ATTRIBUTE_KEYS:
        scrubbed.pop(key, None)
        if isinstance(scrubbed.get("metadata"), dict):
            scrubbed["metadata"].pop(key, None)

    return Variable(name, long_name, scrubbed, store, AttributeCell(user_attributes))


def _label(store: ArrayHandle, dimension_names: list[str]) -> ArrayHandle:
    for dim, label in enumerate(dimension_names):
        store = store.label(dim, label)
    return store


async def _publish(json_var: dict[str, Any], store: ArrayHandle) -> None:
    document = compose_side_document(json_var)
    key = side_document_key(store.kvstore)
    await store.kvstore.write(key, json.dumps(document).encode())


async def create_variable(json_store: dict[str, Any], json_var: dict[str, Any], mode: OpenMode) -> Variable:
    """Create a new array and its attributes side-document.

    Args:
        json_store: Engine spec, requires ``metadata.dtype``.
        json_var: The Variable's attributes.
        mode: `OpenMode.CREATE` or `OpenMode.CREATE_CLEAN`.

    Returns:
        The created Variable.

    Raises:
        InvalidArgumentError: If the attributes are empty or invalid, or the engine spec
            lacks a dtype.
    """
    if not json_var:
        msg = "Expected attributes to be non-empty."
        raise InvalidArgumentError(msg)

    if "metadata" not in json_store:
        msg = "Variable spec requires metadata"
        raise InvalidArgumentError(msg)

    if "dtype" not in json_store["metadata"]:
        msg = "Variable metadata requires dtype"
        raise InvalidArgumentError(msg)

    dtype = parse_zarr_dtype(json_store["metadata"]["dtype"])
    # Fail before anything is written.
    UserAttributes.from_variable_json(json_var)

    # A structured array is created through one of its fields, then reopened whole.
    reopen_as_void = dtype.names is not None and "field" not in json_store
    json_store_with_field = copy.deepcopy(json_store)
    if reopen_as_void:
        json_store_with_field["field"] = dtype.names[0]

    logger.info("Creating variable %s", json_var.get("variable_name"))
    store = await open_array(json_store_with_field, mode)
    if reopen_as_void:
        json_store_without_metadata = copy.deepcopy(json_store)
        json_store_without_metadata.pop("metadata")
        store = await open_array(json_store_without_metadata, OpenMode.OPEN)

    async def build() -> Variable:
        dimension_names = json_var.get("dimension_names")
        labeled = _label(store, dimension_names) if dimension_names else store
        return variable_from_json(json_var, labeled)

    # Both branches run to completion before a failure of either is raised.
    variable, published = await asyncio.gather(build(), _publish(json_var, store), return_exceptions=True)
    for result in (variable, published):
        if isinstance(result, BaseException):
            raise result
    return variable


async def open_variable(json_spec: dict[str, Any], mode: OpenMode = OpenMode.OPEN) -> Variable:
    """Open an existing Variable and reconcile it with expected attributes.

    Args:
        json_spec: Engine spec. An ``attributes`` section, if present, is checked
            against the stored attributes.
        mode: Open mode, `OpenMode.OPEN`.

    Returns:
        The opened Variable.

    Raises:
        NotFoundError: If the array, its side-document, its dimension names, or an
            expected key is missing.
        InvalidArgumentError: If the side-document isn't a JSON object, or an expected
            value conflicts with the stored one.
    """
    store_spec = copy.deepcopy(json_spec)
    variable_name = store_spec.get("kvstore", {}).get("path", "").rstrip("/").split("/")[-1]

    supplied = store_spec.pop("attributes", None)
    if "field" not in store_spec:
        store_spec.pop("metadata", None)

    logger.info("Opening variable %s", variable_name)
    store = await open_array(store_spec, mode)
    raw = await store.kvstore.read(side_document_key(store.kvstore))
    if raw is None:
        msg = f"Attributes document not found for variable {variable_name!r}"
        raise NotFoundError(msg)

    try:
        persisted = json.loads(raw)
    except json.JSONDecodeError as e:
        msg = f"Attributes document of variable {variable_name!r} is not valid JSON"
        raise InvalidArgumentError(msg) from e

    if not isinstance(persisted, dict):
        msg = f"Attributes document of variable {variable_name!r} is not a JSON object"
        raise InvalidArgumentError(msg)

    metadata = dict(persisted)
    metadata["variable_name"] = variable_name
    if ARRAY_DIMENSIONS_KEY in metadata:
        metadata["dimension_names"] = metadata.pop(ARRAY_DIMENSIONS_KEY)

    if "dimension_names" not in metadata:
        msg = "Field not found in JSON: dimension_names"
        raise NotFoundError(msg)
    store = _label(store, metadata["dimension_names"])

    if supplied is not None:
        if ignore_checks():
            logger.warning("Skipping attribute conformance check for variable %s", variable_name)
        else:
            searchable = merge_up(metadata)
            searchable.pop("variable_name")
            check_conformance(searchable, merge_up(supplied, drop=("chunkGrid",)))

    return variable_from_json({"attributes": metadata}, store)


async def open_or_create(json_spec: dict[str, Any], mode: OpenMode = OpenMode.OPEN) -> Variable:
    """Open an existing Variable or create a new one, depending on `mode`."""
    mode = OpenMode(mode)
    if mode in (OpenMode.CREATE, OpenMode.CREATE_CLEAN):
        json_store, json_var = validate_and_process_json(json_spec)
        return await create_variable(json_store, json_var, mode)
    return await open_variable(json_spec, mode)


async def publish_metadata(variable: Variable) -> None:
    """Write a Variable's current metadata to its side-document.

    On success the Variable is told that its attributes are committed.
    """
    document = variable.get_metadata()
    if variable.long_name:
        document["long_name"] = variable.long_name

    logger.info("Publishing metadata of variable %s", variable.variable_name)
    await _publish(document, variable.store)
    variable._on_metadata_committed()  # noqa: SLF001
