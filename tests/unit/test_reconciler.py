"""Tests for the schema document transforms of the metadata reconciler."""

import os
from typing import Any
from unittest.mock import patch

import pytest

from mdio_variable.core.storage import KeyValueStore
from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError
from mdio_variable.schemas.metadata import KvStoreSpec
from mdio_variable.variable.reconciler import compose_side_document
from mdio_variable.variable.reconciler import side_document_key
from mdio_variable.variable.reconciler import validate_and_process_json
from mdio_variable.variable.reconciler import variable_from_json


class TestValidateAndProcess:
    """Splitting schema documents into engine spec and attributes."""

    def test_split(self, velocity_spec: dict[str, Any]) -> None:
        """Attributes are split off and named after the array's path."""
        json_store, json_var = validate_and_process_json(velocity_spec)
        assert "attributes" not in json_store
        assert json_store["metadata"] == velocity_spec["metadata"]
        assert json_var["variable_name"] == "velocity"
        assert "variable_name" not in velocity_spec["attributes"]

    def test_name_is_stem(self) -> None:
        """Suffixes are not part of the name."""
        spec = {"kvstore": {"driver": "file", "path": "/data/velocity.zarr"}, "attributes": {"dimension_names": []}}
        _, json_var = validate_and_process_json(spec)
        assert json_var["variable_name"] == "velocity"

    def test_missing_attributes(self) -> None:
        """Schema documents need an attributes section."""
        with pytest.raises(InvalidArgumentError, match="does not contain 'attributes'"):
            validate_and_process_json({"kvstore": {"driver": "file", "path": "x"}})

    def test_missing_dimension_names(self) -> None:
        """Attributes need dimension names."""
        with pytest.raises(InvalidArgumentError, match="does not contain 'dimension_names'"):
            validate_and_process_json({"attributes": {"long_name": "x"}})


def test_compose_side_document(velocity_spec: dict[str, Any]) -> None:
    """Persisted attributes are flat, renamed, and free of housekeeping keys."""
    _, json_var = validate_and_process_json(velocity_spec)
    json_var["coordinates"] = ""
    assert compose_side_document(json_var) == {
        "_ARRAY_DIMENSIONS": ["inline", "crossline"],
        "long_name": "Interval velocity",
        "unitsV1": {"speed": "m/s"},
        "attributes": {"survey": "alpha"},
    }


def test_compose_drops_blank_long_name() -> None:
    """Blank long names are not persisted."""
    assert compose_side_document({"dimension_names": ["x"], "long_name": ""}) == {"_ARRAY_DIMENSIONS": ["x"]}


def test_variable_from_json_requires_name() -> None:
    """A Variable can't be built without its name."""
    with pytest.raises(NotFoundError, match="Could not find Variable's name."):
        variable_from_json({"attributes": {"dimension_names": ["x"]}}, store=None)


def test_variable_from_json_rejects_bad_attributes() -> None:
    """Invalid user attributes fail construction."""
    with pytest.raises(InvalidArgumentError):
        variable_from_json({"variable_name": "v", "attributes": "not an object"}, store=None)


@pytest.mark.parametrize(
    ("driver", "expected"),
    [("gcs", ".zattrs"), ("s3", ".zattrs"), ("file", "/.zattrs"), ("memory", "/.zattrs")],
)
def test_side_document_key(driver: str, expected: str) -> None:
    """Object stores address the side-document without a leading separator."""
    kvstore = KeyValueStore(spec=KvStoreSpec(driver=driver, bucket="bucket", path="velocity"), store=None)
    assert side_document_key(kvstore) == expected


def test_side_document_key_configured_drivers() -> None:
    """The set of object store drivers comes from the environment."""
    kvstore = KeyValueStore(spec=KvStoreSpec(driver="memory", path="velocity"), store=None)
    with patch.dict(os.environ, {"MDIO__VARIABLE__CLOUD_DRIVERS": '["memory"]'}):
        assert kvstore.is_cloud
        assert side_document_key(kvstore) == ".zattrs"
    assert not kvstore.is_cloud
