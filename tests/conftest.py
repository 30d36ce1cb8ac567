"""Test configuration before everything runs."""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

import pytest

if TYPE_CHECKING:
    from pathlib import Path


def make_velocity_spec(path: str, driver: str = "file") -> dict[str, Any]:
    """Schema document of a 2D velocity Variable."""
    return {
        "driver": "zarr",
        "kvstore": {"driver": driver, "path": path},
        "metadata": {"dtype": "<f4", "shape": [100, 200], "chunks": [50, 100], "fill_value": 0.0},
        "attributes": {
            "dimension_names": ["inline", "crossline"],
            "long_name": "Interval velocity",
            "metadata": {
                "unitsV1": {"speed": "m/s"},
                "chunkGrid": {"name": "regular", "configuration": {"chunkShape": [50, 100]}},
                "attributes": {"survey": "alpha"},
            },
        },
    }


@pytest.fixture
def velocity_path(tmp_path: Path) -> str:
    """Location of the velocity array on local disk."""
    return str(tmp_path / "velocity")


@pytest.fixture
def velocity_spec(velocity_path: str) -> dict[str, Any]:
    """Schema document of a velocity Variable on local disk."""
    return make_velocity_spec(velocity_path)
