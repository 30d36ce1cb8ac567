"""Tests for the shared attribute cell."""

from mdio_variable.schemas.metadata import UserAttributes
from mdio_variable.variable.attributes import AttributeCell


def test_replace_bumps_generation() -> None:
    """Each replacement installs a new value under a new generation."""
    first = UserAttributes.from_json({"attributes": {"a": 1}})
    second = UserAttributes.from_json({"attributes": {"a": 2}})
    cell = AttributeCell(first)
    assert cell.generation == 0
    assert cell.value is first

    assert cell.replace(second) == 1
    assert cell.value is second
    assert first.attributes == {"a": 1}


def test_equal_value_is_still_an_update() -> None:
    """Generations count replacements, not distinct values."""
    value = UserAttributes.from_json({})
    cell = AttributeCell(value)
    cell.replace(value)
    assert cell.generation == 1
    assert "generation=1" in repr(cell)
