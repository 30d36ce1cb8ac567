"""Shared, replace-only holder of a Variable's user attributes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdio_variable.schemas.metadata import UserAttributes


class AttributeCell:
    """Versioned cell holding the current `UserAttributes` of an array.

    Every Variable over the same array shares one cell. Values are never mutated, an
    update installs a new value and bumps the generation, so holders can tell whether
    the attributes moved since they last looked by comparing generations.

    Args:
        value: The initial attributes.
    """

    __slots__ = ("_generation", "_value")

    def __init__(self, value: UserAttributes):
        self._value = value
        self._generation = 0

    @property
    def value(self) -> UserAttributes:
        """The current attributes."""
        return self._value

    @property
    def generation(self) -> int:
        """Number of replacements since the cell was created."""
        return self._generation

    def replace(self, value: UserAttributes) -> int:
        """Install new attributes and return the new generation."""
        self._value = value
        self._generation += 1
        return self._generation

    def __repr__(self) -> str:
        """Developer representation of the cell."""
        return f"AttributeCell(generation={self._generation}, value={self._value!r})"
