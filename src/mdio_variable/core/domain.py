"""Labeled index domains.

An `IndexDomain` is the ordered set of (label, origin, extent) triples describing the
addressable region of an array. Domains are immutable: labeling or restricting one
returns a new domain. Origins are preserved through restriction, so a domain sliced to
``[10, 50)`` keeps addressing its elements as ``10..49``.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import TypeAlias

from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

DimensionIdentifier: TypeAlias = str | int


@dataclass(frozen=True, slots=True)
class IndexDomain:
    """Shape, origin, and dimension labels of an array.

    Args:
        shape: Extent of each dimension.
        origin: Inclusive lower bound of each dimension. Defaults to zeros.
        labels: Label of each dimension. Defaults to empty labels.

    Attributes:
        shape: Extent of each dimension.
        origin: Inclusive lower bound of each dimension.
        labels: Label of each dimension, empty string when unlabeled.
    """

    shape: tuple[int, ...]
    origin: tuple[int, ...] = field(default=())
    labels: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        """Fill defaults and validate."""
        object.__setattr__(self, "shape", tuple(int(size) for size in self.shape))
        rank = len(self.shape)
        origin = tuple(int(lower) for lower in self.origin) if self.origin else (0,) * rank
        labels = tuple(self.labels) if self.labels else ("",) * rank
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "labels", labels)

        if len(origin) != rank or len(labels) != rank:
            msg = f"Domain rank mismatch: shape={self.shape}, origin={origin}, labels={labels}"
            raise InvalidArgumentError(msg)

        named = [label for label in labels if label]
        if len(named) != len(set(named)):
            msg = f"Dimension labels must be unique: {list(labels)}"
            raise InvalidArgumentError(msg)

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        return len(self.shape)

    @property
    def exclusive_max(self) -> tuple[int, ...]:
        """Exclusive upper bound of each dimension."""
        return tuple(lower + size for lower, size in zip(self.origin, self.shape, strict=True))

    @property
    def size(self) -> int:
        """Total number of elements."""
        total = 1
        for extent in self.shape:
            total *= extent
        return total

    def has(self, identifier: DimensionIdentifier) -> bool:
        """Whether `identifier` names a dimension of this domain."""
        if isinstance(identifier, int):
            return 0 <= identifier < self.rank
        return identifier in self.labels

    def index_of(self, identifier: DimensionIdentifier) -> int:
        """Resolve a label or positional index to a dimension index.

        Args:
            identifier: Dimension label or positional index.

        Returns:
            The dimension index.

        Raises:
            InvalidArgumentError: If a positional index is outside the rank.
            NotFoundError: If a label is not part of the domain.
        """
        if isinstance(identifier, int):
            if not 0 <= identifier < self.rank:
                msg = f"Dimension index {identifier} is outside of rank {self.rank}"
                raise InvalidArgumentError(msg)
            return identifier

        if identifier not in self.labels:
            msg = f"Label {identifier!r} does not match one of {list(self.labels)}"
            raise NotFoundError(msg)
        return self.labels.index(identifier)

    def with_label(self, dim: int, label: str) -> IndexDomain:
        """Return a copy with dimension `dim` relabeled."""
        index = self.index_of(dim)
        labels = list(self.labels)
        labels[index] = label
        return IndexDomain(shape=self.shape, origin=self.origin, labels=tuple(labels))

    def with_labels(self, labels: Sequence[str]) -> IndexDomain:
        """Apply labels to dimensions in ascending order."""
        domain = self
        for dim, label in enumerate(labels):
            domain = domain.with_label(dim, label)
        return domain

    def restrict(self, dims: Sequence[int], starts: Sequence[int], stops: Sequence[int]) -> IndexDomain:
        """Restrict dimensions to half-open intervals, keeping origins.

        Args:
            dims: Dimension indices to restrict.
            starts: Inclusive lower bounds, one per dimension.
            stops: Exclusive upper bounds, one per dimension.

        Returns:
            The restricted domain.

        Raises:
            InvalidArgumentError: If an interval is not contained in the domain.
        """
        origin = list(self.origin)
        shape = list(self.shape)
        upper = self.exclusive_max
        for dim, start, stop in zip(dims, starts, stops, strict=True):
            if start < self.origin[dim] or stop > upper[dim] or start > stop:
                msg = (
                    f"Interval [{start}, {stop}) is not contained in "
                    f"[{self.origin[dim]}, {upper[dim]}) for dimension {dim}"
                )
                raise InvalidArgumentError(msg)
            origin[dim] = start
            shape[dim] = stop - start
        return IndexDomain(shape=tuple(shape), origin=tuple(origin), labels=self.labels)

    def to_slices(self) -> tuple[slice, ...]:
        """Absolute slices addressing this domain."""
        return tuple(slice(lower, upper) for lower, upper in zip(self.origin, self.exclusive_max, strict=True))

    def to_json(self) -> dict[str, list]:
        """JSON form, as used in array specs."""
        return {
            "input_labels": list(self.labels),
            "input_inclusive_min": list(self.origin),
            "input_exclusive_max": list(self.exclusive_max),
        }

    def __str__(self) -> str:
        """Domain as ``{ "inline": [0, 100), ... }``."""
        parts = [
            f'"{label}": [{lower}, {upper})' if label else f"[{lower}, {upper})"
            for label, lower, upper in zip(self.labels, self.origin, self.exclusive_max, strict=True)
        ]
        return "{ " + ", ".join(parts) + " }"
