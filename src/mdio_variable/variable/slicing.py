"""Label-aware slicing of Variables and their in-memory data.

Slices are half-open intervals ``[start, stop)``. Dimensions that aren't described
remain fully intact.

Examples:
    Describe ``[0, 100)`` along inline and ``[0, 200)`` along crossline:

    >>> desc1 = SliceDescriptor("inline", 0, 100)
    >>> desc2 = SliceDescriptor("crossline", 0, 200)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import NamedTuple

from mdio_variable.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mdio_variable.core.domain import DimensionIdentifier
    from mdio_variable.core.domain import IndexDomain


@dataclass(frozen=True, slots=True)
class SliceDescriptor:
    """How to slice one dimension of a Variable.

    Attributes:
        label: Label or positional index of the dimension to slice.
        start: Inclusive start index.
        stop: Exclusive stop index.
        step: Stride, only 1 is supported.
    """

    label: DimensionIdentifier
    start: int
    stop: int
    step: int = 1


class ResolvedSlice(NamedTuple):
    """A descriptor bound to a dimension index, with clamped bounds."""

    dim: int
    start: int
    stop: int


def check_steps(descriptors: Sequence[SliceDescriptor]) -> None:
    """Reject any descriptor with a stride other than 1."""
    for desc in descriptors:
        if desc.step != 1:
            msg = "Only step 1 is supported for slicing."
            raise InvalidArgumentError(msg)


def slice_in_range(domain: IndexDomain, desc: SliceDescriptor) -> SliceDescriptor:
    """Clamp a descriptor to a domain.

    Descriptors for dimensions the domain doesn't have are returned unchanged, slicing
    along a dimension that doesn't exist is valid and has no effect.
    """
    if not domain.has(desc.label):
        return desc

    dim = domain.index_of(desc.label)
    lower = domain.origin[dim]
    upper = domain.exclusive_max[dim]
    return SliceDescriptor(
        label=desc.label,
        start=max(desc.start, lower),
        stop=min(desc.stop, upper),
        step=desc.step,
    )


def _check_order(desc: SliceDescriptor) -> None:
    if desc.start > desc.stop:
        msg = (
            f"Slice descriptor for {desc.label} had an illegal configuration.\n\t"
            f"Start '{desc.start}' greater than stop '{desc.stop}'."
        )
        raise InvalidArgumentError(msg)


def resolve_slices(domain: IndexDomain, descriptors: Sequence[SliceDescriptor]) -> list[ResolvedSlice]:
    """Validate and clamp descriptors against a domain.

    Descriptors naming dimensions the domain doesn't have are ignored. Nothing is
    returned for an identity slice.

    Args:
        domain: The domain being sliced.
        descriptors: One descriptor per dimension to slice.

    Returns:
        The clamped slices to apply, in descriptor order.

    Raises:
        InvalidArgumentError: If a step isn't 1, or a clamped start exceeds its stop.
    """
    check_steps(descriptors)

    resolved = []
    for desc in descriptors:
        clamped = slice_in_range(domain, desc)
        _check_order(clamped)
        if domain.has(clamped.label):
            resolved.append(ResolvedSlice(domain.index_of(clamped.label), clamped.start, clamped.stop))
    return resolved


def resolve_slices_strict(domain: IndexDomain, descriptors: Sequence[SliceDescriptor]) -> list[ResolvedSlice]:
    """Like `resolve_slices`, but every descriptor must name a dimension of `domain`.

    Raises:
        InvalidArgumentError: If a step isn't 1, a positional index is outside the rank,
            or a clamped start exceeds its stop.
        NotFoundError: If a label is not part of the domain.
    """
    check_steps(descriptors)
    for desc in descriptors:
        domain.index_of(desc.label)
    return resolve_slices(domain, descriptors)


def apply_slices(domain: IndexDomain, slices: Sequence[ResolvedSlice]) -> IndexDomain:
    """Restrict a domain by resolved slices in one bulk operation."""
    dims, starts, stops = zip(*slices, strict=True) if slices else ((), (), ())
    return domain.restrict(dims, starts, stops)
