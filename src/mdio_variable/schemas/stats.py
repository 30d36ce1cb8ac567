"""Statistics schema for MDIO Variables.

This module provides two Histogram classes (CenteredBinHistogram and
EdgeDefinedHistogram) and a summary statistics class.

SummaryStatistics: a class that represents the minimum summary statistics
of an array consisting of count, sum, sum of squares, min, max, and a histogram.

CenteredBinHistogram takes the center points of each bin in a histogram,
while EdgeDefinedHistogram takes the left edges and widths of each bin.
Both classes extend from the base class BaseHistogram, which represents
a histogram with count of each bin. Bin positions may be integers or floats.
"""

from __future__ import annotations

from typing import TypeAlias

from pydantic import Field
from pydantic import model_validator

from mdio_variable.schemas.core import CamelCaseStrictModel


class BaseHistogram(CamelCaseStrictModel):
    """Represents a histogram with bin counts."""

    counts: list[int] = Field(..., description="Count of each each bin.")


class CenteredBinHistogram(BaseHistogram):
    """Class representing a center bin histogram."""

    bin_centers: list[int | float] = Field(..., description="List of bin centers.")

    @model_validator(mode="after")
    def _check_bins(self) -> CenteredBinHistogram:
        if len(self.bin_centers) != len(self.counts):
            msg = f"Got {len(self.bin_centers)} bin centers for {len(self.counts)} counts"
            raise ValueError(msg)
        return self


class EdgeDefinedHistogram(BaseHistogram):
    """A class representing an edge-defined histogram."""

    bin_edges: list[int | float] = Field(..., description="The left edges of the histogram bins.")
    bin_widths: list[int | float] = Field(..., description="The widths of the histogram bins.")

    @model_validator(mode="after")
    def _check_bins(self) -> EdgeDefinedHistogram:
        if not len(self.bin_edges) == len(self.bin_widths) == len(self.counts):
            msg = "Bin edges, bin widths, and counts must have the same length"
            raise ValueError(msg)
        return self


Histogram: TypeAlias = CenteredBinHistogram | EdgeDefinedHistogram


class SummaryStatistics(CamelCaseStrictModel):
    """Data model for some statistics of a Variable."""

    count: int = Field(..., description="The number of data points.")
    sum: float = Field(..., description="The total of all data values.")
    sum_squares: float = Field(..., description="The total of all data values squared.")
    min: float = Field(..., description="The smallest value in the variable.")
    max: float = Field(..., description="The largest value in the variable.")
    histogram: Histogram = Field(..., description="Binned frequency distribution.")

    @property
    def mean(self) -> float:
        """Returns the mean of the data."""
        return self.sum / self.count

    @property
    def variance(self) -> float:
        """Returns the variance of the data."""
        return (self.sum_squares / self.count) - (self.mean**2)

    @property
    def std(self) -> float:
        """Returns the standard deviation of the data."""
        return self.variance**0.5
