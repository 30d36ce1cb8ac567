"""Tests for metadata schemas."""

from typing import Any

import pytest
from pydantic import ValidationError

from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.schemas import CenteredBinHistogram
from mdio_variable.schemas import EdgeDefinedHistogram
from mdio_variable.schemas import KvStoreSpec
from mdio_variable.schemas import SummaryStatistics
from mdio_variable.schemas import UserAttributes

STATS = {
    "count": 4,
    "sum": 10.0,
    "sumSquares": 30.0,
    "min": 1.0,
    "max": 4.0,
    "histogram": {"counts": [1, 1, 1, 1], "binCenters": [1, 2, 3, 4]},
}


class TestSummaryStatistics:
    """Summary statistics and histograms."""

    def test_derived(self) -> None:
        """Mean, variance and standard deviation derive from the sums."""
        stats = SummaryStatistics.model_validate(STATS)
        assert stats.mean == 2.5
        assert stats.variance == 1.25
        assert stats.std == pytest.approx(1.118033988)
        assert isinstance(stats.histogram, CenteredBinHistogram)

    def test_edge_defined(self) -> None:
        """Edge defined histograms need matching edges, widths and counts."""
        histogram = EdgeDefinedHistogram(counts=[1, 2], bin_edges=[0, 1], bin_widths=[1, 1])
        assert histogram.bin_edges == [0, 1]
        with pytest.raises(ValidationError):
            EdgeDefinedHistogram(counts=[1, 2], bin_edges=[0], bin_widths=[1, 1])

    def test_centered_mismatch(self) -> None:
        """Centered histograms need one center per count."""
        with pytest.raises(ValidationError):
            CenteredBinHistogram(counts=[1, 2], bin_centers=[0])


class TestUserAttributes:
    """User attribute payloads."""

    def test_round_trip(self) -> None:
        """Valid payloads are kept in camel case JSON form."""
        payload = {"attributes": {"survey": "alpha", "nested": {"k": [1, 2]}}, "statsV1": STATS}
        assert UserAttributes.from_json(payload).to_json() == payload

    def test_empty(self) -> None:
        """An empty payload yields empty attributes."""
        assert UserAttributes.from_json({}).to_json() == {}

    @pytest.mark.parametrize(
        "payload",
        [
            {"unknown": 1},
            {"attributes": "not an object"},
            {"statsV1": {"count": 1}},
            ["attributes"],
        ],
    )
    def test_invalid(self, payload: Any) -> None:  # noqa: ANN401
        """Structurally invalid payloads are rejected."""
        with pytest.raises(InvalidArgumentError):
            UserAttributes.from_json(payload)

    def test_from_variable_json(self) -> None:
        """Nested attributes take precedence over top level ones."""
        document = {
            "attributes": {
                "variable_name": "velocity",
                "attributes": {"survey": "top"},
                "metadata": {"attributes": {"survey": "nested"}, "statsV1": STATS},
            }
        }
        attrs = UserAttributes.from_variable_json(document)
        assert attrs.attributes == {"survey": "nested"}
        assert attrs.stats_v1 is not None

    def test_immutable(self) -> None:
        """Attribute values can't be modified in place."""
        attrs = UserAttributes.from_json({"attributes": {"a": 1}})
        with pytest.raises(ValidationError):
            attrs.attributes = {"a": 2}


def test_kvstore_spec() -> None:
    """Key-value specs accept known drivers and keep extra options."""
    spec = KvStoreSpec.model_validate({"driver": "gcs", "bucket": "b", "path": "survey/velocity/", "extra": 1})
    assert spec.name == "velocity"
    with pytest.raises(ValidationError):
        KvStoreSpec.model_validate({"driver": "ftp"})
