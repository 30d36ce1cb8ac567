"""Schemas for MDIO Variable metadata."""

from mdio_variable.schemas.metadata import KvStoreSpec
from mdio_variable.schemas.metadata import UserAttributes
from mdio_variable.schemas.stats import CenteredBinHistogram
from mdio_variable.schemas.stats import EdgeDefinedHistogram
from mdio_variable.schemas.stats import SummaryStatistics

__all__ = [
    "CenteredBinHistogram",
    "EdgeDefinedHistogram",
    "KvStoreSpec",
    "SummaryStatistics",
    "UserAttributes",
]
