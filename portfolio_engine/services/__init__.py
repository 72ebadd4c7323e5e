"""Service modules"""
from .aggregator import PortfolioAggregator, ValuationBatch
from .factory import build_aggregator, build_oracle, build_providers

__all__ = [
    "PortfolioAggregator",
    "ValuationBatch",
    "build_aggregator",
    "build_oracle",
    "build_providers",
]
