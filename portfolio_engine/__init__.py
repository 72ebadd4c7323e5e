"""Multi-chain portfolio valuation engine."""
from .models import (
    Account,
    Asset,
    BulkPortfolioResult,
    PlatformTotal,
    PortfolioResult,
    PriceMap,
    Role,
)

__version__ = "0.1.0"

__all__ = [
    "Account",
    "Asset",
    "BulkPortfolioResult",
    "PlatformTotal",
    "PortfolioResult",
    "PriceMap",
    "Role",
]
