"""Protocol interfaces for the portfolio valuation engine."""
from .chain import BalanceProvider
from .price_oracle import PriceOracle
from .stores import AccountStore, RecoveryPhraseStore

__all__ = ["AccountStore", "BalanceProvider", "PriceOracle", "RecoveryPhraseStore"]
