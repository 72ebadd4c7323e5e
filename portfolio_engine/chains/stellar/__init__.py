from .client import StellarBalanceProvider

__all__ = ["StellarBalanceProvider"]
