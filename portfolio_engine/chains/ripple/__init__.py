from .client import RippleBalanceProvider, RippleRpcError

__all__ = ["RippleBalanceProvider", "RippleRpcError"]
