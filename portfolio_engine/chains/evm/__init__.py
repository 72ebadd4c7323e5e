from .client import EvmBalanceProvider, make_web3_factory
from .tokens import ERC20_ABI, TOKEN_REGISTRY, registry_for

__all__ = [
    "ERC20_ABI",
    "EvmBalanceProvider",
    "TOKEN_REGISTRY",
    "make_web3_factory",
    "registry_for",
]
