"""Built-in ERC-20 token registry and the minimal ABI used to read it."""
from __future__ import annotations

from typing import Any

ERC20_ABI: list[dict[str, Any]] = [
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

# No decimals here: they are always read from the contract.
TOKEN_REGISTRY: dict[str, tuple[dict[str, str], ...]] = {
    "ethereum": (
        {
            "name": "Tether USD",
            "symbol": "USDT",
            "coin_id": "tether",
            "contract": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
        },
        {
            "name": "USD Coin",
            "symbol": "USDC",
            "coin_id": "usd-coin",
            "contract": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        },
    ),
}


def registry_for(chain_name: str) -> list[dict[str, str]]:
    """Return the built-in token list for ``chain_name`` (empty if unknown)."""
    return [dict(t) for t in TOKEN_REGISTRY.get(chain_name, ())]
