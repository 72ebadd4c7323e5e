"""Deterministic public-address derivation from a BIP-39 recovery phrase.

Only public addresses leave this module. Private key material produced along
the way is discarded, and phrases never appear in exception messages.

    stellar  BIP-39 seed[:32] as a raw ed25519 seed -> G... strkey
    ripple   BIP-39 entropy[:16] as a secp256k1 family seed -> r... address
    evm      BIP-44 m/44'/60'/0'/0/0 -> checksummed 0x... address
"""
from __future__ import annotations

from collections.abc import Callable

from eth_account import Account as EthAccount
from mnemonic import Mnemonic
from stellar_sdk import Keypair
from xrpl.constants import CryptoAlgorithm
from xrpl.core.addresscodec import encode_seed
from xrpl.core.keypairs import derive_classic_address, derive_keypair

from ..exceptions import MalformedSecretError

EVM_DERIVATION_PATH = "m/44'/60'/0'/0/0"
RIPPLE_SEED_LENGTH = 16

EthAccount.enable_unaudited_hdwallet_features()
_MNEMONIC = Mnemonic("english")


def normalize_phrase(phrase: str) -> str:
    return " ".join(phrase.split())


def derive_stellar_address(phrase: str) -> str:
    seed = _MNEMONIC.to_seed(phrase, passphrase="")
    return Keypair.from_raw_ed25519_seed(seed[:32]).public_key


def derive_ripple_address(phrase: str) -> str:
    entropy = bytes(_MNEMONIC.to_entropy(phrase))
    family_seed = encode_seed(entropy[:RIPPLE_SEED_LENGTH], CryptoAlgorithm.SECP256K1)
    public_key, _ = derive_keypair(family_seed)
    return derive_classic_address(public_key)


def derive_evm_address(phrase: str) -> str:
    return EthAccount.from_mnemonic(phrase, account_path=EVM_DERIVATION_PATH).address


_DERIVERS: dict[str, Callable[[str], str]] = {
    "stellar": derive_stellar_address,
    "ripple": derive_ripple_address,
    "evm": derive_evm_address,
}


def supported_chain_types() -> tuple[str, ...]:
    return tuple(_DERIVERS)


def derive_address(chain_type: str, phrase: str) -> str:
    """Derive the public address for ``chain_type`` from ``phrase``.

    Raises:
        ValueError: ``chain_type`` has no derivation.
        MalformedSecretError: the phrase is empty, not a valid English
            BIP-39 mnemonic, or rejected by the chain library.
    """
    deriver = _DERIVERS.get(chain_type)
    if deriver is None:
        raise ValueError(f"No address derivation for chain type '{chain_type}'")

    normalized = normalize_phrase(phrase or "")
    if not normalized:
        raise MalformedSecretError(chain_type, "empty recovery phrase")
    if not _MNEMONIC.check(normalized):
        raise MalformedSecretError(chain_type, "not a valid BIP-39 mnemonic")

    try:
        return deriver(normalized)
    except Exception as e:
        raise MalformedSecretError(chain_type, type(e).__name__) from None
