"""Address derivation and resolution."""
from .derivation import derive_address, normalize_phrase
from .resolver import AddressResolver

__all__ = ["AddressResolver", "derive_address", "normalize_phrase"]
