"""Reference persistence collaborators."""
from .memory import InMemoryAccountStore, InMemoryRecoveryPhraseStore, stores_from_config

__all__ = ["InMemoryAccountStore", "InMemoryRecoveryPhraseStore", "stores_from_config"]
