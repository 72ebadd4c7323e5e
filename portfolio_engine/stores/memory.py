"""In-memory account and recovery-phrase stores, seeded from config."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from ..config import AppConfig
from ..models import Account, Role


class InMemoryAccountStore:
    """Dict-backed account store.

    ``save`` never overwrites an address that is already stored: addresses
    are write-once public identifiers.
    """

    def __init__(self, accounts: Iterable[Account] = ()) -> None:
        self._accounts: dict[str, Account] = {a.id: a for a in accounts}

    async def find_by_id(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    async def find_many_with_any_address(self) -> list[Account]:
        return [a for a in self._accounts.values() if any(a.addresses.values())]

    async def save(self, account: Account) -> Account:
        existing = self._accounts.get(account.id)
        if existing is not None:
            addresses = dict(account.addresses)
            addresses.update({k: v for k, v in existing.addresses.items() if v})
            account = replace(account, addresses=addresses)
        self._accounts[account.id] = account
        return account


class InMemoryRecoveryPhraseStore:
    """Dict-backed recovery phrases keyed by account id."""

    def __init__(self, phrases: Mapping[str, str] | None = None) -> None:
        self._phrases = dict(phrases or {})

    async def find_by_account(self, account_id: str) -> str | None:
        return self._phrases.get(account_id) or None


def stores_from_config(
    config: AppConfig,
) -> tuple[InMemoryAccountStore, InMemoryRecoveryPhraseStore]:
    """Build both stores from the ``accounts`` section of the config."""
    accounts = [
        Account(
            id=seed.id,
            username=seed.username or seed.id,
            role=Role(seed.role),
            addresses=dict(seed.addresses),
        )
        for seed in config.accounts
    ]
    phrases = {
        seed.id: seed.recovery_phrase for seed in config.accounts if seed.recovery_phrase
    }
    return InMemoryAccountStore(accounts), InMemoryRecoveryPhraseStore(phrases)
