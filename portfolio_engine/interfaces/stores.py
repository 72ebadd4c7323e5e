"""Persistence protocols: account and recovery-phrase collaborators."""
from typing import Protocol

from ..models import Account


class AccountStore(Protocol):
    """Abstract interface for account records."""

    async def find_by_id(self, account_id: str) -> Account | None: ...

    async def find_many_with_any_address(self) -> list[Account]: ...

    async def save(self, account: Account) -> Account: ...


class RecoveryPhraseStore(Protocol):
    """Abstract interface for stored recovery phrases (read-only here)."""

    async def find_by_account(self, account_id: str) -> str | None: ...
