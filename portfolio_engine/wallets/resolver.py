"""Address resolution with self-healing derivation from a recovery phrase."""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from ..exceptions import MalformedSecretError
from ..interfaces.stores import AccountStore, RecoveryPhraseStore
from ..models import Account
from .derivation import derive_address

logger = logging.getLogger(__name__)

Deriver = Callable[[str, str], str]


class AddressResolver:
    """Return the addresses to value for an account, deriving missing ones.

    A persisted address is always returned unchanged. A missing one is
    derived from the account's recovery phrase and written back to the
    account store. Derivation is deterministic, so two concurrent requests
    that both derive will write the same value and the last write wins
    harmlessly.
    """

    def __init__(
        self,
        accounts: AccountStore,
        phrases: RecoveryPhraseStore,
        chain_types: Mapping[str, str],
        deriver: Deriver = derive_address,
    ) -> None:
        self._accounts = accounts
        self._phrases = phrases
        self._chain_types = dict(chain_types)
        self._derive = deriver

    @property
    def chains(self) -> tuple[str, ...]:
        return tuple(self._chain_types)

    async def resolve(self, account: Account, chain: str) -> str | None:
        """Return the address for one chain, or None when none can be found."""
        _, addresses = await self.resolve_all(account, chains=(chain,))
        return addresses.get(chain)

    async def resolve_all(
        self, account: Account, chains: tuple[str, ...] | None = None
    ) -> tuple[Account, dict[str, str]]:
        """Resolve every requested chain, persisting newly derived addresses.

        Returns the (possibly updated) account and the ``{chain: address}``
        map of chains that resolved. Chains with no address and no usable
        phrase are simply absent, as are chains whose phrase lookup or
        write-back failed; stored addresses are still returned then.
        """
        wanted = chains if chains is not None else self.chains
        resolved: dict[str, str] = {}
        missing: list[str] = []

        for chain in wanted:
            address = account.address_for(chain)
            if address:
                resolved[chain] = address
            elif chain in self._chain_types:
                missing.append(chain)

        if not missing:
            return account, resolved

        try:
            phrase = await self._phrases.find_by_account(account.id)
        except Exception as e:
            logger.warning(
                "Account %s: recovery phrase lookup failed, %s left unresolved: %s",
                account.id, ", ".join(missing), e,
            )
            return account, resolved
        if not phrase:
            logger.debug(
                "Account %s has no address for %s and no recovery phrase",
                account.id, ", ".join(missing),
            )
            return account, resolved

        derived: dict[str, str] = {}
        for chain in missing:
            try:
                derived[chain] = self._derive(self._chain_types[chain], phrase)
            except MalformedSecretError as e:
                logger.warning("Account %s: %s", account.id, e)

        if not derived:
            return account, resolved

        # Derived addresses are only returned once they are persisted.
        try:
            account = await self._accounts.save(account.with_addresses(derived))
        except Exception as e:
            logger.warning(
                "Account %s: storing derived %s address(es) failed: %s",
                account.id, ", ".join(sorted(derived)), e,
            )
            return account, resolved
        logger.info(
            "Derived and stored %s address(es) for account %s",
            ", ".join(sorted(derived)), account.id,
        )
        resolved.update(derived)
        return account, resolved
