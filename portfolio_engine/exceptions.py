"""Engine exceptions.

These carry no HTTP knowledge; a calling layer maps them to responses
(AccountNotFoundError -> 404, ForbiddenError -> 403).

    PortfolioEngineError
    ├── AccountNotFoundError
    ├── ForbiddenError
    ├── MalformedSecretError
    └── EndpointUnavailableError
"""
from __future__ import annotations


class PortfolioEngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class AccountNotFoundError(PortfolioEngineError):
    """The account record itself does not exist."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class ForbiddenError(PortfolioEngineError):
    """A non-operator asked for an operator-only aggregation."""

    def __init__(self, account_id: str, operation: str = "bulk valuation") -> None:
        self.account_id = account_id
        self.operation = operation
        super().__init__(f"Account {account_id} is not permitted to run {operation}")


class MalformedSecretError(PortfolioEngineError):
    """A recovery phrase exists but cannot be used for derivation.

    The message never includes the phrase itself.
    """

    def __init__(self, chain_type: str, reason: str) -> None:
        self.chain_type = chain_type
        self.reason = reason
        super().__init__(f"Cannot derive {chain_type} address: {reason}")


class EndpointUnavailableError(PortfolioEngineError):
    """Every candidate endpoint for a chain failed its health probe."""

    def __init__(self, chain: str, candidates: int) -> None:
        self.chain = chain
        self.candidates = candidates
        super().__init__(f"All {candidates} endpoint(s) for {chain} are unavailable")
