"""In-memory collaborators with hardcoded defaults, for simulation and tests."""

from __future__ import annotations

from cdp_engine.data.constants import ETH_USD, STETH_ETH, WAD
from cdp_engine.data.interfaces import (
    AdminGate,
    CollateralTransfer,
    DebtToken,
    PriceOracle,
)

# --- Representative prices, wad-scaled ---

_FEED_PRICES: dict[str, int] = {
    ETH_USD: 3_000 * WAD,
    STETH_ETH: WAD,
}


class InsufficientBalanceError(ValueError):
    """Burn or withdrawal larger than the held balance."""


class TransferRejectedError(RuntimeError):
    """The collateral transfer was refused."""


class StaticPriceOracle(PriceOracle):
    """Oracle returning a fixed, manually updatable price."""

    def __init__(self, feed: str = ETH_USD, price: int | None = None) -> None:
        if price is None:
            if feed not in _FEED_PRICES:
                raise ValueError(f"Unknown feed: {feed}")
            price = _FEED_PRICES[feed]
        self.feed = feed
        self.price = price

    def current_price(self) -> int:
        return self.price

    def set_price(self, price: int) -> None:
        if price < 0:
            raise ValueError(f"price must be non-negative, got {price}")
        self.price = price


class InMemoryDebtToken(DebtToken):
    """Debt-token balances kept in a dict."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self.total_supply = 0

    def mint(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative, got {amount}")
        self._balances[account] = self._balances.get(account, 0) + amount
        self.total_supply += amount

    def burn(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"burn amount must be non-negative, got {amount}")
        balance = self._balances.get(account, 0)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{account} holds {balance}, cannot burn {amount}"
            )
        self._balances[account] = balance - amount
        self.total_supply -= amount

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)


class InMemoryCollateralVault(CollateralTransfer):
    """Custody account for the collateral asset.

    Tracks what is held in custody and what has been paid out per account.
    Transfers can be switched off to exercise failure paths.
    """

    def __init__(self) -> None:
        self.held = 0
        self.paid_out: dict[str, int] = {}
        self.deposited: dict[str, int] = {}
        self.reject_deposits = False
        self.reject_withdrawals = False

    def deposit(self, account: str, amount: int) -> int:
        if self.reject_deposits:
            raise TransferRejectedError(f"deposit of {amount} from {account} rejected")
        self.held += amount
        self.deposited[account] = self.deposited.get(account, 0) + amount
        return amount

    def withdraw(self, account: str, amount: int) -> None:
        if self.reject_withdrawals:
            raise TransferRejectedError(f"withdrawal of {amount} to {account} rejected")
        if amount > self.held:
            raise InsufficientBalanceError(
                f"vault holds {self.held}, cannot withdraw {amount}"
            )
        self.held -= amount
        self.paid_out[account] = self.paid_out.get(account, 0) + amount


class AllowlistAdminGate(AdminGate):
    """Admin gate backed by a fixed set of identities."""

    def __init__(self, admins: set[str] | frozenset[str] | None = None) -> None:
        self._admins = frozenset(admins or ())

    def is_authorized(self, identity: str) -> bool:
        return identity in self._admins
