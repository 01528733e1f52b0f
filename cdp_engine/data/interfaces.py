"""Abstract collaborator interfaces consumed by the accounting engine."""

from abc import ABC, abstractmethod


class PriceOracle(ABC):
    """Exchange rate between the collateral and the debt asset."""

    @abstractmethod
    def current_price(self) -> int:
        """Debt-asset units per unit of collateral, wad-scaled.

        The engine trusts the value verbatim; a zero price surfaces as a
        division-by-zero error in downstream checks.
        """


class DebtToken(ABC):
    """Fungible debt-token ledger."""

    @abstractmethod
    def mint(self, account: str, amount: int) -> None:
        """Credit *amount* of debt token to *account*."""

    @abstractmethod
    def burn(self, account: str, amount: int) -> None:
        """Destroy *amount* of debt token held by *account*.

        Raises if *account* holds less than *amount*.
        """

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Current debt-token balance of *account*."""


class CollateralTransfer(ABC):
    """Native collateral asset movement in and out of engine custody."""

    @abstractmethod
    def deposit(self, account: str, amount: int) -> int:
        """Move *amount* from *account* into custody; return the amount received."""

    @abstractmethod
    def withdraw(self, account: str, amount: int) -> None:
        """Move *amount* out of custody to *account*.

        Raising aborts the enclosing engine operation.
        """


class AdminGate(ABC):
    """Authorization check for admin-only operations."""

    @abstractmethod
    def is_authorized(self, identity: str) -> bool:
        """Whether *identity* may change protocol parameters."""


class Clock(ABC):
    """Source of the current time in whole seconds."""

    @abstractmethod
    def now(self) -> int:
        """Current timestamp; non-decreasing across calls."""
