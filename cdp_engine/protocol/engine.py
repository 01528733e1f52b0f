"""Collateralized-debt accounting engine.

Borrowers deposit collateral, borrow a debt token against it and repay it
with compounding interest. Interest is tracked with one global index
(see ``InterestAccumulator``) and a per-position snapshot of that index, so a
position's debt is brought up to date in O(1) whenever it is touched, and no
operation ever iterates over all positions.

Every public method runs under a single re-entrant lock and reads the clock
once. All precondition checks run before any state or collaborator is
touched, so a failing call leaves the engine exactly as it was. When a later
collaborator call fails after an earlier one succeeded (e.g. the collateral
withdrawal after a debt-token burn), the earlier call is reversed before the
error propagates.

Debt compounds from the moment it is borrowed while collateral earns
nothing, so even at a constant price every indebted position drifts toward
the liquidation threshold. The engine reproduces this behaviour as-is.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from cdp_engine.data.interfaces import (
    AdminGate,
    Clock,
    CollateralTransfer,
    DebtToken,
    PriceOracle,
)
from cdp_engine.position.position import Position
from cdp_engine.protocol.clock import SystemClock
from cdp_engine.protocol.config import EngineConfig
from cdp_engine.protocol.errors import (
    InsufficientCollateralError,
    InvalidAmountError,
    NotUndercollateralizedError,
    PositionAlreadyOpenError,
    PositionNotOpenError,
    RepayExceedsDebtError,
    UnauthorizedError,
)
from cdp_engine.protocol.fixed_point import add, sub
from cdp_engine.protocol.interest_rate import InterestAccumulator
from cdp_engine.protocol.liquidation import LiquidationRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSnapshot:
    """Consistent read-only view of an engine at one instant.

    Attributes:
        timestamp: Clock reading the view was taken at.
        global_index: Global index as of ``timestamp`` (wad).
        rate_per_second: Rate in force (ray).
        price: Oracle price at ``timestamp`` (wad).
        positions: Copies of every stored position, by identity.
    """

    timestamp: int
    global_index: int
    rate_per_second: int
    price: int
    positions: dict[str, Position]

    def open_positions(self) -> dict[str, Position]:
        return {k: p for k, p in self.positions.items() if p.is_open}


def _require_positive(amount: int, what: str) -> None:
    if amount <= 0:
        raise InvalidAmountError(f"{what} must be positive, got {amount}")


class AccountingEngine:
    """Position ledger plus global interest accumulator.

    Parameters
    ----------
    oracle : PriceOracle
        Debt-asset price of one unit of collateral.
    debt_token : DebtToken
        Ledger minted on borrow and burned on repay/close/liquidate.
    collateral : CollateralTransfer
        Custody for the collateral asset.
    admin_gate : AdminGate
        Decides who may change the interest rate.
    clock : Clock | None
        Time source; defaults to the system clock.
    config : EngineConfig | None
        Thresholds and starting rate; defaults to ``EngineConfig()``.
    """

    def __init__(
        self,
        oracle: PriceOracle,
        debt_token: DebtToken,
        collateral: CollateralTransfer,
        admin_gate: AdminGate,
        clock: Clock | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.oracle = oracle
        self.debt_token = debt_token
        self.collateral = collateral
        self.admin_gate = admin_gate
        self.clock = clock or SystemClock()
        self.config = config or EngineConfig()

        self.accumulator = InterestAccumulator(
            self.config.initial_rate_per_second, start_time=self.clock.now()
        )
        self.rule = LiquidationRule(self.config.liquidation_params)
        self._positions: dict[str, Position] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def interest_rate_per_second(self) -> int:
        with self._lock:
            return self.accumulator.rate_per_second

    def current_global_index(self) -> int:
        """Global index as of now; does not commit it."""
        with self._lock:
            return self.accumulator.current_global_index(self.clock.now())

    def identities(self) -> list[str]:
        """Every identity that has ever opened a position."""
        with self._lock:
            return list(self._positions)

    def get_position(self, identity: str) -> Position:
        """Stored record for *identity* (a copy; zeroed if never opened)."""
        with self._lock:
            position = self._positions.get(identity)
            return position.snapshot() if position else Position()

    def get_position_collateral(self, identity: str) -> int:
        with self._lock:
            position = self._positions.get(identity)
            return position.collateral if position else 0

    def get_position_debt_with_interest(self, identity: str) -> int:
        """Debt including interest up to now, without mutating state."""
        with self._lock:
            position = self._positions.get(identity)
            if position is None or not position.is_open:
                return 0
            return position.accrued_debt(self.current_global_index())

    def snapshot(self) -> EngineSnapshot:
        """Clock, index, price and every position, read under one lock hold."""
        with self._lock:
            timestamp = self.clock.now()
            return EngineSnapshot(
                timestamp=timestamp,
                global_index=self.accumulator.current_global_index(timestamp),
                rate_per_second=self.accumulator.rate_per_second,
                price=self.oracle.current_price(),
                positions={k: p.snapshot() for k, p in self._positions.items()},
            )

    def is_liquidatable(self, identity: str) -> bool:
        """Whether ``liquidate`` would currently succeed for *identity*."""
        with self._lock:
            position = self._positions.get(identity)
            if position is None or not position.is_open:
                return False
            debt = position.accrued_debt(self.current_global_index())
            return self.rule.is_liquidatable(
                position.collateral, debt, self.oracle.current_price()
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open_position_of(self, identity: str) -> Position:
        position = self._positions.get(identity)
        if position is None or not position.is_open:
            raise PositionNotOpenError(f"{identity} has no open position")
        return position

    def _withdraw_or_reverse_burn(
        self, recipient: str, amount: int, burned_from: str, burned: int
    ) -> None:
        """Pay out collateral; re-mint *burned* to *burned_from* if that fails."""
        try:
            self.collateral.withdraw(recipient, amount)
        except Exception:
            if burned:
                logger.warning(
                    "Collateral withdrawal to %s failed; re-minting %d to %s",
                    recipient,
                    burned,
                    burned_from,
                )
                self.debt_token.mint(burned_from, burned)
            raise

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def open_position(self, identity: str, amount: int) -> int:
        """Deposit *amount* of collateral and open a debt-free position.

        Returns:
            The collateral amount credited to the position.
        """
        _require_positive(amount, "deposit amount")
        with self._lock:
            position = self._positions.get(identity)
            if position is not None and position.is_open:
                raise PositionAlreadyOpenError(f"{identity} already has an open position")

            index = self.accumulator.current_global_index(self.clock.now())
            deposited = self.collateral.deposit(identity, amount)
            if deposited <= 0:
                raise InvalidAmountError(
                    f"deposit of {amount} from {identity} credited {deposited} collateral"
                )

            if position is None:
                position = self._positions[identity] = Position()
            position.collateral = deposited
            position.debt = 0
            position.interest_index_snapshot = index

            logger.debug("open %s: collateral=%d index=%d", identity, deposited, index)
            return deposited

    def borrow(self, identity: str, amount: int) -> None:
        """Borrow *amount* of debt token against the position's collateral.

        required_collateral = (accrued_debt + amount) * take_loan_ltv / price
        """
        _require_positive(amount, "loan amount")
        with self._lock:
            position = self._open_position_of(identity)
            index = self.accumulator.current_global_index(self.clock.now())
            debt = position.accrued_debt(index)
            price = self.oracle.current_price()

            required = self.rule.required_collateral_to_borrow(add(debt, amount), price)
            if position.collateral < required:
                raise InsufficientCollateralError(
                    f"{identity} holds {position.collateral} collateral, "
                    f"{required} required to borrow {amount}"
                )

            new_debt = add(debt, amount)
            self.debt_token.mint(identity, amount)
            position.debt = new_debt
            position.interest_index_snapshot = index

            logger.debug("borrow %s: amount=%d debt=%d index=%d", identity, amount, new_debt, index)

    def repay(self, identity: str, amount: int) -> None:
        """Burn *amount* of the caller's debt token against their debt."""
        _require_positive(amount, "repay amount")
        with self._lock:
            position = self._open_position_of(identity)
            index = self.accumulator.current_global_index(self.clock.now())
            # One accrual read for both the check and the update.
            debt = position.accrued_debt(index)
            if amount > debt:
                raise RepayExceedsDebtError(
                    f"{identity} owes {debt}, cannot repay {amount}"
                )

            new_debt = sub(debt, amount)
            self.debt_token.burn(identity, amount)
            position.debt = new_debt
            position.interest_index_snapshot = index

            logger.debug("repay %s: amount=%d debt=%d index=%d", identity, amount, new_debt, index)

    def close_position(self, identity: str) -> int:
        """Repay all accrued debt and withdraw all collateral to the owner.

        Returns:
            The collateral amount returned.
        """
        with self._lock:
            position = self._open_position_of(identity)
            index = self.accumulator.current_global_index(self.clock.now())
            debt = position.accrued_debt(index)
            collateral = position.collateral

            if debt:
                self.debt_token.burn(identity, debt)
            self._withdraw_or_reverse_burn(identity, collateral, identity, debt)
            position.reset()

            logger.debug("close %s: repaid=%d returned=%d", identity, debt, collateral)
            return collateral

    def liquidate(self, liquidator: str, identity: str) -> int:
        """Seize an undercollateralized position.

        The liquidator burns the position's full accrued debt from their own
        debt-token balance and receives all of its collateral. Allowed only
        while collateral < accrued_debt * liquidate_ltv / price.

        Returns:
            The collateral amount transferred to the liquidator.
        """
        with self._lock:
            position = self._open_position_of(identity)
            index = self.accumulator.current_global_index(self.clock.now())
            debt = position.accrued_debt(index)
            price = self.oracle.current_price()

            required = self.rule.required_collateral_to_keep(debt, price)
            if position.collateral >= required:
                raise NotUndercollateralizedError(
                    f"{identity} holds {position.collateral} collateral, "
                    f"liquidation requires less than {required}"
                )

            collateral = position.collateral
            if debt:
                self.debt_token.burn(liquidator, debt)
            self._withdraw_or_reverse_burn(liquidator, collateral, liquidator, debt)
            position.reset()

            logger.info(
                "liquidate %s by %s: debt=%d collateral=%d price=%d",
                identity,
                liquidator,
                debt,
                collateral,
                price,
            )
            return collateral

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def update_interest_rate(self, caller: str, new_rate: int) -> None:
        """Set the per-second rate (ray). Accrual under the old rate is committed first."""
        with self._lock:
            if not self.admin_gate.is_authorized(caller):
                raise UnauthorizedError(f"{caller} may not change the interest rate")
            self.accumulator.set_rate(new_rate, self.clock.now())
