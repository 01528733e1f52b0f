"""Collateralization thresholds for borrowing and liquidation."""

from dataclasses import dataclass

from cdp_engine.data.constants import LIQUIDATE_LTV, TAKE_LOAN_LTV, WAD
from cdp_engine.protocol.fixed_point import add, from_wad, sub, wdiv, wmul


@dataclass(frozen=True)
class LiquidationParams:
    """Collateral-to-debt ratios, wad-scaled (``1.5e18`` = 150%)."""

    take_loan_ltv: int = TAKE_LOAN_LTV
    liquidate_ltv: int = LIQUIDATE_LTV


class LiquidationRule:
    """Borrow and liquidation eligibility.

    Prices are in debt-asset units per unit of collateral (wad). A zero
    price raises ``DivideByZeroError``.
    """

    def __init__(self, params: LiquidationParams | None = None) -> None:
        self.params = params or LiquidationParams()

    def required_collateral_to_borrow(self, debt: int, price: int) -> int:
        """Collateral needed to hold *debt* after a borrow.

        required = (debt * take_loan_ltv) / price
        """
        return wdiv(wmul(debt, self.params.take_loan_ltv), price)

    def required_collateral_to_keep(self, debt: int, price: int) -> int:
        """Collateral below which *debt* can be liquidated.

        required = (debt * liquidate_ltv) / price
        """
        return wdiv(wmul(debt, self.params.liquidate_ltv), price)

    def can_borrow(self, collateral: int, debt: int, loan: int, price: int) -> bool:
        return collateral >= self.required_collateral_to_borrow(add(debt, loan), price)

    def is_liquidatable(self, collateral: int, debt: int, price: int) -> bool:
        return collateral < self.required_collateral_to_keep(debt, price)

    def max_borrowable(self, collateral: int, debt: int, price: int) -> int:
        """Additional loan that still passes ``can_borrow``.

        capacity = collateral * price / take_loan_ltv. Truncation can leave a
        few units of headroom unused, never the other way round.
        """
        capacity = wdiv(wmul(collateral, price), self.params.take_loan_ltv)
        if capacity <= debt:
            return 0
        return sub(capacity, debt)

    def collateral_ratio(self, collateral: int, debt: int, price: int) -> int | None:
        """Collateral value over debt, wad-scaled. ``None`` when debt is zero."""
        if debt == 0:
            return None
        return wdiv(wmul(collateral, price), debt)

    def health_factor(self, collateral: int, debt: int, price: int) -> float:
        """Collateral ratio relative to the liquidation ratio.

        HF = collateral_ratio / liquidate_ltv; below 1.0 means liquidatable
        (up to rounding at the boundary).
        """
        ratio = self.collateral_ratio(collateral, debt, price)
        if ratio is None:
            return float("inf")
        return from_wad(ratio) / from_wad(self.params.liquidate_ltv)

    def liquidation_price(self, collateral: int, debt: int) -> int:
        """Price below which the position becomes liquidatable.

        price = debt * liquidate_ltv / collateral. Zero when there is no debt.
        """
        if debt == 0:
            return 0
        return wdiv(wmul(debt, self.params.liquidate_ltv), collateral)


def validate_params(params: LiquidationParams) -> None:
    """Reject threshold combinations that make borrowing self-liquidating."""
    if params.liquidate_ltv < WAD:
        raise ValueError("liquidate_ltv must be at least 1.0")
    if params.take_loan_ltv < params.liquidate_ltv:
        raise ValueError("take_loan_ltv must not be below liquidate_ltv")
