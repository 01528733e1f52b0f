"""Per-borrower position record."""

from dataclasses import dataclass, replace

from cdp_engine.protocol.fixed_point import wdiv, wmul


@dataclass
class Position:
    """Collateral and index-relative debt of one borrower.

    ``debt`` is the debt as of ``interest_index_snapshot``, not the current
    debt: the current figure is obtained by rescaling it by the ratio of the
    latest global index to the snapshot. A position with no collateral is
    closed and always has zero debt; its snapshot is meaningless.
    """

    collateral: int = 0  # wad, collateral asset
    debt: int = 0  # wad, debt asset as of the snapshot
    interest_index_snapshot: int = 0  # wad, global index at last accrual

    @property
    def is_open(self) -> bool:
        return self.collateral > 0

    def accrued_debt(self, global_index: int) -> int:
        """Debt compounded up to *global_index*.

        debt_real = debt * global_index / interest_index_snapshot
        """
        if self.debt == 0:
            return 0
        return wdiv(wmul(self.debt, global_index), self.interest_index_snapshot)

    def snapshot(self) -> "Position":
        """Detached copy, safe to hand to callers."""
        return replace(self)

    def reset(self) -> None:
        """Return the slot to the closed state."""
        self.collateral = 0
        self.debt = 0
        self.interest_index_snapshot = 0
