"""Read-only position summaries for reporting."""

from __future__ import annotations

from dataclasses import asdict, dataclass

import pandas as pd

from cdp_engine.position.position import Position
from cdp_engine.protocol.engine import AccountingEngine, EngineSnapshot
from cdp_engine.protocol.fixed_point import from_wad
from cdp_engine.protocol.liquidation import LiquidationRule


@dataclass(frozen=True)
class PositionSummary:
    """Point-in-time view of one position.

    Amounts are wad integers; ratios are floats for display.
    """

    identity: str
    collateral: int
    debt: int  # including interest up to now
    collateral_ratio: float | None  # collateral value / debt, None without debt
    health_factor: float  # collateral_ratio / liquidate_ltv
    max_borrowable: int
    liquidation_price: int  # 0 without debt
    is_liquidatable: bool


def _summarize(
    rule: LiquidationRule, snapshot: EngineSnapshot, identity: str
) -> PositionSummary:
    position = snapshot.positions.get(identity) or Position()
    collateral = position.collateral
    debt = position.accrued_debt(snapshot.global_index) if position.is_open else 0
    price = snapshot.price

    ratio = rule.collateral_ratio(collateral, debt, price)
    if collateral == 0:
        hf = float("inf")
        max_borrow = 0
        liq_price = 0
        liquidatable = False
    else:
        hf = rule.health_factor(collateral, debt, price)
        max_borrow = rule.max_borrowable(collateral, debt, price)
        liq_price = rule.liquidation_price(collateral, debt)
        liquidatable = rule.is_liquidatable(collateral, debt, price)

    return PositionSummary(
        identity=identity,
        collateral=collateral,
        debt=debt,
        collateral_ratio=from_wad(ratio) if ratio is not None else None,
        health_factor=hf,
        max_borrowable=max_borrow,
        liquidation_price=liq_price,
        is_liquidatable=liquidatable,
    )


def summarize_position(engine: AccountingEngine, identity: str) -> PositionSummary:
    """Build a summary for *identity* at the engine's current time and price."""
    return _summarize(engine.rule, engine.snapshot(), identity)


def positions_frame(engine: AccountingEngine, open_only: bool = True) -> pd.DataFrame:
    """Tabulate every known position from a single engine snapshot.

    This walks all identities, so it is meant for reporting only; none of
    the engine's operations depend on it.

    Returns:
        DataFrame indexed by identity with the ``PositionSummary`` fields,
        sorted by health factor (ascending).
    """
    columns = [f for f in PositionSummary.__dataclass_fields__ if f != "identity"]
    snapshot = engine.snapshot()
    rows = []
    for identity in snapshot.positions:
        summary = _summarize(engine.rule, snapshot, identity)
        if open_only and summary.collateral == 0:
            continue
        rows.append(asdict(summary))

    if not rows:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="identity"))

    df = pd.DataFrame(rows).set_index("identity")
    return df.sort_values("health_factor", kind="stable")
