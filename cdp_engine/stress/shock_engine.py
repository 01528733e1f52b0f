"""Shock engine: apply stress scenarios to an engine's open positions."""

from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd

from cdp_engine.protocol.engine import AccountingEngine, EngineSnapshot
from cdp_engine.protocol.fixed_point import to_wad, wmul
from cdp_engine.protocol.interest_rate import accrue
from cdp_engine.protocol.liquidation import LiquidationRule
from cdp_engine.stress.scenarios import StressScenario

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class ShockResult:
    """Result of applying a stress scenario to one position."""

    identity: str
    hf_before: float
    hf_after: float
    debt_before: int
    debt_after: int
    price_after: int
    is_liquidatable: bool


def _shocked_price(price: int, price_change: float) -> int:
    return wmul(price, to_wad(1.0 + price_change))


def apply_scenario(
    engine: AccountingEngine,
    scenario: StressScenario,
) -> list[ShockResult]:
    """Evaluate *scenario* against every open position.

    Debt is projected forward by ``scenario.duration_days`` at the current
    rate and compared with the shocked price. Read-only: neither the engine
    nor its oracle is modified, and every figure comes from one
    ``engine.snapshot()``.

    Returns:
        One ShockResult per open position, most at-risk first.
    """
    return _apply(engine.rule, engine.snapshot(), scenario)


def _apply(
    rule: LiquidationRule,
    snapshot: EngineSnapshot,
    scenario: StressScenario,
) -> list[ShockResult]:
    price = snapshot.price
    price_after = _shocked_price(price, scenario.price_change)

    index_now = snapshot.global_index
    index_after = accrue(
        index_now,
        snapshot.rate_per_second,
        scenario.duration_days * SECONDS_PER_DAY,
    )

    results = []
    for identity, position in snapshot.open_positions().items():
        debt_before = position.accrued_debt(index_now)
        debt_after = position.accrued_debt(index_after)
        results.append(
            ShockResult(
                identity=identity,
                hf_before=rule.health_factor(position.collateral, debt_before, price),
                hf_after=rule.health_factor(position.collateral, debt_after, price_after),
                debt_before=debt_before,
                debt_after=debt_after,
                price_after=price_after,
                is_liquidatable=rule.is_liquidatable(
                    position.collateral, debt_after, price_after
                ),
            )
        )

    results.sort(key=lambda r: r.hf_after)
    return results


def scenario_frame(
    engine: AccountingEngine,
    scenarios: list[StressScenario],
) -> pd.DataFrame:
    """Apply several scenarios to one engine snapshot and stack the results.

    Returns:
        DataFrame with a ``scenario`` column plus the ShockResult fields.
    """
    snapshot = engine.snapshot()
    rows = []
    for scenario in scenarios:
        for result in _apply(engine.rule, snapshot, scenario):
            rows.append({"scenario": scenario.name, **asdict(result)})
    return pd.DataFrame(rows)


def sample_price_shocks(
    n_scenarios: int,
    annual_vol: float = 0.60,
    horizon_days: int = 7,
    seed: int | None = None,
) -> np.ndarray:
    """Draw lognormal fractional price changes over *horizon_days*.

    Returns:
        (n_scenarios,) array of fractional changes, each above -1.
    """
    rng = np.random.default_rng(seed)
    sigma = annual_vol * np.sqrt(horizon_days / 365.0)
    log_returns = -0.5 * sigma * sigma + sigma * rng.standard_normal(n_scenarios)
    return np.expm1(log_returns)


def liquidation_probabilities(
    engine: AccountingEngine,
    price_shocks: np.ndarray,
    horizon_days: int = 7,
) -> pd.Series:
    """Fraction of *price_shocks* under which each open position is liquidatable.

    Returns:
        Series indexed by identity.
    """
    snapshot = engine.snapshot()
    hits: dict[str, int] = {}
    for shock in price_shocks:
        scenario = StressScenario(
            name="sampled",
            description="Sampled price shock",
            price_change=float(shock),
            duration_days=horizon_days,
        )
        for result in _apply(engine.rule, snapshot, scenario):
            hits[result.identity] = hits.get(result.identity, 0) + int(result.is_liquidatable)

    n = max(len(price_shocks), 1)
    return pd.Series({k: v / n for k, v in hits.items()}, name="liquidation_prob", dtype=float)
