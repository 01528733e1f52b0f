"""Solvency drift simulation.

Drives a real ``AccountingEngine`` through time along simulated collateral
price paths. Debt compounds every step while collateral earns nothing, so a
borrowed position drifts toward liquidation even when the price is flat; the
price paths add market risk on top of that drift.

Price dynamics follow a jump-diffusion (GBM + Poisson crashes). With no
price parameters the price is held constant, isolating the interest drift.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from cdp_engine.data.constants import LIQUIDATE_LTV, RAY
from cdp_engine.data.static_collaborators import (
    AllowlistAdminGate,
    InMemoryCollateralVault,
    InMemoryDebtToken,
    StaticPriceOracle,
)
from cdp_engine.protocol.clock import ManualClock
from cdp_engine.protocol.config import EngineConfig
from cdp_engine.protocol.engine import AccountingEngine
from cdp_engine.protocol.fixed_point import from_wad, to_wad, wmul
from cdp_engine.protocol.interest_rate import annual_rate_to_per_second
from cdp_engine.simulation.params import PriceDynamicsParams
from cdp_engine.simulation.results import DriftResult

logger = logging.getLogger(__name__)

BORROWER = "borrower"
KEEPER = "keeper"
SECONDS_PER_DAY = 86_400


def simulate_price_paths(
    params: PriceDynamicsParams,
    p0: float,
    n_paths: int,
    n_steps: int,
    dt: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Simulate collateral price paths.

    Args:
        params: Jump-diffusion parameters.
        p0: Initial price.
        n_paths: Number of Monte Carlo paths.
        n_steps: Number of time steps (index 0 = initial state).
        dt: Time step size in years (e.g. 1/365).
        rng: Numpy random generator for reproducibility.

    Returns:
        (n_paths, n_steps) array of strictly positive prices.
    """
    paths = np.empty((n_paths, n_steps))
    paths[:, 0] = p0

    sqrt_dt = np.sqrt(dt)
    z = rng.standard_normal((n_paths, n_steps - 1))
    jump_prob_per_step = min(1.0, params.jump_intensity * dt)
    jumps = rng.binomial(1, jump_prob_per_step, (n_paths, n_steps - 1))

    sigma = params.vol
    for t in range(1, n_steps):
        log_return = (params.drift - 0.5 * sigma * sigma) * dt + sigma * sqrt_dt * z[:, t - 1]
        jump_factor = 1.0 + params.jump_size * jumps[:, t - 1]
        paths[:, t] = paths[:, t - 1] * np.exp(log_return) * jump_factor

    # Floor for numerical stability
    np.clip(paths, p0 * 1e-6, None, out=paths)
    return paths


def time_to_liquidation(
    collateral: int,
    debt: int,
    price: int,
    rate_per_second: int,
    liquidate_ltv: int = LIQUIDATE_LTV,
) -> float:
    """Seconds until interest alone makes a position liquidatable.

    Solves collateral * price = debt * rate^t * liquidate_ltv for t at a
    constant price, ignoring fixed-point truncation.

    Returns:
        0.0 if already liquidatable, inf if the debt never gets there.
    """
    if debt == 0:
        return float("inf")
    headroom = (from_wad(collateral) * from_wad(price)) / (
        from_wad(debt) * from_wad(liquidate_ltv)
    )
    if headroom <= 1.0:
        return 0.0
    if rate_per_second <= RAY:
        return float("inf")
    return math.log(headroom) / math.log1p((rate_per_second - RAY) / RAY)


def run_solvency_drift(
    initial_price: float = 3_000.0,
    collateral: float = 1.0,
    loan_to_capacity: float = 0.9,
    annual_rate: float = 0.05,
    price_params: PriceDynamicsParams | None = None,
    n_paths: int = 100,
    horizon_days: int = 365,
    step_days: int = 1,
    seed: int | None = None,
) -> DriftResult:
    """Run borrowed positions through simulated time and prices.

    Each path gets its own engine. The borrower opens with *collateral*
    and borrows *loan_to_capacity* of the maximum the borrow LTV allows.
    At every step the clock advances by *step_days*, the oracle moves to the
    path's price, and a keeper liquidates the position as soon as the
    engine allows it (the keeper is minted the debt token it needs).

    Args:
        initial_price: Starting price, debt units per unit of collateral.
        collateral: Collateral deposited, in collateral units.
        loan_to_capacity: Fraction of the maximum loan that is borrowed.
        annual_rate: Effective annual interest rate.
        price_params: Price dynamics. None = constant price.
        n_paths: Number of simulation paths.
        horizon_days: Simulation horizon in days.
        step_days: Days between observations.
        seed: Random seed for reproducibility.

    Returns:
        DriftResult; values after a liquidation are frozen at that step.
    """
    if not 0.0 <= loan_to_capacity <= 1.0:
        raise ValueError(f"loan_to_capacity must be in [0, 1], got {loan_to_capacity}")

    rng = np.random.default_rng(seed)
    n_steps = horizon_days // step_days + 1  # +1: index 0 = initial state
    dt = step_days / 365.0

    if price_params is not None:
        price_paths = simulate_price_paths(
            price_params, initial_price, n_paths, n_steps, dt, rng
        )
    else:
        price_paths = np.full((n_paths, n_steps), float(initial_price))

    config = EngineConfig(initial_rate_per_second=annual_rate_to_per_second(annual_rate))
    collateral_wad = to_wad(collateral)
    fraction_wad = to_wad(loan_to_capacity)

    debt_paths = np.zeros((n_paths, n_steps))
    hf_paths = np.full((n_paths, n_steps), np.inf)
    liquidated = np.zeros(n_paths, dtype=bool)
    liquidation_step = np.full(n_paths, -1, dtype=int)

    for i in range(n_paths):
        clock = ManualClock(0)
        oracle = StaticPriceOracle(price=to_wad(float(price_paths[i, 0])))
        token = InMemoryDebtToken()
        engine = AccountingEngine(
            oracle=oracle,
            debt_token=token,
            collateral=InMemoryCollateralVault(),
            admin_gate=AllowlistAdminGate(),
            clock=clock,
            config=config,
        )
        engine.open_position(BORROWER, collateral_wad)
        capacity = engine.rule.max_borrowable(collateral_wad, 0, oracle.current_price())
        loan = wmul(capacity, fraction_wad)
        if loan > 0:
            engine.borrow(BORROWER, loan)

        for t in range(n_steps):
            if t > 0:
                clock.advance(step_days * SECONDS_PER_DAY)
                oracle.set_price(to_wad(float(price_paths[i, t])))

            debt = engine.get_position_debt_with_interest(BORROWER)
            debt_paths[i, t] = from_wad(debt)
            hf_paths[i, t] = engine.rule.health_factor(
                collateral_wad, debt, oracle.current_price()
            )

            if engine.is_liquidatable(BORROWER):
                token.mint(KEEPER, debt)
                engine.liquidate(KEEPER, BORROWER)
                liquidated[i] = True
                liquidation_step[i] = t
                debt_paths[i, t:] = debt_paths[i, t]
                hf_paths[i, t:] = hf_paths[i, t]
                price_paths[i, t:] = price_paths[i, t]
                break

    logger.debug(
        "Solvency drift: %d/%d paths liquidated over %d days",
        int(liquidated.sum()),
        n_paths,
        horizon_days,
    )

    return DriftResult(
        price_paths=price_paths,
        debt_paths=debt_paths,
        hf_paths=hf_paths,
        liquidated=liquidated,
        liquidation_step=liquidation_step,
        timesteps=np.arange(n_steps, dtype=float) * step_days,
    )
