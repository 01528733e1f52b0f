"""Parameters for collateral price dynamics in solvency simulations."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class PriceDynamicsParams:
    """Parameters for the collateral price jump-diffusion process.

    The price follows:
      dS/S = (drift - 0.5σ²)dt + σ·dW + J·dN

    where J is a fractional jump and dN a Poisson process with intensity λ.

    Attributes:
        drift: Annualized drift of the collateral price (μ).
        vol: Annualized volatility (σ).
        jump_intensity: Average number of crash events per year (λ).
        jump_size: Fractional price move per jump (negative = crash).
    """

    drift: float = 0.0
    vol: float = 0.60
    jump_intensity: float = 0.5
    jump_size: float = -0.20


def calibrate_price_params(
    daily_prices: list[float],
    min_observations: int = 30,
) -> PriceDynamicsParams:
    """Calibrate price dynamics from a chronological series of daily prices.

    Args:
        daily_prices: Daily closing prices of the collateral asset.
        min_observations: Minimum number of observations required.

    Returns:
        Calibrated PriceDynamicsParams (defaults when data is too short).
    """
    if len(daily_prices) < min_observations:
        return PriceDynamicsParams()

    prices = np.array(daily_prices, dtype=float)
    log_returns = np.diff(np.log(prices))

    daily_vol = np.std(log_returns)
    # Identify jumps: returns beyond 3 standard deviations
    threshold = 3.0 * daily_vol
    jumps = log_returns[np.abs(log_returns) > threshold]
    non_jump = log_returns[np.abs(log_returns) <= threshold]

    n_days = len(log_returns)
    jump_intensity = (len(jumps) / n_days) * 365 if n_days > 0 else 0.5
    jump_size = float(np.expm1(np.mean(jumps))) if len(jumps) > 0 else -0.20

    if len(non_jump) > 1:
        vol = float(np.std(non_jump) * np.sqrt(365))
        drift = float(np.mean(non_jump) * 365 + 0.5 * vol * vol)
    else:
        vol = float(daily_vol * np.sqrt(365))
        drift = 0.0

    return PriceDynamicsParams(
        drift=drift,
        vol=max(0.01, vol),
        jump_intensity=max(0.01, jump_intensity),
        jump_size=jump_size,
    )
