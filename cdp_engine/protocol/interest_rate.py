"""Global interest accumulator and per-second rate helpers.

The accumulator keeps one compounding index for the whole system. The index
is never ticked by a timer: it is recomputed from the stored index, the rate
and the elapsed seconds whenever it is read, and only written back
(committed) when the rate is about to change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext

import numpy as np
import pandas as pd

from cdp_engine.data.constants import RAY, SECONDS_PER_YEAR, WAD
from cdp_engine.protocol.errors import InvalidAmountError
from cdp_engine.protocol.fixed_point import from_ray, from_wad, rmul, rpow

logger = logging.getLogger(__name__)


def accrue(principal: int, rate_per_second: int, seconds: int) -> int:
    """Compound *principal* at *rate_per_second* (ray) for *seconds*.

    ``accrue(p, r, s) = rmul(p, rpow(r, s))``; the result has the scale of
    *principal*.
    """
    return rmul(principal, rpow(rate_per_second, seconds))


def annual_rate_to_per_second(annual_rate: float | str | Decimal) -> int:
    """Convert an effective annual rate (e.g. ``0.05``) to a per-second ray.

    Solves ``r ** SECONDS_PER_YEAR == 1 + annual_rate`` for ``r``.
    """
    with localcontext() as ctx:
        ctx.prec = 60
        growth = Decimal(1) + Decimal(str(annual_rate))
        if growth < 1:
            raise InvalidAmountError(f"annual rate must be non-negative, got {annual_rate}")
        per_second = (growth.ln() / SECONDS_PER_YEAR).exp()
        return int(per_second * RAY)


def per_second_to_annual_rate(rate_per_second: int) -> float:
    """Effective annual rate implied by a per-second ray rate."""
    return from_ray(rpow(rate_per_second, SECONDS_PER_YEAR)) - 1.0


def accrual_curve(
    rate_per_second: int,
    horizon_days: int = 365,
    n_points: int = 200,
) -> pd.DataFrame:
    """Growth of a unit index over time, for plotting or inspection.

    Returns:
        DataFrame with columns: days, seconds, index, growth
    """
    days = np.linspace(0, horizon_days, n_points)
    seconds = (days * 86_400).astype(np.int64)
    index = [from_wad(accrue(WAD, rate_per_second, int(s))) for s in seconds]

    return pd.DataFrame(
        {
            "days": days,
            "seconds": seconds,
            "index": index,
            "growth": np.asarray(index) - 1.0,
        }
    )


@dataclass
class GlobalState:
    """Mutable accumulator state.

    Attributes:
        interest_rate_per_second: Compounding rate, ray-scaled.
        global_interest_index: Cumulative factor since genesis, wad-scaled.
        last_update_time: Second at which the index was last committed.
    """

    interest_rate_per_second: int = RAY
    global_interest_index: int = WAD
    last_update_time: int = 0


class InterestAccumulator:
    """Lazily compounding global interest index."""

    def __init__(self, rate_per_second: int = RAY, start_time: int = 0) -> None:
        _validate_rate(rate_per_second)
        self.state = GlobalState(
            interest_rate_per_second=rate_per_second,
            global_interest_index=WAD,
            last_update_time=start_time,
        )

    @property
    def rate_per_second(self) -> int:
        return self.state.interest_rate_per_second

    @property
    def last_update_time(self) -> int:
        return self.state.last_update_time

    def current_global_index(self, now: int) -> int:
        """Index as of *now*, without writing it back.

        A clock reading earlier than the last commit counts as zero elapsed
        time, so the index can never decrease.
        """
        s = self.state
        elapsed = now - s.last_update_time
        if elapsed <= 0:
            return s.global_interest_index
        return accrue(s.global_interest_index, s.interest_rate_per_second, elapsed)

    def commit_global_accrual(self, now: int) -> int:
        """Materialize the index at *now*. Idempotent within one second."""
        s = self.state
        if now > s.last_update_time:
            index = self.current_global_index(now)
            s.global_interest_index = index
            s.last_update_time = now
        return s.global_interest_index

    def set_rate(self, new_rate: int, now: int) -> None:
        """Lock in accrual under the old rate, then switch to *new_rate*."""
        _validate_rate(new_rate)
        old_rate = self.state.interest_rate_per_second
        self.commit_global_accrual(now)
        self.state.interest_rate_per_second = new_rate
        logger.info(
            "Interest rate changed from %d to %d at t=%d (index=%d)",
            old_rate,
            new_rate,
            now,
            self.state.global_interest_index,
        )


def _validate_rate(rate_per_second: int) -> None:
    # Rates below 1.0 would shrink the index.
    if rate_per_second < RAY:
        raise InvalidAmountError(
            f"rate per second must be at least 1.0 (RAY), got {rate_per_second}"
        )
