"""Engine configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from cdp_engine.data.constants import LIQUIDATE_LTV, RAY, TAKE_LOAN_LTV
from cdp_engine.protocol.fixed_point import to_wad
from cdp_engine.protocol.interest_rate import annual_rate_to_per_second
from cdp_engine.protocol.liquidation import LiquidationParams, validate_params

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Static parameters of an accounting engine.

    Attributes:
        take_loan_ltv: Collateral-to-debt ratio required to borrow (wad).
        liquidate_ltv: Ratio below which a position can be liquidated (wad).
        initial_rate_per_second: Starting compounding rate (ray).
    """

    take_loan_ltv: int = TAKE_LOAN_LTV
    liquidate_ltv: int = LIQUIDATE_LTV
    initial_rate_per_second: int = RAY

    def __post_init__(self) -> None:
        validate_params(self.liquidation_params)
        if self.initial_rate_per_second < RAY:
            raise ValueError("initial_rate_per_second must be at least 1.0 (RAY)")

    @property
    def liquidation_params(self) -> LiquidationParams:
        return LiquidationParams(
            take_loan_ltv=self.take_loan_ltv,
            liquidate_ltv=self.liquidate_ltv,
        )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from ``CDP_*`` environment variables.

        ``CDP_TAKE_LOAN_LTV`` and ``CDP_LIQUIDATE_LTV`` are decimal ratios
        (e.g. ``1.5``); ``CDP_ANNUAL_RATE`` is an effective annual rate
        (e.g. ``0.05``). Unset variables keep their defaults.
        """
        kwargs: dict[str, int] = {}
        take = os.environ.get("CDP_TAKE_LOAN_LTV")
        if take:
            kwargs["take_loan_ltv"] = to_wad(take)
        liquidate = os.environ.get("CDP_LIQUIDATE_LTV")
        if liquidate:
            kwargs["liquidate_ltv"] = to_wad(liquidate)
        annual = os.environ.get("CDP_ANNUAL_RATE")
        if annual:
            kwargs["initial_rate_per_second"] = annual_rate_to_per_second(annual)
        if kwargs:
            logger.debug("Engine config overrides from environment: %s", sorted(kwargs))
        return cls(**kwargs)
