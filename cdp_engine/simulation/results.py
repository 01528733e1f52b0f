"""Result dataclasses for simulation outputs."""

from dataclasses import dataclass

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class DriftResult:
    """Results from a solvency drift simulation.

    Attributes:
        price_paths: (n_paths, n_steps) array of collateral price.
        debt_paths: (n_paths, n_steps) array of accrued debt (debt-asset units).
        hf_paths: (n_paths, n_steps) array of health factor.
        liquidated: (n_paths,) boolean array, True if the position was liquidated.
        liquidation_step: (n_paths,) index of the liquidation step, -1 if none.
        timesteps: (n_steps,) array of time in days.
    """

    price_paths: np.ndarray
    debt_paths: np.ndarray
    hf_paths: np.ndarray
    liquidated: np.ndarray
    liquidation_step: np.ndarray
    timesteps: np.ndarray

    @property
    def liquidation_probability(self) -> float:
        return float(np.mean(self.liquidated))

    def summary(self) -> pd.DataFrame:
        """Per-path outcome table.

        Returns:
            DataFrame with columns: liquidated, liquidation_day, final_price,
            final_debt, min_health_factor
        """
        days = np.where(
            self.liquidated,
            self.timesteps[np.clip(self.liquidation_step, 0, None)],
            np.nan,
        )
        return pd.DataFrame(
            {
                "liquidated": self.liquidated,
                "liquidation_day": days,
                "final_price": self.price_paths[:, -1],
                "final_debt": self.debt_paths[:, -1],
                "min_health_factor": np.min(self.hf_paths, axis=1),
            }
        )
