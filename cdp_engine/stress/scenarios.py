"""Stress scenario definitions, historical and custom."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StressScenario:
    """A collateral price shock held over a period of interest accrual.

    Attributes:
        name: Short identifier.
        description: Human-readable explanation.
        price_change: Fractional collateral price change (e.g. -0.40 = -40%).
        duration_days: Days of interest accrual before the shocked price is read.
    """

    name: str
    description: str
    price_change: float
    duration_days: int


# --- Historical scenarios ---

MARCH_2020_BLACK_THURSDAY = StressScenario(
    name="March 2020 Black Thursday",
    description="COVID crash: ETH fell ~50% in 24 hours. "
    "Keepers struggled to liquidate as gas prices spiked.",
    price_change=-0.50,
    duration_days=1,
)

MAY_2022_TERRA_LUNA = StressScenario(
    name="May 2022 Terra/Luna",
    description="UST depeg and Luna collapse. ETH dropped ~35% over a week.",
    price_change=-0.35,
    duration_days=7,
)

JUNE_2022_CELSIUS = StressScenario(
    name="June 2022 Celsius/3AC",
    description="Lender insolvencies. ETH dropped ~40% over two weeks.",
    price_change=-0.40,
    duration_days=14,
)

NOVEMBER_2022_FTX = StressScenario(
    name="November 2022 FTX",
    description="Exchange collapse. ETH dropped ~25% within days.",
    price_change=-0.25,
    duration_days=5,
)

HISTORICAL_SCENARIOS = [
    MARCH_2020_BLACK_THURSDAY,
    MAY_2022_TERRA_LUNA,
    JUNE_2022_CELSIUS,
    NOVEMBER_2022_FTX,
]


def create_custom_scenario(
    name: str,
    price_change: float,
    duration_days: int = 7,
    description: str = "Custom scenario",
) -> StressScenario:
    """Factory for user-defined stress scenarios."""
    if price_change <= -1.0:
        raise ValueError(f"price_change must be above -1.0, got {price_change}")
    if duration_days < 0:
        raise ValueError(f"duration_days must be non-negative, got {duration_days}")
    return StressScenario(
        name=name,
        description=description,
        price_change=price_change,
        duration_days=duration_days,
    )
