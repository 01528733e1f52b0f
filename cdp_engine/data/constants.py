"""Fixed-point units and protocol constants."""

# Wad (1e18): amounts, ratios and the global interest index
WAD = 10**18
# Ray (1e27): per-second interest rates
RAY = 10**27
WAD_RAY_RATIO = 10**9

# Largest value an intermediate product may reach (uint256)
UINT256_MAX = 2**256 - 1

# Collateral required to open a loan: 150% of debt value
TAKE_LOAN_LTV = 15 * 10**17
# Collateral below 110% of debt value can be liquidated
LIQUIDATE_LTV = 11 * 10**17

SECONDS_PER_YEAR = 365 * 24 * 3600

# Oracle feed identifiers
ETH_USD = "ETH/USD"
STETH_ETH = "stETH/ETH"
