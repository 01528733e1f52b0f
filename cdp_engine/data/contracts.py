"""Chainlink aggregator addresses and the minimal ABI used to read prices."""

from cdp_engine.data.constants import ETH_USD, STETH_ETH

# ---------------------------------------------------------------------------
# Chainlink price feeds (Ethereum mainnet)
# ---------------------------------------------------------------------------
CHAINLINK_FEEDS: dict[str, str] = {
    ETH_USD: "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419",
    STETH_ETH: "0x86392dC19c0b719886221c78AB11eb8Cf5c52812",
}

# ---------------------------------------------------------------------------
# Minimal ABI: only the view functions we call
# ---------------------------------------------------------------------------

CHAINLINK_FEED_ABI = [
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"name": "roundId", "type": "uint80"},
            {"name": "answer", "type": "int256"},
            {"name": "startedAt", "type": "uint256"},
            {"name": "updatedAt", "type": "uint256"},
            {"name": "answeredInRound", "type": "uint80"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]
