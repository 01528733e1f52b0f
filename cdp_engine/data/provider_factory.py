"""Factory for creating the appropriate PriceOracle."""

from __future__ import annotations

import logging
import os

from cdp_engine.data.constants import ETH_USD
from cdp_engine.data.interfaces import PriceOracle
from cdp_engine.data.static_collaborators import StaticPriceOracle

logger = logging.getLogger(__name__)


def create_oracle(
    use_onchain: bool = False,
    rpc_url: str | None = None,
    feed: str = ETH_USD,
    cache_ttl: float = 60.0,
) -> PriceOracle:
    """Create a price oracle, selecting static or on-chain.

    Parameters
    ----------
    use_onchain : bool
        If True, attempt to create a ``ChainlinkPriceOracle``.
    rpc_url : str | None
        Ethereum JSON-RPC URL.  Falls back to the ``ETH_RPC_URL``
        environment variable when not supplied.
    feed : str
        Price feed identifier (default ``ETH/USD``).
    cache_ttl : float
        TTL in seconds for the on-chain cache (default 60).

    Returns
    -------
    PriceOracle
        ``ChainlinkPriceOracle`` when requested and available, otherwise
        ``StaticPriceOracle``.
    """
    if not use_onchain:
        return StaticPriceOracle(feed)

    resolved_url = rpc_url or os.environ.get("ETH_RPC_URL")
    if not resolved_url:
        logger.warning("On-chain oracle requested but no RPC URL provided; using static price")
        return StaticPriceOracle(feed)

    try:
        from cdp_engine.data.onchain_oracle import ChainlinkPriceOracle

        # No fallback: a failed price read must abort the engine call.
        return ChainlinkPriceOracle(
            rpc_url=resolved_url,
            feed=feed,
            cache_ttl=cache_ttl,
        )
    except Exception:
        logger.warning("Failed to create ChainlinkPriceOracle; using static price", exc_info=True)
        return StaticPriceOracle(feed)
