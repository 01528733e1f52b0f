"""On-chain price oracle reading a Chainlink aggregator via web3.py."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from cdp_engine.data.constants import ETH_USD, WAD
from cdp_engine.data.contracts import CHAINLINK_FEED_ABI, CHAINLINK_FEEDS
from cdp_engine.data.interfaces import PriceOracle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# TTL cache
# ---------------------------------------------------------------------------

class _TTLCache:
    """Simple dict-based cache with per-entry TTL expiry."""

    def __init__(self, ttl: float) -> None:
        self._ttl = ttl
        self._store: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        ts, value = entry
        if time.monotonic() - ts > self._ttl:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._store[key] = (time.monotonic(), value)

    def clear(self) -> None:
        self._store.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _answer_to_wad(answer: int, decimals: int) -> int:
    """Rescale a Chainlink answer with *decimals* places to 18 places."""
    if answer < 0:
        raise ValueError(f"negative oracle answer: {answer}")
    if decimals <= 18:
        return answer * 10 ** (18 - decimals)
    return answer // 10 ** (decimals - 18)


# ---------------------------------------------------------------------------
# ChainlinkPriceOracle
# ---------------------------------------------------------------------------

class ChainlinkPriceOracle(PriceOracle):
    """Live price oracle backed by a Chainlink aggregator.

    Parameters
    ----------
    rpc_url : str
        Ethereum JSON-RPC endpoint URL.
    feed : str
        Feed identifier, a key of ``CHAINLINK_FEEDS`` (default ``ETH/USD``).
    cache_ttl : float
        Seconds before a cached price expires (default 60).
    fallback : PriceOracle | None
        Optional oracle used when the RPC call fails.
    """

    def __init__(
        self,
        rpc_url: str,
        feed: str = ETH_USD,
        cache_ttl: float = 60.0,
        fallback: PriceOracle | None = None,
    ) -> None:
        from web3 import Web3

        address = CHAINLINK_FEEDS.get(feed)
        if address is None:
            raise ValueError(f"Unknown feed: {feed}")

        self.feed = feed
        self._w3 = Web3(Web3.HTTPProvider(rpc_url))
        self._cache = _TTLCache(cache_ttl)
        self._fallback = fallback

        # No RPC calls here
        self._aggregator = self._w3.eth.contract(
            address=self._w3.to_checksum_address(address),
            abi=CHAINLINK_FEED_ABI,
        )
        self._decimals: int | None = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call_with_fallback(
        self,
        cache_key: str,
        fetcher: Callable[[], Any],
        fallback_method: Callable[[], Any] | None,
    ) -> Any:
        """Cache → RPC → fallback pipeline."""
        # 1. Cache hit
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        # 2. RPC call
        try:
            value = fetcher()
            self._cache.set(cache_key, value)
            return value
        except Exception:
            logger.warning(
                "RPC call failed for key=%s, using fallback", cache_key, exc_info=True
            )

        # 3. Fallback
        if fallback_method is not None:
            return fallback_method()

        raise RuntimeError(f"RPC call failed and no fallback available for {cache_key}")

    def _feed_decimals(self) -> int:
        if self._decimals is None:
            self._decimals = int(self._aggregator.functions.decimals().call())
        return self._decimals

    # ------------------------------------------------------------------
    # PriceOracle interface
    # ------------------------------------------------------------------

    def current_price(self) -> int:
        def _fetch() -> int:
            round_data = self._aggregator.functions.latestRoundData().call()
            return _answer_to_wad(int(round_data[1]), self._feed_decimals())

        fb = self._fallback.current_price if self._fallback else None
        return self._call_with_fallback(f"price:{self.feed}", _fetch, fb)

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Invalidate the cached price, forcing a fresh RPC call."""
        self._cache.clear()

    @property
    def is_connected(self) -> bool:
        """Check if the Web3 provider is connected."""
        try:
            return self._w3.is_connected()
        except Exception:
            return False
