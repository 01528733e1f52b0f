"""Live on-chain integration tests; require ETH_RPC_URL."""

from __future__ import annotations

import os

import pytest

from cdp_engine.data.constants import ETH_USD, STETH_ETH, WAD
from cdp_engine.data.onchain_oracle import ChainlinkPriceOracle
from cdp_engine.data.provider_factory import create_oracle

pytestmark = pytest.mark.onchain

RPC_URL = os.environ.get("ETH_RPC_URL", "")

if not RPC_URL:
    pytest.skip("ETH_RPC_URL not set", allow_module_level=True)


@pytest.fixture(scope="module")
def eth_usd() -> ChainlinkPriceOracle:
    return ChainlinkPriceOracle(rpc_url=RPC_URL, feed=ETH_USD, cache_ttl=300.0)


class TestConnection:
    def test_is_connected(self, eth_usd: ChainlinkPriceOracle):
        assert eth_usd.is_connected is True


class TestPrices:
    def test_eth_usd_in_plausible_range(self, eth_usd: ChainlinkPriceOracle):
        price = eth_usd.current_price()
        assert 100 * WAD < price < 100_000 * WAD

    def test_steth_eth_near_peg(self):
        oracle = ChainlinkPriceOracle(rpc_url=RPC_URL, feed=STETH_ETH)
        price = oracle.current_price()
        assert 90 * WAD // 100 < price < 105 * WAD // 100

    def test_factory_returns_live_oracle(self):
        oracle = create_oracle(use_onchain=True, rpc_url=RPC_URL)
        assert isinstance(oracle, ChainlinkPriceOracle)
        assert oracle.current_price() > 0
