"""Tests for engine configuration and clocks."""

import pytest

from cdp_engine.data.constants import LIQUIDATE_LTV, RAY, TAKE_LOAN_LTV, WAD
from cdp_engine.protocol.clock import ManualClock, SystemClock
from cdp_engine.protocol.config import EngineConfig
from cdp_engine.protocol.interest_rate import annual_rate_to_per_second


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("CDP_TAKE_LOAN_LTV", "CDP_LIQUIDATE_LTV", "CDP_ANNUAL_RATE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.take_loan_ltv == TAKE_LOAN_LTV == 15 * 10**17
        assert config.liquidate_ltv == LIQUIDATE_LTV == 11 * 10**17
        assert config.initial_rate_per_second == RAY

    def test_liquidation_params(self) -> None:
        params = EngineConfig(take_loan_ltv=2 * WAD).liquidation_params
        assert params.take_loan_ltv == 2 * WAD
        assert params.liquidate_ltv == LIQUIDATE_LTV

    def test_liquidate_above_take_rejected(self) -> None:
        with pytest.raises(ValueError):
            EngineConfig(take_loan_ltv=12 * 10**17, liquidate_ltv=13 * 10**17)

    def test_shrinking_rate_rejected(self) -> None:
        with pytest.raises(ValueError):
            EngineConfig(initial_rate_per_second=RAY - 1)

    def test_from_env_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        assert EngineConfig.from_env() == EngineConfig()

    def test_from_env_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("CDP_TAKE_LOAN_LTV", "1.75")
        clean_env.setenv("CDP_LIQUIDATE_LTV", "1.25")
        clean_env.setenv("CDP_ANNUAL_RATE", "0.05")
        config = EngineConfig.from_env()
        assert config.take_loan_ltv == 175 * 10**16
        assert config.liquidate_ltv == 125 * 10**16
        assert config.initial_rate_per_second == annual_rate_to_per_second("0.05")

    def test_from_env_invalid(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("CDP_LIQUIDATE_LTV", "0.9")
        with pytest.raises(ValueError):
            EngineConfig.from_env()


class TestClocks:
    def test_manual_clock_advance(self) -> None:
        clock = ManualClock(100)
        clock.advance(5)
        assert clock.now() == 105

    def test_manual_clock_set(self) -> None:
        clock = ManualClock(100)
        clock.set(200)
        assert clock.now() == 200

    def test_manual_clock_never_goes_back(self) -> None:
        clock = ManualClock(100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(99)

    def test_system_clock_is_integer_seconds(self) -> None:
        now = SystemClock().now()
        assert isinstance(now, int)
        assert now > 1_600_000_000
