"""Shared fixtures: an engine wired to in-memory collaborators."""

import pytest

from cdp_engine.data.constants import WAD
from cdp_engine.data.static_collaborators import (
    AllowlistAdminGate,
    InMemoryCollateralVault,
    InMemoryDebtToken,
    StaticPriceOracle,
)
from cdp_engine.protocol.clock import ManualClock
from cdp_engine.protocol.engine import AccountingEngine
from identities import ADMIN

START_TIME = 1_700_000_000


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START_TIME)


@pytest.fixture
def oracle() -> StaticPriceOracle:
    return StaticPriceOracle(price=3_000 * WAD)


@pytest.fixture
def token() -> InMemoryDebtToken:
    return InMemoryDebtToken()


@pytest.fixture
def vault() -> InMemoryCollateralVault:
    return InMemoryCollateralVault()


@pytest.fixture
def engine(
    clock: ManualClock,
    oracle: StaticPriceOracle,
    token: InMemoryDebtToken,
    vault: InMemoryCollateralVault,
) -> AccountingEngine:
    return AccountingEngine(
        oracle=oracle,
        debt_token=token,
        collateral=vault,
        admin_gate=AllowlistAdminGate({ADMIN}),
        clock=clock,
    )
