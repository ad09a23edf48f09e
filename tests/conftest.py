"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from helpers import ALICE, BOB, CONTROLLER, NOW, TREASURY, FakeFeed
from issuance.assets import InMemoryToken, NativeAssetMover, NativeLedger, TokenAssetMover
from issuance.models import NATIVE_ASSET, OracleBinding
from issuance.oracles.validator import OracleValidator
from issuance.services.controller import IssuanceController

# ---------------------------------------------------------------------------
# Price feeds
# ---------------------------------------------------------------------------


@pytest.fixture()
def validator() -> OracleValidator:
    return OracleValidator(clock=lambda: NOW)


@pytest.fixture()
def usdc_feed() -> FakeFeed:
    # $1.00 with 8 feed decimals
    return FakeFeed(answer=100_000_000)


@pytest.fixture()
def native_feed() -> FakeFeed:
    # $2000.00 with 8 feed decimals
    return FakeFeed(answer=200_000_000_000)


# ---------------------------------------------------------------------------
# Assets and controller
# ---------------------------------------------------------------------------


@pytest.fixture()
def native_ledger() -> NativeLedger:
    return NativeLedger({ALICE: 10 * 10**18, BOB: 10 * 10**18})


@pytest.fixture()
def usdc() -> InMemoryToken:
    token = InMemoryToken("USD Coin", "USDC", decimals=6, balances={ALICE: 10**12, BOB: 10**12})
    token.approve(ALICE, CONTROLLER, 10**12)
    token.approve(BOB, CONTROLLER, 10**12)
    return token


@pytest.fixture()
def make_controller(
    validator: OracleValidator,
    native_ledger: NativeLedger,
    usdc: InMemoryToken,
    usdc_feed: FakeFeed,
    native_feed: FakeFeed,
) -> Callable[..., IssuanceController]:
    def _make(
        issuance_cap: int = 10**30,
        conversion_rate: int = 10**18,
        staleness_threshold: int = 3600,
    ) -> IssuanceController:
        return IssuanceController(
            address=CONTROLLER,
            name="Backed Claim",
            symbol="BCLM",
            issuance_cap=issuance_cap,
            conversion_rate=conversion_rate,
            accepted_assets=[NATIVE_ASSET, "usdc"],
            oracle_bindings=[
                OracleBinding(native_feed, staleness_threshold=staleness_threshold),
                OracleBinding(usdc_feed, staleness_threshold=staleness_threshold),
            ],
            treasury=TREASURY,
            movers={
                NATIVE_ASSET: NativeAssetMover(native_ledger, CONTROLLER),
                "usdc": TokenAssetMover(usdc, CONTROLLER),
            },
            validator=validator,
        )

    return _make


@pytest.fixture()
def controller(make_controller: Callable[..., IssuanceController]) -> IssuanceController:
    return make_controller()


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    token:
      name: Backed Claim
      symbol: BCLM
    issuance_cap: "1000000000000000000000000"
    conversion_rate: 1000000000000000000
    treasury: "0xTREASURY"
    assets:
      - asset: native
        decimals: 18
        feed:
          url: "https://feeds.example.com/eth-usd"
          decimals: 8
        staleness_threshold: 3600
        liveness_guard:
          url: "https://feeds.example.com/uptime"
          decimals: 0
      - asset: usdc
        decimals: 6
        feed:
          url: "https://feeds.example.com/usdc-usd"
        staleness_threshold: 86400
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
