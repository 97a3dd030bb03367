"""Shared test fixtures and sample data."""
from __future__ import annotations

import json
import textwrap
from datetime import timedelta
from pathlib import Path
from typing import Any

import pytest

from oracle_feed.config import FeedConfig, ProviderConfig
from oracle_feed.models import OracleType
from tests.helpers import (
    SIG_R1,
    SIG_R2,
    SIG_S1,
    SIG_S2,
    SIG_V1,
    SIG_V2,
    make_asset,
    make_envelope,
    make_signed_price,
)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_feed_config() -> FeedConfig:
    return FeedConfig(
        provider="stork",
        ticker="BTCUSD",
        pull_interval="30s",
        url="wss://stork.example.com/evm/subscribe",
        header="user:secret",
        message='{"type":"subscribe","data":["BTCUSD"]}',
        oracle_type="Stork",
    )


@pytest.fixture()
def sample_provider_config() -> ProviderConfig:
    return ProviderConfig(
        ticker="BTCUSD",
        provider_name="stork",
        pull_interval=timedelta(seconds=30),
        endpoint="wss://stork.example.com/evm/subscribe",
        auth_credential="user:secret",
        subscription_payload='{"type":"subscribe","data":["BTCUSD"]}',
        oracle_type=OracleType.STORK,
    )


SAMPLE_YAML = textwrap.dedent("""\
    feeds:
      - provider: stork
        ticker: BTCUSD
        pullInterval: 30s
        url: "wss://stork.example.com/evm/subscribe"
        header: "user:secret"
        message: '{"type":"subscribe","data":["BTCUSD"]}'
        oracleType: Stork
      - provider: stork
        ticker: ETHUSD
        url: "wss://stork.example.com/evm/subscribe"
        header: "user:secret"
        message: '{"type":"subscribe","data":["ETHUSD"]}'
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "feeds.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Provider frames
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_envelope() -> dict[str, Any]:
    return make_envelope(
        {
            "BTCUSD": make_asset(
                "BTCUSD",
                [
                    make_signed_price(
                        "0xpub1",
                        "67000.1234000000000000001",
                        SIG_R1,
                        SIG_S1,
                        SIG_V1,
                        1718000000000000001,
                    ),
                    make_signed_price(
                        "0xpub2",
                        "66999.9",
                        SIG_R2,
                        SIG_S2,
                        SIG_V2,
                        1718000000000000002,
                    ),
                ],
            )
        }
    )


@pytest.fixture()
def ack_frame() -> str:
    return json.dumps({"type": "subscribe", "trace_id": "trace-1", "data": None})
