"""Shared test fixtures and sample data."""
from __future__ import annotations

import json
import textwrap
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from debank_proxy.config import (
    AppConfig,
    DebankConfig,
    ReconciliationConfig,
    ServerConfig,
)
from debank_proxy.models import UpstreamResponse

TEST_API_KEY = "test-access-key-0123456789"
WALLET = "0x5853ed4f26a3fcea565b3fbc698bb19cdf6deb85"

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
UNI = "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984"

# 2025-01-01T00:00:00Z
NOW = 1735689600


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        server=ServerConfig(host="127.0.0.1", port=8080),
        debank=DebankConfig(
            base_url="https://debank.example.com/v1",
            api_key=TEST_API_KEY,
        ),
        reconciliation=ReconciliationConfig(dust_threshold_usd=0.01),
    )


@pytest.fixture()
def keyless_app_config(sample_app_config: AppConfig) -> AppConfig:
    return AppConfig(
        server=sample_app_config.server,
        debank=DebankConfig(base_url=sample_app_config.debank.base_url, api_key=""),
        reconciliation=sample_app_config.reconciliation,
    )


SAMPLE_YAML = textwrap.dedent("""\
    server:
      host: 127.0.0.1
      port: 9000
    debank:
      base_url: "https://debank.example.com/v1/"
      api_key: "yaml-key"
    reconciliation:
      dust_threshold_usd: 0.5
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Fake upstream
# ---------------------------------------------------------------------------


def upstream_json(data: Any, status: int = 200) -> UpstreamResponse:
    return UpstreamResponse(status=status, text=json.dumps(data), content_type="application/json")


def upstream_html(status: int = 200) -> UpstreamResponse:
    return UpstreamResponse(
        status=status,
        text="<html><body>Access denied</body></html>",
        content_type="text/html",
    )


class FakePortfolioApi:
    """In-memory stand-in for DebankClient keyed by upstream path."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, Mapping[str, Any]]] = []

    async def request(self, path: str, params: Mapping[str, Any]) -> UpstreamResponse:
        self.calls.append((path, params.copy()))
        result = self.responses.get(path)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return upstream_json({"error": "not found"}, status=404)
        return result

    def paths(self) -> list[str]:
        return [path for path, _ in self.calls]


@pytest.fixture()
def fake_api() -> FakePortfolioApi:
    return FakePortfolioApi()


# ---------------------------------------------------------------------------
# Sample DeBank payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_token_list() -> list[dict]:
    return [
        {
            "id": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            "chain": "eth",
            "symbol": "USDC",
            "amount": 250.0,
            "price": 1.0,
            "time_at": 1620000000,
            "protocol_id": "",
        },
        {
            "id": "eth",
            "chain": "eth",
            "symbol": "ETH",
            "amount": 1.5,
            "price": 2500.0,
            "time_at": None,
            "protocol_id": "",
        },
        {
            "id": "0xdeadbeef00000000000000000000000000000000",
            "chain": "bsc",
            "symbol": "CAKE",
            "amount": 10.0,
            "price": 2.0,
            "time_at": 1609459200,
            "protocol_id": "pancakeswap",
        },
    ]


@pytest.fixture()
def sample_protocol_list() -> list[dict]:
    return [
        {
            "id": "aave3",
            "chain": "eth",
            "name": "Aave V3",
            "logo_url": "https://static.debank.com/image/project/logo_url/aave3.png",
            "portfolio_item_list": [
                {
                    "name": "Lending",
                    "detail_types": ["lending"],
                    "update_at": 1700000000,
                    "stats": {"net_usd_value": 1500.0},
                    "detail": {
                        "supply_token_list": [
                            {
                                "id": USDC,
                                "optimized_symbol": "USDC",
                                "amount": 2000.0,
                                "price": 1.0,
                                "time_at": 1650000000,
                            }
                        ],
                        "borrow_token_list": [
                            {"id": "eth", "symbol": "ETH", "amount": 0.25, "price": 2500.0}
                        ],
                    },
                }
            ],
        },
        {
            "id": "uniswap3",
            "chain": "eth",
            "name": "Uniswap V3",
            "logo_url": None,
            "portfolio_item_list": [
                {
                    "name": "Liquidity Pool",
                    "detail_types": ["common"],
                    "update_at": 1690000000,
                    "stats": {"net_usd_value": 120.3},
                    "detail": {
                        "supply_token_list": [
                            {
                                "id": USDC,
                                "symbol": "USDC",
                                "amount": 60.0,
                                "price": 1.0,
                                "time_at": 1600000000,
                            },
                            {"id": "eth", "symbol": "ETH", "amount": 0.024, "price": 2500.0},
                        ],
                        "reward_token_list": [
                            {"id": UNI, "symbol": "UNI", "amount": 0.001, "price": 5.0}
                        ],
                    },
                }
            ],
        },
    ]
