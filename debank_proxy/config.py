"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

API_KEY_ENV = "DEBANK_API_KEY"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    cache_control: str = "s-maxage=60, stale-while-revalidate"
    cors_allow_origin: str = "*"


@dataclass(frozen=True)
class DebankConfig:
    base_url: str = "https://pro-openapi.debank.com/v1"
    api_key: str = field(default="", repr=False)
    # Wallet used by the diagnostic endpoints.
    probe_address: str = "0x0fdbe030de89fd11a20ffd48a3d63fb7eec468b1"


@dataclass(frozen=True)
class ReconciliationConfig:
    dust_threshold_usd: float = 0.01


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    debank: DebankConfig = field(default_factory=DebankConfig)
    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=raw.get("host", ServerConfig.host),
        port=int(raw.get("port", ServerConfig.port)),
        cache_control=raw.get("cache_control", ServerConfig.cache_control),
        cors_allow_origin=raw.get("cors_allow_origin", ServerConfig.cors_allow_origin),
    )


def _build_debank(raw: dict[str, Any]) -> DebankConfig:
    api_key = raw.get("api_key") or os.environ.get(API_KEY_ENV, "")
    return DebankConfig(
        base_url=raw.get("base_url", DebankConfig.base_url).rstrip("/"),
        api_key=api_key.strip(),
        probe_address=raw.get("probe_address", DebankConfig.probe_address),
    )


def _build_reconciliation(raw: dict[str, Any]) -> ReconciliationConfig:
    return ReconciliationConfig(
        dust_threshold_usd=float(
            raw.get("dust_threshold_usd", ReconciliationConfig.dust_threshold_usd)
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root; when that default file is absent, built-in defaults
            are used and the API key comes from ``DEBANK_API_KEY``.
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    raw: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _interpolate_env(raw)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    cfg = AppConfig(
        server=_build_server(raw.get("server") or {}),
        debank=_build_debank(raw.get("debank") or {}),
        reconciliation=_build_reconciliation(raw.get("reconciliation") or {}),
    )

    _validate(cfg)
    if raw:
        logger.info("Configuration loaded from %s", config_path)
    else:
        logger.info("No config file found, using defaults")
    if not cfg.debank.api_key:
        logger.warning("%s is not set; API endpoints will answer 500", API_KEY_ENV)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not 0 < cfg.server.port < 65536:
        raise ValueError(f"Invalid server port: {cfg.server.port}")
    if not cfg.debank.base_url.startswith(("http://", "https://")):
        raise ValueError(f"DeBank base_url must be an HTTP(S) URL: {cfg.debank.base_url}")
    if cfg.reconciliation.dust_threshold_usd < 0:
        raise ValueError("dust_threshold_usd must not be negative")
