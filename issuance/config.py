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

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeedConfig:
    url: str = ""
    decimals: int = 8
    timeout: int = 10


@dataclass(frozen=True)
class AssetConfig:
    asset: str = ""
    decimals: int = 18
    feed: FeedConfig = field(default_factory=FeedConfig)
    staleness_threshold: int = 0
    liveness_guard: FeedConfig | None = None


@dataclass(frozen=True)
class TokenConfig:
    name: str = ""
    symbol: str = ""


@dataclass(frozen=True)
class DeploymentConfig:
    token: TokenConfig = field(default_factory=TokenConfig)
    issuance_cap: int = 0
    conversion_rate: int = 0
    treasury: str = ""
    assets: tuple[AssetConfig, ...] = ()

    def asset(self, name: str) -> AssetConfig | None:
        for a in self.assets:
            if a.asset == name:
                return a
        return None


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


def _build_feed(raw: dict[str, Any]) -> FeedConfig:
    return FeedConfig(
        url=raw.get("url", ""),
        decimals=int(raw.get("decimals", 8)),
        timeout=int(raw.get("timeout", 10)),
    )


def _build_assets(raw: list[dict[str, Any]]) -> tuple[AssetConfig, ...]:
    assets: list[AssetConfig] = []
    for a in raw:
        guard_raw = a.get("liveness_guard")
        assets.append(
            AssetConfig(
                asset=str(a.get("asset", "")),
                decimals=int(a.get("decimals", 18)),
                feed=_build_feed(a.get("feed", {})),
                staleness_threshold=int(a.get("staleness_threshold", 0)),
                liveness_guard=_build_feed(guard_raw) if guard_raw else None,
            )
        )
    return tuple(assets)


def _build_deployment(raw: dict[str, Any]) -> DeploymentConfig:
    token = raw.get("token", {})
    return DeploymentConfig(
        token=TokenConfig(
            name=token.get("name", ""),
            symbol=token.get("symbol", ""),
        ),
        # Large integers may arrive as strings after env interpolation.
        issuance_cap=int(raw.get("issuance_cap", 0)),
        conversion_rate=int(raw.get("conversion_rate", 0)),
        treasury=raw.get("treasury", "") or "",
        assets=_build_assets(raw.get("assets", [])),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> DeploymentConfig:
    """Load and validate deployment configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = _build_deployment(raw)

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: DeploymentConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.token.name or not cfg.token.symbol:
        raise ValueError("Token name and symbol must be configured")
    if cfg.issuance_cap <= 0:
        raise ValueError("issuance_cap must be positive")
    if cfg.conversion_rate <= 0:
        raise ValueError("conversion_rate must be positive")
    if not cfg.treasury:
        raise ValueError("treasury must be configured")
    if not cfg.assets:
        raise ValueError("At least one accepted asset must be configured")

    seen: set[str] = set()
    for a in cfg.assets:
        if not a.asset:
            raise ValueError("Accepted asset entry has no asset identifier")
        if a.asset in seen:
            raise ValueError(f"Asset '{a.asset}' is configured more than once")
        seen.add(a.asset)
        if not a.feed.url:
            raise ValueError(f"Asset '{a.asset}' has no price feed url")
        if a.staleness_threshold < 0:
            raise ValueError(
                f"Asset '{a.asset}' has a negative staleness threshold"
            )
