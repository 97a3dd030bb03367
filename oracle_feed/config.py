"""Feed configuration: raw feed documents, durations and validation."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import OracleType

logger = logging.getLogger(__name__)

DEFAULT_PULL_INTERVAL = timedelta(minutes=1)
MIN_PULL_INTERVAL = timedelta(seconds=1)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeedConfig:
    """One feed exactly as written in the config file (all strings)."""

    provider: str = ""
    ticker: str = ""
    pull_interval: str = ""
    url: str = ""
    header: str = ""
    message: str = ""
    oracle_type: str = ""


@dataclass(frozen=True)
class ProviderConfig:
    """Validated description of one price feed."""

    ticker: str
    provider_name: str
    pull_interval: timedelta
    endpoint: str
    auth_credential: str
    subscription_payload: str
    oracle_type: OracleType = OracleType.PRICE_FEED

    @classmethod
    def from_feed_config(cls, cfg: FeedConfig) -> ProviderConfig:
        """Validate a raw feed into a ProviderConfig.

        Raises:
            ConfigError: on a bad pull interval or an unknown oracle type.
        """
        return cls(
            ticker=cfg.ticker,
            provider_name=cfg.provider,
            pull_interval=_resolve_interval(cfg.pull_interval),
            endpoint=cfg.url,
            auth_credential=cfg.header,
            subscription_payload=cfg.message,
            oracle_type=_resolve_oracle_type(cfg.oracle_type),
        )


# ---------------------------------------------------------------------------
# Durations ("60s", "1m30s", "1.5h", "300ms")
# ---------------------------------------------------------------------------

_DURATION_RE = re.compile(r"([0-9]*(?:\.[0-9]*)?)([a-zµμ]+)")

_UNIT_MICROSECONDS: dict[str, Decimal] = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1_000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}


def parse_duration(text: str) -> timedelta:
    """Parse a duration string: decimal numbers, each with a unit suffix.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m``, ``h``.
    A bare ``"0"`` is accepted. Sub-microsecond precision is truncated.

    Raises:
        ValueError: if the string is not a duration.
    """
    s = text
    sign = 1
    if s[:1] in ("-", "+"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(s):
        match = _DURATION_RE.match(s, pos)
        if not match or match.end() == pos:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f"invalid duration {text!r}")
        if unit not in _UNIT_MICROSECONDS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        total += Decimal(number) * _UNIT_MICROSECONDS[unit]
        pos = match.end()

    return timedelta(microseconds=int(sign * total))


def _resolve_interval(raw: str) -> timedelta:
    if not raw:
        return DEFAULT_PULL_INTERVAL

    try:
        interval = parse_duration(raw)
    except (ValueError, OverflowError) as e:
        raise ConfigError(
            f"failed to parse pull interval: {raw} (expected format: 60s)",
            reason="invalid-interval",
            details={"pull_interval": raw, "error": str(e)},
        ) from e

    if interval < MIN_PULL_INTERVAL:
        raise ConfigError(
            f"failed to parse pull interval: {raw} (minimum interval = 1s)",
            reason="invalid-interval",
            details={"pull_interval": raw},
        )
    return interval


def _resolve_oracle_type(raw: str) -> OracleType:
    if not raw:
        return OracleType.PRICE_FEED
    try:
        return OracleType.from_name(raw)
    except KeyError:
        raise ConfigError(
            f"oracle type does not exist: {raw}",
            reason="unknown-oracle-type",
            details={"oracle_type": raw},
        ) from None


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


def _text(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def _build_feed(raw: dict[str, Any]) -> FeedConfig:
    if not isinstance(raw, dict):
        raise ConfigError(
            f"feed entry must be a mapping, got {type(raw).__name__}",
            reason="invalid-document",
        )
    return FeedConfig(
        provider=_text(raw, "provider"),
        ticker=_text(raw, "ticker"),
        pull_interval=_text(raw, "pullInterval"),
        url=_text(raw, "url"),
        header=_text(raw, "header"),
        message=_text(raw, "message"),
        oracle_type=_text(raw, "oracleType"),
    )


def _safe_load(body: str | bytes) -> Any:
    try:
        return yaml.safe_load(body)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"failed to parse feed config: {e}", reason="invalid-document"
        ) from e


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_feed_config(body: str | bytes) -> FeedConfig:
    """Parse a single feed document."""
    raw = _safe_load(body) or {}
    return _build_feed(_interpolate_env(raw))


def load_feed_configs(config_path: str | Path | None = None) -> tuple[FeedConfig, ...]:
    """Load feed definitions from YAML + .env.

    The file holds either a single feed mapping or a ``feeds:`` list.

    Args:
        config_path: Path to the feeds file. Defaults to ``feeds.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "feeds.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = _safe_load(f.read()) or {}

    raw = _interpolate_env(raw)

    if isinstance(raw, dict) and "feeds" in raw:
        entries = raw["feeds"] or []
        if not isinstance(entries, list):
            raise ConfigError("'feeds' must be a list", reason="invalid-document")
        feeds = tuple(_build_feed(entry) for entry in entries)
    else:
        feeds = (_build_feed(raw),)

    logger.info("Loaded %d feed(s) from %s", len(feeds), config_path)
    return feeds
