"""Stork signed-price puller."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import Any

from ..config import FeedConfig, ProviderConfig
from ..converter import convert_asset_record
from ..decoder import decode_envelope, select_asset
from ..errors import PricePullError
from ..metrics import NoopMetrics, PullMetrics
from ..models import AssetPair, FeedProvider, OracleType
from ..transport import StorkSession

logger = logging.getLogger(__name__)


class StorkPriceFeed:
    """Pull one batch of publisher-signed prices from Stork per call."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        log: logging.Logger | logging.LoggerAdapter[Any] | None = None,
        metrics: PullMetrics | None = None,
    ) -> None:
        self._config = config
        self._log = log or logging.LoggerAdapter(
            logger,
            {"svc": "oracle", "dynamic": True, "provider": config.provider_name},
        )
        self._metrics: PullMetrics = metrics or NoopMetrics()

    @classmethod
    def from_feed_config(
        cls,
        cfg: FeedConfig,
        *,
        log: logging.Logger | logging.LoggerAdapter[Any] | None = None,
        metrics: PullMetrics | None = None,
    ) -> StorkPriceFeed:
        """Validate a raw feed and build its puller.

        Raises:
            ConfigError: if the feed is invalid.
        """
        return cls(ProviderConfig.from_feed_config(cfg), log=log, metrics=metrics)

    @property
    def interval(self) -> timedelta:
        return self._config.pull_interval

    @property
    def symbol(self) -> str:
        return self._config.ticker

    @property
    def provider(self) -> FeedProvider:
        return FeedProvider.STORK

    @property
    def provider_name(self) -> str:
        return self._config.provider_name

    @property
    def oracle_type(self) -> OracleType:
        return self._config.oracle_type

    async def pull_asset_pair(
        self,
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> AssetPair:
        """Pull and convert the signed prices for this feed's ticker.

        Args:
            cancel: Optional event; setting it aborts the pull between or
                during its blocking steps.
            timeout: Optional budget in seconds for the whole pull.

        Raises:
            FeedConnectionError: bad endpoint, handshake, connect or write failure.
            PullProtocolError: read or decode failure, empty or unmatched data.
            SignatureDecodeError: a signature component is not hex.
            PullCancelledError: ``cancel`` fired or ``timeout`` elapsed.
        """
        provider = self._config.provider_name
        self._metrics.record_call(provider)
        started = time.perf_counter()

        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout

        try:
            session = StorkSession(
                self._config.endpoint,
                self._config.auth_credential,
                self._config.subscription_payload,
                cancel=cancel,
                deadline=deadline,
                log=self._log,
            )
            payload = await session.exchange()
            envelope = decode_envelope(payload)
            asset_id, record = select_asset(envelope, self._config.ticker)
            asset_pair = convert_asset_record(record, asset_id)
        except PricePullError as e:
            self._metrics.record_failure(provider, e.reason)
            self._log.error("Failed to pull %s: %s", self._config.ticker, e)
            raise
        finally:
            self._metrics.observe_latency(provider, time.perf_counter() - started)

        self._log.info(
            "Pulled %d signed price(s) for %s (trace %s)",
            len(asset_pair.signed_prices),
            asset_pair.asset_id,
            envelope.trace_id,
        )
        return asset_pair
