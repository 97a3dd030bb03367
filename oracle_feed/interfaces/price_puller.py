"""Scheduler-facing protocol for price pullers."""
from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Protocol

from ..models import AssetPair, OracleType


class PricePuller(Protocol):
    """Abstract interface for pulling signed prices on a schedule."""

    @property
    def interval(self) -> timedelta: ...

    @property
    def symbol(self) -> str: ...

    @property
    def provider_name(self) -> str: ...

    @property
    def oracle_type(self) -> OracleType: ...

    async def pull_asset_pair(
        self,
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> AssetPair: ...
