"""Builders for provider frames and aiohttp websocket mocks."""
from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp

SIG_R1 = "0x" + "11" * 32
SIG_S1 = "0x" + "22" * 32
SIG_V1 = "0x1b"
SIG_R2 = "aa" * 32
SIG_S2 = "0x" + "bb" * 32
SIG_V2 = "1c"


def make_signed_price(
    publisher: str, price: str, r: str, s: str, v: str, timestamp: int
) -> dict[str, Any]:
    return {
        "publisher_key": publisher,
        "external_asset_id": "BTCUSD",
        "signature_type": "evm",
        "price": price,
        "timestamped_signature": {
            "signature": {"r": r, "s": s, "v": v},
            "timestamp": timestamp,
            "msg_hash": "0xfeed",
        },
    }


def make_asset(asset_id: str, signed_prices: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "timestamp": 1718000000000000000,
        "asset_id": asset_id,
        "signature_type": "evm",
        "trigger": "deviation",
        "price": "67000123400000000000000",
        "signed_prices": signed_prices,
    }


def make_envelope(data: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"type": "oracle_prices", "trace_id": "trace-1", "data": data or {}}


def text_message(data: str) -> aiohttp.WSMessage:
    return aiohttp.WSMessage(aiohttp.WSMsgType.TEXT, data, None)


def mock_websocket(frames: list[Any] | None = None) -> MagicMock:
    """Websocket whose receive() yields ``frames`` (messages or exceptions)."""
    ws = MagicMock()
    ws.send_str = AsyncMock(return_value=None)
    ws.receive = AsyncMock(side_effect=list(frames or []))
    ws.close_code = None
    ws.__aenter__ = AsyncMock(return_value=ws)
    ws.__aexit__ = AsyncMock(return_value=None)
    return ws


def mock_client_session(
    ws: MagicMock | None = None, connect_error: Exception | None = None
) -> AsyncMock:
    """Client session whose ws_connect returns ``ws`` or raises ``connect_error``."""
    session = AsyncMock()
    if connect_error is not None:
        session.ws_connect = AsyncMock(side_effect=connect_error)
    else:
        session.ws_connect = AsyncMock(return_value=ws)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session
