"""Websocket session — one connect/subscribe/read cycle per pull."""
from __future__ import annotations

import asyncio
import base64
import logging
import ssl
from collections.abc import Awaitable
from typing import Any, TypeVar

import aiohttp
import certifi
from yarl import URL

from .errors import FeedConnectionError, PullCancelledError, PullProtocolError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WS_SCHEMES = frozenset({"ws", "wss", "http", "https"})
# permessage-deflate with the maximum window
_COMPRESS_WBITS = 15


def resolve_endpoint(endpoint: str) -> URL:
    """Validate the configured endpoint.

    Raises:
        FeedConnectionError: ``bad-endpoint`` when the URL is not an
            absolute websocket/http URL with a host.
    """
    try:
        url = URL(endpoint)
        valid = url.is_absolute() and url.scheme in _WS_SCHEMES and bool(url.host)
    except (ValueError, TypeError) as e:
        raise FeedConnectionError(
            f"error parsing URL {endpoint!r}: {e}", reason="bad-endpoint"
        ) from e
    if not valid:
        raise FeedConnectionError(
            f"error parsing URL {endpoint!r}: expected ws:// or wss:// with a host",
            reason="bad-endpoint",
        )
    return url


def basic_auth_header(credential: str) -> dict[str, str]:
    """Build the Authorization header from the raw credential string."""
    token = base64.b64encode(credential.encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


class StorkSession:
    """Run one request/response cycle against the provider's websocket.

    The provider answers a subscription with an acknowledgement frame
    followed by the data frame; only the data frame is returned.

    Each blocking step (connect, write, each read) is raced against the
    optional ``cancel`` event and ``deadline`` (an event-loop timestamp),
    and the websocket is closed on every exit path.
    """

    def __init__(
        self,
        endpoint: str,
        auth_credential: str,
        subscription_payload: str,
        *,
        cancel: asyncio.Event | None = None,
        deadline: float | None = None,
        log: logging.Logger | logging.LoggerAdapter[Any] | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.auth_credential = auth_credential
        self.subscription_payload = subscription_payload
        self._cancel = cancel
        self._deadline = deadline
        self._log = log or logger

    async def exchange(self) -> bytes:
        """Connect, subscribe, and return the raw data frame."""
        url = resolve_endpoint(self.endpoint)

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            ws = await self._step("connect", self._connect(session, url))
            async with ws:
                await self._step("write", self._send(ws))
                await self.discard_ack_frame(ws)
                return await self.read_data_frame(ws)

    async def discard_ack_frame(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Consume the acknowledgement the provider sends before any data."""
        ack = await self._step("read", self._receive(ws, "ack"))
        self._log.debug("Discarded ack frame (%d bytes)", len(ack))

    async def read_data_frame(self, ws: aiohttp.ClientWebSocketResponse) -> bytes:
        """Read the frame that carries the signed prices."""
        data = await self._step("read", self._receive(ws, "data"))
        self._log.debug("Received data frame (%d bytes)", len(data))
        return data

    # ------------------------------------------------------------------
    # Protocol steps
    # ------------------------------------------------------------------

    async def _connect(
        self, session: aiohttp.ClientSession, url: URL
    ) -> aiohttp.ClientWebSocketResponse:
        try:
            ws = await session.ws_connect(
                url,
                headers=basic_auth_header(self.auth_credential),
                compress=_COMPRESS_WBITS,
            )
        except aiohttp.WSServerHandshakeError as e:
            self._log.warning("Handshake failed with status: %s", e.status)
            for key, value in (e.headers or {}).items():
                self._log.warning("  %s: %s", key, value)
            raise FeedConnectionError(
                f"websocket handshake failed: {e.message}",
                reason="handshake-failed",
                status_code=e.status,
                details={"headers": dict(e.headers or {})},
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise FeedConnectionError(
                f"error connecting to websocket {url}: {e}", reason="connect-failed"
            ) from e

        self._log.info("Connected to websocket server: %s", url.host)
        return ws

    async def _send(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            await ws.send_str(self.subscription_payload)
        except (aiohttp.ClientError, OSError, RuntimeError) as e:
            raise FeedConnectionError(
                f"error writing subscription message: {e}", reason="write-failed"
            ) from e

    async def _receive(self, ws: aiohttp.ClientWebSocketResponse, frame: str) -> bytes:
        try:
            msg = await ws.receive()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise PullProtocolError(
                f"error reading {frame} frame: {e}", reason="read-failed"
            ) from e

        if msg.type == aiohttp.WSMsgType.TEXT:
            return msg.data.encode("utf-8")
        if msg.type == aiohttp.WSMsgType.BINARY:
            return bytes(msg.data)

        raise PullProtocolError(
            f"error reading {frame} frame: got {msg.type.name} "
            f"(close code {ws.close_code})",
            reason="read-failed",
            details={"message_type": msg.type.name, "close_code": ws.close_code},
        )

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def _raise_if_aborted(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise PullCancelledError("pull cancelled by caller", reason="cancelled")
        if self._deadline is not None:
            if asyncio.get_running_loop().time() >= self._deadline:
                raise PullCancelledError("pull deadline exceeded", reason="deadline-exceeded")

    async def _step(self, name: str, coro: Awaitable[T]) -> T:
        """Await ``coro`` unless the caller aborts first."""
        try:
            self._raise_if_aborted()
        except PullCancelledError:
            # never started; close the coroutine so it is not left pending
            close = getattr(coro, "close", None)
            if close is not None:
                close()
            raise

        task = asyncio.ensure_future(coro)
        waiters: set[asyncio.Future[Any]] = {task}
        cancel_waiter: asyncio.Future[Any] | None = None
        if self._cancel is not None:
            cancel_waiter = asyncio.ensure_future(self._cancel.wait())
            waiters.add(cancel_waiter)

        timeout = None
        if self._deadline is not None:
            timeout = max(self._deadline - asyncio.get_running_loop().time(), 0)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            # the step must be finished before the socket is closed under it
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        self._log.info("Aborted %s step", name)

        if cancel_waiter is not None and cancel_waiter in done:
            raise PullCancelledError(
                f"pull cancelled during {name}", reason="cancelled", details={"step": name}
            )
        raise PullCancelledError(
            f"pull deadline exceeded during {name}",
            reason="deadline-exceeded",
            details={"step": name},
        )
