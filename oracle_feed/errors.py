"""Exception taxonomy for feed construction and price pulls."""
from __future__ import annotations

from typing import Any


class PricePullError(Exception):
    """Base exception; catch this for any error raised by the package."""

    def __init__(
        self,
        message: str,
        reason: str = "unknown",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} [{self.reason}]"


class ConfigError(PricePullError, ValueError):
    """Feed configuration is invalid; the feed is never created."""


class FeedConnectionError(PricePullError, ConnectionError):
    """Endpoint is malformed, or connecting, handshaking or writing failed."""

    def __init__(
        self,
        message: str,
        reason: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, reason, details)
        self.status_code = status_code


class PullProtocolError(PricePullError):
    """Reading or decoding the provider's frames failed."""


class SignatureDecodeError(PricePullError):
    """A signature component is not valid hex."""


class PullCancelledError(PricePullError):
    """The caller aborted the pull, explicitly or through its deadline."""


__all__ = [
    "ConfigError",
    "FeedConnectionError",
    "PricePullError",
    "PullCancelledError",
    "PullProtocolError",
    "SignatureDecodeError",
]
