"""Pure decoding of the provider's data frame — no I/O."""
from __future__ import annotations

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import PullProtocolError
from .models import (
    AssetRecord,
    ResponseEnvelope,
    Signature,
    SignedPriceEntry,
    TimestampedSignature,
)


_PLAIN_DECIMAL_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")


class _ShapeError(ValueError):
    """Raised internally when a field has the wrong type."""


def _mapping(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _ShapeError(f"'{name}' must be an object, got {type(value).__name__}")
    return value


def _string(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _ShapeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _integer(raw: dict[str, Any], key: str, *, unsigned: bool = False) -> int:
    value = raw.get(key, 0)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise _ShapeError(f"'{key}' must be an integer, got {value!r}")
    if unsigned and value < 0:
        raise _ShapeError(f"'{key}' must be unsigned, got {value}")
    return value


def _decimal(raw: dict[str, Any], key: str) -> Decimal:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int, Decimal)):
        raise _ShapeError(f"'{key}' must be a decimal string, got {value!r}")
    if isinstance(value, str) and not _PLAIN_DECIMAL_RE.fullmatch(value):
        raise _ShapeError(f"'{key}' is not a plain decimal: {value!r}")
    try:
        price = Decimal(value) if not isinstance(value, Decimal) else value
    except InvalidOperation as e:
        raise _ShapeError(f"'{key}' is not a decimal: {value!r}") from e
    if not price.is_finite():
        raise _ShapeError(f"'{key}' is not a finite decimal: {value!r}")
    return price


def parse_signature(raw: Any) -> Signature:
    raw = _mapping(raw, "signature")
    return Signature(r=_string(raw, "r"), s=_string(raw, "s"), v=_string(raw, "v"))


def parse_timestamped_signature(raw: Any) -> TimestampedSignature:
    raw = _mapping(raw, "timestamped_signature")
    return TimestampedSignature(
        signature=parse_signature(raw.get("signature")),
        timestamp=_integer(raw, "timestamp", unsigned=True),
        msg_hash=_string(raw, "msg_hash"),
    )


def parse_signed_price(raw: Any) -> SignedPriceEntry:
    raw = _mapping(raw, "signed_prices[]")
    return SignedPriceEntry(
        publisher_key=_string(raw, "publisher_key"),
        external_asset_id=_string(raw, "external_asset_id"),
        signature_type=_string(raw, "signature_type"),
        price=_decimal(raw, "price"),
        timestamped_signature=parse_timestamped_signature(
            raw.get("timestamped_signature")
        ),
    )


def parse_asset_record(raw: Any) -> AssetRecord:
    raw = _mapping(raw, "data[]")
    signed_raw = raw.get("signed_prices")
    if signed_raw is None:
        signed_raw = []
    if not isinstance(signed_raw, list):
        raise _ShapeError("'signed_prices' must be an array")
    return AssetRecord(
        timestamp=_integer(raw, "timestamp"),
        asset_id=_string(raw, "asset_id"),
        signature_type=_string(raw, "signature_type"),
        trigger=_string(raw, "trigger"),
        price=_string(raw, "price"),
        signed_prices=tuple(parse_signed_price(sp) for sp in signed_raw),
    )


def decode_envelope(payload: bytes | str) -> ResponseEnvelope:
    """Parse the data frame into a ResponseEnvelope.

    Numbers with a fractional part are kept as ``Decimal`` so prices sent
    as JSON numbers lose no precision.

    Raises:
        PullProtocolError: ``decode-failed`` for malformed JSON or a wrong
            shape, ``empty-envelope`` when ``data`` holds no assets.
    """
    try:
        raw = json.loads(payload, parse_float=Decimal)
        raw = _mapping(raw, "envelope")
        data_raw = _mapping(raw.get("data"), "data")
        envelope = ResponseEnvelope(
            type=_string(raw, "type"),
            trace_id=_string(raw, "trace_id"),
            data={
                asset_id: parse_asset_record(record)
                for asset_id, record in data_raw.items()
            },
        )
    except ValueError as e:
        # covers JSONDecodeError, UnicodeDecodeError and _ShapeError
        raise PullProtocolError(
            f"failed to decode data frame: {e}", reason="decode-failed"
        ) from e

    if not envelope.data:
        raise PullProtocolError(
            "data frame carries no assets",
            reason="empty-envelope",
            details={"type": envelope.type, "trace_id": envelope.trace_id},
        )
    return envelope


def select_asset(envelope: ResponseEnvelope, ticker: str) -> tuple[str, AssetRecord]:
    """Pick the record to convert for ``ticker``.

    Order of preference: the key equal to the ticker, then a record whose
    ``asset_id`` equals it. A frame holding only other assets is an error.

    Raises:
        PullProtocolError: ``empty-envelope`` or ``asset-not-found``.
    """
    if not envelope.data:
        raise PullProtocolError("data frame carries no assets", reason="empty-envelope")

    if ticker in envelope.data:
        return ticker, envelope.data[ticker]

    for asset_id in sorted(envelope.data):
        if envelope.data[asset_id].asset_id == ticker:
            return asset_id, envelope.data[asset_id]

    raise PullProtocolError(
        f"no asset matching {ticker!r} in data frame",
        reason="asset-not-found",
        details={"ticker": ticker, "assets": sorted(envelope.data)},
    )
