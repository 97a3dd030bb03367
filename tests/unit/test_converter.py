"""Unit tests for provider record → AssetPair conversion."""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import pytest

from oracle_feed.converter import convert_asset_record, convert_signed_price
from oracle_feed.decoder import decode_envelope
from oracle_feed.errors import SignatureDecodeError
from oracle_feed.models import (
    AssetRecord,
    Signature,
    SignedPriceEntry,
    TimestampedSignature,
)


def _entry(publisher: str, price: str, r: str = "0x01", s: str = "02", v: str = "0x1b") -> SignedPriceEntry:
    return SignedPriceEntry(
        publisher_key=publisher,
        external_asset_id="BTCUSD",
        signature_type="evm",
        price=Decimal(price),
        timestamped_signature=TimestampedSignature(
            signature=Signature(r=r, s=s, v=v), timestamp=42, msg_hash="0xfeed"
        ),
    )


def _record(*entries: SignedPriceEntry) -> AssetRecord:
    return AssetRecord(
        timestamp=1,
        asset_id="BTCUSD",
        signature_type="evm",
        trigger="clock",
        price="1",
        signed_prices=entries,
    )


class TestConvertSignedPrice:
    def test_maps_fields(self) -> None:
        result = convert_signed_price(_entry("0xpub", "123.456000"))
        assert result.signature == b"\x01\x02\x1b"
        assert result.publisher_key == "0xpub"
        assert result.timestamp == 42
        assert result.price == Decimal("123.456000")
        # no normalisation of the decimal
        assert str(result.price) == "123.456000"


class TestConvertAssetRecord:
    def test_sample_envelope(self, sample_envelope: dict[str, Any]) -> None:
        envelope = decode_envelope(json.dumps(sample_envelope))
        pair = convert_asset_record(envelope.data["BTCUSD"], "BTCUSD")

        assert pair.asset_id == "BTCUSD"
        assert len(pair.signed_prices) == 2
        first, second = pair.signed_prices
        assert first.publisher_key == "0xpub1"
        assert first.signature == b"\x11" * 32 + b"\x22" * 32 + b"\x1b"
        assert first.timestamp == 1718000000000000001
        assert first.price == Decimal("67000.1234000000000000001")
        assert second.publisher_key == "0xpub2"
        assert second.signature == b"\xaa" * 32 + b"\xbb" * 32 + b"\x1c"
        assert second.price == Decimal("66999.9")

    def test_preserves_order_and_duplicates(self) -> None:
        entries = (_entry("c", "3"), _entry("a", "1"), _entry("c", "3"), _entry("b", "2"))
        pair = convert_asset_record(_record(*entries), "BTCUSD")
        assert [sp.publisher_key for sp in pair.signed_prices] == ["c", "a", "c", "b"]

    def test_uses_given_asset_id(self) -> None:
        pair = convert_asset_record(_record(), "0xhash")
        assert pair.asset_id == "0xhash"
        assert pair.signed_prices == ()

    def test_bad_signature_fails_whole_record(self) -> None:
        entries = (_entry("a", "1"), _entry("b", "2", r="0xZZ"))
        with pytest.raises(SignatureDecodeError):
            convert_asset_record(_record(*entries), "BTCUSD")
