"""Provider record → canonical AssetPair conversion."""
from __future__ import annotations

from .models import AssetPair, AssetRecord, SignedPriceEntry, SignedPriceOfAssetPair
from .signature import assemble_signature


def convert_signed_price(entry: SignedPriceEntry) -> SignedPriceOfAssetPair:
    """Map one publisher's signed price; the price is copied untouched."""
    return SignedPriceOfAssetPair(
        signature=assemble_signature(entry.timestamped_signature.signature),
        publisher_key=entry.publisher_key,
        timestamp=entry.timestamped_signature.timestamp,
        price=entry.price,
    )


def convert_asset_record(record: AssetRecord, asset_id: str) -> AssetPair:
    """Convert every signed price of ``record``, keeping input order.

    Any malformed signature fails the whole conversion; no entry is
    dropped.
    """
    return AssetPair(
        asset_id=asset_id,
        signed_prices=tuple(convert_signed_price(sp) for sp in record.signed_prices),
    )
