"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum


class OracleType(IntEnum):
    """On-chain oracle classification a feed reports under."""

    UNSPECIFIED = 0
    BAND = 1
    PRICE_FEED = 2
    COINBASE = 3
    CHAINLINK = 4
    RAZOR = 5
    DIA = 6
    API3 = 7
    UMA = 8
    PYTH = 9
    BAND_IBC = 10
    PROVIDER = 11
    STORK = 12

    @property
    def canonical_name(self) -> str:
        return _ORACLE_TYPE_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> OracleType:
        """Resolve a canonical name such as ``"PriceFeed"`` or ``"Stork"``.

        Raises:
            KeyError: if the name is not a known classification.
        """
        return _ORACLE_TYPE_VALUES[name]


_ORACLE_TYPE_NAMES: dict[OracleType, str] = {
    OracleType.UNSPECIFIED: "Unspecified",
    OracleType.BAND: "Band",
    OracleType.PRICE_FEED: "PriceFeed",
    OracleType.COINBASE: "Coinbase",
    OracleType.CHAINLINK: "Chainlink",
    OracleType.RAZOR: "Razor",
    OracleType.DIA: "Dia",
    OracleType.API3: "API3",
    OracleType.UMA: "Uma",
    OracleType.PYTH: "Pyth",
    OracleType.BAND_IBC: "BandIBC",
    OracleType.PROVIDER: "Provider",
    OracleType.STORK: "Stork",
}
_ORACLE_TYPE_VALUES: dict[str, OracleType] = {v: k for k, v in _ORACLE_TYPE_NAMES.items()}


class FeedProvider(str, Enum):
    """Kind of upstream a puller talks to."""

    STORK = "stork"


# ---------------------------------------------------------------------------
# Provider wire shapes (one set per pull, discarded after conversion)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Signature:
    """ECDSA signature split into hex components, each maybe ``0x``-prefixed."""

    r: str
    s: str
    v: str


@dataclass(frozen=True)
class TimestampedSignature:
    signature: Signature
    timestamp: int
    msg_hash: str = ""


@dataclass(frozen=True)
class SignedPriceEntry:
    """One publisher's signed price for an asset."""

    publisher_key: str
    external_asset_id: str
    signature_type: str
    price: Decimal
    timestamped_signature: TimestampedSignature


@dataclass(frozen=True)
class AssetRecord:
    timestamp: int
    asset_id: str
    signature_type: str
    trigger: str
    price: str
    signed_prices: tuple[SignedPriceEntry, ...] = ()


@dataclass(frozen=True)
class ResponseEnvelope:
    """Decoded data frame: asset identifier -> record."""

    type: str
    trace_id: str
    data: dict[str, AssetRecord] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Canonical output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SignedPriceOfAssetPair:
    """Publisher-signed price in the provider-agnostic form."""

    signature: bytes
    publisher_key: str
    timestamp: int
    price: Decimal


@dataclass(frozen=True)
class AssetPair:
    """All signed prices pulled for one asset."""

    asset_id: str
    signed_prices: tuple[SignedPriceOfAssetPair, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly view: signatures as 0x-hex, prices as strings."""
        return {
            "asset_id": self.asset_id,
            "signed_prices": [
                {
                    "signature": "0x" + sp.signature.hex(),
                    "publisher_key": sp.publisher_key,
                    "timestamp": sp.timestamp,
                    "price": str(sp.price),
                }
                for sp in self.signed_prices
            ],
        }
