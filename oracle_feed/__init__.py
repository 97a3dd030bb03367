"""Signed-price puller: fetch publisher-signed prices and convert them to asset pairs."""
from .config import FeedConfig, ProviderConfig, load_feed_configs, parse_feed_config
from .errors import (
    ConfigError,
    FeedConnectionError,
    PricePullError,
    PullCancelledError,
    PullProtocolError,
    SignatureDecodeError,
)
from .models import AssetPair, FeedProvider, OracleType, SignedPriceOfAssetPair
from .oracles import StorkPriceFeed

__all__ = [
    "AssetPair",
    "ConfigError",
    "FeedConfig",
    "FeedConnectionError",
    "FeedProvider",
    "OracleType",
    "PricePullError",
    "ProviderConfig",
    "PullCancelledError",
    "PullProtocolError",
    "SignatureDecodeError",
    "SignedPriceOfAssetPair",
    "StorkPriceFeed",
    "load_feed_configs",
    "parse_feed_config",
]
