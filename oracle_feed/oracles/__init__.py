"""Provider-specific price pullers."""
from .stork import StorkPriceFeed

__all__ = ["StorkPriceFeed"]
