"""Protocol interfaces for the signed-price puller."""
from .price_puller import PricePuller

__all__ = ["PricePuller"]
