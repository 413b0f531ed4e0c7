"""calculation_engine package"""
from .calculators import (
    AirCalculator, Breakdown, GroundCalculator, Money, OceanCalculator,
    ParcelCalculator, Quote,
)
from .engine import QuoteEngine, QuoteResponse
__all__ = [
    "AirCalculator","Breakdown","GroundCalculator","Money","OceanCalculator",
    "ParcelCalculator","Quote","QuoteEngine","QuoteResponse",
]
