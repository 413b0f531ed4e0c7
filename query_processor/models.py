"""
query_processor/models.py
Shared QuoteRequest dataclass used by the extractor, merger, geo resolver
and calculators.  Kept in a separate module to avoid circular imports.
"""
from dataclasses import dataclass, fields
from typing import Optional

MODES = ("parcel", "air", "ocean", "ground")
CONTAINER_TYPES = ("20ft", "40ft", "40hc")


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass
class Dimensions:
    """Package dimensions in centimetres."""
    length: float
    width: float
    height: float

    def volume_cm3(self) -> float:
        return self.length * self.width * self.height


@dataclass
class QuoteRequest:
    """
    Shipment parameters for one estimate.  Every field is optional: the same
    type carries a raw API payload, a partial extraction from free text,
    and the merged request handed to the calculators.
    """
    free_text: Optional[str] = None
    mode: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None

    # Weight & size
    weight_kg: Optional[float] = None
    dimensions_cm: Optional[Dimensions] = None
    volume_cbm: Optional[float] = None

    # Ocean
    container_type: Optional[str] = None
    demurrage_days: Optional[float] = None

    # Ground
    distance_km: Optional[float] = None
    start: Optional[LatLng] = None
    end: Optional[LatLng] = None

    is_express: Optional[bool] = None

    def set_fields(self) -> dict:
        """Fields that carry a value (None means 'not provided')."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}
