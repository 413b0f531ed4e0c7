"""
geo_resolver/geo.py
Distance result type and great-circle math.
"""
import math
from dataclasses import dataclass

from query_processor.models import LatLng

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    duration_hours: float = math.nan   # NaN when the source has no drive time
    source: str = ""

    @property
    def has_duration(self) -> bool:
        return math.isfinite(self.duration_hours)


def haversine_km(a: LatLng, b: LatLng) -> float:
    """Great-circle distance in kilometres."""
    to_rad = math.pi / 180.0
    d_lat = (b.lat - a.lat) * to_rad
    d_lng = (b.lng - a.lng) * to_rad
    lat1 = a.lat * to_rad
    lat2 = b.lat * to_rad

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))
