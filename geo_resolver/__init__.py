"""geo_resolver package"""
from .cache import DistanceCache, DistanceCacheEntry
from .geo import DistanceResult, haversine_km
from .providers import GeoProviderError, LocationIQGeocoder, LocationIQRouter, OpenRouteRouter
from .resolver import (
    DistanceStrategy, GeoResolver, GreatCircleStrategy, LaneTableStrategy,
    ResolutionContext, RoutingStrategy, build_geo_resolver,
)
__all__ = [
    "DistanceCache","DistanceCacheEntry","DistanceResult","haversine_km",
    "GeoProviderError","LocationIQGeocoder","LocationIQRouter","OpenRouteRouter",
    "DistanceStrategy","GeoResolver","GreatCircleStrategy","LaneTableStrategy",
    "ResolutionContext","RoutingStrategy","build_geo_resolver",
]
