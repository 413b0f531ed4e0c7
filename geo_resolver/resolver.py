"""
geo_resolver/resolver.py
Origin/destination → driving distance, via an ordered fallback chain.

Resolution order (first success wins):
  1. Distance cache
  2. Coordinates: explicit request coords → known city centroids → geocoder
  3. Routing providers, primary then secondary
  4. Great-circle (haversine) distance
  5. Static lane-distance table
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from geo_resolver.cache import DistanceCache
from geo_resolver.geo import DistanceResult, haversine_km
from geo_resolver.providers import (
    GeoProviderError,
    LocationIQGeocoder,
    LocationIQRouter,
    OpenRouteRouter,
    Router,
)
from knowledge_base.regions import lane_distance_km, resolve_domestic_city, resolve_domestic_coords
from monitoring import DISTANCE_LOOKUPS, PROVIDER_FAILURES, get_logger, timed
from query_processor.models import LatLng

log = get_logger(__name__)


@dataclass
class ResolutionContext:
    origin: str
    destination: str
    start: Optional[LatLng] = None
    end: Optional[LatLng] = None

    @property
    def has_coords(self) -> bool:
        return self.start is not None and self.end is not None


class DistanceStrategy(ABC):
    """One link of the fallback chain. Returns None when it has no answer."""

    name: str = ""

    @abstractmethod
    def resolve(self, ctx: ResolutionContext) -> Optional[DistanceResult]:
        pass


class RoutingStrategy(DistanceStrategy):

    def __init__(self, router: Router) -> None:
        self.router = router
        self.name = router.name

    def resolve(self, ctx: ResolutionContext) -> Optional[DistanceResult]:
        if not ctx.has_coords or not self.router.enabled:
            return None
        try:
            return self.router.route(ctx.start, ctx.end)
        except GeoProviderError as exc:
            log.warning("Routing provider failed", provider=self.name, error=str(exc))
            PROVIDER_FAILURES.labels(provider=self.name).inc()
            return None


class GreatCircleStrategy(DistanceStrategy):

    name = "haversine"

    def resolve(self, ctx: ResolutionContext) -> Optional[DistanceResult]:
        if not ctx.has_coords:
            return None
        km = haversine_km(ctx.start, ctx.end)
        if not math.isfinite(km) or km <= 0:
            return None
        return DistanceResult(distance_km=km, source=self.name)


class LaneTableStrategy(DistanceStrategy):

    name = "lane_table"

    def resolve(self, ctx: ResolutionContext) -> Optional[DistanceResult]:
        km = lane_distance_km(resolve_domestic_city(ctx.origin), resolve_domestic_city(ctx.destination))
        if not km:
            return None
        return DistanceResult(distance_km=km, source=self.name)


class GeoResolver:
    """
    Owns the distance cache and the strategy chain.  Provider errors never
    escape: a failed provider is just a link that found nothing.
    """

    def __init__(
        self,
        strategies: Sequence[DistanceStrategy],
        geocoder: Optional[LocationIQGeocoder] = None,
        cache: Optional[DistanceCache] = None,
    ) -> None:
        self.strategies = list(strategies)
        self.geocoder = geocoder
        self.cache = cache if cache is not None else DistanceCache()

    @timed("distance")
    def resolve(
        self,
        origin: Optional[str],
        destination: Optional[str],
        start: Optional[LatLng] = None,
        end: Optional[LatLng] = None,
    ) -> Optional[DistanceResult]:
        origin = str(origin or "").strip()
        destination = str(destination or "").strip()
        cacheable = bool(origin and destination)
        key = DistanceCache.key(origin, destination)

        if cacheable:
            hit = self.cache.get(key)
            if hit is not None:
                DISTANCE_LOOKUPS.labels(source="cache").inc()
                return DistanceResult(hit.distance_km, hit.duration_hours, source="cache")

        ctx = ResolutionContext(
            origin=origin,
            destination=destination,
            start=start or resolve_domestic_coords(origin),
            end=end or resolve_domestic_coords(destination),
        )
        if ctx.start is None:
            ctx.start = self._geocode(origin)
        if ctx.end is None:
            ctx.end = self._geocode(destination)

        result: Optional[DistanceResult] = None
        for strategy in self.strategies:
            result = strategy.resolve(ctx)
            if result is not None:
                break

        if result is None:
            log.info("Distance unresolved", origin=origin, destination=destination)
            return None

        if cacheable:
            self.cache.set(key, result)
        DISTANCE_LOOKUPS.labels(source=result.source).inc()
        log.info("Distance resolved", origin=origin, destination=destination,
                 km=round(result.distance_km, 2), source=result.source)
        return result

    def _geocode(self, place: str) -> Optional[LatLng]:
        if not place or self.geocoder is None or not self.geocoder.enabled:
            return None
        try:
            return self.geocoder.geocode(place)
        except GeoProviderError as exc:
            log.warning("Geocoding failed", provider=self.geocoder.name, place=place, error=str(exc))
            PROVIDER_FAILURES.labels(provider=f"{self.geocoder.name}_geocode").inc()
            return None


def build_geo_resolver(settings, cache: Optional[DistanceCache] = None) -> GeoResolver:
    """Wire the default chain from configuration."""
    primary = LocationIQRouter(
        settings.locationiq_api_key, settings.locationiq_directions_url, settings.locationiq_timeout_ms,
    )
    secondary = OpenRouteRouter(
        settings.openroute_api_key, settings.openroute_directions_url, settings.openroute_timeout_ms,
    )
    geocoder = LocationIQGeocoder(
        settings.locationiq_api_key, settings.locationiq_geocode_url, settings.locationiq_timeout_ms,
    )
    return GeoResolver(
        strategies=[
            RoutingStrategy(primary),
            RoutingStrategy(secondary),
            GreatCircleStrategy(),
            LaneTableStrategy(),
        ],
        geocoder=geocoder,
        cache=cache if cache is not None else DistanceCache(ttl_seconds=settings.distance_cache_ttl_seconds),
    )
