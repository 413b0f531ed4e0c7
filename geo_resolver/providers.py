"""
geo_resolver/providers.py
HTTP adapters for geocoding (LocationIQ) and driving routes (LocationIQ,
OpenRouteService).

Each call opens a short-lived httpx client bounded by the provider timeout.
Any failure (timeout, transport error, non-2xx, malformed body) raises
GeoProviderError; the resolver chain turns that into "provider found nothing".
"""
import json
import math
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from geo_resolver.geo import DistanceResult
from query_processor.models import LatLng

_ACCEPT_JSON = {"Accept": "application/json"}


class GeoProviderError(RuntimeError):
    """Geocoding / routing provider failure."""


def _to_float(value: Any) -> Optional[float]:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def _timeout_seconds(timeout_ms: float) -> float:
    return max(0.2, float(timeout_ms) / 1000.0)


def _send(provider: str, method: str, url: str, timeout: float, **kwargs: Any) -> Any:
    """
    Perform one request and return the decoded JSON body.

    httpx applies ``timeout`` to each phase separately, so the body is streamed
    against a wall-clock deadline as well. A server trickling bytes is cut off
    at the first chunk past the deadline.
    """
    deadline = time.monotonic() + timeout
    raw = bytearray()
    try:
        with httpx.Client(timeout=timeout) as client:
            with client.stream(method, url, **kwargs) as response:
                if response.status_code >= 400:
                    raise GeoProviderError(f"{provider} http {response.status_code}")
                for chunk in response.iter_bytes():
                    if time.monotonic() > deadline:
                        raise GeoProviderError(f"{provider} timed out after {timeout:.1f}s")
                    raw.extend(chunk)
    except httpx.TimeoutException as exc:
        raise GeoProviderError(f"{provider} timed out after {timeout:.1f}s") from exc
    except httpx.HTTPError as exc:
        raise GeoProviderError(f"{provider} request failed: {exc}") from exc

    try:
        return json.loads(bytes(raw))
    except ValueError as exc:
        raise GeoProviderError(f"{provider} invalid json: {exc}") from exc


def _first_route(provider: str, body: Any) -> dict:
    routes = body.get("routes") if isinstance(body, dict) else None
    if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
        raise GeoProviderError(f"{provider} returned no routes")
    return routes[0]


def _leg(provider: str, distance_m: Any, duration_s: Any) -> DistanceResult:
    meters = _to_float(distance_m)
    if meters is None or meters <= 0:
        raise GeoProviderError(f"{provider} returned no usable distance")
    seconds = _to_float(duration_s)
    hours = seconds / 3600 if seconds is not None and seconds > 0 else math.nan
    return DistanceResult(distance_km=meters / 1000, duration_hours=hours, source=provider)


# ── Geocoding ────────────────────────────────────────────────────────────────

class LocationIQGeocoder:
    """Forward geocoding: place name → coordinates."""

    name = "locationiq"

    def __init__(self, api_key: str, url: str, timeout_ms: float = 8_000) -> None:
        self.api_key = (api_key or "").strip()
        self.url = url
        self.timeout = _timeout_seconds(timeout_ms)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def geocode(self, query: str) -> LatLng:
        if not self.enabled:
            raise GeoProviderError("locationiq api key is not configured")
        body = _send(
            self.name, "GET", self.url, self.timeout,
            params={"key": self.api_key, "q": query, "format": "json", "limit": "1"},
            headers=_ACCEPT_JSON,
        )
        first = body[0] if isinstance(body, list) and body else body
        if not isinstance(first, dict):
            raise GeoProviderError(f"locationiq found nothing for '{query}'")
        lat = _to_float(first.get("lat"))
        lng = _to_float(first.get("lon"))
        if lat is None or lng is None:
            raise GeoProviderError(f"locationiq returned no coordinates for '{query}'")
        return LatLng(lat=lat, lng=lng)


# ── Routing ──────────────────────────────────────────────────────────────────

class Router(ABC):
    """Driving distance between two coordinates."""

    name: str = ""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        pass

    @abstractmethod
    def route(self, start: LatLng, end: LatLng) -> DistanceResult:
        pass


class LocationIQRouter(Router):

    name = "locationiq"

    def __init__(self, api_key: str, url: str, timeout_ms: float = 8_000) -> None:
        self.api_key = (api_key or "").strip()
        self.url = url
        self.timeout = _timeout_seconds(timeout_ms)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def route(self, start: LatLng, end: LatLng) -> DistanceResult:
        body = _send(
            self.name, "GET", self.url, self.timeout,
            params={
                "key": self.api_key,
                "coordinates": f"{start.lng},{start.lat};{end.lng},{end.lat}",
                "overview": "false",
            },
            headers=_ACCEPT_JSON,
        )
        route = _first_route(self.name, body)
        return _leg(self.name, route.get("distance"), route.get("duration"))


class OpenRouteRouter(Router):

    name = "openroute"

    def __init__(self, api_key: str, url: str, timeout_ms: float = 8_000) -> None:
        self.api_key = (api_key or "").strip()
        self.url = url
        self.timeout = _timeout_seconds(timeout_ms)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def route(self, start: LatLng, end: LatLng) -> DistanceResult:
        body = _send(
            self.name, "POST", self.url, self.timeout,
            json={"coordinates": [[start.lng, start.lat], [end.lng, end.lat]]},
            headers={**_ACCEPT_JSON, "Authorization": self.api_key},
        )
        summary = _first_route(self.name, body).get("summary")
        if not isinstance(summary, dict):
            raise GeoProviderError("openroute returned no route summary")
        return _leg(self.name, summary.get("distance"), summary.get("duration"))
