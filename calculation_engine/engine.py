"""
calculation_engine/engine.py
Runs one manual quote end to end:
  extract → merge → same-location check → distance resolution (ground)
  → required-field check → per-mode calculator → output guardrail
"""
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from calculation_engine.calculators import (
    ESTIMATE_DISCLAIMER,
    AirCalculator,
    GroundCalculator,
    OceanCalculator,
    ParcelCalculator,
    Quote,
    fmt,
)
from config.settings import Settings, settings as default_settings
from geo_resolver import GeoResolver, build_geo_resolver
from guardrails.guardrail_layer import GuardrailLayer
from monitoring import QUOTE_REQUESTS, get_logger, stage_timer, timed
from query_processor.merger import merge_request
from query_processor.models import QuoteRequest
from query_processor.parser import TextExtractor, build_extractor

log = get_logger(__name__)

OK_MESSAGE = ESTIMATE_DISCLAIMER
CLARIFICATION_MESSAGE = "Missing fields for manual quote"
ERROR_MESSAGE = "Unable to produce a manual quote right now. Please try again or send in a Quote request."

STATUS_OK = "ok"
STATUS_CLARIFY = "needs_clarification"
STATUS_ERROR = "error"


def _money(m) -> dict[str, Any]:
    return {"amount": m.amount, "currency": m.currency}


def quote_to_dict(quote: Quote) -> dict[str, Any]:
    b = quote.breakdown
    out: dict[str, Any] = {
        "provider": quote.provider,
        "mode": quote.mode,
        "origin": quote.origin,
        "destination": quote.destination,
        "breakdown": {
            "base": _money(b.base),
            "surcharges": _money(b.surcharges),
            "margin": _money(b.margin),
            "total": _money(b.total),
            "assumptions": list(b.assumptions),
        },
    }
    if quote.chargeable_weight_kg is not None:
        out["chargeableWeightKg"] = quote.chargeable_weight_kg
    return out


@dataclass
class QuoteResponse:
    """Tagged result: exactly one of quote / missing_fields / an error message applies."""
    status: str
    message: str
    quote: Optional[Quote] = None
    missing_fields: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"status": self.status, "message": self.message}
        if self.status == STATUS_OK and self.quote is not None:
            out["quote"] = quote_to_dict(self.quote)
        if self.status == STATUS_CLARIFY:
            out["missingFields"] = list(self.missing_fields)
        return out


class QuoteEngine:
    """
    Stateless per request; the only shared mutable state is the distance
    cache owned by the injected GeoResolver.
    """

    _CALCULATOR_MAP: dict[str, type] = {
        "parcel": ParcelCalculator,
        "air":    AirCalculator,
        "ocean":  OceanCalculator,
        "ground": GroundCalculator,
    }

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[TextExtractor] = None,
        geo_resolver: Optional[GeoResolver] = None,
    ) -> None:
        self.settings     = settings or default_settings
        self.extractor    = extractor or build_extractor(self.settings)
        self.geo_resolver = geo_resolver or build_geo_resolver(self.settings)
        self.guardrails   = GuardrailLayer(self.settings)
        self._calculators = {
            mode: cls(self.settings) for mode, cls in self._CALCULATOR_MAP.items()
        }

    @timed("estimate")
    def estimate(self, request: QuoteRequest) -> QuoteResponse:
        """
        Produce a priced quote, a clarification request or an error.

        Never raises: unexpected failures become an ``error`` response.
        """
        mode = "unknown"
        try:
            response = self._estimate(request)
            mode = response.quote.mode if response.quote else (request.mode or "unknown")
        except Exception as exc:
            log.error("Estimate failed", error=str(exc), exc_info=True)
            response = QuoteResponse(status=STATUS_ERROR, message=ERROR_MESSAGE)
        QUOTE_REQUESTS.labels(mode=mode, status=response.status).inc()
        return response

    def _estimate(self, request: QuoteRequest) -> QuoteResponse:
        extracted = self.extractor.extract(request.free_text) if request.free_text else None
        merged = merge_request(request, extracted)
        log.info(
            "Quote request received",
            mode=merged.mode,
            origin=merged.origin,
            destination=merged.destination,
            free_text=bool(merged.free_text),
        )

        same = self.guardrails.check_same_location(merged)
        if same.issues:
            return QuoteResponse(status=STATUS_ERROR, message=same.issues[0])

        notes: list[str] = []
        if merged.mode == "ground" and not self._has_distance(merged):
            notes = self._resolve_distance(merged)

        missing = self.guardrails.missing_fields(merged)
        if missing:
            return QuoteResponse(status=STATUS_CLARIFY, message=CLARIFICATION_MESSAGE, missing_fields=missing)

        with stage_timer(f"price_{merged.mode}"):
            quote = self._calculators[merged.mode].calculate(merged, notes)
        self.guardrails.validate_output(quote)
        log.info(
            "Quote calculated",
            mode=quote.mode,
            total=quote.breakdown.total.amount,
            currency=quote.breakdown.total.currency,
        )
        return QuoteResponse(status=STATUS_OK, message=OK_MESSAGE, quote=quote)

    @staticmethod
    def _has_distance(request: QuoteRequest) -> bool:
        km = request.distance_km
        return km is not None and math.isfinite(km) and km > 0

    def _resolve_distance(self, request: QuoteRequest) -> list[str]:
        """Fill ``distance_km`` in place; returns the assumption lines describing how."""
        if not request.origin or not request.destination:
            return []
        result = self.geo_resolver.resolve(
            request.origin, request.destination, start=request.start, end=request.end,
        )
        if result is None:
            return []
        request.distance_km = result.distance_km
        notes = [f"Distance source: {result.source} ({fmt(result.distance_km)} km)"]
        if result.has_duration:
            notes.append(f"Drive time (estimate): {fmt(result.duration_hours)} hours")
        return notes
