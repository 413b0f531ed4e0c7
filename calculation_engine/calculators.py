"""
calculation_engine/calculators.py
Per-mode freight calculators (parcel, air, ocean, ground).

Every calculator produces a mode-specific base and surcharge in NGN, then the
shared pipeline in ``_Base.calculate`` applies:
  multiplier = inflation × market[mode]
  base', surcharges' = base × multiplier, surcharges × multiplier
  margin = (base' + surcharges') × margin_pct[mode]
  total  = base' + surcharges' + margin
Amounts are rounded to 2 dp only when the Breakdown is built.

Each table choice, fallback or classification appends a line to the
assumptions list; that list is the only explanation the customer receives.
"""
import math
from dataclasses import dataclass, field
from typing import Optional

from knowledge_base.regions import detect_region, is_domestic, lane_base_ngn, resolve_domestic_city
from knowledge_base.tables import (
    AIR_RATE_USD_PER_KG,
    GROUND_DISTANCE_TIERS,
    GROUND_INTRA_CITY_NGN_PER_KM,
    OCEAN_BASE_USD,
    PARCEL_INTL_BRACKETS_USD,
    PARCEL_REGIONAL_ADJUSTMENT,
)
from monitoring import get_logger
from query_processor.models import QuoteRequest

log = get_logger(__name__)

PROVIDER = "manual-rate-engine"
ESTIMATE_DISCLAIMER = (
    "Estimate only — send in a Quote request for real quote estimation "
    "(live pricing and availability)."
)


def round2(n: float) -> float:
    return round(n, 2)


def fmt(n: float) -> str:
    """1234.5 → '1,234.5', 1550.0 → '1,550'."""
    r = round2(n)
    if r == int(r):
        return f"{int(r):,}"
    return f"{r:,.2f}".rstrip("0").rstrip(".")


# ─────────────────────────────────────────────────────────────────────────────
# Result types
# ─────────────────────────────────────────────────────────────────────────────
@dataclass
class Money:
    amount: float
    currency: str = "NGN"


@dataclass
class Breakdown:
    base: Money
    surcharges: Money
    margin: Money
    total: Money
    assumptions: list[str] = field(default_factory=list)


@dataclass
class Quote:
    mode: str
    origin: Optional[str]
    destination: Optional[str]
    breakdown: Breakdown
    chargeable_weight_kg: Optional[float] = None
    provider: str = PROVIDER


@dataclass
class _Priced:
    """Mode-specific output before the shared multiplier/margin pipeline."""
    base: float
    surcharges: float
    chargeable_weight_kg: Optional[float] = None


# ─────────────────────────────────────────────────────────────────────────────
# Shared base class
# ─────────────────────────────────────────────────────────────────────────────
class _Base:
    """Shared pipeline: multiplier, margin, rounding and breakdown assembly."""

    MODE = ""

    def __init__(self, settings) -> None:
        self.settings = settings

    def calculate(self, request: QuoteRequest, resolution_notes: Optional[list[str]] = None) -> Quote:
        s = self.settings
        assumptions: list[str] = list(resolution_notes or [])
        assumptions.append(ESTIMATE_DISCLAIMER)
        assumptions.append(f"FX used: 1 USD = ₦{fmt(s.fx_usd_to_ngn)}")

        priced = self._price(request, assumptions)

        market = s.market_multiplier[self.MODE]
        multiplier = s.inflation_factor * market
        assumptions.append(
            f"Market adjustment: ×{multiplier:.4f} (inflation ×{s.inflation_factor} · {self.MODE} market ×{market})"
        )
        base = priced.base * multiplier
        surcharges = priced.surcharges * multiplier

        breakdown = self._finalise(base, surcharges, s.margin_pct[self.MODE], assumptions)
        log.debug("Priced", mode=self.MODE, base=breakdown.base.amount, total=breakdown.total.amount)
        return Quote(
            mode=self.MODE,
            origin=request.origin,
            destination=request.destination,
            breakdown=breakdown,
            chargeable_weight_kg=(
                round2(priced.chargeable_weight_kg) if priced.chargeable_weight_kg is not None else None
            ),
        )

    def _price(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        raise NotImplementedError

    def _finalise(self, base: float, surcharges: float, margin_pct: float, assumptions: list[str]) -> Breakdown:
        currency = self.settings.currency
        margin = (base + surcharges) * margin_pct
        base_r, sur_r, margin_r = round2(base), round2(surcharges), round2(margin)
        return Breakdown(
            base=Money(base_r, currency),
            surcharges=Money(sur_r, currency),
            margin=Money(margin_r, currency),
            total=Money(round2(base_r + sur_r + margin_r), currency),
            assumptions=assumptions,
        )

    # ── helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _volumetric_kg(request: QuoteRequest, divisor: float) -> Optional[float]:
        """Volume-derived weight; a cubic-metre volume takes precedence over dimensions."""
        if request.volume_cbm and request.volume_cbm > 0:
            return request.volume_cbm * 1_000_000 / divisor
        d = request.dimensions_cm
        if d is None:
            return None
        if not all(v and v > 0 for v in (d.length, d.width, d.height)):
            return None
        return d.volume_cm3() / divisor

    def _chargeable_kg(self, request: QuoteRequest, divisor: float, assumptions: list[str]) -> float:
        actual = float(request.weight_kg or 0.0)
        volumetric = self._volumetric_kg(request, divisor)
        if volumetric is not None and volumetric > actual:
            assumptions.append(
                f"Volumetric weight used: {fmt(volumetric)} kg (actual {fmt(actual)} kg, divisor {fmt(divisor)})"
            )
            return volumetric
        return actual

    def _usd(self, amount_usd: float) -> float:
        return amount_usd * self.settings.fx_usd_to_ngn


# ─────────────────────────────────────────────────────────────────────────────
# PARCEL
# ─────────────────────────────────────────────────────────────────────────────
class ParcelCalculator(_Base):
    """
    Domestic: lane base (or long-distance fallback) × weight factor,
    surcharge = base × domestic pct.
    International: USD weight bracket × origin-region adjustment,
    surcharge = base × international pct, both converted at the FX rate.
    """
    MODE = "parcel"

    def _price(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        if is_domestic(request.origin) and is_domestic(request.destination):
            return self._domestic(request, assumptions)
        return self._international(request, assumptions)

    def _domestic(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        s = self.settings
        assumptions.append("Domestic Nigeria parcel averages (2026)")

        o_city = resolve_domestic_city(request.origin)
        d_city = resolve_domestic_city(request.destination)
        lane = lane_base_ngn(o_city, d_city)
        if lane is not None:
            base = lane
            assumptions.append(
                f"Lane: {o_city or request.origin} ↔ {d_city or request.destination} (₦{fmt(lane)} base)"
            )
        else:
            base = s.parcel_domestic_fallback_ngn
            assumptions.append("Lane: unmapped Nigeria route — long-distance fallback used")

        chargeable = self._chargeable_kg(request, s.volume_divisor_parcel, assumptions)
        factor = self.weight_factor(chargeable)
        assumptions.append(f"Weight factor applied: ×{factor} for {fmt(chargeable)} kg (chargeable)")

        base *= factor
        return _Priced(base=base, surcharges=base * s.parcel_domestic_surcharge_pct)

    def weight_factor(self, chargeable_kg: float) -> float:
        for threshold, factor in self.settings.parcel_weight_factors:
            if chargeable_kg > threshold:
                return factor
        return 1.0

    def _international(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        s = self.settings
        assumptions.append("International express parcel averages (2026)")

        o_region = detect_region(request.origin)
        d_region = detect_region(request.destination)
        assumptions.append(f"Origin region: {o_region} | Destination region: {d_region}")

        chargeable = self._chargeable_kg(request, s.volume_divisor_parcel, assumptions)
        base_usd = next(usd for max_kg, usd in PARCEL_INTL_BRACKETS_USD if chargeable <= max_kg)

        adj = PARCEL_REGIONAL_ADJUSTMENT.get(o_region, 1.0)
        base_usd *= adj
        assumptions.append(f"Rate bracket base: ${fmt(base_usd)} USD (regional adj ×{adj})")

        surcharge_usd = base_usd * s.parcel_intl_surcharge_pct
        return _Priced(base=self._usd(base_usd), surcharges=self._usd(surcharge_usd))


# ─────────────────────────────────────────────────────────────────────────────
# OCEAN
# ─────────────────────────────────────────────────────────────────────────────
class OceanCalculator(_Base):
    """
    Base: origin region × container size (USD), +premium when the
    destination is outside Nigeria.
    Surcharges: port congestion + documentation + BAF/CAF % + demurrage days.
    """
    MODE = "ocean"

    def _price(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        s = self.settings
        assumptions.append("Ocean container averages (2026), includes basic surcharges")

        container = request.container_type or "40ft"
        o_region = detect_region(request.origin)
        d_region = detect_region(request.destination)
        assumptions.append(
            f"Origin region: {o_region} | Destination region: {d_region} | Container: {container}"
        )

        rates = OCEAN_BASE_USD.get(o_region, OCEAN_BASE_USD["unknown"])
        base_usd = rates[container]

        if not is_domestic(request.destination):
            premium = s.ocean_foreign_destination_premium_pct
            base_usd *= 1 + premium
            assumptions.append(f"Non-Nigeria destination: +{fmt(premium * 100)}% applied")

        congestion = s.ocean_port_congestion_usd
        documentation = s.ocean_documentation_usd
        baf_caf = base_usd * s.ocean_baf_caf_pct

        days = float(request.demurrage_days or 0)
        demurrage = days * s.ocean_demurrage_usd_per_day if days > 0 else 0.0
        if days > 0:
            assumptions.append(
                f"Includes detention/demurrage for {fmt(days)} days (${fmt(s.ocean_demurrage_usd_per_day)}/day)"
            )

        assumptions.append(
            f"Container {container}, baseUSD={fmt(base_usd)}, BAF/CAF={fmt(baf_caf)}, "
            f"congestion={fmt(congestion)}, docs={fmt(documentation)}"
        )
        surcharge_usd = congestion + documentation + baf_caf + demurrage
        return _Priced(base=self._usd(base_usd), surcharges=self._usd(surcharge_usd))


# ─────────────────────────────────────────────────────────────────────────────
# AIR
# ─────────────────────────────────────────────────────────────────────────────
class AirCalculator(_Base):
    """
    Chargeable weight = max(actual, volumetric), floored at the IATA-style
    minimum.  Base = chargeable × region rate (standard or express).
    """
    MODE = "air"

    def _price(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        s = self.settings
        assumptions.append("Air freight averages (2026) using chargeable weight")

        o_region = detect_region(request.origin)
        d_region = detect_region(request.destination)
        express = bool(request.is_express)
        assumptions.append(
            f"Origin region: {o_region} | Destination region: {d_region}{' | Express' if express else ''}"
        )

        divisor = s.volume_divisor_air
        if self._volumetric_kg(request, divisor) is not None:
            assumptions.append(f"Volumetric divisor: (L×W×H cm)/{fmt(divisor)}")
        chargeable = self._chargeable_kg(request, divisor, assumptions)

        if chargeable < s.air_min_chargeable_kg:
            assumptions.append(f"Minimum chargeable weight applied: {fmt(s.air_min_chargeable_kg)} kg")
            chargeable = s.air_min_chargeable_kg

        rates = AIR_RATE_USD_PER_KG.get(o_region, AIR_RATE_USD_PER_KG["unknown"])
        service = "express" if express else "standard"
        rate = rates[service]
        assumptions.append(f"Rate used: ${rate}/kg (USD, {o_region}, {service})")

        base_usd = chargeable * rate
        surcharge_usd = base_usd * s.air_surcharge_pct
        return _Priced(
            base=self._usd(base_usd),
            surcharges=self._usd(surcharge_usd),
            chargeable_weight_kg=chargeable,
        )


# ─────────────────────────────────────────────────────────────────────────────
# GROUND
# ─────────────────────────────────────────────────────────────────────────────
class GroundCalculator(_Base):
    """
    Intra-city (both ends in the same recognised city): flat per-km rate,
    city-specific where tabulated.  Otherwise a distance-tiered per-km rate.
    """
    MODE = "ground"

    def _price(self, request: QuoteRequest, assumptions: list[str]) -> _Priced:
        s = self.settings
        km = float(request.distance_km or 0.0)
        if not math.isfinite(km) or km <= 0:
            raise ValueError("ground pricing needs a positive distance_km")

        o_city = resolve_domestic_city(request.origin)
        d_city = resolve_domestic_city(request.destination)

        if o_city and o_city == d_city:
            per_km = GROUND_INTRA_CITY_NGN_PER_KM.get(o_city)
            if per_km is None:
                per_km = s.ground_ngn_per_km
                assumptions.append(f"Nigeria intra-city trucking ({o_city}): ₦{fmt(per_km)}/km (generic rate)")
            else:
                assumptions.append(f"Nigeria intra-city trucking ({o_city}): ₦{fmt(per_km)}/km")
        else:
            per_km = self.tier_rate(km)
            assumptions.append(
                f"Nigeria inter-city trucking ({fmt(km)} km): ₦{fmt(per_km)}/km (distance-tiered)"
            )

        assumptions.append("Nigeria domestic trucking averages (2026)")
        base = km * per_km
        assumptions.append(f"Distance: {fmt(km)} km")
        return _Priced(base=base, surcharges=base * s.ground_surcharge_pct)

    @staticmethod
    def tier_rate(km: float) -> float:
        return next(rate for max_km, rate in GROUND_DISTANCE_TIERS if km <= max_km)
