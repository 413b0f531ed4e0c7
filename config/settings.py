"""
config/settings.py
Central configuration: reads from environment variables and .env file.

Every rate-engine knob is a named attribute with a hardcoded default.
Build once at startup (module-level ``settings``) or per test with
``Settings.from_mapping({...})``, which never touches os.environ.
"""
import math
from pathlib import Path
from typing import Mapping, Optional

BASE_DIR = Path(__file__).resolve().parent.parent

_DEFAULT_WEIGHT_FACTORS = "30:3.5,20:2.8,10:2.0,5:1.5,1:1.2"


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def _text(env: Mapping[str, str], *names: str, default: str = "") -> str:
    for name in names:
        raw = str(env.get(name) or "").strip()
        if raw:
            return raw
    return default


def _breakpoints(raw: str) -> list[tuple[float, float]]:
    """Parse ``"30:3.5,20:2.8"`` into [(30.0, 3.5), (20.0, 2.8)], highest threshold first."""
    pairs: list[tuple[float, float]] = []
    for chunk in raw.split(","):
        if ":" not in chunk:
            continue
        threshold, _, factor = chunk.partition(":")
        try:
            pairs.append((float(threshold), float(factor)))
        except ValueError:
            continue
    return sorted(pairs, key=lambda p: p[0], reverse=True)


class Settings:

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self._load(env)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "Settings":
        """Isolated settings for tests: only ``mapping`` is consulted."""
        return cls(env=dict(mapping))

    def _load(self, env: Optional[Mapping[str, str]]):
        import os
        if env is None:
            env_file = BASE_DIR / ".env"
            if env_file.exists():
                for line in env_file.read_text().splitlines():
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, _, val = line.partition("=")
                        os.environ.setdefault(key.strip(), val.strip())
            env = os.environ

        # Pricing pipeline
        self.currency         = "NGN"
        self.fx_usd_to_ngn    = _number(env, "MANUAL_USD_TO_NGN", 1_550)
        self.inflation_factor = _number(env, "MANUAL_QUOTES_INFLATION_2026", 1.03)
        self.market_multiplier = {
            "parcel": _number(env, "MANUAL_QUOTES_MARKET_MULT_PARCEL", 1.06),
            "ocean":  _number(env, "MANUAL_QUOTES_MARKET_MULT_OCEAN", 0.88),
            "air":    _number(env, "MANUAL_QUOTES_MARKET_MULT_AIR", 1.03),
            "ground": _number(env, "MANUAL_QUOTES_MARKET_MULT_GROUND", 1.02),
        }
        self.margin_pct = {
            "parcel": _number(env, "MANUAL_QUOTES_MARGIN_PARCEL", 0.275),
            "ocean":  _number(env, "MANUAL_QUOTES_MARGIN_OCEAN", 0.20),
            "air":    _number(env, "MANUAL_QUOTES_MARGIN_AIR", 0.25),
            "ground": _number(env, "MANUAL_QUOTES_MARGIN_GROUND", 0.40),
        }

        # Volumetric divisors (cm³ per kg)
        self.volume_divisor_parcel = _number(env, "MANUAL_VOLUME_DIVISOR_PARCEL", 5_000)
        self.volume_divisor_air    = _number(env, "MANUAL_VOLUME_DIVISOR_AIR", 6_000)

        # Parcel
        self.parcel_domestic_fallback_ngn  = _number(env, "MANUAL_PARCEL_DOMESTIC_FALLBACK_NGN", 15_000)
        self.parcel_weight_factors         = _breakpoints(
            _text(env, "MANUAL_PARCEL_WEIGHT_FACTORS", default=_DEFAULT_WEIGHT_FACTORS)
        ) or _breakpoints(_DEFAULT_WEIGHT_FACTORS)
        self.parcel_domestic_surcharge_pct = _number(env, "MANUAL_PARCEL_DOMESTIC_SURCHARGE_PCT", 0.15)
        self.parcel_intl_surcharge_pct     = _number(env, "MANUAL_PARCEL_SURCHARGE_PCT", 0.25)

        # Ocean (USD)
        self.ocean_port_congestion_usd             = _number(env, "MANUAL_OCEAN_PORT_CONGESTION_USD", 400)
        self.ocean_documentation_usd               = _number(env, "MANUAL_OCEAN_DOCUMENTATION_USD", 100)
        self.ocean_baf_caf_pct                     = _number(env, "MANUAL_OCEAN_BAF_CAF_PCT", 0.075)
        self.ocean_demurrage_usd_per_day           = _number(env, "MANUAL_OCEAN_DEMURRAGE_USD_PER_DAY", 200)
        self.ocean_foreign_destination_premium_pct = _number(env, "MANUAL_OCEAN_FOREIGN_DEST_PREMIUM_PCT", 0.15)

        # Air
        self.air_min_chargeable_kg = _number(env, "MANUAL_AIR_MIN_CHARGEABLE_KG", 45)
        self.air_surcharge_pct     = _number(env, "MANUAL_AIR_SURCHARGE_PCT", 0.15)

        # Ground
        self.ground_ngn_per_km     = _number(env, "MANUAL_GROUND_NGN_PER_KM", 250)
        self.ground_surcharge_pct  = _number(env, "MANUAL_GROUND_SURCHARGE_PCT", 0.10)

        # Distance resolution providers
        self.locationiq_api_key        = _text(env, "LOCATIONIQ_API_KEY", "LOCATIONIQ_KEY")
        self.locationiq_geocode_url    = _text(
            env, "LOCATIONIQ_GEOCODE_URL", default="https://us1.locationiq.com/v1/search"
        )
        self.locationiq_directions_url = _text(
            env, "LOCATIONIQ_DIRECTIONS_URL", default="https://us1.locationiq.com/v1/directions/driving"
        )
        self.locationiq_timeout_ms     = _number(env, "LOCATIONIQ_TIMEOUT_MS", 8_000)
        self.openroute_api_key         = _text(env, "OPENROUTE_API_KEY", "OPENROUTESERVICE_API_KEY")
        self.openroute_directions_url  = _text(
            env, "OPENROUTE_DIRECTIONS_URL",
            default="https://api.openrouteservice.org/v2/directions/driving-car",
        )
        self.openroute_timeout_ms      = _number(env, "OPENROUTE_TIMEOUT_MS", 8_000)
        self.distance_cache_ttl_seconds = _number(env, "DISTANCE_CACHE_TTL_SECONDS", 24 * 60 * 60)

        # Free-text extraction strategy: "regex" | "llm"
        self.quote_extractor = _text(env, "QUOTE_EXTRACTOR", default="regex").lower()
        self.groq_api_key    = _text(env, "GROQ_API_KEY")
        self.groq_model      = _text(env, "GROQ_MODEL", default="llama-3.3-70b-versatile")

        self.api_host    = _text(env, "API_HOST", default="0.0.0.0")
        self.api_port    = int(_number(env, "API_PORT", 8000))
        self.api_title   = "Freight Rate Estimation API"
        self.api_version = "1.0.0"

        self.metrics_port = int(_number(env, "METRICS_PORT", 9090))
        self.log_level    = _text(env, "LOG_LEVEL", default="INFO")


settings = Settings()
