"""
tests/test_settings_summary.py
Configuration defaults/overrides, region classifiers and the chat summary.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from calculation_engine.calculators import ESTIMATE_DISCLAIMER
from calculation_engine.engine import QuoteResponse
from config.settings import Settings
from explanation.summary import summarize_response
from knowledge_base.regions import detect_region, is_domestic, resolve_domestic_city
from query_processor.models import QuoteRequest


class TestSettings:

    def test_defaults(self, cfg):
        assert cfg.currency == "NGN"
        assert cfg.fx_usd_to_ngn == 1550
        assert cfg.inflation_factor == 1.03
        assert cfg.market_multiplier == {"parcel": 1.06, "ocean": 0.88, "air": 1.03, "ground": 1.02}
        assert cfg.margin_pct == {"parcel": 0.275, "ocean": 0.20, "air": 0.25, "ground": 0.40}
        assert cfg.volume_divisor_parcel == 5000
        assert cfg.volume_divisor_air == 6000
        assert cfg.air_min_chargeable_kg == 45
        assert cfg.locationiq_timeout_ms == 8000
        assert cfg.distance_cache_ttl_seconds == 86_400
        assert cfg.parcel_weight_factors[0] == (30.0, 3.5)

    def test_overrides(self):
        cfg = Settings.from_mapping({
            "MANUAL_USD_TO_NGN": "1600",
            "MANUAL_QUOTES_MARKET_MULT_OCEAN": "1.1",
            "LOCATIONIQ_KEY": "pk.legacy",
            "OPENROUTESERVICE_API_KEY": "ors",
        })
        assert cfg.fx_usd_to_ngn == 1600
        assert cfg.market_multiplier["ocean"] == 1.1
        assert cfg.locationiq_api_key == "pk.legacy"
        assert cfg.openroute_api_key == "ors"

    @pytest.mark.parametrize("raw", ["", "abc", "nan", "inf"])
    def test_unusable_numbers_fall_back(self, raw):
        assert Settings.from_mapping({"MANUAL_USD_TO_NGN": raw}).fx_usd_to_ngn == 1550

    def test_garbled_weight_factors_fall_back(self):
        cfg = Settings.from_mapping({"MANUAL_PARCEL_WEIGHT_FACTORS": "nonsense"})
        assert cfg.parcel_weight_factors == Settings.from_mapping({}).parcel_weight_factors


class TestRegions:

    @pytest.mark.parametrize("place", ["Lagos", "Ikeja, Lagos", "Port Harcourt", "Apapa", "somewhere in Nigeria"])
    def test_domestic(self, place):
        assert is_domestic(place)
        assert detect_region(place) == "nigeria"

    @pytest.mark.parametrize("place,region", [
        ("Shanghai, China", "asia"),
        ("Accra", "africa"),
        ("Dubai", "middleeast"),
        ("Hamburg, Germany", "europe"),
        ("Houston, USA", "usa"),
        ("Atlantis", "unknown"),
        ("", "unknown"),
    ])
    def test_world_regions(self, place, region):
        assert detect_region(place) == region

    @pytest.mark.parametrize("place,key", [
        ("LAGOS", "lagos"), ("Port Harcourt", "ph"), ("Abeokuta, Ogun", "abeokuta"),
        ("Benin City", "benin"), ("Paris", ""),
    ])
    def test_canonical_city(self, place, key):
        assert resolve_domestic_city(place) == key


class TestSummary:

    def test_ok(self, engine):
        text = summarize_response(engine.estimate(QuoteRequest(free_text="10kg from China to Lagos by air")))
        assert text.startswith("Air freight estimate for China → Lagos: ₦")
        assert "Chargeable weight: 45 kg" in text
        assert "Minimum chargeable weight applied: 45 kg" in text
        assert text.endswith("(live pricing and availability).")

    def test_disclaimer_appears_once(self, engine):
        response = engine.estimate(QuoteRequest(mode="parcel", origin="Lagos", destination="Abuja", weight_kg=1))
        assert response.message == ESTIMATE_DISCLAIMER
        assert ESTIMATE_DISCLAIMER in response.quote.breakdown.assumptions
        assert summarize_response(response).count(ESTIMATE_DISCLAIMER) == 1

    def test_clarification(self):
        response = QuoteResponse(
            status="needs_clarification", message="Missing fields for manual quote",
            missing_fields=["origin", "weightKg"],
        )
        assert summarize_response(response) == (
            "To estimate this shipment I still need where the shipment starts and the weight in kg."
        )

    def test_error(self):
        response = QuoteResponse(status="error", message="Origin and destination cannot be the same location.")
        assert summarize_response(response) == "Origin and destination cannot be the same location."
