"""
tests/test_monitoring.py
Stage timing and per-outcome counters.
"""
import sys
from pathlib import Path

import pytest
from prometheus_client import REGISTRY

sys.path.insert(0, str(Path(__file__).parent.parent))

from monitoring import stage_timer, timed
from query_processor.models import QuoteRequest


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestTiming:

    def test_stage_timer_observes_once(self):
        before = _sample("freight_quote_duration_seconds_count", stage="unit_stage")
        with stage_timer("unit_stage"):
            pass
        assert _sample("freight_quote_duration_seconds_count", stage="unit_stage") == before + 1

    def test_timed_records_failed_calls(self):
        @timed("unit_failing")
        def boom():
            raise ValueError("nope")

        before = _sample("freight_quote_duration_seconds_count", stage="unit_failing")
        with pytest.raises(ValueError):
            boom()
        assert _sample("freight_quote_duration_seconds_count", stage="unit_failing") == before + 1

    def test_timed_keeps_name_and_result(self):
        @timed("unit_ok")
        def answer():
            return 42

        assert answer() == 42
        assert answer.__name__ == "answer"


class TestQuoteCounters:

    def test_outcomes_counted_by_mode(self, engine):
        ok_before = _sample("freight_quote_requests_total", mode="ground", status="ok")
        clarify_before = _sample("freight_quote_requests_total", mode="ocean", status="needs_clarification")

        engine.estimate(QuoteRequest(mode="ground", origin="Lagos", destination="Kano", distance_km=50))
        engine.estimate(QuoteRequest(mode="ocean", origin="China", destination="Lagos"))

        assert _sample("freight_quote_requests_total", mode="ground", status="ok") == ok_before + 1
        assert _sample(
            "freight_quote_requests_total", mode="ocean", status="needs_clarification",
        ) == clarify_before + 1

    def test_pricing_stage_timed_per_mode(self, engine):
        before = _sample("freight_quote_duration_seconds_count", stage="price_ground")
        engine.estimate(QuoteRequest(mode="ground", origin="Lagos", destination="Kano", distance_km=50))
        assert _sample("freight_quote_duration_seconds_count", stage="price_ground") == before + 1
