"""
tests/test_merger_guardrails.py
Request merging, required-field validation and the output guardrail.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

import guardrails.guardrail_layer as guardrail_layer
from calculation_engine.calculators import Breakdown, GroundCalculator, Money, Quote
from guardrails.guardrail_layer import (
    SAME_LOCATION_MESSAGE,
    GuardrailLayer,
    InputValidator,
    OutputValidator,
)
from query_processor.merger import merge_request, same_location
from query_processor.models import QuoteRequest


class TestMergeRequest:

    def test_explicit_fields_win(self):
        explicit = QuoteRequest(origin="Abuja", weight_kg=3)
        extracted = QuoteRequest(origin="China", destination="Lagos", weight_kg=10, mode="air")
        merged = merge_request(explicit, extracted)
        assert merged.origin == "Abuja"
        assert merged.weight_kg == 3
        assert merged.destination == "Lagos"
        assert merged.mode == "air"

    def test_extraction_is_not_mutated(self):
        extracted = QuoteRequest(origin="China")
        merge_request(QuoteRequest(origin="Accra"), extracted)
        assert extracted.origin == "China"

    def test_invalid_explicit_mode_falls_back_to_extracted(self):
        merged = merge_request(QuoteRequest(mode="teleport"), QuoteRequest(mode="ocean"))
        assert merged.mode == "ocean"

    def test_mode_is_normalised(self):
        assert merge_request(QuoteRequest(mode=" Ground ")).mode == "ground"

    def test_blank_places_become_none(self):
        merged = merge_request(QuoteRequest(origin="   ", destination=" Kano "))
        assert merged.origin is None
        assert merged.destination == "Kano"

    @pytest.mark.parametrize("raw,expected", [
        ("40FT", "40ft"), ("40 ft", "40ft"), ("20-FT", "20ft"), ("40'", "40ft"),
        ("40HQ", "40hc"), (" 40hc ", "40hc"), ("53ft", None), ("big", None),
    ])
    def test_container_type_is_normalised(self, raw, expected):
        assert merge_request(QuoteRequest(container_type=raw)).container_type == expected

    def test_unrecognised_explicit_container_falls_back_to_extracted(self):
        merged = merge_request(QuoteRequest(container_type="45ft"), QuoteRequest(container_type="20ft"))
        assert merged.container_type == "20ft"

    def test_no_extraction(self):
        merged = merge_request(QuoteRequest(mode="parcel", origin="Lagos"))
        assert merged.mode == "parcel"
        assert merged.destination is None


class TestSameLocation:

    @pytest.mark.parametrize("origin,destination", [
        ("Lagos", "Lagos"), ("lagos", " LAGOS "), ("Port Harcourt", "port harcourt"),
    ])
    def test_matches(self, origin, destination):
        assert same_location(QuoteRequest(origin=origin, destination=destination))

    def test_different_or_missing(self):
        assert not same_location(QuoteRequest(origin="Lagos", destination="Kano"))
        assert not same_location(QuoteRequest(origin="Lagos"))


class TestInputValidator:

    @pytest.fixture
    def validator(self):
        return InputValidator()

    def test_nothing_known(self, validator):
        assert validator.missing_fields(QuoteRequest()) == ["mode", "origin", "destination"]

    @pytest.mark.parametrize("mode,field", [
        ("parcel", "weightKg"), ("air", "weightKg"), ("ocean", "containerType"), ("ground", "distanceKm"),
    ])
    def test_mode_specific_field(self, validator, mode, field):
        request = QuoteRequest(mode=mode, origin="China", destination="Lagos")
        assert validator.missing_fields(request) == [field]

    def test_order_is_stable(self, validator):
        request = QuoteRequest(mode="air", destination="Lagos")
        assert validator.missing_fields(request) == ["origin", "weightKg"]
        assert validator.missing_fields(request) == ["origin", "weightKg"]

    @pytest.mark.parametrize("weight", [0, -1, float("nan"), float("inf")])
    def test_weight_must_be_finite_and_positive(self, validator, weight):
        request = QuoteRequest(mode="parcel", origin="Lagos", destination="Abuja", weight_kg=weight)
        assert validator.missing_fields(request) == ["weightKg"]

    def test_unrecognised_container_counts_as_missing(self, validator):
        request = QuoteRequest(mode="ocean", origin="China", destination="Lagos", container_type="40 FT")
        assert validator.missing_fields(request) == ["containerType"]

    def test_complete_request_passes(self, validator):
        report = validator.validate(QuoteRequest(mode="ground", origin="Lagos", destination="Kano", distance_km=1000))
        assert report.passed
        assert report.missing_fields == []

    def test_same_location_is_an_issue_not_a_missing_field(self, validator):
        report = validator.validate(QuoteRequest(mode="parcel", origin="Lagos", destination="lagos"))
        assert not report.passed
        assert report.issues == [SAME_LOCATION_MESSAGE]
        assert report.missing_fields == []


class TestOutputValidator:

    def _quote(self, base, surcharges, margin, total, mode="ground", chargeable=None):
        return Quote(
            mode=mode, origin="Lagos", destination="Kano",
            breakdown=Breakdown(
                base=Money(base), surcharges=Money(surcharges), margin=Money(margin), total=Money(total),
            ),
            chargeable_weight_kg=chargeable,
        )

    def test_real_quote_passes(self, cfg):
        quote = GroundCalculator(cfg).calculate(
            QuoteRequest(mode="ground", origin="Lagos", destination="Kano", distance_km=1000)
        )
        assert OutputValidator(cfg).validate(quote).passed

    def test_total_mismatch(self, cfg):
        report = OutputValidator(cfg).validate(self._quote(100, 10, 44, 999))
        assert not report.passed
        assert any("does not equal parts" in i for i in report.issues)

    def test_margin_mismatch(self, cfg):
        report = OutputValidator(cfg).validate(self._quote(100, 10, 1, 111))
        assert any("Margin" in i for i in report.issues)

    def test_negative_amount(self, cfg):
        report = OutputValidator(cfg).validate(self._quote(-100, 0, -40, -140))
        assert any("negative" in i for i in report.issues)

    def test_air_below_minimum(self, cfg):
        report = OutputValidator(cfg).validate(self._quote(100, 15, 28.75, 143.75, mode="air", chargeable=10))
        assert report.issues == ["Air chargeable weight is below the 45 kg minimum"]

    def test_layer_returns_report_without_raising(self, cfg):
        report = GuardrailLayer(cfg).validate_output(self._quote(100, 10, 44, 999))
        assert not report.passed


class TestGuardrailLogging:

    @pytest.fixture
    def log(self, monkeypatch):
        mock_log = MagicMock()
        monkeypatch.setattr(guardrail_layer, "log", mock_log)
        return mock_log

    @staticmethod
    def _clarifications(log):
        return [c for c in log.info.call_args_list if c.args and c.args[0] == "Request needs clarification"]

    def test_resolved_ground_distance_logs_no_clarification(self, engine, log):
        response = engine.estimate(QuoteRequest(mode="ground", origin="Lagos", destination="Abuja"))
        assert response.status == "ok"
        assert self._clarifications(log) == []

    def test_unresolvable_ground_distance_logs_one_clarification(self, engine, log):
        response = engine.estimate(QuoteRequest(mode="ground", origin="Atlantis", destination="El Dorado"))
        assert response.missing_fields == ["distanceKm"]
        calls = self._clarifications(log)
        assert len(calls) == 1
        assert calls[0].kwargs["missing"] == ["distanceKm"]

    def test_same_location_is_warned_and_counted(self, cfg, log):
        report = GuardrailLayer(cfg).check_same_location(QuoteRequest(origin="Kano", destination="kano"))
        assert not report.passed
        log.warning.assert_called_once()
