"""
guardrails/guardrail_layer.py
Quality checks around the rate calculators:
  1. InputValidator : same-location rejection and per-mode required fields
  2. OutputValidator: breakdown arithmetic and air minimum weight
"""
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from monitoring import GUARDRAIL_FAILURES, get_logger
from query_processor.merger import same_location
from query_processor.models import CONTAINER_TYPES, QuoteRequest

if TYPE_CHECKING:
    from calculation_engine.calculators import Quote

log = get_logger(__name__)

SAME_LOCATION_MESSAGE = (
    "Origin and destination cannot be the same location. Please provide different addresses."
)

# Wire (camelCase) names, in the order they are reported back to the caller
REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "parcel": ("origin", "destination", "weightKg"),
    "air":    ("origin", "destination", "weightKg"),
    "ocean":  ("origin", "destination", "containerType"),
    "ground": ("origin", "destination", "distanceKm"),
}

_TOLERANCE = 0.02


def _positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


@dataclass
class ValidationReport:
    passed: bool
    missing_fields: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ── 1. Input Validator ────────────────────────────────────────────────────────

class InputValidator:

    def check_same_location(self, request: QuoteRequest) -> ValidationReport:
        if same_location(request):
            return ValidationReport(passed=False, issues=[SAME_LOCATION_MESSAGE])
        return ValidationReport(passed=True)

    def missing_fields(self, request: QuoteRequest) -> list[str]:
        """Ordered, deduplicated list of required fields the request lacks."""
        missing: list[str] = []
        if not request.mode:
            missing.append("mode")
        if not request.origin:
            missing.append("origin")
        if not request.destination:
            missing.append("destination")

        if request.mode in ("parcel", "air") and not _positive(request.weight_kg):
            missing.append("weightKg")
        if request.mode == "ocean" and request.container_type not in CONTAINER_TYPES:
            missing.append("containerType")
        if request.mode == "ground" and not _positive(request.distance_km):
            missing.append("distanceKm")

        return list(dict.fromkeys(missing))

    def validate(self, request: QuoteRequest) -> ValidationReport:
        report = self.check_same_location(request)
        if not report.passed:
            return report
        missing = self.missing_fields(request)
        return ValidationReport(passed=not missing, missing_fields=missing)


# ── 2. Output Validator ───────────────────────────────────────────────────────

class OutputValidator:

    def __init__(self, settings) -> None:
        self.settings = settings

    def validate(self, quote: "Quote") -> ValidationReport:
        issues: list[str] = []
        b = quote.breakdown
        parts = (b.base.amount, b.surcharges.amount, b.margin.amount, b.total.amount)

        if any(amount < 0 for amount in parts):
            issues.append("Breakdown contains a negative amount")

        expected_total = b.base.amount + b.surcharges.amount + b.margin.amount
        if abs(b.total.amount - expected_total) > _TOLERANCE:
            issues.append(f"Total {b.total.amount:.2f} does not equal parts {expected_total:.2f}")

        pct = self.settings.margin_pct.get(quote.mode, 0.0)
        expected_margin = (b.base.amount + b.surcharges.amount) * pct
        if abs(b.margin.amount - expected_margin) > _TOLERANCE:
            issues.append(f"Margin {b.margin.amount:.2f} differs from expected {expected_margin:.2f}")

        if quote.mode == "air":
            minimum = self.settings.air_min_chargeable_kg
            if quote.chargeable_weight_kg is None or quote.chargeable_weight_kg < minimum:
                issues.append(f"Air chargeable weight is below the {minimum:g} kg minimum")

        return ValidationReport(passed=not issues, issues=issues)


# ── Guardrail Orchestrator ────────────────────────────────────────────────────

class GuardrailLayer:
    """
    Runs both validators.  Input failures stop the request; output failures
    are logged and counted but the quote is still returned.
    """

    def __init__(self, settings) -> None:
        self._input_validator  = InputValidator()
        self._output_validator = OutputValidator(settings)

    def check_same_location(self, request: QuoteRequest) -> ValidationReport:
        """Runs before distance resolution; only identical endpoints fail here."""
        report = self._input_validator.check_same_location(request)
        if not report.passed:
            log.warning("Input validation failed", issues=report.issues)
            GUARDRAIL_FAILURES.labels(check_type="input").inc()
        return report

    def missing_fields(self, request: QuoteRequest) -> list[str]:
        """Runs once every resolvable field has been filled in."""
        missing = self._input_validator.missing_fields(request)
        if missing:
            log.info("Request needs clarification", mode=request.mode, missing=missing)
        return missing

    def validate_output(self, quote: "Quote") -> ValidationReport:
        report = self._output_validator.validate(quote)
        if not report.passed:
            log.warning("Guardrail output check failed", mode=quote.mode, issues=report.issues)
            GUARDRAIL_FAILURES.labels(check_type="output").inc()
        return report
