"""
explanation/summary.py
Turns a QuoteResponse into the prose reply the chat layer sends back.

Deterministic: the numbers and the assumption lines come straight from the
breakdown, nothing is generated.
"""
from calculation_engine.engine import STATUS_CLARIFY, STATUS_OK, QuoteResponse

_FIELD_PROMPTS = {
    "mode":          "the delivery mode (parcel, air, ocean or ground)",
    "origin":        "where the shipment starts",
    "destination":   "where it is going",
    "weightKg":      "the weight in kg",
    "containerType": "the container size (20ft, 40ft or 40hc)",
    "distanceKm":    "the trip distance in km",
}

_MODE_LABELS = {
    "parcel": "Parcel",
    "air":    "Air freight",
    "ocean":  "Ocean freight",
    "ground": "Ground trucking",
}


def _amount(money) -> str:
    symbol = "₦" if money.currency == "NGN" else f"{money.currency} "
    return f"{symbol}{money.amount:,.2f}"


def _join(items: list[str]) -> str:
    if len(items) <= 1:
        return "".join(items)
    return ", ".join(items[:-1]) + " and " + items[-1]


def summarize_response(response: QuoteResponse) -> str:
    if response.status == STATUS_CLARIFY:
        asks = [_FIELD_PROMPTS.get(name, name) for name in response.missing_fields]
        return f"To estimate this shipment I still need {_join(asks)}."

    if response.status != STATUS_OK or response.quote is None:
        return response.message

    quote = response.quote
    b = quote.breakdown
    route = f"{quote.origin} → {quote.destination}"
    lines = [
        f"{_MODE_LABELS.get(quote.mode, quote.mode.title())} estimate for {route}: {_amount(b.total)}",
        f"  Base: {_amount(b.base)}",
        f"  Surcharges: {_amount(b.surcharges)}",
        f"  Margin: {_amount(b.margin)}",
    ]
    if quote.chargeable_weight_kg is not None:
        lines.append(f"  Chargeable weight: {quote.chargeable_weight_kg:g} kg")
    if b.assumptions:
        lines.append("Assumptions:")
        # the disclaimer closes the summary instead
        lines.extend(f"  - {a}" for a in b.assumptions if a != response.message)
    lines.append(response.message)
    return "\n".join(lines)
