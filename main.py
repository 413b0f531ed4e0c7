"""
main.py
CLI entry point for the Freight Rate Estimation engine.

Usage:
  python main.py demo
  python main.py quote --text "10kg from China to Lagos by air"
  python main.py quote --mode ground --origin Lagos --destination Kano --distance-km 1000
  python main.py api
"""
import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when running directly
sys.path.insert(0, str(Path(__file__).parent))

# ── Sample requests covering every mode and outcome ───────────────────────────
DEMO_REQUESTS = [
    {"free_text": "10kg from China to Lagos by air"},
    {"free_text": "Ocean shipment from China to Lagos"},
    {"free_text": "Ocean 40hc from China to Lagos with 3 days demurrage"},
    {"mode": "ground", "origin": "Lagos", "destination": "Kano", "distance_km": 1000},
    {"mode": "ground", "origin": "Lagos Island", "destination": "Ikeja, Lagos", "distance_km": 25},
    {"mode": "parcel", "origin": "Lagos", "destination": "Abuja", "weight_kg": 12},
    {"mode": "parcel", "origin": "London", "destination": "Lagos", "weight_kg": 2.5},
    {"mode": "parcel", "origin": "Lagos", "destination": "Lagos", "weight_kg": 1},
]


# Demo mode

def run_demo() -> None:
    from rich import box
    from rich.console import Console
    from rich.table import Table

    from calculation_engine.engine import QuoteEngine
    from query_processor.models import QuoteRequest

    console = Console()
    console.print("\n[bold blue]═══ FREIGHT RATE ESTIMATION DEMO ═══[/bold blue]\n")

    engine = QuoteEngine()

    table = Table(title="Manual quotes", box=box.ROUNDED, show_lines=True)
    table.add_column("Request",    style="cyan", width=44)
    table.add_column("Status",     width=20)
    table.add_column("Mode",       width=8)
    table.add_column("Base",       justify="right", width=14)
    table.add_column("Surcharges", justify="right", width=14)
    table.add_column("Margin",     justify="right", width=14)
    table.add_column("Total (₦)",  justify="right", style="green", width=16)

    for params in DEMO_REQUESTS:
        request = QuoteRequest(**params)
        response = engine.estimate(request)
        label = request.free_text or f"{request.mode}: {request.origin} → {request.destination}"

        if response.ok:
            b = response.quote.breakdown
            table.add_row(
                label, "[green]ok[/green]", response.quote.mode,
                f"{b.base.amount:,.2f}", f"{b.surcharges.amount:,.2f}",
                f"{b.margin.amount:,.2f}", f"[bold]{b.total.amount:,.2f}[/bold]",
            )
        elif response.status == "needs_clarification":
            table.add_row(
                label, "[yellow]needs_clarification[/yellow]", request.mode or "—",
                "", "", "", f"missing: {', '.join(response.missing_fields)}",
            )
        else:
            table.add_row(label, "[red]error[/red]", request.mode or "—", "", "", "", response.message)

    console.print(table)

    # Assumptions for the first priced quote
    first = engine.estimate(QuoteRequest(**DEMO_REQUESTS[0]))
    if first.ok:
        console.print(f"\n  [bold]Assumptions ({DEMO_REQUESTS[0]['free_text']}):[/bold]")
        for line in first.quote.breakdown.assumptions:
            console.print(f"    • {line}")
    console.print()


# Quote mode

def run_quote(args: argparse.Namespace) -> None:
    from calculation_engine.engine import QuoteEngine
    from explanation.summary import summarize_response
    from query_processor.models import QuoteRequest

    request = QuoteRequest(
        free_text      =args.text,
        mode           =args.mode,
        origin         =args.origin,
        destination    =args.destination,
        weight_kg      =args.weight_kg,
        container_type =args.container_type,
        distance_km    =args.distance_km,
        is_express     =True if args.express else None,
    )
    response = QuoteEngine().estimate(request)
    print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    print()
    print(summarize_response(response))


# ── API mode ──────────────────────────────────────────────────────────────────

def run_api() -> None:
    import uvicorn
    from config.settings import settings
    from monitoring import start_metrics_server
    start_metrics_server(settings.metrics_port)
    uvicorn.run(
        "api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Freight rate estimation engine")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("demo", help="Price a set of sample shipments")

    q = sub.add_parser("quote", help="Estimate one shipment")
    q.add_argument("--text", help="Free-text shipment description")
    q.add_argument("--mode", choices=["parcel", "air", "ocean", "ground"])
    q.add_argument("--origin")
    q.add_argument("--destination")
    q.add_argument("--weight-kg", type=float)
    q.add_argument("--container-type", choices=["20ft", "40ft", "40hc"])
    q.add_argument("--distance-km", type=float)
    q.add_argument("--express", action="store_true")

    sub.add_parser("api", help="Serve the REST API with uvicorn")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    if args.command == "demo":
        run_demo()
    elif args.command == "quote":
        run_quote(args)
    else:
        run_api()
