"""
api/routes.py
REST endpoints.
"""
import time
import uuid

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from api.models import HealthResponse, ManualQuoteRequest, ManualQuoteResponse
from calculation_engine.engine import QuoteEngine
from config.settings import settings
from explanation.summary import summarize_response
from monitoring import get_logger

router = APIRouter()

_engine = QuoteEngine(settings=settings)

log = get_logger(__name__)


#POST /rates/manual-quote

@router.post(
    "/rates/manual-quote",
    response_model=ManualQuoteResponse,
    response_model_exclude_none=True,
    summary="Estimate a freight rate from partial shipment details",
    description="""
Produce a manual freight estimate (parcel, air, ocean or ground).

**Free text:**
```json
{ "freeText": "10kg from China to Lagos by air" }
```

**Structured:**
```json
{ "mode": "ground", "origin": "Lagos", "destination": "Kano", "distanceKm": 1000 }
```

Missing information yields `status: needs_clarification` with `missingFields`;
identical origin and destination yield `status: error`.
""",
)
async def manual_quote(request: ManualQuoteRequest) -> ManualQuoteResponse:
    request_id = str(uuid.uuid4())[:8]
    t0 = time.perf_counter()
    log.info("Manual quote request", request_id=request_id, mode=request.mode, free_text=bool(request.free_text))

    # Geo providers block on network I/O
    response = await run_in_threadpool(_engine.estimate, request.to_quote_request())

    log.info(
        "Manual quote complete",
        request_id=request_id,
        status=response.status,
        elapsed_ms=round((time.perf_counter() - t0) * 1000),
    )
    body = response.to_dict()
    body["summary"] = summarize_response(response)
    return ManualQuoteResponse.model_validate(body)


#GET /health

@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        extractor=type(_engine.extractor).__name__,
        providers={
            "locationiq": bool(settings.locationiq_api_key),
            "openroute": bool(settings.openroute_api_key),
            "cached_distances": len(_engine.geo_resolver.cache),
        },
    )
