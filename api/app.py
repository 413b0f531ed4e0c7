"""
api/app.py
ASGI entry point:  uvicorn api.app:app --port 8000
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorResponse
from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)

API_PREFIX = "/api/v1"


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    # The engine already turns pricing failures into error responses; anything
    # reaching here is a bug in the HTTP layer. Keep internals off the wire.
    log.error("Unhandled API error", path=request.url.path, error=str(exc), exc_info=exc)
    body = ErrorResponse(error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=(
            "Indicative freight estimates for parcel, air, ocean and ground shipments, "
            "priced from free text or structured fields with every assumption listed."
        ),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_error)

    from api.routes import router
    app.include_router(router, prefix=API_PREFIX, tags=["Freight Rates"])
    return app


app = create_app()
