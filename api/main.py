"""
SITEPLAN HTTP service.

Routes, grouped by router:
- Zoning regulation limits per parcel
- Compliance scoring of placed building modules
- Buildable envelope geometry on the construction grid

Version: 0.1.0
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

import siteplan
from api.config import settings
from api.middleware import get_request_id, setup_middleware, structured_logger
from api.routers import compliance, geometry, regulations, system
from siteplan.regulations.errors import InvalidParcelArea, InvalidZoneType, RegulationInputError

# JSON request logs are self-contained
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(message)s',
)
logger = logging.getLogger(__name__)

# User-facing messages for rejected parcels
INVALID_AREA_MESSAGE = "면적(area)은 0보다 큰 숫자여야 합니다."
INVALID_ZONE_MESSAGE = "유효하지 않은 용도지역(zoneType)입니다."
_INPUT_MESSAGES = {
    InvalidParcelArea: INVALID_AREA_MESSAGE,
    InvalidZoneType: INVALID_ZONE_MESSAGE,
}


def create_app() -> FastAPI:
    """Build the app: request middleware, CORS, error mapping, routers."""
    application = FastAPI(
        title="SITEPLAN API",
        description="""
## Site Regulation & Buildable Geometry API

Derives legal building envelopes for Korean parcels and scores modular
building layouts against them.

### Features
- Coverage ratio, floor area ratio, height and floor limits per zone
- Setback inset and construction grid rasterization (0.6 m cells)
- Solar access stepping for residential zones
- Live compliance scoring of module placements
        """,
        version=siteplan.__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    setup_middleware(application, debug=settings.debug)

    # Outermost, so preflight requests never reach the logging stack
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @application.exception_handler(RegulationInputError)
    async def regulation_input_handler(request: Request, exc: RegulationInputError):
        message = _INPUT_MESSAGES.get(type(exc), str(exc))
        structured_logger.warning(
            "Rejected parcel input",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return JSONResponse(
            status_code=400,
            content={"error": message, "detail": str(exc), "request_id": get_request_id()},
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})

    application.include_router(system.router)
    application.include_router(regulations.router)
    application.include_router(compliance.router)
    application.include_router(geometry.router)

    return application


def jsonable_errors(exc: RequestValidationError):
    """Validation errors without the non-serializable context objects."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level,
    )
