"""
Ponto API
=========
Backend for the time-tracking ("ponto") and member-roster dashboard.
Serves hierarchy-sorted rosters, member observations and stats, filtered
interval listings, weekly/monthly rankings, the dashboard summary,
long-running alerts and xlsx/pdf report exports.

Run:  uvicorn main:app --port 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.controllers import interval_controller, member_controller, report_controller, system_controller
from app.core.config import settings
from app.core.dependencies import get_interval_repo
from app.core.exceptions import PontoError, StoreError
from app.core.logging import get_logger
from app.middleware import (
    MetricsMiddleware,
    RateLimitMiddleware,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)
from app.schemas import ErrorResponse

logger = get_logger(settings.SERVICE_NAME)

GENERIC_ERROR = "Erro interno do servidor."


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Refuse to serve without a store; create tables on first boot."""
    repo = get_interval_repo()
    repo.create_schema()
    repo.verify_connection()
    logger.info("Ponto API starting, store connected, timezone=%s", settings.TIMEZONE)
    yield
    repo.dispose()
    logger.info("Ponto API shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Ponto API",
    description="Time-tracking aggregation and reporting for the member dashboard.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN] if settings.CORS_ORIGIN else ["*"],
    # Credentials only with an explicit origin, never with the wildcard.
    allow_credentials=bool(settings.CORS_ORIGIN),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_controller.router)
app.include_router(member_controller.router)
app.include_router(interval_controller.router)
app.include_router(report_controller.router)


# ── Exception handlers ────────────────────────────────────────────────────
def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": "Parâmetros inválidos.", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    req_id = _request_id(request)
    logger.error("Store failure on %s %s: %s (%s)", request.method, request.url.path,
                 exc.operation, exc.detail, extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": GENERIC_ERROR, "request_id": req_id},
    )


@app.exception_handler(PontoError)
async def ponto_exception_handler(request: Request, exc: PontoError):
    req_id = _request_id(request)
    if exc.status_code >= 500:
        logger.error("Unhandled domain error: %s", exc.message, extra={"request_id": req_id})
        message = GENERIC_ERROR
    else:
        message = exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message, "request_id": req_id},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = _request_id(request)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": GENERIC_ERROR, "request_id": req_id},
    )
