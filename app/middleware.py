"""
HTTP middleware: request context, Prometheus metrics, per-client rate
limiting and security headers.
"""
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.logging import request_id_var
from app.metrics import HTTP_ERRORS, RATE_LIMITED, REQUEST_COUNT, REQUEST_LATENCY
from app.services.rate_limiter import SlidingWindowRateLimiter

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Path segments kept verbatim in metric labels; anything else is an id.
ROUTE_SEGMENTS = frozenset({
    "api", "members", "observations", "stats", "ranking", "registros",
    "export", "unique-users", "dashboard", "summary", "alerts",
    "health", "ready", "metrics",
})

UNMETERED_PATHS = frozenset({
    "/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc",
})

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}

rate_limiter = SlidingWindowRateLimiter(
    settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS
)


def normalise_path(path: str) -> str:
    """``/api/members/123/stats`` -> ``/api/members/{param}/stats``."""
    segments = [s for s in path.split("/") if s]
    if not segments:
        return path
    return "/" + "/".join(s if s in ROUTE_SEGMENTS else "{param}" for s in segments)


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Accept the caller's X-Request-ID or mint one, and expose it to logs."""

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request_id = incoming[:MAX_REQUEST_ID_LENGTH] or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNMETERED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        labels = {"method": request.method, "endpoint": normalise_path(request.url.path)}
        status = str(response.status_code)
        REQUEST_COUNT.labels(status=status, **labels).inc()
        REQUEST_LATENCY.labels(**labels).observe(elapsed)
        if response.status_code >= 400:
            HTTP_ERRORS.labels(status=status, **labels).inc()
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window budget per client address. Health and metrics are exempt."""

    async def dispatch(self, request: Request, call_next):
        exempt = (
            not settings.RATE_LIMIT_ENABLED
            or request.method == "OPTIONS"
            or request.url.path in settings.RATE_LIMIT_BYPASS
        )
        if exempt:
            return await call_next(request)

        allowed, remaining, retry_after = rate_limiter.is_allowed(client_key(request))
        limit_headers = {
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_MAX),
            "X-RateLimit-Remaining": str(remaining),
        }
        if not allowed:
            RATE_LIMITED.inc()
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": "Muitas requisições, tente novamente mais tarde."},
                headers={"Retry-After": str(retry_after), **limit_headers},
            )

        response: Response = await call_next(request)
        response.headers.update(limit_headers)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
