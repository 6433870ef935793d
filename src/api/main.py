"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import boards, explore, health, waitlist, waps, websites
from core.config import get_settings
from services.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UpstreamError,
    WapsError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[WapsError], int] = {
    NotFoundError: 404,
    ForbiddenError: 403,
    ConflictError: 409,
    InvalidInputError: 422,
    UpstreamError: 502,
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response


def status_code_for(exc: WapsError) -> int:
    """HTTP status for a service error (500 for unmapped subclasses)."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


app_settings = get_settings()

app = FastAPI(
    title="Waps API",
    description="Website registry, boards and discovery feeds.",
    version="0.1.0",
)


@app.exception_handler(WapsError)
async def waps_error_handler(_request: Request, exc: WapsError) -> JSONResponse:
    """Translate service errors into JSON responses."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Unhandled service error: %s", exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"error": exc.code, "message": exc.message}},
    )


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(websites.router)
app.include_router(explore.router)
app.include_router(boards.router)
app.include_router(waps.router)
app.include_router(waitlist.router)
