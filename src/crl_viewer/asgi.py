"""
FastAPI + Uvicorn ASGI application.

Serves the CRL text dump on a single catch-all route:

    GET /{proxy}    proxy = URL-encoded CRL URL, e.g. /https%3A%2F%2Fca.example%2Fca.crl

Every other method on that route is answered with 405. The handler itself
is synchronous (httpx + subprocess) and runs in a worker thread so the
event loop keeps serving other requests.

Entry point for production: uvicorn crl_viewer.asgi:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from crl_viewer import __version__
from crl_viewer.config import AppSettings
from crl_viewer.main import RequestHandler, configure_structlog, create_request_handler

# ─────────────────────── Global State ───────────────────────
# Set during app startup.

_handler: RequestHandler | None = None
log = structlog.get_logger()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: load settings and wire the request handler."""
    global _handler

    try:
        settings = AppSettings()
    except Exception as e:
        log.error("asgi.startup_error", error=f"Configuration error: {e}")
        raise

    configure_structlog(settings.log_level)
    _handler = create_request_handler(settings)

    log.info(
        "asgi.startup_complete",
        version=__version__,
        decoder=settings.decoder,
        fetch_timeout_seconds=settings.fetch_timeout_seconds,
    )

    yield

    log.info("asgi.shutdown_complete")


# ─────────────────────── FastAPI Application ───────────────────────

app = FastAPI(
    title="crl-viewer",
    description="Fetches a CRL and returns its openssl-style text dump",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe — 200 once the handler is wired, 503 before."""
    if _handler is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "reason": "handler not initialized"},
        )
    return JSONResponse(status_code=200, content={"status": "healthy"})


@app.api_route("/{proxy:path}", methods=ALL_METHODS)
async def view_crl(request: Request, proxy: str) -> PlainTextResponse:
    """
    Fetch the CRL at `proxy` and return it as text.

    Status codes follow the failure taxonomy: 400 bad URL, 405 non-GET,
    upstream status mirrored on non-2xx, 500 for fetch or decode failures.
    """
    if _handler is None:
        return PlainTextResponse("Service not initialized", status_code=503)

    reply = await asyncio.to_thread(_handler, request.method, proxy or None)
    return PlainTextResponse(
        reply.body,
        status_code=reply.status_code,
        headers=reply.headers,
    )
