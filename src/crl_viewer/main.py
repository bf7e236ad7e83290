"""
Application entry point — wires dependencies and starts the HTTP server.

Composition root: creates concrete adapters and binds them into the
request handler. This is the ONLY place where concrete classes are
instantiated. Everything else depends on Protocol interfaces.

Responsibilities:
  1. Configure structlog for structured logging
  2. Load and validate configuration from environment
  3. Create the fetcher and the configured decoder
  4. Bind them into handle_request (partial application)
  5. Serve the ASGI app with Uvicorn
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from functools import partial

import structlog

from crl_viewer import __version__
from crl_viewer.adapters.crypto_decoder import CryptographyCrlDecoder
from crl_viewer.adapters.http_client import HttpCrlFetcher
from crl_viewer.adapters.openssl_decoder import OpensslCrlDecoder
from crl_viewer.config import AppSettings
from crl_viewer.domain.ports import CrlDecoder
from crl_viewer.handler import handle_request
from crl_viewer.response import HttpReply

type RequestHandler = Callable[[str, str | None], HttpReply]


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured logging.

    Human-readable console output on stdout; the level filter falls back
    to INFO for unknown level names.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _create_decoder(settings: AppSettings) -> CrlDecoder:
    name_options = settings.get_name_options()
    if settings.decoder == "cryptography":
        return CryptographyCrlDecoder(name_options=name_options)
    return OpensslCrlDecoder(
        name_options=name_options,
        binary=settings.openssl_binary,
        timeout=settings.decode_timeout_seconds,
    )


def _create_adapters(settings: AppSettings) -> tuple[HttpCrlFetcher, CrlDecoder]:
    """Instantiate the fetcher and the configured decoder."""
    fetcher = HttpCrlFetcher(timeout=settings.fetch_timeout_seconds)
    return fetcher, _create_decoder(settings)


def create_request_handler(settings: AppSettings) -> RequestHandler:
    """Bind adapters and caching policy into a (method, target_url) → HttpReply callable."""
    fetcher, decoder = _create_adapters(settings)
    return partial(
        handle_request,
        fetcher=fetcher,
        decoder=decoder,
        immutable_cache=settings.immutable_cache,
    )


def main() -> None:
    """Load settings and serve the ASGI app."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        decoder=settings.decoder,
        name_options=settings.name_options,
    )

    import uvicorn

    uvicorn.run(
        "crl_viewer.asgi:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
