"""
HTTP adapter — bounded CRL download via httpx.

Adapter layer — implements the CrlFetcher port with an httpx.AsyncClient
driven to completion on a private event loop, so callers stay synchronous.

One GET per request, caching disabled, no retries: a transient upstream
failure is reported to the caller, who can simply ask again. The timeout
is a single deadline over the whole exchange (connect, redirects, headers
and body), enforced by cancelling the request when it elapses. A
slow-drip upstream cannot hold a worker past it.

All HTTP errors are captured into Result failures — no exceptions
leak to the business logic layer.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog
from railway import Result, ResultFailures

from crl_viewer.domain.models import FetchedPayload

log = structlog.get_logger()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class HttpCrlFetcher:
    """
    Download CRL bytes via HTTP GET.

    Implements the CrlFetcher port. Must not be called from a thread that
    is already running an event loop; the ASGI app calls it via
    asyncio.to_thread.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def fetch(self, url: str) -> Result[FetchedPayload]:
        """
        GET the CRL at `url`.

        Returns Result[FetchedPayload] with the full body on a 2xx answer.
        Failures:
          - UPSTREAM_TIMEOUT when the deadline elapses
          - UPSTREAM_UNREACHABLE on any other transport problem
          - UPSTREAM_ERROR mirroring status and reason on a non-2xx answer
        """
        try:
            payload = asyncio.run(self._fetch_within_deadline(url))
        except (TimeoutError, httpx.TimeoutException) as e:
            log.warning("fetch.timeout", url=url, timeout_seconds=self._timeout)
            return ResultFailures.upstream_timeout(
                f"Timed out fetching CRL after {self._timeout:g}s", e
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("fetch.unreachable", url=url, error=str(e))
            return ResultFailures.upstream_unreachable(
                str(e) or f"Unable to reach {url}", e
            )

        if not 200 <= payload.status_code < 300:
            log.warning(
                "fetch.upstream_error", url=url, status=payload.status_code, reason=payload.reason
            )
            return ResultFailures.upstream_error(payload.status_code, payload.reason)

        log.info("fetch.complete", url=url, size_bytes=payload.size)
        return Result.success(payload)

    async def _fetch_within_deadline(self, url: str) -> FetchedPayload:
        """Raises TimeoutError once the deadline passes, whatever phase the GET is in."""
        async with asyncio.timeout(self._timeout):
            return await self._do_fetch(url)

    async def _do_fetch(self, url: str) -> FetchedPayload:
        """Streamed GET — may raise httpx errors."""
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            async with client.stream("GET", url, headers=NO_CACHE_HEADERS) as response:
                headers = dict(response.headers)
                reason = _reason_phrase(response)
                if not response.is_success:
                    # Body is irrelevant on failure.
                    return FetchedPayload(b"", response.status_code, reason, headers)

                chunks: list[bytes] = []
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
                return FetchedPayload(b"".join(chunks), response.status_code, reason, headers)


def _reason_phrase(response: httpx.Response) -> str:
    """Upstream status text, falling back to the standard phrase (HTTP/2 sends none)."""
    return response.reason_phrase or httpx.codes.get_reason_phrase(response.status_code)
