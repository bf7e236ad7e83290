"""
Request handler — method gate, pipeline execution and the single error boundary.

Both the ASGI app and the Lambda handler call handle_request(). It is the
only place where a failure is logged; past this point every outcome is an
HttpReply.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from railway import LoggingExecutionContext, ResultFailures
from railway.failure import FailureDescription
from railway.result import Result

from crl_viewer.domain.models import CrlRequest
from crl_viewer.domain.ports import CrlDecoder, CrlFetcher
from crl_viewer.pipeline import run_pipeline
from crl_viewer.response import HttpReply, compose

log = structlog.get_logger()

_context = LoggingExecutionContext(operation="CrlDecode")


def _log_failure(target_url: str | None, failure: FailureDescription) -> None:
    log.warning(
        "request.failed",
        target_url=target_url,
        error_code=failure.code.value,
        status_code=failure.status_code,
        error=failure.message,
    )


def handle_request(
    method: str,
    target_url: str | None,
    *,
    fetcher: CrlFetcher,
    decoder: CrlDecoder,
    immutable_cache: bool = False,
    now: datetime | None = None,
) -> HttpReply:
    """
    Answer one request for a CRL dump.

    Anything but an exact "GET" is refused with 405 before anything else runs.
    Any exception escaping the pipeline becomes a 500 carrying its message.
    """
    if method != "GET":
        result: Result[str] = ResultFailures.method_not_allowed()
    else:
        result = _context.execute(lambda: run_pipeline(CrlRequest(target_url), fetcher, decoder))

    result.peek_failure(lambda failure: _log_failure(target_url, failure)).peek(
        lambda text: log.info("request.completed", target_url=target_url, text_bytes=len(text))
    )
    return compose(result, now=now, immutable_cache=immutable_cache)
