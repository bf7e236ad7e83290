"""
AWS Lambda entry point — API Gateway proxy integration.

    Resource: /{proxy+}   Method: ANY   Handler: crl_viewer.lambda_handler.handler

Same semantics as the ASGI route: the event's httpMethod and
pathParameters.proxy feed handle_request(), and the HttpReply is returned
in the proxy-integration shape {statusCode, headers, body}.

Settings and adapters are built once per execution environment, on the
first invocation, and reused by warm invocations. Invalid settings are
answered with a 500 carrying the validation message; the next invocation
tries to load them again.
"""

from __future__ import annotations

from functools import cache
from typing import Any

import structlog
from pydantic import ValidationError
from railway import ErrorCode, FailureDescription

from crl_viewer.config import AppSettings
from crl_viewer.main import RequestHandler, configure_structlog, create_request_handler
from crl_viewer.response import HttpReply, compose_failure

log = structlog.get_logger()


@cache
def _request_handler() -> RequestHandler:
    settings = AppSettings()
    configure_structlog(settings.log_level)
    return create_request_handler(settings)


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Answer one API Gateway proxy event."""
    method = event.get("httpMethod") or ""
    path_parameters = event.get("pathParameters") or {}
    target_url = path_parameters.get("proxy")

    try:
        handle = _request_handler()
    except ValidationError as e:
        reply = _configuration_failure(e)
    else:
        reply = handle(method, target_url)

    return {
        "statusCode": reply.status_code,
        "headers": reply.headers,
        "body": reply.body,
    }


def _configuration_failure(error: ValidationError) -> HttpReply:
    message = f"Configuration error: {error}"
    log.error("lambda.configuration_error", error=message)
    return compose_failure(FailureDescription(ErrorCode.CONFIGURATION_ERROR, message, error))
