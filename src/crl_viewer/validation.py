"""
Input validation — the first stage of the pipeline.

Only absolute http:// and https:// URLs are accepted as CRL targets.
Anything else is refused before a single byte goes over the network.
"""

from __future__ import annotations

import re

from railway import Result, ResultFailures

INVALID_URL_MESSAGE = "Invalid CRL URL"

_ALLOWED_URL = re.compile(r"^https?://")


def validate_target_url(url: str | None) -> Result[str]:
    """
    Return the URL unchanged when it starts with http:// or https://.

    Returns Result.failure(INVALID_INPUT, "Invalid CRL URL") when the
    value is absent or uses any other scheme.
    """
    if url is None or not _ALLOWED_URL.match(url):
        return ResultFailures.invalid_input(INVALID_URL_MESSAGE)
    return Result.success(url)
