"""
Response composition — the last step, shared by every entry point.

A pipeline Result becomes exactly one HttpReply: the decoded text with
caching headers on success, or the classified (status, message) pair on
failure. FastAPI and the Lambda handler only serialize what comes out of
here, so both surfaces answer identically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

from railway.failure import FailureDescription
from railway.http_support import classify
from railway.result import Result

TEXT_PLAIN = "text/plain"
IMMUTABLE_CACHE_CONTROL = "public, immutable, s-maxage=604800"

_SATURDAY = 5


@dataclass(frozen=True, slots=True)
class HttpReply:
    """Transport-neutral HTTP response."""

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)


def end_of_week(now: datetime) -> datetime:
    """Last second of the calendar week containing `now` (weeks run Sunday to Saturday)."""
    days_left = (_SATURDAY - now.weekday()) % 7
    return (now + timedelta(days=days_left)).replace(
        hour=23, minute=59, second=59, microsecond=0
    )


def compose_success(
    text: str,
    now: datetime | None = None,
    immutable_cache: bool = False,
) -> HttpReply:
    """
    200 with the decoded text.

    Expires points at the end of the current week; CRLs are typically
    reissued at least weekly, so caches may keep the dump until then.
    """
    now = now or datetime.now(UTC)
    headers = {
        "Content-Type": TEXT_PLAIN,
        "X-Content-Type-Options": "nosniff",
        "Expires": format_datetime(end_of_week(now).astimezone(UTC), usegmt=True),
    }
    if immutable_cache:
        headers["Cache-Control"] = IMMUTABLE_CACHE_CONTROL
    return HttpReply(200, text, headers)


def compose_failure(failure: FailureDescription) -> HttpReply:
    status, message = classify(failure)
    return HttpReply(status, message, {"Content-Type": TEXT_PLAIN})


def compose(
    result: Result[str],
    now: datetime | None = None,
    immutable_cache: bool = False,
) -> HttpReply:
    return result.either(
        on_success=lambda text: compose_success(text, now, immutable_cache),
        on_failure=compose_failure,
    )
