"""
Domain models — immutable per-request values.

Nothing here outlives a request: a CrlRequest goes in, the fetched bytes
are classified into an EncodingDecision, and the decoder turns that into
text. All models are frozen dataclasses (immutable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique


@unique
class CrlEncoding(Enum):
    """Encoding tag handed to the decoding capability (openssl's -inform)."""

    DER = "DER"
    PEM = "PEM"


@dataclass(frozen=True, slots=True)
class CrlRequest:
    """
    A single inbound request for a CRL dump.

    `target_url` comes from the `{proxy}` path parameter and may be absent.
    """

    target_url: str | None = None


@dataclass(frozen=True, slots=True)
class FetchedPayload:
    """
    Raw bytes returned by the upstream CRL host.

    Status and headers are kept for diagnostics only; the pipeline
    never branches on them once the fetch succeeded.
    """

    content: bytes = field(repr=False)
    status_code: int = 200
    reason: str = "OK"
    headers: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class EncodingDecision:
    """
    What the decoder receives: an encoding tag plus the bytes to decode.

    Bare base64 has already been transcoded to raw DER by the time an
    EncodingDecision exists, so `payload` is either binary DER or PEM text.
    """

    encoding: CrlEncoding
    payload: bytes = field(repr=False)
    transcoded: bool = False
