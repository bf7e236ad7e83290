"""
Ports — Protocol-based interfaces for infrastructure adapters.

These define WHAT the pipeline needs (contracts) without specifying
HOW it's done (implementation). Following hexagonal architecture:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy
the contract simply by implementing the methods — no inheritance.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from railway.result import Result

from crl_viewer.domain.models import EncodingDecision, FetchedPayload


@runtime_checkable
class CrlFetcher(Protocol):
    """
    Port: retrieve the raw CRL bytes from an already-validated URL.

    Exactly one outbound request per call, no retries. Non-2xx answers
    become UPSTREAM_ERROR failures carrying the upstream status.
    """

    def fetch(self, url: str) -> Result[FetchedPayload]: ...


@runtime_checkable
class CrlDecoder(Protocol):
    """
    Port: turn a classified CRL payload into human-readable text.

    Name-display options are fixed at construction time. Implementations
    report any rejection of the payload as a DECODE_ERROR failure.
    """

    def decode(self, decision: EncodingDecision) -> Result[str]: ...
