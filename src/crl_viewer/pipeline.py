"""
Pipeline — the core ROP pipeline turning a CRL URL into a text dump.

Domain layer — this is PURE BUSINESS LOGIC. All I/O is injected via
ports (Protocol interfaces).

The pipeline connects stages via flat_map, forming a railway:

  validate_target_url(request.target_url)
    → fetcher.fetch(url)
      → normalize(content)
        → decoder.decode(decision)

Each stage returns Result[T]. Failures short-circuit automatically
through the ROP railway: an invalid URL never reaches the network, a
failed fetch never reaches the decoder.
"""

from __future__ import annotations

from railway.result import Result

from crl_viewer.domain.models import CrlRequest, FetchedPayload
from crl_viewer.domain.ports import CrlDecoder, CrlFetcher
from crl_viewer.normalizer import normalize
from crl_viewer.validation import validate_target_url


def run_pipeline(
    request: CrlRequest,
    fetcher: CrlFetcher,
    decoder: CrlDecoder,
) -> Result[str]:
    """
    Execute the full retrieve → normalize → decode pipeline.

    Flow:
      1. Validate the target URL (http:// or https:// only)
      2. Fetch the CRL bytes (single GET, bounded by a deadline)
      3. Classify as DER / PEM, transcoding bare base64 to DER
      4. Decode to text with the configured decoder

    Returns Result[str] with the decoded text on success,
    or Result.failure with the error from the first failing stage.
    """
    return (
        validate_target_url(request.target_url)
        .flat_map(fetcher.fetch)
        .map(_content)
        .map(normalize)
        .flat_map(decoder.decode)
    )


def _content(payload: FetchedPayload) -> bytes:
    return payload.content
