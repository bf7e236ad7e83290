"""
Encoding normalizer — decide what the decoder is told it is reading.

CRL hosts serve the same structure three ways:

  raw DER         30 82 ...                  → DER, untouched
  PEM armor       -----BEGIN X509 CRL-----   → PEM, untouched
  bare base64     MIIB...                    → decoded to raw DER

The decision looks only at the first byte and the PEM marker substrings,
so it is total: every byte sequence maps to exactly one EncodingDecision.
Bare base64 is decoded leniently; bytes that are not really base64 come
out as garbage DER, and rejecting that is the decoder's job.
"""

from __future__ import annotations

import base64
import re

import structlog

from crl_viewer.domain.models import CrlEncoding, EncodingDecision

log = structlog.get_logger()

DER_SEQUENCE_TAG = 0x30
PEM_BEGIN_MARKER = b"BEGIN X509 CRL"
PEM_END_MARKER = b"END X509 CRL"

_NOT_BASE64 = re.compile(r"[^A-Za-z0-9+/\-_=]")
_URLSAFE = str.maketrans("-_", "+/")


def decode_base64_lenient(text: str) -> bytes:
    """
    Decode base64 the forgiving way CRL publishers need.

    Line breaks, spaces and any other non-alphabet characters are skipped,
    the URL-safe alphabet is accepted, decoding stops at the first '=' and
    missing padding is tolerated. A trailing lone character carries fewer
    than 8 bits and is dropped.
    """
    cleaned = _NOT_BASE64.sub("", text).translate(_URLSAFE)
    cleaned = cleaned.split("=", 1)[0]
    remainder = len(cleaned) % 4
    if remainder == 1:
        cleaned = cleaned[:-1]
    elif remainder:
        cleaned += "=" * (4 - remainder)
    return base64.b64decode(cleaned, validate=True)


def is_pem_armored(content: bytes) -> bool:
    return PEM_BEGIN_MARKER in content and PEM_END_MARKER in content


def normalize(content: bytes) -> EncodingDecision:
    """
    Classify fetched bytes, in order:

      1. first byte 0x30 (DER SEQUENCE)        → DER, unchanged
      2. both BEGIN/END X509 CRL markers       → PEM, unchanged
      3. anything else                         → DER, base64-decoded
    """
    if content[:1] == bytes([DER_SEQUENCE_TAG]):
        return EncodingDecision(CrlEncoding.DER, content)

    if is_pem_armored(content):
        return EncodingDecision(CrlEncoding.PEM, content)

    payload = decode_base64_lenient(content.decode("utf-8", errors="replace"))
    log.debug("normalize.base64_transcoded", input_bytes=len(content), der_bytes=len(payload))
    return EncodingDecision(CrlEncoding.DER, payload, transcoded=True)
