"""
End-to-end BDD acceptance tests for the crl-viewer request path.

Exercises the full path: mock HTTP (respx) → real HttpCrlFetcher →
normalizer → real decoder → HttpReply. CRLs are generated per session
in tests/conftest.py and served as DER, PEM and bare base64.

Each test follows Given/When/Then BDD structure in its docstring.

Markers: @pytest.mark.acceptance — the openssl scenarios also need the
openssl binary on PATH and are skipped without it.
"""

from __future__ import annotations

import subprocess
from urllib.parse import quote

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from crl_viewer import asgi
from crl_viewer.adapters.crypto_decoder import CryptographyCrlDecoder
from crl_viewer.adapters.http_client import HttpCrlFetcher
from crl_viewer.adapters.openssl_decoder import OpensslCrlDecoder
from crl_viewer.config import DEFAULT_NAME_OPTIONS
from crl_viewer.handler import handle_request
from crl_viewer.response import HttpReply
from tests.conftest import requires_openssl

pytestmark = pytest.mark.acceptance

CRL_URL = "https://crl.example.com/ca.crl"


# ── Helpers ──────────────────────────────────────────────────────────────────


def _serve(content: bytes, decoder, status: int = 200) -> HttpReply:
    """Serve `content` at CRL_URL and run one GET through the real adapters."""
    with respx.mock:
        respx.get(CRL_URL).mock(return_value=httpx.Response(status, content=content))
        return handle_request(
            "GET", CRL_URL, fetcher=HttpCrlFetcher(timeout=10), decoder=decoder
        )


def _openssl_text(pem: bytes) -> str:
    """What `openssl crl -inform PEM -nameopt ... -text` prints for the same CRL."""
    completed = subprocess.run(
        [
            "openssl", "crl", "-inform", "PEM",
            "-nameopt", ",".join(DEFAULT_NAME_OPTIONS), "-text",
        ],
        input=pem,
        capture_output=True,
        check=True,
    )
    return completed.stdout.decode("utf-8", errors="replace")


# ── In-process decoder ───────────────────────────────────────────────────────


class TestCryptographyDecoderEndToEnd:
    """
    GIVEN a CRL host serving the same CRL in any of the three encodings
    WHEN the CRL is requested with GET
    THEN the reply is 200 with the same text dump for every encoding.
    """

    def test_all_encodings_give_same_reply(
        self, crl_der: bytes, crl_pem: bytes, crl_base64: bytes
    ) -> None:
        decoder = CryptographyCrlDecoder(name_options=DEFAULT_NAME_OPTIONS)
        replies = [_serve(content, decoder) for content in (crl_der, crl_pem, crl_base64)]

        assert [reply.status_code for reply in replies] == [200, 200, 200]
        assert len({reply.body for reply in replies}) == 1
        assert "Issuer: C = US, O = Example Org, CN = Example CA" in replies[0].body
        assert replies[0].headers["Content-Type"] == "text/plain"
        assert replies[0].headers["X-Content-Type-Options"] == "nosniff"

    def test_html_error_page_is_500(self) -> None:
        """
        GIVEN the CRL host answers 200 with an HTML page
        WHEN the CRL is requested
        THEN the normalizer falls back to base64 and the decoder rejects it with 500.
        """
        reply = _serve(b"<html><body>Maintenance</body></html>", CryptographyCrlDecoder())
        assert reply.status_code == 500
        assert reply.body == "Unable to load CRL (DER)"

    def test_upstream_404_is_mirrored(self) -> None:
        reply = _serve(b"gone", CryptographyCrlDecoder(), status=404)
        assert (reply.status_code, reply.body) == (404, "Not Found")
        assert "Expires" not in reply.headers


# ── openssl decoder ──────────────────────────────────────────────────────────


@requires_openssl
class TestOpensslDecoderEndToEnd:
    """
    GIVEN the openssl binary and a CRL host serving a generated CRL
    WHEN the CRL is requested with GET
    THEN the body is exactly what openssl prints for that CRL.
    """

    def test_pem_matches_direct_openssl(self, crl_pem: bytes) -> None:
        reply = _serve(crl_pem, OpensslCrlDecoder(name_options=DEFAULT_NAME_OPTIONS))
        assert reply.status_code == 200
        assert reply.body == _openssl_text(crl_pem)

    def test_der_and_base64_match_pem(
        self, crl_der: bytes, crl_pem: bytes, crl_base64: bytes
    ) -> None:
        decoder = OpensslCrlDecoder(name_options=DEFAULT_NAME_OPTIONS)
        expected = _openssl_text(crl_pem)
        assert _serve(crl_der, decoder).body == expected
        assert _serve(crl_base64, decoder).body == expected

    def test_garbage_is_500(self) -> None:
        reply = _serve(b"\x30\x03abc", OpensslCrlDecoder())
        assert reply.status_code == 500
        assert reply.body


# ── ASGI with lifespan ───────────────────────────────────────────────────────


class TestAsgiEndToEnd:
    """
    GIVEN the ASGI app started through its lifespan with DECODER=cryptography
    WHEN GET /{url-encoded CRL URL} is called
    THEN the decoded text is served with the caching headers.
    """

    def test_get_through_lifespan(
        self, monkeypatch: pytest.MonkeyPatch, crl_pem: bytes
    ) -> None:
        monkeypatch.setenv("DECODER", "cryptography")
        monkeypatch.setenv("IMMUTABLE_CACHE", "true")

        with respx.mock(assert_all_called=False) as mock, TestClient(asgi.app) as client:
            mock.get(CRL_URL).mock(return_value=httpx.Response(200, content=crl_pem))
            response = client.get(f"/{quote(CRL_URL, safe='')}")
            health = client.get("/health")

        asgi._handler = None

        assert response.status_code == 200
        assert response.text.startswith("Certificate Revocation List (CRL):\n")
        assert response.headers["cache-control"] == "public, immutable, s-maxage=604800"
        assert response.headers["expires"].endswith(" 23:59:59 GMT")
        assert health.json() == {"status": "healthy"}
