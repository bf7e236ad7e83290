"""
Shared test fixtures and helpers for the crl-viewer test suite.

CRLs are generated on the fly with cryptography (EC P-256 issuer key),
so every encoding the normalizer distinguishes is available from one
known structure: raw DER, PEM armor and bare base64.
"""

from __future__ import annotations

import base64
import shutil
import textwrap
from datetime import UTC, datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

LAST_UPDATE = datetime(2025, 1, 5, 9, 3, 0, tzinfo=UTC)
NEXT_UPDATE = datetime(2025, 1, 12, 9, 3, 0, tzinfo=UTC)
REVOKED_SERIALS = (0x0A1B2C, 0x10)

requires_openssl = pytest.mark.skipif(
    shutil.which("openssl") is None, reason="openssl binary not installed"
)


def build_crl(revoked_serials: tuple[int, ...] = REVOKED_SERIALS) -> x509.CertificateRevocationList:
    """Sign a small v2 CRL: CRL number 7, one key-compromise entry per serial."""
    key = ec.generate_private_key(ec.SECP256R1())
    issuer = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Org"),
            x509.NameAttribute(NameOID.COMMON_NAME, "Example CA"),
        ]
    )
    builder = (
        x509.CertificateRevocationListBuilder()
        .issuer_name(issuer)
        .last_update(LAST_UPDATE)
        .next_update(NEXT_UPDATE)
        .add_extension(x509.CRLNumber(7), critical=False)
    )
    for serial in revoked_serials:
        revoked = (
            x509.RevokedCertificateBuilder()
            .serial_number(serial)
            .revocation_date(LAST_UPDATE)
            .add_extension(x509.CRLReason(x509.ReasonFlags.key_compromise), critical=False)
            .build()
        )
        builder = builder.add_revoked_certificate(revoked)
    return builder.sign(key, hashes.SHA256())


@pytest.fixture(scope="session")
def crl() -> x509.CertificateRevocationList:
    return build_crl()


@pytest.fixture(scope="session")
def crl_der(crl: x509.CertificateRevocationList) -> bytes:
    return crl.public_bytes(serialization.Encoding.DER)


@pytest.fixture(scope="session")
def crl_pem(crl: x509.CertificateRevocationList) -> bytes:
    return crl.public_bytes(serialization.Encoding.PEM)


@pytest.fixture(scope="session")
def crl_base64(crl_der: bytes) -> bytes:
    """The DER bytes as bare base64, wrapped at 64 columns, no PEM armor."""
    return "\n".join(textwrap.wrap(base64.b64encode(crl_der).decode(), 64)).encode() + b"\n"
