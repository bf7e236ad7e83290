"""
In-process CRL decoder — openssl-style text dump without a subprocess.

Adapter layer — implements the CrlDecoder port using:
  - asn1crypto: PEM unarmoring, CRL version, generic extension values
  - cryptography (PyCA): CRL parsing, names, dates, revoked entries

The output follows the layout of `openssl crl -text` closely enough to be
read the same way, but it is not byte-for-byte identical. Use it where an
openssl binary is unavailable (slim containers, Lambda runtimes).

Supported name display tokens:
  sname / lname / oid     attribute naming (CN / commonName / 2.5.4.3)
  space_eq, -space_eq     "CN = x" or "CN=x"
  sep_comma_plus_space    ", " between RDNs (default)
  sep_semi_plus_space     "; " between RDNs
  sep_multiline           one RDN per line
  oneline, RFC2253        presets; anything else (utf8, esc_*) is accepted and ignored
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime

import structlog
from asn1crypto import core, pem
from asn1crypto import crl as asn1_crl
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import CRLEntryExtensionOID, ExtensionOID
from railway import ErrorCode
from railway.result import Result

from crl_viewer.domain.models import CrlEncoding, EncodingDecision

log = structlog.get_logger()

# ─────────────────────── Name Display Options ───────────────────────


@dataclass(frozen=True, slots=True)
class NameFormat:
    """How distinguished names are rendered; defaults match openssl's `oneline`."""

    field_names: str = "sname"
    space_eq: bool = True
    separator: str = ", "
    multiline: bool = False

    @staticmethod
    def from_options(options: Sequence[str]) -> NameFormat:
        fmt = NameFormat()
        for token in options:
            match token:
                case "sname" | "lname" | "oid":
                    fmt = replace(fmt, field_names=token)
                case "space_eq":
                    fmt = replace(fmt, space_eq=True)
                case "-space_eq":
                    fmt = replace(fmt, space_eq=False)
                case "sep_comma_plus_space" | "oneline":
                    fmt = replace(fmt, separator=", ", multiline=False)
                case "sep_comma_plus":
                    fmt = replace(fmt, separator=",", multiline=False)
                case "sep_semi_plus_space":
                    fmt = replace(fmt, separator="; ", multiline=False)
                case "sep_multiline" | "multiline":
                    fmt = replace(fmt, multiline=True)
                case "RFC2253":
                    fmt = replace(fmt, separator=",", space_eq=False, multiline=False)
        return fmt

    def attribute_name(self, attribute: x509.NameAttribute) -> str:
        oid = attribute.oid
        if self.field_names == "oid":
            return oid.dotted_string
        if self.field_names == "lname":
            name = oid._name
            return oid.dotted_string if name == "Unknown OID" else name
        return attribute.rfc4514_attribute_name

    def render(self, name: x509.Name, indent: int = 0) -> str:
        equals = " = " if self.space_eq else "="
        rdns = [
            " + ".join(
                f"{self.attribute_name(attr)}{equals}{attr.value}" for attr in rdn
            )
            for rdn in name.rdns
        ]
        if self.multiline:
            pad = " " * (indent + 4)
            return "".join(f"\n{pad}{rdn}" for rdn in rdns)
        return self.separator.join(rdns)


# ─────────────────────── Formatting Helpers ───────────────────────

_EXTENSION_LABELS: dict[x509.ObjectIdentifier, str] = {
    ExtensionOID.CRL_NUMBER: "X509v3 CRL Number",
    ExtensionOID.DELTA_CRL_INDICATOR: "X509v3 Delta CRL Indicator",
    ExtensionOID.AUTHORITY_KEY_IDENTIFIER: "X509v3 Authority Key Identifier",
    ExtensionOID.ISSUING_DISTRIBUTION_POINT: "X509v3 Issuing Distribution Point",
    ExtensionOID.AUTHORITY_INFORMATION_ACCESS: "Authority Information Access",
    ExtensionOID.FRESHEST_CRL: "X509v3 Freshest CRL",
    ExtensionOID.ISSUER_ALTERNATIVE_NAME: "X509v3 Issuer Alternative Name",
    CRLEntryExtensionOID.CRL_REASON: "X509v3 CRL Reason Code",
    CRLEntryExtensionOID.INVALIDITY_DATE: "Invalidity Date",
    CRLEntryExtensionOID.CERTIFICATE_ISSUER: "X509v3 Certificate Issuer",
}

_REASON_LABELS: dict[x509.ReasonFlags, str] = {
    x509.ReasonFlags.unspecified: "Unspecified",
    x509.ReasonFlags.key_compromise: "Key Compromise",
    x509.ReasonFlags.ca_compromise: "CA Compromise",
    x509.ReasonFlags.affiliation_changed: "Affiliation Changed",
    x509.ReasonFlags.superseded: "Superseded",
    x509.ReasonFlags.cessation_of_operation: "Cessation Of Operation",
    x509.ReasonFlags.certificate_hold: "Certificate Hold",
    x509.ReasonFlags.privilege_withdrawn: "Privilege Withdrawn",
    x509.ReasonFlags.aa_compromise: "AA Compromise",
    x509.ReasonFlags.remove_from_crl: "Remove From CRL",
}


def format_time(value: datetime) -> str:
    """openssl's ASN1_TIME_print layout: 'Jan  5 09:03:00 2025 GMT'."""
    return f"{value:%b} {value.day:2d} {value:%H:%M:%S %Y} GMT"


def format_hex(data: bytes, per_line: int = 18, indent: int = 0) -> str:
    """Colon-separated lowercase hex, `per_line` bytes per line."""
    pad = " " * indent
    lines = [
        pad + ":".join(f"{b:02x}" for b in data[i : i + per_line])
        for i in range(0, len(data), per_line)
    ]
    return ":\n".join(lines)


def format_serial(serial: int) -> str:
    digits = f"{serial:X}"
    return digits if len(digits) % 2 == 0 else f"0{digits}"


def _extension_label(oid: x509.ObjectIdentifier) -> str:
    if oid in _EXTENSION_LABELS:
        return _EXTENSION_LABELS[oid]
    return oid.dotted_string if oid._name == "Unknown OID" else oid._name


def _general_name(value: x509.GeneralName, fmt: NameFormat) -> str:
    match value:
        case x509.UniformResourceIdentifier():
            return f"URI:{value.value}"
        case x509.DNSName():
            return f"DNS:{value.value}"
        case x509.RFC822Name():
            return f"email:{value.value}"
        case x509.DirectoryName():
            return f"DirName:{fmt.render(value.value)}"
        case _:
            return str(value.value)


def _generic_value(der: bytes) -> str:
    """Best-effort rendering of an extension this module has no layout for."""
    try:
        return repr(core.load(der).native)
    except ValueError:
        return format_hex(der)


def _extension_value(ext: x509.Extension, fmt: NameFormat) -> list[str]:
    value = ext.value
    match value:
        case x509.CRLNumber():
            return [str(value.crl_number)]
        case x509.DeltaCRLIndicator():
            return [str(value.crl_number)]
        case x509.AuthorityKeyIdentifier():
            lines = []
            if value.key_identifier:
                key_id = value.key_identifier
                lines.append(format_hex(key_id, per_line=len(key_id)).upper())
            for issuer in value.authority_cert_issuer or []:
                lines.append(_general_name(issuer, fmt))
            if value.authority_cert_serial_number is not None:
                lines.append(f"serial:{format_serial(value.authority_cert_serial_number)}")
            return lines
        case x509.CRLReason():
            return [_REASON_LABELS.get(value.reason, value.reason.value)]
        case x509.InvalidityDate():
            return [format_time(value.invalidity_date_utc)]
        case x509.CertificateIssuer() | x509.IssuerAlternativeName():
            return [_general_name(name, fmt) for name in value]
        case x509.IssuingDistributionPoint():
            lines = ["Full Name:"]
            lines += [f"  {_general_name(name, fmt)}" for name in value.full_name or []]
            if value.only_contains_user_certs:
                lines.append("Only User Certificates")
            if value.only_contains_ca_certs:
                lines.append("Only CA Certificates")
            if value.indirect_crl:
                lines.append("Indirect CRL")
            return lines
        case x509.UnrecognizedExtension():
            return [_generic_value(value.value)]
        case _:
            return [_generic_value(value.public_bytes())]


def _render_extensions(
    extensions: x509.Extensions,
    heading: str,
    indent: int,
    fmt: NameFormat,
) -> list[str]:
    if not len(extensions):
        return []
    pad = " " * indent
    lines = [f"{pad}{heading}:"]
    for ext in extensions:
        critical = " critical" if ext.critical else ""
        lines.append(f"{pad}    {_extension_label(ext.oid)}:{critical}")
        lines += [f"{pad}        {line}" for line in _extension_value(ext, fmt)]
    return lines


# ─────────────────────── Public Decoder Class ───────────────────────


class CryptographyCrlDecoder:
    """
    Render a CRL as text in-process.

    Implements the CrlDecoder port.
    All exceptions are caught at this adapter boundary via Result.from_computation().
    """

    def __init__(self, name_options: Sequence[str] = ()) -> None:
        self._name_options = tuple(name_options)
        self._format = NameFormat.from_options(self._name_options)

    @property
    def name_options(self) -> tuple[str, ...]:
        return self._name_options

    def decode(self, decision: EncodingDecision) -> Result[str]:
        """
        Returns Result[str] with the text dump on success.
        Returns Result.failure(DECODE_ERROR, ...) when the payload is not a CRL.
        """
        return Result.from_computation(
            lambda: self._do_decode(decision),
            ErrorCode.DECODE_ERROR,
            f"Unable to load CRL ({decision.encoding.value})",
        ).peek(
            lambda text: log.info(
                "decode.complete", encoding=decision.encoding.value, text_bytes=len(text)
            )
        )

    def _do_decode(self, decision: EncodingDecision) -> str:
        """Internal decode — may raise (caught by from_computation)."""
        der = decision.payload
        if decision.encoding is CrlEncoding.PEM:
            _, _, der = pem.unarmor(decision.payload)

        crl = x509.load_der_x509_crl(der)
        version = asn1_crl.CertificateList.load(der)["tbs_cert_list"]["version"].native
        return self._render(crl, version)

    def _render(self, crl: x509.CertificateRevocationList, version: str | None) -> str:
        fmt = self._format
        signature_algorithm = crl.signature_algorithm_oid._name
        version_number = 2 if version == "v2" else 1

        lines = [
            "Certificate Revocation List (CRL):",
            f"        Version {version_number} (0x{version_number - 1:x})",
            f"        Signature Algorithm: {signature_algorithm}",
            f"        Issuer: {fmt.render(crl.issuer, indent=8)}",
            f"        Last Update: {format_time(crl.last_update_utc)}",
        ]
        if crl.next_update_utc is not None:
            lines.append(f"        Next Update: {format_time(crl.next_update_utc)}")
        else:
            lines.append("        Next Update: NONE")
        lines += _render_extensions(crl.extensions, "CRL extensions", 8, fmt)

        revoked = list(crl)
        if revoked:
            lines.append("Revoked Certificates:")
            for entry in revoked:
                lines.append(f"    Serial Number: {format_serial(entry.serial_number)}")
                lines.append(f"        Revocation Date: {format_time(entry.revocation_date_utc)}")
                lines += _render_extensions(entry.extensions, "CRL entry extensions", 8, fmt)
        else:
            lines.append("No Revoked Certificates.")

        lines.append(f"    Signature Algorithm: {signature_algorithm}")
        lines.append("    Signature Value:")
        lines.append(format_hex(crl.signature, indent=8))
        lines.append(crl.public_bytes(serialization.Encoding.PEM).decode("ascii").rstrip("\n"))
        return "\n".join(lines) + "\n"
