"""
Unit tests for the openssl subprocess decoder.

subprocess.Popen is patched for the failure paths (missing binary,
non-zero exit, timeout); the tests marked requires_openssl run the real
binary against generated CRLs.
"""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

from railway import ErrorCode, ResultAssertions

from crl_viewer.adapters.openssl_decoder import OpensslCrlDecoder, build_openssl_args
from crl_viewer.domain.models import CrlEncoding, EncodingDecision
from tests.conftest import requires_openssl

POPEN = "crl_viewer.adapters.openssl_decoder.subprocess.Popen"


def _make_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.communicate.return_value = (stdout, stderr)
    process.returncode = returncode
    return process


class TestBuildOpensslArgs:
    def test_with_name_options(self) -> None:
        args = build_openssl_args("openssl", "DER", ("space_eq", "sname", "utf8"))
        assert args == [
            "openssl", "crl", "-inform", "DER", "-nameopt", "space_eq,sname,utf8", "-text",
        ]

    def test_without_name_options_omits_nameopt(self) -> None:
        assert build_openssl_args("/usr/bin/openssl", "PEM", ()) == [
            "/usr/bin/openssl", "crl", "-inform", "PEM", "-text",
        ]


class TestOpensslDecodeSuccess:
    """
    GIVEN openssl exits 0
    WHEN decode is called
    THEN its stdout is returned verbatim as text.
    """

    def test_returns_stdout(self) -> None:
        process = _make_process(stdout=b"Certificate Revocation List (CRL):\n")
        with patch(POPEN, return_value=process) as popen:
            decoder = OpensslCrlDecoder(name_options=("sname",))
            result = decoder.decode(EncodingDecision(CrlEncoding.PEM, b"-----BEGIN X509 CRL-----"))

        ResultAssertions.assert_success_value(result, "Certificate Revocation List (CRL):\n")
        assert popen.call_args.args[0] == [
            "openssl", "crl", "-inform", "PEM", "-nameopt", "sname", "-text",
        ]
        process.communicate.assert_called_once_with(
            input=b"-----BEGIN X509 CRL-----", timeout=30.0
        )

    def test_invalid_utf8_is_replaced(self) -> None:
        with patch(POPEN, return_value=_make_process(stdout=b"CN = \xff\n")):
            result = OpensslCrlDecoder().decode(EncodingDecision(CrlEncoding.DER, b"\x30"))
        assert ResultAssertions.assert_success(result) == "CN = �\n"


class TestOpensslDecodeFailures:
    """
    GIVEN openssl cannot run, rejects the input or hangs
    WHEN decode is called
    THEN it returns Failure(DECODE_ERROR) instead of raising.
    """

    def test_non_zero_exit_uses_first_stderr_line(self) -> None:
        process = _make_process(
            stderr=b"\nunable to load CRL\n40F7:error:decoder routines\n", returncode=1
        )
        with patch(POPEN, return_value=process):
            result = OpensslCrlDecoder().decode(EncodingDecision(CrlEncoding.DER, b"\x30\x00"))
        error = ResultAssertions.assert_failure(result, ErrorCode.DECODE_ERROR)
        assert error.message == "unable to load CRL"

    def test_non_zero_exit_without_stderr(self) -> None:
        with patch(POPEN, return_value=_make_process(returncode=2)):
            result = OpensslCrlDecoder().decode(EncodingDecision(CrlEncoding.DER, b"\x30"))
        ResultAssertions.assert_failure_message_equals(result, "openssl exited with status 2")

    def test_missing_binary(self) -> None:
        with patch(POPEN, side_effect=FileNotFoundError(2, "No such file or directory")):
            result = OpensslCrlDecoder(binary="/nonexistent/openssl").decode(
                EncodingDecision(CrlEncoding.DER, b"\x30")
            )
        error = ResultAssertions.assert_failure(result, ErrorCode.DECODE_ERROR)
        assert error.message.startswith("Unable to run /nonexistent/openssl")
        assert isinstance(error.exception, FileNotFoundError)

    def test_timeout_kills_process(self) -> None:
        process = MagicMock()
        process.communicate.side_effect = [
            subprocess.TimeoutExpired(cmd="openssl", timeout=5),
            (b"", b""),
        ]
        with patch(POPEN, return_value=process):
            result = OpensslCrlDecoder(timeout=5).decode(EncodingDecision(CrlEncoding.DER, b"\x30"))

        ResultAssertions.assert_failure_message_equals(result, "CRL decoding timed out after 5s")
        process.kill.assert_called_once()
        assert process.communicate.call_count == 2


@requires_openssl
class TestOpensslRealBinary:
    """
    GIVEN a generated CRL and the installed openssl binary
    WHEN decode is called
    THEN the dump lists every revoked serial.
    """

    def test_decodes_der(self, crl_der: bytes) -> None:
        decoder = OpensslCrlDecoder(name_options=("space_eq", "sname", "utf8"))
        text = ResultAssertions.assert_success(
            decoder.decode(EncodingDecision(CrlEncoding.DER, crl_der))
        )
        assert "Certificate Revocation List (CRL)" in text
        assert "Serial Number: 0A1B2C" in text
        assert "Serial Number: 10" in text

    def test_der_and_pem_give_same_text(self, crl_der: bytes, crl_pem: bytes) -> None:
        decoder = OpensslCrlDecoder(name_options=("space_eq", "sname", "utf8"))
        from_der = decoder.decode(EncodingDecision(CrlEncoding.DER, crl_der))
        from_pem = decoder.decode(EncodingDecision(CrlEncoding.PEM, crl_pem))
        assert ResultAssertions.assert_success(from_der) == ResultAssertions.assert_success(
            from_pem
        )

    def test_garbage_is_decode_error(self) -> None:
        result = OpensslCrlDecoder().decode(EncodingDecision(CrlEncoding.DER, b"\x30\x03abc"))
        ResultAssertions.assert_failure(result, ErrorCode.DECODE_ERROR)
