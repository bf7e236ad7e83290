"""
openssl adapter — CRL text dump by shelling out to `openssl crl`.

Adapter layer — implements the CrlDecoder port.

    openssl crl -inform DER -nameopt space_eq,sname,utf8 -text

The payload is written to stdin in full and stdin is closed before stdout
is read, otherwise a large CRL deadlocks against a full pipe. communicate()
does exactly that and reaps the process; on timeout the process is killed
and its pipes drained before the failure is returned, so no file
descriptors or zombies outlive the request.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

import structlog
from railway import Result, ResultFailures

from crl_viewer.domain.models import EncodingDecision

log = structlog.get_logger()


def build_openssl_args(
    binary: str,
    encoding: str,
    name_options: Sequence[str],
) -> list[str]:
    """Command line for one decode; -nameopt is omitted when no options are set."""
    args = [binary, "crl", "-inform", encoding]
    if name_options:
        args += ["-nameopt", ",".join(name_options)]
    args.append("-text")
    return args


class OpensslCrlDecoder:
    """
    Decode CRLs with the openssl command line tool.

    Implements the CrlDecoder port. One process per decode, never reused.
    """

    def __init__(
        self,
        name_options: Sequence[str] = (),
        binary: str = "openssl",
        timeout: float = 30.0,
    ) -> None:
        self._name_options = tuple(name_options)
        self._binary = binary
        self._timeout = timeout

    @property
    def name_options(self) -> tuple[str, ...]:
        return self._name_options

    def decode(self, decision: EncodingDecision) -> Result[str]:
        """
        Run openssl over the payload and return its stdout as text.

        Returns Result.failure(DECODE_ERROR, ...) when openssl is missing,
        exits non-zero (stderr becomes the message) or exceeds the timeout.
        """
        args = build_openssl_args(self._binary, decision.encoding.value, self._name_options)
        try:
            process = subprocess.Popen(
                args,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            log.error("decode.spawn_failed", binary=self._binary, error=str(e))
            return ResultFailures.decode_error(f"Unable to run {self._binary}: {e}", e)

        try:
            stdout, stderr = process.communicate(input=decision.payload, timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            process.kill()
            process.communicate()
            log.error("decode.timeout", timeout_seconds=self._timeout)
            return ResultFailures.decode_error(
                f"CRL decoding timed out after {self._timeout:g}s", e
            )

        if process.returncode != 0:
            message = (
                _first_error_line(stderr) or f"openssl exited with status {process.returncode}"
            )
            log.warning(
                "decode.failed",
                encoding=decision.encoding.value,
                returncode=process.returncode,
                error=message,
            )
            return ResultFailures.decode_error(message)

        log.info("decode.complete", encoding=decision.encoding.value, text_bytes=len(stdout))
        return Result.success(stdout.decode("utf-8", errors="replace"))


def _first_error_line(stderr: bytes) -> str:
    for line in stderr.decode("utf-8", errors="replace").splitlines():
        if line.strip():
            return line.strip()
    return ""
