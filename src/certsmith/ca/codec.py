"""DER and PEM encoding and decoding of certificates and CSRs.

Decoders never raise on bad input; they return a
:class:`~certsmith.ca.base.DecodeResult`:

``malformed``
    The bytes do not parse as the expected structure (or carry trailing
    data), or the PEM framing itself is broken.
``not_found``
    No usable entry with the expected label was found.
``mismatch``
    Single-entry policy only: the one entry present has another label.
``multiple``
    Single-entry policy only: the input holds more than one entry.

PEM input may contain several entries.  With
:attr:`PemPolicy.FIRST_MATCH` the first unencrypted entry carrying the
expected label is decoded and everything else is ignored; with
:attr:`PemPolicy.SINGLE` the input must hold exactly that one entry.
Certificates default to the lenient policy and CSRs to the strict one.
"""

from __future__ import annotations

import logging

from asn1crypto import csr as asn1_csr
from asn1crypto import x509 as asn1_x509
from cryptography import x509

from certsmith.ca.base import DecodeResult
from certsmith.ca.certificate import Certificate
from certsmith.ca.csr import CSR
from certsmith.core.pem import CERTIFICATE_LABEL, CSR_LABEL, PemEntry, decode_entries
from certsmith.core.types import DecodeErrorKind, PemPolicy, View
from certsmith.logging.sanitize import sanitize_pem

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def pem_entries(text: str | bytes) -> list[PemEntry] | None:
    """Return the PEM entries in *text*, or ``None`` if the framing is broken."""
    try:
        return decode_entries(text)
    except ValueError as exc:
        log.debug("PEM framing could not be decoded: %s", exc)
        return None


def _select_entry(
    text: str | bytes,
    label: str,
    policy: PemPolicy,
) -> DecodeResult[bytes]:
    entries = pem_entries(text)
    if entries is None:
        return DecodeResult.failure(DecodeErrorKind.MALFORMED)

    if PemPolicy(policy) is PemPolicy.SINGLE:
        if not entries:
            return DecodeResult.failure(DecodeErrorKind.NOT_FOUND)
        if len(entries) > 1:
            return DecodeResult.failure(DecodeErrorKind.MULTIPLE)
        entry = entries[0]
        if entry.label != label or entry.encrypted:
            return DecodeResult.failure(DecodeErrorKind.MISMATCH)
        return DecodeResult.success(entry.der)

    for entry in entries:
        if entry.label == label and not entry.encrypted:
            return DecodeResult.success(entry.der)
    log.debug("No %s entry in PEM input: %s", label, sanitize_pem(text))
    return DecodeResult.failure(DecodeErrorKind.NOT_FOUND)


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------


def certificate_to_der(cert: Certificate) -> bytes:
    return cert.to_der()


def certificate_to_pem(cert: Certificate) -> str:
    return cert.to_pem()


def certificate_from_der(der: bytes, view: View = View.DECODED) -> DecodeResult[Certificate]:
    """Decode a DER certificate, presenting its extensions per *view*."""
    view = View(view)
    try:
        parsed = asn1_x509.Certificate.load(der, strict=True)
        # cryptography performs the strict structural check
        loaded = x509.load_der_x509_certificate(der)
        if view is View.DECODED:
            # extensions are parsed lazily; force it so bad ones fail here
            loaded.extensions  # noqa: B018
    except (ValueError, TypeError, x509.DuplicateExtension) as exc:
        log.debug("Certificate DER could not be decoded: %s", exc)
        return DecodeResult.failure(DecodeErrorKind.MALFORMED)
    return DecodeResult.success(Certificate(der, view=view, asn1=parsed))


def certificate_from_pem(
    text: str | bytes,
    view: View = View.DECODED,
    policy: PemPolicy = PemPolicy.FIRST_MATCH,
) -> DecodeResult[Certificate]:
    """Decode the CERTIFICATE entry of a PEM string."""
    entry = _select_entry(text, CERTIFICATE_LABEL, policy)
    if not entry.ok:
        return DecodeResult.failure(entry.error)  # type: ignore[arg-type]
    return certificate_from_der(entry.value, view)  # type: ignore[arg-type]


def certificates_from_pem(
    text: str | bytes,
    view: View = View.DECODED,
) -> list[DecodeResult[Certificate]]:
    """Decode every CERTIFICATE entry of a PEM bundle, in order.

    Entries with other labels are skipped.  Broken framing yields a
    single ``malformed`` result.
    """
    entries = pem_entries(text)
    if entries is None:
        return [DecodeResult.failure(DecodeErrorKind.MALFORMED)]
    return [
        certificate_from_der(entry.der, view)
        for entry in entries
        if entry.label == CERTIFICATE_LABEL and not entry.encrypted
    ]


# ---------------------------------------------------------------------------
# Certificate signing requests
# ---------------------------------------------------------------------------


def csr_to_der(csr: CSR) -> bytes:
    return csr.to_der()


def csr_to_pem(csr: CSR) -> str:
    return csr.to_pem()


def csr_from_der(der: bytes) -> DecodeResult[CSR]:
    try:
        parsed = asn1_csr.CertificationRequest.load(der, strict=True)
        x509.load_der_x509_csr(der)
    except (ValueError, TypeError) as exc:
        log.debug("CSR DER could not be decoded: %s", exc)
        return DecodeResult.failure(DecodeErrorKind.MALFORMED)
    return DecodeResult.success(CSR(der, asn1=parsed))


def csr_from_pem(
    text: str | bytes,
    policy: PemPolicy = PemPolicy.SINGLE,
) -> DecodeResult[CSR]:
    """Decode the CERTIFICATE REQUEST entry of a PEM string."""
    entry = _select_entry(text, CSR_LABEL, policy)
    if not entry.ok:
        return DecodeResult.failure(entry.error)  # type: ignore[arg-type]
    return csr_from_der(entry.value)  # type: ignore[arg-type]
