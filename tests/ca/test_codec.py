"""Tests for certsmith.ca.codec DER/PEM decoding."""

from __future__ import annotations

import pytest
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)

from certsmith.ca import codec
from certsmith.ca.base import DecodeError
from certsmith.ca.certificate import self_signed
from certsmith.ca.csr import new as new_csr
from certsmith.core.pem import encode_entry
from certsmith.core.types import DecodeErrorKind, PemPolicy, View


def _with_repeated_extension(cert, key) -> bytes:
    """Re-sign *cert* with its first extension listed twice."""
    original = asn1_x509.Certificate.load(cert.to_der())
    tbs = original["tbs_certificate"]
    fields = {
        name: tbs[name]
        for name in (
            "version",
            "serial_number",
            "signature",
            "issuer",
            "validity",
            "subject",
            "subject_public_key_info",
        )
    }
    extensions = list(tbs["extensions"])
    fields["extensions"] = [*extensions, extensions[0]]
    new_tbs = asn1_x509.TbsCertificate(fields)
    signature = key.sign(new_tbs.dump(), ec.ECDSA(hashes.SHA256()))
    return asn1_x509.Certificate(
        {
            "tbs_certificate": new_tbs,
            "signature_algorithm": original["signature_algorithm"],
            "signature_value": signature,
        }
    ).dump()


@pytest.fixture(scope="module")
def cert(ec_key):
    return self_signed(ec_key, "/CN=codec.example.com", template="root_ca")


@pytest.fixture(scope="module")
def csr(ec_key):
    return new_csr(ec_key, "/CN=codec.example.com")


@pytest.fixture(scope="module")
def key_pem(ec_key) -> str:
    return ec_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()).decode("ascii")


class TestCertificateDer:
    def test_round_trip(self, cert):
        result = codec.certificate_from_der(codec.certificate_to_der(cert))
        assert result.ok
        assert result.value == cert
        assert result.value.to_der() == cert.to_der()

    def test_view(self, cert):
        result = codec.certificate_from_der(cert.to_der(), View.PLAIN)
        assert result.value.view is View.PLAIN
        assert isinstance(result.value.extensions[0].value, x509.UnrecognizedExtension)

    def test_garbage(self):
        result = codec.certificate_from_der(b"not a certificate")
        assert result.error is DecodeErrorKind.MALFORMED
        assert result.value is None

    def test_truncated(self, cert):
        assert codec.certificate_from_der(cert.to_der()[:-10]).error is DecodeErrorKind.MALFORMED

    def test_trailing_data(self, cert):
        assert codec.certificate_from_der(cert.to_der() + b"\x00").error is DecodeErrorKind.MALFORMED

    def test_csr_der_is_not_a_certificate(self, csr):
        assert codec.certificate_from_der(csr.to_der()).error is DecodeErrorKind.MALFORMED

    def test_repeated_extension_is_malformed(self, cert, ec_key):
        der = _with_repeated_extension(cert, ec_key)
        result = codec.certificate_from_der(der)
        assert not result.ok
        assert result.error is DecodeErrorKind.MALFORMED

    def test_repeated_extension_pem_is_malformed(self, cert, ec_key):
        pem = encode_entry("CERTIFICATE", _with_repeated_extension(cert, ec_key))
        assert codec.certificate_from_pem(pem).error is DecodeErrorKind.MALFORMED

    def test_repeated_extension_plain_view(self, cert, ec_key):
        der = _with_repeated_extension(cert, ec_key)
        result = codec.certificate_from_der(der, View.PLAIN)
        assert result.ok
        assert len(result.value.extensions) == len(cert.extensions) + 1

    def test_unwrap_failure(self):
        with pytest.raises(DecodeError) as exc_info:
            codec.certificate_from_der(b"").unwrap()
        assert exc_info.value.kind is DecodeErrorKind.MALFORMED


class TestCertificatePem:
    def test_round_trip(self, cert):
        result = codec.certificate_from_pem(codec.certificate_to_pem(cert))
        assert result.unwrap() == cert

    def test_matches_der_decode(self, cert):
        from_pem = codec.certificate_from_pem(cert.to_pem()).unwrap()
        from_der = codec.certificate_from_der(cert.to_der()).unwrap()
        assert from_pem == from_der

    def test_bytes_input(self, cert):
        assert codec.certificate_from_pem(cert.to_pem().encode("ascii")).ok

    def test_mixed_bundle_first_match(self, cert, csr, key_pem):
        bundle = key_pem + cert.to_pem() + csr.to_pem()
        assert codec.certificate_from_pem(bundle).unwrap() == cert

    def test_first_certificate_wins(self, cert, ec_key_2):
        other = self_signed(ec_key_2, "/CN=other")
        result = codec.certificate_from_pem(other.to_pem() + cert.to_pem())
        assert result.unwrap() == other

    def test_not_found(self, csr, key_pem):
        assert codec.certificate_from_pem(key_pem + csr.to_pem()).error is DecodeErrorKind.NOT_FOUND

    def test_no_pem(self):
        assert codec.certificate_from_pem("hello").error is DecodeErrorKind.NOT_FOUND

    def test_broken_framing(self):
        text = "-----BEGIN CERTIFICATE-----\nAQID\n"
        assert codec.certificate_from_pem(text).error is DecodeErrorKind.MALFORMED

    def test_bad_body(self):
        text = encode_entry("CERTIFICATE", b"\x30\x03\x02\x01\x01")
        assert codec.certificate_from_pem(text).error is DecodeErrorKind.MALFORMED

    def test_single_policy(self, cert, csr):
        assert codec.certificate_from_pem(cert.to_pem(), policy=PemPolicy.SINGLE).ok
        bundle = cert.to_pem() + csr.to_pem()
        result = codec.certificate_from_pem(bundle, policy=PemPolicy.SINGLE)
        assert result.error is DecodeErrorKind.MULTIPLE

    def test_plain_view(self, cert):
        result = codec.certificate_from_pem(cert.to_pem(), view=View.PLAIN)
        assert result.value.view is View.PLAIN


class TestCertificateBundle:
    def test_all_certificates_in_order(self, cert, csr, ec_key_2):
        other = self_signed(ec_key_2, "/CN=other")
        bundle = cert.to_pem() + csr.to_pem() + other.to_pem()
        results = codec.certificates_from_pem(bundle)
        assert [r.unwrap() for r in results] == [cert, other]

    def test_empty(self):
        assert codec.certificates_from_pem("") == []

    def test_broken_framing(self):
        results = codec.certificates_from_pem("-----BEGIN CERTIFICATE-----\nAQID\n")
        assert [r.error for r in results] == [DecodeErrorKind.MALFORMED]


class TestCsr:
    def test_der_round_trip(self, csr):
        result = codec.csr_from_der(codec.csr_to_der(csr))
        assert result.unwrap() == csr

    def test_pem_round_trip(self, csr):
        result = codec.csr_from_pem(codec.csr_to_pem(csr))
        assert result.unwrap() == csr
        assert result.value.is_valid()

    def test_garbage_der(self):
        assert codec.csr_from_der(b"\x30\x00").error is DecodeErrorKind.MALFORMED

    def test_strict_rejects_bundle(self, csr, key_pem):
        result = codec.csr_from_pem(key_pem + csr.to_pem())
        assert result.error is DecodeErrorKind.MULTIPLE

    def test_strict_label_mismatch(self, cert):
        assert codec.csr_from_pem(cert.to_pem()).error is DecodeErrorKind.MISMATCH

    def test_strict_encrypted_mismatch(self, csr):
        text = encode_entry("ENCRYPTED CERTIFICATE REQUEST", csr.to_der())
        assert codec.csr_from_pem(text).error is DecodeErrorKind.MISMATCH

    def test_strict_empty(self):
        assert codec.csr_from_pem("").error is DecodeErrorKind.NOT_FOUND

    def test_lenient_policy(self, csr, cert, key_pem):
        bundle = key_pem + cert.to_pem() + csr.to_pem()
        result = codec.csr_from_pem(bundle, policy=PemPolicy.FIRST_MATCH)
        assert result.unwrap() == csr

    def test_certificate_der_is_not_a_csr(self, cert):
        assert codec.csr_from_der(cert.to_der()).error is DecodeErrorKind.MALFORMED
