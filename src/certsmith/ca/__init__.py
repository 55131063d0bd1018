"""Certificate and CSR issuance.

Exports the certificate and CSR types, their builders, the error types,
the template presets and the settings-driven issuer facade.
"""

from certsmith.ca.base import (
    CertsmithError,
    DecodeError,
    DecodeResult,
    TemplateError,
    UnsupportedAlgorithm,
    UnsupportedKeyType,
)
from certsmith.ca.certificate import Certificate, new, self_signed
from certsmith.ca.csr import CSR
from certsmith.ca.issuer import CertificateIssuer
from certsmith.ca.template import DISABLED, ENABLED, RandomSerial, Template, resolve
from certsmith.ca.validity import Validity

__all__ = [
    "CSR",
    "DISABLED",
    "ENABLED",
    "Certificate",
    "CertificateIssuer",
    "CertsmithError",
    "DecodeError",
    "DecodeResult",
    "RandomSerial",
    "Template",
    "TemplateError",
    "UnsupportedAlgorithm",
    "UnsupportedKeyType",
    "Validity",
    "new",
    "resolve",
    "self_signed",
]
