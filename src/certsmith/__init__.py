"""certsmith: X.509 certificate and PKCS#10 CSR issuance.

Typical use::

    from cryptography.hazmat.primitives.asymmetric import ec

    from certsmith import CertificateIssuer

    issuer = CertificateIssuer()
    root_key = ec.generate_private_key(ec.SECP256R1())
    root = issuer.self_signed(root_key, "/CN=Example Root", template="root_ca")
    print(root.to_pem())
"""

from certsmith.ca import (
    CSR,
    DISABLED,
    ENABLED,
    Certificate,
    CertificateIssuer,
    CertsmithError,
    DecodeError,
    DecodeResult,
    RandomSerial,
    Template,
    TemplateError,
    UnsupportedAlgorithm,
    UnsupportedKeyType,
    Validity,
)
from certsmith.config import load_settings
from certsmith.core.types import DecodeErrorKind, HashAlgorithm, KeyKind, PemPolicy, View
from certsmith.logging import configure_logging

__version__ = "0.1.0"

__all__ = [
    "CSR",
    "DISABLED",
    "ENABLED",
    "Certificate",
    "CertificateIssuer",
    "CertsmithError",
    "DecodeError",
    "DecodeErrorKind",
    "DecodeResult",
    "HashAlgorithm",
    "KeyKind",
    "PemPolicy",
    "RandomSerial",
    "Template",
    "TemplateError",
    "UnsupportedAlgorithm",
    "UnsupportedKeyType",
    "Validity",
    "View",
    "configure_logging",
    "load_settings",
]
