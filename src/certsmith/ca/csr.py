"""PKCS#10 certificate signing requests.

:func:`new` builds and signs a ``CertificationRequest`` for an RSA or EC
key pair.  :meth:`CSR.is_valid` checks that the request is signed by
the key it carries; this proves possession of the private key, not that
the subject is entitled to the name it asks for.

Older hashes (``md5`` for RSA, ``sha1``) are accepted for compatibility
with legacy software only.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asn1crypto import csr as asn1_csr
from cryptography import x509

from certsmith.ca.algorithms import hash_for, select_for_key
from certsmith.ca.base import CertsmithError
from certsmith.ca.signing import DEFAULT_SIGNER
from certsmith.core.keys import derive_public_key, load_public_key, public_key_info
from certsmith.core.names import to_asn1_name
from certsmith.core.pem import CSR_LABEL, encode_entry
from certsmith.core.types import HashAlgorithm

if TYPE_CHECKING:
    from asn1crypto import algos
    from asn1crypto import x509 as asn1_x509
    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )

    from certsmith.ca.signing import Signer

log = logging.getLogger(__name__)

VERSION = "v1"


class CSR:
    """A PKCS#10 certification request.

    Holds the exact DER encoding alongside its parsed ``asn1crypto``
    structure.  Instances are never modified after creation.
    """

    __slots__ = ("_asn1", "_der")

    def __init__(self, der: bytes, *, asn1: asn1_csr.CertificationRequest | None = None) -> None:
        self._der = bytes(der)
        self._asn1 = asn1 if asn1 is not None else asn1_csr.CertificationRequest.load(self._der)

    @property
    def _info(self) -> asn1_csr.CertificationRequestInfo:
        return self._asn1["certification_request_info"]

    @property
    def version(self) -> str:
        return self._info["version"].native

    @property
    def subject(self) -> asn1_x509.Name:
        return self._info["subject"]

    @property
    def public_key(self) -> PublicKeyTypes:
        return load_public_key(self._info["subject_pk_info"])

    @property
    def attributes(self) -> asn1_csr.CRIAttributes:
        return self._info["attributes"]

    @property
    def signature_algorithm(self) -> algos.SignedDigestAlgorithm:
        return self._asn1["signature_algorithm"]

    @property
    def signature(self) -> bytes:
        return self._asn1["signature"].native

    def is_valid(self, signer: Signer | None = None) -> bool:
        """Return whether the request is signed by its own public key.

        A request declaring a signature algorithm or key type certsmith
        does not support is reported as invalid.
        """
        try:
            digest = hash_for(self.signature_algorithm)
            public_key = self.public_key
            return (signer or DEFAULT_SIGNER).verify(
                self._info.dump(),
                digest,
                self.signature,
                public_key,
            )
        except (CertsmithError, ValueError) as exc:
            log.debug("CSR signature cannot be verified: %s", exc)
            return False

    def to_der(self) -> bytes:
        return self._der

    def to_pem(self) -> str:
        return encode_entry(CSR_LABEL, self._der)

    def to_cryptography(self) -> x509.CertificateSigningRequest:
        return x509.load_der_x509_csr(self._der)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CSR):
            return NotImplemented
        return self._der == other._der

    def __hash__(self) -> int:
        return hash(self._der)

    def __repr__(self) -> str:
        return f"<CSR subject={self.subject.human_friendly!r}>"


def new(
    private_key: PrivateKeyTypes,
    subject: str | x509.Name | asn1_x509.Name,
    *,
    hash: HashAlgorithm | str = HashAlgorithm.SHA256,  # noqa: A002
    signer: Signer | None = None,
) -> CSR:
    """Build a CSR for the key pair of *private_key*.

    Raises
    ------
    UnsupportedAlgorithm
        If *hash* cannot be used with the key (e.g. ``md5`` with EC).
    UnsupportedKeyType
        If the key is neither RSA nor EC.

    """
    algorithm = select_for_key(hash, private_key)
    public_key = derive_public_key(private_key)
    subject_name = to_asn1_name(subject)

    info = asn1_csr.CertificationRequestInfo(
        {
            "version": VERSION,
            "subject": subject_name,
            "subject_pk_info": public_key_info(public_key),
            "attributes": [],
        }
    )
    signature = (signer or DEFAULT_SIGNER).sign(info.dump(), HashAlgorithm(hash), private_key)

    der = asn1_csr.CertificationRequest(
        {
            "certification_request_info": info,
            "signature_algorithm": algorithm,
            "signature": signature,
        }
    ).dump()

    log.info(
        "Built CSR: subject=%s, algorithm=%s",
        subject_name.human_friendly,
        algorithm["algorithm"].native,
    )
    return CSR(der)


def verify(csr: CSR, signer: Signer | None = None) -> bool:
    """Module-level alias of :meth:`CSR.is_valid`."""
    return csr.is_valid(signer)
