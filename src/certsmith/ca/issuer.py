"""Settings-driven front end to the certificate and CSR builders.

:class:`CertificateIssuer` binds a settings tree and the signing and
randomness capabilities once, so applications do not repeat them on
every call::

    issuer = CertificateIssuer(load_settings("certsmith.yaml"))
    root = issuer.self_signed(root_key, "CN=Example Root", template="root_ca")
    leaf = issuer.issue(leaf_key.public_key(), "CN=www.example.com", root, root_key)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from certsmith.ca import certificate as certificate_builder
from certsmith.ca import codec
from certsmith.ca import csr as csr_builder
from certsmith.config.settings import build_settings
from certsmith.core.types import PemPolicy, View

if TYPE_CHECKING:
    from cryptography import x509
    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )

    from certsmith.ca.base import DecodeResult
    from certsmith.ca.certificate import Certificate
    from certsmith.ca.csr import CSR
    from certsmith.ca.signing import RandomBytes, Signer
    from certsmith.config.settings import CertsmithSettings

log = logging.getLogger(__name__)


class CertificateIssuer:
    """Issue and parse certificates and CSRs using configured defaults.

    Parameters
    ----------
    settings:
        Settings tree; built-in defaults when omitted.
    signer:
        Signing capability shared by all builds.
    random_bytes:
        Randomness capability used for random serial numbers.

    """

    def __init__(
        self,
        settings: CertsmithSettings | None = None,
        *,
        signer: Signer | None = None,
        random_bytes: RandomBytes | None = None,
    ) -> None:
        self._settings = settings or build_settings(None)
        self._signer = signer
        self._random_bytes = random_bytes

    @property
    def settings(self) -> CertsmithSettings:
        return self._settings

    def _options(self, overrides: dict[str, Any]) -> dict[str, Any]:
        issuance = self._settings.issuance
        options: dict[str, Any] = {
            "template": issuance.default_template,
            "hash": issuance.hash_algorithm,
            "backdate_seconds": issuance.backdate_seconds,
            "signer": self._signer,
            "random_bytes": self._random_bytes,
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return options

    # -- certificates ---------------------------------------------------

    def self_signed(
        self,
        private_key: PrivateKeyTypes,
        subject: Any,  # noqa: ANN401
        **overrides: Any,  # noqa: ANN401
    ) -> Certificate:
        """Issue a self-signed certificate; see :func:`certificate.self_signed`."""
        return certificate_builder.self_signed(private_key, subject, **self._options(overrides))

    def issue(
        self,
        public_key: PublicKeyTypes,
        subject: Any,  # noqa: ANN401
        issuer: Certificate | x509.Certificate,
        issuer_key: PrivateKeyTypes,
        **overrides: Any,  # noqa: ANN401
    ) -> Certificate:
        """Issue a certificate under *issuer*; see :func:`certificate.new`."""
        return certificate_builder.new(
            public_key,
            subject,
            issuer,
            issuer_key,
            **self._options(overrides),
        )

    def load_certificate(self, text: str | bytes) -> DecodeResult[Certificate]:
        """Decode a PEM certificate with the configured policy and view."""
        codec_settings = self._settings.codec
        return codec.certificate_from_pem(
            text,
            view=View(codec_settings.certificate_view),
            policy=PemPolicy(codec_settings.certificate_pem_policy),
        )

    # -- certificate signing requests ----------------------------------

    def request(
        self,
        private_key: PrivateKeyTypes,
        subject: Any,  # noqa: ANN401
        hash: str | None = None,  # noqa: A002
    ) -> CSR:
        """Build a CSR, signing with the configured CSR hash by default."""
        return csr_builder.new(
            private_key,
            subject,
            hash=hash or self._settings.csr.hash_algorithm,
            signer=self._signer,
        )

    def verify_request(self, csr: CSR) -> bool:
        return csr.is_valid(self._signer)

    def load_request(self, text: str | bytes) -> DecodeResult[CSR]:
        """Decode a PEM CSR with the configured policy."""
        return codec.csr_from_pem(
            text,
            policy=PemPolicy(self._settings.codec.csr_pem_policy),
        )
