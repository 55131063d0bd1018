"""Certificate issuance.

:func:`new` issues a certificate for a public key under an existing CA
certificate; :func:`self_signed` issues a certificate signed by the
subject's own key.  Both resolve a template (see
:mod:`certsmith.ca.template`), fill in the key identifier extensions,
assemble the ``TBSCertificate`` with ``asn1crypto``, sign its DER
encoding and return an immutable :class:`Certificate`.

Example::

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca = self_signed(ca_key, "/C=US/O=Example/CN=Example Root CA", template="root_ca")

    key = ec.generate_private_key(ec.SECP256R1())
    cert = new(
        key.public_key(),
        "CN=www.example.com",
        ca,
        ca_key,
        extensions={"subject_alt_name": subject_alt_name(["www.example.com"])},
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asn1crypto import core
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding

from certsmith.ca import extensions as ext
from certsmith.ca.algorithms import select_for_key
from certsmith.ca.base import TemplateError
from certsmith.ca.key_identifiers import apply_key_identifiers
from certsmith.ca.signing import DEFAULT_SIGNER, default_random_bytes
from certsmith.ca.template import DISABLED, ENABLED, RandomSerial, resolve
from certsmith.ca.validity import DEFAULT_BACKDATE_SECONDS, Validity
from certsmith.core.keys import derive_public_key, key_kind, load_public_key, public_key_info
from certsmith.core.names import to_asn1_name
from certsmith.core.pem import CERTIFICATE_LABEL, encode_entry
from certsmith.core.types import NamedTemplate, View

if TYPE_CHECKING:
    from asn1crypto import algos
    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )

    from certsmith.ca.signing import RandomBytes, Signer
    from certsmith.ca.template import ExtensionOverrides, Template

log = logging.getLogger(__name__)

VERSION = "v3"


class Certificate:
    """An X.509 certificate.

    Holds the exact DER encoding alongside its parsed ``asn1crypto``
    structure.  The :attr:`view` only affects how :attr:`extensions`
    are presented: typed ``cryptography`` values for
    :attr:`View.DECODED`, raw ``UnrecognizedExtension`` values for
    :attr:`View.PLAIN`.  Instances are never modified after creation.
    """

    __slots__ = ("_asn1", "_crypto", "_der", "_view")

    def __init__(
        self,
        der: bytes,
        *,
        view: View = View.DECODED,
        asn1: asn1_x509.Certificate | None = None,
    ) -> None:
        self._der = bytes(der)
        self._asn1 = asn1 if asn1 is not None else asn1_x509.Certificate.load(self._der)
        self._view = View(view)
        self._crypto: x509.Certificate | None = None

    @classmethod
    def from_cryptography(cls, cert: x509.Certificate, *, view: View = View.DECODED) -> Certificate:
        return cls(cert.public_bytes(Encoding.DER), view=view)

    # -- fields ---------------------------------------------------------

    @property
    def _tbs(self) -> asn1_x509.TbsCertificate:
        return self._asn1["tbs_certificate"]

    @property
    def view(self) -> View:
        return self._view

    @property
    def version(self) -> str:
        return self._tbs["version"].native

    @property
    def serial_number(self) -> int:
        return self._tbs["serial_number"].native

    @property
    def signature_algorithm(self) -> algos.SignedDigestAlgorithm:
        return self._asn1["signature_algorithm"]

    @property
    def signature(self) -> bytes:
        return self._asn1["signature_value"].native

    @property
    def subject(self) -> asn1_x509.Name:
        return self._tbs["subject"]

    @property
    def issuer(self) -> asn1_x509.Name:
        return self._tbs["issuer"]

    @property
    def validity(self) -> Validity:
        return Validity.from_asn1(self._tbs["validity"])

    @property
    def public_key(self) -> PublicKeyTypes:
        return load_public_key(self._tbs["subject_public_key_info"])

    @property
    def extensions(self) -> tuple[x509.Extension, ...]:
        if self._view is View.DECODED:
            return tuple(self.to_cryptography().extensions)
        raw = self._tbs["extensions"]
        if isinstance(raw, core.Void):
            return ()
        return tuple(_plain_extension(e) for e in raw)

    def extension(self, ext_id: str | x509.ObjectIdentifier) -> x509.Extension | None:
        """Return the extension named by *ext_id*, or ``None``."""
        return ext.find(self.extensions, ext_id)

    @property
    def subject_key_identifier(self) -> bytes | None:
        return self._asn1.key_identifier

    @property
    def authority_key_identifier(self) -> bytes | None:
        return self._asn1.authority_key_identifier

    # -- conversion -----------------------------------------------------

    def with_view(self, view: View) -> Certificate:
        return Certificate(self._der, view=view, asn1=self._asn1)

    def to_der(self) -> bytes:
        return self._der

    def to_pem(self) -> str:
        return encode_entry(CERTIFICATE_LABEL, self._der)

    def to_cryptography(self) -> x509.Certificate:
        if self._crypto is None:
            self._crypto = x509.load_der_x509_certificate(self._der)
        return self._crypto

    # -- value semantics ------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Certificate):
            return NotImplemented
        return self._der == other._der

    def __hash__(self) -> int:
        return hash(self._der)

    def __repr__(self) -> str:
        return (
            f"<Certificate serial={format(self.serial_number, 'x')} "
            f"subject={self.subject.human_friendly!r} view={self._view.value}>"
        )


def _plain_extension(extension: asn1_x509.Extension) -> x509.Extension:
    oid = x509.ObjectIdentifier(extension["extn_id"].dotted)
    return x509.Extension(
        oid,
        bool(extension["critical"].native),
        x509.UnrecognizedExtension(oid, extension["extn_value"].contents),
    )


def _asn1_extension(extension: x509.Extension) -> asn1_x509.Extension:
    return asn1_x509.Extension(
        {
            "extn_id": extension.oid.dotted_string,
            "critical": extension.critical,
            "extn_value": core.ParsableOctetString(extension.value.public_bytes()),
        }
    )


def _assemble_extensions(template: Template) -> list[asn1_x509.Extension]:
    """Return the template's enabled extensions, dropping disabled ones."""
    assembled = []
    seen: dict[str, str] = {}
    for name, entry in template.extensions:
        if entry is DISABLED:
            continue
        if entry is ENABLED:
            msg = f"Extension '{name}' is enabled but has no value"
            raise TemplateError(msg)
        dotted = entry.oid.dotted_string
        if dotted in seen:
            msg = f"Extensions '{seen[dotted]}' and '{name}' share the OID {dotted}"
            raise TemplateError(msg)
        seen[dotted] = name
        assembled.append(_asn1_extension(entry))
    return assembled


def _serial_number(serial: int | RandomSerial, random_bytes: RandomBytes) -> int:
    if isinstance(serial, RandomSerial):
        return int.from_bytes(random_bytes(serial.size), "big")
    return serial


def _build(  # noqa: PLR0913
    public_key: PublicKeyTypes,
    subject: str | x509.Name | asn1_x509.Name,
    issuer: Certificate | PublicKeyTypes,
    issuer_key: PrivateKeyTypes,
    template: Template,
    *,
    signer: Signer,
    random_bytes: RandomBytes,
    backdate_seconds: int,
) -> Certificate:
    key_kind(public_key)

    template = apply_key_identifiers(template, public_key, issuer)
    algorithm = select_for_key(template.hash, issuer_key)

    subject_name = to_asn1_name(subject)
    issuer_name = issuer.subject if isinstance(issuer, Certificate) else subject_name

    validity = template.validity
    if not isinstance(validity, Validity):
        validity = Validity.days_from_now(validity, backdate_seconds)

    serial = _serial_number(template.serial, random_bytes)

    fields = {
        "version": VERSION,
        "serial_number": serial,
        "signature": algorithm,
        "issuer": issuer_name,
        "validity": validity.to_asn1(),
        "subject": subject_name,
        "subject_public_key_info": public_key_info(public_key),
    }
    extensions = _assemble_extensions(template)
    if extensions:
        fields["extensions"] = extensions
    tbs = asn1_x509.TbsCertificate(fields)

    signature = signer.sign(tbs.dump(), template.hash, issuer_key)

    der = asn1_x509.Certificate(
        {
            "tbs_certificate": tbs,
            "signature_algorithm": algorithm,
            "signature_value": signature,
        }
    ).dump()

    log.info(
        "Issued certificate for %s",
        subject_name.human_friendly,
        extra={
            "serial": format(serial, "x"),
            "subject": subject_name.human_friendly,
            "issuer": issuer_name.human_friendly,
            "algorithm": algorithm["algorithm"].native,
        },
    )
    return Certificate(der)


def new(  # noqa: PLR0913
    public_key: PublicKeyTypes,
    subject: str | x509.Name | asn1_x509.Name,
    issuer: Certificate | x509.Certificate,
    issuer_key: PrivateKeyTypes,
    *,
    template: Template | NamedTemplate | str = NamedTemplate.SERVER,
    hash: str | None = None,  # noqa: A002
    serial: int | RandomSerial | None = None,
    validity: int | Validity | None = None,
    extensions: ExtensionOverrides | None = None,
    signer: Signer | None = None,
    random_bytes: RandomBytes | None = None,
    backdate_seconds: int = DEFAULT_BACKDATE_SECONDS,
) -> Certificate:
    """Issue a certificate for *public_key* under *issuer*.

    Parameters
    ----------
    public_key:
        RSA or EC public key of the subject.
    subject:
        Subject name: a DN string, a ``cryptography`` Name or an
        ``asn1crypto`` Name.
    issuer:
        Issuing CA certificate.  Its Subject becomes the Issuer of the
        new certificate, and its Subject Key Identifier (if any) the
        Authority Key Identifier.
    issuer_key:
        Private key matching *issuer*; determines the signature
        algorithm family.
    template:
        Template or preset name (default ``server``).
    hash, serial, validity, extensions:
        Template overrides, see :func:`certsmith.ca.template.resolve`.
    signer, random_bytes:
        Signing and randomness capabilities; default to ``cryptography``
        and :func:`secrets.token_bytes`.
    backdate_seconds:
        How far ``not_before`` is moved into the past when the validity
        is given in days.

    Raises
    ------
    UnsupportedAlgorithm
        If the template hash cannot be used with *issuer_key*.
    UnsupportedKeyType
        If a key is neither RSA nor EC.
    TemplateError
        If the template or an override is invalid.

    """
    if isinstance(issuer, x509.Certificate):
        issuer = Certificate.from_cryptography(issuer)
    resolved = resolve(template, hash=hash, serial=serial, validity=validity, extensions=extensions)
    return _build(
        public_key,
        subject,
        issuer,
        issuer_key,
        resolved,
        signer=signer or DEFAULT_SIGNER,
        random_bytes=random_bytes or default_random_bytes,
        backdate_seconds=backdate_seconds,
    )


def self_signed(  # noqa: PLR0913
    private_key: PrivateKeyTypes,
    subject: str | x509.Name | asn1_x509.Name,
    *,
    template: Template | NamedTemplate | str = NamedTemplate.SERVER,
    hash: str | None = None,  # noqa: A002
    serial: int | RandomSerial | None = None,
    validity: int | Validity | None = None,
    extensions: ExtensionOverrides | None = None,
    signer: Signer | None = None,
    random_bytes: RandomBytes | None = None,
    backdate_seconds: int = DEFAULT_BACKDATE_SECONDS,
) -> Certificate:
    """Issue a certificate signed by its own subject key.

    The public key is derived from *private_key*, the Issuer equals the
    Subject, and the Authority Key Identifier equals the Subject Key
    Identifier.  Options are the same as for :func:`new`.
    """
    public_key = derive_public_key(private_key)
    resolved = resolve(template, hash=hash, serial=serial, validity=validity, extensions=extensions)
    return _build(
        public_key,
        subject,
        public_key,
        private_key,
        resolved,
        signer=signer or DEFAULT_SIGNER,
        random_bytes=random_bytes or default_random_bytes,
        backdate_seconds=backdate_seconds,
    )
