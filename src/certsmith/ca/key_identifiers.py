"""Subject and Authority Key Identifier propagation.

Templates carry ``True`` for the identifier extensions until the subject
key and issuer are known.  The functions here replace those placeholders
with real extensions, immediately before a certificate is assembled.
Each function returns a new :class:`~certsmith.ca.template.Template`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cryptography import x509

from certsmith.ca import extensions as ext
from certsmith.ca.template import DISABLED, ENABLED

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

    from certsmith.ca.certificate import Certificate
    from certsmith.ca.template import Template

SKI_NAME = "subject_key_identifier"
AKI_NAME = "authority_key_identifier"


def subject_key_identifier(public_key: PublicKeyTypes) -> bytes:
    """Return the RFC 5280 (method 1) key identifier of *public_key*."""
    return x509.SubjectKeyIdentifier.from_public_key(public_key).digest


def authority_key_identifier(issuer: Certificate | x509.Certificate | PublicKeyTypes) -> bytes | None:
    """Return the key identifier to place in an issued certificate's AKI.

    For an issuer certificate this is the raw value of its Subject Key
    Identifier extension, or ``None`` when it has none.  For a public
    key (self-signed issuance) it is the key's own identifier.
    """
    from certsmith.ca.certificate import Certificate  # noqa: PLC0415

    if isinstance(issuer, x509.Certificate):
        issuer = Certificate.from_cryptography(issuer)
    if isinstance(issuer, Certificate):
        return issuer.subject_key_identifier
    return subject_key_identifier(issuer)


def apply_subject_key_identifier(template: Template, public_key: PublicKeyTypes) -> Template:
    """Fill an enabled SKI placeholder from *public_key*."""
    if template.extension_entry(SKI_NAME) is not ENABLED:
        return template
    return template.with_extension(
        SKI_NAME,
        ext.subject_key_identifier(subject_key_identifier(public_key)),
    )


def apply_authority_key_identifier(
    template: Template,
    issuer: Certificate | x509.Certificate | PublicKeyTypes,
) -> Template:
    """Fill an enabled AKI placeholder from *issuer*.

    When the issuer offers no identifier the placeholder is disabled, so
    the extension is left out rather than emitted empty.  An AKI value
    set explicitly on the template is kept as given, even for an issuer
    without a Subject Key Identifier.
    """
    if template.extension_entry(AKI_NAME) is not ENABLED:
        return template
    aki = authority_key_identifier(issuer)
    if aki is None:
        return template.with_extension(AKI_NAME, DISABLED)
    return template.with_extension(AKI_NAME, ext.authority_key_identifier(aki))


def apply_key_identifiers(
    template: Template,
    public_key: PublicKeyTypes,
    issuer: Certificate | x509.Certificate | PublicKeyTypes,
) -> Template:
    return apply_authority_key_identifier(
        apply_subject_key_identifier(template, public_key),
        issuer,
    )
