"""Certificate extension constructors and lookup.

Extensions are ``cryptography.x509.Extension`` values (OID, criticality,
typed value).  The constructors here apply the criticality conventions
used by the named templates: basic constraints are critical for CA
certificates, key usage is always critical, everything else is not.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, ExtensionOID

from certsmith.ca.base import TemplateError

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

# ---------------------------------------------------------------------------
# Key usage / EKU mappings
# ---------------------------------------------------------------------------

_KEY_USAGE_FIELDS = (
    "digital_signature",
    "content_commitment",
    "key_encipherment",
    "data_encipherment",
    "key_agreement",
    "key_cert_sign",
    "crl_sign",
    "encipher_only",
    "decipher_only",
)

# X.509 spelling of bits whose snake_case form is not a plain conversion
_KEY_USAGE_ALIASES = {
    "non_repudiation": "content_commitment",
    "c_r_l_sign": "crl_sign",
}

_EKU_OIDS = {
    "server_auth": ExtendedKeyUsageOID.SERVER_AUTH,
    "client_auth": ExtendedKeyUsageOID.CLIENT_AUTH,
    "code_signing": ExtendedKeyUsageOID.CODE_SIGNING,
    "email_protection": ExtendedKeyUsageOID.EMAIL_PROTECTION,
    "time_stamping": ExtendedKeyUsageOID.TIME_STAMPING,
    "ocsp_signing": ExtendedKeyUsageOID.OCSP_SIGNING,
    "any_extended_key_usage": ExtendedKeyUsageOID.ANY_EXTENDED_KEY_USAGE,
}

# Extension names accepted by :func:`find` and used as template keys
EXTENSION_OIDS = {
    "basic_constraints": ExtensionOID.BASIC_CONSTRAINTS,
    "key_usage": ExtensionOID.KEY_USAGE,
    "ext_key_usage": ExtensionOID.EXTENDED_KEY_USAGE,
    "subject_key_identifier": ExtensionOID.SUBJECT_KEY_IDENTIFIER,
    "authority_key_identifier": ExtensionOID.AUTHORITY_KEY_IDENTIFIER,
    "subject_alt_name": ExtensionOID.SUBJECT_ALTERNATIVE_NAME,
    "crl_distribution_points": ExtensionOID.CRL_DISTRIBUTION_POINTS,
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")
_DOTTED_OID_RE = re.compile(r"^\d+(\.\d+)+$")


def _snake(name: str) -> str:
    """``digitalSignature`` -> ``digital_signature``; ``OCSPSigning`` -> ``ocsp_signing``."""
    if "_" in name or name.islower():
        return name
    if name.startswith("OCSP"):
        return "ocsp_" + _snake(name[4:])
    return _CAMEL_RE.sub("_", name).lower()


def build_key_usage(usages: Iterable[str]) -> x509.KeyUsage:
    """Build an :class:`x509.KeyUsage` value from usage names."""
    usage_set = set()
    for name in usages:
        field = _snake(name)
        field = _KEY_USAGE_ALIASES.get(field, field)
        if field not in _KEY_USAGE_FIELDS:
            msg = f"Unknown key usage '{name}'; supported: {list(_KEY_USAGE_FIELDS)}"
            raise TemplateError(msg)
        usage_set.add(field)
    ka = "key_agreement" in usage_set
    return x509.KeyUsage(
        digital_signature="digital_signature" in usage_set,
        content_commitment="content_commitment" in usage_set,
        key_encipherment="key_encipherment" in usage_set,
        data_encipherment="data_encipherment" in usage_set,
        key_agreement=ka,
        key_cert_sign="key_cert_sign" in usage_set,
        crl_sign="crl_sign" in usage_set,
        encipher_only="encipher_only" in usage_set if ka else False,
        decipher_only="decipher_only" in usage_set if ka else False,
    )


def build_eku(ekus: Iterable[str | x509.ObjectIdentifier]) -> x509.ExtendedKeyUsage:
    """Build an :class:`x509.ExtendedKeyUsage` value from names or OIDs."""
    oids = []
    for name in ekus:
        if isinstance(name, x509.ObjectIdentifier):
            oids.append(name)
            continue
        if _DOTTED_OID_RE.match(name):
            oids.append(x509.ObjectIdentifier(name))
            continue
        oid = _EKU_OIDS.get(_snake(name))
        if oid is None:
            msg = f"Unknown extended key usage '{name}'; supported: {sorted(_EKU_OIDS)}"
            raise TemplateError(msg)
        oids.append(oid)
    return x509.ExtendedKeyUsage(oids)


def _general_name(value: str | x509.GeneralName) -> x509.GeneralName:
    if isinstance(value, x509.GeneralName):
        return value
    if value.startswith("email:"):
        return x509.RFC822Name(value[len("email:") :])
    if value.startswith("uri:"):
        return x509.UniformResourceIdentifier(value[len("uri:") :])
    try:
        return x509.IPAddress(ipaddress.ip_address(value))
    except ValueError:
        return x509.DNSName(value)


# ---------------------------------------------------------------------------
# Extension constructors
# ---------------------------------------------------------------------------


def basic_constraints(ca: bool, path_length: int | None = None) -> x509.Extension:
    if not ca and path_length is not None:
        msg = "A path length constraint requires ca=True"
        raise TemplateError(msg)
    return x509.Extension(
        ExtensionOID.BASIC_CONSTRAINTS,
        ca,
        x509.BasicConstraints(ca=ca, path_length=path_length),
    )


def key_usage(usages: Iterable[str]) -> x509.Extension:
    return x509.Extension(ExtensionOID.KEY_USAGE, True, build_key_usage(usages))


def ext_key_usage(usages: Iterable[str | x509.ObjectIdentifier]) -> x509.Extension:
    return x509.Extension(ExtensionOID.EXTENDED_KEY_USAGE, False, build_eku(usages))


def subject_key_identifier(value: bytes | PublicKeyTypes) -> x509.Extension:
    """SKI extension from a raw identifier or from a public key."""
    if isinstance(value, bytes):
        ski = x509.SubjectKeyIdentifier(value)
    else:
        ski = x509.SubjectKeyIdentifier.from_public_key(value)
    return x509.Extension(ExtensionOID.SUBJECT_KEY_IDENTIFIER, False, ski)


def authority_key_identifier(value: bytes | PublicKeyTypes) -> x509.Extension:
    """AKI extension from a raw identifier or from the issuer's public key."""
    if isinstance(value, bytes):
        aki = x509.AuthorityKeyIdentifier(
            key_identifier=value,
            authority_cert_issuer=None,
            authority_cert_serial_number=None,
        )
    else:
        aki = x509.AuthorityKeyIdentifier.from_issuer_public_key(value)
    return x509.Extension(ExtensionOID.AUTHORITY_KEY_IDENTIFIER, False, aki)


def subject_alt_name(names: Iterable[str | x509.GeneralName]) -> x509.Extension:
    """SAN extension.

    Plain strings become IP addresses when they parse as one, DNS names
    otherwise; ``email:`` and ``uri:`` prefixes select those name types.
    """
    general_names = [_general_name(n) for n in names]
    if not general_names:
        msg = "subject_alt_name requires at least one name"
        raise TemplateError(msg)
    return x509.Extension(
        ExtensionOID.SUBJECT_ALTERNATIVE_NAME,
        False,
        x509.SubjectAlternativeName(general_names),
    )


def crl_distribution_points(urls: Iterable[str]) -> x509.Extension:
    points = [
        x509.DistributionPoint(
            full_name=[x509.UniformResourceIdentifier(url)],
            relative_name=None,
            reasons=None,
            crl_issuer=None,
        )
        for url in urls
    ]
    return x509.Extension(
        ExtensionOID.CRL_DISTRIBUTION_POINTS,
        False,
        x509.CRLDistributionPoints(points),
    )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def extension_oid(ext_id: str | x509.ObjectIdentifier) -> x509.ObjectIdentifier:
    """Resolve an extension name, dotted OID string or OID object."""
    if isinstance(ext_id, x509.ObjectIdentifier):
        return ext_id
    oid = EXTENSION_OIDS.get(ext_id)
    if oid is not None:
        return oid
    if _DOTTED_OID_RE.match(ext_id):
        return x509.ObjectIdentifier(ext_id)
    msg = f"Unknown extension '{ext_id}'; use a dotted OID or one of {sorted(EXTENSION_OIDS)}"
    raise ValueError(msg)


def find(
    extensions: Iterable[x509.Extension],
    ext_id: str | x509.ObjectIdentifier,
) -> x509.Extension | None:
    """Return the first extension matching *ext_id*, or ``None``."""
    oid = extension_oid(ext_id)
    for ext in extensions:
        if ext.oid == oid:
            return ext
    return None
