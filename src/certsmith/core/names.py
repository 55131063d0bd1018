"""Distinguished name conversion.

Subjects and issuers may be given as an ``asn1crypto`` Name, a
``cryptography`` Name, or a string.  Strings are either RFC 4514
(``CN=host,O=Example``, most specific attribute first) and parsed by
``cryptography``, or OpenSSL-style slash separated
(``/C=US/O=Example/CN=host``, in encoding order).
"""

from __future__ import annotations

import re

from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.x509.oid import NameOID

# ---------------------------------------------------------------------------
# Slash-form attribute names
# ---------------------------------------------------------------------------

_SLASH_ATTRS = {
    "C": NameOID.COUNTRY_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "L": NameOID.LOCALITY_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "CN": NameOID.COMMON_NAME,
    "DC": NameOID.DOMAIN_COMPONENT,
    "UID": NameOID.USER_ID,
    "SERIALNUMBER": NameOID.SERIAL_NUMBER,
    "EMAILADDRESS": NameOID.EMAIL_ADDRESS,
    "STREET": NameOID.STREET_ADDRESS,
    "TITLE": NameOID.TITLE,
    "GN": NameOID.GIVEN_NAME,
    "SN": NameOID.SURNAME,
}

# Split on '/' not preceded by a backslash
_SLASH_SPLIT_RE = re.compile(r"(?<!\\)/")


def _parse_slash_form(value: str) -> x509.Name:
    attributes = []
    for part in _SLASH_SPLIT_RE.split(value[1:]):
        if not part:
            continue
        key, sep, attr_value = part.partition("=")
        if not sep:
            msg = f"Invalid name component '{part}': expected KEY=VALUE"
            raise ValueError(msg)
        oid = _SLASH_ATTRS.get(key.strip().upper())
        if oid is None:
            msg = f"Unknown name attribute '{key}'; supported: {sorted(_SLASH_ATTRS)}"
            raise ValueError(msg)
        attributes.append(x509.NameAttribute(oid, attr_value.replace("\\/", "/")))
    return x509.Name(attributes)


def parse_name(value: str) -> x509.Name:
    """Parse a distinguished name string into a ``cryptography`` Name."""
    value = value.strip()
    if value.startswith("/"):
        return _parse_slash_form(value)
    return x509.Name.from_rfc4514_string(value)


def to_asn1_name(value: str | x509.Name | asn1_x509.Name) -> asn1_x509.Name:
    """Return *value* as an ``asn1crypto`` Name ready for embedding."""
    if isinstance(value, asn1_x509.Name):
        return value
    if isinstance(value, str):
        value = parse_name(value)
    if isinstance(value, x509.Name):
        return asn1_x509.Name.load(value.public_bytes())
    msg = f"Cannot use {type(value).__name__} as a distinguished name"
    raise TypeError(msg)
