"""Key classification and SubjectPublicKeyInfo conversion.

Keys are ``cryptography`` key objects throughout.  Only RSA and EC keys
are supported; :func:`key_kind` is the single place where a key is
classified, and every caller branches on its :class:`KeyKind` result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from asn1crypto import keys as asn1_keys
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    load_der_public_key,
)

from certsmith.ca.base import UnsupportedKeyType
from certsmith.core.types import KeyKind

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )


def key_kind(key: object) -> KeyKind:
    """Return the :class:`KeyKind` of a public or private key."""
    if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
        return KeyKind.RSA
    if isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        return KeyKind.EC
    msg = f"Unsupported key type '{type(key).__name__}'; only RSA and EC keys are supported"
    raise UnsupportedKeyType(msg)


def derive_public_key(private_key: PrivateKeyTypes) -> PublicKeyTypes:
    """Return the public half of an RSA or EC private key."""
    key_kind(private_key)
    return private_key.public_key()


def public_key_info(public_key: PublicKeyTypes) -> asn1_keys.PublicKeyInfo:
    """Wrap a public key as an ``asn1crypto`` SubjectPublicKeyInfo."""
    key_kind(public_key)
    der = public_key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)
    return asn1_keys.PublicKeyInfo.load(der)


def load_public_key(info: asn1_keys.PublicKeyInfo) -> PublicKeyTypes:
    """Unwrap an ``asn1crypto`` SubjectPublicKeyInfo into a key object."""
    return load_der_public_key(info.dump())
