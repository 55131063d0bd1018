"""Signing and randomness capabilities used by the builders.

The certificate and CSR builders never call ``cryptography`` or
:mod:`secrets` directly; they receive a :class:`Signer` and a
random-bytes callable, defaulting to :class:`CryptographySigner` and
:func:`default_random_bytes`.  Tests substitute deterministic fakes.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding

from certsmith.ca.base import UnsupportedAlgorithm
from certsmith.core.keys import key_kind
from certsmith.core.types import HashAlgorithm, KeyKind

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import (
        PrivateKeyTypes,
        PublicKeyTypes,
    )

log = logging.getLogger(__name__)

RandomBytes = Callable[[int], bytes]

_HASH_ALGORITHMS: dict[HashAlgorithm, type[hashes.HashAlgorithm]] = {
    HashAlgorithm.MD5: hashes.MD5,
    HashAlgorithm.SHA1: hashes.SHA1,
    HashAlgorithm.SHA224: hashes.SHA224,
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA384: hashes.SHA384,
    HashAlgorithm.SHA512: hashes.SHA512,
}


def hash_algorithm(name: HashAlgorithm | str) -> hashes.HashAlgorithm:
    """Return a ``cryptography`` hash instance for *name*."""
    try:
        return _HASH_ALGORITHMS[HashAlgorithm(name)]()
    except (KeyError, ValueError):
        msg = f"Unknown hash algorithm '{name}'; supported: {[h.value for h in HashAlgorithm]}"
        raise UnsupportedAlgorithm(msg, hash_name=str(name)) from None


class Signer(Protocol):
    """Signature primitive consumed by the builders."""

    def sign(
        self,
        data: bytes,
        hash_name: HashAlgorithm,
        private_key: PrivateKeyTypes,
    ) -> bytes: ...

    def verify(
        self,
        data: bytes,
        hash_name: HashAlgorithm,
        signature: bytes,
        public_key: PublicKeyTypes,
    ) -> bool: ...


class CryptographySigner:
    """PKCS#1 v1.5 (RSA) and ECDSA (EC) signatures via ``cryptography``."""

    def sign(
        self,
        data: bytes,
        hash_name: HashAlgorithm,
        private_key: PrivateKeyTypes,
    ) -> bytes:
        algorithm = hash_algorithm(hash_name)
        kind = key_kind(private_key)
        if kind is KeyKind.RSA:
            return private_key.sign(data, padding.PKCS1v15(), algorithm)  # type: ignore[union-attr]
        return private_key.sign(data, ec.ECDSA(algorithm))  # type: ignore[union-attr]

    def verify(
        self,
        data: bytes,
        hash_name: HashAlgorithm,
        signature: bytes,
        public_key: PublicKeyTypes,
    ) -> bool:
        algorithm = hash_algorithm(hash_name)
        kind = key_kind(public_key)
        try:
            if kind is KeyKind.RSA:
                public_key.verify(signature, data, padding.PKCS1v15(), algorithm)  # type: ignore[union-attr]
            else:
                public_key.verify(signature, data, ec.ECDSA(algorithm))  # type: ignore[union-attr]
        except InvalidSignature:
            log.debug("Signature verification failed (key=%s, hash=%s)", kind, hash_name)
            return False
        return True


def default_random_bytes(size: int) -> bytes:
    """Return *size* bytes from the operating system CSPRNG."""
    return secrets.token_bytes(size)


DEFAULT_SIGNER = CryptographySigner()
