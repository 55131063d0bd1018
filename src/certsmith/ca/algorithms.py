"""Signature algorithm selection.

Maps a (hash, key kind) pair to the ``AlgorithmIdentifier`` embedded in
certificates and CSRs.  RSA identifiers carry explicit NULL parameters
(RFC 4055); ECDSA identifiers omit the parameters field (RFC 5758).
"""

from __future__ import annotations

from asn1crypto import algos, core

from certsmith.ca.base import UnsupportedAlgorithm
from certsmith.core.keys import key_kind
from certsmith.core.types import HashAlgorithm, KeyKind

# ---------------------------------------------------------------------------
# (hash, key kind) -> asn1crypto signed digest algorithm name
# ---------------------------------------------------------------------------

_SIGNATURE_ALGORITHMS: dict[tuple[HashAlgorithm, KeyKind], str] = {
    (HashAlgorithm.MD5, KeyKind.RSA): "md5_rsa",
    (HashAlgorithm.SHA1, KeyKind.RSA): "sha1_rsa",
    (HashAlgorithm.SHA224, KeyKind.RSA): "sha224_rsa",
    (HashAlgorithm.SHA256, KeyKind.RSA): "sha256_rsa",
    (HashAlgorithm.SHA384, KeyKind.RSA): "sha384_rsa",
    (HashAlgorithm.SHA512, KeyKind.RSA): "sha512_rsa",
    (HashAlgorithm.SHA1, KeyKind.EC): "sha1_ecdsa",
    (HashAlgorithm.SHA224, KeyKind.EC): "sha224_ecdsa",
    (HashAlgorithm.SHA256, KeyKind.EC): "sha256_ecdsa",
    (HashAlgorithm.SHA384, KeyKind.EC): "sha384_ecdsa",
    (HashAlgorithm.SHA512, KeyKind.EC): "sha512_ecdsa",
}

_HASHES_BY_ALGORITHM = {name: pair[0] for pair, name in _SIGNATURE_ALGORITHMS.items()}


def select(hash_name: HashAlgorithm | str, kind: KeyKind | str) -> algos.SignedDigestAlgorithm:
    """Return the signature ``AlgorithmIdentifier`` for *hash_name* and *kind*.

    Raises
    ------
    UnsupportedAlgorithm
        If the hash is unknown or has no mapping for the key kind
        (e.g. ``md5`` with an EC key).

    """
    try:
        hash_alg = HashAlgorithm(hash_name)
        kind = KeyKind(kind)
    except ValueError:
        msg = f"Unsupported hash algorithm '{hash_name}' for {kind} signing"
        raise UnsupportedAlgorithm(msg, hash_name=str(hash_name), key_kind=str(kind)) from None

    name = _SIGNATURE_ALGORITHMS.get((hash_alg, kind))
    if name is None:
        msg = f"Unsupported hash algorithm '{hash_alg}' for {kind.name} signing"
        raise UnsupportedAlgorithm(msg, hash_name=hash_alg.value, key_kind=kind.value)

    if kind is KeyKind.RSA:
        return algos.SignedDigestAlgorithm({"algorithm": name, "parameters": core.Null()})
    return algos.SignedDigestAlgorithm({"algorithm": name})


def select_for_key(hash_name: HashAlgorithm | str, key: object) -> algos.SignedDigestAlgorithm:
    """Like :func:`select`, classifying *key* (public or private) first."""
    return select(hash_name, key_kind(key))


def hash_for(algorithm: algos.SignedDigestAlgorithm) -> HashAlgorithm:
    """Return the digest declared by a signature ``AlgorithmIdentifier``.

    Raises
    ------
    UnsupportedAlgorithm
        If the identifier is not one :func:`select` can produce.

    """
    name = algorithm["algorithm"].native
    hash_alg = _HASHES_BY_ALGORITHM.get(name)
    if hash_alg is None:
        msg = f"Unsupported signature algorithm '{algorithm['algorithm'].dotted}'"
        raise UnsupportedAlgorithm(msg)
    return hash_alg
